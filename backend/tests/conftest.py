"""
Shared fixtures for analytics tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from fleet_analytics.services.canonicalizer import canonicalize_packet


BASE_TIME = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def iso(minutes: float) -> str:
    """ISO timestamp `minutes` after BASE_TIME."""
    return (BASE_TIME + timedelta(minutes=minutes)).strftime("%Y-%m-%dT%H:%M:%SZ")


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def make_record():
    """Factory for raw packet records, one per minute by default."""
    def _make(minute=0, packet="N", **fields):
        ts = iso(minute)
        record = {
            "imei": "356938035643809",
            "packet": packet,
            "latitude": 12.97,
            "longitude": 77.59,
            "speed": 0,
            "deviceRawTimestamp": ts,
            "deviceTimestamp": ts,
        }
        record.update(fields)
        return record
    return _make


@pytest.fixture
def make_packet(make_record):
    """Factory for canonical packets built from raw records."""
    def _make(minute=0, packet="N", **fields):
        return canonicalize_packet(make_record(minute, packet, **fields))
    return _make


@pytest.fixture
def track_from_speeds(make_packet):
    """Packets one minute apart, ~111 m apart northwards, with the given speeds."""
    def _make(speeds, start_lat=12.97, lon=77.59):
        return [
            make_packet(i, latitude=round(start_lat + i * 0.001, 6), longitude=lon, speed=s)
            for i, s in enumerate(speeds)
        ]
    return _make
