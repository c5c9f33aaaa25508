"""
Distance traveled on one calendar day.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional, Sequence, Union

import numpy as np

from fleet_analytics.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from fleet_analytics.models.packet import CanonicalPacket
from fleet_analytics.utils.geo import is_valid_coordinate, polyline_length_km

logger = logging.getLogger(__name__)

ReferenceDay = Union[date, datetime, str, None]


def compute_today_distance(
    packets: Sequence[CanonicalPacket],
    reference: ReferenceDay = None,
    thresholds: Optional[AnalyticsThresholds] = None,
) -> float:
    """
    Sum the distance covered on the reference day.

    Packets are matched by the date prefix of their raw device timestamp,
    deduplicated by that timestamp, and consecutive repeats of the same
    position are collapsed before summing haversine segments.

    Args:
        packets: Canonical packets in the order they should be joined
        reference: Day to measure (date, datetime or "YYYY-MM-DD");
            defaults to the current UTC date
        thresholds: Coordinate validity settings

    Returns:
        Kilometers rounded to 2 decimals; 0.0 with fewer than 2 usable points
    """
    cfg = thresholds or DEFAULT_THRESHOLDS
    day_prefix = _day_prefix(reference)

    day_packets = [
        p for p in packets
        if p.device_timestamp_text is not None and p.device_timestamp_text.startswith(day_prefix)
    ]
    if len(day_packets) < 2:
        return 0.0

    seen: set[str] = set()
    lat: list[float] = []
    lon: list[float] = []
    for p in day_packets:
        if p.device_timestamp_text in seen:
            continue
        seen.add(p.device_timestamp_text)

        if not is_valid_coordinate(p.latitude, p.longitude, cfg.zero_coordinate_is_missing):
            continue
        if lat and lat[-1] == p.latitude and lon[-1] == p.longitude:
            continue
        lat.append(p.latitude)
        lon.append(p.longitude)

    if len(lat) < 2:
        return 0.0

    distance = polyline_length_km(np.array(lat), np.array(lon))
    logger.debug(f"{day_prefix}: {len(lat)} unique points, {distance:.3f} km")
    return round(distance, 2)


def _day_prefix(reference: ReferenceDay) -> str:
    if reference is None:
        return datetime.now(timezone.utc).date().isoformat()
    if isinstance(reference, datetime):
        if reference.tzinfo is not None:
            reference = reference.astimezone(timezone.utc)
        return reference.date().isoformat()
    if isinstance(reference, date):
        return reference.isoformat()
    return str(reference)[:10]
