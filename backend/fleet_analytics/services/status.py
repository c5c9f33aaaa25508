"""
Device status labels.

Discrete GPS/Speed/Battery labels for the latest NORMAL packet, and the
Online/Offline state derived from the newest packet of any type.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from fleet_analytics.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from fleet_analytics.models.analytics import (
    ConnectionStatus,
    DeviceSnapshot,
    StatusLabel,
    StatusTag,
)
from fleet_analytics.models.packet import CanonicalPacket
from fleet_analytics.services.canonicalizer import latest_normal_packet
from fleet_analytics.utils.geo import is_valid_coordinate
from fleet_analytics.utils.timestamps import as_utc


def gps_status(
    packet: Optional[CanonicalPacket],
    thresholds: Optional[AnalyticsThresholds] = None,
) -> StatusLabel:
    cfg = thresholds or DEFAULT_THRESHOLDS
    if packet is None or not is_valid_coordinate(
        packet.latitude, packet.longitude, cfg.zero_coordinate_is_missing
    ):
        return StatusLabel("No GPS", StatusTag.DANGER)
    if packet.speed is None:
        return StatusLabel("Unknown", StatusTag.NEUTRAL)
    if packet.speed == 0:
        return StatusLabel("Idle", StatusTag.WARNING)
    return StatusLabel("Moving", StatusTag.OK)


def speed_status(
    packet: Optional[CanonicalPacket],
    thresholds: Optional[AnalyticsThresholds] = None,
) -> StatusLabel:
    cfg = thresholds or DEFAULT_THRESHOLDS
    if packet is None or packet.speed is None:
        return StatusLabel("-", StatusTag.NEUTRAL)
    if packet.speed == 0:
        return StatusLabel("Idle", StatusTag.WARNING)
    if packet.speed > cfg.overspeed_kmh:
        return StatusLabel("Overspeed", StatusTag.DANGER)
    return StatusLabel("Normal", StatusTag.OK)


def battery_status(
    packet: Optional[CanonicalPacket],
    thresholds: Optional[AnalyticsThresholds] = None,
) -> StatusLabel:
    cfg = thresholds or DEFAULT_THRESHOLDS
    if packet is None or packet.battery is None:
        return StatusLabel("-", StatusTag.NEUTRAL)
    if packet.battery >= cfg.good_battery_pct:
        return StatusLabel("Good", StatusTag.OK)
    if packet.battery >= cfg.low_battery_pct:
        return StatusLabel("Medium", StatusTag.WARNING)
    return StatusLabel("Low", StatusTag.DANGER)


def device_snapshot(
    packets: Sequence[CanonicalPacket],
    thresholds: Optional[AnalyticsThresholds] = None,
) -> DeviceSnapshot:
    """Status labels for the most recent NORMAL packet (all "missing" labels if none)."""
    latest = latest_normal_packet(packets)
    return DeviceSnapshot(
        packet=latest,
        gps=gps_status(latest, thresholds),
        speed=speed_status(latest, thresholds),
        battery=battery_status(latest, thresholds),
    )


def connection_status(
    packets: Sequence[CanonicalPacket],
    thresholds: Optional[AnalyticsThresholds] = None,
    now: Optional[datetime] = None,
) -> ConnectionStatus:
    """
    Online when the newest packet is within online_window_min of now.

    is_recent uses the absolute difference, so a device clock slightly
    ahead of ours still counts as recent.
    """
    cfg = thresholds or DEFAULT_THRESHOLDS
    now = as_utc(now)

    instants = [p.sort_instant for p in packets if p.sort_instant is not None]
    if not instants:
        return ConnectionStatus(status="Offline", is_recent=False, last_seen=None)

    last_seen = max(instants)
    diff_min = (now - last_seen).total_seconds() / 60

    return ConnectionStatus(
        status="Online" if diff_min <= cfg.online_window_min else "Offline",
        is_recent=abs(diff_min) <= cfg.recent_window_min,
        last_seen=last_seen,
    )
