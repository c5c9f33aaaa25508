"""
Device analytics pipeline.

Runs every analytics service over one raw packet snapshot. Each call is
independent: the snapshot is canonicalized once, ordered once per direction,
and every time-dependent service sees the same reference time.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from fleet_analytics.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from fleet_analytics.models.analytics import AlertDescription, DeviceAnalytics
from fleet_analytics.models.packet import CanonicalPacket, PacketType
from fleet_analytics.models.raw import RawPacketRecord
from fleet_analytics.services.alert_codes import describe_alert_code
from fleet_analytics.services.alerts import evaluate_alert_flags
from fleet_analytics.services.battery import battery_drain_time, battery_runtime_hours
from fleet_analytics.services.canonicalizer import (
    canonicalize_packets,
    sort_chronological,
    sort_newest_first,
)
from fleet_analytics.services.daily_distance import compute_today_distance
from fleet_analytics.services.movement import movement_breakdown
from fleet_analytics.services.status import connection_status, device_snapshot
from fleet_analytics.services.trip_segmenter import segment_trips
from fleet_analytics.utils.timestamps import as_utc

logger = logging.getLogger(__name__)


def analyze_device(
    records: Optional[Iterable[RawPacketRecord]],
    imei: Optional[str] = None,
    thresholds: Optional[AnalyticsThresholds] = None,
    now: Optional[datetime] = None,
    include_open_trips: bool = False,
) -> DeviceAnalytics:
    """
    Compute the full analytics report for one device.

    Args:
        records: Raw packet records as returned by the device backend
        imei: Device identifier, used when records do not carry one
        thresholds: Threshold set (defaults to DEFAULT_THRESHOLDS)
        now: Reference time for "today", hang and online checks
        include_open_trips: Also report a trip still in progress

    Returns:
        DeviceAnalytics with empty-case sentinels for an empty snapshot
    """
    cfg = thresholds or DEFAULT_THRESHOLDS
    now = as_utc(now)

    packets = canonicalize_packets(records, imei)
    chronological = sort_chronological(packets)
    newest_first = sort_newest_first(packets)

    report = DeviceAnalytics(
        imei=imei or next((p.imei for p in packets if p.imei), None),
        packet_count=len(packets),
        reference_time=now,
        trips=segment_trips(chronological, cfg, include_open=include_open_trips),
        today_distance_km=compute_today_distance(chronological, now, cfg),
        movement=movement_breakdown(packets, cfg),
        battery_runtime_hours=battery_runtime_hours(newest_first),
        battery_drain_time=battery_drain_time(newest_first),
        alerts=evaluate_alert_flags(packets, cfg, now),
        snapshot=device_snapshot(packets, cfg),
        connection=connection_status(packets, cfg, now),
        latest_alert=_latest_description(newest_first, PacketType.ALERT),
        latest_error=_latest_description(newest_first, PacketType.ERROR),
    )

    logger.info(
        f"Analyzed {report.packet_count} packets for {report.imei or 'unknown device'}: "
        f"{len(report.trips)} trips, {report.today_distance_km} km today, "
        f"alerts={report.alerts.active() or 'none'}"
    )
    return report


def _latest_description(
    newest_first: list[CanonicalPacket],
    packet_type: PacketType,
) -> Optional[AlertDescription]:
    for p in newest_first:
        if p.packet_type is packet_type and p.alert_code:
            return describe_alert_code(p.alert_code, packet_type)
    return None
