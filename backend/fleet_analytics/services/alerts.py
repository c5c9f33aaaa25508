"""
Threshold alert evaluation.

One pass over a device's packets producing the boolean flags shown on the
device card. Alert-code conditions match the packet's alert field,
case-folded, against known codes and names.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from fleet_analytics.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from fleet_analytics.models.analytics import AlertFlags
from fleet_analytics.models.packet import CanonicalPacket
from fleet_analytics.services.canonicalizer import latest_normal_packet
from fleet_analytics.utils.timestamps import as_utc

logger = logging.getLogger(__name__)


SOS_CODES = frozenset({"a1002", "sos"})
TAMPER_CODES = frozenset({"a1003", "tampered"})
SIM_CODES = frozenset({"e1011", "no_sim", "no sim"})
DATA_CODES = frozenset({"e1003", "no_data_capability", "no data capability"})
GPS_CODES = frozenset({
    "e1001", "gnss_error", "gnss connectivity",
    "a1004", "gps_disabled", "gps disable",
})


def evaluate_alert_flags(
    packets: Sequence[CanonicalPacket],
    thresholds: Optional[AnalyticsThresholds] = None,
    now: Optional[datetime] = None,
) -> AlertFlags:
    """
    Evaluate every alert condition over the full packet set.

    Args:
        packets: Canonical packets for one device, any order
        thresholds: Speed/temperature/battery/hang limits
        now: Reference time for hang detection (defaults to current UTC)
    """
    cfg = thresholds or DEFAULT_THRESHOLDS
    now = as_utc(now)

    codes = {p.alert_code.casefold() for p in packets if p.alert_code}

    latest = latest_normal_packet(packets)
    low_battery = (
        latest is not None
        and latest.battery is not None
        and latest.battery < cfg.low_battery_pct
    )

    flags = AlertFlags(
        has_overspeed=any(p.speed is not None and p.speed > cfg.overspeed_kmh for p in packets),
        has_high_temp=any(
            p.temperature is not None and p.temperature > cfg.high_temp_c for p in packets
        ),
        has_low_battery=low_battery,
        has_sos=not codes.isdisjoint(SOS_CODES),
        has_tampered=not codes.isdisjoint(TAMPER_CODES),
        has_sim_issue=not codes.isdisjoint(SIM_CODES),
        has_data_issue=not codes.isdisjoint(DATA_CODES),
        has_gps_issue=not codes.isdisjoint(GPS_CODES),
        is_hanged=is_hanged(packets, cfg, now),
    )

    active = flags.active()
    if active:
        logger.debug(f"Active alert flags: {', '.join(active)}")
    return flags


def is_hanged(
    packets: Sequence[CanonicalPacket],
    thresholds: Optional[AnalyticsThresholds] = None,
    now: Optional[datetime] = None,
) -> bool:
    """
    True when the newest packet is older than hang_after_ms.

    Without any resolvable packet instant the result is
    thresholds.missing_timestamp_is_hanged.
    """
    cfg = thresholds or DEFAULT_THRESHOLDS
    now = as_utc(now)

    instants = [p.sort_instant for p in packets if p.sort_instant is not None]
    if not instants:
        return cfg.missing_timestamp_is_hanged

    elapsed_ms = (now - max(instants)).total_seconds() * 1000
    return elapsed_ms > cfg.hang_after_ms
