"""
Battery runtime and drain estimates.

Both estimates work on packets ordered newest first and return display
strings. Missing data degrades to the "-" sentinel; nothing is raised.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from fleet_analytics.models.packet import CanonicalPacket
from fleet_analytics.models.raw import BATTERY_TIMESTAMP_FIELDS
from fleet_analytics.services.canonicalizer import normal_packets
from fleet_analytics.utils.numeric import round_half_up
from fleet_analytics.utils.timestamps import resolve_instant

logger = logging.getLogger(__name__)

MISSING = "-"
NO_FULL_CHARGE = "No 100% record"
FULL_CHARGE_PCT = 100.0


def battery_runtime_hours(packets: Sequence[CanonicalPacket]) -> str:
    """
    Hours the device has been running since its most recent full charge.

    Args:
        packets: Canonical packets, newest first

    Returns:
        Hours with one decimal ("3.5"), or "-" when there is no 100% reading
        or the elapsed time cannot be computed
    """
    if not packets:
        return MISSING

    full = _first_full_charge(packets)
    if full is None:
        return MISSING

    elapsed_s = _elapsed_seconds(full, packets[0])
    if elapsed_s is None:
        return MISSING

    return f"{elapsed_s / 3600:.1f}"


def battery_drain_time(packets: Sequence[CanonicalPacket]) -> str:
    """
    Time taken to drain from the last 100% reading to the current level.

    Only NORMAL packets count.

    Args:
        packets: Canonical packets, newest first

    Returns:
        "1.5h" when an hour or more has elapsed, "40m" below that,
        "No 100% record" when the device never reported a full charge,
        "-" for every other missing-data case
    """
    normals = normal_packets(packets)
    if not normals:
        return MISSING

    full = _first_full_charge(normals)
    if full is None:
        return NO_FULL_CHARGE

    current = normals[0]
    if current.battery is None or current.battery == FULL_CHARGE_PCT:
        return MISSING

    elapsed_s = _elapsed_seconds(full, current)
    if elapsed_s is None:
        return MISSING

    hours = elapsed_s / 3600
    if hours >= 1:
        return f"{hours:.1f}h"
    return f"{round_half_up(elapsed_s / 60)}m"


def _first_full_charge(packets: Sequence[CanonicalPacket]) -> Optional[CanonicalPacket]:
    for p in packets:
        if p.battery == FULL_CHARGE_PCT:
            return p
    return None


def _battery_instant(packet: CanonicalPacket) -> Optional[datetime]:
    return resolve_instant(packet.source, BATTERY_TIMESTAMP_FIELDS)


def _elapsed_seconds(since: CanonicalPacket, until: CanonicalPacket) -> Optional[float]:
    start = _battery_instant(since)
    end = _battery_instant(until)
    if start is None or end is None:
        logger.debug("Battery estimate skipped: unresolved timestamp")
        return None

    elapsed = (end - start).total_seconds()
    if elapsed < 0:
        return None
    return elapsed
