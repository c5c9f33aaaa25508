"""
Idle/moving split of a device's packets.
"""

from typing import Optional, Sequence

import numpy as np

from fleet_analytics.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from fleet_analytics.models.analytics import MovementBreakdown
from fleet_analytics.models.packet import CanonicalPacket
from fleet_analytics.utils.numeric import round_half_up


def movement_breakdown(
    packets: Sequence[CanonicalPacket],
    thresholds: Optional[AnalyticsThresholds] = None,
) -> MovementBreakdown:
    """
    Percentage of packets idle (speed <= idle_speed_kmh) vs moving.

    Packets without a speed are ignored. Each share is rounded on its own,
    so the two may sum to 99 or 101.
    """
    cfg = thresholds or DEFAULT_THRESHOLDS
    speeds = np.array([p.speed for p in packets if p.speed is not None], dtype=np.float64)
    speeds = speeds[np.isfinite(speeds)]

    total = len(speeds)
    if total == 0:
        return MovementBreakdown(0, 0)

    idle = int(np.count_nonzero(speeds <= cfg.idle_speed_kmh))
    moving = total - idle

    return MovementBreakdown(
        idle_pct=round_half_up(idle / total * 100),
        moving_pct=round_half_up(moving / total * 100),
    )
