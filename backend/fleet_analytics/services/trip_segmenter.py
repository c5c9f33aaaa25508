"""
Trip segmentation.

Hysteresis state machine over packets in ascending time order:

- SEARCHING -> IN_TRIP when speed rises above trip_start_speed_kmh
- IN_TRIP -> SEARCHING after trip_idle_packets consecutive packets at or
  below trip_stop_speed_kmh; any faster packet resets the idle count

Packets with a non-finite speed or an invalid coordinate are skipped
entirely: they neither start, extend nor end a trip.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Sequence

import numpy as np

from fleet_analytics.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from fleet_analytics.models.analytics import Trip, TripStatus
from fleet_analytics.models.packet import CanonicalPacket
from fleet_analytics.utils.geo import haversine_km, is_valid_coordinate

logger = logging.getLogger(__name__)


class SegmenterState(Enum):
    SEARCHING = "searching"
    IN_TRIP = "in_trip"


@dataclass
class _OpenTrip:
    """Trip being accumulated; frozen into a Trip on finalize."""

    start_instant: Optional[datetime]
    start_coord: tuple[float, float]
    max_speed_kmh: float
    distance_km: float = 0.0
    speeds: list[float] = field(default_factory=list)
    last_coord: Optional[tuple[float, float]] = None

    def add(self, speed: float, coord: tuple[float, float]) -> None:
        if self.last_coord is not None:
            self.distance_km += haversine_km(*self.last_coord, *coord)
        self.speeds.append(speed)
        self.last_coord = coord
        if speed > self.max_speed_kmh:
            self.max_speed_kmh = speed

    def finalize(
        self,
        end_instant: Optional[datetime],
        end_coord: tuple[float, float],
        status: TripStatus,
    ) -> Trip:
        return Trip(
            start_instant=self.start_instant,
            end_instant=end_instant,
            start_coord=self.start_coord,
            end_coord=end_coord,
            distance_km=round(self.distance_km, 3),
            duration_min=_duration_minutes(self.start_instant, end_instant),
            avg_speed_kmh=round(float(np.mean(self.speeds)), 1),
            max_speed_kmh=self.max_speed_kmh,
            packet_count=len(self.speeds),
            status=status,
        )


def segment_trips(
    packets: Sequence[CanonicalPacket],
    thresholds: Optional[AnalyticsThresholds] = None,
    *,
    sort_key: Optional[Callable[[CanonicalPacket], Any]] = None,
    include_open: bool = False,
) -> list[Trip]:
    """
    Split a device's packet history into trips.

    Args:
        packets: Canonical packets, oldest first. Results are only meaningful
            for ascending chronological input.
        thresholds: Start/stop speeds and idle run length
        sort_key: When given, a sorted copy (by this key) is segmented
            instead of the input order
        include_open: Emit a trip still in progress at the end of the input,
            tagged TripStatus.OPEN. By default it is dropped.

    Returns:
        Finalized trips in the order they ended
    """
    if not packets:
        return []

    cfg = thresholds or DEFAULT_THRESHOLDS
    ordered = sorted(packets, key=sort_key) if sort_key is not None else packets

    trips: list[Trip] = []
    state = SegmenterState.SEARCHING
    current: Optional[_OpenTrip] = None
    last_packet: Optional[CanonicalPacket] = None
    idle_counter = 0
    skipped = 0

    for packet in ordered:
        speed = packet.speed
        if speed is None or not np.isfinite(speed) or not is_valid_coordinate(
            packet.latitude, packet.longitude, cfg.zero_coordinate_is_missing
        ):
            skipped += 1
            continue

        coord = (packet.latitude, packet.longitude)

        if state is SegmenterState.SEARCHING:
            if speed > cfg.trip_start_speed_kmh:
                current = _OpenTrip(
                    start_instant=packet.sort_instant,
                    start_coord=coord,
                    max_speed_kmh=speed,
                )
                current.add(speed, coord)
                last_packet = packet
                state = SegmenterState.IN_TRIP
                logger.debug(f"Trip started at {packet.sort_instant} ({speed} km/h)")
            continue

        current.add(speed, coord)
        last_packet = packet

        if speed <= cfg.trip_stop_speed_kmh:
            idle_counter += 1
            if idle_counter >= cfg.trip_idle_packets:
                trip = current.finalize(packet.sort_instant, coord, TripStatus.COMPLETED)
                trips.append(trip)
                logger.debug(
                    f"Trip finalized at {packet.sort_instant}: "
                    f"{trip.distance_km} km over {trip.packet_count} packets"
                )
                state = SegmenterState.SEARCHING
                current = None
                idle_counter = 0
        else:
            idle_counter = 0

    if state is SegmenterState.IN_TRIP:
        if include_open:
            trips.append(
                current.finalize(last_packet.sort_instant, current.last_coord, TripStatus.OPEN)
            )
        else:
            logger.debug("Dropping trip still open at end of packet window")

    if skipped:
        logger.debug(f"Skipped {skipped} packets with invalid speed or position")

    return trips


def _duration_minutes(start: Optional[datetime], end: Optional[datetime]) -> Optional[float]:
    if start is None or end is None:
        return None
    return round((end - start).total_seconds() / 60.0, 1)
