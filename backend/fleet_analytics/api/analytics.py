"""
API routes for device analytics.
"""

from typing import Optional

from fastapi import APIRouter, Query

from fleet_analytics.api.schemas import (
    AlertDescriptionResponse,
    AlertFlagsResponse,
    BatteryResponse,
    ConnectionStatusResponse,
    CoordinateResponse,
    DeviceAnalyticsResponse,
    LatestPacketResponse,
    MovementResponse,
    PacketBatchRequest,
    SnapshotResponse,
    StatusLabelResponse,
    TripResponse,
)
from fleet_analytics.config import AnalyticsThresholds
from fleet_analytics.models.analytics import (
    AlertDescription,
    DeviceAnalytics,
    DeviceSnapshot,
    StatusLabel,
    Trip,
)
from fleet_analytics.services.alert_codes import describe_alert_code
from fleet_analytics.services.pipeline import analyze_device


router = APIRouter(prefix="/devices", tags=["analytics"])
codes_router = APIRouter(prefix="/alert-codes", tags=["alert-codes"])

# Read once; restart the server to pick up new FLEET_* values
THRESHOLDS = AnalyticsThresholds.from_env()


def _build_trip(trip: Trip) -> TripResponse:
    return TripResponse(
        start_time=trip.start_instant,
        end_time=trip.end_instant,
        start=CoordinateResponse(lat=trip.start_coord[0], lon=trip.start_coord[1]),
        end=CoordinateResponse(lat=trip.end_coord[0], lon=trip.end_coord[1]),
        distance_km=trip.distance_km,
        duration_min=trip.duration_min,
        avg_speed_kmh=trip.avg_speed_kmh,
        max_speed_kmh=trip.max_speed_kmh,
        packet_count=trip.packet_count,
        status=trip.status.value,
    )


def _build_label(label: StatusLabel) -> StatusLabelResponse:
    return StatusLabelResponse(text=label.text, tag=label.tag.value)


def _build_snapshot(snapshot: DeviceSnapshot) -> SnapshotResponse:
    packet = None
    if snapshot.packet is not None:
        p = snapshot.packet
        packet = LatestPacketResponse(
            latitude=p.latitude,
            longitude=p.longitude,
            speed=p.speed,
            temperature=p.temperature,
            battery=p.battery,
            signal=p.signal,
            timestamp=p.sort_instant,
        )
    return SnapshotResponse(
        packet=packet,
        gps=_build_label(snapshot.gps),
        speed=_build_label(snapshot.speed),
        battery=_build_label(snapshot.battery),
    )


def _build_description(desc: Optional[AlertDescription]) -> Optional[AlertDescriptionResponse]:
    if desc is None:
        return None
    return AlertDescriptionResponse(
        standard_code=desc.standard_code,
        description=desc.description,
        category=desc.category,
    )


def _build_analytics_response(report: DeviceAnalytics) -> DeviceAnalyticsResponse:
    """Build response from a DeviceAnalytics report."""
    return DeviceAnalyticsResponse(
        imei=report.imei,
        packet_count=report.packet_count,
        reference_time=report.reference_time,
        trips=[_build_trip(t) for t in report.trips],
        today_distance_km=report.today_distance_km,
        movement=MovementResponse(
            idle_pct=report.movement.idle_pct,
            moving_pct=report.movement.moving_pct,
        ),
        battery=BatteryResponse(
            runtime_hours=report.battery_runtime_hours,
            drain_time=report.battery_drain_time,
        ),
        alerts=AlertFlagsResponse(**vars(report.alerts)),
        snapshot=_build_snapshot(report.snapshot),
        connection=ConnectionStatusResponse(
            status=report.connection.status,
            is_recent=report.connection.is_recent,
            last_seen=report.connection.last_seen,
        ),
        latest_alert=_build_description(report.latest_alert),
        latest_error=_build_description(report.latest_error),
    )


@router.post("/{imei}/analytics", response_model=DeviceAnalyticsResponse)
async def device_analytics(imei: str, request: PacketBatchRequest):
    """
    Compute trips, distance, movement, battery, alerts and statuses
    for one device from a packet snapshot.

    An empty packet list is valid and returns the empty-case values.
    """
    report = analyze_device(
        request.packets,
        imei=imei,
        thresholds=THRESHOLDS,
        now=request.reference_time,
        include_open_trips=request.include_open_trips,
    )
    return _build_analytics_response(report)


@codes_router.get("/{code}", response_model=AlertDescriptionResponse)
async def alert_code_description(
    code: str,
    packet_type: str = Query("E", description="Packet type: A (alert) or E (error)"),
):
    """Describe an alert or error code."""
    return _build_description(describe_alert_code(code, packet_type))
