"""
API schemas (Pydantic models) for request/response validation.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field


# ============================================================================
# Request Schemas
# ============================================================================

class PacketBatchRequest(BaseModel):
    """Packet snapshot for one device, as fetched from the device backend."""
    packets: list[dict[str, Any]] = Field(default_factory=list)
    reference_time: Optional[datetime] = Field(
        default=None,
        description="Reference 'now' for today/hang/online checks (defaults to server time)",
    )
    include_open_trips: bool = False


# ============================================================================
# Analytics Schemas
# ============================================================================

class CoordinateResponse(BaseModel):
    lat: float
    lon: float


class TripResponse(BaseModel):
    """A detected trip."""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    start: CoordinateResponse
    end: CoordinateResponse
    distance_km: float
    duration_min: Optional[float] = None
    avg_speed_kmh: float
    max_speed_kmh: float
    packet_count: int
    status: str


class MovementResponse(BaseModel):
    idle_pct: int
    moving_pct: int


class AlertFlagsResponse(BaseModel):
    """Alert condition flags."""
    has_overspeed: bool
    has_high_temp: bool
    has_low_battery: bool
    has_sos: bool
    has_tampered: bool
    has_sim_issue: bool
    has_data_issue: bool
    has_gps_issue: bool
    is_hanged: bool


class StatusLabelResponse(BaseModel):
    text: str
    tag: str


class LatestPacketResponse(BaseModel):
    """Fields of the latest NORMAL packet shown next to the status labels."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    speed: Optional[float] = None
    temperature: Optional[float] = None
    battery: Optional[float] = None
    signal: Optional[float] = None
    timestamp: Optional[datetime] = None


class SnapshotResponse(BaseModel):
    packet: Optional[LatestPacketResponse] = None
    gps: StatusLabelResponse
    speed: StatusLabelResponse
    battery: StatusLabelResponse


class ConnectionStatusResponse(BaseModel):
    status: str
    is_recent: bool
    last_seen: Optional[datetime] = None


class AlertDescriptionResponse(BaseModel):
    """Standardized alert/error code."""
    standard_code: str
    description: str
    category: str


class BatteryResponse(BaseModel):
    runtime_hours: str
    drain_time: str


class DeviceAnalyticsResponse(BaseModel):
    """Full analytics report for one device."""
    imei: Optional[str] = None
    packet_count: int
    reference_time: datetime
    trips: list[TripResponse]
    today_distance_km: float
    movement: MovementResponse
    battery: BatteryResponse
    alerts: AlertFlagsResponse
    snapshot: SnapshotResponse
    connection: ConnectionStatusResponse
    latest_alert: Optional[AlertDescriptionResponse] = None
    latest_error: Optional[AlertDescriptionResponse] = None
