"""
Derived analytics models.

None of these are persisted: they are rebuilt from a packet snapshot on
every call and carry no identity across calls.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from fleet_analytics.models.packet import CanonicalPacket


class TripStatus(Enum):
    """Whether a trip met its stop condition before the packet window ended."""

    COMPLETED = "completed"
    OPEN = "open"


@dataclass(frozen=True)
class Trip:
    """A finalized trip."""

    start_instant: Optional[datetime]
    end_instant: Optional[datetime]
    start_coord: tuple[float, float]
    end_coord: tuple[float, float]
    distance_km: float
    duration_min: Optional[float]
    avg_speed_kmh: float
    max_speed_kmh: float
    packet_count: int
    status: TripStatus = TripStatus.COMPLETED


@dataclass(frozen=True)
class MovementBreakdown:
    """Idle vs moving share of packets, in whole percent."""

    idle_pct: int = 0
    moving_pct: int = 0


@dataclass(frozen=True)
class AlertFlags:
    """Threshold and alert-code conditions over a device's packet set."""

    has_overspeed: bool = False
    has_high_temp: bool = False
    has_low_battery: bool = False
    has_sos: bool = False
    has_tampered: bool = False
    has_sim_issue: bool = False
    has_data_issue: bool = False
    has_gps_issue: bool = False
    is_hanged: bool = False

    def active(self) -> list[str]:
        """Names of the flags that are set."""
        return [name for name, value in vars(self).items() if value]


class StatusTag(Enum):
    """Display severity of a status label. Rendering is up to the caller."""

    OK = "ok"
    WARNING = "warning"
    DANGER = "danger"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class StatusLabel:
    text: str
    tag: StatusTag


@dataclass(frozen=True)
class DeviceSnapshot:
    """Status labels for the most recent NORMAL packet."""

    packet: Optional[CanonicalPacket]
    gps: StatusLabel
    speed: StatusLabel
    battery: StatusLabel


@dataclass(frozen=True)
class AlertDescription:
    standard_code: str
    description: str
    category: str  # "alert" or "error"


@dataclass(frozen=True)
class ConnectionStatus:
    status: str  # "Online" or "Offline"
    is_recent: bool
    last_seen: Optional[datetime]


@dataclass(frozen=True)
class DeviceAnalytics:
    """Everything the device detail view needs, computed from one snapshot."""

    imei: Optional[str]
    packet_count: int
    reference_time: datetime
    trips: list[Trip] = field(default_factory=list)
    today_distance_km: float = 0.0
    movement: MovementBreakdown = field(default_factory=MovementBreakdown)
    battery_runtime_hours: str = "-"
    battery_drain_time: str = "-"
    alerts: AlertFlags = field(default_factory=AlertFlags)
    snapshot: Optional[DeviceSnapshot] = None
    connection: Optional[ConnectionStatus] = None
    latest_alert: Optional[AlertDescription] = None
    latest_error: Optional[AlertDescription] = None
