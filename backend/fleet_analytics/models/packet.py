"""
Canonical packet model.

Every raw record is normalized into this structure once, with:
- a classified packet type
- typed numeric fields (None when missing or unparseable)
- resolved device/server instants (timezone-aware UTC)
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class PacketType(Enum):
    """Packet class carried in raw data."""

    NORMAL = "N"
    ALERT = "A"
    ERROR = "E"
    UNKNOWN = "UNKNOWN"


_EMPTY_SOURCE: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class CanonicalPacket:
    """
    Normalized telemetry packet for one device.

    sort_instant is server_instant when known, else device_instant, else None.
    Packets without any instant sort last and are skipped by time-based
    computations.
    """

    imei: Optional[str]
    packet_type: PacketType
    alert_code: Optional[str] = None

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    speed: Optional[float] = None         # km/h
    temperature: Optional[float] = None   # deg C
    battery: Optional[float] = None       # percent
    signal: Optional[float] = None

    device_instant: Optional[datetime] = None
    server_instant: Optional[datetime] = None
    sort_instant: Optional[datetime] = None

    # Raw day-identifying timestamp text, as sent by the device
    device_timestamp_text: Optional[str] = None

    # Read-only view of the source record
    source: Mapping[str, Any] = field(default_factory=lambda: _EMPTY_SOURCE, repr=False, compare=False)

    @property
    def is_normal(self) -> bool:
        return self.packet_type is PacketType.NORMAL

    @property
    def coordinate(self) -> tuple[Optional[float], Optional[float]]:
        return (self.latitude, self.longitude)
