"""
Canonicalizer for raw device packets.

Normalizes packet type, timestamps and numeric fields into CanonicalPacket,
and provides the orderings the analytics services expect.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence

from fleet_analytics.models.packet import CanonicalPacket, PacketType
from fleet_analytics.models.raw import (
    DAY_TIMESTAMP_FIELD,
    DEVICE_TIMESTAMP_FIELDS,
    PACKET_TYPE_FIELDS,
    SERVER_TIMESTAMP_FIELDS,
    TEMPERATURE_FIELDS,
    RawPacketRecord,
)
from fleet_analytics.utils.numeric import coerce_number, extract_numeric
from fleet_analytics.utils.timestamps import resolve_instant, timestamp_text

logger = logging.getLogger(__name__)


PACKET_TYPE_ALIASES = {
    "N": PacketType.NORMAL,
    "NORMAL": PacketType.NORMAL,
    "PACKET_N": PacketType.NORMAL,
    "A": PacketType.ALERT,
    "ALERT": PacketType.ALERT,
    "PACKET_A": PacketType.ALERT,
    "E": PacketType.ERROR,
    "ERROR": PacketType.ERROR,
    "PACKET_E": PacketType.ERROR,
}

# Placeholder strings the backend stores instead of an empty alert
_EMPTY_ALERT_VALUES = ("", "null", "undefined")


def canonicalize_packets(
    records: Optional[Iterable[RawPacketRecord]],
    imei: Optional[str] = None,
) -> list[CanonicalPacket]:
    """
    Convert raw packet records into canonical packets.

    The output keeps the length and order of the input. Records that are not
    mappings become UNKNOWN packets with no fields set.
    """
    if not records:
        return []

    packets = [canonicalize_packet(record, imei) for record in records]
    logger.debug(f"Canonicalized {len(packets)} packets for {imei or 'unknown device'}")
    return packets


def canonicalize_packet(record: RawPacketRecord, imei: Optional[str] = None) -> CanonicalPacket:
    """Convert a single raw record into a CanonicalPacket."""
    if not isinstance(record, Mapping):
        return CanonicalPacket(imei=imei, packet_type=PacketType.UNKNOWN)

    device_instant = resolve_instant(record, DEVICE_TIMESTAMP_FIELDS)
    server_instant = resolve_instant(record, SERVER_TIMESTAMP_FIELDS)

    return CanonicalPacket(
        imei=_normalize_imei(record.get("imei")) or imei,
        packet_type=_normalize_packet_type(record),
        alert_code=_normalize_alert(record.get("alert")),
        latitude=coerce_number(record.get("latitude")),
        longitude=coerce_number(record.get("longitude")),
        speed=coerce_number(record.get("speed")),
        temperature=extract_numeric(_first_present(record, TEMPERATURE_FIELDS)),
        battery=extract_numeric(record.get("battery")),
        signal=coerce_number(record.get("signal")),
        device_instant=device_instant,
        server_instant=server_instant,
        sort_instant=server_instant or device_instant,
        device_timestamp_text=timestamp_text(record.get(DAY_TIMESTAMP_FIELD)),
        source=MappingProxyType(dict(record)),
    )


def sort_chronological(packets: Sequence[CanonicalPacket]) -> list[CanonicalPacket]:
    """Oldest first; packets without an instant go last, in input order."""
    timed = [p for p in packets if p.sort_instant is not None]
    untimed = [p for p in packets if p.sort_instant is None]
    return sorted(timed, key=lambda p: p.sort_instant) + untimed


def sort_newest_first(packets: Sequence[CanonicalPacket]) -> list[CanonicalPacket]:
    """Newest first; packets without an instant go last, in input order."""
    timed = [p for p in packets if p.sort_instant is not None]
    untimed = [p for p in packets if p.sort_instant is None]
    return sorted(timed, key=lambda p: p.sort_instant, reverse=True) + untimed


def normal_packets(packets: Iterable[CanonicalPacket]) -> list[CanonicalPacket]:
    return [p for p in packets if p.is_normal]


def latest_normal_packet(packets: Sequence[CanonicalPacket]) -> Optional[CanonicalPacket]:
    """Most recent NORMAL packet by sort_instant (first in input order if none is timed)."""
    normals = normal_packets(packets)
    if not normals:
        return None
    return sort_newest_first(normals)[0]


def _normalize_packet_type(record: RawPacketRecord) -> PacketType:
    raw_type = _first_present(record, PACKET_TYPE_FIELDS)
    if raw_type is None:
        return PacketType.UNKNOWN
    return PACKET_TYPE_ALIASES.get(str(raw_type).strip().upper(), PacketType.UNKNOWN)


def _normalize_alert(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    if text.lower() in _EMPTY_ALERT_VALUES:
        return None
    return text


def _normalize_imei(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _first_present(record: RawPacketRecord, names: Iterable[str]) -> Any:
    for name in names:
        value = record.get(name)
        if value is not None:
            return value
    return None
