"""
Raw packet model (source-format, unnormalized).

Packets arrive as JSON-compatible mappings from the device backend. Field
names vary between firmware versions and storage paths, so the candidate
names for each logical field are listed here and resolved by the
canonicalizer.
"""

from typing import Any, Mapping

RawPacketRecord = Mapping[str, Any]

# Packet class: "N" / "A" / "E" (or PACKET_N, NORMAL, ...)
PACKET_TYPE_FIELDS = ("packet", "type", "packetType")

# Clock of the device itself
DEVICE_TIMESTAMP_FIELDS = ("deviceRawTimestamp", "deviceTimestamp")

# Time the backend received/stored the record (DB order)
SERVER_TIMESTAMP_FIELDS = ("device_timestamp", "deviceTimestamp", "timestamp")

# Fallback chain used for battery elapsed-time calculations
BATTERY_TIMESTAMP_FIELDS = ("deviceTimestamp", "deviceRawTimestamp")

# Field whose text prefix identifies the packet's calendar day
DAY_TIMESTAMP_FIELD = "deviceRawTimestamp"

TEMPERATURE_FIELDS = ("rawTemperature", "temperature")
