"""
Alert and error code mapping.

Devices report alerts (A100X) and errors (E100X/E101X) either by code or by
a short name. Both map to one standard code and description.
"""

from typing import Optional, Union

from fleet_analytics.models.analytics import AlertDescription
from fleet_analytics.models.packet import PacketType

ALERT_CODES = {
    "A1001": ("Device is charging", ("charging",)),
    "A1002": ("SOS button pressed for 5 seconds", ("sos",)),
    "A1003": ("Device has been tampered", ("tampered",)),
    "A1004": ("Device GPS is disabled", ("gps_disabled", "gps disable")),
    "A1005": ("Charger removed from device", ("charger_removed", "charger removed")),
}

ERROR_CODES = {
    "E1001": ("GNSS connectivity issue or invalid packet", ("gnss_error", "gnss connectivity")),
    "E1002": ("Device failed to register network", ("network_registration", "network registration")),
    "E1003": ("Device failed to establish data connection", ("no_data_capability", "no data capability")),
    "E1004": (
        "Device is under poor network strength",
        ("poor_network", "poor network", "poor network strength"),
    ),
    "E1005": ("Device failed to initialize MQTT connection", ("mqtt_connection", "mqtt connection")),
    "E1006": ("Device failed to initialize FTP connection", ("ftp_connection", "ftp connection")),
    "E1011": ("Device has no SIM card", ("no_sim", "no sim")),
    "E1012": ("Issue in microphone connection", ("microphone_connection", "microphone connection")),
    "E1013": (
        "Flash memory malfunction",
        ("flash_memory", "flash memory", "flash memory malfunction"),
    ),
}


def _build_lookup(table: dict) -> dict[str, tuple[str, str]]:
    lookup = {}
    for code, (description, aliases) in table.items():
        for key in (code.lower(), *aliases):
            lookup[key] = (code, description)
    return lookup


_ALERT_LOOKUP = _build_lookup(ALERT_CODES)
_ERROR_LOOKUP = _build_lookup(ERROR_CODES)


def describe_alert_code(
    code: Optional[str],
    packet_type: Union[PacketType, str, None],
) -> AlertDescription:
    """
    Map an alert/error code or name to its standard code and description.

    ALERT packets are looked up in the alert table, everything else in the
    error table. Unknown codes keep their upper-cased text.
    """
    is_alert = packet_type is PacketType.ALERT or (
        isinstance(packet_type, str) and packet_type.strip().upper() in ("A", "ALERT", "PACKET_A")
    )
    category = "alert" if is_alert else "error"

    normalized = str(code).strip().lower() if code is not None else ""
    if not normalized:
        return AlertDescription("UNKNOWN", f"Unknown {category}", category)

    lookup = _ALERT_LOOKUP if is_alert else _ERROR_LOOKUP
    if normalized in lookup:
        standard_code, description = lookup[normalized]
        return AlertDescription(standard_code, description, category)

    return AlertDescription(str(code).strip().upper(), f"Unknown {category}", category)
