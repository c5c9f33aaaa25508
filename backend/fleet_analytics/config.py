"""
Analytics thresholds.

Every speed/temperature/battery limit used by the analytics services lives
here, so alternative threshold sets can be injected in tests or overridden
per deployment via FLEET_* environment variables.
"""

import os
from dataclasses import dataclass, fields
from typing import Optional


ENV_PREFIX = "FLEET_"

_TRUE_VALUES = ("1", "true", "True", "yes")
_FALSE_VALUES = ("0", "false", "False", "no")


@dataclass(frozen=True)
class AnalyticsThresholds:
    """Named thresholds shared by the analytics services."""

    # Trip segmentation (km/h, packets)
    trip_start_speed_kmh: float = 5.0
    trip_stop_speed_kmh: float = 2.0
    trip_idle_packets: int = 3

    # Movement split (km/h)
    idle_speed_kmh: float = 2.0

    # Alerts / statuses
    overspeed_kmh: float = 70.0
    high_temp_c: float = 50.0
    low_battery_pct: float = 20.0
    good_battery_pct: float = 60.0
    hang_after_ms: int = 3_600_000
    missing_timestamp_is_hanged: bool = True

    # Connection status (minutes)
    online_window_min: float = 10.0
    recent_window_min: float = 5.0

    # The dashboard treated lat/lon == 0 as "no fix"; off by default.
    zero_coordinate_is_missing: bool = False

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "AnalyticsThresholds":
        """
        Build thresholds from FLEET_<FIELD> environment variables.

        Unset variables keep their defaults. Unparseable values raise
        ValueError naming the offending variable.
        """
        env = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            key = ENV_PREFIX + f.name.upper()
            raw = env.get(key)
            if raw is None or raw == "":
                continue
            overrides[f.name] = _parse_env_value(key, raw, f.default)
        return cls(**overrides)

    def as_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _parse_env_value(key: str, raw: str, default):
    if isinstance(default, bool):
        if raw in _TRUE_VALUES:
            return True
        if raw in _FALSE_VALUES:
            return False
        raise ValueError(f"{key} must be a boolean, got {raw!r}")
    try:
        if isinstance(default, int):
            return int(raw)
        return float(raw)
    except ValueError:
        raise ValueError(f"{key} must be numeric, got {raw!r}") from None


DEFAULT_THRESHOLDS = AnalyticsThresholds()
