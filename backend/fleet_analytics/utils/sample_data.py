"""
Sample data generator for testing.

Generates realistic-looking raw device packets (as the device backend
returns them): a parked period, a drive, and a stop, with a slowly
draining battery.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import numpy as np


def generate_drive_packets(
    imei: str = "356938035643809",
    start: Optional[datetime] = None,
    interval_s: float = 60.0,
    idle_before: int = 3,
    drive_packets: int = 20,
    idle_after: int = 4,
    center_lat: float = 12.9716,  # Example: Bengaluru
    center_lon: float = 77.5946,
    cruise_speed_kmh: float = 40.0,
    heading_deg: float = 45.0,
    battery_start_pct: float = 100.0,
    drain_pct_per_hour: float = 6.0,
    seed: Optional[int] = 7,
    newest_first: bool = False,
) -> list[dict]:
    """
    Generate one parked -> driving -> parked sequence of NORMAL packets.

    Speeds during the drive never drop below 6 km/h, so the default
    thresholds see exactly one trip that ends on the third idle packet.
    """
    rng = np.random.default_rng(seed)
    start = start or datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)

    n_samples = idle_before + drive_packets + idle_after
    speed = np.zeros(n_samples)
    drive = slice(idle_before, idle_before + drive_packets)
    speed[drive] = np.clip(
        cruise_speed_kmh + rng.normal(0, cruise_speed_kmh * 0.15, drive_packets),
        6.0,
        None,
    )
    speed = np.round(speed, 1)

    # Distance covered since the previous sample (meters)
    step_m = speed / 3.6 * interval_s
    travelled = np.cumsum(step_m)

    # Convert local meters to GPS coordinates
    # Approximate conversion at this latitude
    meters_per_deg_lat = 111000
    meters_per_deg_lon = 111000 * np.cos(np.radians(center_lat))
    heading_rad = np.radians(heading_deg)

    lat = center_lat + travelled * np.cos(heading_rad) / meters_per_deg_lat
    lon = center_lon + travelled * np.sin(heading_rad) / meters_per_deg_lon

    elapsed_h = np.arange(n_samples) * interval_s / 3600
    battery = np.clip(np.round(battery_start_pct - drain_pct_per_hour * elapsed_h), 0, 100)
    temperature = 30 + rng.normal(0, 1.5, n_samples)

    packets = []
    for i in range(n_samples):
        ts = (start + timedelta(seconds=i * interval_s)).strftime("%Y-%m-%dT%H:%M:%SZ")
        packets.append({
            "imei": imei,
            "packet": "N",
            "latitude": round(float(lat[i]), 6),
            "longitude": round(float(lon[i]), 6),
            "speed": float(speed[i]),
            "battery": f"{int(battery[i])}%",
            "rawTemperature": f"{temperature[i]:.2f} c",
            "signal": 24,
            "deviceRawTimestamp": ts,
            "deviceTimestamp": ts,
            "timestamp": ts,
            "alert": None,
        })

    if newest_first:
        packets.reverse()
    return packets
