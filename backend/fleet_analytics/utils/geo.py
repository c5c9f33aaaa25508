"""
Geospatial helpers.

Great-circle distances on a spherical Earth, and the coordinate validity
rule shared by every analytics service.
"""

import math
from typing import Optional

import numpy as np
from numpy.typing import NDArray

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate great-circle distance between two points.

    Args:
        lat1, lon1: First point coordinates in degrees
        lat2, lon2: Second point coordinates in degrees

    Returns:
        Distance in kilometers
    """
    lat1_rad = np.radians(lat1)
    lat2_rad = np.radians(lat2)
    dlat = np.radians(lat2 - lat1)
    dlon = np.radians(lon2 - lon1)

    a = np.sin(dlat/2)**2 + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(dlon/2)**2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1-a))

    return float(EARTH_RADIUS_KM * c)


def polyline_length_km(lat: NDArray[np.float64], lon: NDArray[np.float64]) -> float:
    """
    Total haversine length of a path through consecutive points.

    Args:
        lat: Latitude array in degrees
        lon: Longitude array in degrees

    Returns:
        Sum of segment lengths in kilometers (0 for fewer than 2 points)
    """
    lat = np.asarray(lat, dtype=np.float64)
    lon = np.asarray(lon, dtype=np.float64)
    if len(lat) < 2:
        return 0.0

    lat_rad = np.radians(lat)
    dlat = np.diff(lat_rad)
    dlon = np.radians(np.diff(lon))

    a = np.sin(dlat/2)**2 + np.cos(lat_rad[:-1]) * np.cos(lat_rad[1:]) * np.sin(dlon/2)**2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1-a))

    return float(np.sum(EARTH_RADIUS_KM * c))


def is_valid_coordinate(
    lat: Optional[float],
    lon: Optional[float],
    zero_is_missing: bool = False,
) -> bool:
    """
    Both latitude and longitude must be finite numbers.

    With zero_is_missing, an exact 0 in either axis also counts as "no fix",
    which is how the dashboard originally treated it.
    """
    if lat is None or lon is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    if zero_is_missing and (lat == 0 or lon == 0):
        return False
    return True
