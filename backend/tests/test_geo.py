"""
Tests for geospatial helpers.
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from fleet_analytics.utils.geo import haversine_km, is_valid_coordinate, polyline_length_km


class TestHaversine:
    """Tests for great-circle distance."""

    @pytest.mark.parametrize("lat,lon", [(12.97, 77.59), (-33.86, 151.2), (0.0, 0.0), (89.9, -179.9)])
    def test_identity(self, lat, lon):
        """Distance from a point to itself is zero."""
        assert haversine_km(lat, lon, lat, lon) == pytest.approx(0.0, abs=1e-9)

    def test_symmetry(self):
        d1 = haversine_km(12.97, 77.59, 13.08, 80.27)
        d2 = haversine_km(13.08, 80.27, 12.97, 77.59)
        assert_allclose(d1, d2)

    def test_one_degree_latitude(self):
        """One degree of latitude is ~111.19 km on a 6371 km sphere."""
        assert_allclose(haversine_km(10.0, 20.0, 11.0, 20.0), 111.195, rtol=1e-4)

    def test_returns_python_float(self):
        assert isinstance(haversine_km(1.0, 1.0, 2.0, 2.0), float)


class TestPolylineLength:
    """Tests for vectorized path length."""

    def test_matches_segment_sum(self):
        lat = np.array([12.97, 12.98, 12.985, 12.99])
        lon = np.array([77.59, 77.60, 77.61, 77.60])

        expected = sum(
            haversine_km(lat[i], lon[i], lat[i + 1], lon[i + 1]) for i in range(len(lat) - 1)
        )
        assert_allclose(polyline_length_km(lat, lon), expected, rtol=1e-9)

    def test_fewer_than_two_points(self):
        assert polyline_length_km(np.array([]), np.array([])) == 0.0
        assert polyline_length_km(np.array([12.0]), np.array([77.0])) == 0.0

    def test_accepts_lists(self):
        assert_allclose(polyline_length_km([10.0, 11.0], [20.0, 20.0]), 111.195, rtol=1e-4)


class TestCoordinateValidity:
    """Tests for the shared validity rule."""

    def test_finite_pair_is_valid(self):
        assert is_valid_coordinate(12.97, 77.59)

    @pytest.mark.parametrize("lat,lon", [(None, 77.0), (12.0, None), (math.nan, 77.0), (12.0, math.inf)])
    def test_missing_or_non_finite(self, lat, lon):
        assert not is_valid_coordinate(lat, lon)

    def test_zero_is_valid_by_default(self):
        assert is_valid_coordinate(0.0, 0.0)

    def test_zero_as_missing(self):
        assert not is_valid_coordinate(0.0, 77.0, zero_is_missing=True)
        assert not is_valid_coordinate(12.0, 0.0, zero_is_missing=True)
        assert is_valid_coordinate(12.0, 77.0, zero_is_missing=True)
