"""
Tests for trip segmentation.
"""

from datetime import timedelta

import pytest
from numpy.testing import assert_allclose

from fleet_analytics.config import AnalyticsThresholds
from fleet_analytics.models.analytics import TripStatus
from fleet_analytics.services.trip_segmenter import segment_trips
from fleet_analytics.utils.geo import haversine_km


class TestBasicSegmentation:
    """Tests for the start/stop hysteresis."""

    def test_single_trip(self, track_from_speeds, base_time):
        """Start above 5 km/h, stop after three packets at or below 2 km/h."""
        packets = track_from_speeds([3, 6, 10, 8, 1, 1, 1, 0])

        trips = segment_trips(packets)

        assert len(trips) == 1
        trip = trips[0]
        assert trip.status is TripStatus.COMPLETED
        assert trip.start_instant == base_time + timedelta(minutes=1)
        assert trip.end_instant == base_time + timedelta(minutes=6)
        assert trip.start_coord == (packets[1].latitude, packets[1].longitude)
        assert trip.end_coord == (packets[6].latitude, packets[6].longitude)
        assert trip.packet_count == 6
        assert trip.duration_min == 5.0
        assert trip.max_speed_kmh == 10
        assert trip.avg_speed_kmh == 4.5

    def test_distance_sums_consecutive_segments(self, track_from_speeds):
        packets = track_from_speeds([6, 10, 8, 1, 1, 1])

        trip = segment_trips(packets)[0]

        expected = sum(
            haversine_km(packets[i].latitude, packets[i].longitude,
                         packets[i + 1].latitude, packets[i + 1].longitude)
            for i in range(5)
        )
        assert_allclose(trip.distance_km, round(expected, 3))
        assert_allclose(trip.distance_km, 0.556, atol=1e-3)

    def test_start_threshold_is_strict(self, track_from_speeds):
        """Exactly 5 km/h does not start a trip."""
        assert segment_trips(track_from_speeds([5, 5, 5, 1, 1, 1])) == []

    def test_two_trips(self, track_from_speeds):
        packets = track_from_speeds([10, 1, 1, 1, 0, 20, 30, 2, 2, 2])

        trips = segment_trips(packets)

        assert len(trips) == 2
        assert [t.packet_count for t in trips] == [4, 5]
        assert trips[1].max_speed_kmh == 30

    def test_empty_input(self):
        assert segment_trips([]) == []


class TestIdleCounter:
    """Tests for the consecutive idle run."""

    def test_faster_packet_resets_counter(self, track_from_speeds, base_time):
        """Two idle packets, a 5 km/h packet, then three idle packets."""
        packets = track_from_speeds([6, 1, 1, 5, 1, 1, 1])

        trips = segment_trips(packets)

        assert len(trips) == 1
        assert trips[0].end_instant == base_time + timedelta(minutes=6)
        assert trips[0].packet_count == 7

    def test_custom_idle_run(self, track_from_speeds):
        thresholds = AnalyticsThresholds(trip_idle_packets=1)
        trips = segment_trips(track_from_speeds([6, 1, 7, 1]), thresholds)
        assert len(trips) == 2


class TestOpenTrips:
    """Tests for trips still in progress at the end of the input."""

    def test_open_trip_dropped_by_default(self, track_from_speeds):
        assert segment_trips(track_from_speeds([6, 10, 1, 1])) == []

    def test_open_trip_emitted_on_request(self, track_from_speeds, base_time):
        packets = track_from_speeds([6, 10, 1, 1])

        trips = segment_trips(packets, include_open=True)

        assert len(trips) == 1
        assert trips[0].status is TripStatus.OPEN
        assert trips[0].end_instant == base_time + timedelta(minutes=3)
        assert trips[0].end_coord == (packets[3].latitude, packets[3].longitude)


class TestInvalidPackets:
    """Tests for packets with missing speed or position."""

    def test_missing_position_does_not_count_as_idle(self, make_packet, track_from_speeds):
        packets = track_from_speeds([6, 1, 1])
        packets.insert(2, make_packet(10, latitude=None, speed=0))

        assert segment_trips(packets) == []

    def test_missing_speed_skipped(self, make_packet, track_from_speeds):
        packets = track_from_speeds([6, 1, 1, 1])
        packets.insert(1, make_packet(10, speed=None))

        trips = segment_trips(packets)

        assert len(trips) == 1
        assert trips[0].packet_count == 4

    def test_zero_coordinate(self, make_packet):
        packets = [make_packet(i, latitude=0.0, longitude=0.0, speed=s) for i, s in enumerate([6, 1, 1, 1])]

        assert len(segment_trips(packets)) == 1
        strict = AnalyticsThresholds(zero_coordinate_is_missing=True)
        assert segment_trips(packets, strict) == []

    def test_missing_instant_gives_no_duration(self, track_from_speeds, make_packet):
        packets = track_from_speeds([1, 1, 1, 1])
        packets[0] = make_packet(0, speed=6, deviceRawTimestamp=None, deviceTimestamp=None)

        trips = segment_trips(packets)

        assert len(trips) == 1
        assert trips[0].start_instant is None
        assert trips[0].duration_min is None


class TestTripInstants:

    def test_server_time_preferred_over_device_clock(self, make_packet, base_time):
        """Start/end come from the server receive time when the device clock disagrees."""
        packets = [
            make_packet(
                i,
                latitude=round(12.97 + i * 0.001, 6),
                speed=s,
                deviceTimestamp=(base_time + timedelta(minutes=i + 60)).strftime("%Y-%m-%dT%H:%M:%SZ"),
            )
            for i, s in enumerate([6, 1, 1, 1])
        ]

        trip = segment_trips(packets)[0]

        assert packets[0].device_instant == base_time
        assert trip.start_instant == base_time + timedelta(minutes=60)
        assert trip.end_instant == base_time + timedelta(minutes=63)
        assert trip.duration_min == 3.0

    def test_device_time_when_no_server_time(self, make_packet, base_time):
        packets = [
            make_packet(i, latitude=round(12.97 + i * 0.001, 6), speed=s, deviceTimestamp=None)
            for i, s in enumerate([6, 1, 1, 1])
        ]

        trip = segment_trips(packets)[0]

        assert trip.start_instant == base_time
        assert trip.end_instant == base_time + timedelta(minutes=3)


class TestSortKey:

    def test_sort_key_orders_input(self, track_from_speeds):
        packets = track_from_speeds([3, 6, 10, 8, 1, 1, 1, 0])

        forward = segment_trips(packets)
        reordered = segment_trips(list(reversed(packets)), sort_key=lambda p: p.sort_instant)

        assert reordered == forward

    def test_unsorted_input_is_not_reordered(self, track_from_speeds):
        packets = track_from_speeds([3, 6, 10, 8, 1, 1, 1, 0])
        assert segment_trips(list(reversed(packets))) != segment_trips(packets)


@pytest.mark.parametrize("speeds", [[0, 0, 0], [1, 2, 1, 2], [5.0, 4.9]])
def test_never_moving(track_from_speeds, speeds):
    assert segment_trips(track_from_speeds(speeds), include_open=True) == []
