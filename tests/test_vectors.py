"""
Unit Tests for the Vector Math Kernel and Atmosphere Helpers
============================================================
Run: python -m pytest tests/ -v
"""

import sys
import os
import math
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dzplanner.vectors import (
    normalize_angle, signed_angle, wind_components, wind_speed, wind_direction,
    offset_position, destination_point, bearing_between, haversine_distance,
    convert_wind, beaufort_number, knots_to_mps, mps_to_knots,
    feet_to_meters, meters_to_feet, METERS_PER_DEGREE,
)
from dzplanner.atmosphere import (
    isa_temperature, isa_density, density_ratio, true_airspeed,
    air_density, dewpoint,
)
from dzplanner.interpolation import LinearProfile, lip, inverse_distance


class TestAngles:

    def test_normalize_negative(self):
        assert normalize_angle(-90) == 270.0

    def test_normalize_full_turns(self):
        assert normalize_angle(720) == 0.0
        assert normalize_angle(361) == pytest.approx(1.0)

    def test_normalize_tiny_negative_is_zero(self):
        """-1e-15 must not round up to 360."""
        assert normalize_angle(-1e-15) == 0.0

    def test_signed_angle_range(self):
        assert signed_angle(270) == -90.0
        assert signed_angle(180) == 180.0
        assert signed_angle(-180) == 180.0


class TestWindVectors:

    def test_west_wind_blows_east(self):
        u, v = wind_components(10.0, 270.0)
        assert u == pytest.approx(10.0)
        assert v == pytest.approx(0.0, abs=1e-12)

    def test_north_wind_blows_south(self):
        u, v = wind_components(10.0, 0.0)
        assert u == pytest.approx(0.0, abs=1e-12)
        assert v == pytest.approx(-10.0)

    @pytest.mark.parametrize("speed,direction", [
        (1.0, 0.0), (5.0, 45.0), (12.5, 179.0), (3.0, 270.0), (20.0, 359.5),
    ])
    def test_round_trip(self, speed, direction):
        u, v = wind_components(speed, direction)
        assert wind_speed(u, v) == pytest.approx(speed)
        recovered = wind_direction(u, v)
        diff = abs(recovered - direction)
        assert min(diff, 360.0 - diff) < 1e-9

    def test_calm_direction_is_zero(self):
        assert wind_direction(0.0, 0.0) == 0.0


class TestPositions:

    def test_offset_one_degree_north(self):
        lat, lng = offset_position(0.0, 0.0, METERS_PER_DEGREE, 0.0)
        assert lat == pytest.approx(1.0)
        assert lng == pytest.approx(0.0, abs=1e-12)

    def test_offset_east_scales_with_latitude(self):
        lat, lng = offset_position(60.0, 10.0, METERS_PER_DEGREE, 90.0)
        assert lat == pytest.approx(60.0, abs=1e-9)
        assert lng == pytest.approx(12.0)

    def test_destination_distance_and_bearing(self):
        lat, lng = destination_point(52.0, 13.0, 10000.0, 45.0)
        assert haversine_distance(52.0, 13.0, lat, lng) == pytest.approx(10000.0, rel=1e-6)
        assert bearing_between(52.0, 13.0, lat, lng) == pytest.approx(45.0, abs=1e-6)

    def test_destination_wraps_dateline(self):
        _, lng = destination_point(0.0, 179.9, 50000.0, 90.0)
        assert -180.0 <= lng < -179.0

    def test_haversine_broadcasts(self):
        lngs = np.array([13.0, 13.01, 13.02])
        dist = haversine_distance(52.0, lngs, 52.0, 13.0)
        assert isinstance(dist, np.ndarray)
        assert dist[0] == 0.0
        assert dist[2] > dist[1] > 0.0

    def test_haversine_scalar_is_float(self):
        assert isinstance(haversine_distance(0.0, 0.0, 1.0, 0.0), float)


class TestConversions:

    def test_knots_round_trip(self):
        assert mps_to_knots(knots_to_mps(20.0)) == pytest.approx(20.0)

    def test_feet_round_trip(self):
        assert meters_to_feet(feet_to_meters(10000.0)) == pytest.approx(10000.0, rel=1e-5)

    def test_convert_kmh(self):
        assert convert_wind(36.0, 'm/s', 'km/h') == pytest.approx(10.0)
        assert convert_wind(10.0, 'kt') == pytest.approx(19.438, rel=1e-4)

    def test_convert_unknown_unit(self):
        with pytest.raises(ValueError):
            convert_wind(10.0, 'furlongs/fortnight')

    def test_beaufort(self):
        assert beaufort_number(0.0) == 0
        assert beaufort_number(5.0) == 3
        assert beaufort_number(40.0) == 12


class TestAtmosphere:

    def test_sea_level_temperature(self):
        assert abs(isa_temperature(0) - 288.15) < 0.01

    def test_sea_level_density(self):
        assert abs(isa_density(0) - 1.225) < 0.01

    def test_density_ratio_decreases(self):
        assert density_ratio(0.0) == pytest.approx(1.0)
        assert density_ratio(3000.0) < density_ratio(1000.0) < 1.0

    def test_tas_equals_ias_at_sea_level(self):
        assert true_airspeed(90.0, 0.0) == pytest.approx(90.0)

    def test_tas_at_ten_thousand_feet(self):
        """σ ≈ 0.74 at 10 000 ft, so TAS is ~16% above IAS."""
        tas = true_airspeed(90.0, 10000.0)
        assert 100.0 < tas < 110.0

    def test_tas_invalid_input(self):
        assert true_airspeed(-1.0, 1000.0) is None
        assert true_airspeed(90.0, float('nan')) is None
        assert true_airspeed(None, 1000.0) is None

    def test_hypsometric_density_at_surface(self):
        assert air_density(1013.25, 0.0, 0.0, 15.0) == pytest.approx(1.225, abs=0.01)

    def test_hypsometric_density_decreases_with_height(self):
        assert air_density(1013.25, 3000.0, 0.0, 0.0) < air_density(1013.25, 0.0, 0.0, 0.0)

    def test_dewpoint_saturated(self):
        """At 100% RH the dewpoint is the temperature, on water and on ice."""
        assert dewpoint(20.0, 100.0) == pytest.approx(20.0)
        assert dewpoint(-10.0, 100.0) == pytest.approx(-10.0)

    def test_dewpoint_below_temperature(self):
        assert dewpoint(20.0, 50.0) < 20.0

    def test_dewpoint_undefined(self):
        assert dewpoint(20.0, 0.0) is None
        assert dewpoint(None, 50.0) is None


class TestInterpolation:

    def test_lip_inside(self):
        assert lip([0, 10], [0, 100], 5) == pytest.approx(50.0)

    def test_lip_extrapolates_with_edge_slope(self):
        assert lip([0, 10, 20], [0, 100, 120], 30) == pytest.approx(140.0)
        assert lip([0, 10, 20], [0, 100, 120], -10) == pytest.approx(-100.0)

    def test_lip_descending_abscissa(self):
        assert lip([10, 0], [100, 0], 2.5) == pytest.approx(25.0)

    def test_linear_profile_array(self):
        result = LinearProfile([0, 10], [0, 1])(np.array([0.0, 5.0]))
        np.testing.assert_allclose(result, [0.0, 0.5])

    def test_linear_profile_rejects_bad_input(self):
        with pytest.raises(ValueError):
            LinearProfile([0, 1], [0])
        with pytest.raises(ValueError):
            LinearProfile([0], [0])

    def test_inverse_distance_weights(self):
        """A point a quarter of the way up gets 3/4 of the lower value's weight."""
        assert inverse_distance(0.0, 10.0, 0.0, 100.0, 25.0) == pytest.approx(2.5)

    def test_inverse_distance_exact_hit(self):
        assert inverse_distance(3.0, 7.0, 0.0, 100.0, 0.0) == 3.0
        assert inverse_distance(3.0, 7.0, 0.0, 100.0, 100.0) == 7.0


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
