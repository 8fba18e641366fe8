"""
Unit Tests for the Freefall Simulator and Wind Triangle
=======================================================
Run: python -m pytest tests/ -v
"""

import sys
import os
import math
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dzplanner.integrator import simulate_freefall
from dzplanner.jumper import (
    CANOPY_OPENING_BUFFER, FreefallConditions, Jumper, aircraft_exit_velocity,
    compute_acceleration,
)
from dzplanner.navigation import (
    course_from_heading, flight_parameters, headwind_crosswind, wind_angle,
    wind_correction_angle,
)
from dzplanner.profile import build_profile
from dzplanner.vectors import KNOTS_TO_MPS

GROUND = 500.0


@pytest.fixture
def calm_profile(calm_sample):
    return build_profile(calm_sample, GROUND)


@pytest.fixture
def uniform_profile(uniform_sample):
    return build_profile(uniform_sample, GROUND)


class TestJumper:

    def test_default_body(self):
        jumper = Jumper()
        assert jumper.mass == 80.0
        assert jumper.cd_vertical == jumper.cd_horizontal == 1.0
        assert jumper.area_vertical == jumper.area_horizontal == 0.5

    def test_terminal_velocity(self):
        """sqrt(g / (½·Cd·A·ρ/m)) ≈ 50.6 m/s at sea-level density."""
        assert Jumper().terminal_velocity(1.225) == pytest.approx(50.6, abs=0.1)

    def test_gravity_only_at_rest(self):
        acc = compute_acceleration(np.zeros(3), np.zeros(2), 1.2, Jumper())
        np.testing.assert_allclose(acc, [0.0, 0.0, -9.81])

    def test_horizontal_drag_opposes_air_motion(self):
        """Standing still in a north wind pushes the jumper south."""
        acc = compute_acceleration(np.zeros(3), np.array([-10.0, 0.0]), 1.2, Jumper())
        assert acc[0] < 0.0
        assert acc[1] == 0.0

    def test_no_horizontal_drag_when_moving_with_air(self):
        acc = compute_acceleration(np.array([3.0, 4.0, -20.0]), np.array([3.0, 4.0]),
                                   1.2, Jumper())
        assert acc[0] == 0.0 and acc[1] == 0.0
        assert acc[2] > -9.81

    def test_exit_velocity(self):
        v = aircraft_exit_velocity(10.0, 90.0)
        assert v[0] == pytest.approx(0.0, abs=1e-12)
        assert v[1] == pytest.approx(10.0)

    def test_exit_velocity_with_wind(self):
        """wind_uv is (east, north); the result is (north, east)."""
        v = aircraft_exit_velocity(10.0, 0.0, (2.0, 3.0))
        assert v[0] == pytest.approx(13.0)
        assert v[1] == pytest.approx(2.0)

    def test_stop_height(self):
        conditions = FreefallConditions(3000.0, 1200.0, GROUND)
        assert conditions.start_height == 3500.0
        assert conditions.stop_height == GROUND + 1200.0 - CANOPY_OPENING_BUFFER


class TestFreefall:

    def test_ends_exactly_at_stop_height(self, uniform_profile):
        traj = simulate_freefall(uniform_profile, 3000.0, 1200.0, (20.0, 0.0), GROUND)
        assert traj.final_height == GROUND + 1200.0 - CANOPY_OPENING_BUFFER

    def test_monotonic_descent(self, uniform_profile):
        traj = simulate_freefall(uniform_profile, 3000.0, 1200.0, (0.0, 0.0), GROUND)
        assert np.all(np.diff(traj.height) <= 0)
        assert traj.height[-1] < traj.height[1] < traj.height[0] + 1e-9
        assert np.all(np.diff(traj.time) > 0)

    def test_fractional_last_step(self, calm_profile):
        traj = simulate_freefall(calm_profile, 3000.0, 1200.0, (0.0, 0.0), GROUND)
        last_step = traj.time[-1] - traj.time[-2]
        assert 0.0 < last_step <= traj.dt

    def test_plausible_freefall_time(self, calm_profile):
        """2000 m of freefall takes well under a minute."""
        traj = simulate_freefall(calm_profile, 3000.0, 1200.0, (0.0, 0.0), GROUND)
        assert 30.0 < traj.elapsed_time < 60.0
        assert -65.0 < traj.points[-1].vertical_velocity < -40.0

    def test_no_wind_no_drift(self, calm_profile):
        traj = simulate_freefall(calm_profile, 3000.0, 1200.0, (0.0, 0.0), GROUND)
        assert traj.distance == pytest.approx(0.0, abs=1e-9)
        assert traj.direction == 0.0

    def test_west_wind_drifts_east(self, uniform_profile):
        traj = simulate_freefall(uniform_profile, 3000.0, 1200.0, (0.0, 0.0), GROUND)
        north, east = traj.displacement
        assert east > 0.0
        assert abs(north) < 1e-6 * east
        assert traj.direction == pytest.approx(90.0, abs=1e-3)
        # starts at rest, so it never outruns the air
        assert traj.distance < 10.0 * KNOTS_TO_MPS * traj.elapsed_time

    def test_throw_decays(self, calm_profile):
        traj = simulate_freefall(calm_profile, 3000.0, 1200.0, (50.0, 0.0), GROUND)
        assert 0.0 < traj.points[-1].ground_vx < 50.0
        assert traj.direction == pytest.approx(0.0, abs=1e-6)

    def test_empty_profile(self):
        assert simulate_freefall([], 3000.0, 1200.0, (0.0, 0.0), GROUND) is None

    def test_non_finite_input(self, calm_profile):
        assert simulate_freefall(calm_profile, float('nan'), 1200.0, (0.0, 0.0), GROUND) is None
        assert simulate_freefall(calm_profile, 3000.0, 1200.0, (float('inf'), 0.0), GROUND) is None

    def test_exit_below_stop_height(self, calm_profile):
        assert simulate_freefall(calm_profile, 900.0, 1200.0, (0.0, 0.0), GROUND) is None

    def test_gives_up_after_max_time(self, calm_profile):
        assert simulate_freefall(calm_profile, 3000.0, 1200.0, (0.0, 0.0), GROUND,
                                 max_time=5.0) is None

    def test_path_positions(self, uniform_profile):
        traj = simulate_freefall(uniform_profile, 3000.0, 1200.0, (0.0, 0.0), GROUND)
        path = traj.path_positions(47.0, 8.0)
        assert len(path) == len(traj.points)
        assert path[0] == (47.0, 8.0)
        assert path[-1][1] > 8.0

    def test_summary(self, calm_profile):
        traj = simulate_freefall(calm_profile, 3000.0, 1200.0, (0.0, 0.0), GROUND)
        assert 'FREEFALL SUMMARY' in traj.summary()


class TestWindTriangle:

    def test_wind_angle_range(self):
        assert wind_angle(350.0, 10.0) == pytest.approx(20.0)
        assert wind_angle(10.0, 350.0) == pytest.approx(-20.0)

    def test_components(self):
        cross, head = headwind_crosswind(10.0, 90.0)
        assert cross == pytest.approx(10.0)
        assert head == pytest.approx(0.0, abs=1e-12)

    def test_headwind(self):
        fp = flight_parameters(0.0, 0.0, 5.0, 10.0)
        assert fp.headwind == pytest.approx(5.0)
        assert fp.ground_speed == pytest.approx(5.0)
        assert fp.heading == pytest.approx(0.0)

    def test_tailwind(self):
        fp = flight_parameters(0.0, 180.0, 5.0, 10.0)
        assert fp.ground_speed == pytest.approx(15.0)

    def test_crosswind_from_right(self):
        fp = flight_parameters(0.0, 90.0, 5.0, 10.0)
        assert fp.wind_correction_angle == pytest.approx(30.0)
        assert fp.heading == pytest.approx(30.0)
        assert fp.ground_speed == pytest.approx(math.sqrt(75.0))

    def test_crosswind_from_left(self):
        fp = flight_parameters(0.0, 270.0, 5.0, 10.0)
        assert fp.heading == pytest.approx(330.0)

    def test_overpowering_wind(self):
        """WCA falls back to 0 and only the headwind is left."""
        fp = flight_parameters(0.0, 45.0, 20.0, 10.0)
        assert fp.wind_correction_angle == 0.0
        assert fp.ground_speed == pytest.approx(-20.0 * math.cos(math.radians(45.0)))

    def test_wca_undefined(self):
        assert wind_correction_angle(5.0, 0.0) == 0.0
        assert wind_correction_angle(15.0, 10.0) == 0.0

    def test_course_from_heading(self):
        course, gs = course_from_heading(90.0, 0.0, 10.0, 10.0)
        assert course == pytest.approx(135.0)
        assert gs == pytest.approx(math.sqrt(200.0))

    def test_course_from_heading_tailwind(self):
        course, gs = course_from_heading(0.0, 180.0, 5.0, 10.0)
        assert min(course, 360.0 - course) < 1e-9
        assert gs == pytest.approx(15.0)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
