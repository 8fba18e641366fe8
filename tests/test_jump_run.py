"""
Unit Tests for the Jump Run Planner
===================================
Run: python -m pytest tests/ -v
"""

import sys
import os
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dzplanner.atmosphere import true_airspeed
from dzplanner.jump_run import (
    APPROACH_TIME, DEFAULT_SEPARATION, MAX_TRACK_LENGTH, MIN_TRACK_LENGTH,
    plan_jump_run, separation_from_tas,
)
from dzplanner.profile import build_profile
from dzplanner.vectors import KNOTS_TO_MPS, METERS_PER_DEGREE, meters_to_feet, offset_position

GROUND = 500.0
LAT, LNG = 47.0, 8.0


@pytest.fixture
def uniform_profile(uniform_sample):
    return build_profile(uniform_sample, GROUND)


class TestSeparation:

    def test_exact_entry(self):
        assert separation_from_tas(90.0) == 7.0
        assert separation_from_tas(100.0) == 6.0

    def test_rounds_up_to_next_entry(self):
        assert separation_from_tas(92.0) == 7.0
        assert separation_from_tas(101.0) == 5.0
        assert separation_from_tas(3.0) == 119.0

    def test_faster_than_table(self):
        assert separation_from_tas(200.0) == 5.0

    def test_invalid_tas(self):
        assert separation_from_tas(None) == DEFAULT_SEPARATION
        assert separation_from_tas(-5.0) == DEFAULT_SEPARATION
        assert separation_from_tas(float('nan')) == DEFAULT_SEPARATION


class TestJumpRun:

    def test_direction_into_mean_wind(self, uniform_profile):
        track = plan_jump_run(LAT, LNG, uniform_profile)
        assert track.direction == 270.0
        assert track.mean_wind.direction == pytest.approx(270.0)

    def test_true_airspeed_at_exit(self, uniform_profile):
        track = plan_jump_run(LAT, LNG, uniform_profile, aircraft_ias=90.0)
        assert track.true_airspeed == pytest.approx(
            true_airspeed(90.0, meters_to_feet(GROUND + 3000.0)))
        assert track.true_airspeed > 90.0

    def test_ground_speed_into_headwind(self, uniform_profile):
        track = plan_jump_run(LAT, LNG, uniform_profile)
        expected = (track.true_airspeed - 10.0) * KNOTS_TO_MPS
        assert track.ground_speed == pytest.approx(expected, rel=1e-6)

    def test_track_and_approach_length(self, uniform_profile):
        track = plan_jump_run(LAT, LNG, uniform_profile, number_of_jumpers=5)
        assert track.separation == separation_from_tas(track.true_airspeed)
        assert track.track_length == round(5 * track.separation * track.ground_speed)
        assert track.approach_length == round(track.ground_speed * APPROACH_TIME)

    def test_explicit_separation(self, uniform_profile):
        track = plan_jump_run(LAT, LNG, uniform_profile, number_of_jumpers=2,
                              separation_sec=10.0)
        assert track.separation == 10.0
        assert track.track_length == round(2 * 10.0 * track.ground_speed)

    def test_track_length_clamped(self, uniform_profile):
        long = plan_jump_run(LAT, LNG, uniform_profile, number_of_jumpers=1000)
        short = plan_jump_run(LAT, LNG, uniform_profile, number_of_jumpers=1,
                              separation_sec=0.1)
        assert long.track_length == MAX_TRACK_LENGTH
        assert short.track_length == MIN_TRACK_LENGTH

    def test_custom_direction(self, uniform_profile):
        track = plan_jump_run(LAT, LNG, uniform_profile, direction=0.0)
        assert track.direction == 0.0
        assert track.end[0] == pytest.approx(LAT + track.track_length / METERS_PER_DEGREE)
        assert track.approach_start[0] < LAT

    def test_out_of_range_direction_ignored(self, uniform_profile):
        track = plan_jump_run(LAT, LNG, uniform_profile, direction=400.0)
        assert track.direction == 270.0

    def test_forward_offset(self, uniform_profile):
        track = plan_jump_run(LAT, LNG, uniform_profile, direction=0.0,
                              offsets=(1000.0, 0.0))
        assert track.start[0] == pytest.approx(LAT + 1000.0 / METERS_PER_DEGREE)
        assert track.start[1] == pytest.approx(LNG)

    def test_lateral_offset_to_the_right(self, uniform_profile):
        track = plan_jump_run(LAT, LNG, uniform_profile, direction=0.0,
                              offsets=(0.0, 1000.0))
        assert track.start[0] == pytest.approx(LAT)
        assert track.start[1] > LNG

    def test_forward_then_lateral(self, uniform_profile):
        track = plan_jump_run(LAT, LNG, uniform_profile, direction=45.0,
                              offsets=(1000.0, 500.0))
        forward = offset_position(LAT, LNG, 1000.0, 45.0)
        expected = offset_position(*forward, 500.0, 135.0)
        assert track.start == pytest.approx(expected)

    def test_latlngs(self, uniform_profile):
        track = plan_jump_run(LAT, LNG, uniform_profile)
        assert track.latlngs == [track.start, track.end]
        assert track.approach_latlngs == [track.start, track.approach_start]

    def test_short_profile(self, uniform_profile):
        assert plan_jump_run(LAT, LNG, uniform_profile[:1]) is None


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
