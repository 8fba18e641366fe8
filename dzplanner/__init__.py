"""
Drop Zone Jump Planner
======================
Numeric core of a skydiving jump planner. From the hourly output of one
or more weather models it computes:
  - Uniform-step vertical wind/temperature profiles
  - Layer-mean winds over arbitrary height bands
  - Freefall drift with density-dependent quadratic drag
  - Canopy landing patterns, canopy and exit circles, cutaway areas
  - Jump-run ground tracks
  - Multi-model ensemble fusion and exit-area agreement maps

All functions are pure: inputs in, new immutable results out.
"""

from .vectors import (
    wind_components, wind_speed, wind_direction, normalize_angle,
    offset_position, destination_point, bearing_between, haversine_distance,
)
from .atmosphere import true_airspeed, air_density, dewpoint
from .settings import JumpSettings, LegHeights, PlanningContext
from .exceptions import PlannerError, ConfigurationError, InvalidRangeError
from .profile import SoundingLevel, SoundingSample, ProfileLevel, build_profile
from .mean_wind import HeightBand, MeanWind, mean_wind, profile_mean_wind
from .jumper import Jumper, aircraft_exit_velocity
from .integrator import TrajectoryPoint, FreefallTrajectory, simulate_freefall
from .landing import LandingLeg, LandingPattern, plan_landing_pattern
from .canopy import canopy_circles, exit_circles, cutaway_area
from .jump_run import JumpRunTrack, plan_jump_run, separation_from_tas
from .planner import JumpPlan, plan_jump
from .ensemble import (
    aggregate_series, aggregate_ensemble, model_exit_areas,
    overlap_heatmap, agreement_contours,
)

__version__ = "1.0.0"
__all__ = [
    'wind_components', 'wind_speed', 'wind_direction', 'normalize_angle',
    'offset_position', 'destination_point', 'bearing_between',
    'haversine_distance',
    'true_airspeed', 'air_density', 'dewpoint',
    'JumpSettings', 'LegHeights', 'PlanningContext',
    'PlannerError', 'ConfigurationError', 'InvalidRangeError',
    'SoundingLevel', 'SoundingSample', 'ProfileLevel', 'build_profile',
    'HeightBand', 'MeanWind', 'mean_wind', 'profile_mean_wind',
    'Jumper', 'aircraft_exit_velocity',
    'TrajectoryPoint', 'FreefallTrajectory', 'simulate_freefall',
    'LandingLeg', 'LandingPattern', 'plan_landing_pattern',
    'canopy_circles', 'exit_circles', 'cutaway_area',
    'JumpRunTrack', 'plan_jump_run', 'separation_from_tas',
    'JumpPlan', 'plan_jump',
    'aggregate_series', 'aggregate_ensemble', 'model_exit_areas',
    'overlap_heatmap', 'agreement_contours',
]
