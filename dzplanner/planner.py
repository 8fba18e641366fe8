"""
Jump Planning Pipeline
======================
Runs the full chain for one sounding and one planning context:

    build_profile → jump run → freefall → landing pattern
                  → canopy circles → exit circles

Every stage takes its inputs explicitly; a stage that cannot be computed
leaves its field None and the dependent stages are skipped.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .canopy import CanopyCircles, ExitCircles, canopy_circles, exit_circles
from .integrator import FreefallTrajectory, simulate_freefall
from .jump_run import JumpRunTrack, plan_jump_run
from .jumper import aircraft_exit_velocity
from .landing import LandingPattern, plan_landing_pattern
from .profile import ProfileLevel, SoundingSample, build_profile, wind_at_height
from .settings import PlanningContext
from .vectors import KNOTS_TO_MPS, knots_to_mps

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JumpPlan:
    context: PlanningContext
    profile: Tuple[ProfileLevel, ...]
    jump_run: Optional[JumpRunTrack]
    freefall: Optional[FreefallTrajectory]
    pattern: Optional[LandingPattern]
    canopy: Optional[CanopyCircles]
    exit: Optional[ExitCircles]

    @property
    def complete(self) -> bool:
        return None not in (self.jump_run, self.freefall, self.pattern,
                            self.canopy, self.exit)


def plan_jump(context: PlanningContext, sample: SoundingSample) -> Optional[JumpPlan]:
    """
    Plan a jump at the context's drop zone from one sounding.

    Returns None when no profile can be built (unknown elevation or too
    few levels).
    """
    if not context.has_elevation:
        logger.warning("Drop zone elevation unknown, nothing to plan")
        return None

    settings = context.settings
    profile = build_profile(sample, context.elevation, settings.height_reference,
                            settings.interpolation_step, settings.height_unit)
    if not profile:
        logger.warning("No profile for %s, nothing to plan", sample.source or "sounding")
        return None

    elevation = context.elevation
    canopy_speed = knots_to_mps(settings.canopy_speed_kt)

    jump_run = plan_jump_run(
        context.lat, context.lng, profile,
        elevation=elevation,
        exit_altitude=settings.exit_altitude,
        opening_altitude=settings.opening_altitude,
        aircraft_ias=settings.aircraft_ias_kt,
        number_of_jumpers=settings.number_of_jumpers,
        separation_sec=settings.separation_sec,
        offsets=(settings.jump_run_forward_offset, settings.jump_run_lateral_offset),
        direction=settings.jump_run_direction,
    )

    if jump_run is not None:
        exit_wind = wind_at_height(profile, elevation + settings.exit_altitude)
        v0 = aircraft_exit_velocity(jump_run.true_airspeed * KNOTS_TO_MPS,
                                    jump_run.direction, exit_wind)
    else:
        v0 = (0.0, 0.0)
    freefall = simulate_freefall(profile, settings.exit_altitude,
                                 settings.opening_altitude, v0, elevation)

    pattern = plan_landing_pattern(
        context.lat, context.lng, profile,
        leg_heights=settings.leg_heights,
        landing_direction=settings.landing_direction,
        canopy_speed=canopy_speed,
        descent_rate=settings.descent_rate,
        left_hand=settings.left_hand,
    )

    canopy = None
    if pattern is not None:
        canopy = canopy_circles(context.lat, context.lng, profile, pattern,
                                settings.opening_altitude, canopy_speed,
                                settings.descent_rate, settings.safety_height)

    exits = None
    if canopy is not None and freefall is not None:
        exits = exit_circles(canopy, freefall)

    return JumpPlan(
        context=context,
        profile=tuple(profile),
        jump_run=jump_run,
        freefall=freefall,
        pattern=pattern,
        canopy=canopy,
        exit=exits,
    )
