"""
Canopy & Exit Areas
===================
Where a jumper can open and still make the pattern, and where to exit to
get there.

Canopy circles (reachable opening area):
  - full circle   : opening point → landing point, flown over
                    [ground + safety, opening − 200 m]
  - tight circle  : opening point → downwind entry, flown over
                    [ground + downwind leg, opening − 200 m]
  radius = flight time · canopy airspeed, centre drifted upwind by the
  band's mean wind over the same flight time.

Exit circles: the canopy circles shifted back against the freefall drift.

Cutaway area: where a released main canopy lands, drifting with the mean
wind below the cutaway altitude at the canopy state's sink rate.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .integrator import FreefallTrajectory
from .jumper import CANOPY_OPENING_BUFFER
from .landing import LandingPattern
from .mean_wind import profile_mean_wind
from .profile import ProfileLevel
from .vectors import KNOTS_TO_MPS, normalize_angle, offset_position

logger = logging.getLogger(__name__)


# ── Cutaway ───────────────────────────────────────────────────────────────
CUTAWAY_VERTICAL_SPEEDS = {       # m/s sink rate of the released main
    'open': 4.1,
    'partially': 12.8,
    'collapsed': 39.2,
}
CUTAWAY_RADIUS = 150.0            # m

# ── Canopy rings ──────────────────────────────────────────────────────────
RING_MIN_SPAN = 200.0             # m  lowest ring above the downwind entry
RING_STEP_SHORT = 200.0           # m  used when the span is <= 1000 m
RING_STEP_LONG = 500.0


@dataclass(frozen=True)
class CanopyRing:
    """Reachable area when opening at ``upper_limit`` m AGL."""
    upper_limit: float
    radius: float
    displacement: float
    direction: float
    center: Tuple[float, float]


@dataclass(frozen=True)
class CanopyCircles:
    center: Tuple[float, float]
    radius: float
    displacement: float
    direction: float
    center_full: Tuple[float, float]
    radius_full: float
    displacement_full: float
    direction_full: float
    rings: Tuple[CanopyRing, ...] = ()


@dataclass(frozen=True)
class ExitCircles:
    center: Tuple[float, float]
    radius: float
    center_full: Tuple[float, float]
    radius_full: float
    freefall_distance: float
    freefall_direction: float
    freefall_time: float


@dataclass(frozen=True)
class CutawayArea:
    center: Tuple[float, float]
    radius: float
    displacement: float
    direction: float
    descent_time: float
    vertical_speed: float


def canopy_circles(lat: float, lng: float, profile: Sequence[ProfileLevel],
                   pattern: LandingPattern, opening_altitude: float,
                   canopy_speed: float = 20.0 * KNOTS_TO_MPS,
                   descent_rate: float = 3.5,
                   safety_height: float = 0.0) -> Optional[CanopyCircles]:
    """
    Canopy circles for a landing point and its pattern.

    Parameters
    ----------
    lat, lng : landing point
    profile : built vertical profile; index 0 is the ground
    pattern : landing pattern, for the downwind entry point and height
    opening_altitude : m AGL
    canopy_speed : m/s
    descent_rate : m/s
    safety_height : m, shrinks every radius by the distance flown
        descending through it

    Returns
    -------
    CanopyCircles, or None when the bands are empty
    """
    if len(profile) < 2 or descent_rate <= 0:
        logger.warning("Canopy circles need a profile and a positive descent rate")
        return None

    elevation = profile[0].height
    downwind_height = pattern.downwind.band.upper - elevation
    canopy_top = elevation + opening_altitude - CANOPY_OPENING_BUFFER

    fly_time = (opening_altitude - CANOPY_OPENING_BUFFER - downwind_height) / descent_rate
    fly_time_full = (opening_altitude - CANOPY_OPENING_BUFFER) / descent_rate
    reduction = safety_height / descent_rate * canopy_speed

    wind = profile_mean_wind(profile, elevation + downwind_height, canopy_top)
    wind_full = profile_mean_wind(profile, elevation + safety_height, canopy_top)
    if wind is None or wind_full is None:
        return None

    displacement = wind.speed * fly_time
    displacement_full = wind_full.speed * fly_time_full
    downwind_start = pattern.downwind_start

    return CanopyCircles(
        center=offset_position(*downwind_start, displacement, wind.direction),
        radius=max(0.0, fly_time * canopy_speed - reduction),
        displacement=displacement,
        direction=wind.direction,
        center_full=offset_position(lat, lng, displacement_full, wind_full.direction),
        radius_full=max(0.0, fly_time_full * canopy_speed - reduction),
        displacement_full=displacement_full,
        direction_full=wind_full.direction,
        rings=_rings(profile, downwind_start, elevation + downwind_height, canopy_top,
                     canopy_speed, descent_rate, reduction),
    )


def _rings(profile, origin, lower, upper, canopy_speed, descent_rate, reduction):
    """Canopy circles for openings between the downwind entry and the top."""
    elevation = profile[0].height
    step = RING_STEP_SHORT if upper - lower <= 1000.0 else RING_STEP_LONG
    rings = []
    current = upper
    while current >= lower + RING_MIN_SPAN:
        fly_time = (current - lower) / descent_rate
        wind = profile_mean_wind(profile, lower, current)
        if wind is not None:
            displacement = wind.speed * fly_time
            rings.append(CanopyRing(
                upper_limit=current - elevation,
                radius=max(0.0, fly_time * canopy_speed - reduction),
                displacement=displacement,
                direction=wind.direction,
                center=offset_position(*origin, displacement, wind.direction),
            ))
        current -= step
    return tuple(rings)


def exit_circles(canopy: CanopyCircles,
                 freefall: FreefallTrajectory) -> ExitCircles:
    """Shift the canopy circles back against the freefall drift."""
    back = normalize_angle(freefall.direction + 180.0)
    return ExitCircles(
        center=offset_position(*canopy.center, freefall.distance, back),
        radius=canopy.radius,
        center_full=offset_position(*canopy.center_full, freefall.distance, back),
        radius_full=canopy.radius_full,
        freefall_distance=freefall.distance,
        freefall_direction=freefall.direction,
        freefall_time=freefall.elapsed_time,
    )


def cutaway_area(lat: float, lng: float, profile: Sequence[ProfileLevel],
                 cutaway_altitude: float,
                 state: str = 'partially') -> Optional[CutawayArea]:
    """
    Landing area of a main canopy released at (lat, lng).

    Parameters
    ----------
    lat, lng : cutaway position
    profile : built vertical profile; index 0 is the ground
    cutaway_altitude : m AGL
    state : 'open', 'partially' or 'collapsed'
    """
    if state not in CUTAWAY_VERTICAL_SPEEDS:
        raise ValueError(
            f"Unknown cutaway state '{state}'. "
            f"Available: {list(CUTAWAY_VERTICAL_SPEEDS.keys())}"
        )
    if len(profile) < 2:
        logger.warning("Cutaway area needs a profile of at least 2 levels")
        return None

    elevation = profile[0].height
    wind = profile_mean_wind(profile, elevation, elevation + cutaway_altitude)
    if wind is None:
        return None

    vertical_speed = CUTAWAY_VERTICAL_SPEEDS[state]
    descent_time = cutaway_altitude / vertical_speed
    displacement = wind.speed * descent_time
    return CutawayArea(
        center=offset_position(lat, lng, displacement,
                               normalize_angle(wind.direction + 180.0)),
        radius=CUTAWAY_RADIUS,
        displacement=displacement,
        direction=wind.direction,
        descent_time=descent_time,
        vertical_speed=vertical_speed,
    )
