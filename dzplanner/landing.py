"""
Landing Pattern
===============
Three-leg canopy landing pattern (downwind → base → final), computed
backwards from the landing point. Each leg:

  - is flown across its own height band with that band's mean wind
  - lasts (band thickness) / descent rate
  - covers |ground speed| · duration along the ground

A leg's start point lies on the back-projection bearing (flown course
+ 180°) from its end point. When the ground speed is negative (wind
stronger than the canopy) the jumper is pushed backwards along the leg,
so the bearing is reversed and the pattern closes from the other side.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

from .mean_wind import HeightBand, MeanWind, profile_mean_wind
from .navigation import FlightParameters, course_from_heading, flight_parameters
from .profile import ProfileLevel
from .settings import LegHeights
from .vectors import KNOTS_TO_MPS, normalize_angle, offset_position

logger = logging.getLogger(__name__)


LEG_NAMES = ('downwind', 'base', 'final')

# ground speeds closer to zero than this are treated as a standstill (m/s)
GROUND_SPEED_TOLERANCE = 0.005


@dataclass(frozen=True)
class LandingLeg:
    """One leg of the pattern with its wind triangle and ground track."""
    name: str
    band: HeightBand
    mean_wind: MeanWind
    course: float                    # flown track, deg
    heading: float                   # canopy heading, deg
    bearing: float                   # from leg end back to leg start, deg
    flight: FlightParameters
    duration: float                  # s
    length: float                    # m
    start: Tuple[float, float]       # lat, lng
    end: Tuple[float, float]

    @property
    def ground_speed(self) -> float:
        return self.flight.ground_speed

    @property
    def reversed(self) -> bool:
        return _is_reversed(self.flight)


@dataclass(frozen=True)
class LandingPattern:
    """Legs in flight order: downwind, base, final."""
    landing_direction: float
    left_hand: bool
    legs: Tuple[LandingLeg, LandingLeg, LandingLeg]

    @property
    def downwind(self) -> LandingLeg:
        return self.legs[0]

    @property
    def base(self) -> LandingLeg:
        return self.legs[1]

    @property
    def final(self) -> LandingLeg:
        return self.legs[2]

    @property
    def landing_point(self) -> Tuple[float, float]:
        return self.final.end

    @property
    def downwind_start(self) -> Tuple[float, float]:
        return self.downwind.start

    @property
    def base_start(self) -> Tuple[float, float]:
        return self.base.start

    @property
    def final_start(self) -> Tuple[float, float]:
        return self.final.start


def plan_landing_pattern(lat: float, lng: float, profile: Sequence[ProfileLevel],
                         leg_heights: LegHeights = LegHeights(),
                         landing_direction: Optional[float] = None,
                         canopy_speed: float = 20.0 * KNOTS_TO_MPS,
                         descent_rate: float = 3.5,
                         left_hand: bool = True) -> Optional[LandingPattern]:
    """
    Chain final, base and downwind legs back from the landing point.

    Parameters
    ----------
    lat, lng : landing point
    profile : built vertical profile; index 0 is the ground
    leg_heights : pattern entry heights (m AGL)
    landing_direction : final course (deg); surface wind direction if None
    canopy_speed : canopy airspeed (m/s)
    descent_rate : canopy sink rate (m/s)
    left_hand : left-hand (LL) or right-hand (RR) pattern

    Returns
    -------
    LandingPattern, or None when the profile cannot supply leg winds
    """
    if len(profile) < 2:
        logger.warning("Landing pattern needs a profile of at least 2 levels")
        return None
    if not (descent_rate > 0 and canopy_speed > 0):
        logger.warning("Descent rate and canopy speed must be positive")
        return None

    if landing_direction is None:
        landing_direction = profile[0].wind_direction
    if landing_direction is None or not math.isfinite(landing_direction):
        logger.warning("No usable landing direction")
        return None
    landing_direction = normalize_angle(landing_direction)

    elevation = profile[0].height
    bands = {
        'final': HeightBand(elevation, elevation + leg_heights.final),
        'base': HeightBand(elevation + leg_heights.final, elevation + leg_heights.base),
        'downwind': HeightBand(elevation + leg_heights.base,
                               elevation + leg_heights.downwind),
    }

    end = (lat, lng)
    legs = {}
    for name in reversed(LEG_NAMES):
        band = bands[name]
        wind = profile_mean_wind(profile, band.lower, band.upper)
        if wind is None:
            return None

        if name == 'base':
            # base holds a heading; track and ground speed are the vector sum
            heading = normalize_angle(landing_direction + (90.0 if left_hand else -90.0))
            course, ground_speed = course_from_heading(heading, wind.direction,
                                                       wind.speed, canopy_speed)
            flight = replace(
                flight_parameters(course, wind.direction, wind.speed, canopy_speed),
                heading=heading, ground_speed=ground_speed,
            )
        else:
            course = landing_direction
            if name == 'downwind':
                course = normalize_angle(landing_direction + 180.0)
            flight = flight_parameters(course, wind.direction, wind.speed, canopy_speed)
            heading = flight.heading

        legs[name] = _leg(name, band, wind, course, heading, flight,
                          band.thickness / descent_rate, end)
        end = legs[name].start

    pattern = LandingPattern(
        landing_direction=landing_direction,
        left_hand=left_hand,
        legs=tuple(legs[name] for name in LEG_NAMES),
    )
    for leg in pattern.legs:
        logger.debug("%s leg: wind %.0f° @ %.1f m/s, course %.0f°, GS %.1f m/s, %.0f m",
                     leg.name, leg.mean_wind.direction, leg.mean_wind.speed,
                     leg.course, leg.ground_speed, leg.length)
    return pattern


def _leg(name, band, wind, course, heading, flight, duration, end):
    bearing = normalize_angle(course + 180.0)
    if _is_reversed(flight):
        logger.warning("%s leg: wind %.1f m/s overpowers the canopy, leg reversed",
                       name, wind.speed)
        bearing = normalize_angle(bearing + 180.0)
    length = abs(flight.ground_speed) * duration
    start = offset_position(end[0], end[1], length, bearing)
    return LandingLeg(
        name=name,
        band=band,
        mean_wind=wind,
        course=course,
        heading=heading,
        bearing=bearing,
        flight=flight,
        duration=duration,
        length=length,
        start=start,
        end=end,
    )


def _is_reversed(flight: FlightParameters) -> bool:
    return flight.ground_speed < -GROUND_SPEED_TOLERANCE
