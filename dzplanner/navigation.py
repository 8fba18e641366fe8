"""
Wind Triangle
=============
Pure wind-triangle helpers shared by the landing pattern and the jump run.

Sign conventions:
  - wind angle = wind direction − course, in (−180, 180]
  - crosswind > 0 : wind from the right of the course
  - headwind  > 0 : wind against the course
  - WCA carries the sign of the crosswind (turn into the wind)
"""

import math
from dataclasses import dataclass
from typing import Tuple

from .vectors import normalize_angle, signed_angle


@dataclass(frozen=True)
class FlightParameters:
    crosswind: float
    headwind: float
    wind_correction_angle: float
    heading: float
    ground_speed: float


def wind_angle(course: float, wind_direction: float) -> float:
    return signed_angle(wind_direction - course)


def headwind_crosswind(wind_speed: float, angle: float) -> Tuple[float, float]:
    """(crosswind, headwind) for a wind ``angle`` degrees off the course."""
    rad = math.radians(angle)
    return wind_speed * math.sin(rad), wind_speed * math.cos(rad)


def wind_correction_angle(crosswind: float, airspeed: float) -> float:
    """
    WCA = asin(crosswind / airspeed) in degrees.

    0 when undefined (no airspeed, or crosswind stronger than airspeed).
    """
    if airspeed <= 0 or abs(crosswind) > airspeed:
        return 0.0
    return math.degrees(math.asin(crosswind / airspeed))


def flight_parameters(course: float, wind_direction: float, wind_speed: float,
                      airspeed: float) -> FlightParameters:
    """
    Heading and ground speed needed to hold ``course``.

    Ground speed is the along-track remainder of the airspeed after the
    crosswind is cancelled, minus the headwind. When the crosswind cannot
    be cancelled only the headwind is left, which can be negative.
    """
    angle = wind_angle(course, wind_direction)
    crosswind, headwind = headwind_crosswind(wind_speed, angle)
    wca = wind_correction_angle(crosswind, airspeed)
    if airspeed > abs(crosswind):
        ground_speed = math.sqrt(airspeed ** 2 - crosswind ** 2) - headwind
    else:
        ground_speed = -headwind
    return FlightParameters(
        crosswind=crosswind,
        headwind=headwind,
        wind_correction_angle=wca,
        heading=normalize_angle(course + wca),
        ground_speed=ground_speed,
    )


def course_from_heading(heading: float, wind_direction: float, wind_speed: float,
                        airspeed: float) -> Tuple[float, float]:
    """
    Track actually flown when holding ``heading``.

    Returns
    -------
    (true_course, ground_speed) from the vector sum of the air vector and
    the wind (blowing toward wind_direction + 180°)
    """
    h_rad = math.radians(heading)
    w_rad = math.radians(wind_direction + 180.0)
    east = airspeed * math.sin(h_rad) + wind_speed * math.sin(w_rad)
    north = airspeed * math.cos(h_rad) + wind_speed * math.cos(w_rad)
    ground_speed = math.hypot(east, north)
    if ground_speed == 0.0:
        return normalize_angle(heading), 0.0
    return normalize_angle(math.degrees(math.atan2(east, north))), ground_speed
