"""
Jump Run Planner
================
Aircraft ground track for dropping a group of jumpers.

  direction      mean wind over [ground, ground + opening altitude]
                 (into the wind), unless a custom track is given
  ground speed   |TAS along the track + wind at exit height|
  track length   jumpers · separation · ground speed, 100 – 10 000 m
  approach       ground speed · 120 s, 100 – 20 000 m, before the track

Offsets move the whole track: forward along it first, then laterally
(positive to the right).
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .atmosphere import true_airspeed
from .mean_wind import MeanWind, profile_mean_wind
from .profile import ProfileLevel, wind_at_height
from .vectors import KNOTS_TO_MPS, meters_to_feet, normalize_angle, offset_position

logger = logging.getLogger(__name__)


# ── Jump run limits ───────────────────────────────────────────────────────
MIN_TRACK_LENGTH      = 100.0      # m
MAX_TRACK_LENGTH      = 10000.0    # m
MIN_APPROACH_LENGTH   = 100.0      # m
MAX_APPROACH_LENGTH   = 20000.0    # m
APPROACH_TIME         = 120.0      # s
DEFAULT_SEPARATION    = 7.0        # s

# ── Exit separation by TAS (kt → s) ───────────────────────────────────────
JUMPER_SEPARATION_TABLE = {
    135: 5, 130: 5, 125: 5, 120: 5, 115: 5, 110: 5, 105: 5, 100: 6,
    95: 7, 90: 7, 85: 7, 80: 8, 75: 8, 70: 9, 65: 10, 60: 10, 55: 11,
    50: 12, 45: 14, 40: 15, 35: 17, 30: 20, 25: 24, 20: 30, 15: 40,
    10: 60, 5: 119,
}


@dataclass(frozen=True)
class JumpRunTrack:
    direction: float                   # deg
    track_length: float                # m
    approach_length: float             # m
    approach_time: float               # s
    ground_speed: float                # m/s
    true_airspeed: float               # kt
    separation: float                  # s between jumpers
    mean_wind: MeanWind
    start: Tuple[float, float]         # first exit
    end: Tuple[float, float]           # last exit
    approach_start: Tuple[float, float]

    @property
    def latlngs(self):
        return [self.start, self.end]

    @property
    def approach_latlngs(self):
        return [self.start, self.approach_start]


def separation_from_tas(tas_kt: Optional[float]) -> float:
    """
    Seconds between exits for a true airspeed in knots: the entry of the
    smallest tabulated speed at or above ``tas_kt``; the fastest entry
    covers anything quicker.
    """
    if tas_kt is None or not math.isfinite(tas_kt) or tas_kt <= 0:
        logger.warning("Invalid TAS %s, using default separation", tas_kt)
        return DEFAULT_SEPARATION
    speeds = sorted(JUMPER_SEPARATION_TABLE, reverse=True)
    closest = speeds[0]
    for speed in speeds:
        if tas_kt <= speed:
            closest = speed
        else:
            break
    return float(JUMPER_SEPARATION_TABLE[closest])


def _clamp(value, lower, upper):
    return max(lower, min(upper, value))


def plan_jump_run(lat: float, lng: float, profile: Sequence[ProfileLevel],
                  elevation: Optional[float] = None,
                  exit_altitude: float = 3000.0,
                  opening_altitude: float = 1200.0,
                  aircraft_ias: float = 90.0,
                  number_of_jumpers: int = 5,
                  separation_sec: Optional[float] = None,
                  offsets: Tuple[float, float] = (0.0, 0.0),
                  direction: Optional[float] = None) -> Optional[JumpRunTrack]:
    """
    Plan the jump run through the anchor point (lat, lng).

    Parameters
    ----------
    lat, lng : anchor of the first exit
    profile : built vertical profile
    elevation : ground elevation (m ASL); the profile's ground if None
    exit_altitude, opening_altitude : m AGL
    aircraft_ias : indicated airspeed (kt)
    number_of_jumpers : jumpers on the run
    separation_sec : seconds between exits; from the TAS table if None
    offsets : (forward, lateral) shift of the track (m)
    direction : custom track (deg, 0–360); mean-wind track if None

    Returns
    -------
    JumpRunTrack, or None when the wind or TAS cannot be computed
    """
    if len(profile) < 2:
        logger.warning("Jump run needs a profile of at least 2 levels")
        return None
    if elevation is None:
        elevation = profile[0].height

    wind = profile_mean_wind(profile, elevation, elevation + opening_altitude)
    if wind is None:
        return None

    track = float(round(wind.direction)) % 360.0
    if direction is not None:
        if math.isfinite(direction) and 0 <= direction <= 360:
            track = normalize_angle(direction)
        else:
            logger.warning("Custom jump run direction %s out of range, using %.0f°",
                           direction, track)

    exit_height = elevation + exit_altitude
    tas_kt = true_airspeed(aircraft_ias, meters_to_feet(exit_height))
    if tas_kt is None:
        return None

    u, v = wind_at_height(profile, exit_height)
    tas = tas_kt * KNOTS_TO_MPS
    rad = math.radians(track)
    ground_speed = math.hypot(tas * math.sin(rad) + u, tas * math.cos(rad) + v)

    if separation_sec is None:
        separation_sec = separation_from_tas(tas_kt)

    track_length = _clamp(round(number_of_jumpers * separation_sec * ground_speed),
                          MIN_TRACK_LENGTH, MAX_TRACK_LENGTH)
    approach_length = _clamp(round(ground_speed * APPROACH_TIME),
                             MIN_APPROACH_LENGTH, MAX_APPROACH_LENGTH)

    forward, lateral = offsets
    start = offset_position(lat, lng, forward, track)
    start = offset_position(*start, lateral, normalize_angle(track + 90.0))
    end = offset_position(*start, track_length, track)
    approach_start = offset_position(*start, approach_length,
                                     normalize_angle(track + 180.0))

    logger.debug("Jump run %.0f°, GS %.1f m/s, track %.0f m, approach %.0f m",
                 track, ground_speed, track_length, approach_length)
    return JumpRunTrack(
        direction=track,
        track_length=float(track_length),
        approach_length=float(approach_length),
        approach_time=APPROACH_TIME,
        ground_speed=ground_speed,
        true_airspeed=tas_kt,
        separation=float(separation_sec),
        mean_wind=wind,
        start=start,
        end=end,
        approach_start=approach_start,
    )
