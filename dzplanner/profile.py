"""
Vertical Profile Interpolator
=============================
Turns one timestep of a sparse pressure-level sounding (surface + up to 13
levels) into a uniform-step height profile from the ground to the highest
valid level.

Pipeline:
  1. keep levels with complete data, sorted by geopotential height
  2. drop levels at or below the ground and put the surface sample first
  3. fill a surface-to-first-level gap wider than one step
       pressure      ln p linear in height
       wind/T/RH     linear in ln(height above ground + 1)
  4. resample every ``step`` height units above ground
       wind          two-point inverse-distance in u/v space
       T/RH/p        linear (LIP)

Heights are metres ASL internally; ``display_height`` follows the
AGL/AMSL reference setting and is given in the display height unit
(metres or feet). The resampling step is counted in that unit too.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .atmosphere import dewpoint
from .exceptions import ConfigurationError
from .interpolation import LinearProfile, inverse_distance
from .settings import HEIGHT_REFERENCES, HEIGHT_UNITS
from .vectors import (
    convert_wind, feet_to_meters, meters_to_feet, wind_components, wind_direction,
    wind_speed,
)

logger = logging.getLogger(__name__)


PRESSURE_LEVELS = (1000, 950, 925, 900, 850, 800, 700, 600, 500, 400, 300, 250, 200)


def _finite_or_none(value) -> Optional[float]:
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class SoundingLevel:
    """Raw values on one pressure level. Wind speed in m/s."""
    pressure: float                          # hPa
    geopotential_height: Optional[float]     # m ASL
    temperature: Optional[float]             # °C
    relative_humidity: Optional[float]       # %
    wind_speed: Optional[float]              # m/s
    wind_direction: Optional[float]          # deg (from)

    @property
    def is_valid(self) -> bool:
        return all(_finite_or_none(value) is not None for value in (
            self.geopotential_height, self.temperature, self.relative_humidity,
            self.wind_speed, self.wind_direction,
        ))


@dataclass(frozen=True)
class SoundingSample:
    """One timestep of model output: surface values plus pressure levels."""
    surface_pressure: Optional[float]        # hPa
    temperature_2m: Optional[float]          # °C
    relative_humidity_2m: Optional[float]    # %
    wind_speed_10m: Optional[float]          # m/s
    wind_direction_10m: Optional[float]      # deg
    levels: Tuple[SoundingLevel, ...] = ()
    time: Optional[str] = None
    source: Optional[str] = None             # model identifier

    @property
    def has_surface(self) -> bool:
        return all(_finite_or_none(value) is not None for value in (
            self.surface_pressure, self.temperature_2m,
            self.relative_humidity_2m, self.wind_speed_10m,
            self.wind_direction_10m,
        ))

    @classmethod
    def from_hourly(cls, hourly: Dict[str, Sequence], index: int,
                    wind_unit: str = 'km/h',
                    source: Optional[str] = None) -> 'SoundingSample':
        """
        Read timestep ``index`` from an hourly mapping keyed like
        ``temperature_850hPa`` / ``wind_speed_10m``. Missing keys, short
        series and null/NaN entries all become None.
        """
        def value(key):
            series = hourly.get(key)
            if series is None or index < 0 or index >= len(series):
                return None
            return _finite_or_none(series[index])

        def wind(key):
            speed = value(key)
            return None if speed is None else convert_wind(speed, 'm/s', wind_unit)

        levels = tuple(
            SoundingLevel(
                pressure=float(p),
                geopotential_height=value(f'geopotential_height_{p}hPa'),
                temperature=value(f'temperature_{p}hPa'),
                relative_humidity=value(f'relative_humidity_{p}hPa'),
                wind_speed=wind(f'wind_speed_{p}hPa'),
                wind_direction=value(f'wind_direction_{p}hPa'),
            )
            for p in PRESSURE_LEVELS
        )
        times = hourly.get('time')
        time = times[index] if times is not None and 0 <= index < len(times) else None

        return cls(
            surface_pressure=value('surface_pressure'),
            temperature_2m=value('temperature_2m'),
            relative_humidity_2m=value('relative_humidity_2m'),
            wind_speed_10m=wind('wind_speed_10m'),
            wind_direction_10m=value('wind_direction_10m'),
            levels=levels,
            time=time,
            source=source,
        )


@dataclass(frozen=True)
class ProfileLevel:
    """One resampled point of the vertical profile."""
    height: float                  # m ASL
    display_height: float          # AGL or AMSL, in the display unit
    pressure: float                # hPa
    temperature: float             # °C
    relative_humidity: float       # %
    dewpoint: Optional[float]      # °C
    wind_direction: float          # deg (from)
    wind_speed: float              # m/s
    u: float
    v: float


def build_profile(sample: SoundingSample, elevation: Optional[float],
                  ref_mode: str = 'AGL', step: float = 200.0,
                  height_unit: str = 'm') -> List[ProfileLevel]:
    """
    Resample a sounding onto a uniform height grid.

    Parameters
    ----------
    sample : SoundingSample for one timestep
    elevation : ground elevation (m ASL); None when unknown
    ref_mode : 'AGL' or 'AMSL', only affects ``display_height``
    step : vertical spacing in ``height_unit``
    height_unit : 'm' or 'ft'; unit of ``step`` and ``display_height``

    Returns
    -------
    list of ProfileLevel, ascending, surface first; empty when the sounding
    cannot support a profile
    """
    if ref_mode not in HEIGHT_REFERENCES:
        raise ConfigurationError(f"Unknown height reference '{ref_mode}'",
                                 field='height_reference')
    if height_unit not in HEIGHT_UNITS:
        raise ConfigurationError(f"Unknown height unit '{height_unit}'",
                                 field='height_unit')
    if elevation is None or not math.isfinite(elevation):
        logger.warning("Ground elevation unknown, no profile")
        return []
    if not (math.isfinite(step) and step > 0):
        logger.warning("Interpolation step must be positive, got %s", step)
        return []

    valid = sorted((lvl for lvl in sample.levels if lvl.is_valid),
                   key=lambda lvl: lvl.geopotential_height)
    if len(valid) < 2:
        logger.warning("Profile needs at least 2 valid levels, got %d", len(valid))
        return []
    if not sample.has_surface:
        logger.warning("Surface sample incomplete, no profile")
        return []

    aloft = [lvl for lvl in valid if lvl.geopotential_height > elevation]
    if not aloft:
        logger.warning("No pressure level above ground elevation %.0f m", elevation)
        return []

    in_feet = height_unit == 'ft'
    step_m = feet_to_meters(step) if in_feet else step
    known = _known_points(sample, aloft, elevation, step_m)
    heights = known['height']

    top = min(aloft, key=lambda lvl: lvl.pressure)
    max_agl = top.geopotential_height - elevation
    if max_agl <= 0:
        return []

    pressure_at = LinearProfile(heights, known['pressure'])
    temperature_at = LinearProfile(heights, known['temperature'])
    humidity_at = LinearProfile(heights, known['relative_humidity'])

    profile = []
    max_in_unit = meters_to_feet(max_agl) if in_feet else max_agl
    steps = int(math.floor(max_in_unit / step))
    for i in range(steps + 1):
        agl_in_unit = i * step
        h = elevation + (feet_to_meters(agl_in_unit) if in_feet else agl_in_unit)
        if ref_mode == 'AGL':
            display = agl_in_unit
        else:
            display = meters_to_feet(h) if in_feet else h

        if i == 0:
            pressure = sample.surface_pressure
            temperature = sample.temperature_2m
            rh = sample.relative_humidity_2m
            u, v = float(known['u'][0]), float(known['v'][0])
        else:
            pressure = pressure_at(h)
            temperature = temperature_at(h)
            rh = humidity_at(h)
            u, v = _bracketed_wind(heights, known['u'], known['v'], h)

        profile.append(ProfileLevel(
            height=h,
            display_height=display,
            pressure=pressure,
            temperature=temperature,
            relative_humidity=rh,
            dewpoint=dewpoint(temperature, rh),
            wind_direction=wind_direction(u, v),
            wind_speed=wind_speed(u, v),
            u=u,
            v=v,
        ))

    logger.debug("Built %d-level profile up to %.0f m ASL", len(profile),
                 profile[-1].height)
    return profile


def _known_points(sample, aloft, elevation, step):
    """Surface + gap fill + valid levels as parallel numpy arrays."""
    u_sfc, v_sfc = wind_components(sample.wind_speed_10m, sample.wind_direction_10m)
    rows = [(elevation, sample.surface_pressure, sample.temperature_2m,
             sample.relative_humidity_2m, u_sfc, v_sfc)]

    lowest = aloft[0]
    gap = lowest.geopotential_height - elevation
    if sample.surface_pressure > lowest.pressure and gap > step:
        u_low, v_low = wind_components(lowest.wind_speed, lowest.wind_direction)
        log_gap = math.log(gap + 1)
        ln_ps = math.log(sample.surface_pressure)
        ln_pl = math.log(lowest.pressure)

        def log_height(surface_value, level_value, agl):
            fraction = math.log(agl + 1) / log_gap
            return surface_value + fraction * (level_value - surface_value)

        for i in range(1, int(math.floor(gap / step)) + 1):
            agl = i * step
            if agl >= gap:
                break
            rows.append((
                elevation + agl,
                math.exp(ln_ps + agl / gap * (ln_pl - ln_ps)),
                log_height(sample.temperature_2m, lowest.temperature, agl),
                log_height(sample.relative_humidity_2m, lowest.relative_humidity, agl),
                log_height(u_sfc, u_low, agl),
                log_height(v_sfc, v_low, agl),
            ))

    for lvl in aloft:
        u, v = wind_components(lvl.wind_speed, lvl.wind_direction)
        rows.append((lvl.geopotential_height, lvl.pressure, lvl.temperature,
                     lvl.relative_humidity, u, v))

    columns = np.array(rows, dtype=float).T
    names = ('height', 'pressure', 'temperature', 'relative_humidity', 'u', 'v')
    return dict(zip(names, columns))


def _bracketed_wind(heights: np.ndarray, u: np.ndarray, v: np.ndarray,
                    h: float) -> Tuple[float, float]:
    """Inverse-distance u/v between the two known points around ``h``."""
    idx = int(np.searchsorted(heights, h, side='left'))
    idx = min(max(idx, 1), len(heights) - 1)
    if heights[idx] == h:
        return float(u[idx]), float(v[idx])
    h1, h2 = heights[idx - 1], heights[idx]
    return (inverse_distance(u[idx - 1], u[idx], h1, h2, h),
            inverse_distance(v[idx - 1], v[idx], h1, h2, h))


# ── Profile accessors ─────────────────────────────────────────────────────

def profile_arrays(profile: Sequence[ProfileLevel]):
    """(heights, u, v) numpy arrays for a profile."""
    heights = np.array([lvl.height for lvl in profile], dtype=float)
    u = np.array([lvl.u for lvl in profile], dtype=float)
    v = np.array([lvl.v for lvl in profile], dtype=float)
    return heights, u, v


def wind_at_height(profile: Sequence[ProfileLevel],
                   height: float) -> Optional[Tuple[float, float]]:
    """LIP of (u, v) at ``height`` m ASL; None for profiles under 2 levels."""
    if len(profile) < 2:
        return None
    heights, u, v = profile_arrays(profile)
    return LinearProfile(heights, u)(height), LinearProfile(heights, v)(height)
