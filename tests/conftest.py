"""
Shared soundings for the planner tests.

  - uniform_sample : 10 kt from 270° at every level, ground at 500 m
  - calm_sample    : no wind anywhere, ground at 500 m
  - berlin_hourly  : one real-looking hourly timestep (wind in km/h)
"""

import sys
import os
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dzplanner.profile import PRESSURE_LEVELS, SoundingLevel, SoundingSample
from dzplanner.vectors import KNOTS_TO_MPS


# Roughly standard-atmosphere heights (m) and temperatures (°C)
STANDARD_HEIGHTS = {
    1000: 110, 950: 540, 925: 760, 900: 990, 850: 1460, 800: 1950,
    700: 3010, 600: 4200, 500: 5570, 400: 7190, 300: 9160, 250: 10360,
    200: 11790,
}
STANDARD_TEMPERATURES = {
    1000: 14.3, 950: 11.5, 925: 10.1, 900: 8.6, 850: 5.5, 800: 2.3,
    700: -4.6, 600: -12.3, 500: -21.2, 400: -31.7, 300: -44.5, 250: -52.3,
    200: -56.5,
}

GROUND_ELEVATION = 500.0


def make_sample(speed, direction, surface_pressure=955.0, levels=PRESSURE_LEVELS):
    """Sounding with the same wind (m/s, deg) at the surface and every level."""
    return SoundingSample(
        surface_pressure=surface_pressure,
        temperature_2m=12.0,
        relative_humidity_2m=70.0,
        wind_speed_10m=speed,
        wind_direction_10m=direction,
        levels=tuple(
            SoundingLevel(
                pressure=float(p),
                geopotential_height=float(STANDARD_HEIGHTS[p]),
                temperature=STANDARD_TEMPERATURES[p],
                relative_humidity=60.0,
                wind_speed=speed,
                wind_direction=direction,
            )
            for p in levels
        ),
    )


@pytest.fixture
def sample_factory():
    return make_sample


@pytest.fixture
def uniform_sample():
    return make_sample(10.0 * KNOTS_TO_MPS, 270.0)


@pytest.fixture
def calm_sample():
    return make_sample(0.0, 0.0)


@pytest.fixture
def berlin_hourly():
    hourly = {
        'time': ['2025-01-01T12:00'],
        'surface_pressure': [1007.3],
        'temperature_2m': [17.1],
        'relative_humidity_2m': [78],
        'wind_speed_10m': [9.9],
        'wind_direction_10m': [190],
    }
    rows = [
        (1000, 101, 17.9, 72, 16.6, 193),
        (925, 771, 17.0, 66, 39.2, 226),
        (850, 1487, 13.1, 66, 34.7, 228),
        (700, 3099, 4.4, 71, 35.5, 237),
        (600, 4336, -3.2, 55, 40.2, 223),
        (500, 5752, -13.4, 72, 48.6, 225),
        (400, 7412, -24.5, 51, 53.4, 213),
        (300, 9450, -38.2, 35, None, 224),
        (250, 10682, -46.0, 28, None, 203),
        (200, 12132, -55.7, 37, None, 206),
    ]
    for p, z, t, rh, ws, wd in rows:
        hourly[f'geopotential_height_{p}hPa'] = [z]
        hourly[f'temperature_{p}hPa'] = [t]
        hourly[f'relative_humidity_{p}hPa'] = [rh]
        hourly[f'wind_speed_{p}hPa'] = [ws]
        hourly[f'wind_direction_{p}hPa'] = [wd]
    return hourly
