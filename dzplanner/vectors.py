"""
Vector Math Kernel
==================
Wind-vector decomposition, angle arithmetic and small-scale geodesy used
by every other module.

Conventions:
  - Directions are meteorological: the bearing the wind blows FROM,
    clockwise from true north, in [0, 360).
  - u = -speed·sin(dir), v = -speed·cos(dir)  (u east, v north, the
    direction the air moves TO).
  - Bearings for displacement are the direction of travel.

Two displacement models are provided:
  - ``offset_position``     flat-earth, 111 000 m per degree (DZ scale)
  - ``destination_point``   spherical great-circle, R = 6 371 km
"""

import math
from typing import Tuple

import numpy as np


# ── Geodesy ───────────────────────────────────────────────────────────────
EARTH_RADIUS_M     = 6371000.0     # m  mean Earth radius
METERS_PER_DEGREE  = 111000.0      # m  per degree latitude (planar offset)

# ── Unit conversions ──────────────────────────────────────────────────────
KNOTS_TO_MPS    = 0.514444
MPS_TO_KNOTS    = 1.0 / KNOTS_TO_MPS
KMH_TO_MPS      = 1.0 / 3.6
MPH_TO_MPS      = 0.44704
FEET_TO_METERS  = 0.3048
METERS_TO_FEET  = 3.28084
CELSIUS_TO_KELVIN = 273.15

_WIND_UNITS_TO_MPS = {
    'm/s': 1.0,
    'kt': KNOTS_TO_MPS,
    'km/h': KMH_TO_MPS,
    'mph': MPH_TO_MPS,
}

# Upper bound (m/s) of each Beaufort force 0..11; anything above is 12.
BEAUFORT_LIMITS_MPS = [0.3, 1.6, 3.4, 5.5, 8.0, 10.8, 13.9, 17.2, 20.8,
                       24.5, 28.5, 32.7]


# ══════════════════════════════════════════════════════════════════════════
#  Angles
# ══════════════════════════════════════════════════════════════════════════

def normalize_angle(angle: float) -> float:
    """Wrap an angle in degrees into [0, 360)."""
    wrapped = math.fmod(angle, 360.0)
    if wrapped < 0:
        wrapped += 360.0
    # fmod(-1e-15) + 360 rounds to 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def signed_angle(angle: float) -> float:
    """Wrap an angle in degrees into (-180, 180]."""
    wrapped = normalize_angle(angle)
    return wrapped - 360.0 if wrapped > 180.0 else wrapped


# ══════════════════════════════════════════════════════════════════════════
#  Wind vectors
# ══════════════════════════════════════════════════════════════════════════

def wind_components(speed: float, direction: float) -> Tuple[float, float]:
    """
    Decompose a wind (speed, from-direction) into Cartesian components.

    Returns
    -------
    (u, v) : eastward and northward components of the air motion
    """
    rad = math.radians(direction)
    return -speed * math.sin(rad), -speed * math.cos(rad)


def wind_speed(u: float, v: float) -> float:
    return math.hypot(u, v)


def wind_direction(u: float, v: float) -> float:
    """From-direction in [0, 360) for components (u, v); calm is 0°."""
    if u == 0.0 and v == 0.0:
        return 0.0
    return normalize_angle(math.degrees(math.atan2(-u, -v)))


def wind_components_array(speed, direction):
    """Vectorized ``wind_components`` for numpy arrays."""
    rad = np.radians(np.asarray(direction, dtype=float))
    speed = np.asarray(speed, dtype=float)
    return -speed * np.sin(rad), -speed * np.cos(rad)


# ══════════════════════════════════════════════════════════════════════════
#  Positions
# ══════════════════════════════════════════════════════════════════════════

def offset_position(lat: float, lng: float, distance: float,
                    bearing: float) -> Tuple[float, float]:
    """
    Move a point ``distance`` metres along ``bearing`` on a flat earth.

        Δlat = d / 111000 · cos(bearing)
        Δlng = d / 111000 · sin(bearing) / cos(lat)
    """
    rad = math.radians(bearing)
    dlat = distance / METERS_PER_DEGREE * math.cos(rad)
    dlng = distance / METERS_PER_DEGREE * math.sin(rad) / math.cos(math.radians(lat))
    return lat + dlat, lng + dlng


def destination_point(lat: float, lng: float, distance: float,
                      bearing: float) -> Tuple[float, float]:
    """Great-circle destination; longitude wrapped into [-180, 180]."""
    phi1 = math.radians(lat)
    lam1 = math.radians(lng)
    theta = math.radians(bearing)
    delta = distance / EARTH_RADIUS_M

    phi2 = math.asin(math.sin(phi1) * math.cos(delta)
                     + math.cos(phi1) * math.sin(delta) * math.cos(theta))
    lam2 = lam1 + math.atan2(math.sin(theta) * math.sin(delta) * math.cos(phi1),
                             math.cos(delta) - math.sin(phi1) * math.sin(phi2))

    lng2 = (math.degrees(lam2) + 540.0) % 360.0 - 180.0
    return math.degrees(phi2), lng2


def bearing_between(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Initial great-circle bearing from point 1 to point 2, in [0, 360)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlam = math.radians(lng2 - lng1)
    y = math.sin(dlam) * math.cos(phi2)
    x = (math.cos(phi1) * math.sin(phi2)
         - math.sin(phi1) * math.cos(phi2) * math.cos(dlam))
    return normalize_angle(math.degrees(math.atan2(y, x)))


def haversine_distance(lat1, lng1, lat2, lng2):
    """
    Great-circle distance in metres. Accepts scalars or numpy arrays
    (broadcast), which the ensemble heatmap relies on.
    """
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    dphi = phi2 - phi1
    dlam = np.radians(np.asarray(lng2) - np.asarray(lng1))
    a = np.sin(dphi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlam / 2) ** 2
    dist = 2 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))
    if np.ndim(dist) == 0:
        return float(dist)
    return dist


# ══════════════════════════════════════════════════════════════════════════
#  Unit conversion
# ══════════════════════════════════════════════════════════════════════════

def knots_to_mps(knots: float) -> float:
    return knots * KNOTS_TO_MPS


def mps_to_knots(mps: float) -> float:
    return mps * MPS_TO_KNOTS


def feet_to_meters(feet: float) -> float:
    return feet * FEET_TO_METERS


def meters_to_feet(meters: float) -> float:
    return meters * METERS_TO_FEET


def convert_wind(speed: float, to_unit: str, from_unit: str = 'm/s') -> float:
    """Convert a wind speed between 'm/s', 'kt', 'km/h' and 'mph'."""
    for unit in (to_unit, from_unit):
        if unit not in _WIND_UNITS_TO_MPS:
            raise ValueError(
                f"Unknown wind unit '{unit}'. "
                f"Available: {list(_WIND_UNITS_TO_MPS.keys())}"
            )
    return speed * _WIND_UNITS_TO_MPS[from_unit] / _WIND_UNITS_TO_MPS[to_unit]


def beaufort_number(speed_mps: float) -> int:
    """Beaufort force (0-12) for a wind speed in m/s."""
    for force, limit in enumerate(BEAUFORT_LIMITS_MPS):
        if speed_mps < limit:
            return force
    return 12
