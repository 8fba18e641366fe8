"""
Atmosphere Model
================
Thermodynamic helpers used by the planner:

  - ISA 1976 standard atmosphere (troposphere + lower stratosphere) for
    the density ratio that converts indicated to true airspeed
  - Hypsometric air density anchored on the forecast surface pressure and
    the locally interpolated temperature (freefall drag)
  - Magnus-form dewpoint with separate liquid-water / ice coefficients

Reference: U.S. Standard Atmosphere, 1976 (NASA-TM-X-74335)
"""

import logging
import math
from typing import Optional

import numpy as np

from .vectors import CELSIUS_TO_KELVIN, FEET_TO_METERS

logger = logging.getLogger(__name__)


# ── ISA Constants ──────────────────────────────────────────────────────────
SEA_LEVEL_TEMP       = 288.15      # K  (15 °C)
SEA_LEVEL_PRESSURE   = 101325.0    # Pa
LAPSE_RATE_TROPO     = -0.0065     # K/m  (troposphere)
TROPOPAUSE_ALT       = 11000.0     # m
TROPOPAUSE_TEMP      = 216.65      # K  (-56.5 °C)
GRAVITY              = 9.80665     # m/s²
R_SPECIFIC           = 287.05      # J/(kg·K)  specific gas constant for air

# ── Hypsometric density (freefall) ────────────────────────────────────────
FREEFALL_GRAVITY     = 9.81        # m/s²
FREEFALL_R           = 287.102     # J/(kg·K)

# ── Magnus coefficients ───────────────────────────────────────────────────
MAGNUS_WATER = (17.27, 237.7)      # T >= 0 °C
MAGNUS_ICE   = (21.87, 265.5)      # T <  0 °C


def isa_temperature(altitude: float) -> float:
    """
    Temperature (K) at a given geometric altitude (m).

    - Troposphere (0–11 km): linear lapse at −6.5 °C/km
    - Above 11 km: isothermal at 216.65 K
    """
    if altitude <= TROPOPAUSE_ALT:
        return SEA_LEVEL_TEMP + LAPSE_RATE_TROPO * altitude
    return TROPOPAUSE_TEMP


def isa_pressure(altitude: float) -> float:
    """Atmospheric pressure (Pa) at a given geometric altitude (m)."""
    exponent = GRAVITY / (R_SPECIFIC * abs(LAPSE_RATE_TROPO))

    if altitude <= TROPOPAUSE_ALT:
        T = isa_temperature(altitude)
        return SEA_LEVEL_PRESSURE * (T / SEA_LEVEL_TEMP) ** exponent

    P_tropo = SEA_LEVEL_PRESSURE * (TROPOPAUSE_TEMP / SEA_LEVEL_TEMP) ** exponent
    return P_tropo * math.exp(
        -GRAVITY * (altitude - TROPOPAUSE_ALT) / (R_SPECIFIC * TROPOPAUSE_TEMP)
    )


def isa_density(altitude: float) -> float:
    """Air density (kg/m³) from ideal gas law: ρ = P / (R_specific × T)."""
    return isa_pressure(altitude) / (R_SPECIFIC * isa_temperature(altitude))


def density_ratio(altitude: float) -> float:
    """σ = ρ(h) / ρ(0) in the standard atmosphere."""
    return isa_density(altitude) / isa_density(0.0)


def true_airspeed(ias: float, altitude_ft: float) -> Optional[float]:
    """
    True airspeed from indicated airspeed at a pressure altitude.

        TAS = IAS / sqrt(σ)

    Units of the result follow ``ias``. Returns None for negative or
    non-finite input.

    Parameters
    ----------
    ias : indicated airspeed (any unit)
    altitude_ft : pressure altitude in feet
    """
    if ias is None or altitude_ft is None:
        logger.warning("TAS needs both airspeed and altitude")
        return None
    if not (math.isfinite(ias) and math.isfinite(altitude_ft)) or ias < 0 or altitude_ft < 0:
        logger.warning("Invalid TAS input: ias=%s altitude_ft=%s", ias, altitude_ft)
        return None
    sigma = density_ratio(altitude_ft * FEET_TO_METERS)
    return ias / math.sqrt(sigma)


def air_density(surface_pressure_hpa: float, height: float, elevation: float,
                temperature_c: float) -> float:
    """
    Hypsometric air density (kg/m³) at ``height`` m ASL.

        ρ = P_sfc · exp(−g·(h − elev) / (R·T)) / (R·T)

    with T the local temperature in kelvin.
    """
    T = temperature_c + CELSIUS_TO_KELVIN
    RT = FREEFALL_R * T
    pressure_pa = surface_pressure_hpa * 100.0
    return pressure_pa * math.exp(-FREEFALL_GRAVITY * (height - elevation) / RT) / RT


def dewpoint(temperature_c: Optional[float],
             relative_humidity: Optional[float]) -> Optional[float]:
    """
    Dewpoint (°C) via the Magnus formula.

    Liquid-water coefficients above freezing, ice coefficients below.
    Returns None when either input is missing or the result is undefined
    (RH <= 0).
    """
    if temperature_c is None or relative_humidity is None:
        return None
    if relative_humidity <= 0:
        return None
    a, b = MAGNUS_WATER if temperature_c >= 0 else MAGNUS_ICE
    alpha = a * temperature_c / (b + temperature_c) + math.log(relative_humidity / 100.0)
    result = b * alpha / (a - alpha)
    return result if math.isfinite(result) else None


# ── Vectorized version for charts ─────────────────────────────────────────
def isa_profile(alt_array: np.ndarray) -> dict:
    """ISA temperature (°C) and density ratio over an altitude array."""
    T = np.array([isa_temperature(h) for h in alt_array])
    sigma = np.array([density_ratio(h) for h in alt_array])
    return {
        'altitude': alt_array,
        'temperature': T - CELSIUS_TO_KELVIN,
        'density_ratio': sigma,
    }


if __name__ == "__main__":
    print("TAS Table (IAS 90 kt)")
    print("=" * 40)
    print(f"{'Alt (ft)':>10} {'σ':>10} {'TAS (kt)':>10}")
    print("-" * 40)
    for ft in [0, 3000, 6000, 10000, 13000, 15000]:
        print(f"{ft:>10d} {density_ratio(ft * FEET_TO_METERS):>10.4f} "
              f"{true_airspeed(90.0, ft):>10.1f}")
