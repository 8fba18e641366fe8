"""
Jumper Body & Forces
====================
Defines the freefalling jumper and the accelerations acting on it:
  - Gravity
  - Quadratic vertical drag
  - Quadratic horizontal drag against the air-relative velocity, which is
    how wind drift enters the equations of motion

Coordinate system:
  x = north (m), y = east (m), height = metres ASL (up positive)
  so atan2(y, x) is a compass bearing.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .atmosphere import FREEFALL_GRAVITY


# ── Freefall constants ────────────────────────────────────────────────────
CANOPY_OPENING_BUFFER = 200.0   # m  freefall stops this far above opening
FREEFALL_TIME_STEP    = 0.5     # s


@dataclass(frozen=True)
class Jumper:
    """
    Aerodynamic properties of a jumper in stable belly-to-earth freefall.
    """
    name: str = "Belly-to-earth jumper"
    mass: float = 80.0               # kg
    cd_vertical: float = 1.0
    area_vertical: float = 0.5       # m²
    cd_horizontal: float = 1.0
    area_horizontal: float = 0.5     # m²

    def vertical_drag_factor(self, rho: float) -> float:
        """bv = ½·Cd·A·ρ / m  (1/m)"""
        return 0.5 * self.cd_vertical * self.area_vertical * rho / self.mass

    def horizontal_drag_factor(self, rho: float) -> float:
        """bh = ½·Cd·A·ρ / m  (1/m)"""
        return 0.5 * self.cd_horizontal * self.area_horizontal * rho / self.mass

    def terminal_velocity(self, rho: float) -> float:
        """Vertical terminal speed (m/s) at density ``rho``."""
        return math.sqrt(FREEFALL_GRAVITY / self.vertical_drag_factor(rho))


@dataclass(frozen=True)
class FreefallConditions:
    """
    Exit and opening geometry of one freefall.

    Altitudes are AGL; ``elevation`` anchors them to ASL.
    """
    exit_altitude: float = 3000.0       # m AGL
    opening_altitude: float = 1200.0    # m AGL
    elevation: float = 0.0              # m ASL
    ground_vx: float = 0.0              # m/s north at exit
    ground_vy: float = 0.0              # m/s east at exit

    @property
    def start_height(self) -> float:
        return self.elevation + self.exit_altitude

    @property
    def stop_height(self) -> float:
        return self.elevation + self.opening_altitude - CANOPY_OPENING_BUFFER

    def initial_velocity_vector(self) -> np.ndarray:
        """[vx, vy, vz] at exit; the jumper leaves with no vertical speed."""
        return np.array([self.ground_vx, self.ground_vy, 0.0])

    def is_finite(self) -> bool:
        return all(math.isfinite(value) for value in (
            self.exit_altitude, self.opening_altitude, self.elevation,
            self.ground_vx, self.ground_vy,
        ))


def aircraft_exit_velocity(tas: float, heading: float,
                           wind_uv: Optional[Tuple[float, float]] = None) -> np.ndarray:
    """
    Ground velocity [vx, vy] (north, east) of a jumper leaving an aircraft
    flying ``heading`` at ``tas`` m/s, plus the wind (u east, v north)
    at exit when given.
    """
    rad = math.radians(heading)
    vx = tas * math.cos(rad)
    vy = tas * math.sin(rad)
    if wind_uv is not None:
        u, v = wind_uv
        vx += v
        vy += u
    return np.array([vx, vy])


def compute_acceleration(velocity: np.ndarray, wind: np.ndarray, rho: float,
                         jumper: Jumper) -> np.ndarray:
    """
    Acceleration acting on the jumper.

    Parameters
    ----------
    velocity : [vx, vy, vz] ground-frame velocity (m/s)
    wind : [wx, wy] air-mass velocity, north and east (m/s)
    rho : local air density (kg/m³)
    jumper : Jumper instance

    Returns
    -------
    acceleration : np.ndarray [ax, ay, az] in m/s²
    """
    vx, vy, vz = velocity

    # ── 1. Gravity + vertical drag ────────────────────────────────────────
    bv = jumper.vertical_drag_factor(rho)
    az = -FREEFALL_GRAVITY - bv * vz * abs(vz)

    # ── 2. Horizontal drag on air-relative motion ─────────────────────────
    bh = jumper.horizontal_drag_factor(rho)
    air_x = vx - wind[0]
    air_y = vy - wind[1]
    air_speed = math.hypot(air_x, air_y)
    ax = -bh * air_speed * air_x
    ay = -bh * air_speed * air_y

    return np.array([ax, ay, az])
