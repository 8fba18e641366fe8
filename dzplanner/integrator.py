"""
Freefall Integration Engine
===========================
Fixed-step Euler integration of a jumper from exit to the freefall stop
height (opening altitude minus the canopy opening buffer):

    x_{n+1} = x_n + v_n · dt
    v_{n+1} = v_n + a(h_n, v_n) · dt

Accelerations come from ``compute_acceleration`` with the air density
at the current height (hypsometric, anchored on the surface pressure) and
the wind interpolated from the static profile. The last step is shortened
so the trajectory ends exactly on the stop height.

Output: FreefallTrajectory dataclass with the full point sequence.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .atmosphere import air_density
from .interpolation import LinearProfile
from .jumper import FREEFALL_TIME_STEP, FreefallConditions, Jumper, compute_acceleration
from .profile import ProfileLevel, profile_arrays
from .vectors import normalize_angle, offset_position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrajectoryPoint:
    """Snapshot of the jumper state at one instant."""
    time: float
    height: float               # m ASL
    vertical_velocity: float    # m/s, negative down
    ground_vx: float            # m/s north
    ground_vy: float            # m/s east
    x: float                    # m north of exit
    y: float                    # m east of exit


@dataclass(frozen=True)
class FreefallTrajectory:
    """Complete freefall output."""
    jumper: Jumper
    conditions: FreefallConditions
    dt: float
    points: Tuple[TrajectoryPoint, ...]

    @property
    def time(self) -> np.ndarray:
        return np.array([p.time for p in self.points])

    @property
    def height(self) -> np.ndarray:
        return np.array([p.height for p in self.points])

    @property
    def vertical_velocity(self) -> np.ndarray:
        return np.array([p.vertical_velocity for p in self.points])

    @property
    def x(self) -> np.ndarray:
        return np.array([p.x for p in self.points])

    @property
    def y(self) -> np.ndarray:
        return np.array([p.y for p in self.points])

    @property
    def elapsed_time(self) -> float:
        """Freefall time from exit to stop height (s)."""
        return self.points[-1].time

    @property
    def final_height(self) -> float:
        return self.points[-1].height

    @property
    def displacement(self) -> Tuple[float, float]:
        """(north, east) offset of the stop point from the exit point (m)."""
        return self.points[-1].x, self.points[-1].y

    @property
    def distance(self) -> float:
        """Horizontal distance from exit to stop point (m)."""
        return math.hypot(*self.displacement)

    @property
    def direction(self) -> float:
        """Bearing from exit to stop point, [0, 360)."""
        north, east = self.displacement
        if north == 0.0 and east == 0.0:
            return 0.0
        return normalize_angle(math.degrees(math.atan2(east, north)))

    def path_positions(self, lat: float, lng: float) -> List[Tuple[float, float]]:
        """Lat/lng of every trajectory point for an exit at (lat, lng)."""
        positions = []
        for p in self.points:
            plat, plng = offset_position(lat, lng, p.x, 0.0)
            positions.append(offset_position(plat, plng, p.y, 90.0))
        return positions

    def summary(self) -> str:
        """Human-readable summary string."""
        lines = [
            f"╔══════════════════════════════════════════════════════╗",
            f"║  FREEFALL SUMMARY — {self.jumper.name:<32s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Exit height  : {self.points[0].height:>10.0f} m ASL{'':<20s} ║",
            f"║  Stop height  : {self.final_height:>10.0f} m ASL{'':<20s} ║",
            f"║  Timestep     : {self.dt:<36.2f} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Freefall time: {self.elapsed_time:>10.1f} s{'':<24s} ║",
            f"║  Final vz     : {self.points[-1].vertical_velocity:>10.1f} m/s{'':<22s} ║",
            f"║  Distance     : {self.distance:>10.0f} m{'':<24s} ║",
            f"║  Direction    : {self.direction:>10.0f} °{'':<24s} ║",
            f"╚══════════════════════════════════════════════════════╝",
        ]
        return '\n'.join(lines)


def simulate_freefall(profile: Sequence[ProfileLevel], exit_altitude: float,
                      opening_altitude: float, initial_velocity: Sequence[float],
                      elevation: float, jumper: Optional[Jumper] = None,
                      dt: float = FREEFALL_TIME_STEP,
                      max_time: float = 900.0) -> Optional[FreefallTrajectory]:
    """
    Integrate a freefall from exit to opening altitude minus 200 m.

    Parameters
    ----------
    profile : built vertical profile (ascending, surface first)
    exit_altitude, opening_altitude : m AGL
    initial_velocity : (vx north, vy east) ground velocity at exit (m/s)
    elevation : ground elevation (m ASL)
    jumper : body properties, default 80 kg / Cd 1 / 0.5 m²
    dt : time step (s)
    max_time : give up after this much simulated time (s)

    Returns
    -------
    FreefallTrajectory, or None when inputs cannot produce a trajectory
    """
    if len(profile) < 2:
        logger.warning("Freefall needs a profile of at least 2 levels")
        return None

    jumper = jumper or Jumper()
    try:
        conditions = FreefallConditions(
            exit_altitude=float(exit_altitude),
            opening_altitude=float(opening_altitude),
            elevation=float(elevation),
            ground_vx=float(initial_velocity[0]),
            ground_vy=float(initial_velocity[1]),
        )
    except (TypeError, ValueError, IndexError) as exc:
        logger.warning("Freefall inputs rejected: %s", exc)
        return None

    if not conditions.is_finite() or not (math.isfinite(dt) and dt > 0):
        logger.warning("Freefall inputs must be finite")
        return None
    h_stop = conditions.stop_height
    if conditions.start_height <= h_stop:
        logger.warning("Exit height %.0f m is not above freefall stop height %.0f m",
                       conditions.start_height, h_stop)
        return None

    heights, u, v = profile_arrays(profile)
    temperature = np.array([lvl.temperature for lvl in profile], dtype=float)
    surface_pressure = profile[0].pressure
    if not (np.all(np.isfinite(u)) and np.all(np.isfinite(v))
            and np.all(np.isfinite(temperature)) and math.isfinite(surface_pressure)):
        logger.warning("Profile contains non-finite wind or temperature")
        return None

    wind_u = LinearProfile(heights, u)
    wind_v = LinearProfile(heights, v)
    temperature_at = LinearProfile(heights, temperature)

    t = 0.0
    h = conditions.start_height
    pos = np.zeros(2)
    vel = conditions.initial_velocity_vector()

    history = [_record_point(t, h, pos, vel)]

    while True:
        rho = air_density(surface_pressure, h, conditions.elevation, temperature_at(h))
        wind = np.array([wind_v(h), wind_u(h)])
        acc = compute_acceleration(vel, wind, rho, jumper)

        next_h = h + vel[2] * dt
        crossing = next_h <= h_stop
        step = dt * (h - h_stop) / (h - next_h) if crossing else dt

        pos = pos + vel[:2] * step
        h = h_stop if crossing else next_h
        vel = vel + acc * step
        t += step

        history.append(_record_point(t, h, pos, vel))

        if crossing:
            break
        if t >= max_time:
            logger.warning("Freefall did not reach %.0f m within %.0f s", h_stop, max_time)
            return None

    trajectory = FreefallTrajectory(jumper=jumper, conditions=conditions,
                                    dt=dt, points=tuple(history))
    logger.debug("Freefall %.1f s, %.0f m toward %.0f°", trajectory.elapsed_time,
                 trajectory.distance, trajectory.direction)
    return trajectory


def _record_point(t, h, pos, vel):
    return TrajectoryPoint(
        time=t,
        height=h,
        vertical_velocity=float(vel[2]),
        ground_vx=float(vel[0]),
        ground_vy=float(vel[1]),
        x=float(pos[0]),
        y=float(pos[1]),
    )
