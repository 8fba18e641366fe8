"""
Ensemble Aggregator
===================
Fuses several weather models that share one hourly time axis.

Scenarios:
  - min_wind / max_wind : per timestep and level, the model with the
    lowest / highest wind speed supplies speed AND direction; scalars
    take their own min / max
  - mean_wind           : scalars averaged, wind averaged as u/v vectors
  - all_models          : no fusion, one sounding per model

Only models with a value contribute; a timestep/variable without any
contributor stays None.

Spatial agreement: every model's exit circle is rasterised on a 40 m
grid and each cell counts the circles covering it.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.spatial import ConvexHull, QhullError

from .planner import plan_jump
from .profile import PRESSURE_LEVELS, SoundingSample
from .settings import PlanningContext
from .vectors import haversine_distance, wind_components_array

logger = logging.getLogger(__name__)


SCENARIOS = ('min_wind', 'mean_wind', 'max_wind', 'all_models')

SCALAR_VARIABLES = ['surface_pressure', 'temperature_2m', 'relative_humidity_2m']
for _p in PRESSURE_LEVELS:
    SCALAR_VARIABLES += [f'geopotential_height_{_p}hPa', f'temperature_{_p}hPa',
                         f'relative_humidity_{_p}hPa']

WIND_VARIABLES = [('wind_speed_10m', 'wind_direction_10m')] + [
    (f'wind_speed_{_p}hPa', f'wind_direction_{_p}hPa') for _p in PRESSURE_LEVELS
]

# ── Heatmap grid ──────────────────────────────────────────────────────────
HEATMAP_CELL_SIZE   = 40.0        # m
METERS_PER_DEG_LAT  = 111320.0


@dataclass(frozen=True)
class AreaCircle:
    """A model's exit area."""
    source: str
    center: Tuple[float, float]
    radius: float


@dataclass(frozen=True)
class HeatmapCell:
    lat: float
    lng: float
    count: int


def _check_scenario(scenario: str):
    if scenario not in SCENARIOS:
        raise ValueError(
            f"Unknown scenario '{scenario}'. Available: {list(SCENARIOS)}"
        )


def _column(hourly: Dict[str, Sequence], key: str, n: int) -> np.ndarray:
    """Series ``key`` as a float array of length n, NaN where missing."""
    column = np.full(n, np.nan)
    values = hourly.get(key)
    if values is None:
        return column
    for i, value in enumerate(values[:n]):
        if value is not None:
            column[i] = float(value)
    return column


def _to_list(values: np.ndarray) -> List[Optional[float]]:
    return [float(x) if np.isfinite(x) else None for x in values]


def _reduce_scalar(data: np.ndarray, scenario: str) -> np.ndarray:
    """Per-column min / max / mean over finite values; NaN if none."""
    if scenario == 'min_wind':
        return np.fmin.reduce(data, axis=0)
    if scenario == 'max_wind':
        return np.fmax.reduce(data, axis=0)
    finite = np.isfinite(data)
    count = finite.sum(axis=0)
    total = np.where(finite, data, 0.0).sum(axis=0)
    return np.divide(total, count, out=np.full(data.shape[1], np.nan), where=count > 0)


def _reduce_wind(speed: np.ndarray, direction: np.ndarray,
                 scenario: str) -> Tuple[np.ndarray, np.ndarray]:
    """Per-column fused (speed, direction) across models."""
    valid = np.isfinite(speed) & np.isfinite(direction)
    any_valid = valid.any(axis=0)
    n = speed.shape[1]

    if scenario in ('min_wind', 'max_wind'):
        if scenario == 'min_wind':
            pick = np.argmin(np.where(valid, speed, np.inf), axis=0)
        else:
            pick = np.argmax(np.where(valid, speed, -np.inf), axis=0)
        columns = np.arange(n)
        fused_speed = np.where(any_valid, speed[pick, columns], np.nan)
        fused_dir = np.where(any_valid, direction[pick, columns], np.nan)
        return fused_speed, fused_dir

    u, v = wind_components_array(np.where(valid, speed, 0.0),
                                 np.where(valid, direction, 0.0))
    count = valid.sum(axis=0)
    nan = np.full(n, np.nan)
    mean_u = np.divide(u.sum(axis=0), count, out=nan.copy(), where=count > 0)
    mean_v = np.divide(v.sum(axis=0), count, out=nan.copy(), where=count > 0)
    fused_speed = np.hypot(mean_u, mean_v)
    fused_dir = np.degrees(np.arctan2(-mean_u, -mean_v)) % 360.0
    fused_dir = np.where(fused_speed == 0.0, 0.0, fused_dir)
    return fused_speed, np.where(any_valid, fused_dir, np.nan)


def aggregate_series(model_series: Dict[str, Dict[str, Sequence]],
                     scenario: str) -> Dict[str, list]:
    """
    Fuse full hourly series into one hourly mapping.

    Parameters
    ----------
    model_series : model name -> hourly mapping (variable -> values)
    scenario : 'min_wind', 'mean_wind' or 'max_wind'

    Returns
    -------
    hourly mapping with the first model's ``time`` axis; empty when there
    is nothing to fuse
    """
    _check_scenario(scenario)
    if scenario == 'all_models':
        raise ValueError("'all_models' keeps models separate, nothing to fuse")
    if not model_series:
        logger.warning("No ensemble models to aggregate")
        return {}

    first = next(iter(model_series.values()))
    times = list(first.get('time') or [])
    if not times:
        logger.warning("Ensemble time axis is empty")
        return {}
    n = len(times)
    models = list(model_series.values())

    fused = {'time': times}
    for key in SCALAR_VARIABLES:
        data = np.vstack([_column(hourly, key, n) for hourly in models])
        fused[key] = _to_list(_reduce_scalar(data, scenario))

    for speed_key, dir_key in WIND_VARIABLES:
        speed = np.vstack([_column(hourly, speed_key, n) for hourly in models])
        direction = np.vstack([_column(hourly, dir_key, n) for hourly in models])
        fused_speed, fused_dir = _reduce_wind(speed, direction, scenario)
        fused[speed_key] = _to_list(fused_speed)
        fused[dir_key] = _to_list(fused_dir)

    logger.debug("Aggregated %d models over %d timesteps (%s)", len(models), n, scenario)
    return fused


def aggregate_ensemble(model_series: Dict[str, Dict[str, Sequence]], scenario: str,
                       timestep_index: int, wind_unit: str = 'km/h'
                       ) -> Union[Optional[SoundingSample], List[SoundingSample]]:
    """
    Soundings for one timestep: a list (one per model) for 'all_models',
    otherwise the single fused sounding (None when nothing to fuse).
    """
    _check_scenario(scenario)
    if scenario == 'all_models':
        return [SoundingSample.from_hourly(hourly, timestep_index, wind_unit, source=name)
                for name, hourly in model_series.items()]

    fused = aggregate_series(model_series, scenario)
    if not fused:
        return None
    return SoundingSample.from_hourly(fused, timestep_index, wind_unit, source=scenario)


def model_exit_areas(model_series: Dict[str, Dict[str, Sequence]],
                     timestep_index: int, context: PlanningContext,
                     wind_unit: str = 'km/h') -> List[AreaCircle]:
    """Exit circle of every model that yields a complete plan."""
    circles = []
    for name, hourly in model_series.items():
        sample = SoundingSample.from_hourly(hourly, timestep_index, wind_unit, source=name)
        plan = plan_jump(context, sample)
        if plan is None or plan.exit is None:
            logger.warning("No exit area for model %s", name)
            continue
        circles.append(AreaCircle(source=name, center=plan.exit.center,
                                  radius=plan.exit.radius))
    return circles


def overlap_heatmap(circles: Sequence[AreaCircle],
                    cell_size: float = HEATMAP_CELL_SIZE) -> List[HeatmapCell]:
    """
    Count circle coverage on a lat/lng grid spanning all circles.

    Cells are ``cell_size`` metres apart in both directions; cells that no
    circle covers are left out.
    """
    if not circles:
        return []

    centers = np.array([c.center for c in circles], dtype=float)
    radii = np.array([c.radius for c in circles], dtype=float)
    lat_radius = radii / METERS_PER_DEG_LAT
    lng_radius = radii / (METERS_PER_DEG_LAT * np.cos(np.radians(centers[:, 0])))

    min_lat = float(np.min(centers[:, 0] - lat_radius))
    max_lat = float(np.max(centers[:, 0] + lat_radius))
    min_lng = float(np.min(centers[:, 1] - lng_radius))
    max_lng = float(np.max(centers[:, 1] + lng_radius))

    lat_step = cell_size / METERS_PER_DEG_LAT
    rows = int(math.floor((max_lat - min_lat) / lat_step)) + 1

    cells = []
    for lat in min_lat + np.arange(rows) * lat_step:
        lng_step = cell_size / (METERS_PER_DEG_LAT * math.cos(math.radians(lat)))
        cols = int(math.floor((max_lng - min_lng) / lng_step)) + 1
        lngs = min_lng + np.arange(cols) * lng_step

        counts = np.zeros(cols, dtype=int)
        for (c_lat, c_lng), radius in zip(centers, radii):
            counts += haversine_distance(lat, lngs, c_lat, c_lng) <= radius

        for lng, count in zip(lngs[counts > 0], counts[counts > 0]):
            cells.append(HeatmapCell(lat=float(lat), lng=float(lng), count=int(count)))

    logger.debug("Heatmap: %d covered cells from %d circles", len(cells), len(circles))
    return cells


def agreement_contours(cells: Sequence[HeatmapCell],
                       model_count: int) -> Dict[str, Optional[List[Tuple[float, float]]]]:
    """
    Convex hulls around the cells covered by at least one model, by at
    least half the models, and by every model. A level with fewer than
    three cells (or only collinear cells) has no hull.
    """
    thresholds = {
        'any': 1,
        'half': int(math.ceil(model_count / 2)),
        'all': model_count,
    }
    contours = {}
    for name, threshold in thresholds.items():
        points = np.array([(c.lat, c.lng) for c in cells if c.count >= threshold])
        contours[name] = _hull(points)
    return contours


def _hull(points: np.ndarray) -> Optional[List[Tuple[float, float]]]:
    if len(points) < 3:
        return None
    try:
        hull = ConvexHull(points)
    except QhullError:
        return None
    return [tuple(map(float, points[i])) for i in hull.vertices]
