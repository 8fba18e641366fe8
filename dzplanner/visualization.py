"""
Visualization Engine
====================
Charts for checking a plan at a glance:
  1. Wind profile (speed, direction, temperature/dewpoint vs height)
  2. Freefall (height vs time, ground track)
  3. Ensemble overlap (covered grid cells coloured by model count)
"""

import os
from typing import Optional, Sequence

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.patches import Ellipse

from .atmosphere import isa_profile
from .ensemble import AreaCircle, HeatmapCell, METERS_PER_DEG_LAT
from .integrator import FreefallTrajectory
from .profile import ProfileLevel
from .vectors import MPS_TO_KNOTS


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#0a0a0a',
    'text_color': '#e0e0e0',
    'grid_color': '#333333',
    'accent_colors': ['#00d4ff', '#ff6b35', '#00e676', '#ffeb3b',
                      '#e040fb', '#ff5252'],
    'font_family': 'monospace',
}


def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    if not isinstance(axes, np.ndarray):
        axes = [axes]
    else:
        axes = axes.flatten()

    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def _legend(ax):
    ax.legend(fontsize=9, facecolor='#1a1a1a', edgecolor='#444',
              labelcolor=STYLE['text_color'])


def _finish(fig, save_path, show):
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])
    if show:
        plt.show()
    return fig


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


# ══════════════════════════════════════════════════════════════════════════
#  1. Wind Profile
# ══════════════════════════════════════════════════════════════════════════

def plot_wind_profile(profile: Sequence[ProfileLevel], save_path: str = None,
                      show: bool = False, height_unit: str = 'm') -> plt.Figure:
    """Wind speed, wind direction and temperature against display height."""
    display = np.array([lvl.display_height for lvl in profile])
    heights = np.array([lvl.height for lvl in profile])
    speed_kt = np.array([lvl.wind_speed for lvl in profile]) * MPS_TO_KNOTS
    direction = np.array([lvl.wind_direction for lvl in profile])
    temperature = np.array([lvl.temperature for lvl in profile])
    dew = np.array([np.nan if lvl.dewpoint is None else lvl.dewpoint
                    for lvl in profile])

    fig, axes = plt.subplots(1, 3, figsize=(16, 7), sharey=True)
    _apply_dark_style(fig, axes)

    ax = axes[0]
    ax.plot(speed_kt, display, color=STYLE['accent_colors'][0], linewidth=2)
    ax.fill_betweenx(display, 0, speed_kt, alpha=0.1, color=STYLE['accent_colors'][0])
    ax.set_xlabel('Wind speed (kt)')
    ax.set_ylabel(f'Height ({height_unit})')
    ax.set_title('Wind Speed', fontweight='bold')

    ax = axes[1]
    ax.scatter(direction, display, color=STYLE['accent_colors'][1], s=18)
    ax.set_xlim(0, 360)
    ax.set_xticks([0, 90, 180, 270, 360])
    ax.set_xlabel('Wind direction (°)')
    ax.set_title('Wind Direction', fontweight='bold')

    ax = axes[2]
    isa = isa_profile(heights)
    ax.plot(temperature, display, color=STYLE['accent_colors'][5], linewidth=2,
            label='Temperature')
    ax.plot(dew, display, color=STYLE['accent_colors'][2], linewidth=2,
            label='Dewpoint')
    ax.plot(isa['temperature'], display, '--', color='#888', linewidth=1,
            label='ISA')
    ax.set_xlabel('Temperature (°C)')
    ax.set_title('Temperature', fontweight='bold')
    _legend(ax)

    fig.suptitle('Vertical Wind Profile', fontsize=14, fontweight='bold',
                 color=STYLE['text_color'])
    return _finish(fig, save_path, show)


# ══════════════════════════════════════════════════════════════════════════
#  2. Freefall
# ══════════════════════════════════════════════════════════════════════════

def plot_freefall(trajectory: FreefallTrajectory, save_path: str = None,
                  show: bool = False) -> plt.Figure:
    """Height and vertical speed vs time, plus the ground track."""
    fig, axes = plt.subplots(1, 2, figsize=(14, 6))
    _apply_dark_style(fig, axes)

    ax = axes[0]
    ax.plot(trajectory.time, trajectory.height, color=STYLE['accent_colors'][0],
            linewidth=2.5, label='Height')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Height (m ASL)')
    ax.set_title('Freefall Descent', fontweight='bold')
    ax_v = ax.twinx()
    ax_v.plot(trajectory.time, -trajectory.vertical_velocity,
              color=STYLE['accent_colors'][1], linewidth=1.5, linestyle='--')
    ax_v.set_ylabel('Fall rate (m/s)', color=STYLE['accent_colors'][1])
    ax_v.tick_params(colors=STYLE['accent_colors'][1])

    ax = axes[1]
    ax.plot(trajectory.y, trajectory.x, color=STYLE['accent_colors'][2], linewidth=2)
    ax.plot(0, 0, 'o', color='#00e676', markersize=10, label='Exit', zorder=5)
    ax.plot(trajectory.y[-1], trajectory.x[-1], 'x', color='#ff5252',
            markersize=12, markeredgewidth=3, label='Opening', zorder=5)
    ax.set_xlabel('East (m)')
    ax.set_ylabel('North (m)')
    ax.set_aspect('equal', adjustable='datalim')
    ax.set_title(f'Ground Track — {trajectory.distance:.0f} m toward '
                 f'{trajectory.direction:.0f}°', fontweight='bold')
    _legend(ax)

    return _finish(fig, save_path, show)


# ══════════════════════════════════════════════════════════════════════════
#  3. Ensemble Overlap
# ══════════════════════════════════════════════════════════════════════════

def plot_heatmap(cells: Sequence[HeatmapCell],
                 circles: Optional[Sequence[AreaCircle]] = None,
                 save_path: str = None, show: bool = False) -> plt.Figure:
    """Covered grid cells coloured by the number of agreeing models."""
    fig, ax = plt.subplots(figsize=(9, 8))
    _apply_dark_style(fig, ax)

    if cells:
        lats = np.array([c.lat for c in cells])
        lngs = np.array([c.lng for c in cells])
        counts = np.array([c.count for c in cells])
        points = ax.scatter(lngs, lats, c=counts, cmap='inferno', s=6, marker='s')
        bar = fig.colorbar(points, ax=ax)
        bar.set_label('Models', color=STYLE['text_color'])
        bar.ax.tick_params(colors=STYLE['text_color'])

    for i, circle in enumerate(circles or []):
        lat, lng = circle.center
        color = STYLE['accent_colors'][i % len(STYLE['accent_colors'])]
        # degrees of longitude shrink with cos(lat)
        height = 2 * circle.radius / METERS_PER_DEG_LAT
        width = height / np.cos(np.radians(lat))
        ax.add_patch(Ellipse((lng, lat), width, height, fill=False,
                             color=color, linewidth=1.5, label=circle.source))

    ax.set_xlabel('Longitude')
    ax.set_ylabel('Latitude')
    ax.set_title('Ensemble Exit Area Agreement', fontweight='bold')
    if circles:
        _legend(ax)

    return _finish(fig, save_path, show)
