#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  DROP ZONE JUMP PLANNER — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Runs the planning pipeline on a built-in sample sounding:
    1. Vertical profile interpolation
    2. Layer-mean winds
    3. Jump run
    4. Freefall drift
    5. Landing pattern, canopy and exit circles
    6. Cutaway area
    7. Three-model ensemble (min / mean / max wind, overlap heatmap)

  Charts are saved to outputs/.

  Usage:
    python main.py              # Run everything
    python main.py --quick      # Skip the ensemble heatmap (faster)
    python main.py --verbose    # Debug logging from the planner
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import os
import sys
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dzplanner.canopy import cutaway_area
from dzplanner.ensemble import (
    aggregate_ensemble, agreement_contours, model_exit_areas, overlap_heatmap,
)
from dzplanner.mean_wind import profile_mean_wind
from dzplanner.planner import plan_jump
from dzplanner.profile import SoundingSample
from dzplanner.settings import JumpSettings, PlanningContext
from dzplanner.vectors import MPS_TO_KNOTS
from dzplanner.visualization import (
    ensure_output_dir, plot_freefall, plot_heatmap, plot_wind_profile,
)

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


# ── Sample sounding (Berlin, 12 UTC; wind speeds in km/h) ─────────────────
SAMPLE_LAT = 52.52
SAMPLE_LNG = 13.41
SAMPLE_ELEVATION = 38.0

SAMPLE_HOURLY = {
    'time': ['2025-01-01T12:00'],
    'surface_pressure': [1007.3],
    'temperature_2m': [17.1],
    'relative_humidity_2m': [78],
    'wind_speed_10m': [9.9],
    'wind_direction_10m': [190],
}
for _p, _z, _t, _rh, _ws, _wd in [
    (1000, 101, 17.9, 72, 16.6, 193),
    (925, 771, 17.0, 66, 39.2, 226),
    (850, 1487, 13.1, 66, 34.7, 228),
    (700, 3099, 4.4, 71, 35.5, 237),
    (600, 4336, -3.2, 55, 40.2, 223),
    (500, 5752, -13.4, 72, 48.6, 225),
    (400, 7412, -24.5, 51, 53.4, 213),
]:
    SAMPLE_HOURLY[f'geopotential_height_{_p}hPa'] = [_z]
    SAMPLE_HOURLY[f'temperature_{_p}hPa'] = [_t]
    SAMPLE_HOURLY[f'relative_humidity_{_p}hPa'] = [_rh]
    SAMPLE_HOURLY[f'wind_speed_{_p}hPa'] = [_ws]
    SAMPLE_HOURLY[f'wind_direction_{_p}hPa'] = [_wd]


def _perturbed(hourly, speed_factor, veer):
    """A second 'model': winds scaled and veered."""
    model = {}
    for key, values in hourly.items():
        if key.startswith('wind_speed'):
            model[key] = [v * speed_factor for v in values]
        elif key.startswith('wind_direction'):
            model[key] = [(v + veer) % 360 for v in values]
        else:
            model[key] = list(values)
    return model


def banner():
    print("""
╔═══════════════════════════════════════════════════════════════════════╗
║                                                                       ║
║     DROP ZONE JUMP PLANNER                                            ║
║     ─────────────────────────────────────────────────────             ║
║     Profile · Mean wind · Freefall · Pattern · Jump run · Ensemble    ║
║                                                                       ║
╚═══════════════════════════════════════════════════════════════════════╝
""")


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def main():
    start_time = time.time()
    quick = '--quick' in sys.argv
    logging.basicConfig(
        level=logging.DEBUG if '--verbose' in sys.argv else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    banner()
    out = ensure_output_dir('outputs')

    settings = JumpSettings()
    context = PlanningContext(lat=SAMPLE_LAT, lng=SAMPLE_LNG,
                              elevation=SAMPLE_ELEVATION, settings=settings)
    sample = SoundingSample.from_hourly(SAMPLE_HOURLY, 0, wind_unit='km/h',
                                        source='sample')

    plan = plan_jump(context, sample)
    if plan is None:
        print("  ✗ No plan could be computed from the sample sounding")
        return 1

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Vertical Profile
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Vertical Profile")
    print(f"  {'AGL (m)':>8} {'p (hPa)':>8} {'T (°C)':>7} {'Td (°C)':>8} "
          f"{'Dir':>5} {'Spd (kt)':>9}")
    for lvl in plan.profile[:12]:
        dew = f"{lvl.dewpoint:8.1f}" if lvl.dewpoint is not None else f"{'—':>8}"
        print(f"  {lvl.display_height:>8.0f} {lvl.pressure:>8.1f} {lvl.temperature:>7.1f} "
              f"{dew} {lvl.wind_direction:>5.0f} {lvl.wind_speed * MPS_TO_KNOTS:>9.1f}")
    print(f"  ... {len(plan.profile)} levels up to {plan.profile[-1].display_height:.0f} m AGL")

    fig = plot_wind_profile(plan.profile, save_path=f'{out}/01_wind_profile.png')
    plt.close(fig)
    print(f"\n  ✓ Saved: {out}/01_wind_profile.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Mean Winds
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Layer-Mean Winds")
    for lower, upper in [(0, 300), (0, 1200), (1000, 3000)]:
        mw = profile_mean_wind(plan.profile, SAMPLE_ELEVATION + lower,
                               SAMPLE_ELEVATION + upper)
        print(f"  {lower:>5}–{upper:<5} m AGL  {mw.direction:>4.0f}° @ "
              f"{mw.speed * MPS_TO_KNOTS:>5.1f} kt")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Jump Run
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Jump Run")
    jr = plan.jump_run
    if jr is not None:
        print(f"  Direction      : {jr.direction:.0f}°")
        print(f"  TAS            : {jr.true_airspeed:.1f} kt")
        print(f"  Ground speed   : {jr.ground_speed * MPS_TO_KNOTS:.1f} kt")
        print(f"  Separation     : {jr.separation:.0f} s")
        print(f"  Track length   : {jr.track_length:.0f} m")
        print(f"  Approach       : {jr.approach_length:.0f} m in {jr.approach_time:.0f} s")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Freefall
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Freefall")
    if plan.freefall is not None:
        print(plan.freefall.summary())
        fig = plot_freefall(plan.freefall, save_path=f'{out}/02_freefall.png')
        plt.close(fig)
        print(f"  ✓ Saved: {out}/02_freefall.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Landing Pattern & Circles
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Landing Pattern")
    if plan.pattern is not None:
        for leg in plan.pattern.legs:
            print(f"  {leg.name:<9s} course {leg.course:>4.0f}°  "
                  f"wind {leg.mean_wind.direction:>4.0f}° @ "
                  f"{leg.mean_wind.speed * MPS_TO_KNOTS:>4.1f} kt  "
                  f"GS {leg.ground_speed * MPS_TO_KNOTS:>5.1f} kt  "
                  f"{leg.length:>5.0f} m")
    if plan.canopy is not None:
        print(f"  Canopy circle  : r={plan.canopy.radius:.0f} m "
              f"(full r={plan.canopy.radius_full:.0f} m), "
              f"{len(plan.canopy.rings)} opening rings")
    if plan.exit is not None:
        lat, lng = plan.exit.center
        print(f"  Exit area      : {lat:.5f}, {lng:.5f}  r={plan.exit.radius:.0f} m")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Cutaway
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 6: Cutaway Area")
    for state in ('open', 'partially', 'collapsed'):
        area = cutaway_area(SAMPLE_LAT, SAMPLE_LNG, plan.profile,
                            settings.cutaway_altitude, state)
        if area is not None:
            print(f"  {state:<10s} {area.descent_time:>5.0f} s  drift "
                  f"{area.displacement:>5.0f} m")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 7: Ensemble
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 7: Ensemble")
    models = {
        'model_a': SAMPLE_HOURLY,
        'model_b': _perturbed(SAMPLE_HOURLY, 1.3, 15),
        'model_c': _perturbed(SAMPLE_HOURLY, 0.7, -20),
    }
    for scenario in ('min_wind', 'mean_wind', 'max_wind'):
        fused = aggregate_ensemble(models, scenario, 0)
        print(f"  {scenario:<10s} 10 m wind {fused.wind_direction_10m:>4.0f}° @ "
              f"{fused.wind_speed_10m * MPS_TO_KNOTS:>4.1f} kt")

    if not quick:
        circles = model_exit_areas(models, 0, context)
        cells = overlap_heatmap(circles)
        contours = agreement_contours(cells, len(circles))
        print(f"  {len(circles)} exit areas, {len(cells)} covered cells, "
              f"full agreement hull: {'yes' if contours['all'] else 'no'}")
        fig = plot_heatmap(cells, circles, save_path=f'{out}/03_ensemble_heatmap.png')
        plt.close(fig)
        print(f"  ✓ Saved: {out}/03_ensemble_heatmap.png")
    else:
        print("  Heatmap SKIPPED (--quick mode)")

    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"\n  All outputs saved to: {os.path.abspath(out)}/")
    print(f"  Total runtime: {elapsed:.1f} seconds\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
