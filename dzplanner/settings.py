"""
Jump Settings & Planning Context
================================
User-configurable scalars for a jump and the immutable context every
pipeline call receives. Defaults are the usual single-jumper setup:
3000 m exit, 1200 m opening, 20 kt canopy descending at 3.5 m/s, left-hand
pattern with 100/200/300 m legs, 90 kt jump-run IAS.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from .exceptions import ConfigurationError


LANDING_PATTERNS  = ('LL', 'RR')
HEIGHT_REFERENCES = ('AGL', 'AMSL')
HEIGHT_UNITS      = ('m', 'ft')
CUTAWAY_STATES    = ('open', 'partially', 'collapsed')


@dataclass(frozen=True)
class LegHeights:
    """Pattern entry heights (m AGL) for final, base and downwind."""
    final: float = 100.0
    base: float = 200.0
    downwind: float = 300.0

    def __post_init__(self):
        if not (0 < self.final < self.base < self.downwind):
            raise ConfigurationError(
                f"Leg heights must satisfy 0 < final < base < downwind, got "
                f"{self.final}/{self.base}/{self.downwind}",
                field='leg_heights',
            )


@dataclass(frozen=True)
class JumpSettings:
    """
    Complete specification of one jump.

    Altitudes are metres AGL, speeds in the unit named by the field.
    """
    exit_altitude: float = 3000.0          # m AGL
    opening_altitude: float = 1200.0       # m AGL
    descent_rate: float = 3.5              # m/s under canopy
    canopy_speed_kt: float = 20.0          # kt canopy airspeed
    leg_heights: LegHeights = field(default_factory=LegHeights)
    landing_pattern: str = 'LL'            # left-hand (LL) / right-hand (RR)
    landing_direction: Optional[float] = None   # custom final course, deg

    aircraft_ias_kt: float = 90.0
    number_of_jumpers: int = 5
    separation_sec: Optional[float] = None      # None: derived from TAS
    jump_run_direction: Optional[float] = None  # custom track, deg
    jump_run_forward_offset: float = 0.0        # m along track
    jump_run_lateral_offset: float = 0.0        # m right of track

    interpolation_step: float = 200.0      # in height_unit
    height_reference: str = 'AGL'
    height_unit: str = 'm'                 # profile step and display heights
    safety_height: float = 0.0             # m
    cutaway_altitude: float = 1000.0       # m AGL
    cutaway_state: str = 'partially'

    def __post_init__(self):
        positive = {
            'exit_altitude': self.exit_altitude,
            'opening_altitude': self.opening_altitude,
            'descent_rate': self.descent_rate,
            'canopy_speed_kt': self.canopy_speed_kt,
            'aircraft_ias_kt': self.aircraft_ias_kt,
            'interpolation_step': self.interpolation_step,
        }
        for name, value in positive.items():
            if not (math.isfinite(value) and value > 0):
                raise ConfigurationError(f"{name} must be positive, got {value}",
                                         field=name)

        if self.opening_altitude >= self.exit_altitude:
            raise ConfigurationError(
                f"Opening altitude {self.opening_altitude} m must be below "
                f"exit altitude {self.exit_altitude} m",
                field='opening_altitude',
            )
        if self.number_of_jumpers < 1:
            raise ConfigurationError("At least one jumper is required",
                                     field='number_of_jumpers')
        if self.separation_sec is not None and self.separation_sec <= 0:
            raise ConfigurationError("Separation must be positive",
                                     field='separation_sec')
        if self.safety_height < 0:
            raise ConfigurationError("Safety height cannot be negative",
                                     field='safety_height')
        if self.landing_pattern not in LANDING_PATTERNS:
            raise ConfigurationError(
                f"Unknown landing pattern '{self.landing_pattern}'. "
                f"Available: {list(LANDING_PATTERNS)}",
                field='landing_pattern',
            )
        if self.height_reference not in HEIGHT_REFERENCES:
            raise ConfigurationError(
                f"Unknown height reference '{self.height_reference}'. "
                f"Available: {list(HEIGHT_REFERENCES)}",
                field='height_reference',
            )
        if self.height_unit not in HEIGHT_UNITS:
            raise ConfigurationError(
                f"Unknown height unit '{self.height_unit}'. "
                f"Available: {list(HEIGHT_UNITS)}",
                field='height_unit',
            )
        if self.cutaway_state not in CUTAWAY_STATES:
            raise ConfigurationError(
                f"Unknown cutaway state '{self.cutaway_state}'. "
                f"Available: {list(CUTAWAY_STATES)}",
                field='cutaway_state',
            )

    @property
    def left_hand(self) -> bool:
        return self.landing_pattern == 'LL'


@dataclass(frozen=True)
class PlanningContext:
    """Where and how to plan: the drop zone and the jump settings."""
    lat: float
    lng: float
    elevation: Optional[float]             # m ASL, None when unknown
    settings: JumpSettings = field(default_factory=JumpSettings)

    @property
    def has_elevation(self) -> bool:
        return self.elevation is not None and math.isfinite(self.elevation)
