"""
Split injection context.

This module provides the InjectionContext, the single entry point a host
uses for split injection calculations. The context holds the desired shot
count, owns the ShotSelector and forwards every calculation to the
calculator the selector currently has active.
"""

import os
import logging
from typing import Mapping, Optional, Union

import yaml

from .shot_selector import ShotCount, ShotSelector
from ..calibration.calibration_set import CalibrationSet, SeparationSpec
from ..utils.constants import DEFAULT_LAST_FEASIBLE_ANGLE

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Injection_Context")

# Define module exports
__all__ = ['InjectionContext']


class InjectionContext:
    """
    Split injection context.

    Setting the shot count validates the request and then synchronously
    rebuilds the active calculator, so a calculation made after
    set_shot_count returns always uses the new shot count.
    """

    def __init__(self, calibration: Union[CalibrationSet, Mapping],
                 separation: Union[SeparationSpec, float],
                 shot_count: Optional[Union[ShotCount, int, str]] = None):
        """
        Initialize the injection context.

        Args:
            calibration: CalibrationSet, or a mapping holding the calibration fields
            separation: SeparationSpec, or the minimum separation between intake shots in microseconds
            shot_count: Optional initial number of intake shots; the context
                        stays uninitialized until a shot count is set
        """
        if not isinstance(calibration, CalibrationSet):
            calibration = CalibrationSet(calibration)
        if not isinstance(separation, SeparationSpec):
            separation = SeparationSpec(separation)

        self.calibration = calibration
        self.separation = separation
        self._selector = ShotSelector(calibration, separation)

        if shot_count is not None:
            self.set_shot_count(shot_count)

    @classmethod
    def from_config(cls, config_path: str) -> 'InjectionContext':
        """
        Create an InjectionContext from a YAML configuration file.

        The file must hold a 'calibration' section and a 'separation_us'
        value, and may hold an initial 'shot_count'.

        Args:
            config_path: Path to the configuration file

        Returns:
            InjectionContext instance
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Injection configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        if 'calibration' not in config or 'separation_us' not in config:
            raise ValueError(f"{config_path} must define 'calibration' and 'separation_us'")

        calibration = CalibrationSet(config['calibration'], source=config_path)
        return cls(calibration, config['separation_us'], config.get('shot_count'))

    def set_shot_count(self, shot_count: Union[ShotCount, int, str]) -> None:
        """
        Set the desired number of intake shots.

        The calculator is rebuilt before this method returns, including when
        shot_count equals the current value.

        Args:
            shot_count: ShotCount, integer 1-3, or a shot count name

        Raises:
            InvalidShotCountError: If shot_count is not a shot count value
            UnsupportedShotCountError: If no calculator exists for shot_count
        """
        requested = ShotCount.coerce(shot_count)
        logger.debug(f"Shot count requested: {requested.label}")
        self._selector.select(requested)

    @property
    def shot_count(self) -> Optional[ShotCount]:
        """Current shot count, or None before the first successful set."""
        return self._selector.shot_count

    @property
    def state(self):
        """Current selector state."""
        return self._selector.state

    @property
    def calculator(self):
        """Active shot calculator; raises NoActiveCalculatorError before the first set."""
        return self._selector.get_calculator()

    def calculate_pulsewidth(self, fuel_mass, rail_pressure, rail_temp):
        """
        Calculate the total and effective injection pulsewidths.

        Args:
            fuel_mass: Desired fuel mass [lb]
            rail_pressure: Fuel rail pressure [psi]
            rail_temp: Inferred fuel rail temperature [deg F]

        Returns:
            Tuple of (total pulsewidth, effective pulsewidth) in microseconds
        """
        return self.calculator.calculate_pulsewidth(fuel_mass, rail_pressure, rail_temp)

    def calculate_injection_angles(self, fuel_mass, engine_speed, rail_pressure, rail_temp,
                                   start_angle, separation=None):
        """
        Calculate the start and end of injection angles.

        Args:
            fuel_mass: Desired fuel mass [lb]
            engine_speed: Engine speed [RPM]
            rail_pressure: Fuel rail pressure [psi]
            rail_temp: Inferred fuel rail temperature [deg F]
            start_angle: Start of injection [deg BTDC power stroke]
            separation: Separation time between shots [us]; required for
                        multiple shots, ignored for a single shot

        Returns:
            Tuple of (start angle(s), end angle(s))
        """
        return self.calculator.calculate_injection_angles(
            fuel_mass, engine_speed, rail_pressure, rail_temp, start_angle, separation
        )

    def constraint_met(self, fuel_mass, engine_speed, rail_pressure, rail_temp, start_angle,
                       last_feasible_angle=DEFAULT_LAST_FEASIBLE_ANGLE, separation=None):
        """
        Check that injection ends before the last feasible angle.

        Args:
            fuel_mass: Desired fuel mass [lb]
            engine_speed: Engine speed [RPM]
            rail_pressure: Fuel rail pressure [psi]
            rail_temp: Inferred fuel rail temperature [deg F]
            start_angle: Start of injection [deg BTDC power stroke]
            last_feasible_angle: Last feasible end of injection [deg BTDC power stroke],
                                 BDC intake by default
            separation: Separation time between shots [us]; required for multiple shots

        Returns:
            Boolean (or boolean array for vector inputs)
        """
        if last_feasible_angle is None:
            last_feasible_angle = DEFAULT_LAST_FEASIBLE_ANGLE
        return self.calculator.constraint_met(
            fuel_mass, engine_speed, rail_pressure, rail_temp, start_angle,
            last_feasible_angle, separation
        )

    def __repr__(self) -> str:
        label = self.shot_count.label if self.shot_count is not None else 'Uninitialized'
        return f"InjectionContext(shot_count={label}, separation={self.separation.min_separation} us)"
