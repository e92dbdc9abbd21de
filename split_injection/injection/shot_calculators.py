"""
Shot calculators for direct-injection split fuel delivery.

This module provides the family of calculators that convert a desired fuel
mass into injector pulsewidths and crank-angle injection windows for one,
two or three intake-stroke shots:

- SingleShotCalculator: the base conversion, covering slope, the minimum
  effective pulsewidth clip and the opening/closing delay offset
- TwoShotCalculator / ThreeShotCalculator: split the single-shot effective
  pulsewidth across the shots and space the shots by a separation time
  clipped to a calibrated minimum

All inputs may be scalars or equal-length 1-D vectors; vector inputs are
evaluated elementwise. Angles are in degrees BTDC of the power stroke.
"""

import logging
from typing import Optional, Tuple, Union

import numpy as np

from ..calibration.calibration_set import CalibrationSet, SeparationSpec
from ..errors import InvalidArgumentError, InvalidCalibrationFieldError
from ..utils.constants import US_PER_SECOND, DEFAULT_LAST_FEASIBLE_ANGLE, time_to_angle_scale
from ..utils.validation import (
    as_float_array, broadcast_inputs, check_non_negative, check_positive
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Shot_Calculators")

# Define module exports
__all__ = [
    'SingleShotCalculator', 'MultiShotCalculator',
    'TwoShotCalculator', 'ThreeShotCalculator'
]

ArrayLike = Union[float, np.ndarray]

# Sign rules applied to named calculation inputs
_NON_NEGATIVE_INPUTS = ('fuel_mass', 'rail_pressure', 'separation')
_POSITIVE_INPUTS = ('engine_speed',)


def _prepare_inputs(**inputs):
    """
    Validate and broadcast named calculation inputs.

    Returns:
        Tuple of (list of float arrays in argument order, True if all inputs were scalar)
    """
    arrays = {}
    for name, value in inputs.items():
        arr = as_float_array(value, name)
        if name in _NON_NEGATIVE_INPUTS:
            check_non_negative(arr, name)
        elif name in _POSITIVE_INPUTS:
            check_positive(arr, name)
        arrays[name] = arr
    return broadcast_inputs(arrays)


def _output(values: np.ndarray, scalar: bool):
    """Return a float for scalar calls, the array otherwise."""
    return float(values) if scalar else values


class SingleShotCalculator:
    """
    Single intake injection calculator.

    Converts a fuel mass into total and effective pulsewidths and into a
    start/end of injection window. The calculator is immutable and holds no
    state between calls.
    """

    num_shots = 1

    def __init__(self, calibration: CalibrationSet):
        """
        Initialize the calculator.

        Args:
            calibration: Injector calibration set
        """
        if not isinstance(calibration, CalibrationSet):
            raise InvalidCalibrationFieldError(
                'calibration', f"expected CalibrationSet, got {type(calibration).__name__}"
            )
        self.calibration = calibration

    def calculate_slope(self, rail_pressure: ArrayLike, rail_temp: ArrayLike) -> np.ndarray:
        """
        Calculate the corrected injector slope.

        Args:
            rail_pressure: Fuel rail pressure [psi]
            rail_temp: Inferred fuel rail temperature [deg F]

        Returns:
            Injector slope, slope curve divided by the temperature correction
        """
        cal = self.calibration
        return cal.injector_slope.interp(rail_pressure) / cal.slope_correction.interp(rail_temp)

    def calculate_offset(self, rail_pressure: ArrayLike, rail_temp: ArrayLike,
                         effective_pulsewidth: ArrayLike) -> np.ndarray:
        """
        Calculate the injector offset added to the effective pulsewidth.

        Args:
            rail_pressure: Fuel rail pressure [psi]
            rail_temp: Inferred fuel rail temperature [deg F]
            effective_pulsewidth: Effective pulsewidth [us]

        Returns:
            Offset in microseconds: opening delay + adjustment + offset correction - closing delay
        """
        cal = self.calibration
        return (cal.opening_delay.interp(rail_pressure) + cal.pulsewidth_adjustment +
                cal.offset_correction.interp(rail_temp) -
                cal.closing_delay.interp(rail_pressure, effective_pulsewidth))

    def _effective_pulsewidth(self, fuel_mass: np.ndarray, rail_pressure: np.ndarray,
                              rail_temp: np.ndarray) -> np.ndarray:
        """Effective pulsewidth for the whole fuel mass, with the lower clip applied."""
        slope = self.calculate_slope(rail_pressure, rail_temp)
        if not np.all(np.isfinite(slope)) or np.any(slope <= 0):
            raise InvalidArgumentError("Injector slope must be positive at the requested operating point")

        effective = US_PER_SECOND * fuel_mass / slope
        return np.maximum(effective, self.calibration.min_effective_pulsewidth)

    def _pulsewidths(self, fuel_mass: np.ndarray, rail_pressure: np.ndarray,
                     rail_temp: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Total and effective pulsewidths for validated array inputs."""
        effective = self._effective_pulsewidth(fuel_mass, rail_pressure, rail_temp)
        total = effective + self.calculate_offset(rail_pressure, rail_temp, effective)
        return total, effective

    def calculate_pulsewidth(self, fuel_mass: ArrayLike, rail_pressure: ArrayLike,
                             rail_temp: ArrayLike) -> Tuple[ArrayLike, ArrayLike]:
        """
        Calculate the total and effective injection pulsewidths.

        Args:
            fuel_mass: Desired fuel mass [lb]
            rail_pressure: Fuel rail pressure [psi]
            rail_temp: Inferred fuel rail temperature [deg F]

        Returns:
            Tuple of (total pulsewidth, effective pulsewidth) in microseconds,
            per shot for multi-shot calculators
        """
        (mf, frp, frt), scalar = _prepare_inputs(
            fuel_mass=fuel_mass, rail_pressure=rail_pressure, rail_temp=rail_temp
        )
        total, effective = self._pulsewidths(mf, frp, frt)
        return _output(total, scalar), _output(effective, scalar)

    def calculate_injection_angles(self, fuel_mass: ArrayLike, engine_speed: ArrayLike,
                                   rail_pressure: ArrayLike, rail_temp: ArrayLike,
                                   start_angle: ArrayLike,
                                   separation: Optional[ArrayLike] = None) -> Tuple[ArrayLike, ArrayLike]:
        """
        Calculate the start and end of injection angles.

        The start angle is passed through. Because angles are measured before
        TDC of the power stroke, the end of injection is numerically smaller
        than the start.

        Args:
            fuel_mass: Desired fuel mass [lb]
            engine_speed: Engine speed [RPM]
            rail_pressure: Fuel rail pressure [psi]
            rail_temp: Inferred fuel rail temperature [deg F]
            start_angle: Start of injection [deg BTDC power stroke]
            separation: Ignored for a single shot

        Returns:
            Tuple of (start of injection, end of injection) angles
        """
        if separation is not None:
            logger.debug("Separation time ignored for single shot injection")

        (mf, speed, frp, frt, soi), scalar = _prepare_inputs(
            fuel_mass=fuel_mass, engine_speed=engine_speed, rail_pressure=rail_pressure,
            rail_temp=rail_temp, start_angle=start_angle
        )
        eoi = self._single_end_angle(mf, speed, frp, frt, soi)
        return _output(soi, scalar), _output(eoi, scalar)

    def _single_end_angle(self, mf, speed, frp, frt, soi) -> np.ndarray:
        time2angle = time_to_angle_scale(speed)  # us per crank degree
        total, _ = self._pulsewidths(mf, frp, frt)
        return soi - total / time2angle

    def constraint_met(self, fuel_mass: ArrayLike, engine_speed: ArrayLike,
                       rail_pressure: ArrayLike, rail_temp: ArrayLike, start_angle: ArrayLike,
                       last_feasible_angle: ArrayLike = DEFAULT_LAST_FEASIBLE_ANGLE,
                       separation: Optional[ArrayLike] = None):
        """
        Check that injection ends before the last feasible angle.

        Args:
            fuel_mass: Desired fuel mass [lb]
            engine_speed: Engine speed [RPM]
            rail_pressure: Fuel rail pressure [psi]
            rail_temp: Inferred fuel rail temperature [deg F]
            start_angle: Start of injection [deg BTDC power stroke]
            last_feasible_angle: Last feasible end of injection [deg BTDC power stroke]
            separation: Ignored for a single shot

        Returns:
            True where the end of injection angle is below last_feasible_angle
        """
        if separation is not None:
            logger.debug("Separation time ignored for single shot injection")

        (mf, speed, frp, frt, soi, last), scalar = _prepare_inputs(
            fuel_mass=fuel_mass, engine_speed=engine_speed, rail_pressure=rail_pressure,
            rail_temp=rail_temp, start_angle=start_angle, last_feasible_angle=last_feasible_angle
        )
        ok = self._single_end_angle(mf, speed, frp, frt, soi) < last
        return bool(ok) if scalar else ok

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.calibration!r})"


class MultiShotCalculator(SingleShotCalculator):
    """
    Multiple intake injection calculator.

    The single-shot effective pulsewidth for the total fuel mass is divided
    evenly across num_shots shots and the offset is recomputed for the
    smaller per-shot pulsewidth. Successive shots start one clipped
    separation angle apart, and each shot's end angle is its start angle
    plus the per-shot pulsewidth angle.
    """

    num_shots = None

    def __init__(self, calibration: CalibrationSet, separation: SeparationSpec):
        """
        Initialize the calculator.

        Args:
            calibration: Injector calibration set
            separation: Minimum separation between intake shots
        """
        super().__init__(calibration)
        if not isinstance(separation, SeparationSpec):
            raise InvalidArgumentError(
                f"separation must be a SeparationSpec, got {type(separation).__name__}"
            )
        self.separation = separation

    def _pulsewidths(self, fuel_mass: np.ndarray, rail_pressure: np.ndarray,
                     rail_temp: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Per-shot total and effective pulsewidths for validated array inputs."""
        effective = self._effective_pulsewidth(fuel_mass, rail_pressure, rail_temp) / self.num_shots
        total = effective + self.calculate_offset(rail_pressure, rail_temp, effective)
        return total, effective

    def _shot_angles(self, mf, speed, frp, frt, soi, sep) -> Tuple[np.ndarray, np.ndarray]:
        time2angle = time_to_angle_scale(speed)  # us per crank degree
        separation_angle = self.separation.clip(sep) / time2angle

        total, _ = self._pulsewidths(mf, frp, frt)
        pulsewidth_angle = total / time2angle

        starts = np.empty(soi.shape + (self.num_shots,))
        starts[..., 0] = soi
        for shot in range(1, self.num_shots):
            starts[..., shot] = starts[..., shot - 1] + separation_angle

        # NOTE: end angles advance from each start, unlike the single shot subtraction
        ends = starts + pulsewidth_angle[..., np.newaxis]
        return starts, ends

    def calculate_injection_angles(self, fuel_mass: ArrayLike, engine_speed: ArrayLike,
                                   rail_pressure: ArrayLike, rail_temp: ArrayLike,
                                   start_angle: ArrayLike,
                                   separation: Optional[ArrayLike] = None) -> Tuple[np.ndarray, np.ndarray]:
        """
        Calculate the start and end of injection angles for every shot.

        Args:
            fuel_mass: Desired total fuel mass [lb]
            engine_speed: Engine speed [RPM]
            rail_pressure: Fuel rail pressure [psi]
            rail_temp: Inferred fuel rail temperature [deg F]
            start_angle: Start of the first injection [deg BTDC power stroke]
            separation: Requested separation time between shots [us], floored at the minimum

        Returns:
            Tuple of (start angles, end angles), shape (num_shots,) for scalar
            inputs or (P, num_shots) for length-P vector inputs
        """
        if separation is None:
            raise InvalidArgumentError(f"separation is required for {self.num_shots} shot injection")

        (mf, speed, frp, frt, soi, sep), _ = _prepare_inputs(
            fuel_mass=fuel_mass, engine_speed=engine_speed, rail_pressure=rail_pressure,
            rail_temp=rail_temp, start_angle=start_angle, separation=separation
        )
        return self._shot_angles(mf, speed, frp, frt, soi, sep)

    def constraint_met(self, fuel_mass: ArrayLike, engine_speed: ArrayLike,
                       rail_pressure: ArrayLike, rail_temp: ArrayLike, start_angle: ArrayLike,
                       last_feasible_angle: ArrayLike = DEFAULT_LAST_FEASIBLE_ANGLE,
                       separation: Optional[ArrayLike] = None):
        """
        Check that every shot ends before the last feasible angle.

        Returns:
            True where all shot end angles are below last_feasible_angle
        """
        if separation is None:
            raise InvalidArgumentError(f"separation is required for {self.num_shots} shot injection")

        (mf, speed, frp, frt, soi, last, sep), scalar = _prepare_inputs(
            fuel_mass=fuel_mass, engine_speed=engine_speed, rail_pressure=rail_pressure,
            rail_temp=rail_temp, start_angle=start_angle, last_feasible_angle=last_feasible_angle,
            separation=separation
        )
        _, ends = self._shot_angles(mf, speed, frp, frt, soi, sep)
        ok = np.all(ends < last[..., np.newaxis], axis=-1)
        return bool(ok) if scalar else ok

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.calibration!r}, {self.separation!r})"


class TwoShotCalculator(MultiShotCalculator):
    """Two intake injections separated by one gap."""

    num_shots = 2


class ThreeShotCalculator(MultiShotCalculator):
    """Three intake injections separated by two gaps."""

    num_shots = 3
