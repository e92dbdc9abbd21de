"""
Injector calibration data for split injection calculations.

This module provides the CalibrationSet, the immutable bundle of injector
lookups and constants every shot calculator is built from, and the
SeparationSpec holding the minimum time between successive intake shots.
Calibrations can be built from any key-value mapping or loaded from YAML.
"""

import os
import logging
import numbers
from typing import Dict, Mapping, Optional

import numpy as np
import yaml

from .lookup import FunctionLookup, TableLookup
from ..errors import MissingCalibrationFieldError, InvalidCalibrationFieldError
from ..utils.validation import (
    find_missing_fields, report_missing_fields, validate_positive_scalar
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Calibration")

# Define module exports
__all__ = [
    'REQUIRED_CALIBRATION_FIELDS', 'CalibrationSet', 'SeparationSpec'
]


# Required calibration keys, in reporting order
REQUIRED_CALIBRATION_FIELDS = (
    'FNINJSLOPE1F',       # Injector slope vs rail pressure (1-D)
    'FNDINJSLPCOR',       # Injector slope correction vs rail temperature (1-D)
    'FNINJ_OP_DLY',       # Injector opening delay vs rail pressure (1-D)
    'FNFUL_INJ_OFF_COR',  # Injector offset correction vs rail temperature (1-D)
    'FNINJ_CL_DLY',       # Injector closing delay vs (rail pressure, effective pulsewidth) (2-D)
    'DIMINPW1',           # Minimum effective pulsewidth clip [us]
    'DIPWADJ',            # Pulsewidth adjustment [us]
    'NUMCYL',             # Number of cylinders
)


def _lookup_field(name: str, value, lookup_cls):
    """Return value as a lookup of lookup_cls, converting configuration entries."""
    if isinstance(value, lookup_cls):
        return value
    if isinstance(value, (dict, numbers.Real)) and not isinstance(value, bool):
        try:
            return lookup_cls.from_dict(value if isinstance(value, dict) else float(value), name=name)
        except ValueError as exc:
            raise InvalidCalibrationFieldError(name, str(exc)) from exc
    raise InvalidCalibrationFieldError(
        name, f"expected {lookup_cls.__name__}, got {type(value).__name__}"
    )


def _scalar_field(name: str, value) -> float:
    """Return value as a finite float."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidCalibrationFieldError(name, f"expected a number, got {type(value).__name__}")
    value = float(value)
    if not np.isfinite(value):
        raise InvalidCalibrationFieldError(name, "must be finite")
    return value


def _cylinder_field(name: str, value) -> int:
    """Return value as a positive integer cylinder count."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidCalibrationFieldError(name, f"expected an integer, got {type(value).__name__}")
    if not np.isfinite(value) or float(value) != int(value) or int(value) < 1:
        raise InvalidCalibrationFieldError(name, f"must be a positive integer, got {value!r}")
    return int(value)


class CalibrationSet:
    """
    Immutable injector calibration shared by every shot calculator.

    Holds the injector slope, slope correction, opening delay and offset
    correction curves, the closing delay table, the minimum effective
    pulsewidth clip, the pulsewidth adjustment and the cylinder count.
    """

    def __init__(self, calibration: Mapping, source: Optional[str] = None):
        """
        Initialize a calibration set from a key-value mapping.

        Keys are matched case-insensitively against REQUIRED_CALIBRATION_FIELDS.
        Lookup fields may be lookup objects, configuration dicts or numbers
        (flat curves); extra keys are ignored.

        Args:
            calibration: Mapping holding the required calibration fields
            source: Optional description of where the mapping came from, used in reports

        Raises:
            MissingCalibrationFieldError: If any required key is absent
            InvalidCalibrationFieldError: If a field has the wrong kind or value
        """
        if not isinstance(calibration, Mapping):
            raise InvalidCalibrationFieldError(
                'calibration', f"input must be a mapping, got {type(calibration).__name__}"
            )

        missing = find_missing_fields(calibration, REQUIRED_CALIBRATION_FIELDS)
        if missing:
            report_missing_fields(missing, source)
            raise MissingCalibrationFieldError(missing, source)

        # Case-insensitive view of the input
        fields = {}
        for key, value in calibration.items():
            name = str(key).upper()
            if name in fields:
                raise InvalidCalibrationFieldError(name, "key given more than once with different letter case")
            fields[name] = value

        self.injector_slope = _lookup_field('FNINJSLOPE1F', fields['FNINJSLOPE1F'], FunctionLookup)
        self.slope_correction = _lookup_field('FNDINJSLPCOR', fields['FNDINJSLPCOR'], FunctionLookup)
        self.opening_delay = _lookup_field('FNINJ_OP_DLY', fields['FNINJ_OP_DLY'], FunctionLookup)
        self.offset_correction = _lookup_field('FNFUL_INJ_OFF_COR', fields['FNFUL_INJ_OFF_COR'], FunctionLookup)
        self.closing_delay = _lookup_field('FNINJ_CL_DLY', fields['FNINJ_CL_DLY'], TableLookup)
        self.min_effective_pulsewidth = _scalar_field('DIMINPW1', fields['DIMINPW1'])  # us
        self.pulsewidth_adjustment = _scalar_field('DIPWADJ', fields['DIPWADJ'])  # us
        self.num_cylinders = _cylinder_field('NUMCYL', fields['NUMCYL'])

        self.source = source
        self._frozen = True
        logger.debug(f"Calibration set loaded{' from ' + source if source else ''}")

    def __setattr__(self, name, value):
        if getattr(self, '_frozen', False):
            raise AttributeError(f"CalibrationSet is immutable; cannot set '{name}'")
        super().__setattr__(name, value)

    @classmethod
    def from_config(cls, config_path: str) -> 'CalibrationSet':
        """
        Create a CalibrationSet from a YAML configuration file.

        The file may hold the calibration keys at top level or under a
        'calibration' section.

        Args:
            config_path: Path to the configuration file

        Returns:
            CalibrationSet instance
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Calibration file not found: {config_path}")

        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        return cls(config.get('calibration', config), source=config_path)

    def to_dict(self) -> Dict:
        """
        Convert the scalar calibration values to a dictionary.

        Returns:
            Dictionary with the scalar calibration values and lookup descriptions
        """
        return {
            'FNINJSLOPE1F': repr(self.injector_slope),
            'FNDINJSLPCOR': repr(self.slope_correction),
            'FNINJ_OP_DLY': repr(self.opening_delay),
            'FNFUL_INJ_OFF_COR': repr(self.offset_correction),
            'FNINJ_CL_DLY': repr(self.closing_delay),
            'DIMINPW1': self.min_effective_pulsewidth,
            'DIPWADJ': self.pulsewidth_adjustment,
            'NUMCYL': self.num_cylinders
        }

    def __repr__(self) -> str:
        return (f"CalibrationSet(DIMINPW1={self.min_effective_pulsewidth}, "
                f"DIPWADJ={self.pulsewidth_adjustment}, NUMCYL={self.num_cylinders})")


class SeparationSpec:
    """Minimum separation time between successive intake shots."""

    def __init__(self, min_separation: float):
        """
        Initialize the separation limit.

        Args:
            min_separation: Minimum time between intake shots in microseconds

        Raises:
            InvalidArgumentError: If min_separation is not strictly positive and finite
        """
        self.min_separation = validate_positive_scalar(min_separation, 'min_separation')  # us
        self._frozen = True

    def __setattr__(self, name, value):
        if getattr(self, '_frozen', False):
            raise AttributeError(f"SeparationSpec is immutable; cannot set '{name}'")
        super().__setattr__(name, value)

    def clip(self, separation: np.ndarray) -> np.ndarray:
        """
        Apply the minimum separation floor.

        Args:
            separation: Requested separation time(s) in microseconds

        Returns:
            Separation time(s) no smaller than min_separation
        """
        return np.maximum(separation, self.min_separation)

    def __repr__(self) -> str:
        return f"SeparationSpec(min_separation={self.min_separation})"
