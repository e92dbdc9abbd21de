"""
Split injection timing for direct-injection engines.

This package converts a desired fuel mass into injector pulsewidths and
crank-angle injection windows for one, two or three intake-stroke shots,
with the active shot count selected at run time through an InjectionContext.
"""

from .errors import (
    SplitInjectionError, MissingCalibrationFieldError, InvalidCalibrationFieldError,
    UnsupportedShotCountError, InvalidShotCountError, NoActiveCalculatorError,
    InvalidArgumentError
)
from .calibration import FunctionLookup, TableLookup, CalibrationSet, SeparationSpec
from .injection import InjectionContext, ShotCount

__all__ = [
    # Errors
    'SplitInjectionError', 'MissingCalibrationFieldError', 'InvalidCalibrationFieldError',
    'UnsupportedShotCountError', 'InvalidShotCountError', 'NoActiveCalculatorError',
    'InvalidArgumentError',

    # Calibration
    'FunctionLookup', 'TableLookup', 'CalibrationSet', 'SeparationSpec',

    # Injection
    'InjectionContext', 'ShotCount'
]
