"""
Calibration module for split injection calculations.

This module provides the lookup curves and tables that characterise the
injector, and the calibration bundle and separation limit every shot
calculator is built from.
"""

# Import lookup primitives
from .lookup import FunctionLookup, TableLookup

# Import calibration data
from .calibration_set import (
    REQUIRED_CALIBRATION_FIELDS, CalibrationSet, SeparationSpec
)

__all__ = [
    # Lookups
    'FunctionLookup', 'TableLookup',

    # Calibration data
    'REQUIRED_CALIBRATION_FIELDS', 'CalibrationSet', 'SeparationSpec'
]
