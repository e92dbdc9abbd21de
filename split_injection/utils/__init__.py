"""
Utility modules for split injection calculations.

This package provides constants, input validation and plotting used
throughout the split injection package.
"""

# Import key constants and conversions
from .constants import (
    US_PER_SECOND, DEG_PER_SEC_PER_RPM,
    LB_TO_MG, MG_TO_LB,
    time_to_angle_scale,
    BDC_INTAKE_ANGLE, DEFAULT_LAST_FEASIBLE_ANGLE
)

# Import validation functions
from .validation import (
    as_float_array, broadcast_inputs, find_missing_fields
)

# Import plotting functions
from .plotting import (
    save_plot, plot_injection_windows, plot_pulsewidth_comparison
)

__all__ = [
    # Constants
    'US_PER_SECOND', 'DEG_PER_SEC_PER_RPM',
    'LB_TO_MG', 'MG_TO_LB',
    'time_to_angle_scale',
    'BDC_INTAKE_ANGLE', 'DEFAULT_LAST_FEASIBLE_ANGLE',

    # Validation
    'as_float_array', 'broadcast_inputs', 'find_missing_fields',

    # Plotting
    'save_plot', 'plot_injection_windows', 'plot_pulsewidth_comparison'
]
