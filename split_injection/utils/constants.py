"""
Constants module for split injection calculations.

This module provides time and angle conversion factors, unit conversions and
reference values used throughout the split injection package.
"""

# Time conversion factors
US_PER_SECOND = 1.0e6  # microseconds per second
SECONDS_PER_MINUTE = 60.0
DEG_PER_REV = 360.0  # crank degrees per revolution

# Crank degrees swept per second at 1 RPM: 360 / 60
DEG_PER_SEC_PER_RPM = DEG_PER_REV / SECONDS_PER_MINUTE

# Unit conversion factors
LB_TO_MG = 453592.37  # Convert pounds to milligrams
MG_TO_LB = 1.0 / LB_TO_MG  # Convert milligrams to pounds


def time_to_angle_scale(engine_speed):
    """
    Microseconds elapsed per crank degree at a given engine speed.

    Args:
        engine_speed: Engine speed in RPM (scalar or array)

    Returns:
        Time per crank degree in microseconds
    """
    return US_PER_SECOND / (DEG_PER_SEC_PER_RPM * engine_speed)


# Crank angle reference values (deg BTDC of the power stroke)
BDC_INTAKE_ANGLE = 180.0  # BDC at the end of the intake stroke
DEFAULT_LAST_FEASIBLE_ANGLE = BDC_INTAKE_ANGLE  # default end-of-injection limit

