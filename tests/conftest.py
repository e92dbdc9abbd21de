"""
Pytest configuration for the split injection test suite.

Provides calibration fixtures built from flat lookup curves so expected
pulsewidths and angles can be worked out by hand.
"""

import os
import sys

import matplotlib
import pytest

# Headless plotting backend for plot tests
matplotlib.use("Agg")

# Add project root to Python path for direct execution
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from split_injection.calibration import FunctionLookup, TableLookup, CalibrationSet
from split_injection.injection import InjectionContext


def flat_calibration_fields(slope=10.0, slope_correction=1.0, opening_delay=0.0,
                            offset_correction=0.0, closing_delay=0.0,
                            min_pulsewidth=100.0, adjustment=0.0, cylinders=4):
    """Calibration mapping with constant lookups."""
    return {
        'FNINJSLOPE1F': FunctionLookup.constant(slope, name='FNINJSLOPE1F'),
        'FNDINJSLPCOR': FunctionLookup.constant(slope_correction, name='FNDINJSLPCOR'),
        'FNINJ_OP_DLY': FunctionLookup.constant(opening_delay, name='FNINJ_OP_DLY'),
        'FNFUL_INJ_OFF_COR': FunctionLookup.constant(offset_correction, name='FNFUL_INJ_OFF_COR'),
        'FNINJ_CL_DLY': TableLookup.constant(closing_delay, name='FNINJ_CL_DLY'),
        'DIMINPW1': min_pulsewidth,
        'DIPWADJ': adjustment,
        'NUMCYL': cylinders,
    }


@pytest.fixture
def calibration_fields():
    """Flat calibration mapping: slope 10, no delays, 100 us clip."""
    return flat_calibration_fields()


@pytest.fixture
def calibration(calibration_fields):
    """Flat CalibrationSet."""
    return CalibrationSet(calibration_fields)


@pytest.fixture
def context(calibration):
    """Uninitialized InjectionContext with a 500 us minimum separation."""
    return InjectionContext(calibration, separation=500.0)


@pytest.fixture
def sample_config_path():
    """Path to the shipped injector calibration."""
    return os.path.join(project_root, 'configs', 'injection', 'di_injector.yaml')
