"""
Shot count state machine for split injection.

This module provides the ShotCount enumeration and the ShotSelector, which
owns the active shot calculator and replaces it whenever a new shot count is
selected. All branching on shot count happens here, through a single
dispatch table; callers talk to whatever calculator is active.
"""

import logging
import numbers
from enum import Enum, auto
from typing import Optional

import numpy as np

from .shot_calculators import (
    SingleShotCalculator, TwoShotCalculator, ThreeShotCalculator
)
from ..calibration.calibration_set import CalibrationSet, SeparationSpec
from ..errors import (
    InvalidShotCountError, UnsupportedShotCountError, NoActiveCalculatorError
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Shot_Selector")

# Define module exports
__all__ = ['ShotCount', 'SelectorState', 'ShotSelector']


class ShotCount(Enum):
    """Enumeration of intake injection counts."""
    SINGLE = 1      # One intake shot
    DOUBLE = 2      # Two intake shots
    TRIPLE = 3      # Three intake shots
    QUADRUPLE = 4   # Reserved, no calculator

    @classmethod
    def coerce(cls, value) -> 'ShotCount':
        """
        Convert a user value to a ShotCount.

        Args:
            value: ShotCount, integral number 1-4, or a name such as 'DOUBLE' or 'DoubleShot'

        Returns:
            Matching ShotCount member

        Raises:
            InvalidShotCountError: If value does not name a shot count
        """
        if isinstance(value, cls):
            return value

        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key in (member.name.lower(), member.label.lower()):
                    return member
            raise InvalidShotCountError(value)

        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise InvalidShotCountError(value)
        if not np.isfinite(value) or float(value) != int(value):
            raise InvalidShotCountError(value)
        try:
            return cls(int(value))
        except ValueError:
            raise InvalidShotCountError(value) from None

    @property
    def label(self) -> str:
        """Display name, e.g. 'DoubleShot'."""
        return f"{self.name.capitalize()}Shot"


class SelectorState(Enum):
    """States of the shot selector."""
    UNINITIALIZED = auto()  # No shot count selected yet
    SINGLE_SHOT = auto()    # SingleShotCalculator active
    TWO_SHOT = auto()       # TwoShotCalculator active
    THREE_SHOT = auto()     # ThreeShotCalculator active


# Dispatch table: shot count -> (calculator class, selector state)
_CALCULATORS = {
    ShotCount.SINGLE: (SingleShotCalculator, SelectorState.SINGLE_SHOT),
    ShotCount.DOUBLE: (TwoShotCalculator, SelectorState.TWO_SHOT),
    ShotCount.TRIPLE: (ThreeShotCalculator, SelectorState.THREE_SHOT),
}


class ShotSelector:
    """
    Owns the active shot calculator and rebuilds it on every selection.

    A selection always discards the current calculator and constructs a new
    one, even when the shot count is unchanged. A failed selection leaves the
    previous calculator and state in place.
    """

    def __init__(self, calibration: CalibrationSet, separation: SeparationSpec):
        """
        Initialize the selector in the UNINITIALIZED state.

        Args:
            calibration: Calibration shared by every calculator the selector builds
            separation: Minimum shot separation passed to multi-shot calculators
        """
        self.calibration = calibration
        self.separation = separation

        self.state = SelectorState.UNINITIALIZED
        self.shot_count: Optional[ShotCount] = None
        self._calculator = None

    def select(self, shot_count: ShotCount) -> None:
        """
        Replace the active calculator with one for shot_count.

        Args:
            shot_count: Requested number of intake shots

        Raises:
            UnsupportedShotCountError: If no calculator exists for shot_count
        """
        if shot_count not in _CALCULATORS:
            logger.warning(f"Selection rejected: {shot_count.label} not supported, "
                           f"staying in {self.state.name}")
            raise UnsupportedShotCountError(shot_count.value)

        calculator_cls, new_state = _CALCULATORS[shot_count]
        if calculator_cls.num_shots == 1:
            calculator = calculator_cls(self.calibration)
        else:
            calculator = calculator_cls(self.calibration, self.separation)

        previous_state = self.state
        self._calculator = calculator
        self.state = new_state
        self.shot_count = shot_count
        logger.info(f"Shot selection: {previous_state.name} -> {new_state.name}")

    def get_calculator(self):
        """
        Get the active calculator.

        Returns:
            Active shot calculator

        Raises:
            NoActiveCalculatorError: If no shot count has been selected
        """
        if self._calculator is None:
            raise NoActiveCalculatorError()
        return self._calculator
