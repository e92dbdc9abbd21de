"""
Injection module for split injection calculations.

This module provides the single and multi-shot calculators, the shot count
state machine that selects between them, the InjectionContext facade, and
batch evaluation of engine event records.
"""

# Import shot calculators
from .shot_calculators import (
    SingleShotCalculator, MultiShotCalculator,
    TwoShotCalculator, ThreeShotCalculator
)

# Import shot count state machine
from .shot_selector import ShotCount, SelectorState, ShotSelector

# Import context facade
from .injection_context import InjectionContext

# Import event record evaluation
from .event_record import (
    REQUIRED_COLUMNS, load_event_record,
    evaluate_event_record, summarize_event_record
)

__all__ = [
    # Calculators
    'SingleShotCalculator', 'MultiShotCalculator',
    'TwoShotCalculator', 'ThreeShotCalculator',

    # State machine
    'ShotCount', 'SelectorState', 'ShotSelector',

    # Context
    'InjectionContext',

    # Event records
    'REQUIRED_COLUMNS', 'load_event_record',
    'evaluate_event_record', 'summarize_event_record'
]
