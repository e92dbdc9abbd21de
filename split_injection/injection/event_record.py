"""
Engine event record evaluation.

This module runs a table of engine events (one row per injection event)
through an InjectionContext in a single vectorised call and returns the
pulsewidths, injection windows and constraint result for every row as a
pandas DataFrame.
"""

import os
import logging
from typing import Dict, Optional

import numpy as np
import pandas as pd

from .injection_context import InjectionContext
from ..errors import InvalidArgumentError
from ..utils.constants import DEFAULT_LAST_FEASIBLE_ANGLE

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Event_Record")

# Define module exports
__all__ = [
    'REQUIRED_COLUMNS', 'load_event_record',
    'evaluate_event_record', 'summarize_event_record'
]

# Column name -> calculation argument
REQUIRED_COLUMNS = {
    'fuel_mass_lb': 'fuel_mass',
    'engine_speed_rpm': 'engine_speed',
    'rail_pressure_psi': 'rail_pressure',
    'rail_temp_f': 'rail_temp',
    'soi_deg': 'start_angle',
}
SEPARATION_COLUMN = 'separation_us'
LAST_FEASIBLE_COLUMN = 'last_feasible_deg'


def load_event_record(file_path: str) -> pd.DataFrame:
    """
    Load an engine event record from a CSV file.

    Args:
        file_path: Path to a CSV file containing at least REQUIRED_COLUMNS

    Returns:
        DataFrame with one row per injection event
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Event record not found: {file_path}")

    record = pd.read_csv(file_path)
    missing = [column for column in REQUIRED_COLUMNS if column not in record.columns]
    if missing:
        raise InvalidArgumentError(f"Event record {file_path} is missing columns: {', '.join(missing)}")

    logger.info(f"Loaded {len(record)} events from {file_path}")
    return record


def evaluate_event_record(context: InjectionContext, record: pd.DataFrame,
                          separation: Optional[float] = None,
                          last_feasible_angle: float = DEFAULT_LAST_FEASIBLE_ANGLE) -> pd.DataFrame:
    """
    Evaluate every event in a record with the context's active calculator.

    Per-row 'separation_us' and 'last_feasible_deg' columns take precedence
    over the separation and last_feasible_angle arguments.

    Args:
        context: InjectionContext with a shot count set
        record: DataFrame containing REQUIRED_COLUMNS
        separation: Separation time between shots [us] for multi-shot contexts
        last_feasible_angle: Last feasible end of injection [deg BTDC power stroke]

    Returns:
        Copy of record with pulsewidth, per-shot angle and constraint columns added
    """
    missing = [column for column in REQUIRED_COLUMNS if column not in record.columns]
    if missing:
        raise InvalidArgumentError(f"Event record is missing columns: {', '.join(missing)}")
    if record.empty:
        raise InvalidArgumentError("Event record contains no events")

    args = {arg: record[column].to_numpy(dtype=float) for column, arg in REQUIRED_COLUMNS.items()}
    if SEPARATION_COLUMN in record.columns:
        separation = record[SEPARATION_COLUMN].to_numpy(dtype=float)
    if LAST_FEASIBLE_COLUMN in record.columns:
        last_feasible_angle = record[LAST_FEASIBLE_COLUMN].to_numpy(dtype=float)

    num_shots = context.calculator.num_shots
    if num_shots > 1 and separation is None:
        raise InvalidArgumentError(f"A separation is required to evaluate {num_shots} shot injection")

    total, effective = context.calculate_pulsewidth(
        args['fuel_mass'], args['rail_pressure'], args['rail_temp']
    )
    starts, ends = context.calculate_injection_angles(
        args['fuel_mass'], args['engine_speed'], args['rail_pressure'],
        args['rail_temp'], args['start_angle'], separation
    )
    ok = context.constraint_met(
        args['fuel_mass'], args['engine_speed'], args['rail_pressure'],
        args['rail_temp'], args['start_angle'], last_feasible_angle, separation
    )

    # Single shot angles come back as (P,); lay everything out as (P, shots)
    starts = np.reshape(starts, (len(record), num_shots))
    ends = np.reshape(ends, (len(record), num_shots))

    results = record.copy()
    results['num_shots'] = num_shots
    results['total_pw_us'] = total
    results['effective_pw_us'] = effective
    for shot in range(num_shots):
        results[f'soi_{shot + 1}_deg'] = starts[:, shot]
        results[f'eoi_{shot + 1}_deg'] = ends[:, shot]
    results['constraint_met'] = ok

    logger.info(f"Evaluated {len(results)} events with {num_shots} shot injection: "
                f"{int(np.sum(ok))} within the feasible window")
    return results


def summarize_event_record(results: pd.DataFrame) -> Dict:
    """
    Summarise an evaluated event record.

    Args:
        results: DataFrame returned by evaluate_event_record

    Returns:
        Dictionary with event count, pulsewidth statistics and feasibility
    """
    return {
        'num_events': len(results),
        'num_shots': int(results['num_shots'].iloc[0]),
        'mean_total_pw_us': float(results['total_pw_us'].mean()),
        'max_total_pw_us': float(results['total_pw_us'].max()),
        'mean_effective_pw_us': float(results['effective_pw_us'].mean()),
        'feasible_fraction': float(results['constraint_met'].mean()),
        'all_feasible': bool(results['constraint_met'].all())
    }
