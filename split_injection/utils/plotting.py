"""
Plotting utilities for split injection results.

This module provides plotting functions for visualising injection windows
and pulsewidths produced by evaluate_event_record.
"""

import os
import logging
from typing import Dict, Optional

import numpy as np
import matplotlib.pyplot as plt
import pandas as pd

from .constants import BDC_INTAKE_ANGLE

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Plotting")


# Default style settings for plots
DEFAULT_FIG_SIZE = (12, 8)
DEFAULT_DPI = 150
DEFAULT_LINE_WIDTH = 2
DEFAULT_GRID_ALPHA = 0.3
DEFAULT_SAVE_FORMAT = 'png'

SHOT_COLORS = ['#1f77b4', '#ff7f0e', '#2ca02c']


def save_plot(fig: plt.Figure, filename: str, directory: Optional[str] = None,
             format: str = DEFAULT_SAVE_FORMAT, dpi: int = DEFAULT_DPI) -> str:
    """
    Save a plot to file with proper directory handling.

    Args:
        fig: Matplotlib figure to save
        filename: Base filename (without extension)
        directory: Directory to save in (created if doesn't exist)
        format: File format ('png', 'pdf', 'svg', etc.)
        dpi: Resolution for raster formats

    Returns:
        Full path to saved file
    """
    if '.' in filename:
        base, ext = os.path.splitext(filename)
        if ext[1:].lower() != format.lower():
            logger.warning(f"Filename extension ({ext}) doesn't match format ({format}). Using {format}.")
        filename = base

    if directory:
        os.makedirs(directory, exist_ok=True)
        filepath = os.path.join(directory, f"{filename}.{format}")
    else:
        filepath = f"{filename}.{format}"

    fig.savefig(filepath, format=format, dpi=dpi, bbox_inches='tight')
    logger.info(f"Plot saved to {filepath}")

    return filepath


def plot_injection_windows(results: pd.DataFrame, x_column: str = 'engine_speed_rpm',
                           last_feasible_angle: float = BDC_INTAKE_ANGLE,
                           title: Optional[str] = None) -> plt.Figure:
    """
    Plot start and end of injection for every shot against an event column.

    Args:
        results: DataFrame returned by evaluate_event_record
        x_column: Column used for the horizontal axis
        last_feasible_angle: Last feasible end of injection drawn as a reference line
        title: Optional plot title

    Returns:
        Matplotlib figure
    """
    num_shots = int(results['num_shots'].iloc[0])
    x = results[x_column].to_numpy()

    fig, ax = plt.subplots(figsize=DEFAULT_FIG_SIZE)
    for shot in range(num_shots):
        color = SHOT_COLORS[shot % len(SHOT_COLORS)]
        soi = results[f'soi_{shot + 1}_deg'].to_numpy()
        eoi = results[f'eoi_{shot + 1}_deg'].to_numpy()
        ax.fill_between(x, soi, eoi, color=color, alpha=0.3)
        ax.plot(x, soi, color=color, linewidth=DEFAULT_LINE_WIDTH, label=f'Shot {shot + 1} SOI')
        ax.plot(x, eoi, color=color, linewidth=DEFAULT_LINE_WIDTH, linestyle='--',
                label=f'Shot {shot + 1} EOI')

    ax.axhline(last_feasible_angle, color='red', linestyle=':', label='Last feasible angle')

    infeasible = ~results['constraint_met'].to_numpy(dtype=bool)
    if np.any(infeasible):
        ax.scatter(x[infeasible], np.full(np.sum(infeasible), last_feasible_angle),
                   marker='x', color='red', zorder=5, label='Constraint not met')

    ax.set_xlabel(x_column.replace('_', ' '))
    ax.set_ylabel('Crank angle [deg BTDC power stroke]')
    ax.set_title(title or f'{num_shots} Shot Injection Windows')
    ax.grid(True, alpha=DEFAULT_GRID_ALPHA)
    ax.legend()

    return fig


def plot_pulsewidth_comparison(results_by_shots: Dict[int, pd.DataFrame],
                               x_column: str = 'fuel_mass_lb') -> plt.Figure:
    """
    Compare per-shot total and effective pulsewidths across shot counts.

    Args:
        results_by_shots: Mapping of shot count to evaluated DataFrame
        x_column: Column used for the horizontal axis

    Returns:
        Matplotlib figure
    """
    fig, (ax_total, ax_eff) = plt.subplots(1, 2, figsize=DEFAULT_FIG_SIZE, sharex=True)

    for index, (num_shots, results) in enumerate(sorted(results_by_shots.items())):
        color = SHOT_COLORS[index % len(SHOT_COLORS)]
        ordered = results.sort_values(x_column)
        ax_total.plot(ordered[x_column], ordered['total_pw_us'], color=color,
                      linewidth=DEFAULT_LINE_WIDTH, label=f'{num_shots} shot')
        ax_eff.plot(ordered[x_column], ordered['effective_pw_us'], color=color,
                    linewidth=DEFAULT_LINE_WIDTH, label=f'{num_shots} shot')

    ax_total.set_title('Total pulsewidth per shot')
    ax_eff.set_title('Effective pulsewidth per shot')
    for ax in (ax_total, ax_eff):
        ax.set_xlabel(x_column.replace('_', ' '))
        ax.set_ylabel('Pulsewidth [us]')
        ax.grid(True, alpha=DEFAULT_GRID_ALPHA)
        ax.legend()

    plt.tight_layout()
    return fig
