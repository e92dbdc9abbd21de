#!/usr/bin/env python3
"""
Split Injection Sweep

This script loads an injector calibration, builds an engine event sweep (or
reads a recorded event CSV), evaluates it with single, double and triple
intake injection, and reports which shot counts finish injecting before the
last feasible crank angle.
"""

import os
import sys
import numpy as np
import matplotlib.pyplot as plt
import pandas as pd
import yaml
from typing import Dict, Any

# Add project root to Python path for imports
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from split_injection.injection import (
    InjectionContext, ShotCount, load_event_record,
    evaluate_event_record, summarize_event_record
)
from split_injection.errors import SplitInjectionError
from split_injection.utils.constants import MG_TO_LB, DEFAULT_LAST_FEASIBLE_ANGLE
from split_injection.utils.plotting import (
    save_plot, plot_injection_windows, plot_pulsewidth_comparison
)


def load_configurations() -> Dict[str, Any]:
    """
    Load injection and sweep configurations.

    Returns:
        dict: Dictionary containing configuration settings
    """
    config = {
        'injection_config': os.path.join('configs', 'injection', 'di_injector.yaml'),
        'event_record': os.path.join('data', 'input', 'event_record.csv'),
        'sweep_config': os.path.join('configs', 'injection', 'sweep.yaml'),
        'output_dir': os.path.join('data', 'output', 'split_injection'),
        'sweep_settings': {
            'speed_range': [1000.0, 6500.0],  # RPM
            'num_points': 12,
            'fuel_mass_mg': 25.0,  # mg per cylinder event
            'rail_pressure_psi': 2000.0,
            'rail_temp_f': 120.0,
            'soi_deg': 300.0,  # deg BTDC power stroke
            'separation_us': 600.0,
            'last_feasible_deg': DEFAULT_LAST_FEASIBLE_ANGLE
        }
    }

    os.makedirs(config['output_dir'], exist_ok=True)

    # Override sweep settings if a sweep configuration is available
    if os.path.exists(config['sweep_config']):
        with open(config['sweep_config'], 'r') as f:
            overrides = yaml.safe_load(f) or {}
            config['sweep_settings'].update(overrides)

    print(f"Configuration loaded. Output directory: {config['output_dir']}")
    return config


def create_event_record(config: Dict[str, Any]) -> pd.DataFrame:
    """
    Load the recorded event CSV if present, otherwise build an engine speed sweep.

    Args:
        config: Configuration dictionary

    Returns:
        DataFrame with one row per injection event
    """
    if os.path.exists(config['event_record']):
        return load_event_record(config['event_record'])

    sweep = config['sweep_settings']
    speeds = np.linspace(sweep['speed_range'][0], sweep['speed_range'][1], sweep['num_points'])
    print(f"No event record found, sweeping {len(speeds)} engine speeds")

    return pd.DataFrame({
        'fuel_mass_lb': np.full(len(speeds), sweep['fuel_mass_mg'] * MG_TO_LB),
        'engine_speed_rpm': speeds,
        'rail_pressure_psi': np.full(len(speeds), sweep['rail_pressure_psi']),
        'rail_temp_f': np.full(len(speeds), sweep['rail_temp_f']),
        'soi_deg': np.full(len(speeds), sweep['soi_deg']),
    })


def run_shot_counts(context: InjectionContext, record: pd.DataFrame,
                    config: Dict[str, Any]) -> Dict[int, pd.DataFrame]:
    """
    Evaluate the event record for every supported shot count.

    Args:
        context: Injection context
        record: Engine event record
        config: Configuration dictionary

    Returns:
        Mapping of shot count to evaluated DataFrame
    """
    sweep = config['sweep_settings']
    results = {}

    for shot_count in (ShotCount.SINGLE, ShotCount.DOUBLE, ShotCount.TRIPLE):
        print(f"\n=== {shot_count.label} ===")
        context.set_shot_count(shot_count)
        try:
            evaluated = evaluate_event_record(
                context, record,
                separation=sweep['separation_us'],
                last_feasible_angle=sweep['last_feasible_deg']
            )
        except SplitInjectionError as e:
            print(f"Evaluation failed: {str(e)}")
            continue

        summary = summarize_event_record(evaluated)
        print(f"  Mean total pulsewidth per shot: {summary['mean_total_pw_us']:.1f} us")
        print(f"  Max total pulsewidth per shot:  {summary['max_total_pw_us']:.1f} us")
        print(f"  Feasible events: {summary['feasible_fraction'] * 100:.0f}%")
        results[shot_count.value] = evaluated

    return results


def export_results(results: Dict[int, pd.DataFrame], config: Dict[str, Any]) -> None:
    """
    Write evaluated records and plots to the output directory.

    Args:
        results: Mapping of shot count to evaluated DataFrame
        config: Configuration dictionary
    """
    output_dir = config['output_dir']
    last_feasible = config['sweep_settings']['last_feasible_deg']

    for num_shots, evaluated in results.items():
        csv_path = os.path.join(output_dir, f"injection_{num_shots}_shot.csv")
        evaluated.to_csv(csv_path, index=False)
        print(f"Results saved to {csv_path}")

        fig = plot_injection_windows(evaluated, last_feasible_angle=last_feasible)
        save_plot(fig, f"injection_windows_{num_shots}_shot", output_dir)
        plt.close(fig)

    if results:
        fig = plot_pulsewidth_comparison(results, x_column='engine_speed_rpm')
        save_plot(fig, "pulsewidth_comparison", output_dir)
        plt.close(fig)


def main():
    """Main function to run the split injection sweep."""
    print("Direct Injection - Split Injection Sweep")
    print("========================================")

    config = load_configurations()

    try:
        context = InjectionContext.from_config(config['injection_config'])
    except (FileNotFoundError, SplitInjectionError) as e:
        print(f"Could not build injection context: {str(e)}")
        sys.exit(1)

    print("\nCalibration:")
    for key, value in context.calibration.to_dict().items():
        print(f"  {key}: {value}")

    record = create_event_record(config)
    results = run_shot_counts(context, record, config)
    export_results(results, config)

    print("\n=== Conclusion ===")
    for num_shots, evaluated in results.items():
        status = "all feasible" if evaluated['constraint_met'].all() else "constraint violated"
        print(f"  {num_shots} shot: {status}")

    print(f"\nResults saved to: {config['output_dir']}")


if __name__ == "__main__":
    main()
