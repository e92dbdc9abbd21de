"""
Tests for engine event record evaluation and plotting.
"""

import os

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from split_injection.errors import InvalidArgumentError, NoActiveCalculatorError
from split_injection.injection import (
    REQUIRED_COLUMNS, load_event_record, evaluate_event_record, summarize_event_record
)
from split_injection.utils.plotting import (
    save_plot, plot_injection_windows, plot_pulsewidth_comparison
)


def make_record(fuel_mass, start_angle, **extra):
    """Event record at 6000 RPM, 2000 psi, 120 F."""
    data = {
        'fuel_mass_lb': fuel_mass,
        'engine_speed_rpm': [6000.0] * len(fuel_mass),
        'rail_pressure_psi': [2000.0] * len(fuel_mass),
        'rail_temp_f': [120.0] * len(fuel_mass),
        'soi_deg': start_angle,
    }
    data.update(extra)
    return pd.DataFrame(data)


class TestEvaluateEventRecord:
    """Test batch evaluation of event records."""

    def test_single_shot(self, context):
        """Each row gets pulsewidths, one injection window and a constraint result."""
        context.set_shot_count(1)
        record = make_record([0.002, 0.004], [185.0, 300.0])

        results = evaluate_event_record(context, record)

        np.testing.assert_allclose(results['total_pw_us'], [200.0, 400.0])
        np.testing.assert_allclose(results['soi_1_deg'], [185.0, 300.0])
        np.testing.assert_allclose(results['eoi_1_deg'], [177.8, 285.6])
        assert results['constraint_met'].tolist() == [True, False]
        assert (results['num_shots'] == 1).all()
        assert 'soi_2_deg' not in results.columns

    def test_input_record_unchanged(self, context):
        """Evaluation returns a copy and leaves the input record alone."""
        context.set_shot_count(1)
        record = make_record([0.002], [185.0])

        evaluate_event_record(context, record)

        assert list(record.columns) == list(REQUIRED_COLUMNS)

    def test_two_shot_with_separation_argument(self, context):
        """Two shot evaluation lays out one window per shot."""
        context.set_shot_count(2)
        record = make_record([0.002, 0.002], [150.0, 160.0])

        results = evaluate_event_record(context, record, separation=500.0)

        np.testing.assert_allclose(results['effective_pw_us'], [100.0, 100.0])
        np.testing.assert_allclose(results['soi_2_deg'], [168.0, 178.0])
        np.testing.assert_allclose(results['eoi_2_deg'], [171.6, 181.6])
        assert results['constraint_met'].tolist() == [True, False]

    def test_per_row_columns_take_precedence(self, context):
        """Separation and last feasible angle columns override the arguments."""
        context.set_shot_count(2)
        record = make_record([0.002, 0.002], [150.0, 160.0],
                             separation_us=[500.0, 1000.0],
                             last_feasible_deg=[180.0, 200.0])

        results = evaluate_event_record(context, record, separation=100.0, last_feasible_angle=0.0)

        np.testing.assert_allclose(results['soi_2_deg'], [168.0, 196.0])
        assert results['constraint_met'].tolist() == [True, True]

    def test_multi_shot_requires_separation(self, context):
        """Multi-shot evaluation without any separation fails."""
        context.set_shot_count(3)

        with pytest.raises(InvalidArgumentError):
            evaluate_event_record(context, make_record([0.003], [100.0]))

    def test_missing_column(self, context):
        """Records without every required column are rejected."""
        context.set_shot_count(1)
        record = make_record([0.002], [185.0]).drop(columns=['rail_temp_f'])

        with pytest.raises(InvalidArgumentError):
            evaluate_event_record(context, record)

    def test_empty_record(self, context):
        """Records without rows are rejected."""
        context.set_shot_count(1)

        with pytest.raises(InvalidArgumentError):
            evaluate_event_record(context, pd.DataFrame(columns=list(REQUIRED_COLUMNS)))

    def test_uninitialized_context(self, context):
        """Evaluation needs a shot count to be set."""
        with pytest.raises(NoActiveCalculatorError):
            evaluate_event_record(context, make_record([0.002], [185.0]))

    def test_summary(self, context):
        """The summary reports counts, pulsewidth statistics and feasibility."""
        context.set_shot_count(1)
        results = evaluate_event_record(context, make_record([0.002, 0.004], [185.0, 300.0]))

        summary = summarize_event_record(results)

        assert summary['num_events'] == 2
        assert summary['num_shots'] == 1
        assert summary['mean_total_pw_us'] == pytest.approx(300.0)
        assert summary['max_total_pw_us'] == pytest.approx(400.0)
        assert summary['feasible_fraction'] == pytest.approx(0.5)
        assert summary['all_feasible'] is False


class TestLoadEventRecord:
    """Test loading event records from CSV."""

    def test_load_csv(self, tmp_path):
        """A complete CSV loads with one row per event."""
        path = tmp_path / 'events.csv'
        make_record([0.002, 0.003], [185.0, 190.0]).to_csv(path, index=False)

        record = load_event_record(str(path))

        assert len(record) == 2
        assert record['soi_deg'].tolist() == [185.0, 190.0]

    def test_load_missing_column(self, tmp_path):
        """CSVs without every required column are rejected."""
        path = tmp_path / 'events.csv'
        make_record([0.002], [185.0]).drop(columns=['soi_deg']).to_csv(path, index=False)

        with pytest.raises(InvalidArgumentError):
            load_event_record(str(path))

    def test_load_file_not_found(self, tmp_path):
        """An absent file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_event_record(str(tmp_path / 'missing.csv'))


class TestPlotting:
    """Smoke tests for the injection plots."""

    def test_injection_windows_plot(self, context, tmp_path):
        """Window plots render and save for multi-shot results."""
        context.set_shot_count(2)
        results = evaluate_event_record(
            context, make_record([0.002, 0.002], [150.0, 160.0]), separation=500.0
        )

        fig = plot_injection_windows(results)
        path = save_plot(fig, 'windows', directory=str(tmp_path))
        plt.close(fig)

        assert os.path.exists(path)
        assert path.endswith('windows.png')

    def test_pulsewidth_comparison_plot(self, context):
        """Comparison plots draw one line per shot count on each axis."""
        record = make_record([0.002, 0.004], [185.0, 190.0])
        results_by_shots = {}
        for shot_count in (1, 2):
            context.set_shot_count(shot_count)
            results_by_shots[shot_count] = evaluate_event_record(context, record, separation=500.0)

        fig = plot_pulsewidth_comparison(results_by_shots)

        assert all(len(ax.get_lines()) == 2 for ax in fig.axes)
        plt.close(fig)
