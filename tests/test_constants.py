"""
Tests for the time, angle and unit constants.
"""

import numpy as np
import pytest

from split_injection.utils.constants import (
    LB_TO_MG, MG_TO_LB, DEFAULT_LAST_FEASIBLE_ANGLE, BDC_INTAKE_ANGLE, time_to_angle_scale
)


class TestConstants:
    """Test conversion helpers and reference angles."""

    def test_time_to_angle_scale(self):
        """At 6000 RPM one crank degree takes 1e6 / 36000 us."""
        assert time_to_angle_scale(6000.0) == pytest.approx(1e6 / 36000.0)

    def test_time_to_angle_scale_vector(self):
        """Engine speed vectors are converted elementwise."""
        np.testing.assert_allclose(time_to_angle_scale(np.array([1000.0, 2000.0])),
                                   [1e6 / 6000.0, 1e6 / 12000.0])

    def test_mass_conversion(self):
        """Milligram and pound factors are reciprocal."""
        assert 25.0 * MG_TO_LB * LB_TO_MG == pytest.approx(25.0)

    def test_default_last_feasible_angle(self):
        """Injection must end by BDC of the intake stroke unless told otherwise."""
        assert DEFAULT_LAST_FEASIBLE_ANGLE == BDC_INTAKE_ANGLE == 180.0
