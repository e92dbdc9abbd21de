"""
Calibrated lookup curves and tables for injector characterisation.

This module provides the interpolation primitives queried by the shot
calculators: FunctionLookup for 1-D curves (e.g. injector slope against rail
pressure) and TableLookup for 2-D surfaces (e.g. closing delay against rail
pressure and effective pulsewidth). Both accept scalar or vector inputs and
hold the end values outside the calibrated range.
"""

from typing import Dict, Union

import numpy as np
from scipy.interpolate import interp1d, RegularGridInterpolator

# Define module exports
__all__ = ['FunctionLookup', 'TableLookup']


def _read_only(values) -> np.ndarray:
    """Private read-only float copy of values."""
    arr = np.array(values, dtype=float)
    arr.flags.writeable = False
    return arr


def _breakpoints(values, name: str) -> np.ndarray:
    """Validate a breakpoint vector: finite, 1-D, strictly increasing, at least 2 points."""
    arr = _read_only(values)
    if arr.ndim != 1 or arr.size < 2:
        raise ValueError(f"{name} breakpoints must be a 1-D vector with at least 2 points")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} breakpoints must be finite")
    if np.any(np.diff(arr) <= 0):
        raise ValueError(f"{name} breakpoints must be strictly increasing")
    return arr


class FunctionLookup:
    """
    1-D calibrated curve with linear interpolation.

    Inputs outside the breakpoint range return the first or last output value.
    """

    def __init__(self, x: np.ndarray, y: np.ndarray, name: str = "lookup"):
        """
        Initialize a 1-D lookup curve.

        Args:
            x: Input breakpoints (strictly increasing)
            y: Output values at each breakpoint
            name: Label used in error messages and reprs
        """
        self.name = name
        self.x = _breakpoints(x, name)
        self.y = _read_only(y)

        if self.y.shape != self.x.shape:
            raise ValueError(f"{name}: {self.x.size} breakpoints but {self.y.size} output values")
        if not np.all(np.isfinite(self.y)):
            raise ValueError(f"{name} output values must be finite")

        self._function = interp1d(
            self.x, self.y,
            kind='linear',
            bounds_error=False,
            fill_value=(self.y[0], self.y[-1]),
            assume_sorted=True
        )

    @classmethod
    def constant(cls, value: float, name: str = "lookup") -> 'FunctionLookup':
        """Create a flat curve returning value for every input."""
        return cls([0.0, 1.0], [value, value], name=name)

    @classmethod
    def from_dict(cls, data: Union[Dict, float], name: str = "lookup") -> 'FunctionLookup':
        """
        Create a curve from a configuration entry.

        Args:
            data: Either {'x': [...], 'y': [...]} or a number for a flat curve
            name: Label for the curve

        Returns:
            FunctionLookup instance
        """
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return cls.constant(data, name=name)
        if not isinstance(data, dict) or 'x' not in data or 'y' not in data:
            raise ValueError(f"{name}: 1-D lookup needs 'x' and 'y' entries")
        return cls(data['x'], data['y'], name=name)

    def interp(self, x):
        """
        Interpolate the curve.

        Args:
            x: Scalar or array of input values

        Returns:
            Interpolated values with the shape of x
        """
        return np.asarray(self._function(np.asarray(x, dtype=float)), dtype=float)

    def __repr__(self) -> str:
        return f"FunctionLookup(name={self.name!r}, points={self.x.size})"


class TableLookup:
    """
    2-D calibrated table with bilinear interpolation over a regular grid.

    Inputs are clamped to the grid before interpolation, so values outside
    the table hold the nearest edge.
    """

    def __init__(self, x: np.ndarray, y: np.ndarray, z: np.ndarray, name: str = "table"):
        """
        Initialize a 2-D lookup table.

        Args:
            x: Row breakpoints (strictly increasing)
            y: Column breakpoints (strictly increasing)
            z: Output values, shape (len(x), len(y))
            name: Label used in error messages and reprs
        """
        self.name = name
        self.x = _breakpoints(x, f"{name} x")
        self.y = _breakpoints(y, f"{name} y")
        self.z = _read_only(z)

        if self.z.shape != (self.x.size, self.y.size):
            raise ValueError(
                f"{name}: table shape {self.z.shape} does not match breakpoints "
                f"({self.x.size}, {self.y.size})"
            )
        if not np.all(np.isfinite(self.z)):
            raise ValueError(f"{name} table values must be finite")

        # Interpolator gets its own writeable copies; the attributes stay read-only
        self._interpolator = RegularGridInterpolator(
            (np.array(self.x), np.array(self.y)), np.array(self.z),
            method='linear',
            bounds_error=False,
            fill_value=None
        )

    @classmethod
    def constant(cls, value: float, name: str = "table") -> 'TableLookup':
        """Create a flat table returning value for every input pair."""
        return cls([0.0, 1.0], [0.0, 1.0], [[value, value], [value, value]], name=name)

    @classmethod
    def from_dict(cls, data: Union[Dict, float], name: str = "table") -> 'TableLookup':
        """
        Create a table from a configuration entry.

        Args:
            data: Either {'x': [...], 'y': [...], 'z': [[...], ...]} or a number for a flat table
            name: Label for the table

        Returns:
            TableLookup instance
        """
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            return cls.constant(data, name=name)
        if not isinstance(data, dict) or not all(key in data for key in ('x', 'y', 'z')):
            raise ValueError(f"{name}: 2-D lookup needs 'x', 'y' and 'z' entries")
        return cls(data['x'], data['y'], data['z'], name=name)

    def interp(self, x, y):
        """
        Interpolate the table at paired inputs.

        Args:
            x: Scalar or array of row-axis inputs
            y: Scalar or array of column-axis inputs (broadcast against x)

        Returns:
            Interpolated values with the broadcast shape of x and y
        """
        xb, yb = np.broadcast_arrays(np.asarray(x, dtype=float), np.asarray(y, dtype=float))
        points = np.stack([
            np.clip(xb, self.x[0], self.x[-1]),
            np.clip(yb, self.y[0], self.y[-1])
        ], axis=-1).reshape(-1, 2)
        values = self._interpolator(points)
        return np.asarray(values, dtype=float).reshape(xb.shape)

    def __repr__(self) -> str:
        return f"TableLookup(name={self.name!r}, shape={self.z.shape})"
