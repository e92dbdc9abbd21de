"""
Validation utilities for split injection calculations.

This module provides the checks applied to calculation inputs (finiteness,
sign and shape of scalar or vector arguments) and to calibration mappings
(presence of required keys). Failed checks raise the package exceptions so a
malformed call never produces partial output.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from ..errors import InvalidArgumentError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Validation")


def as_float_array(value, name: str) -> np.ndarray:
    """
    Convert a scalar or 1-D sequence to a float array and check it is finite.

    Args:
        value: Scalar or 1-D array-like input
        name: Argument name used in error messages

    Returns:
        Float array with ndim 0 or 1
    """
    try:
        arr = np.asarray(value, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"{name} must be numeric, got {value!r}") from exc

    if arr.ndim > 1:
        raise InvalidArgumentError(f"{name} must be a scalar or 1-D vector, got shape {arr.shape}")
    if arr.size == 0:
        raise InvalidArgumentError(f"{name} must not be empty")
    if not np.all(np.isfinite(arr)):
        raise InvalidArgumentError(f"{name} must be finite")
    return arr


def check_non_negative(arr: np.ndarray, name: str) -> None:
    """Raise InvalidArgumentError if any element of arr is negative."""
    if np.any(arr < 0):
        raise InvalidArgumentError(f"{name} must be non-negative")


def check_positive(arr: np.ndarray, name: str) -> None:
    """Raise InvalidArgumentError if any element of arr is zero or negative."""
    if np.any(arr <= 0):
        raise InvalidArgumentError(f"{name} must be strictly positive")


def broadcast_inputs(named_inputs: Dict[str, np.ndarray]) -> Tuple[List[np.ndarray], bool]:
    """
    Broadcast scalar and vector inputs to a common shape.

    Scalars are expanded to the vector length; vectors must all share one
    length.

    Args:
        named_inputs: Ordered mapping of argument name to validated array

    Returns:
        Tuple of (list of broadcast arrays in input order, True if every input was scalar)
    """
    lengths = {name: arr.shape[0] for name, arr in named_inputs.items() if arr.ndim == 1}
    if len(set(lengths.values())) > 1:
        detail = ', '.join(f"{name}={length}" for name, length in lengths.items())
        raise InvalidArgumentError(f"Vector inputs must have equal length ({detail})")

    all_scalar = not lengths
    arrays = np.broadcast_arrays(*named_inputs.values())
    return [np.array(arr, dtype=float) for arr in arrays], all_scalar


def validate_positive_scalar(value, name: str) -> float:
    """
    Validate a strictly positive, finite, real scalar.

    Args:
        value: Value to validate
        name: Name used in error messages

    Returns:
        Value as a float
    """
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be numeric, got {value!r}")
    arr = as_float_array(value, name)
    if arr.ndim != 0:
        raise InvalidArgumentError(f"{name} must be a scalar")
    check_positive(arr, name)
    return float(arr)


def find_missing_fields(mapping: Mapping, required: Iterable[str]) -> List[str]:
    """
    List required keys absent from a mapping, matched case-insensitively.

    Args:
        mapping: Mapping to check
        required: Required key names, in reporting order

    Returns:
        Missing key names in the order given by required
    """
    present = {str(key).lower() for key in mapping.keys()}
    return [name for name in required if name.lower() not in present]


def report_missing_fields(missing: List[str], source: Optional[str] = None) -> None:
    """Log each missing calibration field on its own line."""
    where = f" from {source}" if source else ""
    logger.error(f"List of missing input fields{where}:")
    for name in missing:
        logger.error(f"  {name}")
