"""
Exceptions raised by the split injection package.

Every exception derives from SplitInjectionError and from the builtin that
best matches it, so callers can catch either the package-specific type or a
generic ValueError/KeyError/TypeError/RuntimeError.
"""

from typing import List, Optional


class SplitInjectionError(Exception):
    """Base class for all split injection errors."""


class MissingCalibrationFieldError(SplitInjectionError, KeyError):
    """One or more required calibration fields are absent."""

    def __init__(self, missing_fields: List[str], source: Optional[str] = None):
        self.missing_fields = list(missing_fields)
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"Missing calibration fields{where}: {', '.join(self.missing_fields)}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class InvalidCalibrationFieldError(SplitInjectionError, TypeError):
    """A calibration field is present but of the wrong kind or value."""

    def __init__(self, field_name: str, message: str):
        self.field_name = field_name
        super().__init__(f"Calibration field {field_name}: {message}")


class UnsupportedShotCountError(SplitInjectionError, ValueError):
    """Requested shot count has no calculator."""

    def __init__(self, shot_count, message: Optional[str] = None):
        self.shot_count = shot_count
        super().__init__(message or f"{shot_count} intake injections not supported at this time")


class InvalidShotCountError(UnsupportedShotCountError):
    """Requested shot count is not a value of the shot count enumeration."""

    def __init__(self, shot_count):
        super().__init__(shot_count, f"Invalid shot count: {shot_count!r}")


class NoActiveCalculatorError(SplitInjectionError, RuntimeError):
    """A calculation was requested before any shot count was set."""

    def __init__(self):
        super().__init__("No active shot calculator: set the shot count before calculating")


class InvalidArgumentError(SplitInjectionError, ValueError):
    """Numeric input to a calculation is non-finite, out of range or mis-shaped."""
