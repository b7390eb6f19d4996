"""
Typed exceptions for the forecaster.

Only malformed run parameters raise. Record-level defects are skipped by the
normalization and collection steps, and an unmet shortfall shows up as a
negative running total, so neither has an exception class here.

    ForecastError
    |
    +-- ConfigurationError
        +-- InvalidRunDateError
        +-- InvalidWindowError
"""

from __future__ import annotations


class ForecastError(Exception):
    """Base class; ``code`` is a stable machine-readable identifier."""

    code: str = "FORECAST_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(ForecastError):
    """The caller supplied run parameters the engine cannot use."""

    code: str = "CONFIGURATION_ERROR"


class InvalidRunDateError(ConfigurationError):
    code: str = "INVALID_RUN_DATE"

    def __init__(self, value):
        self.value = value
        super().__init__(f"Run date is missing or unparseable: {value!r}")


class InvalidWindowError(ConfigurationError):
    code: str = "INVALID_WINDOW"

    def __init__(self, window_start, window_end):
        self.window_start = window_start
        self.window_end = window_end
        super().__init__(
            f"Invalid forecast window: {window_start!r} .. {window_end!r}"
        )
