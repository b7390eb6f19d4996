"""
Core package — run configuration, constants, exceptions, logging and shared helpers.
No forecasting logic lives here.
"""

from .config import DEFAULT_BUFFER_THRESHOLD, MAX_INJECTIONS, RunContext
from .exceptions import (
    ConfigurationError,
    ForecastError,
    InvalidRunDateError,
    InvalidWindowError,
)
from .schema import EVENT_KINDS, KIND_PRIORITY
from .utils import months_between, parse_date, round_up_to_chunk

__all__ = [
    "RunContext",
    "DEFAULT_BUFFER_THRESHOLD",
    "MAX_INJECTIONS",
    "ForecastError",
    "ConfigurationError",
    "InvalidRunDateError",
    "InvalidWindowError",
    "EVENT_KINDS",
    "KIND_PRIORITY",
    "months_between",
    "parse_date",
    "round_up_to_chunk",
]
