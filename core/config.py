"""
Run configuration.
Every entry point takes a RunContext explicitly; there is no process-wide state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional, Tuple

from .exceptions import ConfigurationError, InvalidRunDateError, InvalidWindowError
from .utils import parse_date

DEFAULT_BUFFER_THRESHOLD: float = 100.0
MAX_INJECTIONS: int = 500
DEFAULT_OPENING_ACCOUNT_KINDS: Tuple[str, ...] = ("checking",)

# informational preview only (see analysis.preview)
DEFAULT_LEAD_DAYS: int = 4
DEFAULT_WEEKEND_RULE: str = "pay_friday"


@dataclass(frozen=True)
class RunContext:
    run_date: date
    window_start: date
    window_end: date
    buffer_threshold: float = DEFAULT_BUFFER_THRESHOLD
    max_injections: int = MAX_INJECTIONS

    # accounts whose balances make up the opening balance
    opening_account_kinds: Tuple[str, ...] = DEFAULT_OPENING_ACCOUNT_KINDS

    # storage root handed to record adapters; the engine never reads it
    base_path: Optional[Path] = None

    def __post_init__(self) -> None:
        if self.window_start > self.window_end:
            raise InvalidWindowError(self.window_start, self.window_end)

    @classmethod
    def from_params(
        cls,
        date_str,
        from_=None,
        to=None,
        *,
        buffer_threshold: float = DEFAULT_BUFFER_THRESHOLD,
        max_injections: int = MAX_INJECTIONS,
        opening_account_kinds: Tuple[str, ...] = DEFAULT_OPENING_ACCOUNT_KINDS,
        base_path=None,
    ) -> "RunContext":
        """
        Build a context from loose run parameters.

        ``from_`` and ``to`` default to the run date. Raises InvalidRunDateError,
        InvalidWindowError or ConfigurationError (buffer, ceiling) on anything
        that cannot be parsed.
        """
        run_date = parse_date(date_str)
        if run_date is None:
            raise InvalidRunDateError(date_str)

        start = parse_date(from_) if from_ is not None else run_date
        end = parse_date(to) if to is not None else run_date
        if start is None or end is None:
            raise InvalidWindowError(from_, to)

        try:
            buffer = float(buffer_threshold)
            ceiling = int(max_injections)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Invalid run limits: buffer_threshold={buffer_threshold!r}, "
                f"max_injections={max_injections!r}"
            ) from exc
        if not math.isfinite(buffer) or ceiling < 0:
            raise ConfigurationError(
                f"Invalid run limits: buffer_threshold={buffer!r}, max_injections={ceiling!r}"
            )

        return cls(
            run_date=run_date,
            window_start=start,
            window_end=end,
            buffer_threshold=buffer,
            max_injections=ceiling,
            opening_account_kinds=tuple(k.lower() for k in opening_account_kinds),
            base_path=Path(base_path) if base_path is not None else None,
        )

    @property
    def window_days(self) -> int:
        return (self.window_end - self.window_start).days + 1
