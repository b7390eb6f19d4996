"""
Data quality checks for normalized record sets before they enter the engine.

Catches problems early without stopping the run:
- Duplicate refs
- Records with no amount
- Records with no recognizable schedule
- due_amounts that cannot pair with due_days
- Funding sources that can never fund anything

The engine skips bad records on its own; this report exists so the skips are
visible in the logs.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List

from schedules.resolver import schedule_spec_for


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a set of records."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def _check_scheduled(result: ValidationResult, records: list, kind: str) -> None:
    dup = [ref for ref, n in Counter(r.ref for r in records).items() if n > 1]
    if dup:
        result.warnings.append(f"{len(dup)} duplicate {kind} refs: {sorted(dup)}")

    for r in records:
        if getattr(r, "covered", False):
            continue
        if r.amount is None:
            result.warnings.append(f"{kind} '{r.ref}' has no usable amount; skipped.")
        elif r.amount == 0:
            result.warnings.append(f"{kind} '{r.ref}' has a zero amount; skipped.")
        if schedule_spec_for(r) is None:
            result.warnings.append(f"{kind} '{r.ref}' has no recognized schedule; skipped.")
        if r.due_amounts and len(r.due_amounts) != len(r.due_days):
            result.warnings.append(
                f"{kind} '{r.ref}' has {len(r.due_amounts)} due_amounts for "
                f"{len(r.due_days)} due_days; base amount used for every occurrence."
            )
        bad_days = [d for d in r.due_days if not 1 <= d <= 31]
        if bad_days:
            result.warnings.append(f"{kind} '{r.ref}' has out-of-range due days {bad_days}.")


def validate_records(
    *,
    bills: Iterable = (),
    debts: Iterable = (),
    incomes: Iterable = (),
    funding_sources: Iterable = (),
    accounts: Iterable = (),
) -> ValidationResult:
    """
    Run all validation checks on normalized records.
    Returns a ValidationResult with errors (suspect data) and warnings (informational).
    """
    result = ValidationResult()

    _check_scheduled(result, list(bills), "bill")
    _check_scheduled(result, list(debts), "debt")
    _check_scheduled(result, list(incomes), "income")

    # --- Funding sources ---
    sources = list(funding_sources)
    dup = [n for n, c in Counter(s.name for s in sources).items() if c > 1]
    if dup:
        result.warnings.append(f"{len(dup)} duplicate funding source names: {sorted(dup)}")
    for s in sources:
        if s.cap < 0:
            result.errors.append(f"Funding source '{s.name}' has a negative cap ({s.cap}).")
        elif s.enabled and s.cap == 0:
            result.warnings.append(f"Funding source '{s.name}' has no capacity.")
        if s.latency_days < 0:
            result.errors.append(
                f"Funding source '{s.name}' has negative latency ({s.latency_days} days)."
            )
        if s.chunk < 0:
            result.warnings.append(f"Funding source '{s.name}' has a negative chunk; ignored.")

    # --- Accounts ---
    for a in accounts:
        if a.balance is None:
            result.warnings.append(f"Account '{a.label}' has no usable balance.")

    return result
