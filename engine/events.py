"""
Cash events and the event collector.

The collector turns normalized records (bills, debts, income) into signed,
dated CashEvents for every occurrence inside the forecast window:

  - every calendar month touched by [window_start, window_end] is resolved
    through the record's schedule (biweekly records are resolved over the
    whole window at once)
  - candidates that fall outside their month or outside the window are dropped
  - amounts are forced to the kind's sign: income +, bill/debt -
  - ``covered`` records and records with no amount or no schedule are skipped

Nothing here raises on a bad record.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass, replace
from typing import Iterable, Iterator, List, Optional, Tuple

from core.logging_config import get_logger
from core.schema import EVENT_KINDS, KIND_PRIORITY, KIND_SIGN
from core.utils import months_between, round_money
from schedules.resolver import (
    BiweeklySpec,
    DayOfMonthSpec,
    OneOffSpec,
    ScheduleSpec,
    days_of_month,
    resolve,
    resolve_biweekly,
    schedule_spec_for,
)

logger = get_logger("engine.events")

COLLECTABLE_KINDS = ("income", "bill", "debt")


@dataclass(frozen=True)
class CashEvent:
    """One ledger entry. ``running_total`` is set by the ledger builder only."""
    date: dt.date
    label: str
    kind: str
    amount: float
    account: str = ""
    cycle: str = ""
    source: str = ""
    running_total: Optional[float] = None

    def __post_init__(self) -> None:
        if self.kind not in EVENT_KINDS:
            raise ValueError(f"Unknown event kind {self.kind!r}; expected one of {EVENT_KINDS}")

    def with_running_total(self, running_total: float) -> "CashEvent":
        return replace(self, running_total=running_total)

    def to_dict(self) -> dict:
        row = asdict(self)
        row["date"] = self.date.isoformat()
        return row


def sort_key(event: CashEvent) -> Tuple[dt.date, int, str]:
    """Ledger order: date, then opening < income < bill/debt < injector, then label."""
    return (event.date, KIND_PRIORITY.get(event.kind, 99), event.label)


def _cycle_for(spec: ScheduleSpec) -> str:
    if isinstance(spec, BiweeklySpec):
        return "biweekly"
    if isinstance(spec, OneOffSpec):
        return "once"
    return "monthly"


def _occurrences(
    record,
    spec: ScheduleSpec,
    window_start: dt.date,
    window_end: dt.date,
) -> Iterator[Tuple[dt.date, float]]:
    """(date, unsigned amount) pairs before window clipping."""
    base = float(record.amount)

    if isinstance(spec, BiweeklySpec):
        for on in resolve_biweekly(spec.anchor, window_start, window_end):
            yield on, base
        return

    if isinstance(spec, OneOffSpec):
        yield spec.on, base
        return

    months = months_between(window_start, window_end)

    if isinstance(spec, DayOfMonthSpec):
        amounts = list(getattr(record, "due_amounts", None) or [])
        if len(amounts) != len(spec.days):
            amounts = [base] * len(spec.days)
        for year, month in months:
            for day, amount in zip(spec.days, amounts):
                for on in days_of_month((day,), year, month):
                    yield on, amount
        return

    for year, month in months:
        for on in resolve(spec, year, month):
            # nth weekday past the end of the month rolls forward; not an occurrence
            if (on.year, on.month) != (year, month):
                continue
            yield on, base


def collect(
    records: Iterable,
    kind: str,
    window_start: dt.date,
    window_end: dt.date,
) -> List[CashEvent]:
    """
    Emit one CashEvent per scheduled occurrence of each record inside the window.

    Parameters
    ----------
    records : iterable of ObligationRecord / IncomeRecord
        Normalized records (see data_prep.records)
    kind : str
        "income", "bill" or "debt"; decides the sign and the label
    window_start, window_end : date
        Inclusive window bounds

    Returns
    -------
    List of CashEvent in ledger order.
    """
    if kind not in COLLECTABLE_KINDS:
        raise ValueError(f"Cannot collect events of kind {kind!r}")
    sign = KIND_SIGN[kind]

    events: List[CashEvent] = []
    for record in records:
        ref = record.ref
        if getattr(record, "covered", False):
            logger.debug("record_skipped", extra={"ref": ref, "kind": kind, "reason": "covered"})
            continue
        if record.amount is None or record.amount == 0:
            logger.debug("record_skipped", extra={"ref": ref, "kind": kind, "reason": "no_amount"})
            continue
        spec = schedule_spec_for(record)
        if spec is None:
            logger.debug("record_skipped", extra={"ref": ref, "kind": kind, "reason": "no_schedule"})
            continue

        label = f"Income: {ref}" if kind == "income" else ref
        account = getattr(record, "account", "") or getattr(record, "deposit_to", "")
        cycle = getattr(record, "cycle", "") or _cycle_for(spec)

        for on, amount in _occurrences(record, spec, window_start, window_end):
            if on < window_start or on > window_end:
                continue
            signed = sign * round_money(abs(amount))
            if signed == 0:
                continue
            events.append(
                CashEvent(
                    date=on,
                    label=label,
                    kind=kind,
                    amount=signed,
                    account=account,
                    cycle=cycle,
                    source=record.source,
                )
            )

    events.sort(key=sort_key)
    return events


def collect_all(
    window_start: dt.date,
    window_end: dt.date,
    *,
    bills: Iterable = (),
    debts: Iterable = (),
    incomes: Iterable = (),
) -> List[CashEvent]:
    """Collect bills, debts and income into one ordered list."""
    events = (
        collect(incomes, "income", window_start, window_end)
        + collect(bills, "bill", window_start, window_end)
        + collect(debts, "debt", window_start, window_end)
    )
    events.sort(key=sort_key)
    return events
