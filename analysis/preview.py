"""
Upcoming-obligation preview — "what is due in the next few days, and can I cover it?"

Informational only: due dates are weekend-adjusted here (pay on the Friday
before) but nothing in this module feeds the ledger.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable, List

from core.config import DEFAULT_LEAD_DAYS, DEFAULT_WEEKEND_RULE
from core.utils import months_between
from schedules.resolver import (
    BiweeklySpec,
    adjust_for_weekend,
    resolve,
    resolve_biweekly,
    schedule_spec_for,
)


@dataclass(frozen=True)
class UpcomingObligation:
    label: str
    due: dt.date
    pay_on: dt.date
    days_out: int
    amount: float  # positive


def upcoming_obligations(
    obligations: Iterable,
    as_of: dt.date,
    *,
    lead_days: int = DEFAULT_LEAD_DAYS,
    weekend_rule: str = DEFAULT_WEEKEND_RULE,
) -> List[UpcomingObligation]:
    """
    Obligations whose (weekend-adjusted) pay date is within ``lead_days`` of ``as_of``.

    Covered records and records without a positive amount are left out.
    """
    horizon_end = as_of + dt.timedelta(days=lead_days)
    # a Saturday/Sunday due date just past the horizon can adjust back into it
    search_end = horizon_end + dt.timedelta(days=2)

    out = []
    for record in obligations:
        if getattr(record, "covered", False) or not record.amount:
            continue
        spec = schedule_spec_for(record)
        if spec is None:
            continue

        if isinstance(spec, BiweeklySpec):
            candidates = resolve_biweekly(spec.anchor, as_of, search_end)
        else:
            candidates = []
            for year, month in months_between(as_of, search_end):
                candidates.extend(
                    d for d in resolve(spec, year, month) if (d.year, d.month) == (year, month)
                )

        for due in candidates:
            pay_on = adjust_for_weekend(due, weekend_rule)
            days_out = (pay_on - as_of).days
            if 0 <= days_out <= lead_days:
                out.append(
                    UpcomingObligation(
                        label=record.ref,
                        due=due,
                        pay_on=pay_on,
                        days_out=days_out,
                        amount=abs(float(record.amount)),
                    )
                )

    out.sort(key=lambda o: (o.pay_on, o.label))
    return out


def liquidity_gap(upcoming: Iterable[UpcomingObligation], available: float) -> float:
    """How much the upcoming obligations exceed ``available`` cash (0 when covered)."""
    need = sum(o.amount for o in upcoming)
    return max(0.0, need - float(available))
