"""
Ledger builder — the running-balance walk.

Steps:
  1. Drop zero-amount events and sort by (date, kind priority, label), where
     opening=0, income=1, bill/debt=2, injector=3, so same-day income posts
     before same-day outflows.
  2. Prepend a synthetic opening event at window_start (amount 0, running
     total = opening balance).
  3. Walk the sequence: running += amount. When a bill/debt/income leaves the
     balance below the buffer, ask the injector allocator for the gap on that
     date and splice its injectors in after the current event. When more
     events share the date they post first, so injectors stay last within
     their day; draws already queued for the day count toward the gap.
  4. Stop creating injectors once ``max_injections`` have been made.

Injector events themselves never trigger another allocation: the allocator
already drew everything it could for that shortfall, and re-checking between
two spliced injectors would double-draw.

Amounts and balances are kept in cents (``excel_round``) so a balance sitting
exactly on the buffer is never read as a sub-cent shortfall.

An unmet shortfall is not an error; it is visible as running_total < buffer.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from core.config import MAX_INJECTIONS
from core.logging_config import get_logger
from core.schema import LEDGER_COLUMNS
from core.utils import round_money

from .events import CashEvent, sort_key
from .injectors import allocate
from .offers import FundingOffer

logger = get_logger("engine.ledger")

OPENING_LABEL = "Opening balance"


@dataclass(frozen=True)
class Ledger:
    """Ordered events with running totals for one forecast run. Never mutated."""
    opening_balance: float
    window_start: dt.date
    window_end: dt.date
    events: Tuple[CashEvent, ...]
    offers: Tuple[FundingOffer, ...] = ()
    buffer_threshold: float = 0.0
    injection_ceiling_hit: bool = False

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self):
        return iter(self.events)

    @property
    def ending_balance(self) -> float:
        return self.events[-1].running_total if self.events else self.opening_balance

    @property
    def injectors(self) -> List[CashEvent]:
        return [e for e in self.events if e.kind == "injector"]

    @property
    def total_injected(self) -> float:
        return round_money(sum(e.amount for e in self.injectors))

    def to_dataframe(self) -> pd.DataFrame:
        df = pd.DataFrame([e.to_dict() for e in self.events], columns=list(LEDGER_COLUMNS))
        df["date"] = pd.to_datetime(df["date"])
        return df


def _opening_event(window_start: dt.date, opening_balance: float) -> CashEvent:
    return CashEvent(
        date=window_start,
        label=OPENING_LABEL,
        kind="opening",
        amount=0.0,
        cycle="opening",
        running_total=opening_balance,
    )


def _post_position(pending: List[CashEvent], i: int) -> int:
    """Index just past the last pending event sharing pending[i]'s date."""
    on = pending[i].date
    j = i + 1
    while j < len(pending) and pending[j].date == on:
        j += 1
    return j


def build_ledger(
    opening_balance: float,
    events: Iterable[CashEvent],
    offers: Sequence[FundingOffer],
    buffer_threshold: float,
    *,
    window_start: dt.date,
    window_end: Optional[dt.date] = None,
    max_injections: int = MAX_INJECTIONS,
) -> Ledger:
    """
    Merge events into one ordered ledger with running totals and injectors.

    Parameters
    ----------
    opening_balance : float
        Balance at window_start, before any event
    events : iterable of CashEvent
        Income/bill/debt events (any order; zero amounts are dropped)
    offers : sequence of FundingOffer
        Fresh offers for this run; mutated as injectors are drawn
    buffer_threshold : float
        Minimum acceptable running balance
    window_start, window_end : date
        Forecast window; window_end defaults to the last event date
    max_injections : int
        Global ceiling on injector events for the run

    Returns
    -------
    Ledger whose first event is the synthetic opening entry.
    """
    opening_balance = round_money(opening_balance)
    buffer_threshold = round_money(buffer_threshold)

    pending: List[CashEvent] = sorted(
        (
            replace(e, amount=round_money(e.amount), running_total=None)
            for e in events
            if e.kind != "opening" and round_money(e.amount) != 0
        ),
        key=sort_key,
    )

    ledger: List[CashEvent] = [_opening_event(window_start, opening_balance)]
    running = opening_balance
    injected = 0
    ceiling_hit = False

    # drawn for the current date but not yet posted
    queued = 0.0

    i = 0
    while i < len(pending):
        event = pending[i]
        running = round_money(running + event.amount)
        ledger.append(event.with_running_total(running))

        if event.kind == "injector":
            queued = max(round_money(queued - event.amount), 0.0)
            i += 1
            continue

        needed = round_money(buffer_threshold - running - queued)
        if needed > 0:
            budget = max_injections - injected
            if budget <= 0:
                if not ceiling_hit:
                    logger.warning(
                        "injection_ceiling_reached",
                        extra={"date": event.date, "max_injections": max_injections},
                    )
                ceiling_hit = True
            else:
                new = allocate(needed, event.date, offers, limit=budget)
                drawn = round_money(sum(e.amount for e in new))
                injected += len(new)
                queued = round_money(queued + drawn)
                at = _post_position(pending, i)
                pending[at:at] = new
                if injected >= max_injections and drawn < needed:
                    ceiling_hit = True
        i += 1

    if window_end is None:
        window_end = max(ledger[-1].date, window_start)

    logger.debug(
        "ledger_built",
        extra={
            "events": len(ledger),
            "injectors": injected,
            "ending_balance": running,
            "ceiling_hit": ceiling_hit,
        },
    )

    return Ledger(
        opening_balance=opening_balance,
        window_start=window_start,
        window_end=window_end,
        events=tuple(ledger),
        offers=tuple(replace(o) for o in offers),
        buffer_threshold=buffer_threshold,
        injection_ceiling_hit=ceiling_hit,
    )
