"""
Ledger metrics — inflow/outflow totals, the low point and shortfall rows.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from core.utils import round_money
from engine.events import CashEvent
from engine.ledger import Ledger


@dataclass(frozen=True)
class LedgerTotals:
    inflow: float    # income + injectors
    outflow: float   # bills + debts, as a positive number
    net: float
    opening: float
    ending: float


def compute_totals(events: Iterable[CashEvent], opening_balance: float = 0.0) -> LedgerTotals:
    """
    Totals over a set of events; the opening entry is ignored.

    ending = opening + net, which equals the last running total of a built ledger.
    """
    amounts = np.array([e.amount for e in events if e.kind != "opening"], dtype=float)
    inflow = round_money(amounts[amounts > 0].sum()) if amounts.size else 0.0
    outflow = round_money(-amounts[amounts < 0].sum()) if amounts.size else 0.0
    net = round_money(inflow - outflow)
    return LedgerTotals(
        inflow=inflow,
        outflow=outflow,
        net=net,
        opening=round_money(opening_balance),
        ending=round_money(opening_balance + net),
    )


def ledger_totals(ledger: Ledger) -> LedgerTotals:
    return compute_totals(ledger.events, ledger.opening_balance)


def low_point(ledger: Ledger) -> Optional[Tuple[dt.date, float]]:
    """(date, balance) of the lowest running total; the earliest one wins ties."""
    if not ledger.events:
        return None
    running = np.array([e.running_total for e in ledger.events], dtype=float)
    idx = int(np.argmin(running))
    return ledger.events[idx].date, float(running[idx])


def shortfall_events(ledger: Ledger, threshold: float = 0.0) -> List[CashEvent]:
    """Events that leave the running total below ``threshold``."""
    return [e for e in ledger.events if e.running_total is not None and e.running_total < threshold]
