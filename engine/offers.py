"""
Funding offers — a funding source's state for one forecast run.

A source is not a scalar balance: it has a cap, a latency before its money is
usable and a preference order. build_offers() snapshots each enabled source
as a FundingOffer whose ``remaining`` the injector allocator draws down across
the whole ledger walk. Offers are built fresh for every run.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable, List, Tuple

import pandas as pd

from core.logging_config import get_logger
from core.utils import round_money

logger = get_logger("engine.offers")


@dataclass
class FundingOffer:
    offer_id: str
    name: str
    priority: float
    latency_days: int
    available_on: dt.date
    cap: float
    remaining: float
    cost: float = 0.0
    chunk: float = 0.0  # allocations round up to a multiple of this (0 = no rounding)
    ref: str = ""
    source: str = ""

    @property
    def drawn(self) -> float:
        return self.cap - self.remaining

    def is_eligible(self, on: dt.date) -> bool:
        return self.remaining > 0 and self.available_on <= on


def offer_sort_key(offer: FundingOffer) -> Tuple[float, float, str]:
    """Preference order: priority, then cost, then name (all ascending)."""
    return (offer.priority, offer.cost, offer.name)


def build_offers(sources: Iterable, run_date: dt.date) -> List[FundingOffer]:
    """
    Turn normalized FundingSourceRecords into offers for a run dated ``run_date``.

    Disabled sources are dropped. ``available_on`` is run_date + latency_days.
    """
    offers = []
    for src in sources:
        if not src.enabled:
            logger.debug("funding_source_disabled", extra={"funding_source": src.name})
            continue
        cap = round_money(src.cap or 0.0)
        offers.append(
            FundingOffer(
                offer_id=src.identity,
                name=src.name,
                ref=src.ref or src.name,
                priority=src.priority,
                latency_days=src.latency_days,
                available_on=run_date + dt.timedelta(days=src.latency_days),
                cap=cap,
                remaining=cap,
                cost=float(src.cost or 0.0),
                chunk=float(src.chunk or 0.0),
                source=src.source,
            )
        )
    offers.sort(key=offer_sort_key)
    return offers


def offers_to_dataframe(offers: Iterable[FundingOffer]) -> pd.DataFrame:
    """Snapshot table of offer state (useful after a run to see what was drawn)."""
    return pd.DataFrame(
        [
            {
                "name": o.name,
                "priority": o.priority,
                "cost": o.cost,
                "cap": o.cap,
                "remaining": o.remaining,
                "drawn": o.drawn,
                "chunk": o.chunk,
                "latency_days": o.latency_days,
                "available_on": o.available_on.isoformat(),
            }
            for o in offers
        ],
        columns=[
            "name", "priority", "cost", "cap", "remaining", "drawn",
            "chunk", "latency_days", "available_on",
        ],
    )
