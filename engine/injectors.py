"""
Injector allocation — greedy backfill of a shortfall from funding offers.

Given how much is needed on a date, visit the eligible offers (capacity left,
already available on that date) in (priority, cost, name) order and draw from
each until the need is met or the offers run out. Each draw becomes one
synthetic ``injector`` CashEvent. Offers are mutated in place so capacity is
shared across the whole ledger walk.

This is a heuristic, not a solver: a cheaper mix may exist. Chunk rounding can
overshoot the amount needed but never the offer's remaining capacity.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional, Sequence

from core.logging_config import get_logger
from core.utils import round_money, round_up_to_chunk

from .events import CashEvent
from .offers import FundingOffer, offer_sort_key

logger = get_logger("engine.injectors")


def allocate(
    needed: float,
    on: dt.date,
    offers: Sequence[FundingOffer],
    *,
    limit: Optional[int] = None,
) -> List[CashEvent]:
    """
    Draw up to ``needed`` from ``offers`` on date ``on``.

    Parameters
    ----------
    needed : float
        Shortfall to close (buffer - running balance)
    on : date
        Date of the shortfall; offers not yet available on it are ignored
    offers : sequence of FundingOffer
        Mutated in place (``remaining`` decreases)
    limit : int, optional
        Maximum number of injector events to emit (the ledger's remaining
        injection budget)

    Returns
    -------
    Injector CashEvents dated ``on``; empty when nothing is eligible.
    """
    injections: List[CashEvent] = []
    # a need under half a cent is met
    needed = round_money(needed)
    if needed <= 0 or (limit is not None and limit <= 0):
        return injections

    eligible = sorted((o for o in offers if o.is_eligible(on)), key=offer_sort_key)
    for offer in eligible:
        if needed <= 0:
            break
        if limit is not None and len(injections) >= limit:
            break

        raw = min(needed, offer.remaining)
        amount = min(round_money(round_up_to_chunk(raw, offer.chunk)), offer.remaining)
        if amount <= 0:
            continue

        offer.remaining = round_money(offer.remaining - amount)
        needed = round_money(needed - amount)
        injections.append(
            CashEvent(
                date=on,
                label=f"Injector: {offer.name}",
                kind="injector",
                amount=amount,
                account=offer.name,
                cycle="injector",
                source=offer.offer_id,
            )
        )
        logger.debug(
            "injector_allocated",
            extra={
                "offer": offer.name,
                "date": on,
                "amount": amount,
                "remaining": offer.remaining,
            },
        )

    if needed > 0:
        logger.debug("shortfall_unmet", extra={"date": on, "unmet": needed})
    return injections
