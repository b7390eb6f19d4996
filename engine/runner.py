"""
Forecast runner — one call from raw records to a finished Ledger.

  raw mappings -> data_prep.records (normalize) -> data_prep.validators (log)
               -> engine.events.collect_all + engine.offers.build_offers
               -> engine.ledger.build_ledger (allocates injectors inline)

Each call is a pure function of its inputs: offers are rebuilt from the
funding-source records every time, so two runs never share capacity.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from core.config import RunContext
from core.logging_config import bind_run, get_logger
from data_prep.records import (
    AccountRecord,
    normalize_accounts,
    normalize_funding_sources,
    normalize_incomes,
    normalize_obligations,
)
from data_prep.validators import validate_records

from .events import collect_all
from .ledger import Ledger, build_ledger
from .offers import build_offers

logger = get_logger("engine.runner")


def opening_balance_from_accounts(
    accounts: Iterable[AccountRecord],
    kinds: Iterable[str],
) -> float:
    """
    Sum the balances of accounts whose kind is in ``kinds`` (case-insensitive).

    Accounts without a usable balance contribute nothing. An empty ``kinds``
    means every account counts.
    """
    wanted = {k.lower() for k in kinds}
    total = 0.0
    for acct in accounts:
        if acct.balance is None:
            continue
        if wanted and acct.kind.lower() not in wanted:
            continue
        total += acct.balance
    return total


def run_forecast(
    context: RunContext,
    *,
    bills: Iterable = (),
    debts: Iterable = (),
    incomes: Iterable = (),
    funding_sources: Iterable = (),
    accounts: Iterable = (),
    opening_balance: Optional[float] = None,
) -> Ledger:
    """
    Build the projected ledger for ``context``'s window.

    Parameters
    ----------
    context : RunContext
        Run date, window, buffer threshold and injection ceiling
    bills, debts, incomes, funding_sources, accounts : iterables of mappings
        Raw records from the adapters (already-normalized models pass through)
    opening_balance : float, optional
        Explicit opening balance; when omitted it is aggregated from
        ``accounts`` whose kind is in ``context.opening_account_kinds``

    Returns
    -------
    Ledger
    """
    with bind_run(context):
        bill_records = normalize_obligations(bills)
        debt_records = normalize_obligations(debts)
        income_records = normalize_incomes(incomes)
        source_records = normalize_funding_sources(funding_sources)
        account_records = normalize_accounts(accounts)

        validation = validate_records(
            bills=bill_records,
            debts=debt_records,
            incomes=income_records,
            funding_sources=source_records,
            accounts=account_records,
        )
        for message in validation.errors:
            logger.warning("record_error", extra={"detail": message})
        for message in validation.warnings:
            logger.info("record_warning", extra={"detail": message})

        if opening_balance is None:
            opening_balance = opening_balance_from_accounts(
                account_records, context.opening_account_kinds
            )

        events = collect_all(
            context.window_start,
            context.window_end,
            bills=bill_records,
            debts=debt_records,
            incomes=income_records,
        )
        offers = build_offers(source_records, context.run_date)

        ledger = build_ledger(
            opening_balance,
            events,
            offers,
            context.buffer_threshold,
            window_start=context.window_start,
            window_end=context.window_end,
            max_injections=context.max_injections,
        )

        if logger.isEnabledFor(logging.INFO):
            logger.info(
                "forecast_built",
                extra={
                    "opening_balance": ledger.opening_balance,
                    "ending_balance": ledger.ending_balance,
                    "events": len(ledger),
                    "injected": ledger.total_injected,
                    "ceiling_hit": ledger.injection_ceiling_hit,
                },
            )
    return ledger
