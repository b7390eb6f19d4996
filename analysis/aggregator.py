"""
Aggregate a ledger into monthly and per-source summaries for downstream display.

Instead of: a long list of dated rows
The caller gets: "March: income 2,052, bills -3,900, injected 1,800, month-end 240"
"""

from __future__ import annotations

import pandas as pd

from engine.ledger import Ledger

_KIND_COLUMNS = ("income", "bill", "debt", "injector")


def aggregate_by_month(ledger: Ledger) -> pd.DataFrame:
    """
    One row per calendar month touched by the ledger.

    Columns: month (YYYY-MM), income, bill, debt, injector (signed sums),
    net, and end_balance (running total after the month's last event).
    """
    columns = ["month", *_KIND_COLUMNS, "net", "end_balance"]
    df = ledger.to_dataframe()
    if df.empty:
        return pd.DataFrame(columns=columns)

    df["month"] = df["date"].dt.strftime("%Y-%m")

    flows = df[df["kind"] != "opening"]
    end_balance = df.groupby("month", sort=True)["running_total"].last()

    out = pd.DataFrame(index=end_balance.index)
    for kind in _KIND_COLUMNS:
        out[kind] = (
            flows[flows["kind"] == kind]
            .groupby("month")["amount"]
            .sum()
            .reindex(out.index, fill_value=0.0)
            .astype(float)
        )
    out["net"] = out[list(_KIND_COLUMNS)].sum(axis=1)
    out["end_balance"] = end_balance
    out = out.reset_index()
    return out[columns]


def injector_usage(ledger: Ledger) -> pd.DataFrame:
    """Per funding offer: cap, drawn, remaining and number of draws in the run."""
    draws = {}
    for e in ledger.injectors:
        draws[e.source] = draws.get(e.source, 0) + 1

    rows = [
        {
            "name": o.name,
            "priority": o.priority,
            "cap": o.cap,
            "drawn": o.drawn,
            "remaining": o.remaining,
            "draws": draws.get(o.offer_id, 0),
            "available_on": o.available_on.isoformat(),
        }
        for o in ledger.offers
    ]
    return pd.DataFrame(
        rows, columns=["name", "priority", "cap", "drawn", "remaining", "draws", "available_on"]
    )
