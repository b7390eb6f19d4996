"""
Forecast report — the handful of answers a household actually acts on.

  Q1: "Do I dip below my buffer?"          -> lowest running total vs buffer
  Q2: "Do I go negative even after help?"  -> unmet shortfall rows
  Q3: "Where does top-up money come from?" -> total injected per source
  Q4: "Is anything left in reserve?"       -> offers fully drawn
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd

from engine.ledger import Ledger

from .metrics import ledger_totals, low_point, shortfall_events


@dataclass
class ForecastReport:
    """Structured forecast output."""
    window_start: dt.date
    window_end: dt.date
    buffer_threshold: float

    opening_balance: float
    ending_balance: float
    total_inflow: float
    total_outflow: float

    low_point_date: Optional[dt.date]
    low_point_balance: float

    total_injected: float
    injector_count: int
    below_buffer_count: int
    negative_count: int
    first_negative_date: Optional[dt.date]

    depleted_offers: List[str] = field(default_factory=list)
    flags: List[str] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to a display-friendly table."""
        rows = [
            {"Metric": "Window", "Value": f"{self.window_start.isoformat()} .. {self.window_end.isoformat()}"},
            {"Metric": "Opening Balance", "Value": f"{self.opening_balance:,.2f}"},
            {"Metric": "Total Inflow", "Value": f"{self.total_inflow:,.2f}"},
            {"Metric": "Total Outflow", "Value": f"{self.total_outflow:,.2f}"},
            {"Metric": "Ending Balance", "Value": f"{self.ending_balance:,.2f}"},
            {"Metric": "Buffer", "Value": f"{self.buffer_threshold:,.2f}"},
            {
                "Metric": "Low Point",
                "Value": f"{self.low_point_balance:,.2f}"
                + (f" on {self.low_point_date.isoformat()}" if self.low_point_date else ""),
            },
            {"Metric": "Injected", "Value": f"{self.total_injected:,.2f} ({self.injector_count} draws)"},
            {"Metric": "Rows Below Buffer", "Value": str(self.below_buffer_count)},
            {"Metric": "Rows Below Zero", "Value": str(self.negative_count)},
        ]
        if self.depleted_offers:
            rows.append({"Metric": "Depleted Sources", "Value": ", ".join(self.depleted_offers)})
        if self.flags:
            rows.append({"Metric": "FLAGS", "Value": " | ".join(self.flags)})
        return pd.DataFrame(rows)


def generate_forecast_report(ledger: Ledger, buffer_threshold: Optional[float] = None) -> ForecastReport:
    """
    Summarize a built ledger.

    Parameters
    ----------
    ledger : Ledger
        Output of engine.ledger.build_ledger / engine.runner.run_forecast
    buffer_threshold : float, optional
        Defaults to the threshold the ledger was built with
    """
    buffer = ledger.buffer_threshold if buffer_threshold is None else float(buffer_threshold)

    totals = ledger_totals(ledger)
    low = low_point(ledger)
    below_buffer = shortfall_events(ledger, buffer)
    negative = shortfall_events(ledger, 0.0)
    injectors = ledger.injectors
    depleted = [o.name for o in ledger.offers if o.cap > 0 and o.remaining <= 0]

    flags = []
    if below_buffer:
        flags.append(f"BELOW_BUFFER: {len(below_buffer)} rows end below {buffer:,.2f}")
    if negative:
        flags.append(f"NEGATIVE_BALANCE: first on {negative[0].date.isoformat()}")
    if ledger.injection_ceiling_hit:
        flags.append("INJECTION_CEILING_HIT: later shortfalls were left unfunded")
    if depleted:
        flags.append(f"OFFERS_DEPLETED: {', '.join(depleted)}")

    return ForecastReport(
        window_start=ledger.window_start,
        window_end=ledger.window_end,
        buffer_threshold=buffer,
        opening_balance=ledger.opening_balance,
        ending_balance=ledger.ending_balance,
        total_inflow=totals.inflow,
        total_outflow=totals.outflow,
        low_point_date=low[0] if low else None,
        low_point_balance=low[1] if low else ledger.opening_balance,
        total_injected=sum(e.amount for e in injectors),
        injector_count=len(injectors),
        below_buffer_count=len(below_buffer),
        negative_count=len(negative),
        first_negative_date=negative[0].date if negative else None,
        depleted_offers=depleted,
        flags=flags,
    )
