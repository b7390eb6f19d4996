"""
Analysis — totals, monthly aggregation, forecast report and the upcoming-obligation preview.
"""

from .aggregator import aggregate_by_month, injector_usage
from .metrics import LedgerTotals, compute_totals, ledger_totals, low_point, shortfall_events
from .preview import UpcomingObligation, liquidity_gap, upcoming_obligations
from .report import ForecastReport, generate_forecast_report

__all__ = [
    "aggregate_by_month",
    "injector_usage",
    "LedgerTotals",
    "compute_totals",
    "ledger_totals",
    "low_point",
    "shortfall_events",
    "UpcomingObligation",
    "liquidity_gap",
    "upcoming_obligations",
    "ForecastReport",
    "generate_forecast_report",
]
