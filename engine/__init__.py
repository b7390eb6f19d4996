"""
Forecast engine — event collection, funding offers, injector allocation and the ledger walk.
"""

from .events import CashEvent, collect, collect_all
from .injectors import allocate
from .ledger import Ledger, build_ledger
from .offers import FundingOffer, build_offers
from .runner import run_forecast

__all__ = [
    "CashEvent",
    "collect",
    "collect_all",
    "allocate",
    "Ledger",
    "build_ledger",
    "FundingOffer",
    "build_offers",
    "run_forecast",
]
