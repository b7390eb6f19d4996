"""
Pytest fixtures for the forecaster test suite.

Provides:
- RunContext fixtures for common windows
- Raw record builders (plain mappings, as adapters would hand them over)
- A logging reset so tests that configure logging do not leak handlers
"""

from datetime import date

import pytest

from core.config import RunContext
from core.logging_config import reset_logging


@pytest.fixture
def jan_2026():
    return RunContext(
        run_date=date(2026, 1, 1),
        window_start=date(2026, 1, 1),
        window_end=date(2026, 1, 31),
        buffer_threshold=100.0,
    )


@pytest.fixture
def q1_2026():
    return RunContext(
        run_date=date(2026, 1, 1),
        window_start=date(2026, 1, 1),
        window_end=date(2026, 3, 31),
        buffer_threshold=100.0,
    )


@pytest.fixture
def household_records():
    """A small but busy household: two incomes, bills, a biweekly debt, three sources."""
    return {
        "incomes": [
            {"ref": "SSI", "amount": 1026, "schedule": "2nd_wed"},
            {"ref": "Pension", "amount": 850, "schedule": "1st_week"},
        ],
        "bills": [
            {"ref": "Mortgage", "amount": 1500, "due_days": [15]},
            {"ref": "Verizon", "amount": 200, "due_days": 17, "account": "checking"},
            {"ref": "Insurance", "amount": 90, "due_days": [1, 15], "due_amounts": [40, 50]},
            {"ref": "Gym", "amount": 30, "due_days": [31]},
            {"ref": "Old card", "amount": 75, "due_days": [5], "covered": True},
        ],
        "debts": [
            {"ref": "F150 loan", "amount": 260, "anchor_date": "2026-01-02"},
        ],
        "funding_sources": [
            {"name": "Savings", "priority": 1, "latency_days": 0, "cap": 600, "chunk": 50},
            {"name": "Brokerage", "priority": 2, "latency_days": 5, "cap": 1500, "chunk": 100},
            {"name": "HELOC", "priority": 3, "latency_days": 0, "cap": 2000, "cost": 5},
            {"name": "Disabled", "priority": 0, "cap": 9999, "enabled": False},
        ],
    }


@pytest.fixture
def clean_logging():
    reset_logging()
    yield
    reset_logging()
