"""
Data preparation — normalizing raw records from adapters, validation.
"""

from .records import (
    AccountRecord,
    FundingSourceRecord,
    IncomeRecord,
    ObligationRecord,
    normalize_accounts,
    normalize_funding_sources,
    normalize_incomes,
    normalize_obligations,
    normalize_records,
)
from .validators import ValidationResult, validate_records

__all__ = [
    "AccountRecord",
    "FundingSourceRecord",
    "IncomeRecord",
    "ObligationRecord",
    "normalize_accounts",
    "normalize_funding_sources",
    "normalize_incomes",
    "normalize_obligations",
    "normalize_records",
    "ValidationResult",
    "validate_records",
]
