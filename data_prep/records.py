"""
Canonical record models for everything the forecaster consumes.

Record adapters (frontmatter readers, CSV loaders, fixtures) hand over plain
mappings whose field names vary between sources. Each model maps the known
aliases onto one canonical field so the engine only ever sees a fixed schema:

    ObligationRecord     bills and debts
    IncomeRecord         scheduled deposits
    FundingSourceRecord  injector sources (become FundingOffers per run)
    AccountRecord        balances used for the opening balance

Coercion is lenient on purpose: a malformed value becomes None / a default and
the engine skips what it cannot schedule. A mapping that still fails
validation is logged and dropped, never raised.
"""

from __future__ import annotations

import math
import re
from datetime import date
from pathlib import PurePath
from typing import Any, ClassVar, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from core.logging_config import get_logger
from core.utils import parse_date

logger = get_logger("data_prep.records")

R = TypeVar("R", bound="_Record")


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        n = float(value)
    elif isinstance(value, str):
        s = value.strip().replace(",", "").replace("$", "")
        try:
            n = float(s)
        except ValueError:
            return None
    else:
        return None
    return n if math.isfinite(n) else None


def _to_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        s = value.strip().lower()
        if s == "true":
            return True
        if s == "false":
            return False
    return default


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_list(value: Any) -> list:
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _present(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    # keys tried, in order, for the record's display name
    NAME_KEYS: ClassVar[Tuple[str, ...]] = ("ref", "name")
    NAME_FIELD: ClassVar[str] = "ref"

    @model_validator(mode="before")
    @classmethod
    def _fill_name(cls, data: Any) -> Any:
        """Fall back to the source file stem (or 'unnamed') when no name key is set."""
        if not isinstance(data, Mapping):
            return data
        for key in cls.NAME_KEYS:
            if _present(data.get(key)):
                out = dict(data)
                out[cls.NAME_FIELD] = data[key].strip()
                return out
        out = dict(data)
        source = _to_text(data.get("source") or data.get("file") or data.get("id"))
        out[cls.NAME_FIELD] = PurePath(source).stem if source else "unnamed"
        return out


class _Scheduled(_Record):
    """Fields shared by everything that recurs on a schedule."""

    amount: Optional[float] = Field(
        None, validation_alias=AliasChoices("amount", "base_amount", "value")
    )
    due_days: List[int] = Field(
        default_factory=list, validation_alias=AliasChoices("due_days", "due_day")
    )
    due_amounts: List[float] = Field(default_factory=list)
    anchor_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("anchor_date", "anchor", "biweekly_anchor")
    )
    schedule: str = ""
    source: str = Field("", validation_alias=AliasChoices("source", "file"))

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v):
        return _to_float(v)

    @field_validator("due_days", mode="before")
    @classmethod
    def _due_days(cls, v):
        days = []
        for item in _as_list(v):
            n = _to_float(item)
            if n is not None and n.is_integer():
                days.append(int(n))
        return days

    @field_validator("due_amounts", mode="before")
    @classmethod
    def _due_amounts(cls, v):
        amounts = [_to_float(item) for item in _as_list(v)]
        # one bad entry breaks positional pairing, so drop the whole list
        if any(a is None for a in amounts):
            return []
        return amounts

    @field_validator("anchor_date", mode="before")
    @classmethod
    def _anchor(cls, v):
        return parse_date(v)

    @field_validator("schedule", "source", mode="before")
    @classmethod
    def _text(cls, v):
        return _to_text(v)


class ObligationRecord(_Scheduled):
    """A bill or debt payment."""

    NAME_KEYS: ClassVar[Tuple[str, ...]] = ("ref", "name", "bill")

    ref: str
    cycle: str = ""
    account: str = Field("", validation_alias=AliasChoices("account", "account_key"))
    autopay: bool = False
    covered: bool = Field(False, validation_alias=AliasChoices("covered", "excluded"))

    @field_validator("cycle", "account", mode="before")
    @classmethod
    def _meta(cls, v):
        return _to_text(v)

    @field_validator("autopay", "covered", mode="before")
    @classmethod
    def _flags(cls, v):
        return _to_bool(v, default=False)


class IncomeRecord(_Scheduled):
    """A scheduled deposit."""

    ref: str
    date_of_deposit: Optional[date] = None
    deposit_to: str = Field(
        "", validation_alias=AliasChoices("deposit_to", "bank_key", "account")
    )
    tags: List[str] = Field(default_factory=list)

    @field_validator("date_of_deposit", mode="before")
    @classmethod
    def _deposit_date(cls, v):
        return parse_date(v)

    @field_validator("deposit_to", mode="before")
    @classmethod
    def _deposit_to(cls, v):
        return _to_text(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v):
        if isinstance(v, str):
            return [t for t in re.split(r"[,\s]+", v) if t]
        return [_to_text(t) for t in _as_list(v)]

    @property
    def is_income(self) -> bool:
        """Untagged records count as income; tagged ones must carry an income tag."""
        if not self.tags:
            return True
        return any(t.lstrip("#").lower() == "income" for t in self.tags)


class FundingSourceRecord(_Record):
    """A source an injector can draw from (savings, line of credit, brokerage...)."""

    NAME_KEYS: ClassVar[Tuple[str, ...]] = ("name", "ref")
    NAME_FIELD: ClassVar[str] = "name"

    name: str
    ref: str = ""
    source_id: str = Field("", validation_alias=AliasChoices("id", "source_id"))
    enabled: bool = Field(True, validation_alias=AliasChoices("injector_enabled", "enabled"))
    priority: float = Field(
        100.0, validation_alias=AliasChoices("injector_priority", "priority")
    )
    latency_days: int = Field(
        0, validation_alias=AliasChoices("injector_latency_days", "latency_days", "latency")
    )
    cap: float = Field(
        0.0, validation_alias=AliasChoices("injector_cap", "cap", "holdings", "balance")
    )
    cost: float = Field(0.0, validation_alias=AliasChoices("injector_cost", "cost"))
    chunk: float = Field(0.0, validation_alias=AliasChoices("injector_chunk", "chunk"))
    source: str = Field("", validation_alias=AliasChoices("source", "file"))

    @field_validator("enabled", mode="before")
    @classmethod
    def _enabled(cls, v):
        return _to_bool(v, default=True)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, v):
        n = _to_float(v)
        return 100.0 if n is None else n

    @field_validator("latency_days", mode="before")
    @classmethod
    def _latency(cls, v):
        n = _to_float(v)
        return 0 if n is None else int(n)

    @field_validator("cap", "cost", "chunk", mode="before")
    @classmethod
    def _money(cls, v):
        n = _to_float(v)
        return 0.0 if n is None else n

    @field_validator("ref", "source_id", "source", mode="before")
    @classmethod
    def _text(cls, v):
        return _to_text(v)

    @property
    def identity(self) -> str:
        return self.source_id or self.source or self.name


class AccountRecord(_Record):
    """A cash account snapshot."""

    NAME_KEYS: ClassVar[Tuple[str, ...]] = ("label", "name")
    NAME_FIELD: ClassVar[str] = "label"

    label: str
    account_key: str = Field("", validation_alias=AliasChoices("account_key", "bank_key"))
    kind: str = Field("", validation_alias=AliasChoices("kind", "type"))
    balance: Optional[float] = Field(
        None, validation_alias=AliasChoices("balance", "current_balance", "available")
    )
    as_of: Optional[date] = Field(None, validation_alias=AliasChoices("as_of", "as_of_date", "asof"))
    source: str = Field("", validation_alias=AliasChoices("source", "file"))

    @field_validator("balance", mode="before")
    @classmethod
    def _balance(cls, v):
        return _to_float(v)

    @field_validator("as_of", mode="before")
    @classmethod
    def _as_of(cls, v):
        return parse_date(v)

    @field_validator("account_key", "kind", "source", mode="before")
    @classmethod
    def _text(cls, v):
        return _to_text(v)


def normalize_records(raw_records: Optional[Iterable[Any]], model: Type[R]) -> List[R]:
    """Map raw mappings onto ``model``; drop (and log) anything that does not fit."""
    out: List[R] = []
    for index, raw in enumerate(raw_records or ()):
        if isinstance(raw, model):
            out.append(raw)
            continue
        if not isinstance(raw, Mapping):
            logger.warning(
                "record_skipped",
                extra={"model": model.__name__, "index": index, "reason": "not a mapping"},
            )
            continue
        try:
            out.append(model.model_validate(dict(raw)))
        except ValidationError as exc:
            logger.warning(
                "record_skipped",
                extra={
                    "model": model.__name__,
                    "index": index,
                    "reason": "validation",
                    "errors": exc.error_count(),
                },
            )
    return out


def normalize_obligations(raw_records) -> List[ObligationRecord]:
    return normalize_records(raw_records, ObligationRecord)


def normalize_incomes(raw_records) -> List[IncomeRecord]:
    records = normalize_records(raw_records, IncomeRecord)
    kept = [r for r in records if r.is_income]
    if len(kept) != len(records):
        logger.debug("income_records_untagged", extra={"dropped": len(records) - len(kept)})
    return kept


def normalize_funding_sources(raw_records) -> List[FundingSourceRecord]:
    return normalize_records(raw_records, FundingSourceRecord)


def normalize_accounts(raw_records) -> List[AccountRecord]:
    return normalize_records(raw_records, AccountRecord)
