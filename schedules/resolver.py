"""
Schedule resolution — turn a record's recurrence description into concrete dates.

Supported schedules (exactly one applies per record, checked in this order):
  OneOffSpec            a single explicit date (income ``date_of_deposit``)
  BiweeklySpec          anchor date + fixed 14-day interval
  DayOfMonthSpec        list of calendar days, e.g. due_days: [1, 15]
  NthWeekdaySpec        token such as "2nd Wednesday" or "2nd_wed"
  FirstBusinessDaySpec  token "1st_week" (first Mon-Fri of the month)

Everything here is pure: no I/O, no clock access. ``month`` is 1-based.
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple, Union

from core.utils import parse_date

BIWEEKLY_INTERVAL_DAYS = 14

WEEKDAYS = {
    "mon": 0, "monday": 0,
    "tue": 1, "tues": 1, "tuesday": 1,
    "wed": 2, "weds": 2, "wednesday": 2,
    "thu": 3, "thur": 3, "thurs": 3, "thursday": 3,
    "fri": 4, "friday": 4,
    "sat": 5, "saturday": 5,
    "sun": 6, "sunday": 6,
}

_NTH_TOKEN = re.compile(r"^([1-5])(?:st|nd|rd|th)?[\s_\-]+([a-z]+)$", re.IGNORECASE)
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class DayOfMonthSpec:
    days: Tuple[int, ...]


@dataclass(frozen=True)
class NthWeekdaySpec:
    weekday: int  # Monday=0 .. Sunday=6
    nth: int


@dataclass(frozen=True)
class FirstBusinessDaySpec:
    pass


@dataclass(frozen=True)
class BiweeklySpec:
    anchor: date


@dataclass(frozen=True)
class OneOffSpec:
    on: date


ScheduleSpec = Union[DayOfMonthSpec, NthWeekdaySpec, FirstBusinessDaySpec, BiweeklySpec, OneOffSpec]


def parse_schedule_token(token) -> Optional[ScheduleSpec]:
    """
    Parse a free-text schedule token.

    "2nd Wednesday", "2nd wed", "2nd_wed", "4th-fri" -> NthWeekdaySpec
    "1st_week"                                        -> FirstBusinessDaySpec
    "2026-03-11"                                      -> OneOffSpec
    anything else                                     -> None
    """
    if not isinstance(token, str):
        return None
    s = token.strip()
    if not s:
        return None

    if _ISO_DATE.match(s):
        on = parse_date(s)
        return OneOffSpec(on) if on is not None else None

    m = _NTH_TOKEN.match(s)
    if not m:
        return None
    nth = int(m.group(1))
    word = m.group(2).lower()

    if word == "week":
        return FirstBusinessDaySpec() if nth == 1 else None
    if word in WEEKDAYS:
        return NthWeekdaySpec(weekday=WEEKDAYS[word], nth=nth)
    return None


def schedule_spec_for(record) -> Optional[ScheduleSpec]:
    """Pick the one schedule variant a normalized record describes (None if none)."""
    on = getattr(record, "date_of_deposit", None)
    if on is not None:
        return OneOffSpec(on)

    anchor = getattr(record, "anchor_date", None)
    if anchor is not None:
        return BiweeklySpec(anchor)

    days = tuple(getattr(record, "due_days", None) or ())
    if days:
        return DayOfMonthSpec(days)

    return parse_schedule_token(getattr(record, "schedule", None))


def days_of_month(days: Iterable[int], year: int, month: int) -> List[date]:
    """Dates for each listed day that exists in the month; Feb 31 is dropped, never rolled over."""
    last_day = calendar.monthrange(year, month)[1]
    out = []
    for day in days:
        if isinstance(day, bool) or not isinstance(day, int):
            continue
        if 1 <= day <= last_day:
            out.append(date(year, month, day))
    return out


def nth_weekday_of_month(year: int, month: int, weekday: int, nth: int) -> date:
    """
    The nth ``weekday`` of the month (Monday=0).

    When the month has fewer than ``nth`` such weekdays the result falls in the
    following month; callers treat that as no occurrence.
    """
    if not 1 <= nth <= 5:
        raise ValueError(f"nth out of range: {nth}")
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + 7 * (nth - 1))


def first_business_day(year: int, month: int) -> date:
    d = date(year, month, 1)
    while d.weekday() >= 5:
        d += timedelta(days=1)
    return d


def resolve_biweekly(
    anchor: date,
    window_start: date,
    window_end: date,
    *,
    interval_days: int = BIWEEKLY_INTERVAL_DAYS,
) -> List[date]:
    """Every anchor + k*interval (k may be negative) inside [window_start, window_end]."""
    step = timedelta(days=interval_days)
    cursor = anchor
    if cursor < window_start:
        cursor += step * ((window_start - cursor).days // interval_days)
        while cursor < window_start:
            cursor += step
    else:
        while cursor - step >= window_start:
            cursor -= step

    out = []
    while cursor <= window_end:
        out.append(cursor)
        cursor += step
    return out


def resolve(spec: ScheduleSpec, year: int, month: int) -> List[date]:
    """Candidate dates for one calendar month (may include a date outside it for NthWeekdaySpec)."""
    if isinstance(spec, DayOfMonthSpec):
        return days_of_month(spec.days, year, month)
    if isinstance(spec, NthWeekdaySpec):
        return [nth_weekday_of_month(year, month, spec.weekday, spec.nth)]
    if isinstance(spec, FirstBusinessDaySpec):
        return [first_business_day(year, month)]
    if isinstance(spec, BiweeklySpec):
        first = date(year, month, 1)
        last = date(year, month, calendar.monthrange(year, month)[1])
        return resolve_biweekly(spec.anchor, first, last)
    if isinstance(spec, OneOffSpec):
        return [spec.on] if (spec.on.year, spec.on.month) == (year, month) else []
    raise TypeError(f"Unknown schedule spec: {spec!r}")


def adjust_for_weekend(d: date, rule: str = "pay_friday") -> date:
    """
    Pull a Saturday/Sunday date back to the preceding Friday.

    Display/preview convenience only; ledger dates are never adjusted.
    ``rule="none"`` returns the date unchanged.
    """
    if rule != "pay_friday":
        return d
    wd = d.weekday()
    if wd == 5:
        return d - timedelta(days=1)
    if wd == 6:
        return d - timedelta(days=2)
    return d
