"""
Schedule resolution — recurring schedule descriptions to concrete dates.
"""

from .resolver import (
    BiweeklySpec,
    DayOfMonthSpec,
    FirstBusinessDaySpec,
    NthWeekdaySpec,
    OneOffSpec,
    ScheduleSpec,
    adjust_for_weekend,
    days_of_month,
    first_business_day,
    nth_weekday_of_month,
    parse_schedule_token,
    resolve,
    resolve_biweekly,
    schedule_spec_for,
)

__all__ = [
    "BiweeklySpec",
    "DayOfMonthSpec",
    "FirstBusinessDaySpec",
    "NthWeekdaySpec",
    "OneOffSpec",
    "ScheduleSpec",
    "adjust_for_weekend",
    "days_of_month",
    "first_business_day",
    "nth_weekday_of_month",
    "parse_schedule_token",
    "resolve",
    "resolve_biweekly",
    "schedule_spec_for",
]
