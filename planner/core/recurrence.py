from __future__ import annotations

from datetime import date, datetime

from planner.core.calendar_math import (
    add_days,
    anniversary,
    days_between,
    first_weekday_of_month,
    normalize_to_midnight,
    weekday_index,
)
from planner.core.models import (
    CUSTOM_MAX_SHIFT_DAYS,
    CustomInterval,
    Monthly,
    MONTHLY_MAX_SHIFT_DAYS,
    Weekly,
    WEEKLY_MAX_SHIFT_DAYS,
    Yearly,
    YEARLY_MAX_SHIFT_DAYS,
)


def canonical_occurrence(rule: object, target: date | datetime) -> date | None:
    """Most recent date on or before target that the rule produces.

    Work modes are ignored here. Daily rules, unschedulable rules (None) and
    unknown objects resolve to None.
    """
    day = normalize_to_midnight(target)
    if isinstance(rule, Weekly):
        return _weekly_occurrence(rule, day)
    if isinstance(rule, Monthly):
        return _monthly_occurrence(rule, day)
    if isinstance(rule, Yearly):
        return _yearly_occurrence(rule, day)
    if isinstance(rule, CustomInterval):
        return _custom_occurrence(rule, day)
    return None


def default_max_shift_days(rule: object) -> int:
    if isinstance(rule, Monthly):
        return MONTHLY_MAX_SHIFT_DAYS
    if isinstance(rule, Yearly):
        return YEARLY_MAX_SHIFT_DAYS
    if isinstance(rule, CustomInterval):
        return CUSTOM_MAX_SHIFT_DAYS
    return WEEKLY_MAX_SHIFT_DAYS


def max_shift_days_for(rule: object) -> int:
    value = getattr(rule, "max_shift_days", None)
    if isinstance(value, int) and value >= 0:
        return value
    return default_max_shift_days(rule)


def _weekly_occurrence(rule: Weekly, day: date) -> date | None:
    if rule.weekday is None:
        return None
    distance = (weekday_index(day) - int(rule.weekday)) % 7
    return add_days(day, -distance)


def _monthly_occurrence(rule: Monthly, day: date) -> date | None:
    if rule.weekday is None:
        return None
    if weekday_index(day) == int(rule.weekday) and day.day <= 7:
        return day
    candidate = first_weekday_of_month(day.year, day.month, int(rule.weekday))
    if candidate > day:
        return None
    return candidate


def _yearly_occurrence(rule: Yearly, day: date) -> date | None:
    if rule.anchor is None:
        return None
    anchor = normalize_to_midnight(rule.anchor)
    if day < anchor:
        return None
    candidate = anniversary(anchor, day.year)
    if candidate > day:
        return None
    if days_between(candidate, day) > max_shift_days_for(rule):
        return None
    return candidate


def _custom_occurrence(rule: CustomInterval, day: date) -> date | None:
    if rule.anchor is None or not rule.interval_days or rule.interval_days < 1:
        return None
    anchor = normalize_to_midnight(rule.anchor)
    if day < anchor:
        return None
    elapsed = days_between(anchor, day)
    if elapsed % rule.interval_days == 0:
        return day
    return add_days(anchor, (elapsed // rule.interval_days) * rule.interval_days)
