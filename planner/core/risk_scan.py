from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Iterator

from planner.core.calendar_math import (
    add_days,
    anniversary,
    days_between,
    format_date_local,
    normalize_to_midnight,
)
from planner.core.models import CustomInterval, ShiftAlert, Task, Yearly
from planner.core.recurrence import max_shift_days_for
from planner.core.shift_search import (
    WorkModeMap,
    find_next_matching_date,
    needs_shift,
    work_mode_of,
)

DEFAULT_WINDOW_DAYS = 45
RISK_LOOKBACK_DAYS = 45
RISK_LOOKAHEAD_DAYS = 90


def risk_window(start: date | datetime, window_days: int = DEFAULT_WINDOW_DAYS) -> tuple[date, int]:
    """Start and length of the work-mode map a risk scan needs."""
    lookahead = max(RISK_LOOKAHEAD_DAYS, 2 * window_days)
    return add_days(start, -RISK_LOOKBACK_DAYS), RISK_LOOKBACK_DAYS + lookahead


def scan_upcoming_risk(
    tasks: Iterable[Task],
    start: date | datetime,
    work_modes: WorkModeMap,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> list[ShiftAlert]:
    """Yearly and custom-interval occurrences in the window that cannot shift."""
    first = normalize_to_midnight(start)
    last = add_days(first, window_days)
    alerts: list[ShiftAlert] = []
    seen: set[tuple[str, str]] = set()

    for task in tasks:
        rule = task.rule
        if isinstance(rule, Yearly):
            dates = _yearly_dates(rule, first, last)
        elif isinstance(rule, CustomInterval):
            dates = _custom_dates(rule, first, last)
        else:
            continue
        max_days = max_shift_days_for(rule)
        for occurrence in dates:
            if not needs_shift(task.required_mode, work_mode_of(work_modes, occurrence)):
                continue
            if find_next_matching_date(occurrence, task.required_mode, work_modes, max_days) is not None:
                continue
            alert = ShiftAlert(
                task_id=task.id,
                task_title=task.title,
                original_date=format_date_local(occurrence),
                required_mode=task.required_mode,
                frequency=rule.frequency,
                is_future_shift=occurrence >= first,
            )
            if alert.key in seen:
                continue
            seen.add(alert.key)
            alerts.append(alert)
    return alerts


def _yearly_dates(rule: Yearly, first: date, last: date) -> Iterator[date]:
    if rule.anchor is None:
        return
    anchor = normalize_to_midnight(rule.anchor)
    if anchor > last:
        return
    # A past anniversary is still reportable while its shift window reaches first.
    earliest = add_days(first, -max_shift_days_for(rule))
    for year in (first.year, first.year + 1):
        candidate = anniversary(anchor, year)
        if candidate < anchor or candidate < earliest or candidate > last:
            continue
        yield candidate


def _custom_dates(rule: CustomInterval, first: date, last: date) -> Iterator[date]:
    if rule.anchor is None or not rule.interval_days or rule.interval_days < 1:
        return
    anchor = normalize_to_midnight(rule.anchor)
    if anchor > last:
        return
    lower = max(first, anchor)
    steps = -(-days_between(anchor, lower) // rule.interval_days)
    current = add_days(anchor, steps * rule.interval_days)
    while current <= last:
        yield current
        current = add_days(current, rule.interval_days)
