from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from planner.core.calendar_math import add_days, format_date_local, normalize_to_midnight
from planner.core.models import (
    CustomInterval,
    Daily,
    DayResult,
    Monthly,
    Occurrence,
    RequiredMode,
    ShiftAlert,
    ShiftInfo,
    Task,
    Weekly,
    WorkMode,
    Yearly,
)
from planner.core.recurrence import canonical_occurrence, max_shift_days_for
from planner.core.shift_search import (
    WorkModeMap,
    find_next_matching_date,
    needs_shift,
    work_mode_of,
)

DAY_LOOKBACK_DAYS = 45
DAY_LOOKAHEAD_DAYS = 45

_PERIODIC_RULES = (Weekly, Monthly, Yearly, CustomInterval)
_ALERTING_RULES = (Yearly, CustomInterval)


def day_window(target: date | datetime) -> tuple[date, int]:
    """Start and length of the work-mode map a day query needs."""
    start = add_days(target, -DAY_LOOKBACK_DAYS)
    return start, DAY_LOOKBACK_DAYS + DAY_LOOKAHEAD_DAYS


def occurrences_for_day(
    tasks: Iterable[Task],
    target: date | datetime,
    work_modes: WorkModeMap,
) -> DayResult:
    day = normalize_to_midnight(target)
    occurrences: list[Occurrence] = []
    daily: list[Occurrence] = []
    alerts: list[ShiftAlert] = []
    alerted: set[tuple[str, str]] = set()

    for task in tasks:
        rule = task.rule
        if isinstance(rule, Daily):
            daily.append(Occurrence(task=task, lands_on=day))
            continue
        if not isinstance(rule, _PERIODIC_RULES):
            continue

        canonical = canonical_occurrence(rule, day)
        if canonical is None:
            continue
        required = task.required_mode
        home_mode = work_mode_of(work_modes, canonical)

        # Custom-interval home day already has the exact mode: no shift matching.
        if isinstance(rule, CustomInterval) and home_mode.value == required.value:
            if canonical == day:
                occurrences.append(Occurrence(task=task, lands_on=day))
            continue

        if not needs_shift(required, home_mode):
            if canonical == day:
                occurrences.append(Occurrence(task=task, lands_on=day))
            continue

        shifted = find_next_matching_date(canonical, required, work_modes, max_shift_days_for(rule))
        if shifted == day:
            occurrences.append(
                Occurrence(
                    task=task,
                    lands_on=day,
                    shift_info=ShiftInfo(original_date=canonical, shifted_date=day),
                )
            )
        elif shifted is None and isinstance(rule, _ALERTING_RULES):
            alert = ShiftAlert(
                task_id=task.id,
                task_title=task.title,
                original_date=format_date_local(canonical),
                required_mode=required,
                frequency=rule.frequency,
                is_future_shift=canonical >= day,
            )
            if alert.key not in alerted:
                alerted.add(alert.key)
                alerts.append(alert)

    # Daily tasks follow periodic ones before the stable display-order sort.
    occurrences.extend(daily)
    return DayResult(occurrences=sort_by_display_order(occurrences), alerts=alerts)


def sort_by_display_order(occurrences: Iterable[Occurrence]) -> list[Occurrence]:
    """Ascending display_order; tasks without one go last, ties keep input order."""
    return sorted(
        occurrences,
        key=lambda item: (item.task.display_order is None, item.task.display_order or 0),
    )


def filter_by_work_mode(occurrences: Iterable[Occurrence], day_mode: WorkMode) -> list[Occurrence]:
    if day_mode is WorkMode.OFF:
        return []
    return [
        item
        for item in occurrences
        if item.task.required_mode is RequiredMode.ANY
        or item.task.required_mode.value == day_mode.value
    ]
