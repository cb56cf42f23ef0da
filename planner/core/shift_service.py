"""Request edges: fetch the work-mode map once, then run the pure engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Protocol, Sequence

from planner.core.calendar_math import format_date_local, normalize_to_midnight
from planner.core.day_occurrences import day_window, filter_by_work_mode, occurrences_for_day
from planner.core.models import Occurrence, ShiftAlert, Task, WorkMode
from planner.core.risk_scan import DEFAULT_WINDOW_DAYS, risk_window, scan_upcoming_risk

LOGGER = logging.getLogger(__name__)


class WorkModeLookup(Protocol):
    async def get_work_mode_map(self, user_id: str, start: date | datetime, days: int) -> dict[str, WorkMode]:
        ...

    async def get_work_mode(self, user_id: str, day: date | datetime) -> WorkMode:
        ...


@dataclass(frozen=True)
class DayPlan:
    day: date
    work_mode: WorkMode
    occurrences: list[Occurrence] = field(default_factory=list)
    alerts: list[ShiftAlert] = field(default_factory=list)


async def load_day(
    oracle: WorkModeLookup,
    user_id: str,
    tasks: Sequence[Task],
    day: date | datetime,
) -> DayPlan:
    target = normalize_to_midnight(day)
    start, days = day_window(target)
    work_modes = await oracle.get_work_mode_map(user_id, start, days)
    work_mode = await oracle.get_work_mode(user_id, target)
    result = occurrences_for_day(tasks, target, work_modes)
    occurrences = filter_by_work_mode(result.occurrences, work_mode)
    LOGGER.info(
        "day_loaded user_id=%s date=%s mode=%s occurrences=%s alerts=%s",
        user_id,
        format_date_local(target),
        work_mode.value,
        len(occurrences),
        len(result.alerts),
    )
    return DayPlan(day=target, work_mode=work_mode, occurrences=occurrences, alerts=result.alerts)


async def check_future_shifts(
    oracle: WorkModeLookup,
    user_id: str,
    tasks: Sequence[Task],
    start: date | datetime,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> list[ShiftAlert]:
    first = normalize_to_midnight(start)
    map_start, map_days = risk_window(first, window_days)
    work_modes = await oracle.get_work_mode_map(user_id, map_start, map_days)
    alerts = scan_upcoming_risk(tasks, first, work_modes, window_days)
    LOGGER.info(
        "risk_checked user_id=%s start=%s window_days=%s alerts=%s",
        user_id,
        format_date_local(first),
        window_days,
        len(alerts),
    )
    return alerts
