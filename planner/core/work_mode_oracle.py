from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Protocol

from planner.core.calendar_math import add_days, format_date_local, iter_days, normalize_to_midnight
from planner.core.models import Weekday, WorkMode

LOGGER = logging.getLogger(__name__)

DEFAULT_REMOTE_WEEKDAYS = frozenset({Weekday.WEDNESDAY, Weekday.FRIDAY})
_WEEKEND = frozenset({Weekday.SATURDAY, Weekday.SUNDAY})


class WorkdaySource(Protocol):
    def get_workday(self, user_id: str, day: date | datetime) -> WorkMode | None:
        ...

    def get_workdays_in_range(
        self,
        user_id: str,
        start: date | datetime,
        end: date | datetime,
    ) -> dict[str, WorkMode]:
        ...


class HolidaySource(Protocol):
    async def holidays_for_year(self, year: int) -> frozenset[str]:
        ...


def default_work_mode(
    day: date | datetime,
    holidays: Iterable[str] = (),
    remote_weekdays: Iterable[Weekday] = DEFAULT_REMOTE_WEEKDAYS,
) -> WorkMode:
    """Work mode of a day nobody configured: weekends and holidays are off."""
    value = normalize_to_midnight(day)
    weekday = Weekday(value.weekday())
    if weekday in _WEEKEND:
        return WorkMode.OFF
    if format_date_local(value) in holidays:
        return WorkMode.OFF
    if weekday in set(remote_weekdays):
        return WorkMode.REMOTE
    return WorkMode.ON_SITE


class WorkModeOracle:
    def __init__(
        self,
        store: WorkdaySource,
        holidays: HolidaySource,
        *,
        remote_weekdays: Iterable[Weekday] = DEFAULT_REMOTE_WEEKDAYS,
    ) -> None:
        self._store = store
        self._holidays = holidays
        self._remote_weekdays = frozenset(remote_weekdays)

    async def get_work_mode_map(
        self,
        user_id: str,
        start: date | datetime,
        days: int,
    ) -> dict[str, WorkMode]:
        """Explicit modes over defaults for start .. start + days inclusive."""
        first = normalize_to_midnight(start)
        last = add_days(first, days)
        explicit = self._store.get_workdays_in_range(user_id, first, last)
        holidays: dict[int, frozenset[str]] = {}
        result: dict[str, WorkMode] = {}
        for day in iter_days(first, days):
            key = format_date_local(day)
            mode = explicit.get(key)
            if mode is None:
                if day.year not in holidays:
                    holidays[day.year] = await self._holidays.holidays_for_year(day.year)
                mode = default_work_mode(day, holidays[day.year], self._remote_weekdays)
            result[key] = mode
        LOGGER.debug(
            "work_mode_map user_id=%s start=%s days=%s explicit=%s",
            user_id,
            format_date_local(first),
            days,
            len(explicit),
        )
        return result

    async def get_work_mode(self, user_id: str, day: date | datetime) -> WorkMode:
        value = normalize_to_midnight(day)
        explicit = self._store.get_workday(user_id, value)
        if explicit is not None:
            return explicit
        holidays = await self._holidays.holidays_for_year(value.year)
        return default_work_mode(value, holidays, self._remote_weekdays)
