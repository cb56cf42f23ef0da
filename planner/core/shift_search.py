from __future__ import annotations

from datetime import date, datetime
from typing import Mapping

from planner.core.calendar_math import add_days, format_date_local, normalize_to_midnight
from planner.core.models import RequiredMode, WorkMode

WorkModeMap = Mapping[str, WorkMode]

# Fallback for dates absent from a prefetched map. Not the oracle's
# weekday/holiday default, see work_mode_oracle.default_work_mode.
SEARCH_DEFAULT_WORK_MODE = WorkMode.ON_SITE


def work_mode_of(work_modes: WorkModeMap, day: date | datetime) -> WorkMode:
    return work_modes.get(format_date_local(day), SEARCH_DEFAULT_WORK_MODE)


def satisfies(required: RequiredMode, day_mode: WorkMode) -> bool:
    """True when a day of day_mode is a valid landing day for required."""
    if day_mode is WorkMode.OFF:
        return False
    return required is RequiredMode.ANY or required.value == day_mode.value


def needs_shift(required: RequiredMode, day_mode: WorkMode) -> bool:
    if required is RequiredMode.ANY:
        return day_mode is WorkMode.OFF
    return required.value != day_mode.value


def find_next_matching_date(
    start: date | datetime,
    required: RequiredMode,
    work_modes: WorkModeMap,
    max_days: int,
) -> date | None:
    """Scan start .. start + max_days (inclusive) for the first compatible day."""
    current = normalize_to_midnight(start)
    for offset in range(max_days + 1):
        candidate = add_days(current, offset)
        day_mode = work_mode_of(work_modes, candidate)
        if day_mode is WorkMode.OFF:
            continue
        if required is RequiredMode.ANY or required.value == day_mode.value:
            return candidate
    return None
