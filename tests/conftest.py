import sys
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from planner.core.calendar_math import format_date_local, iter_days  # noqa: E402
from planner.core.models import WorkMode  # noqa: E402


def modes(start: date, days: int, mode: WorkMode) -> dict[str, WorkMode]:
    """Map start .. start + days (inclusive) to a single work mode."""
    return {format_date_local(day): mode for day in iter_days(start, days)}


class FakeHolidays:
    """Holiday source that never touches the network."""

    def __init__(self, holidays: dict[int, set[str]] | None = None) -> None:
        self._holidays = holidays or {}
        self.requested_years: list[int] = []

    async def holidays_for_year(self, year: int) -> frozenset[str]:
        self.requested_years.append(year)
        return frozenset(self._holidays.get(year, set()))


class FakeOracle:
    """Work-mode lookup over a fixed map; records every call."""

    def __init__(self, work_modes: dict[str, WorkMode] | None = None, default: WorkMode = WorkMode.ON_SITE) -> None:
        self.work_modes = work_modes or {}
        self.default = default
        self.map_calls: list[tuple[str, date, int]] = []
        self.day_calls: list[tuple[str, date]] = []

    async def get_work_mode_map(self, user_id: str, start: date, days: int) -> dict[str, WorkMode]:
        self.map_calls.append((user_id, start, days))
        return {
            format_date_local(day): self.work_modes.get(format_date_local(day), self.default)
            for day in iter_days(start, days)
        }

    async def get_work_mode(self, user_id: str, day: date) -> WorkMode:
        self.day_calls.append((user_id, day))
        return self.work_modes.get(format_date_local(day), self.default)
