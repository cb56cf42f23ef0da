from __future__ import annotations

from datetime import date

from conftest import modes

from planner.core.calendar_math import add_days
from planner.core.models import (
    CustomInterval,
    Daily,
    Frequency,
    Monthly,
    RequiredMode,
    Task,
    Weekday,
    Weekly,
    WorkMode,
    Yearly,
)
from planner.core.risk_scan import risk_window, scan_upcoming_risk


def _task(task_id: str, rule, required: RequiredMode = RequiredMode.ANY) -> Task:
    return Task(id=task_id, title=f"Task {task_id}", rule=rule, required_mode=required)


def _around(start: date, mode: WorkMode) -> dict[str, WorkMode]:
    return modes(add_days(start, -45), 45, mode) | modes(start, 45, mode)


def test_risk_window_grows_with_scan_window() -> None:
    assert risk_window(date(2024, 6, 15)) == (date(2024, 5, 1), 135)
    assert risk_window(date(2024, 6, 15), 60) == (date(2024, 5, 1), 165)


def test_periodic_and_daily_tasks_are_ignored() -> None:
    tasks = [
        _task("weekly", Weekly(weekday=Weekday.MONDAY), RequiredMode.REMOTE),
        _task("monthly", Monthly(weekday=Weekday.MONDAY), RequiredMode.REMOTE),
        _task("daily", Daily(), RequiredMode.REMOTE),
        _task("none", None),
    ]

    assert scan_upcoming_risk(tasks, date(2024, 6, 15), _around(date(2024, 6, 15), WorkMode.OFF)) == []


def test_yearly_on_start_day_without_any_workday() -> None:
    task = _task("1", Yearly(anchor=date(2023, 6, 15), max_shift_days=5))
    start = date(2024, 6, 15)

    alerts = scan_upcoming_risk([task], start, _around(start, WorkMode.OFF))

    assert len(alerts) == 1
    assert alerts[0].task_id == "1"
    assert alerts[0].frequency is Frequency.YEARLY
    assert alerts[0].original_date == "2024-06-15"
    assert alerts[0].is_future_shift is True


def test_yearly_later_in_window_without_matching_mode() -> None:
    task = _task("1", Yearly(anchor=date(2023, 6, 15), max_shift_days=5), RequiredMode.ON_SITE)
    start = date(2024, 6, 10)

    alerts = scan_upcoming_risk([task], start, modes(start, 45, WorkMode.REMOTE))

    assert [alert.original_date for alert in alerts] == ["2024-06-15"]


def test_yearly_with_reachable_day_has_no_alert() -> None:
    task = _task("1", Yearly(anchor=date(2023, 6, 15), max_shift_days=5), RequiredMode.REMOTE)
    start = date(2024, 6, 10)
    work_modes = modes(start, 45, WorkMode.ON_SITE)
    work_modes["2024-06-17"] = WorkMode.REMOTE

    assert scan_upcoming_risk([task], start, work_modes) == []


def test_yearly_past_anniversary_still_inside_shift_window() -> None:
    task = _task("1", Yearly(anchor=date(2023, 6, 15), max_shift_days=5))
    start = date(2024, 6, 18)

    alerts = scan_upcoming_risk([task], start, _around(start, WorkMode.OFF))

    assert [alert.original_date for alert in alerts] == ["2024-06-15"]
    assert alerts[0].is_future_shift is False


def test_yearly_wraps_into_next_year() -> None:
    task = _task("1", Yearly(anchor=date(2020, 1, 5)), RequiredMode.REMOTE)
    start = date(2024, 12, 20)

    alerts = scan_upcoming_risk([task], start, modes(date(2024, 11, 1), 200, WorkMode.ON_SITE))

    assert [alert.original_date for alert in alerts] == ["2025-01-05"]


def test_yearly_anchor_after_window_is_ignored() -> None:
    task = _task("1", Yearly(anchor=date(2025, 1, 1)))
    start = date(2024, 6, 1)

    assert scan_upcoming_risk([task], start, _around(start, WorkMode.OFF)) == []


def test_custom_interval_without_matching_mode() -> None:
    task = _task("1", CustomInterval(anchor=date(2024, 6, 1), interval_days=7, max_shift_days=3), RequiredMode.REMOTE)
    start = date(2024, 6, 1)

    alerts = scan_upcoming_risk([task], start, modes(start, 45, WorkMode.ON_SITE))

    assert len(alerts) == 7
    assert alerts[0].original_date == "2024-06-01"
    assert alerts[-1].original_date == "2024-07-13"


def test_custom_interval_from_later_start() -> None:
    task = _task("1", CustomInterval(anchor=date(2024, 6, 1), interval_days=7, max_shift_days=3))
    start = date(2024, 6, 4)

    alerts = scan_upcoming_risk([task], start, modes(start, 45, WorkMode.OFF))

    assert [alert.original_date for alert in alerts] == [
        "2024-06-08",
        "2024-06-15",
        "2024-06-22",
        "2024-06-29",
        "2024-07-06",
        "2024-07-13",
    ]
    assert all(alert.is_future_shift for alert in alerts)


def test_custom_interval_any_mode_all_days_off() -> None:
    task = _task("1", CustomInterval(anchor=date(2024, 6, 1), interval_days=7))
    start = date(2024, 6, 1)

    alerts = scan_upcoming_risk([task], start, _around(start, WorkMode.OFF) | modes(start, 120, WorkMode.OFF))

    assert len(alerts) == 7


def test_custom_interval_anchor_inside_window() -> None:
    task = _task("1", CustomInterval(anchor=date(2024, 6, 20), interval_days=10, max_shift_days=2), RequiredMode.REMOTE)
    start = date(2024, 6, 1)

    alerts = scan_upcoming_risk([task], start, modes(start, 60, WorkMode.ON_SITE))

    assert [alert.original_date for alert in alerts] == ["2024-06-20", "2024-06-30", "2024-07-10"]


def test_custom_interval_occurrences_on_matching_days_are_skipped() -> None:
    task = _task("1", CustomInterval(anchor=date(2024, 6, 1), interval_days=7, max_shift_days=0), RequiredMode.REMOTE)
    start = date(2024, 6, 1)
    work_modes = modes(start, 60, WorkMode.ON_SITE)
    work_modes["2024-06-08"] = WorkMode.REMOTE

    alerts = scan_upcoming_risk([task], start, work_modes, window_days=14)

    assert [alert.original_date for alert in alerts] == ["2024-06-01", "2024-06-15"]


def test_alerts_are_unique_per_task_and_date() -> None:
    task = _task("1", Yearly(anchor=date(2023, 6, 15), max_shift_days=5))
    start = date(2024, 6, 15)

    alerts = scan_upcoming_risk([task, task], start, _around(start, WorkMode.OFF))

    assert len(alerts) == 1
