from __future__ import annotations

import asyncio
from datetime import date

from conftest import FakeHolidays

from planner.core.models import Weekday, WorkMode
from planner.core.work_mode_oracle import WorkModeOracle, default_work_mode
from planner.infra.workday_store import WorkdayStore


def test_default_work_mode_week_pattern() -> None:
    assert default_work_mode(date(2024, 6, 10)) is WorkMode.ON_SITE
    assert default_work_mode(date(2024, 6, 12)) is WorkMode.REMOTE
    assert default_work_mode(date(2024, 6, 14)) is WorkMode.REMOTE
    assert default_work_mode(date(2024, 6, 15)) is WorkMode.OFF
    assert default_work_mode(date(2024, 6, 16)) is WorkMode.OFF


def test_default_work_mode_holiday_is_off() -> None:
    assert default_work_mode(date(2024, 5, 1), {"2024-05-01"}) is WorkMode.OFF
    assert default_work_mode(date(2024, 5, 2), {"2024-05-01"}) is WorkMode.ON_SITE


def test_default_work_mode_custom_remote_days() -> None:
    remote = {Weekday.MONDAY}

    assert default_work_mode(date(2024, 6, 10), remote_weekdays=remote) is WorkMode.REMOTE
    assert default_work_mode(date(2024, 6, 12), remote_weekdays=remote) is WorkMode.ON_SITE


def test_map_merges_explicit_days_over_defaults(tmp_path) -> None:
    store = WorkdayStore(tmp_path / "workdays.db")
    store.upsert_workday("alice", date(2024, 12, 31), WorkMode.REMOTE)
    store.upsert_workday("bob", date(2024, 12, 30), WorkMode.OFF)
    holidays = FakeHolidays({2025: {"2025-01-01"}})
    oracle = WorkModeOracle(store, holidays)

    result = asyncio.run(oracle.get_work_mode_map("alice", date(2024, 12, 30), 3))

    assert result == {
        "2024-12-30": WorkMode.ON_SITE,
        "2024-12-31": WorkMode.REMOTE,
        "2025-01-01": WorkMode.OFF,
        "2025-01-02": WorkMode.ON_SITE,
    }
    assert sorted(set(holidays.requested_years)) == [2024, 2025]
    assert len(holidays.requested_years) == 2
    store.close()


def test_explicit_day_overrides_weekend_and_holiday(tmp_path) -> None:
    store = WorkdayStore(tmp_path / "workdays.db")
    store.upsert_workday("alice", date(2024, 6, 15), WorkMode.ON_SITE)
    store.upsert_workday("alice", date(2024, 5, 1), WorkMode.REMOTE)
    oracle = WorkModeOracle(store, FakeHolidays({2024: {"2024-05-01"}}))

    assert asyncio.run(oracle.get_work_mode("alice", date(2024, 6, 15))) is WorkMode.ON_SITE
    assert asyncio.run(oracle.get_work_mode("alice", date(2024, 5, 1))) is WorkMode.REMOTE
    assert asyncio.run(oracle.get_work_mode("bob", date(2024, 5, 1))) is WorkMode.OFF
    store.close()


def test_every_day_in_range_is_mapped(tmp_path) -> None:
    store = WorkdayStore(tmp_path / "workdays.db")
    oracle = WorkModeOracle(store, FakeHolidays(), remote_weekdays=set())

    result = asyncio.run(oracle.get_work_mode_map("alice", date(2024, 6, 1), 29))

    assert len(result) == 30
    assert WorkMode.REMOTE not in result.values()
    assert result["2024-06-01"] is WorkMode.OFF
    assert result["2024-06-30"] is WorkMode.OFF
    store.close()
