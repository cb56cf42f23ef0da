from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

from planner.core.models import Weekday
from planner.infra.holidays import DEFAULT_HOLIDAYS_URL

LOGGER = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("data/workdays.db")
DEFAULT_TASKS_PATH = Path("data/tasks.json")
DEFAULT_TIMEZONE = "Europe/Paris"


@dataclass(frozen=True)
class Settings:
    db_path: Path
    tasks_path: Path
    holidays_enabled: bool
    holidays_api_url: str
    holidays_timeout_seconds: float
    remote_weekdays: frozenset[Weekday]
    risk_window_days: int
    risk_scan_hour: int
    risk_scan_minute: int
    timezone: ZoneInfo


def load_settings(raw_env: dict[str, str] | None = None) -> Settings:
    if raw_env is None:
        load_dotenv()
    env = raw_env if raw_env is not None else os.environ

    db_path = Path(env.get("WORKDAYS_DB_PATH", DEFAULT_DB_PATH))
    tasks_path = Path(env.get("TASKS_PATH", DEFAULT_TASKS_PATH))
    holidays_enabled = _parse_optional_bool(env.get("HOLIDAYS_ENABLED"))
    if holidays_enabled is None:
        holidays_enabled = True
    holidays_api_url = env.get("HOLIDAYS_API_URL") or DEFAULT_HOLIDAYS_URL
    holidays_timeout_seconds = _parse_optional_float(env.get("HOLIDAYS_TIMEOUT_SECONDS"), 10.0)
    remote_weekdays = _parse_weekdays(env.get("REMOTE_WEEKDAYS"), {Weekday.WEDNESDAY, Weekday.FRIDAY})
    risk_window_days = _parse_int_with_default(env.get("RISK_WINDOW_DAYS"), 45)
    if risk_window_days < 0:
        raise ValueError("RISK_WINDOW_DAYS must be >= 0")
    risk_scan_hour = _parse_int_with_default(env.get("RISK_SCAN_HOUR"), 8)
    if not 0 <= risk_scan_hour <= 23:
        raise ValueError("RISK_SCAN_HOUR must be within 0..23")
    risk_scan_minute = _parse_int_with_default(env.get("RISK_SCAN_MINUTE"), 0)
    if not 0 <= risk_scan_minute <= 59:
        raise ValueError("RISK_SCAN_MINUTE must be within 0..59")
    timezone = ZoneInfo(env.get("PLANNER_TZ", DEFAULT_TIMEZONE).strip() or DEFAULT_TIMEZONE)
    return Settings(
        db_path=db_path,
        tasks_path=tasks_path,
        holidays_enabled=holidays_enabled,
        holidays_api_url=holidays_api_url,
        holidays_timeout_seconds=holidays_timeout_seconds,
        remote_weekdays=remote_weekdays,
        risk_window_days=risk_window_days,
        risk_scan_hour=risk_scan_hour,
        risk_scan_minute=risk_scan_minute,
        timezone=timezone,
    )


def _parse_weekdays(value: str | None, default: set[Weekday]) -> frozenset[Weekday]:
    if value is None or not value.strip():
        return frozenset(default)
    result: set[Weekday] = set()
    for item in value.split(","):
        name = item.strip().upper()
        if not name:
            continue
        try:
            result.add(Weekday[name])
        except KeyError as exc:
            raise ValueError(f"Unknown weekday in REMOTE_WEEKDAYS: {item.strip()}") from exc
    return frozenset(result)


def _parse_optional_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    trimmed = value.strip()
    if not trimmed:
        return default
    return float(trimmed)


def _parse_optional_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    trimmed = value.strip().lower()
    if not trimmed:
        return None
    return trimmed in {"1", "true", "yes", "on"}


def _parse_int_with_default(value: str | None, default: int) -> int:
    if value is None:
        return default
    trimmed = value.strip()
    if not trimmed:
        return default
    return int(trimmed)
