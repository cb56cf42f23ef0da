from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Iterable

from planner.core.calendar_math import parse_date_local
from planner.core.models import (
    CustomInterval,
    Daily,
    Monthly,
    RecurrenceRule,
    RequiredMode,
    Task,
    Weekday,
    Weekly,
    Yearly,
)

LOGGER = logging.getLogger(__name__)

_FREQUENCY_ALIASES = {
    "daily": "daily",
    "quotidien": "daily",
    "weekly": "weekly",
    "hebdomadaire": "weekly",
    "monthly": "monthly",
    "mensuel": "monthly",
    "yearly": "yearly",
    "annual": "yearly",
    "annuel": "yearly",
    "custom": "custom",
    "personnalisé": "custom",
    "personnalise": "custom",
}

_WEEKDAY_ALIASES = {
    "monday": Weekday.MONDAY,
    "lundi": Weekday.MONDAY,
    "mon": Weekday.MONDAY,
    "tuesday": Weekday.TUESDAY,
    "mardi": Weekday.TUESDAY,
    "tue": Weekday.TUESDAY,
    "wednesday": Weekday.WEDNESDAY,
    "mercredi": Weekday.WEDNESDAY,
    "wed": Weekday.WEDNESDAY,
    "thursday": Weekday.THURSDAY,
    "jeudi": Weekday.THURSDAY,
    "thu": Weekday.THURSDAY,
    "friday": Weekday.FRIDAY,
    "vendredi": Weekday.FRIDAY,
    "fri": Weekday.FRIDAY,
    "saturday": Weekday.SATURDAY,
    "samedi": Weekday.SATURDAY,
    "sat": Weekday.SATURDAY,
    "sunday": Weekday.SUNDAY,
    "dimanche": Weekday.SUNDAY,
    "sun": Weekday.SUNDAY,
}

_MODE_ALIASES = {
    "any": RequiredMode.ANY,
    "tous": RequiredMode.ANY,
    "on_site": RequiredMode.ON_SITE,
    "onsite": RequiredMode.ON_SITE,
    "présentiel": RequiredMode.ON_SITE,
    "presentiel": RequiredMode.ON_SITE,
    "remote": RequiredMode.REMOTE,
    "distanciel": RequiredMode.REMOTE,
}


def parse_weekday(value: object) -> Weekday | None:
    if isinstance(value, Weekday):
        return value
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 6:
        return Weekday(value)
    if isinstance(value, str):
        return _WEEKDAY_ALIASES.get(value.strip().lower())
    return None


def parse_required_mode(value: object) -> RequiredMode:
    if isinstance(value, RequiredMode):
        return value
    if isinstance(value, str):
        mode = _MODE_ALIASES.get(value.strip().lower())
        if mode is not None:
            return mode
        LOGGER.warning("task_catalog unknown mode=%r, using any", value)
    return RequiredMode.ANY


def parse_rule(record: dict[str, Any]) -> RecurrenceRule | None:
    """Build a recurrence rule; None when the record cannot be scheduled."""
    raw_frequency = record.get("frequency")
    if not isinstance(raw_frequency, str):
        return None
    frequency = _FREQUENCY_ALIASES.get(raw_frequency.strip().lower())
    max_shift = _parse_positive_int(record.get("max_shift_days", record.get("max_shifting_days")), allow_zero=True)
    shift_kwargs = {"max_shift_days": max_shift} if max_shift is not None else {}

    if frequency == "daily":
        return Daily()
    if frequency in {"weekly", "monthly"}:
        weekday = parse_weekday(record.get("weekday", record.get("day")))
        if weekday is None:
            return None
        if frequency == "weekly":
            return Weekly(weekday=weekday, **shift_kwargs)
        return Monthly(weekday=weekday, **shift_kwargs)
    if frequency in {"yearly", "custom"}:
        anchor = _parse_date(record.get("anchor", record.get("start_date")))
        if anchor is None:
            return None
        if frequency == "yearly":
            return Yearly(anchor=anchor, **shift_kwargs)
        interval = _parse_positive_int(record.get("interval_days", record.get("custom_days")))
        if interval is None:
            return None
        return CustomInterval(anchor=anchor, interval_days=interval, **shift_kwargs)
    return None


def parse_task(record: object) -> Task | None:
    if not isinstance(record, dict):
        return None
    task_id = record.get("id")
    title = record.get("title", record.get("task"))
    if task_id is None or not isinstance(title, str):
        LOGGER.warning("task_catalog skipped record without id/title: %r", record)
        return None
    rule = parse_rule(record)
    if rule is None:
        LOGGER.warning("task_catalog unschedulable task id=%s frequency=%r", task_id, record.get("frequency"))
    display_order = record.get("display_order")
    user_id = record.get("user_id")
    return Task(
        id=str(task_id),
        title=title,
        rule=rule,
        required_mode=parse_required_mode(record.get("mode", "any")),
        display_order=display_order if isinstance(display_order, int) and not isinstance(display_order, bool) else None,
        user_id=str(user_id) if user_id is not None else None,
    )


def parse_catalog(records: Iterable[object]) -> list[Task]:
    tasks: list[Task] = []
    for record in records:
        task = parse_task(record)
        if task is not None:
            tasks.append(task)
    return tasks


def load_catalog(path: Path) -> list[Task]:
    if not path.exists():
        LOGGER.info("task_catalog missing path=%s", path)
        return []
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError:
        LOGGER.exception("task_catalog invalid json path=%s", path)
        return []
    records = payload.get("tasks", []) if isinstance(payload, dict) else payload
    if not isinstance(records, list):
        return []
    return parse_catalog(records)


def tasks_for_user(tasks: Iterable[Task], user_id: str) -> list[Task]:
    return [task for task in tasks if task.user_id == user_id]


def catalog_user_ids(tasks: Iterable[Task]) -> list[str]:
    return sorted({task.user_id for task in tasks if task.user_id is not None})


def _parse_date(value: object) -> date | None:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return parse_date_local(value[:10])
    except ValueError:
        return None


def _parse_positive_int(value: object, *, allow_zero: bool = False) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int):
        return None
    if value < 0 or (value == 0 and not allow_zero):
        return None
    return value
