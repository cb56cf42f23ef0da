from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Union


class WorkMode(str, Enum):
    ON_SITE = "on_site"
    REMOTE = "remote"
    OFF = "off"


class RequiredMode(str, Enum):
    ANY = "any"
    ON_SITE = "on_site"
    REMOTE = "remote"


class Weekday(int, Enum):
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM_INTERVAL = "custom"


WEEKLY_MAX_SHIFT_DAYS = 7
MONTHLY_MAX_SHIFT_DAYS = 28
YEARLY_MAX_SHIFT_DAYS = 45
CUSTOM_MAX_SHIFT_DAYS = 7


@dataclass(frozen=True)
class Daily:
    frequency = Frequency.DAILY


@dataclass(frozen=True)
class Weekly:
    weekday: Weekday
    max_shift_days: int = WEEKLY_MAX_SHIFT_DAYS
    frequency = Frequency.WEEKLY


@dataclass(frozen=True)
class Monthly:
    """First `weekday` of every month."""

    weekday: Weekday
    max_shift_days: int = MONTHLY_MAX_SHIFT_DAYS
    frequency = Frequency.MONTHLY


@dataclass(frozen=True)
class Yearly:
    anchor: date
    max_shift_days: int = YEARLY_MAX_SHIFT_DAYS
    frequency = Frequency.YEARLY


@dataclass(frozen=True)
class CustomInterval:
    anchor: date
    interval_days: int
    max_shift_days: int = CUSTOM_MAX_SHIFT_DAYS
    frequency = Frequency.CUSTOM_INTERVAL


RecurrenceRule = Union[Daily, Weekly, Monthly, Yearly, CustomInterval]
PeriodicRule = Union[Weekly, Monthly, Yearly, CustomInterval]
AlertingRule = Union[Yearly, CustomInterval]


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    rule: RecurrenceRule | None
    required_mode: RequiredMode = RequiredMode.ANY
    display_order: int | None = None
    user_id: str | None = None


@dataclass(frozen=True)
class ShiftInfo:
    original_date: date
    shifted_date: date


@dataclass(frozen=True)
class Occurrence:
    task: Task
    lands_on: date
    shift_info: ShiftInfo | None = None


@dataclass(frozen=True)
class ShiftAlert:
    task_id: str
    task_title: str
    original_date: str
    required_mode: RequiredMode
    frequency: Frequency
    is_future_shift: bool

    @property
    def key(self) -> tuple[str, str]:
        return (self.task_id, self.original_date)


@dataclass(frozen=True)
class DayResult:
    occurrences: list[Occurrence] = field(default_factory=list)
    alerts: list[ShiftAlert] = field(default_factory=list)
