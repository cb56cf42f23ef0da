from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from planner.core.calendar_math import parse_date_local
from planner.core.models import Frequency, RequiredMode, ShiftAlert

_FREQUENCY_LABELS = {
    Frequency.YEARLY: "yearly",
    Frequency.CUSTOM_INTERVAL: "custom-interval",
}
_MODE_LABELS = {
    RequiredMode.ANY: "for any work mode",
    RequiredMode.ON_SITE: "on site",
    RequiredMode.REMOTE: "remotely",
}


@dataclass(frozen=True)
class AlertGroup:
    task_id: str
    task_title: str
    frequency: Frequency
    required_mode: RequiredMode
    alerts: list[ShiftAlert]


def dedupe_alerts(alerts: Iterable[ShiftAlert]) -> list[ShiftAlert]:
    seen: set[tuple[str, str]] = set()
    result: list[ShiftAlert] = []
    for alert in alerts:
        if alert.key in seen:
            continue
        seen.add(alert.key)
        result.append(alert)
    return result


def group_alerts_by_task(alerts: Iterable[ShiftAlert]) -> list[AlertGroup]:
    """One group per task; latest first group first, dates ascending inside."""
    by_task: dict[str, list[ShiftAlert]] = {}
    for alert in dedupe_alerts(alerts):
        by_task.setdefault(alert.task_id, []).append(alert)
    ordered = sorted(by_task.values(), key=lambda items: items[0].original_date, reverse=True)
    groups: list[AlertGroup] = []
    for items in ordered:
        first = items[0]
        groups.append(
            AlertGroup(
                task_id=first.task_id,
                task_title=first.task_title,
                frequency=first.frequency,
                required_mode=first.required_mode,
                alerts=sorted(items, key=lambda item: item.original_date),
            )
        )
    return groups


def render_alert_group(group: AlertGroup) -> str:
    labels = []
    for alert in group.alerts:
        label = _format_day(alert.original_date)
        if not alert.is_future_shift:
            label = f"{label} (past)"
        labels.append(label)
    noun = "date" if len(labels) == 1 else "dates"
    frequency = _FREQUENCY_LABELS.get(group.frequency, group.frequency.value)
    mode = _MODE_LABELS.get(group.required_mode, group.required_mode.value)
    return (
        f'Task "{group.task_title}" cannot be shifted\n'
        f"The {frequency} task planned {mode} on the {noun} {', '.join(labels)} "
        "could not be moved to a compatible day."
    )


def render_shift_alerts(alerts: Iterable[ShiftAlert]) -> list[str]:
    return [render_alert_group(group) for group in group_alerts_by_task(alerts)]


def _format_day(value: str) -> str:
    day = parse_date_local(value)
    return f"{day.strftime('%B')} {day.day}, {day.year}"
