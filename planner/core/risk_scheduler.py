from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Awaitable, Callable, Sequence
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from planner.core.models import Task
from planner.core.risk_scan import DEFAULT_WINDOW_DAYS
from planner.core.shift_alerts import render_shift_alerts
from planner.core.shift_service import WorkModeLookup, check_future_shifts
from planner.core.task_catalog import catalog_user_ids, tasks_for_user

LOGGER = logging.getLogger(__name__)

JOB_ID = "shift_risk_check"

Notifier = Callable[[str, str], Awaitable[None]]


async def log_notifier(user_id: str, text: str) -> None:
    LOGGER.warning("shift_alert user_id=%s %s", user_id, text.replace("\n", " | "))


async def run_risk_checks(
    *,
    oracle: WorkModeLookup,
    tasks: Sequence[Task],
    notify: Notifier = log_notifier,
    today: date | None = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
    tz: ZoneInfo | None = None,
) -> int:
    """Scan every user's tasks and send one message per unshiftable task."""
    current = today or datetime.now(tz=tz).date()
    sent = 0
    for user_id in catalog_user_ids(tasks):
        try:
            alerts = await check_future_shifts(
                oracle,
                user_id,
                tasks_for_user(tasks, user_id),
                current,
                window_days,
            )
        except Exception:
            LOGGER.exception("Risk check failed: user_id=%s", user_id)
            continue
        for text in render_shift_alerts(alerts):
            try:
                await notify(user_id, text)
            except Exception:
                LOGGER.exception("Shift alert send failed: user_id=%s", user_id)
                continue
            sent += 1
    LOGGER.info("Risk checks done: date=%s sent=%s", current.isoformat(), sent)
    return sent


def start_risk_scheduler(
    runner: Callable[[], Awaitable[int]],
    *,
    hour: int = 8,
    minute: int = 0,
    tz: ZoneInfo = ZoneInfo("Europe/Paris"),
) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone=tz)
    trigger = CronTrigger(hour=hour, minute=minute, timezone=tz)
    # Coroutine functions run on the scheduler loop, plain callables in a thread pool.
    scheduler.add_job(runner, trigger=trigger, id=JOB_ID, replace_existing=True)
    scheduler.start()
    LOGGER.info("Risk scheduler started: tz=%s job_id=%s at=%02d:%02d", tz.key, JOB_ID, hour, minute)
    return scheduler


def stop_risk_scheduler(scheduler: AsyncIOScheduler | None) -> None:
    if scheduler is None:
        return
    try:
        scheduler.shutdown(wait=False)
    except Exception:
        LOGGER.exception("Failed to shutdown risk scheduler")
