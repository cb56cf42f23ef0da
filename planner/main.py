from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date, datetime
from typing import Sequence

from planner.core.calendar_math import format_date_local, parse_date_local
from planner.core.models import WorkMode
from planner.core.risk_scheduler import run_risk_checks, start_risk_scheduler, stop_risk_scheduler
from planner.core.shift_alerts import render_shift_alerts
from planner.core.shift_service import DayPlan, check_future_shifts, load_day
from planner.core.task_catalog import load_catalog, tasks_for_user
from planner.core.work_mode_oracle import WorkModeOracle
from planner.infra.config import Settings, load_settings
from planner.infra.holidays import HolidayCache, HolidayProvider
from planner.infra.logging_config import configure_logging
from planner.infra.workday_store import WorkdayStore

LOGGER = logging.getLogger(__name__)


def _date_arg(value: str) -> date:
    try:
        return parse_date_local(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="planner", description="Recurring tasks with work-mode shifting.")
    sub = parser.add_subparsers(dest="command", required=True)

    day = sub.add_parser("day", help="List the recurring tasks landing on a day.")
    day.add_argument("--user", required=True)
    day.add_argument("--date", type=_date_arg, default=None)

    risk = sub.add_parser("risk", help="Report occurrences that cannot be shifted soon.")
    risk.add_argument("--user", required=True)
    risk.add_argument("--start", type=_date_arg, default=None)
    risk.add_argument("--window", type=int, default=None)

    workday = sub.add_parser("set-workday", help="Set the work mode of one day.")
    workday.add_argument("--user", required=True)
    workday.add_argument("--date", type=_date_arg, required=True)
    workday.add_argument("--mode", choices=[mode.value for mode in WorkMode], required=True)

    sub.add_parser("serve", help="Run the daily risk check until interrupted.")
    return parser


def _build_oracle(settings: Settings, store: WorkdayStore) -> WorkModeOracle:
    holidays = HolidayProvider(
        HolidayCache(),
        url_template=settings.holidays_api_url,
        timeout_seconds=settings.holidays_timeout_seconds,
        enabled=settings.holidays_enabled,
    )
    return WorkModeOracle(store, holidays, remote_weekdays=settings.remote_weekdays)


def _today(settings: Settings) -> date:
    return datetime.now(tz=settings.timezone).date()


def _render_day(plan: DayPlan) -> str:
    lines = [f"{format_date_local(plan.day)} ({plan.work_mode.value})"]
    if not plan.occurrences:
        lines.append("- no recurring tasks")
    for item in plan.occurrences:
        line = f"- {item.task.title}"
        if item.shift_info is not None:
            line += f" (shifted from {format_date_local(item.shift_info.original_date)})"
        lines.append(line)
    lines.extend(render_shift_alerts(plan.alerts))
    return "\n".join(lines)


async def _serve(settings: Settings, oracle: WorkModeOracle) -> None:
    async def _runner() -> int:
        tasks = load_catalog(settings.tasks_path)
        return await run_risk_checks(
            oracle=oracle,
            tasks=tasks,
            window_days=settings.risk_window_days,
            tz=settings.timezone,
        )

    scheduler = start_risk_scheduler(
        _runner,
        hour=settings.risk_scan_hour,
        minute=settings.risk_scan_minute,
        tz=settings.timezone,
    )
    try:
        await asyncio.Event().wait()
    finally:
        stop_risk_scheduler(scheduler)


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    store = WorkdayStore(settings.db_path)
    try:
        oracle = _build_oracle(settings, store)
        if args.command == "set-workday":
            store.upsert_workday(args.user, args.date, WorkMode(args.mode))
            LOGGER.info("workday_set user_id=%s date=%s mode=%s", args.user, format_date_local(args.date), args.mode)
            return 0
        if args.command == "serve":
            await _serve(settings, oracle)
            return 0
        tasks = tasks_for_user(load_catalog(settings.tasks_path), args.user)
        if args.command == "day":
            plan = await load_day(oracle, args.user, tasks, args.date or _today(settings))
            print(_render_day(plan))
            return 0
        window = args.window if args.window is not None else settings.risk_window_days
        alerts = await check_future_shifts(oracle, args.user, tasks, args.start or _today(settings), window)
        messages = render_shift_alerts(alerts)
        print("\n\n".join(messages) if messages else "No shift risk detected.")
        return 1 if alerts else 0
    finally:
        store.close()


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    args = _build_parser().parse_args(argv)
    settings = load_settings()
    try:
        return asyncio.run(_run(args, settings))
    except KeyboardInterrupt:
        LOGGER.info("Interrupted")
        return 0


if __name__ == "__main__":
    sys.exit(main())
