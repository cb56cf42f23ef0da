from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime, timezone
from pathlib import Path

from planner.core.calendar_math import format_date_local
from planner.core.models import WorkMode

LOGGER = logging.getLogger(__name__)


class WorkdayStore:
    """Explicit per-user work modes, one row per user and calendar day."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._connection = sqlite3.connect(db_path, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        self._connection.execute(
            """
            CREATE TABLE IF NOT EXISTS workdays (
                user_id TEXT NOT NULL,
                work_date TEXT NOT NULL,
                work_mode TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (user_id, work_date)
            )
            """
        )
        self._connection.commit()

    def get_workday(self, user_id: str, day: date | datetime) -> WorkMode | None:
        cursor = self._connection.execute(
            """
            SELECT work_mode
            FROM workdays
            WHERE user_id = ? AND work_date = ?
            """,
            (user_id, format_date_local(day)),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return _parse_mode(row["work_mode"], user_id, format_date_local(day))

    def get_workdays_in_range(
        self,
        user_id: str,
        start: date | datetime,
        end: date | datetime,
    ) -> dict[str, WorkMode]:
        cursor = self._connection.execute(
            """
            SELECT work_date, work_mode
            FROM workdays
            WHERE user_id = ? AND work_date >= ? AND work_date <= ?
            ORDER BY work_date
            """,
            (user_id, format_date_local(start), format_date_local(end)),
        )
        result: dict[str, WorkMode] = {}
        for row in cursor.fetchall():
            mode = _parse_mode(row["work_mode"], user_id, row["work_date"])
            if mode is not None:
                result[row["work_date"]] = mode
        return result

    def upsert_workday(self, user_id: str, day: date | datetime, mode: WorkMode) -> None:
        self._connection.execute(
            """
            INSERT INTO workdays (user_id, work_date, work_mode, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(user_id, work_date) DO UPDATE SET
                work_mode = excluded.work_mode,
                updated_at = excluded.updated_at
            """,
            (user_id, format_date_local(day), mode.value, datetime.now(timezone.utc).isoformat()),
        )
        self._connection.commit()

    def delete_workday(self, user_id: str, day: date | datetime) -> bool:
        cursor = self._connection.execute(
            "DELETE FROM workdays WHERE user_id = ? AND work_date = ?",
            (user_id, format_date_local(day)),
        )
        self._connection.commit()
        return cursor.rowcount > 0

    def list_user_ids(self) -> list[str]:
        cursor = self._connection.execute("SELECT DISTINCT user_id FROM workdays ORDER BY user_id")
        return [row["user_id"] for row in cursor.fetchall()]

    def close(self) -> None:
        try:
            self._connection.close()
        except sqlite3.Error:
            LOGGER.exception("Failed to close workdays database connection")


def _parse_mode(value: object, user_id: str, work_date: str) -> WorkMode | None:
    try:
        return WorkMode(value)
    except ValueError:
        LOGGER.warning("workday ignored unknown mode user_id=%s date=%s mode=%r", user_id, work_date, value)
        return None
