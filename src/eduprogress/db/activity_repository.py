"""Repository for the per-user, per-day activity ledger."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import date
from typing import Any

import structlog

from eduprogress.db.database import Database

logger = structlog.get_logger(__name__)


@dataclass
class ActivityRecord:
    """Accumulated activity of one user on one calendar date."""

    user_id: int
    activity_date: str
    hours_spent: float = 0.0
    lessons_completed: int = 0
    assignments_completed: int = 0
    exams_taken: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "activity_date": self.activity_date,
            "hours_spent": self.hours_spent,
            "lessons_completed": self.lessons_completed,
            "assignments_completed": self.assignments_completed,
            "exams_taken": self.exams_taken,
        }


@dataclass
class ActivityTotals:
    """Ledger sums over all dates."""

    hours_spent: float = 0.0
    lessons_completed: int = 0
    assignments_completed: int = 0
    exams_taken: int = 0


class ActivityRepository:
    """Storage access for ``user_activity``."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def add(
        self,
        user_id: int,
        activity_date: date,
        hours_spent: float = 0.0,
        lessons_completed: int = 0,
        assignments_completed: int = 0,
        exams_taken: int = 0,
    ) -> ActivityRecord:
        """Add deltas to the (user, date) record, creating it if needed.

        A single upsert statement, so two writers on the same day both land.
        """
        day = activity_date.isoformat()
        with self._db.connect() as conn:
            conn.execute(
                """
                INSERT INTO user_activity (
                    user_id, activity_date, hours_spent,
                    lessons_completed, assignments_completed, exams_taken
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id, activity_date) DO UPDATE SET
                    hours_spent = hours_spent + excluded.hours_spent,
                    lessons_completed = lessons_completed + excluded.lessons_completed,
                    assignments_completed = assignments_completed + excluded.assignments_completed,
                    exams_taken = exams_taken + excluded.exams_taken
                """,
                (user_id, day, hours_spent, lessons_completed, assignments_completed, exams_taken),
            )
            row = conn.execute(
                "SELECT * FROM user_activity WHERE user_id = ? AND activity_date = ?",
                (user_id, day),
            ).fetchone()

        logger.debug("user_activity.upserted", user_id=user_id, activity_date=day)
        return _row_to_record(row)

    def get(self, user_id: int, activity_date: date) -> ActivityRecord | None:
        with self._db.connect() as conn:
            row = conn.execute(
                "SELECT * FROM user_activity WHERE user_id = ? AND activity_date = ?",
                (user_id, activity_date.isoformat()),
            ).fetchone()

        return _row_to_record(row) if row is not None else None

    def totals(self, user_id: int, since: date | None = None) -> ActivityTotals:
        """Sum every accumulator, optionally only for dates on/after ``since``."""
        query = """
            SELECT
                COALESCE(SUM(hours_spent), 0) AS hours_spent,
                COALESCE(SUM(lessons_completed), 0) AS lessons_completed,
                COALESCE(SUM(assignments_completed), 0) AS assignments_completed,
                COALESCE(SUM(exams_taken), 0) AS exams_taken
            FROM user_activity
            WHERE user_id = ?
        """
        params: list[Any] = [user_id]
        if since is not None:
            query += " AND activity_date >= ?"
            params.append(since.isoformat())

        with self._db.connect() as conn:
            row = conn.execute(query, params).fetchone()

        return ActivityTotals(
            hours_spent=float(row["hours_spent"]),
            lessons_completed=int(row["lessons_completed"]),
            assignments_completed=int(row["assignments_completed"]),
            exams_taken=int(row["exams_taken"]),
        )

    def active_dates(self, user_id: int) -> list[date]:
        """Dates with study time or finished lessons, most recent first."""
        with self._db.connect() as conn:
            rows = conn.execute(
                """
                SELECT activity_date FROM user_activity
                WHERE user_id = ? AND (hours_spent > 0 OR lessons_completed > 0)
                ORDER BY activity_date DESC
                """,
                (user_id,),
            ).fetchall()

        return [date.fromisoformat(row["activity_date"]) for row in rows]

    def records_between(self, user_id: int, start: date, end: date) -> dict[str, ActivityRecord]:
        """Records dated within [start, end], keyed by ISO date."""
        with self._db.connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM user_activity
                WHERE user_id = ? AND activity_date BETWEEN ? AND ?
                ORDER BY activity_date
                """,
                (user_id, start.isoformat(), end.isoformat()),
            ).fetchall()

        return {row["activity_date"]: _row_to_record(row) for row in rows}


def _row_to_record(row: sqlite3.Row) -> ActivityRecord:
    return ActivityRecord(
        user_id=row["user_id"],
        activity_date=row["activity_date"],
        hours_spent=float(row["hours_spent"]),
        lessons_completed=row["lessons_completed"],
        assignments_completed=row["assignments_completed"],
        exams_taken=row["exams_taken"],
    )
