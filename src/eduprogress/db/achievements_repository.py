"""Repository for achievement definitions and per-user unlocks."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

import structlog

from eduprogress.config.achievements import AchievementDefinition
from eduprogress.db.database import Database

logger = structlog.get_logger(__name__)


@dataclass
class UnlockRecord:
    """Permanent record that a user met an achievement threshold."""

    user_id: int
    achievement_type: str
    unlocked_at: str
    unlocked: bool = True


class AchievementRepository:
    """Storage access for ``achievement_definitions`` and ``achievements``."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def seed_definitions(self, definitions: list[AchievementDefinition]) -> int:
        """Insert definitions whose type is not stored yet.

        Existing definitions are left untouched.

        Returns:
            Number of definitions inserted
        """
        inserted = 0
        with self._db.connect() as conn:
            for d in definitions:
                cursor = conn.execute(
                    """
                    INSERT OR IGNORE INTO achievement_definitions (
                        type, title, description, icon, color,
                        requirement_type, requirement_value
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        d.type,
                        d.title,
                        d.description,
                        d.icon,
                        d.color,
                        d.requirement_type,
                        d.requirement_value,
                    ),
                )
                inserted += cursor.rowcount

        logger.info("achievement_definitions.seeded", inserted=inserted, total=len(definitions))
        return inserted

    def list_definitions(self) -> list[AchievementDefinition]:
        with self._db.connect() as conn:
            rows = conn.execute("SELECT * FROM achievement_definitions ORDER BY id").fetchall()

        return [_row_to_definition(row) for row in rows]

    def list_unlocks(self, user_id: int) -> dict[str, UnlockRecord]:
        """Unlocks of one user keyed by achievement type."""
        with self._db.connect() as conn:
            rows = conn.execute(
                "SELECT * FROM achievements WHERE user_id = ? AND unlocked = 1", (user_id,)
            ).fetchall()

        return {
            row["achievement_type"]: UnlockRecord(
                user_id=row["user_id"],
                achievement_type=row["achievement_type"],
                unlocked_at=row["unlocked_at"],
            )
            for row in rows
        }

    def insert_unlock(self, user_id: int, achievement_type: str, unlocked_at: str) -> bool:
        """Record an unlock; a no-op if the user already has it.

        Returns:
            True if a new row was written
        """
        with self._db.connect() as conn:
            cursor = conn.execute(
                """
                INSERT OR IGNORE INTO achievements (user_id, achievement_type, unlocked, unlocked_at)
                VALUES (?, ?, 1, ?)
                """,
                (user_id, achievement_type, unlocked_at),
            )

        return cursor.rowcount > 0


def _row_to_definition(row: sqlite3.Row) -> AchievementDefinition:
    return AchievementDefinition(
        type=row["type"],
        title=row["title"],
        description=row["description"],
        icon=row["icon"],
        color=row["color"],
        requirement_type=row["requirement_type"],
        requirement_value=row["requirement_value"],
    )
