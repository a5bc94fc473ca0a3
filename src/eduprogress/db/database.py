"""SQLite database connection and schema management.

The ``Database`` object is created once by the application (or a test) and
passed to every repository. There is no module-level connection state.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

from eduprogress.core.errors import ConflictError, StorageError

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("data/eduprogress.db")

# Largest value an INTEGER column (and so any row id) can hold
MAX_ROW_ID = 2**63 - 1

CORE_TABLES = ("exam_attempts", "user_activity", "achievements")


class Database:
    """Handle on one SQLite file.

    Each ``connect()`` is a unit of work: it commits when the block exits
    cleanly and rolls back on any exception. Raw ``sqlite3`` errors are
    translated so callers only ever see the domain taxonomy.

    Example:
        db = Database(Path("data/eduprogress.db"))
        db.init_schema()
        with db.connect() as conn:
            rows = conn.execute("SELECT * FROM exams").fetchall()
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else DEFAULT_DB_PATH

    def init_schema(self) -> None:
        """Create the database file and all tables if they don't exist."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with self.connect() as conn:
            _create_schema(conn)

        logger.info("database.initialized", path=str(self.path))

    @contextmanager
    def connect(self, immediate: bool = False) -> Generator[sqlite3.Connection, None, None]:
        """Get a connection as context manager.

        Args:
            immediate: Take the write lock up front (``BEGIN IMMEDIATE``).
                Use it for read-then-write sequences so concurrent writers
                are serialized by SQLite instead of failing mid-way.

        Yields:
            SQLite connection with row factory set to sqlite3.Row

        Raises:
            ConflictError: On a uniqueness or foreign key violation
            StorageError: On any other storage failure
        """
        try:
            conn = sqlite3.connect(self.path, timeout=10.0)
        except sqlite3.Error as e:
            logger.error("database.connect_failed", path=str(self.path), error=str(e))
            raise StorageError("Storage unavailable") from e

        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")

        try:
            if immediate:
                conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            logger.warning("database.integrity_error", error=str(e))
            raise ConflictError("Conflicting record already exists") from e
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("database.error", error=str(e))
            raise StorageError("Storage failure") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def ping(self) -> bool:
        """Round trip to the database file.

        Returns:
            True if the core tables exist

        Raises:
            StorageError: If the database cannot be queried
        """
        with self.connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS count FROM sqlite_master WHERE type = 'table' AND name IN (?, ?, ?)",
                CORE_TABLES,
            ).fetchone()

        return row["count"] == len(CORE_TABLES)


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- Collaborator tables (written by course management, read here)
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            email TEXT UNIQUE,
            role TEXT NOT NULL DEFAULT 'student',
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS courses (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            teacher_id INTEGER NOT NULL,
            title TEXT NOT NULL,
            description TEXT,
            thumbnail TEXT,
            level TEXT DEFAULT 'beginner',
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS lessons (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            course_id INTEGER NOT NULL REFERENCES courses(id),
            title TEXT NOT NULL,
            content TEXT,
            order_num INTEGER,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS enrollments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            student_id INTEGER NOT NULL,
            course_id INTEGER NOT NULL REFERENCES courses(id),
            progress INTEGER NOT NULL DEFAULT 0 CHECK(progress BETWEEN 0 AND 100),
            enrolled_at TEXT NOT NULL DEFAULT (datetime('now')),
            UNIQUE(student_id, course_id)
        );

        CREATE TABLE IF NOT EXISTS assignments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            course_id INTEGER NOT NULL REFERENCES courses(id),
            title TEXT NOT NULL,
            due_date TEXT,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS submissions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            assignment_id INTEGER NOT NULL REFERENCES assignments(id),
            student_id INTEGER NOT NULL,
            content TEXT,
            status TEXT NOT NULL DEFAULT 'submitted' CHECK(status IN ('submitted', 'graded')),
            grade REAL,
            submitted_at TEXT NOT NULL DEFAULT (datetime('now')),
            graded_at TEXT
        );

        CREATE TABLE IF NOT EXISTS exams (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            course_id INTEGER NOT NULL REFERENCES courses(id),
            title TEXT NOT NULL,
            description TEXT,
            duration INTEGER,
            total_points INTEGER DEFAULT 100,
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS exam_questions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            exam_id INTEGER NOT NULL REFERENCES exams(id),
            question TEXT NOT NULL,
            type TEXT NOT NULL,
            options TEXT,
            correct_answer TEXT,
            points INTEGER NOT NULL DEFAULT 1 CHECK(points > 0)
        );

        -- Core tables
        CREATE TABLE IF NOT EXISTS exam_attempts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            exam_id INTEGER NOT NULL REFERENCES exams(id),
            student_id INTEGER NOT NULL,
            score REAL,
            total_points INTEGER,
            started_at TEXT NOT NULL,
            completed_at TEXT
        );

        CREATE TABLE IF NOT EXISTS exam_answers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            attempt_id INTEGER NOT NULL REFERENCES exam_attempts(id),
            question_id INTEGER NOT NULL REFERENCES exam_questions(id),
            answer TEXT,
            is_correct INTEGER NOT NULL CHECK(is_correct IN (0, 1))
        );

        CREATE TABLE IF NOT EXISTS user_activity (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            activity_date TEXT NOT NULL,
            hours_spent REAL NOT NULL DEFAULT 0,
            lessons_completed INTEGER NOT NULL DEFAULT 0,
            assignments_completed INTEGER NOT NULL DEFAULT 0,
            exams_taken INTEGER NOT NULL DEFAULT 0,
            UNIQUE(user_id, activity_date)
        );

        CREATE TABLE IF NOT EXISTS achievement_definitions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            type TEXT NOT NULL UNIQUE,
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            icon TEXT NOT NULL DEFAULT '',
            color TEXT NOT NULL DEFAULT '',
            requirement_type TEXT NOT NULL CHECK(requirement_type IN
                ('lessons', 'courses', 'hours', 'assignments', 'streak', 'perfect_exam')),
            requirement_value REAL NOT NULL
        );

        CREATE TABLE IF NOT EXISTS achievements (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            achievement_type TEXT NOT NULL,
            unlocked INTEGER NOT NULL DEFAULT 1,
            unlocked_at TEXT NOT NULL,
            UNIQUE(user_id, achievement_type)
        );

        -- Indexes
        CREATE INDEX IF NOT EXISTS idx_attempts_student ON exam_attempts(student_id, exam_id);
        CREATE INDEX IF NOT EXISTS idx_answers_attempt ON exam_answers(attempt_id);
        CREATE INDEX IF NOT EXISTS idx_questions_exam ON exam_questions(exam_id);
        CREATE INDEX IF NOT EXISTS idx_lessons_course ON lessons(course_id);
        CREATE INDEX IF NOT EXISTS idx_enrollments_course ON enrollments(course_id);
        CREATE INDEX IF NOT EXISTS idx_submissions_student ON submissions(student_id);
        """
    )


def is_storable_id(value: int) -> bool:
    """True if ``value`` fits an INTEGER column; larger ids can match no row."""
    return -MAX_ROW_ID - 1 <= value <= MAX_ROW_ID
