"""Achievement definition loader.

Loads achievement definitions from data/config/achievements_v1.yaml, falling
back to the built-in catalogue when the file is missing. Definitions are
seeded into the database once at startup and are read-only afterwards.

Usage:
    from eduprogress.config.achievements import load_achievement_definitions

    definitions = load_achievement_definitions()
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
ACHIEVEMENTS_FILE = Path("data/config/achievements_v1.yaml")

REQUIREMENT_TYPES = ("lessons", "courses", "hours", "assignments", "streak", "perfect_exam")


class AchievementConfigError(Exception):
    """Invalid achievement definition file."""

    pass


@dataclass
class AchievementDefinition:
    """One achievement and the threshold that earns it."""

    type: str
    title: str
    requirement_type: str
    requirement_value: float
    description: str = ""
    icon: str = ""
    color: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "color": self.color,
            "requirement_type": self.requirement_type,
            "requirement_value": self.requirement_value,
        }


def _get_default_definitions() -> list[AchievementDefinition]:
    """Built-in catalogue used when no config file is present."""
    return [
        AchievementDefinition(
            type="first_lesson",
            title="First Steps",
            description="Complete your first lesson",
            icon="book-open",
            color="from-amber-500 to-yellow-500",
            requirement_type="lessons",
            requirement_value=1,
        ),
        AchievementDefinition(
            type="lessons_10",
            title="Bookworm",
            description="Complete 10 lessons",
            icon="brain",
            color="from-pink-500 to-red-500",
            requirement_type="lessons",
            requirement_value=10,
        ),
        AchievementDefinition(
            type="first_course",
            title="Quick Start",
            description="Complete your first course",
            icon="award",
            color="from-yellow-500 to-orange-500",
            requirement_type="courses",
            requirement_value=1,
        ),
        AchievementDefinition(
            type="courses_5",
            title="Architect",
            description="Complete 5 courses",
            icon="layers",
            color="from-orange-500 to-red-500",
            requirement_type="courses",
            requirement_value=5,
        ),
        AchievementDefinition(
            type="hours_10",
            title="Dedicated",
            description="Study for 10 hours",
            icon="clock",
            color="from-blue-500 to-cyan-500",
            requirement_type="hours",
            requirement_value=10,
        ),
        AchievementDefinition(
            type="assignments_5",
            title="Sniper",
            description="Get 5 assignments graded",
            icon="target",
            color="from-green-500 to-emerald-500",
            requirement_type="assignments",
            requirement_value=5,
        ),
        AchievementDefinition(
            type="streak_7",
            title="On Fire",
            description="Study 7 days in a row",
            icon="flame",
            color="from-orange-500 to-red-500",
            requirement_type="streak",
            requirement_value=7,
        ),
        AchievementDefinition(
            type="perfect_exam",
            title="Flawless",
            description="Answer every question of an exam correctly",
            icon="star",
            color="from-purple-500 to-pink-500",
            requirement_type="perfect_exam",
            requirement_value=1,
        ),
    ]


def _parse_definition(data: dict[str, Any]) -> AchievementDefinition:
    """Parse one YAML entry.

    Raises:
        AchievementConfigError: If a required key is missing or invalid
    """
    try:
        definition = AchievementDefinition(
            type=str(data["type"]),
            title=str(data["title"]),
            description=str(data.get("description", "")),
            icon=str(data.get("icon", "")),
            color=str(data.get("color", "")),
            requirement_type=str(data["requirement_type"]),
            requirement_value=float(data["requirement_value"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise AchievementConfigError(f"Invalid achievement entry {data!r}: {e}") from e

    if definition.requirement_type not in REQUIREMENT_TYPES:
        raise AchievementConfigError(
            f"Unknown requirement_type '{definition.requirement_type}' "
            f"for achievement '{definition.type}'"
        )
    return definition


def load_achievement_definitions(path: Path | None = None) -> list[AchievementDefinition]:
    """Load achievement definitions from file.

    Args:
        path: YAML file to read. Defaults to data/config/achievements_v1.yaml

    Returns:
        Definitions in file order.

    Raises:
        AchievementConfigError: If the file exists but is malformed
    """
    source = path or ACHIEVEMENTS_FILE

    if not source.exists():
        logger.info("achievements_file_not_found", path=str(source))
        return _get_default_definitions()

    data = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise AchievementConfigError(f"{source} must be a mapping with an 'achievements' list")
    entries = data.get("achievements") or []
    if not isinstance(entries, list):
        raise AchievementConfigError("'achievements' must be a list")

    definitions = [_parse_definition(entry) for entry in entries]

    seen: set[str] = set()
    for d in definitions:
        if d.type in seen:
            raise AchievementConfigError(f"Duplicate achievement type '{d.type}'")
        seen.add(d.type)

    logger.debug("achievements_loaded", path=str(source), count=len(definitions))
    return definitions
