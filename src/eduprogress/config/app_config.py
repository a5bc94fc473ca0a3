"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml, with
built-in defaults for anything the file leaves out.

Environment overrides:
    EDUPROGRESS_CONFIG: alternative config file path
    EDUPROGRESS_DB_PATH: database file path

Usage:
    from eduprogress.config.app_config import load_app_config

    config = load_app_config()
    db = Database(config.database.path)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")


@dataclass
class DatabaseConfig:
    """SQLite settings."""

    path: Path = Path("data/eduprogress.db")


@dataclass
class ExamConfig:
    """Exam attempt policy."""

    single_open_attempt: bool = False


@dataclass
class LoggingConfig:
    """structlog output settings."""

    level: str = "INFO"
    format: str = "console"  # "console" | "json"


@dataclass
class ApiConfig:
    """Web API settings."""

    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])


@dataclass
class AppConfig:
    """Application-wide configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    exams: ExamConfig = field(default_factory=ExamConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    achievements_file: Path = Path("data/config/achievements_v1.yaml")


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "database": {"path": "data/eduprogress.db"},
        "exams": {"single_open_attempt": False},
        "logging": {"level": "INFO", "format": "console"},
        "api": {"cors_origins": ["http://localhost:5173"]},
        "achievements_file": "data/config/achievements_v1.yaml",
    }


def _merge(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge one level deep: sections are updated key by key."""
    result = dict(defaults)
    for key, value in overrides.items():
        if value is None:
            # An empty key or section ("exams:" with no body) keeps the defaults
            continue
        if isinstance(result.get(key), dict):
            if not isinstance(value, dict):
                logger.warning("invalid_config_section", section=key)
                continue
            result[key] = {
                **result[key],
                **{k: v for k, v in value.items() if v is not None},
            }
        else:
            result[key] = value
    return result


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    logging_data = data.get("logging", {})
    log_format = str(logging_data.get("format", "console")).lower()
    if log_format not in ("console", "json"):
        logger.warning("unknown_log_format", format=log_format)
        log_format = "console"

    return AppConfig(
        database=DatabaseConfig(path=Path(data["database"]["path"])),
        exams=ExamConfig(
            single_open_attempt=bool(data["exams"].get("single_open_attempt", False)),
        ),
        logging=LoggingConfig(
            level=str(logging_data.get("level", "INFO")).upper(),
            format=log_format,
        ),
        api=ApiConfig(cors_origins=list(data["api"].get("cors_origins", []))),
        achievements_file=Path(data["achievements_file"]),
    )


def load_app_config(path: Path | None = None, force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        path: Config file to read. Defaults to $EDUPROGRESS_CONFIG or
            data/config/app_config_v1.yaml
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload and path is None:
        return _cached_config

    source = path or Path(os.environ.get("EDUPROGRESS_CONFIG", str(CONFIG_FILE)))
    data = _get_defaults()

    if source.exists():
        logger.debug("loading_app_config", source=str(source))
        file_data = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
        if isinstance(file_data, dict):
            data = _merge(data, file_data)
        else:
            logger.warning("invalid_app_config", source=str(source))
    else:
        logger.info("using_default_config", source=str(source))

    db_override = os.environ.get("EDUPROGRESS_DB_PATH")
    if db_override:
        data["database"]["path"] = db_override

    config = _parse_config(data)
    if path is None:
        _cached_config = config
    return config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
