"""Configuration package for eduprogress."""

from eduprogress.config.achievements import (
    AchievementConfigError,
    AchievementDefinition,
    load_achievement_definitions,
)
from eduprogress.config.app_config import (
    AppConfig,
    DatabaseConfig,
    ExamConfig,
    LoggingConfig,
    clear_config_cache,
    load_app_config,
)
from eduprogress.config.logging_setup import configure_logging

__all__ = [
    "AchievementConfigError",
    "AchievementDefinition",
    "load_achievement_definitions",
    "AppConfig",
    "DatabaseConfig",
    "ExamConfig",
    "LoggingConfig",
    "clear_config_cache",
    "load_app_config",
    "configure_logging",
]
