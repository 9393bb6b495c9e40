"""Configuration management for the Hearthstone log watcher.

Settings are loaded with pydantic-settings from keyword arguments,
environment variables and an optional ``.env`` file. They are read once
when a watcher is constructed; changing them afterwards has no effect
on a running watcher.

Example:
    >>> from hearth_watcher.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.lines_per_update is None
    True

Environment Variables:
    HEARTH_WATCHER_LOG_FILE: Path of the game client's log file
    HEARTH_WATCHER_LOG_DIRECTORY: Directory receiving per-match output logs
    HEARTH_WATCHER_LINES_PER_UPDATE: Lines per processing chunk
    HEARTH_WATCHER_UPDATE_EVERY_TURN: Publish state changes at turn boundaries
    HEARTH_WATCHER_CARD_DATA_FILE: JSON card metadata table
    HEARTH_WATCHER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

import os
import platform
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hearth_watcher.core.exceptions import ConfigurationError, UnsupportedPlatformError


WINDOWS_LOG_FILE = "AppData/LocalLow/Blizzard Entertainment/Hearthstone/output_log.txt"
MACOS_LOG_FILE = "Library/Logs/Unity/Player.log"


def default_log_file(
    system: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Resolve the game client's log file location for the host platform.

    Args:
        system: Platform name as reported by ``platform.system()``.
        environ: Environment mapping used to locate the user's home.

    Returns:
        Absolute path of the log file the client writes.

    Raises:
        UnsupportedPlatformError: If the platform has no known location.
    """
    system = system or platform.system()
    environ = os.environ if environ is None else environ

    if system == "Windows" and "UserProfile" in environ:
        return Path(environ["UserProfile"]) / WINDOWS_LOG_FILE
    if system == "Darwin" and "HOME" in environ:
        return Path(environ["HOME"]) / MACOS_LOG_FILE

    raise UnsupportedPlatformError(
        "Cannot determine the default log file for this platform",
        platform=system,
    )


class WatcherSettings(BaseSettings):
    """Settings for one log watcher instance.

    Attributes:
        log_file: Log file to tail. Resolved per platform when unset.
        log_directory: Destination for derived per-match logs (optional).
        lines_per_update: Number of lines per processing chunk.
        update_every_turn: Also publish state changes at turn boundaries.
        debounce_seconds: Trailing-edge delay collapsing bursts of growth.
        poll_interval: Period between file size checks.
        card_data_file: JSON card table (``[{"id", "dbfId", "name"}]``).
        log_level: Application logging level.
        json_logs: Emit JSON log lines instead of console output.
    """

    model_config = SettingsConfigDict(
        env_prefix="HEARTH_WATCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_file: Path | None = Field(
        default=None,
        description="Log file written by the game client",
    )
    log_directory: Path | None = Field(
        default=None,
        description="Directory receiving per-match output logs",
    )
    lines_per_update: int | None = Field(
        default=None,
        ge=1,
        description="Lines per processing chunk (unset = whole batch)",
    )
    update_every_turn: bool = Field(
        default=False,
        description="Publish state changes at turn boundaries inside a batch",
    )
    debounce_seconds: float = Field(
        default=0.1,
        gt=0,
        le=10,
        description="Trailing-edge debounce delay for growth events",
    )
    poll_interval: float = Field(
        default=0.25,
        gt=0,
        le=60,
        description="Period between file size checks",
    )
    card_data_file: Path | None = Field(
        default=None,
        description="JSON card metadata table",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON log lines",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        """Accept lowercase level names from the environment."""
        if isinstance(value, str):
            return value.upper()
        return value

    def resolved_log_file(self) -> Path:
        """Return the configured log file or the platform default.

        Raises:
            UnsupportedPlatformError: If unset and the platform is unknown.
        """
        if self.log_file is not None:
            return self.log_file
        return default_log_file()


@lru_cache(maxsize=1)
def get_settings() -> WatcherSettings:
    """Get the settings singleton loaded from the environment.

    Raises:
        ConfigurationError: If the environment holds invalid values.
    """
    try:
        return WatcherSettings()
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load watcher settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "WatcherSettings",
    "default_log_file",
    "get_settings",
    "clear_settings_cache",
]
