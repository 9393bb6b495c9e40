"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        HearthWatcherError: Base exception for all watcher errors.
        ConfigurationError: Configuration-related errors.
        StartupError: Missing paths detected at construction.

    Configuration:
        WatcherSettings: Settings for one watcher instance.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
"""

from __future__ import annotations

from hearth_watcher.core.config import (
    WatcherSettings,
    clear_settings_cache,
    default_log_file,
    get_settings,
)
from hearth_watcher.core.exceptions import (
    CardDataError,
    ConfigurationError,
    HearthWatcherError,
    ParserDefinitionError,
    StartupError,
    UnsupportedPlatformError,
)
from hearth_watcher.core.logging import (
    configure_logging,
    get_logger,
)


__all__ = [
    # Exceptions
    "HearthWatcherError",
    "ConfigurationError",
    "UnsupportedPlatformError",
    "StartupError",
    "CardDataError",
    "ParserDefinitionError",
    # Configuration
    "WatcherSettings",
    "default_log_file",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
]
