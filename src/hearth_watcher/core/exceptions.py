"""Custom exception hierarchy for the Hearthstone log watcher.

Only startup preconditions and definition mistakes surface as exceptions.
Lines that match no recognizer, or recognized lines that reference data
the watcher does not know about yet, are handled locally by the parser
that saw them and never raise.

Example:
    >>> from hearth_watcher.core.exceptions import StartupError
    >>> raise StartupError("Log file path does not exist", path="/tmp/missing")
"""

from __future__ import annotations

from typing import Any


class HearthWatcherError(Exception):
    """Base exception for all log watcher errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration and Startup
# =============================================================================


class ConfigurationError(HearthWatcherError):
    """Raised when configuration is invalid or cannot be loaded."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class UnsupportedPlatformError(ConfigurationError):
    """Raised when no default log location is known for the host platform."""

    def __init__(
        self,
        message: str,
        *,
        platform: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if platform:
            combined_details["platform"] = platform
        super().__init__(message, config_key="log_file", details=combined_details)


class StartupError(HearthWatcherError):
    """Raised when a required filesystem path is missing at construction.

    This is fatal: the watcher refuses to start rather than waiting for
    the path to appear.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if path:
            combined_details["path"] = path
        super().__init__(message, details=combined_details)


# =============================================================================
# Static Data and Parser Definitions
# =============================================================================


class CardDataError(HearthWatcherError):
    """Raised when the card metadata table cannot be loaded."""

    def __init__(
        self,
        message: str,
        *,
        source_file: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if source_file:
            combined_details["source_file"] = source_file
        super().__init__(message, details=combined_details)


class ParserDefinitionError(HearthWatcherError):
    """Raised when a line or block parser is declared incorrectly."""

    def __init__(
        self,
        message: str,
        *,
        parser: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if parser:
            combined_details["parser"] = parser
        super().__init__(message, details=combined_details)


__all__ = [
    "HearthWatcherError",
    "ConfigurationError",
    "UnsupportedPlatformError",
    "StartupError",
    "CardDataError",
    "ParserDefinitionError",
]
