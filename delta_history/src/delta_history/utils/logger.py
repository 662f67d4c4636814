from __future__ import annotations

import os
import sys
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Any, TextIO

# Leveled logger shared by the whole application
# Use: from delta_history.utils.logger import log
# log.info("message")
# log.debug("cache miss", extra={"key": "abc123"})
# log.error("git failed", exc_info=sys.exc_info())

DEFAULT_DEBUG_LOG = Path("/tmp/delta_history_debug.log")


class LogLevel(IntEnum):
    """Log severity levels."""
    DEBUG = 10
    INFO = 20
    WARN = 30
    WARNING = 30  # Alias for WARN
    ERROR = 40
    CRITICAL = 50


class Logger:
    """Leveled logger with optional file output and Textual-aware stdout."""

    def __init__(self):
        self._level = LogLevel.INFO
        self._file_handle: TextIO | None = None
        self._file_path: Path | None = None
        self._format_string = "{timestamp} [{level:8}] {message}"

        self._configure_from_env()

    def _configure_from_env(self) -> None:
        """Configure logger from environment variables."""
        if os.environ.get("DEBUG") == "1":
            self.enable_debug()

        level_str = os.environ.get("LOG_LEVEL", "").upper()
        if level_str in ["DEBUG", "INFO", "WARN", "WARNING", "ERROR", "CRITICAL"]:
            self._level = LogLevel[level_str]

    @property
    def level(self) -> LogLevel:
        return self._level

    @property
    def file_path(self) -> Path | None:
        return self._file_path

    def set_level(self, level: LogLevel) -> None:
        """Set the minimum log level."""
        self._level = level

    def enable_debug(self, path: Path = DEFAULT_DEBUG_LOG) -> None:
        """Switch to DEBUG level and mirror everything into ``path``."""
        self._level = LogLevel.DEBUG
        self.set_file_output(path)

    def set_file_output(self, path: Path, append: bool = True) -> None:
        """Enable file output for logging."""
        try:
            if self._file_handle:
                self._file_handle.close()

            mode = "a" if append else "w"
            self._file_handle = open(path, mode, encoding="utf-8")
            self._file_path = path
        except OSError:
            # Can't log errors about logging setup
            self._file_handle = None
            self._file_path = None

    def close(self) -> None:
        """Close the log file, if one is open."""
        if self._file_handle:
            try:
                self._file_handle.close()
            except OSError:
                pass
        self._file_handle = None
        self._file_path = None

    def _can_write_stdout(self) -> bool:
        """Only write to stdout when no Textual app owns the terminal."""
        try:
            from textual._context import active_app  # lazy import

            app = active_app.get(None)
        except (ImportError, AttributeError, LookupError):
            app = None
        return app is None

    def _format_message(
        self,
        level: LogLevel,
        message: str,
        extra: dict | None = None,
        exc_info: tuple | None = None
    ) -> str:
        """Format a log message with timestamp and level."""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        formatted = self._format_string.format(
            timestamp=timestamp,
            level=level.name,
            message=message
        )

        if extra:
            formatted += f" | {extra}"

        if exc_info and exc_info[0] is not None:
            import traceback
            exc_str = "".join(traceback.format_exception(*exc_info))
            formatted += f"\n{exc_str}"

        return formatted

    def _write(
        self,
        level: LogLevel,
        *args: Any,
        sep: str = " ",
        extra: dict | None = None,
        exc_info: tuple | None = None
    ) -> None:
        """Write a log message at the specified level."""
        if level < self._level:
            return

        message = sep.join(str(a) for a in args)
        formatted = self._format_message(level, message, extra, exc_info)

        if self._file_handle:
            try:
                self._file_handle.write(formatted + "\n")
                self._file_handle.flush()
            except OSError:
                pass

        # stderr keeps log noise out of piped stdout
        if self._can_write_stdout():
            try:
                color_codes = {
                    LogLevel.DEBUG: "\033[90m",    # Gray
                    LogLevel.INFO: "\033[0m",       # Default
                    LogLevel.WARN: "\033[93m",      # Yellow
                    LogLevel.ERROR: "\033[91m",     # Red
                    LogLevel.CRITICAL: "\033[95m",  # Magenta
                }
                color = color_codes.get(level, "\033[0m")
                reset = "\033[0m"

                if sys.stderr.isatty():
                    sys.stderr.write(f"{color}{formatted}{reset}\n")
                else:
                    sys.stderr.write(formatted + "\n")
                sys.stderr.flush()
            except (OSError, ValueError):
                pass

    def debug(self, *args: Any, **kwargs) -> None:
        """Log a debug message."""
        self._write(LogLevel.DEBUG, *args, **kwargs)

    def info(self, *args: Any, **kwargs) -> None:
        """Log an info message."""
        self._write(LogLevel.INFO, *args, **kwargs)

    def warn(self, *args: Any, **kwargs) -> None:
        """Log a warning message."""
        self._write(LogLevel.WARN, *args, **kwargs)

    def warning(self, *args: Any, **kwargs) -> None:
        """Alias for warn()."""
        self.warn(*args, **kwargs)

    def error(self, *args: Any, **kwargs) -> None:
        """Log an error message."""
        self._write(LogLevel.ERROR, *args, **kwargs)

    def critical(self, *args: Any, **kwargs) -> None:
        """Log a critical message."""
        self._write(LogLevel.CRITICAL, *args, **kwargs)

    def __call__(self, *args: Any, sep: str = " ", end: str = "\n") -> None:
        """Shorthand: log at DEBUG level."""
        self.debug(*args, sep=sep)


log = Logger()
