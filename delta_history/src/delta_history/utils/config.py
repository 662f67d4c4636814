from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from .errors import ConfigError
from .logger import log

__all__ = ["Config", "ConfigError", "HistoryOptions", "LAYOUT_CHOICES", "config"]

LAYOUT_CHOICES: Final[tuple[str, ...]] = ("auto", "unified", "side-by-side")


@dataclass
class HistoryOptions:
    """Per-run options for a Delta History session."""

    repo_root: str | None = None
    file_path: str | None = None
    context_lines: int | None = None
    follow_renames: bool = True
    first_parent: bool = False
    layout: str | None = None
    watch: bool = True

    @classmethod
    def from_args(cls, args) -> HistoryOptions:
        """Create HistoryOptions from parsed command line arguments."""
        return cls(
            repo_root=args.repo,
            file_path=args.file,
            context_lines=args.lines,
            follow_renames=not args.no_follow,
            first_parent=args.first_parent,
            layout=args.layout,
            watch=not args.no_watch,
        )

    def merge_with_env(self) -> HistoryOptions:
        """Fill unset values from the environment and global config."""
        layout = self.layout or os.environ.get("DELTA_LAYOUT") or "auto"
        if layout not in LAYOUT_CHOICES:
            log.warning(f"Invalid DELTA_LAYOUT='{layout}', using 'auto'")
            layout = "auto"
        return HistoryOptions(
            repo_root=self.repo_root or os.environ.get("DELTA_REPO"),
            file_path=self.file_path,
            context_lines=self.context_lines if self.context_lines is not None else config.context_lines,
            follow_renames=self.follow_renames,
            first_parent=self.first_parent,
            layout=layout,
            watch=self.watch,
        )


class Config:
    """Delta History configuration with environment variable support and validation."""

    # Default values
    _DEFAULT_CONTEXT_LINES: Final[int] = 3
    _DEFAULT_CACHE_SIZE: Final[int] = 50
    _DEFAULT_SIDE_BY_SIDE_MIN_WIDTH: Final[int] = 120
    _DEFAULT_MESSAGE_TIMEOUT: Final[float] = 3.0
    _DEFAULT_WATCH_DEBOUNCE_MS: Final[int] = 300
    _DEFAULT_MAX_LINE_CHARS: Final[int] = 2000

    # Validation bounds
    _MIN_CONTEXT_LINES: Final[int] = 0
    _MAX_CONTEXT_LINES: Final[int] = 100
    _MIN_CACHE_SIZE: Final[int] = 1
    _MAX_CACHE_SIZE: Final[int] = 10000
    _MIN_SIDE_BY_SIDE_MIN_WIDTH: Final[int] = 40
    _MAX_SIDE_BY_SIDE_MIN_WIDTH: Final[int] = 1000
    _MIN_MESSAGE_TIMEOUT: Final[float] = 0.5
    _MAX_MESSAGE_TIMEOUT: Final[float] = 60.0
    _MIN_WATCH_DEBOUNCE_MS: Final[int] = 50
    _MAX_WATCH_DEBOUNCE_MS: Final[int] = 5000
    _MIN_MAX_LINE_CHARS: Final[int] = 80
    _MAX_MAX_LINE_CHARS: Final[int] = 100000

    def __init__(self):
        """Initialize configuration with environment variable overrides."""
        self.context_lines = self._get_int_env("DELTA_CONTEXT_LINES", self._DEFAULT_CONTEXT_LINES)
        self.cache_size = self._get_int_env("DELTA_CACHE_SIZE", self._DEFAULT_CACHE_SIZE)
        self.side_by_side_min_width = self._get_int_env(
            "DELTA_SIDE_BY_SIDE_MIN_WIDTH", self._DEFAULT_SIDE_BY_SIDE_MIN_WIDTH
        )
        self.message_timeout = self._get_float_env("DELTA_MESSAGE_TIMEOUT", self._DEFAULT_MESSAGE_TIMEOUT)
        self.watch_debounce_ms = self._get_int_env("DELTA_WATCH_DEBOUNCE_MS", self._DEFAULT_WATCH_DEBOUNCE_MS)
        self.max_line_chars = self._get_int_env("DELTA_MAX_LINE_CHARS", self._DEFAULT_MAX_LINE_CHARS)

        self._validate_all()

    def _get_int_env(self, key: str, default: int) -> int:
        value = os.environ.get(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError as e:
            log.warning(f"Invalid integer value for {key}='{value}', using default {default}: {e}")
            return default

    def _get_float_env(self, key: str, default: float) -> float:
        value = os.environ.get(key)
        if value is None:
            return default

        try:
            return float(value)
        except ValueError as e:
            log.warning(f"Invalid float value for {key}='{value}', using default {default}: {e}")
            return default

    def _validate_all(self) -> None:
        """Validate all configuration values."""
        self._check_range("context_lines", self.context_lines, self._MIN_CONTEXT_LINES, self._MAX_CONTEXT_LINES)
        self._check_range("cache_size", self.cache_size, self._MIN_CACHE_SIZE, self._MAX_CACHE_SIZE)
        self._check_range(
            "side_by_side_min_width",
            self.side_by_side_min_width,
            self._MIN_SIDE_BY_SIDE_MIN_WIDTH,
            self._MAX_SIDE_BY_SIDE_MIN_WIDTH,
        )
        self._check_range(
            "message_timeout", self.message_timeout, self._MIN_MESSAGE_TIMEOUT, self._MAX_MESSAGE_TIMEOUT
        )
        self._check_range(
            "watch_debounce_ms", self.watch_debounce_ms, self._MIN_WATCH_DEBOUNCE_MS, self._MAX_WATCH_DEBOUNCE_MS
        )
        self._check_range("max_line_chars", self.max_line_chars, self._MIN_MAX_LINE_CHARS, self._MAX_MAX_LINE_CHARS)

    @staticmethod
    def _check_range(name: str, value: float, min_val: float, max_val: float) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{name} must be a number, got {type(value).__name__}")
        if not (min_val <= value <= max_val):
            raise ConfigError(f"{name} must be between {min_val} and {max_val}, got {value}")

    def __repr__(self) -> str:
        return (
            f"Config(context_lines={self.context_lines}, "
            f"cache_size={self.cache_size}, "
            f"side_by_side_min_width={self.side_by_side_min_width}, "
            f"message_timeout={self.message_timeout}, "
            f"watch_debounce_ms={self.watch_debounce_ms}, "
            f"max_line_chars={self.max_line_chars})"
        )


# Global configuration instance
config = Config()
