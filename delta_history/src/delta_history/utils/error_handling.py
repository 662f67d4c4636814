"""Consistent error logging helpers for Delta History.

Every failure that is recovered from (rather than raised to the user) goes
through one of these helpers so log lines share a grep-able
``[PREFIX] Failed <operation> ...: <ErrorType>: <message>`` shape.
"""

from __future__ import annotations

from .logger import log


def log_git_error(operation: str, exception: Exception, target: str | None = None) -> None:
    """Log a failed git invocation.

    Args:
        operation: What was being attempted (e.g. "loading history")
        exception: The exception that was raised
        target: Optional file path or revision the operation concerned
    """
    error_type = type(exception).__name__
    where = f" {target}" if target else ""
    log(f"[GIT] Failed {operation}{where}: {error_type}: {exception}")


def log_search_error(query: str, exception: Exception) -> None:
    """Log a search pattern that failed to compile."""
    error_type = type(exception).__name__
    log.debug(f"[SEARCH] Failed compiling pattern '{query}': {error_type}: {exception}")


def log_ui_error(component: str, action: str, exception: Exception) -> None:
    """Log UI component errors.

    Args:
        component: Name of the UI component (e.g., "diff panel", "footer")
        action: The action being performed (e.g., "setting focus", "updating")
        exception: The exception that was raised
    """
    error_type = type(exception).__name__
    log(f"[UI] Failed {action} on {component}: {error_type}: {exception}")


def log_watchdog_error(path: str, operation: str, exception: Exception) -> None:
    """Log file observer failures (start, stop or event delivery)."""
    error_type = type(exception).__name__
    log(f"[WATCHDOG] Failed {operation} {path}: {error_type}: {exception}")
