from __future__ import annotations

import os
import threading
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .error_handling import log_watchdog_error
from .logger import log

_CONTENT_EVENTS = ("modified", "created", "moved", "deleted")


class _DebouncedFileHandler(FileSystemEventHandler):
    """Collapses bursts of events on one file into a single callback."""

    def __init__(self, target: str, callback: Callable[[], None], debounce_ms: int) -> None:
        self._target = os.path.normcase(os.path.abspath(target))
        self._callback = callback
        self._debounce = max(0, int(debounce_ms)) / 1000.0
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def _matches(self, event: FileSystemEvent) -> bool:
        paths = [getattr(event, "src_path", ""), getattr(event, "dest_path", "")]
        for p in paths:
            if isinstance(p, bytes):
                p = os.fsdecode(p)
            if p and os.path.normcase(os.path.abspath(p)) == self._target:
                return True
        return False

    def _schedule(self) -> None:
        def fire() -> None:
            try:
                self._callback()
            except (RuntimeError, OSError) as e:
                log_watchdog_error(self._target, "delivering change for", e)

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce, fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def on_any_event(self, event: FileSystemEvent):  # type: ignore[override]
        if getattr(event, "event_type", "") not in _CONTENT_EVENTS:
            return
        if not self._matches(event):
            return
        log("[WATCHDOG] Event:", event.event_type, "on", self._target)
        self._schedule()


def watch_file(
    path: str, on_change: Callable[[], None], *, debounce_ms: int = 300
) -> tuple[object, Callable[[], None]]:
    """
    Watch a single file and return (observer, stop_fn).

    The observer is scheduled on the file's parent directory because editors
    commonly replace files by rename. stop_fn() is idempotent and cancels
    any pending debounced callback.
    """
    abs_path = os.path.abspath(path)
    directory = os.path.dirname(abs_path) or "."
    log(f"[WATCHDOG] Watching file: {abs_path}")
    handler = _DebouncedFileHandler(abs_path, on_change, debounce_ms)
    observer = Observer()
    observer.schedule(handler, directory, recursive=False)
    observer.daemon = True
    observer.start()

    _stopped = False
    _lock = threading.Lock()

    def stop() -> None:
        nonlocal _stopped
        with _lock:
            if _stopped:
                return
            _stopped = True
        handler.cancel()
        try:
            observer.stop()
            observer.join(timeout=0.5)
        except (RuntimeError, OSError) as e:
            log_watchdog_error(abs_path, "stopping observer for", e)

    return observer, stop
