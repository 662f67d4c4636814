"""Sorted index of changed lines for jump-to-next-change navigation."""

from __future__ import annotations

from bisect import bisect_left
from typing import Iterable

from .parser import DiffLine


class ChangeIndex:
    """Strictly increasing line indices of additions and deletions.

    Navigation is O(log n) and stops at either end; there is no wraparound.
    """

    def __init__(self, positions: Iterable[int] = ()):
        self._positions: list[int] = sorted(set(positions))
        self._current: int | None = None

    @classmethod
    def build(cls, lines: list[DiffLine]) -> ChangeIndex:
        return cls(i for i, line in enumerate(lines) if line.is_change)

    @property
    def positions(self) -> tuple[int, ...]:
        return tuple(self._positions)

    def __len__(self) -> int:
        return len(self._positions)

    def _next_index(self, current: int) -> int | None:
        i = bisect_left(self._positions, current)
        if i < len(self._positions) and self._positions[i] == current:
            i += 1
        return i if i < len(self._positions) else None

    def _previous_index(self, current: int) -> int | None:
        i = bisect_left(self._positions, current)
        return i - 1 if i > 0 else None

    def peek_next(self, current: int) -> int | None:
        """First change strictly after ``current``, without moving the position."""
        i = self._next_index(current)
        return None if i is None else self._positions[i]

    def peek_previous(self, current: int) -> int | None:
        i = self._previous_index(current)
        return None if i is None else self._positions[i]

    def next(self, current: int) -> int | None:
        """First change strictly after ``current``."""
        i = self._next_index(current)
        if i is None:
            return None
        self._current = i
        return self._positions[i]

    def previous(self, current: int) -> int | None:
        """Last change strictly before ``current``."""
        i = self._previous_index(current)
        if i is None:
            return None
        self._current = i
        return self._positions[i]

    def mark(self, line: int) -> None:
        """Record ``line`` as the change last jumped to; other lines are ignored."""
        i = bisect_left(self._positions, line)
        if i < len(self._positions) and self._positions[i] == line:
            self._current = i

    def position(self) -> tuple[int, int] | None:
        """1-based ``(n, total)`` of the last change jumped to."""
        if self._current is None:
            return None
        return self._current + 1, len(self._positions)
