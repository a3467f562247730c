"""Bounded history of recent cursor positions for trail rendering."""

from __future__ import annotations

from collections import deque
from typing import Iterator

from gesture_cursor.gestures import Position2D


class TrailBuffer:
    """FIFO of the last `max_len` cursor positions, oldest first.

    Renderers draw from head (oldest, thin tail) to the last element
    (newest, the pointer itself).
    """

    def __init__(self, max_len: int = 25):
        if max_len < 1:
            raise ValueError(f"max_len must be >= 1, got {max_len}")
        self.max_len = max_len
        self._points: deque[Position2D] = deque(maxlen=max_len)

    def append(self, position: Position2D):
        self._points.append(position)

    def clear(self):
        self._points.clear()

    def snapshot(self) -> tuple[Position2D, ...]:
        return tuple(self._points)

    @property
    def newest(self) -> Position2D | None:
        return self._points[-1] if self._points else None

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Position2D]:
        return iter(self._points)
