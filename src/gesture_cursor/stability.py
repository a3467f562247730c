"""Majority-vote debouncing of the raw gesture stream."""

from __future__ import annotations

import logging
from collections import Counter, deque
from typing import Optional

from gesture_cursor.config import TrackerConfig
from gesture_cursor.gestures import GestureCategory

logger = logging.getLogger("gesture_cursor.stability")


class StabilityFilter:
    """Turns per-frame gestures into a stable gesture by sliding-window vote.

    Each raw gesture is pushed into a window of the last `history_size`
    values. A category that fills at least `consensus_threshold` slots
    becomes the stable gesture. When nothing reaches consensus the
    previous stable gesture is kept, so a single outlier frame (or a
    window split between poses) never moves the output.
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        self.config = config or TrackerConfig()
        self._window: deque[GestureCategory] = deque(maxlen=self.config.history_size)
        self._stable = GestureCategory.NONE

    @property
    def consensus_threshold(self) -> int:
        return self.config.consensus_threshold

    @property
    def stable_gesture(self) -> GestureCategory:
        return self._stable

    @property
    def window(self) -> tuple[GestureCategory, ...]:
        """Raw gestures currently in the window, oldest first."""
        return tuple(self._window)

    def update(self, raw: GestureCategory) -> GestureCategory:
        """Record one raw gesture and return the (possibly new) stable gesture."""
        self._window.append(raw)

        counts = Counter(self._window)
        leader, votes = counts.most_common(1)[0]
        if votes >= self.consensus_threshold and leader is not self._stable:
            logger.debug(
                "Stable gesture %s -> %s (%d/%d votes)",
                self._stable.value, leader.value, votes, len(self._window),
            )
            self._stable = leader

        return self._stable

    def reset(self):
        """Forget the window and return to NONE."""
        self._window.clear()
        self._stable = GestureCategory.NONE
