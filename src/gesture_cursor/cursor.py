"""Pointer smoothing with snap-on-first-sample and reset-on-loss.

The smoothed position follows the index fingertip with a fixed-ratio
exponential filter:

    current = current * (1 - s) + target * s

applied once per tick. The ratio does not account for elapsed time, so
at a lower frame rate the pointer lags more in wall-clock terms; callers
that need a time-correct filter should tick at a steady rate.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from gesture_cursor.config import TrackerConfig
from gesture_cursor.gestures import GestureCategory, Position2D

logger = logging.getLogger("gesture_cursor.cursor")


class CursorState(Enum):
    IDLE = "idle"          # no position
    TRACKING = "tracking"  # following the fingertip
    FROZEN = "frozen"      # holding the last position


class CursorTracker:
    """Smoothed pointer driven by the stable gesture.

    - Pointer gestures (POINT, PINCH by default) move the cursor. The
      first sample after a reset snaps straight to the fingertip.
    - Reset gestures (FIST, NONE by default) clear it.
    - Anything else freezes it in place.
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        self.config = config or TrackerConfig()
        self._target: Optional[Position2D] = None
        self._current: Optional[Position2D] = None
        self._state = CursorState.IDLE

    @property
    def target(self) -> Optional[Position2D]:
        return self._target

    @property
    def current(self) -> Optional[Position2D]:
        return self._current

    @property
    def state(self) -> CursorState:
        return self._state

    def update(
        self,
        stable: GestureCategory,
        tip: Optional[Position2D],
    ) -> Optional[Position2D]:
        """Advance one tick.

        Args:
            stable: The stable gesture for this tick.
            tip: Index fingertip position this tick, or None if no hand.

        Returns:
            The smoothed position, or None when the cursor is idle.
        """
        if stable in self.config.reset_gestures:
            self.reset()
            return None

        if stable in self.config.pointer_gestures:
            if tip is None:
                # Hand gone but the vote has not caught up yet; hold position
                return self._current
            if self._current is None:
                self._target = tip
                self._current = tip
            else:
                self._target = tip
                self._current = self._current.lerp(tip, self.config.smoothing_factor)
            self._state = CursorState.TRACKING
            return self._current

        if self._current is not None:
            self._state = CursorState.FROZEN
        return self._current

    def reset(self):
        if self._state is not CursorState.IDLE:
            logger.debug("Cursor reset from %s", self._state.value)
        self._target = None
        self._current = None
        self._state = CursorState.IDLE
