"""Display-mode controller driven by stable gestures.

Conventions used by the scene front end:
- Open palm  -> exploded view
- Fist       -> normal view, selection cleared
- Pinch while hovering a target -> select that target

Hit-testing is the renderer's job; it passes the id of whatever the
cursor is over as `hovered`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from gesture_cursor.gestures import GestureCategory
from gesture_cursor.pipeline import GestureEvent

logger = logging.getLogger("gesture_cursor.modes")


class DisplayMode(Enum):
    NORMAL = "NORMAL"
    EXPLODED = "EXPLODED"


@dataclass(frozen=True)
class ModeState:
    mode: DisplayMode = DisplayMode.NORMAL
    selected: Optional[str] = None

    def to_dict(self) -> dict:
        return {"mode": self.mode.value, "selected": self.selected}


class ModeController:
    """Applies gesture conventions to the display mode and selection."""

    def __init__(self):
        self._state = ModeState()

    @property
    def state(self) -> ModeState:
        return self._state

    def update(self, event: GestureEvent, hovered: Optional[str] = None) -> ModeState:
        """Apply one tick's stable gesture. Returns the new state."""
        gesture = event.gesture
        state = self._state

        if gesture is GestureCategory.OPEN_PALM:
            state = ModeState(mode=DisplayMode.EXPLODED, selected=state.selected)
        elif gesture is GestureCategory.FIST:
            state = ModeState(mode=DisplayMode.NORMAL, selected=None)
        elif gesture is GestureCategory.PINCH:
            if hovered is not None and hovered != state.selected:
                state = ModeState(mode=state.mode, selected=hovered)

        if state != self._state:
            logger.info("Display state %s -> %s", self._state.to_dict(), state.to_dict())
            self._state = state
        return self._state

    def reset(self):
        self._state = ModeState()
