"""Gesture categories and the per-frame geometric features they are decided from."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from gesture_cursor.landmarks import FINGERS


class GestureCategory(Enum):
    """The closed set of poses the classifier can report."""
    NONE = "NONE"
    OPEN_PALM = "OPEN_PALM"
    FIST = "FIST"
    POINT = "POINT"
    PINCH = "PINCH"

    @classmethod
    def parse(cls, value: str | GestureCategory) -> GestureCategory:
        """Accept an enum member, its value, or its name in any case."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unknown gesture category: {value!r}") from None


@dataclass(frozen=True)
class Position2D:
    """A point in normalized screen space, (0, 0) top-left."""
    x: float
    y: float

    def lerp(self, target: Position2D, t: float) -> Position2D:
        """Blend toward `target` by fraction `t`: a * (1 - t) + b * t per axis."""
        return Position2D(
            x=self.x * (1 - t) + target.x * t,
            y=self.y * (1 - t) + target.y * t,
        )

    def distance(self, other: Position2D) -> float:
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict) -> Position2D:
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass(frozen=True)
class HandFeatures:
    """Geometry extracted from one hand frame.

    Finger flags are ordered index, middle, ring, pinky. Thresholds are
    already scaled by hand size and adjusted for the previous stable
    gesture, so the classifier only compares.
    """

    present: bool
    extended: tuple[bool, bool, bool, bool] = (False, False, False, False)
    curled: tuple[bool, bool, bool, bool] = (False, False, False, False)
    thumb_open: bool = False
    hand_scale: float = 0.0
    pinch_distance: float = float("inf")
    pinch_threshold: float = 0.0
    index_scrunched: bool = False
    tip: Optional[Position2D] = None

    @property
    def open_count(self) -> int:
        return sum(self.extended)

    def is_extended(self, finger: str) -> bool:
        return self.extended[FINGERS.index(finger)]

    def is_curled(self, finger: str) -> bool:
        return self.curled[FINGERS.index(finger)]


NO_HAND = HandFeatures(present=False)
