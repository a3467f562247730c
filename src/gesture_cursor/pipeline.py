"""Per-session tick pipeline: landmarks in, gesture and cursor out.

One `GestureSession` owns all cross-frame state for one tracked user:
the last stable gesture (which feeds threshold hysteresis), the vote
window, the smoothed cursor and its trail. The caller drives it once per
frame:

    session = GestureSession()
    result = session.process_tick(landmarks)   # or None when no hand
    result.event.gesture, result.cursor.position, result.trail.positions

Sessions are not thread-safe; give each driver its own instance.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import numpy as np

from gesture_cursor.classifier import GestureClassifier
from gesture_cursor.config import TrackerConfig
from gesture_cursor.cursor import CursorState, CursorTracker
from gesture_cursor.gestures import GestureCategory, Position2D
from gesture_cursor.landmarks import to_hand_frame
from gesture_cursor.stability import StabilityFilter
from gesture_cursor.trail import TrailBuffer

logger = logging.getLogger("gesture_cursor.pipeline")


@dataclass
class GestureEvent:
    """The stable gesture for one tick."""
    gesture: GestureCategory
    raw_gesture: GestureCategory
    previous: GestureCategory
    tick: int
    timestamp: float

    @property
    def changed(self) -> bool:
        return self.gesture is not self.previous


@dataclass
class CursorSnapshot:
    position: Optional[Position2D]
    state: CursorState


@dataclass
class TrailSnapshot:
    positions: tuple[Position2D, ...] = ()


@dataclass
class TickResult:
    event: GestureEvent
    cursor: CursorSnapshot
    trail: TrailSnapshot

    def to_dict(self) -> dict:
        position = self.cursor.position
        return {
            "gesture": self.event.gesture.value,
            "raw_gesture": self.event.raw_gesture.value,
            "changed": self.event.changed,
            "tick": self.event.tick,
            "cursor": position.to_dict() if position else None,
            "cursor_state": self.cursor.state.value,
            "trail": [p.to_dict() for p in self.trail.positions],
        }


@dataclass
class SessionState:
    """Read-only view of everything a session carries between ticks."""
    last_stable_gesture: GestureCategory
    window: tuple[GestureCategory, ...]
    cursor_target: Optional[Position2D]
    cursor_current: Optional[Position2D]
    cursor_state: CursorState
    trail: tuple[Position2D, ...]


@dataclass
class SessionStats:
    """Runtime statistics over the last 60 ticks.

    `throughput_tps` is how many ticks per second the pipeline could
    process at its measured latency. It is not the rate the caller
    actually ticks at, which depends on the detector.
    """
    throughput_tps: float
    avg_latency_ms: float
    total_ticks: int
    gesture_changes: int
    missing_frames: int
    detector_faults: int
    gesture_counts: dict = field(default_factory=dict)


class GestureSession:
    """Classifies, debounces and tracks one hand, one tick at a time.

    Per tick:
        features (with hysteresis from the last stable gesture)
        -> raw gesture -> vote window -> stable gesture
        -> cursor update -> trail update
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        self.config = config or TrackerConfig()
        self.classifier = GestureClassifier(self.config)
        self.stability = StabilityFilter(self.config)
        self.cursor = CursorTracker(self.config)
        self.trail = TrailBuffer(self.config.max_trail_len)

        self._callbacks: list[Callable[[GestureEvent], None]] = []
        self._tick_times: deque = deque(maxlen=60)
        self._tick = 0
        self._gesture_changes = 0
        self._missing_frames = 0
        self._detector_faults = 0
        self._gesture_counts: dict[str, int] = {}

    def on_gesture(self, callback: Callable[[GestureEvent], None]):
        """Register a callback fired whenever the stable gesture changes."""
        self._callbacks.append(callback)

    @property
    def last_stable_gesture(self) -> GestureCategory:
        return self.stability.stable_gesture

    def process_tick(self, frame: Any = None) -> TickResult:
        """Run one frame through the whole pipeline.

        Args:
            frame: Landmarks as an array-like of shape (21, 3), or None
                when no hand was detected. Malformed input counts as no
                hand.

        Returns:
            TickResult with the stable gesture, cursor and trail.
        """
        t_start = time.monotonic()
        self._tick += 1

        hand = to_hand_frame(frame)
        previous = self.stability.stable_gesture

        raw, features = self.classifier.classify_frame(hand, previous)
        if not features.present:
            self._missing_frames += 1

        stable = self.stability.update(raw)

        position = self.cursor.update(stable, features.tip)
        if self.cursor.state is CursorState.IDLE:
            self.trail.clear()
        elif position is not None:
            self.trail.append(position)

        event = GestureEvent(
            gesture=stable,
            raw_gesture=raw,
            previous=previous,
            tick=self._tick,
            timestamp=t_start,
        )
        self._gesture_counts[stable.value] = self._gesture_counts.get(stable.value, 0) + 1

        if event.changed:
            self._gesture_changes += 1
            logger.debug("Tick %d: %s -> %s", self._tick, previous.value, stable.value)
            self._dispatch(event)

        self._tick_times.append(time.monotonic() - t_start)

        return TickResult(
            event=event,
            cursor=CursorSnapshot(position=position, state=self.cursor.state),
            trail=TrailSnapshot(positions=self.trail.snapshot()),
        )

    def process_source(self, detect: Callable[[], Any]) -> TickResult:
        """Pull one frame from a detector callable and process it.

        Detector errors never escape: the tick is processed as "no hand"
        and the next call tries again with fresh input.
        """
        try:
            frame = detect()
        except Exception as e:
            self._detector_faults += 1
            logger.warning("Detector failed, treating tick as no hand: %s", e)
            frame = None
        return self.process_tick(frame)

    def _dispatch(self, event: GestureEvent):
        for cb in self._callbacks:
            try:
                cb(event)
            except Exception as e:
                logger.error("Gesture callback %r failed: %s", cb, e)

    @property
    def state(self) -> SessionState:
        return SessionState(
            last_stable_gesture=self.stability.stable_gesture,
            window=self.stability.window,
            cursor_target=self.cursor.target,
            cursor_current=self.cursor.current,
            cursor_state=self.cursor.state,
            trail=self.trail.snapshot(),
        )

    @property
    def stats(self) -> SessionStats:
        """Get current performance statistics."""
        if self._tick_times:
            avg_latency = sum(self._tick_times) / len(self._tick_times)
            throughput = 1.0 / avg_latency if avg_latency > 0 else 0.0
        else:
            avg_latency = 0.0
            throughput = 0.0

        return SessionStats(
            throughput_tps=throughput,
            avg_latency_ms=avg_latency * 1000,
            total_ticks=self._tick,
            gesture_changes=self._gesture_changes,
            missing_frames=self._missing_frames,
            detector_faults=self._detector_faults,
            gesture_counts=dict(self._gesture_counts),
        )

    def reset(self):
        """Clear all tracking state. Registered callbacks are kept."""
        self.stability.reset()
        self.cursor.reset()
        self.trail.clear()
        self._tick_times.clear()
        self._tick = 0
        self._gesture_changes = 0
        self._missing_frames = 0
        self._detector_faults = 0
        self._gesture_counts.clear()


def run_frames(
    frames: list[Optional[np.ndarray]],
    config: Optional[TrackerConfig] = None,
) -> list[TickResult]:
    """Process a whole sequence of frames with a fresh session."""
    session = GestureSession(config)
    return [session.process_tick(f) for f in frames]
