"""gesture-cursor - Real-time hand gesture classification and cursor smoothing."""

__version__ = "0.1.0"

from gesture_cursor.config import TrackerConfig
from gesture_cursor.gestures import GestureCategory, HandFeatures, Position2D, NO_HAND
from gesture_cursor.classifier import GestureClassifier, extract_features
from gesture_cursor.stability import StabilityFilter
from gesture_cursor.cursor import CursorTracker, CursorState
from gesture_cursor.trail import TrailBuffer
from gesture_cursor.pipeline import (
    GestureSession, GestureEvent, CursorSnapshot, TrailSnapshot, TickResult,
)
from gesture_cursor.modes import ModeController, DisplayMode, ModeState
from gesture_cursor.recorder import SessionRecorder, SessionPlayer, RecordedFrame
