"""Tracker configuration.

All tuning constants for feature thresholds, debouncing and cursor
smoothing live here. The threshold values are empirically tuned; keep
them unless you have new calibration data.

Load from YAML:
    config = TrackerConfig.from_yaml("tracker.yml")
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from numbers import Real
from pathlib import Path

import yaml

from gesture_cursor.gestures import GestureCategory

logger = logging.getLogger("gesture_cursor.config")

_INT_FIELDS = ("history_size", "max_trail_len")
_FLOAT_FIELDS = (
    "consensus_fraction",
    "smoothing_factor",
    "extension_threshold_base",
    "extension_threshold_hysteresis",
    "pinch_threshold_base",
    "pinch_threshold_hysteresis",
    "index_scrunch_fraction",
    "thumb_open_fraction",
    "min_hand_scale",
)
_GESTURE_FIELDS = ("pointer_gestures", "reset_gestures")


@dataclass
class TrackerConfig:
    """Construction-time settings for a gesture session."""

    # Debouncing
    history_size: int = 5
    consensus_fraction: float = 0.6

    # Cursor
    smoothing_factor: float = 0.85
    max_trail_len: int = 25
    mirror_x: bool = False  # flip x for selfie-view cameras

    # Feature thresholds (ratios, or fractions of hand scale)
    extension_threshold_base: float = 1.0
    extension_threshold_hysteresis: float = 0.9
    pinch_threshold_base: float = 0.2
    pinch_threshold_hysteresis: float = 0.3
    index_scrunch_fraction: float = 0.25
    thumb_open_fraction: float = 0.5
    min_hand_scale: float = 1e-3

    # Which stable gestures drive, and which clear, the cursor
    pointer_gestures: tuple[GestureCategory, ...] = (
        GestureCategory.POINT,
        GestureCategory.PINCH,
    )
    reset_gestures: tuple[GestureCategory, ...] = (
        GestureCategory.FIST,
        GestureCategory.NONE,
    )

    def __post_init__(self):
        for name in _GESTURE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
                raise ValueError(f"{name} must be a list of gesture names, got {value!r}")
        self.pointer_gestures = tuple(GestureCategory.parse(g) for g in self.pointer_gestures)
        self.reset_gestures = tuple(GestureCategory.parse(g) for g in self.reset_gestures)
        self.validate()

    def _check_types(self):
        for name in _INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        for name in _FLOAT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value!r}")
        if not isinstance(self.mirror_x, bool):
            raise ValueError(f"mirror_x must be true or false, got {self.mirror_x!r}")

    def validate(self):
        """Raise ValueError if any setting has the wrong type or is out of range."""
        self._check_types()
        if self.history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {self.history_size}")
        if not 0.5 < self.consensus_fraction <= 1.0:
            # Above one half, at most one category can reach consensus
            raise ValueError(
                f"consensus_fraction must be in (0.5, 1], got {self.consensus_fraction}"
            )
        if not 0.0 < self.smoothing_factor < 1.0:
            raise ValueError(
                f"smoothing_factor must be in (0, 1), got {self.smoothing_factor}"
            )
        if self.max_trail_len < 1:
            raise ValueError(f"max_trail_len must be >= 1, got {self.max_trail_len}")
        if self.min_hand_scale < 0:
            raise ValueError(f"min_hand_scale must be >= 0, got {self.min_hand_scale}")

        for name in (
            "extension_threshold_base",
            "extension_threshold_hysteresis",
            "pinch_threshold_base",
            "pinch_threshold_hysteresis",
            "index_scrunch_fraction",
            "thumb_open_fraction",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

        overlap = set(self.pointer_gestures) & set(self.reset_gestures)
        if overlap:
            names = sorted(g.value for g in overlap)
            raise ValueError(f"Gestures cannot both move and reset the cursor: {names}")
        if GestureCategory.NONE not in self.reset_gestures:
            raise ValueError("reset_gestures must include NONE (hand lost)")

    @property
    def consensus_threshold(self) -> int:
        """Minimum identical votes in the window to adopt a new stable gesture."""
        # round() first so 5 * 0.6 cannot land a hair above 3 and ceil to 4
        votes = round(self.history_size * self.consensus_fraction, 9)
        return max(1, math.ceil(votes))

    def to_dict(self) -> dict:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in ("pointer_gestures", "reset_gestures"):
                value = [g.value for g in value]
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> TrackerConfig:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}")
        kwargs = dict(data)
        for key in ("pointer_gestures", "reset_gestures"):
            if key in kwargs:
                kwargs[key] = tuple(kwargs[key])
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, path: str | Path) -> TrackerConfig:
        """Load a config from YAML. Missing keys keep their defaults."""
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Malformed YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping in {path}, got {type(data).__name__}")

        # Accept either a bare mapping or one nested under "tracker"
        if "tracker" in data and isinstance(data["tracker"], dict):
            data = data["tracker"]

        config = cls.from_dict(data)
        logger.info("Loaded tracker config from %s", path)
        return config

    def to_yaml(self, path: str | Path):
        """Save this config to YAML."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump({"tracker": self.to_dict()}, f, default_flow_style=False, sort_keys=False)
