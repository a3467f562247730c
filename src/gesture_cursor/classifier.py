"""Rule-based hand pose classification.

Two steps, both pure:
1. `extract_features` turns a landmark frame into finger flags, hand
   scale and pinch geometry.
2. `GestureClassifier.classify` maps those features to a gesture using
   a fixed priority order: pinch, fist, open palm, then point.

The previous *stable* gesture is an explicit input to both. It loosens
the thresholds for the pose the hand is already in (hysteresis), so a
hand sitting on a decision boundary does not flicker between poses.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from gesture_cursor.config import TrackerConfig
from gesture_cursor.gestures import NO_HAND, GestureCategory, HandFeatures, Position2D
from gesture_cursor.landmarks import FINGER_PIPS, FINGER_TIPS, NUM_LANDMARKS, HandLandmark


def _dist(a: np.ndarray, b: np.ndarray) -> float:
    # x/y only; depth from a monocular detector is too noisy to threshold
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


def extract_features(
    frame: Optional[np.ndarray],
    last_stable: GestureCategory = GestureCategory.NONE,
    config: Optional[TrackerConfig] = None,
) -> HandFeatures:
    """Extract classification features from one hand frame.

    Args:
        frame: Landmarks, shape (21, 3), in normalized image coordinates,
            or None when no hand was detected.
        last_stable: Stable gesture from the previous tick.
        config: Threshold settings; defaults if omitted.

    Returns:
        HandFeatures, or NO_HAND for absent, short or degenerate frames.
    """
    config = config or TrackerConfig()

    if frame is None:
        return NO_HAND
    frame = np.asarray(frame, dtype=np.float32)
    if frame.ndim != 2 or frame.shape[0] < NUM_LANDMARKS or frame.shape[1] < 2:
        return NO_HAND
    if not np.all(np.isfinite(frame[:NUM_LANDMARKS, :2])):
        return NO_HAND

    wrist = frame[HandLandmark.WRIST]
    hand_scale = _dist(wrist, frame[HandLandmark.MIDDLE_MCP])
    if hand_scale < config.min_hand_scale:
        return NO_HAND

    if last_stable is GestureCategory.OPEN_PALM:
        ext_ratio = config.extension_threshold_hysteresis
    else:
        ext_ratio = config.extension_threshold_base

    extended = []
    curled = []
    for tip_idx, pip_idx in zip(FINGER_TIPS, FINGER_PIPS):
        tip_dist = _dist(wrist, frame[tip_idx])
        pip_dist = _dist(wrist, frame[pip_idx])
        extended.append(tip_dist > pip_dist * ext_ratio)
        curled.append(tip_dist < pip_dist)

    thumb_tip = frame[HandLandmark.THUMB_TIP]
    index_tip = frame[HandLandmark.INDEX_TIP]
    index_mcp = frame[HandLandmark.INDEX_MCP]

    if last_stable is GestureCategory.PINCH:
        pinch_fraction = config.pinch_threshold_hysteresis
    else:
        pinch_fraction = config.pinch_threshold_base

    tip_x = float(index_tip[0])
    if config.mirror_x:
        tip_x = 1.0 - tip_x

    return HandFeatures(
        present=True,
        extended=tuple(extended),
        curled=tuple(curled),
        thumb_open=_dist(thumb_tip, index_mcp) > hand_scale * config.thumb_open_fraction,
        hand_scale=hand_scale,
        pinch_distance=_dist(thumb_tip, index_tip),
        pinch_threshold=hand_scale * pinch_fraction,
        # Curled index tip near its knuckle: a fist, even if the thumb touches it
        index_scrunched=_dist(index_tip, index_mcp) < hand_scale * config.index_scrunch_fraction,
        tip=Position2D(x=tip_x, y=float(index_tip[1])),
    )


class GestureClassifier:
    """Classifies a hand into one of the five gesture categories.

    The decision order is part of the contract: the first rule that
    matches wins.

        1. PINCH      thumb tip near index tip, index not scrunched
        2. FIST       no non-thumb finger extended
        3. OPEN_PALM  at least three non-thumb fingers extended
        4. POINT      any other visible hand
        5. NONE       no usable hand
    """

    def __init__(self, config: Optional[TrackerConfig] = None):
        self.config = config or TrackerConfig()

    def extract_features(
        self,
        frame: Optional[np.ndarray],
        last_stable: GestureCategory = GestureCategory.NONE,
    ) -> HandFeatures:
        return extract_features(frame, last_stable, self.config)

    def classify(
        self,
        features: HandFeatures,
        last_stable: GestureCategory = GestureCategory.NONE,
    ) -> GestureCategory:
        """Map features to a raw per-frame gesture.

        `last_stable` only matters through thresholds already baked into
        `features`; it is accepted here so callers hand the classifier
        the same inputs the features were built from.
        """
        if not features.present:
            return GestureCategory.NONE

        if features.pinch_distance < features.pinch_threshold and not features.index_scrunched:
            return GestureCategory.PINCH

        if not any(features.extended):
            return GestureCategory.FIST

        if features.open_count >= 3:
            return GestureCategory.OPEN_PALM

        return GestureCategory.POINT

    def classify_frame(
        self,
        frame: Optional[np.ndarray],
        last_stable: GestureCategory = GestureCategory.NONE,
    ) -> tuple[GestureCategory, HandFeatures]:
        """Extract and classify in one step. Returns (gesture, features)."""
        features = self.extract_features(frame, last_stable)
        return self.classify(features, last_stable), features
