"""Hand landmark indexing and frame coercion.

The detector itself lives outside this package (usually MediaPipe running
in the browser). What arrives here is its per-tick result: either 21
(x, y, z) points normalized to the image, or nothing.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import numpy as np

logger = logging.getLogger("gesture_cursor.landmarks")


class HandLandmark:
    """MediaPipe hand landmark indices."""

    WRIST = 0
    THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP = 1, 2, 3, 4
    INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
    MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
    RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
    PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20


NUM_LANDMARKS = 21
LANDMARK_DIM = 3  # x, y, z

# Non-thumb fingers in the order used throughout the package
FINGERS = ("index", "middle", "ring", "pinky")
FINGER_TIPS = (
    HandLandmark.INDEX_TIP,
    HandLandmark.MIDDLE_TIP,
    HandLandmark.RING_TIP,
    HandLandmark.PINKY_TIP,
)
FINGER_PIPS = (
    HandLandmark.INDEX_PIP,
    HandLandmark.MIDDLE_PIP,
    HandLandmark.RING_PIP,
    HandLandmark.PINKY_PIP,
)


def to_hand_frame(data: Any) -> Optional[np.ndarray]:
    """Coerce detector output into a hand frame, or None if unusable.

    Accepts a (21, 2) or (21, 3) array-like; 2D input gets z = 0.
    Anything else (missing, short, ragged, non-numeric, NaN/inf) is
    treated as "no hand this tick" rather than an error.

    Returns:
        float32 array of shape (21, 3), or None.
    """
    if data is None:
        return None

    try:
        frame = np.asarray(data, dtype=np.float32)
    except (TypeError, ValueError):
        logger.debug("Discarding non-numeric landmark data")
        return None

    if frame.ndim != 2 or frame.shape[0] < NUM_LANDMARKS or frame.shape[1] not in (2, 3):
        logger.debug("Discarding landmark data with shape %s", frame.shape)
        return None

    frame = frame[:NUM_LANDMARKS]
    if frame.shape[1] == 2:
        frame = np.hstack([frame, np.zeros((NUM_LANDMARKS, 1), dtype=np.float32)])

    if not np.all(np.isfinite(frame)):
        logger.debug("Discarding landmark data with non-finite values")
        return None

    return frame
