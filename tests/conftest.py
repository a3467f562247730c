"""Synthetic hand frames shared by the test modules.

Geometry (normalized image coordinates, y grows downward):
- wrist at (0.5, 0.8), middle MCP at (0.5, 0.6) -> hand scale 0.2
- every PIP at y=0.5
- extended tips at y=0.35, curled tips at y=0.63
- "borderline" tips at y=0.515: tip/PIP distance ratio ~0.95, so the
  finger only counts as extended under the open-palm hysteresis (0.9)
"""

import numpy as np
import pytest

FINGER_X = {"index": 0.45, "middle": 0.5, "ring": 0.55, "pinky": 0.6}
FINGER_MCP_Y = {"index": 0.6, "middle": 0.6, "ring": 0.6, "pinky": 0.62}
FINGER_BASE = {"index": 5, "middle": 9, "ring": 13, "pinky": 17}
TIP_Y = {"extended": 0.35, "curled": 0.63, "borderline": 0.515}

THUMB_DEFAULT = (0.32, 0.6)   # well away from the index, thumb open
THUMB_PINCH = (0.48, 0.35)    # 0.03 from index tip: < 0.2 * scale
THUMB_NEAR = (0.50, 0.35)     # 0.05 from index tip: between 0.2 and 0.3 * scale
THUMB_ON_FIST = (0.46, 0.63)  # touching a curled index tip


def build_hand(
    index="extended",
    middle="extended",
    ring="extended",
    pinky="extended",
    thumb_tip=THUMB_DEFAULT,
    offset=(0.0, 0.0),
):
    lm = np.zeros((21, 3), dtype=np.float32)
    lm[0] = [0.5, 0.8, 0.0]
    lm[1] = [0.42, 0.75, 0.0]
    lm[2] = [0.38, 0.70, 0.0]
    lm[3] = [0.35, 0.65, 0.0]
    lm[4] = [thumb_tip[0], thumb_tip[1], 0.0]

    for name, pose in (("index", index), ("middle", middle), ("ring", ring), ("pinky", pinky)):
        x = FINGER_X[name]
        base = FINGER_BASE[name]
        tip_y = TIP_Y[pose]
        lm[base] = [x, FINGER_MCP_Y[name], 0.0]
        lm[base + 1] = [x, 0.5, 0.0]
        lm[base + 2] = [x, (0.5 + tip_y) / 2, 0.0]
        lm[base + 3] = [x, tip_y, 0.0]

    lm[:, 0] += offset[0]
    lm[:, 1] += offset[1]
    return lm


class HandFactory:
    build = staticmethod(build_hand)

    def open_palm(self, **kw):
        return build_hand(**kw)

    def fist(self, **kw):
        return build_hand(index="curled", middle="curled", ring="curled", pinky="curled", **kw)

    def point(self, **kw):
        return build_hand(middle="curled", ring="curled", pinky="curled", **kw)

    def fist_thumb_on_index(self, **kw):
        return self.fist(thumb_tip=THUMB_ON_FIST, **kw)

    def pinch(self, **kw):
        return build_hand(middle="curled", ring="curled", pinky="curled", thumb_tip=THUMB_PINCH, **kw)

    def near_pinch(self, **kw):
        return build_hand(middle="curled", ring="curled", pinky="curled", thumb_tip=THUMB_NEAR, **kw)

    def borderline(self, **kw):
        return build_hand(index="borderline", middle="borderline", ring="borderline", pinky="borderline", **kw)

    def degenerate(self):
        return np.full((21, 3), 0.5, dtype=np.float32)

    @staticmethod
    def index_tip(frame):
        return float(frame[8][0]), float(frame[8][1])


@pytest.fixture
def hands():
    return HandFactory()
