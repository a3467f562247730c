"""Tests for feature extraction and rule-based classification."""

import numpy as np
import pytest

from gesture_cursor.classifier import GestureClassifier, extract_features
from gesture_cursor.config import TrackerConfig
from gesture_cursor.gestures import NO_HAND, GestureCategory, HandFeatures

G = GestureCategory


class TestFeatureExtraction:
    def test_absent_frame(self):
        assert extract_features(None) is NO_HAND

    def test_short_frame(self, hands):
        assert extract_features(hands.open_palm()[:20]) is NO_HAND

    def test_degenerate_scale(self, hands):
        features = extract_features(hands.degenerate())
        assert not features.present

    def test_nan_frame(self, hands):
        lm = hands.open_palm()
        lm[8] = [np.nan, np.nan, 0]
        assert not extract_features(lm).present

    def test_hand_scale(self, hands):
        features = extract_features(hands.open_palm())
        assert features.hand_scale == pytest.approx(0.2, abs=1e-5)

    def test_open_palm_flags(self, hands):
        features = extract_features(hands.open_palm())
        assert features.present
        assert features.extended == (True, True, True, True)
        assert features.curled == (False, False, False, False)
        assert features.open_count == 4

    def test_fist_flags(self, hands):
        features = extract_features(hands.fist())
        assert features.extended == (False, False, False, False)
        assert features.curled == (True, True, True, True)
        assert features.index_scrunched

    def test_named_finger_access(self, hands):
        features = extract_features(hands.point())
        assert features.is_extended("index")
        assert not features.is_extended("middle")
        assert features.is_curled("pinky")

    def test_thumb_open(self, hands):
        assert extract_features(hands.point()).thumb_open
        tucked = hands.point(thumb_tip=(0.47, 0.62))
        assert not extract_features(tucked).thumb_open

    def test_pinch_threshold_widens_while_pinching(self, hands):
        lm = hands.pinch()
        base = extract_features(lm, G.NONE)
        held = extract_features(lm, G.PINCH)
        assert base.pinch_threshold == pytest.approx(0.2 * base.hand_scale)
        assert held.pinch_threshold == pytest.approx(0.3 * held.hand_scale)

    def test_extension_hysteresis(self, hands):
        lm = hands.borderline()
        assert extract_features(lm, G.NONE).open_count == 0
        assert extract_features(lm, G.OPEN_PALM).open_count == 4

    def test_depth_ignored(self, hands):
        lm = hands.point()
        deep = lm.copy()
        deep[:, 2] = np.linspace(-0.5, 0.5, 21)
        assert extract_features(lm) == extract_features(deep)

    def test_tip_is_index_fingertip(self, hands):
        lm = hands.point(offset=(0.1, -0.05))
        tip = extract_features(lm).tip
        assert (tip.x, tip.y) == pytest.approx(hands.index_tip(lm))

    def test_mirrored_tip(self, hands):
        lm = hands.point()
        tip = extract_features(lm, config=TrackerConfig(mirror_x=True)).tip
        assert tip.x == pytest.approx(1.0 - lm[8][0])
        assert tip.y == pytest.approx(lm[8][1])

    def test_accepts_nested_lists(self, hands):
        lm = hands.open_palm()
        assert extract_features(lm.tolist()) == extract_features(lm)


class TestClassification:
    def setup_method(self):
        self.classifier = GestureClassifier()

    def classify(self, frame, last=G.NONE):
        return self.classifier.classify_frame(frame, last)[0]

    def test_open_palm(self, hands):
        assert self.classify(hands.open_palm()) is G.OPEN_PALM

    def test_three_fingers_is_open_palm(self, hands):
        assert self.classify(hands.build(pinky="curled")) is G.OPEN_PALM

    def test_fist(self, hands):
        assert self.classify(hands.fist()) is G.FIST

    def test_point(self, hands):
        assert self.classify(hands.point()) is G.POINT

    def test_pinch(self, hands):
        assert self.classify(hands.pinch()) is G.PINCH

    def test_no_hand(self, hands):
        assert self.classify(None) is G.NONE
        assert self.classify(hands.degenerate()) is G.NONE

    def test_default_fallback_is_point(self, hands):
        # Two fingers up: not a pinch, not a fist, not an open palm
        assert self.classify(hands.build(ring="curled", pinky="curled")) is G.POINT
        assert self.classify(hands.build(index="curled", middle="curled", ring="curled")) is G.POINT

    def test_pinch_has_priority_over_open_palm(self, hands):
        lm = hands.build(thumb_tip=(0.48, 0.35))
        assert self.classify(lm) is G.PINCH

    def test_thumb_on_curled_index_is_fist(self, hands):
        lm = hands.fist_thumb_on_index()
        features = self.classifier.extract_features(lm)
        assert features.pinch_distance < features.pinch_threshold
        assert self.classify(lm) is G.FIST

    def test_pinch_hysteresis(self, hands):
        lm = hands.near_pinch()
        assert self.classify(lm, G.NONE) is G.POINT
        assert self.classify(lm, G.PINCH) is G.PINCH

    def test_open_palm_hysteresis(self, hands):
        lm = hands.borderline()
        assert self.classify(lm, G.NONE) is G.FIST
        assert self.classify(lm, G.OPEN_PALM) is G.OPEN_PALM

    def test_no_hand_features(self):
        assert self.classifier.classify(NO_HAND) is G.NONE

    def test_features_only(self):
        features = HandFeatures(
            present=True,
            extended=(True, False, False, False),
            curled=(False, True, True, True),
            hand_scale=0.2,
            pinch_distance=0.5,
            pinch_threshold=0.04,
        )
        assert self.classifier.classify(features) is G.POINT

    @pytest.mark.parametrize("last", list(GestureCategory))
    def test_deterministic(self, hands, last):
        for lm in (hands.open_palm(), hands.fist(), hands.point(), hands.near_pinch(), hands.borderline()):
            features = self.classifier.extract_features(lm, last)
            first = self.classifier.classify(features, last)
            for _ in range(5):
                assert self.classifier.classify(features, last) is first

    def test_output_is_closed_set(self):
        rng = np.random.RandomState(0)
        for _ in range(200):
            lm = rng.rand(21, 3).astype(np.float32)
            assert self.classify(lm) in set(GestureCategory)
