"""Landmark session recording and replay.

Recordings let a tracking session be reproduced without a camera:
in tests, on headless CI machines, or when tuning thresholds against a
problem clip.

    recorder = SessionRecorder()
    recorder.start()
    recorder.add_frame(landmarks)        # None for "no hand"
    recorder.save("session.json")

    for frame in SessionPlayer.load("session.json").play():
        session.process_tick(frame.landmarks)
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

from gesture_cursor.landmarks import LANDMARK_DIM, NUM_LANDMARKS, to_hand_frame

logger = logging.getLogger("gesture_cursor.recorder")

FORMAT_VERSION = 1


@dataclass
class RecordedFrame:
    """One tick of a recording."""
    timestamp: float  # seconds from recording start
    landmarks: Optional[list[list[float]]]  # (21, 3) nested lists, or None
    gesture: Optional[str] = None  # optional label, e.g. "FIST"


class SessionRecorder:
    """Records per-tick landmark frames to a file."""

    def __init__(self):
        self._frames: list[RecordedFrame] = []
        self._start_time: Optional[float] = None
        self._recording = False

    def start(self):
        """Begin a new recording."""
        self._frames = []
        self._start_time = time.monotonic()
        self._recording = True

    def stop(self) -> int:
        """Stop recording. Returns number of frames captured."""
        self._recording = False
        return len(self._frames)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp

    def add_frame(
        self,
        landmarks: Optional[np.ndarray],
        gesture: Optional[str] = None,
        timestamp: Optional[float] = None,
    ):
        """Add a frame. Ignored unless recording.

        Args:
            landmarks: Array of shape (21, 3) or (21, 2), or None for no hand.
                Unusable data is recorded as no hand.
            gesture: Optional gesture label for this frame.
            timestamp: Seconds from start; measured if omitted.
        """
        if not self._recording:
            return

        if timestamp is None:
            timestamp = time.monotonic() - self._start_time

        # Stored exactly as a session would see it: (21, 3) or no hand
        frame = to_hand_frame(landmarks)
        self._frames.append(RecordedFrame(
            timestamp=timestamp,
            landmarks=frame.tolist() if frame is not None else None,
            gesture=gesture,
        ))

    def save(self, path: str | Path):
        """Save recording to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": FORMAT_VERSION,
            "frame_count": len(self._frames),
            "duration": self.duration,
            "frames": [asdict(f) for f in self._frames],
        }

        with open(path, "w") as f:
            json.dump(data, f)
        logger.info("Saved %d frames to %s", len(self._frames), path)

    def save_compact(self, path: str | Path):
        """Save in compact numpy .npz format. Absent frames are zero-filled and masked."""
        path = Path(path).with_suffix(".npz")
        path.parent.mkdir(parents=True, exist_ok=True)

        n = len(self._frames)
        landmarks = np.zeros((n, NUM_LANDMARKS, LANDMARK_DIM), dtype=np.float32)
        present = np.zeros(n, dtype=bool)
        for i, frame in enumerate(self._frames):
            if frame.landmarks is not None:
                landmarks[i] = np.array(frame.landmarks, dtype=np.float32)
                present[i] = True

        np.savez_compressed(
            path,
            timestamps=np.array([f.timestamp for f in self._frames], dtype=np.float64),
            landmarks=landmarks,
            present=present,
            gestures=np.array([json.dumps([f.gesture for f in self._frames])]),
        )
        logger.info("Saved %d frames to %s", n, path)


class SessionPlayer:
    """Replays a recorded session."""

    def __init__(self, frames: list[RecordedFrame]):
        self._frames = frames

    @classmethod
    def load(cls, path: str | Path) -> SessionPlayer:
        """Load a recording from .json or .npz."""
        path = Path(path)

        if path.suffix == ".npz":
            return cls._load_compact(path)

        with open(path) as f:
            data = json.load(f)

        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported recording version {version} in {path}")

        frames = [
            RecordedFrame(
                timestamp=f["timestamp"],
                landmarks=f.get("landmarks"),
                gesture=f.get("gesture"),
            )
            for f in data["frames"]
        ]
        return cls(frames)

    @classmethod
    def _load_compact(cls, path: Path) -> SessionPlayer:
        data = np.load(path, allow_pickle=False)
        timestamps = data["timestamps"]
        landmarks = data["landmarks"]
        present = data["present"]
        gestures = json.loads(str(data["gestures"][0]))

        frames = []
        for i in range(len(timestamps)):
            frames.append(RecordedFrame(
                timestamp=float(timestamps[i]),
                landmarks=landmarks[i].tolist() if present[i] else None,
                gesture=gestures[i] if i < len(gestures) else None,
            ))
        return cls(frames)

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp

    @property
    def presence_rate(self) -> float:
        """Fraction of frames with a hand."""
        if not self._frames:
            return 0.0
        return sum(1 for f in self._frames if f.landmarks is not None) / len(self._frames)

    def _as_numpy(self, frame: RecordedFrame) -> RecordedFrame:
        return RecordedFrame(
            timestamp=frame.timestamp,
            landmarks=np.array(frame.landmarks, dtype=np.float32) if frame.landmarks is not None else None,
            gesture=frame.gesture,
        )

    def play(self) -> Iterator[RecordedFrame]:
        """Iterate through all frames instantly, landmarks as numpy arrays."""
        for frame in self._frames:
            yield self._as_numpy(frame)

    def play_realtime(self, speed: float = 1.0) -> Iterator[RecordedFrame]:
        """Replay at recorded timing, scaled by `speed` (2.0 = double speed)."""
        if not self._frames:
            return

        start = time.monotonic()
        for frame in self.play():
            target_time = frame.timestamp / speed
            elapsed = time.monotonic() - start
            if target_time > elapsed:
                time.sleep(target_time - elapsed)
            yield frame

    def get_frame(self, index: int) -> Optional[RecordedFrame]:
        if 0 <= index < len(self._frames):
            return self._as_numpy(self._frames[index])
        return None
