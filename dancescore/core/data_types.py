"""
Data Types Module for DANCESCORE.

Dataclasses shared by the scoring engine: keypoints, poses,
timestamped detection results, reference tracks and score records.

Author: DANCESCORE Team
Version: 1.0.0
"""

from collections import abc
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..helpers.exception_handler import TrackOrderError


# Synthetic keypoints built as midpoints of a left/right pair
MIDPOINT_KEYPOINTS: Dict[str, Tuple[str, str]] = {
    "mid_hip": ("left_hip", "right_hip"),
    "mid_shoulder": ("left_shoulder", "right_shoulder"),
}


@dataclass(frozen=True)
class Keypoint:
    """
    A single named anatomical landmark.

    Attributes:
        name: Landmark name from the keypoint vocabulary.
        x: X coordinate.
        y: Y coordinate.
        z: Depth, None for 2D keypoints.
        score: Detection confidence in [0, 1], None if the detector gave none.
    """
    name: str
    x: float
    y: float
    z: Optional[float] = None
    score: Optional[float] = None

    def is_confident(self, threshold: float) -> bool:
        """A keypoint with no score is never confident."""
        return self.score is not None and self.score >= threshold

    def to_array(self, use_3d: bool = False) -> np.ndarray:
        if use_3d:
            return np.array([self.x, self.y, self.z], dtype=np.float64)
        return np.array([self.x, self.y], dtype=np.float64)


def _midpoint(a: Keypoint, b: Keypoint, name: str) -> Keypoint:
    z = None
    if a.z is not None and b.z is not None:
        z = (a.z + b.z) / 2.0
    score = None
    if a.score is not None and b.score is not None:
        score = min(a.score, b.score)
    return Keypoint(name=name, x=(a.x + b.x) / 2.0, y=(a.y + b.y) / 2.0, z=z, score=score)


def _with_midpoints(keypoints: Sequence[Keypoint]) -> List[Keypoint]:
    by_name = {kp.name: kp for kp in keypoints}
    result = list(keypoints)
    for name, (left, right) in MIDPOINT_KEYPOINTS.items():
        if name in by_name or left not in by_name or right not in by_name:
            continue
        result.append(_midpoint(by_name[left], by_name[right], name))
    return result


@dataclass
class Pose:
    """
    Output of one detection pass for one person.

    Attributes:
        keypoints: 2D keypoints.
        keypoints_3d: Parallel 3D keypoints, None when the detector has no 3D output.
        score: Overall pose confidence.
    """
    keypoints: List[Keypoint] = field(default_factory=list)
    keypoints_3d: Optional[List[Keypoint]] = None
    score: Optional[float] = None

    def has_3d(self) -> bool:
        return bool(self.keypoints_3d)

    def with_midpoints(self) -> "Pose":
        """Return a copy with mid_hip / mid_shoulder synthesized where absent."""
        keypoints_3d = None
        if self.keypoints_3d is not None:
            keypoints_3d = _with_midpoints(self.keypoints_3d)
        return replace(self, keypoints=_with_midpoints(self.keypoints), keypoints_3d=keypoints_3d)


@dataclass
class TimestampedPoseSet:
    """Detection result for one instant. Only poses[0] is scored."""
    timestamp: float
    poses: List[Pose] = field(default_factory=list)

    def primary_pose(self) -> Optional[Pose]:
        return self.poses[0] if self.poses else None


class ReferenceTrack(abc.Sequence):
    """
    Immutable, timestamp-ordered pose sequence of a reference choreography.

    Raises:
        TrackOrderError: If timestamps decrease anywhere in the sequence.
    """

    def __init__(self, frames: Sequence[TimestampedPoseSet]):
        frames = tuple(frames)
        for prev, cur in zip(frames, frames[1:]):
            if cur.timestamp < prev.timestamp:
                raise TrackOrderError(
                    message=f"Reference track out of order at {cur.timestamp} (after {prev.timestamp})"
                )
        self._frames = frames

    def __getitem__(self, index):
        return self._frames[index]

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[TimestampedPoseSet]:
        return iter(self._frames)

    @property
    def timestamps(self) -> List[float]:
        return [frame.timestamp for frame in self._frames]

    @property
    def duration_ms(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp - self._frames[0].timestamp


@dataclass
class PoseScore:
    """
    Result of comparing two poses.

    Attributes:
        per_angle: Score per catalog angle name (may be empty).
        total: Weighted aggregate.
    """
    per_angle: Dict[str, float] = field(default_factory=dict)
    total: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        """Flatten to {angle: score, ..., "total": total}."""
        flat = dict(self.per_angle)
        flat["total"] = self.total
        return flat


@dataclass
class ScoredPose:
    """One scoring result tying a reference instant to the live sample that matched it."""
    original_timestamp: float
    live_timestamp: float
    scores: PoseScore

    def to_dict(self) -> dict:
        return {
            "originalTimestamp": self.original_timestamp,
            "liveTimestamp": self.live_timestamp,
            "scores": self.scores.to_dict(),
        }


@dataclass(frozen=True)
class Interval:
    """Inclusive (start_ms, end_ms) window of the reference choreography."""
    start_ms: float
    end_ms: float

    def contains(self, timestamp: float) -> bool:
        return self.start_ms <= timestamp <= self.end_ms

    @classmethod
    def from_pair(cls, pair: Sequence[float]) -> "Interval":
        return cls(start_ms=float(pair[0]), end_ms=float(pair[1]))
