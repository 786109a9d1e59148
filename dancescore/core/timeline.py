"""
Timeline Index Module for DANCESCORE.

Nearest-timestamp lookup over timestamp-sorted sequences. The same
binary search serves the scorer (live sample -> reference frame),
the pose fixer lookup (playback time -> reference pose) and the
timestamp mapping diagnostics.

Author: DANCESCORE Team
Version: 1.0.0
"""

from typing import Callable, Optional, Sequence, TypeVar

from .data_types import Pose, ReferenceTrack, TimestampedPoseSet

T = TypeVar("T")


def nearest_index(sorted_items: Sequence[T], key: Callable[[T], float], target: float) -> int:
    """
    Index of the element whose key is closest to target.

    Binary search that keeps the running best by absolute difference
    and stops early on an exact match. Ties keep the element seen
    first on the search path.

    Raises:
        ValueError: If sorted_items is empty.
    """
    if not sorted_items:
        raise ValueError("nearest_index: empty sequence")

    left, right = 0, len(sorted_items) - 1
    best = 0
    best_diff = abs(key(sorted_items[0]) - target)

    while left <= right:
        mid = (left + right) // 2
        value = key(sorted_items[mid])
        diff = abs(value - target)
        if diff < best_diff:
            best, best_diff = mid, diff

        if value < target:
            left = mid + 1
        elif value > target:
            right = mid - 1
        else:
            return mid

    return best


def nearest_by_timestamp(sorted_items: Sequence[T], key: Callable[[T], float], target: float) -> T:
    """Element whose key is closest to target. See nearest_index."""
    return sorted_items[nearest_index(sorted_items, key, target)]


def nearest(track: Sequence[TimestampedPoseSet], timestamp: float) -> TimestampedPoseSet:
    """Reference frame closest to timestamp. Caller must guard against an empty track."""
    return nearest_by_timestamp(track, lambda frame: frame.timestamp, timestamp)


class TimelineIndex:
    """Read-only nearest-frame lookup over a reference track."""

    def __init__(self, track: ReferenceTrack):
        self._track = track

    @property
    def track(self) -> ReferenceTrack:
        return self._track

    def is_empty(self) -> bool:
        return len(self._track) == 0

    def nearest(self, timestamp: float) -> Optional[TimestampedPoseSet]:
        if self.is_empty():
            return None
        return nearest(self._track, timestamp)

    def pose_at(self, timestamp: float) -> Optional[Pose]:
        """Primary reference pose at a playback time, or None if there is none."""
        frame = self.nearest(timestamp)
        if frame is None:
            return None
        return frame.primary_pose()
