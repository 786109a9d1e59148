"""
Session Scorer Module for DANCESCORE.

Stateful scoring engine for one practice session. Each incoming live
pose is matched to the nearest reference frame, scored, and upserted
into a history kept sorted by reference timestamp.

History policy:
    At most one entry per reference timestamp. A later live sample
    that maps to the same reference instant replaces the earlier
    entry (most recent wins, no averaging, no best-of).

Author: DANCESCORE Team
Version: 1.0.0
"""

import bisect
import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..core.comparator import PoseComparator
from ..core.data_types import Interval, PoseScore, ReferenceTrack, ScoredPose, TimestampedPoseSet
from ..core.timeline import TimelineIndex
from ..helpers.enums import PoseVariant

logger = logging.getLogger(__name__)

IntervalLike = Union[Interval, Tuple[float, float], Sequence[float]]


class SessionScorer:
    """
    Scores a live pose stream against a fixed reference track.

    Example:
        >>> scorer = SessionScorer(track, intervals=[(0, 8000)])
        >>> score = scorer.consume_pose(live_sample, video_position_ms)
        >>> scorer.compute_interval_scores()
        [{'left_elbow': 87.2, ..., 'total': 84.1}]
    """

    def __init__(
        self,
        reference_track: ReferenceTrack,
        intervals: Optional[Sequence[IntervalLike]] = None,
        comparator: Optional[PoseComparator] = None,
        variant: PoseVariant = PoseVariant.THREE_D
    ):
        """
        Args:
            reference_track: Timestamp-sorted reference frames (read only).
            intervals: (start_ms, end_ms) windows used by compute_interval_scores.
            comparator: Pose comparator, a default-catalog one if None.
            variant: Keypoint collection used for scoring.
        """
        if not isinstance(reference_track, ReferenceTrack):
            reference_track = ReferenceTrack(reference_track)
        self._timeline = TimelineIndex(reference_track)
        self._intervals: List[Interval] = [
            iv if isinstance(iv, Interval) else Interval.from_pair(iv)
            for iv in (intervals or [])
        ]
        self._comparator = comparator or PoseComparator()
        self._variant = variant

        self._history: List[ScoredPose] = []
        # Parallel key list for bisect, kept in lockstep with _history
        self._history_keys: List[float] = []
        self._last_score = PoseScore(per_angle={}, total=0.0)
        self._write_lock = threading.Lock()

    @property
    def reference_track(self) -> ReferenceTrack:
        return self._timeline.track

    @property
    def intervals(self) -> List[Interval]:
        return list(self._intervals)

    @property
    def comparator(self) -> PoseComparator:
        return self._comparator

    @property
    def last_score(self) -> PoseScore:
        return self._last_score

    def consume_pose(self, live_pose: TimestampedPoseSet, live_video_position_ms: float) -> PoseScore:
        """
        Score one live sample.

        Args:
            live_pose: Detection result for the live frame.
            live_video_position_ms: Reference video position at the time of the frame.

        Returns:
            PoseScore: The new score, or the previous one if there was
            nothing to score (empty track, no live person, no reference person).
        """
        closest = self._timeline.nearest(live_video_position_ms)
        if closest is None or not live_pose.poses or not closest.poses:
            logger.debug(f"consume_pose: nothing to score at {live_video_position_ms}ms, keeping last score")
            return self._last_score

        score = self._comparator.compare_by_angles(live_pose.poses[0], closest.poses[0], self._variant)
        self._upsert(ScoredPose(
            original_timestamp=closest.timestamp,
            live_timestamp=live_pose.timestamp,
            scores=score,
        ))
        return score

    def _upsert(self, entry: ScoredPose) -> None:
        # last_score is written under the same lock as the history
        with self._write_lock:
            key = entry.original_timestamp
            index = bisect.bisect_left(self._history_keys, key)
            if index < len(self._history_keys) and self._history_keys[index] == key:
                self._history[index] = entry
            else:
                self._history.insert(index, entry)
                self._history_keys.insert(index, key)
            self._last_score = entry.scores

    def compute_interval_scores(self) -> List[Dict[str, float]]:
        """
        Average scores over each configured interval.

        For every key (angle names and "total") present in at least one
        history entry inside the interval, the mean is taken only over
        the entries that contain that key. Intervals with no entries
        give an empty dict.

        Returns:
            List[Dict[str, float]]: One map per interval, in interval order.
        """
        results: List[Dict[str, float]] = []
        for interval in self._intervals:
            lo = bisect.bisect_left(self._history_keys, interval.start_ms)
            hi = bisect.bisect_right(self._history_keys, interval.end_ms)
            window = self._history[lo:hi]

            sums: Dict[str, float] = {}
            counts: Dict[str, int] = {}
            for entry in window:
                for key, value in entry.scores.to_dict().items():
                    sums[key] = sums.get(key, 0.0) + value
                    counts[key] = counts.get(key, 0) + 1

            results.append({key: sums[key] / counts[key] for key in sums})
        return results

    def get_history(self) -> List[ScoredPose]:
        """Sorted scoring history. Callers must not mutate it."""
        return self._history

    def reset(self) -> None:
        """Clear the history and last score."""
        with self._write_lock:
            self._history = []
            self._history_keys = []
            self._last_score = PoseScore(per_angle={}, total=0.0)
