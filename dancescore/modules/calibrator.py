"""
Calibration Module for DANCESCORE.

Estimates a single time offset (ms) between the reference timeline and
the performer's observed response. Two strategies:

1. Threshold-crossing delay: for known reference cue times, find the
   first upward crossing of a success score threshold in the recorded
   (time, score) series and take the median delay.
2. Best-match offset: for each reference frame, take the highest
   scoring history entry whose live timestamp lies near the frame and
   average the signed offsets.

Both functions are read-only over their inputs.

Author: DANCESCORE Team
Version: 1.0.0
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
from scipy.stats import median_abs_deviation

from ..core.config import settings
from ..core.data_types import PoseScore, ScoredPose, TimestampedPoseSet


@dataclass
class DelayEstimate:
    """
    Result of threshold-crossing delay estimation.

    Attributes:
        median: Median delay (ms) over events with a crossing.
        mad: Median absolute deviation of those delays (ms).
        used: Events that produced a crossing.
        total: Events considered.
        delays: Individual delays (ms), one per used event.
    """
    median: float = 0.0
    mad: float = 0.0
    used: int = 0
    total: int = 0
    delays: List[float] = field(default_factory=list)

    @property
    def offset_ms(self) -> int:
        # Halves round up
        return int(math.floor(self.median + 0.5))

    @property
    def unused(self) -> int:
        return self.total - self.used

    def to_dict(self) -> dict:
        return {
            "offset_ms": self.offset_ms,
            "median": round(self.median, 1),
            "mad": round(self.mad, 1),
            "used": self.used,
            "total": self.total,
        }


@dataclass
class OffsetEstimate:
    """
    Result of best-match offset estimation.

    Attributes:
        offset_ms: Mean of (reference timestamp - live timestamp) over matched frames.
        matched: Reference frames that found a candidate.
        total: Reference frames considered.
    """
    offset_ms: float = 0.0
    matched: int = 0
    total: int = 0

    @property
    def found(self) -> bool:
        return self.matched > 0

    def to_dict(self) -> dict:
        return {
            "offset_ms": round(self.offset_ms, 1),
            "matched": self.matched,
            "total": self.total,
        }


def sanitize_events(
    events: Iterable[float],
    min_gap_ms: float = settings.CALIBRATION_MIN_EVENT_GAP_MS
) -> List[float]:
    """
    Deduplicate and sort event times, dropping any event closer than
    min_gap_ms to the previously kept one.
    """
    kept: List[float] = []
    for t in sorted(set(events)):
        if not kept or t - kept[-1] >= min_gap_ms:
            kept.append(t)
    return kept


def quantile(values: Sequence[float], q: float) -> float:
    """Linear-interpolated quantile (R-7). Returns 0.0 for no values."""
    if len(values) == 0:
        return 0.0
    return float(np.quantile(np.asarray(values, dtype=np.float64), q, method="linear"))


def median_absolute_deviation(values: Sequence[float]) -> float:
    """Unscaled median of |x - median(x)|. Returns 0.0 for no values."""
    if len(values) == 0:
        return 0.0
    return float(median_abs_deviation(np.asarray(values, dtype=np.float64), scale=1.0))


def _first_crossing(
    event_ms: float,
    samples: Sequence[Tuple[float, float]],
    threshold: float,
    max_window_ms: float
) -> Optional[float]:
    prev_below = True
    for t, s in samples:
        if t < event_ms:
            prev_below = s < threshold
            continue
        if t > event_ms + max_window_ms:
            break
        if prev_below and s >= threshold:
            return t
        prev_below = s < threshold
    return None


def estimate_delay_from_events(
    events: Iterable[float],
    samples: Iterable[Tuple[float, float]],
    threshold: float = settings.CALIBRATION_SCORE_THRESHOLD,
    max_window_ms: float = settings.CALIBRATION_MAX_WINDOW_MS,
    min_gap_ms: float = settings.CALIBRATION_MIN_EVENT_GAP_MS
) -> DelayEstimate:
    """
    Estimate reaction delay from reference cue times and a score series.

    For each sanitized event t0, scan samples with time in
    [t0, t0 + max_window_ms] for the first one at or above threshold
    whose predecessor was below it. The sample just before t0 counts as
    the predecessor of the first in-window sample; with none, it is
    treated as below.

    Args:
        events: Reference cue timestamps (ms).
        samples: (time_ms, score) pairs, any order.
        threshold: Success score threshold.
        max_window_ms: How long after each cue to look for a crossing.
        min_gap_ms: Minimum spacing between kept events.

    Returns:
        DelayEstimate: median and MAD of delays with used/total counts.
        All zeros when nothing crossed.
    """
    events = sanitize_events(events, min_gap_ms)
    ordered = sorted(samples, key=lambda sample: sample[0])
    estimate = DelayEstimate(total=len(events))
    if not events or not ordered:
        return estimate

    for t0 in events:
        crossing = _first_crossing(t0, ordered, threshold, max_window_ms)
        if crossing is not None:
            estimate.delays.append(crossing - t0)

    estimate.used = len(estimate.delays)
    estimate.median = quantile(estimate.delays, 0.5)
    estimate.mad = median_absolute_deviation(estimate.delays)
    return estimate


def estimate_best_match_offset(
    reference_track: Sequence[TimestampedPoseSet],
    history: Sequence[ScoredPose],
    tolerance_ms: float = settings.OFFSET_MATCH_TOLERANCE_MS
) -> OffsetEstimate:
    """
    Estimate the offset between reference and live timelines from the score history.

    For each reference frame, candidates are the history entries whose
    live timestamp is within tolerance_ms of the frame timestamp; the
    one with the highest total gives the offset
    frame.timestamp - entry.live_timestamp.

    Returns:
        OffsetEstimate: Mean offset over frames with a candidate, 0 if none.
    """
    by_live = sorted(history, key=lambda entry: entry.live_timestamp)
    live_keys = [entry.live_timestamp for entry in by_live]

    offsets: List[float] = []
    for frame in reference_track:
        lo = int(np.searchsorted(live_keys, frame.timestamp - tolerance_ms, side="left"))
        hi = int(np.searchsorted(live_keys, frame.timestamp + tolerance_ms, side="right"))
        if lo >= hi:
            continue
        best = max(by_live[lo:hi], key=lambda entry: entry.scores.total)
        offsets.append(frame.timestamp - best.live_timestamp)

    if not offsets:
        return OffsetEstimate(offset_ms=0.0, matched=0, total=len(reference_track))
    return OffsetEstimate(
        offset_ms=float(np.mean(offsets)),
        matched=len(offsets),
        total=len(reference_track),
    )


class ScoreSampleRecorder:
    """
    Collects (video time, total score) samples during a calibration run.

    Totals are clamped to [0, 100] before being stored.
    """

    def __init__(self):
        self._samples: List[Tuple[float, float]] = []

    def record(self, video_time_ms: float, score: PoseScore) -> float:
        value = min(100.0, max(0.0, score.total))
        self._samples.append((video_time_ms, value))
        return value

    @property
    def samples(self) -> List[Tuple[float, float]]:
        return list(self._samples)

    def estimate(self, events: Iterable[float], **kwargs) -> DelayEstimate:
        return estimate_delay_from_events(events, self._samples, **kwargs)

    def reset(self) -> None:
        self._samples = []
