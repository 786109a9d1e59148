"""
Scoring Service - Session Orchestration Layer.

Drives a PoseSource through a SessionScorer and assembles the
session summary. No angle or timing math lives here; it is all in
core/ and modules/.

Author: DANCESCORE Team
Version: 1.0.0
"""

import logging
import uuid
from typing import List, Optional, Sequence

import numpy as np

from ..core.comparator import PoseComparator
from ..core.data_types import Interval, ReferenceTrack, TimestampedPoseSet
from ..core.timeline import nearest
from ..helpers.enums import PoseVariant
from ..modules.calibrator import (
    DelayEstimate, ScoreSampleRecorder, estimate_best_match_offset
)
from ..modules.diagnostics import build_timestamp_mappings, classify_score, find_weak_joints
from ..modules.pose_source import PoseSource
from ..modules.session_scorer import SessionScorer
from ..schemas.sche_pose import (
    DelayEstimateSchema, LevelSchema, OffsetEstimateSchema,
    SessionSummary, TimestampMappingSchema
)
from ..utils.logger import LogCategory, SessionLogger

logger = logging.getLogger(__name__)


# ==================== SERVICE CLASS ====================

class ScoringService:
    """
    Scores one performance against one level.

    Usage:
        service = ScoringService.from_level(load_level_file("level.json"))
        summary = service.run(RecordedPoseSource.from_file("session.json"))
    """

    def __init__(
        self,
        reference_track: ReferenceTrack,
        intervals: Optional[Sequence[Interval]] = None,
        comparator: Optional[PoseComparator] = None,
        calibration_offset_ms: float = 0.0,
        session_logger: Optional[SessionLogger] = None,
        session_id: Optional[str] = None,
        variant: PoseVariant = PoseVariant.THREE_D
    ):
        self.session_id = session_id or uuid.uuid4().hex[:8]
        self.calibration_offset_ms = calibration_offset_ms
        self.session_logger = session_logger
        self.scorer = SessionScorer(reference_track, intervals, comparator, variant)
        self.recorder = ScoreSampleRecorder()
        self.frames_consumed = 0

    @classmethod
    def from_level(cls, level: LevelSchema, **kwargs) -> "ScoringService":
        return cls(level.reference_track(), level.domain_intervals(), **kwargs)

    def process_frame(self, live_pose: TimestampedPoseSet, video_position_ms: float):
        """
        Score one live sample.

        The calibration offset is subtracted from the live timestamp
        before scoring, so history entries carry the corrected time.
        """
        if self.calibration_offset_ms:
            live_pose = TimestampedPoseSet(
                timestamp=live_pose.timestamp - self.calibration_offset_ms,
                poses=live_pose.poses,
            )

        last = self.scorer.last_score
        score = self.scorer.consume_pose(live_pose, video_position_ms)
        self.frames_consumed += 1
        self.recorder.record(video_position_ms, score)

        if self.session_logger is not None:
            if score is last:
                self.session_logger.log_scoring_frame(live_pose.timestamp, None)
            else:
                matched = nearest(self.scorer.reference_track, video_position_ms)
                self.session_logger.log_scoring_frame(
                    live_timestamp=live_pose.timestamp,
                    original_timestamp=matched.timestamp,
                    scores=score.to_dict(),
                    weak_joints=find_weak_joints(score, self.scorer.comparator.catalog),
                )
        return score

    def run(self, source: PoseSource) -> SessionSummary:
        """Feed every frame of the source, then summarize."""
        logger.info(f"Session {self.session_id}: scoring against {len(self.scorer.reference_track)} reference frames")
        if self.session_logger is not None:
            self.session_logger.info(LogCategory.SYSTEM, "Session started", {
                'reference_frames': len(self.scorer.reference_track),
                'intervals': len(self.scorer.intervals),
                'calibration_offset_ms': self.calibration_offset_ms,
            })

        for live_pose, video_position_ms in source.frames():
            self.process_frame(live_pose, video_position_ms)

        summary = self.summarize()
        logger.info(
            f"Session {self.session_id}: {summary.frames_consumed} frames, "
            f"{summary.history_length} scored, overall {summary.overall_total:.1f} ({summary.tier.value})"
        )
        return summary

    def calibrate(self, events: Sequence[float], **kwargs) -> DelayEstimate:
        """Delay estimate from the samples recorded so far."""
        estimate = self.recorder.estimate(events, **kwargs)
        if estimate.used == 0:
            logger.warning(f"Session {self.session_id}: no threshold crossing for any of {estimate.total} events")
        if self.session_logger is not None:
            self.session_logger.log_calibration(estimate.to_dict())
        return estimate

    def overall_total(self, interval_scores: List[dict]) -> float:
        """Mean of interval totals; falls back to the history mean when no interval has entries."""
        totals = [scores['total'] for scores in interval_scores if 'total' in scores]
        if not totals:
            totals = [entry.scores.total for entry in self.scorer.get_history()]
        if not totals:
            return 0.0
        return float(np.mean(totals))

    def summarize(self, calibration: Optional[DelayEstimate] = None) -> SessionSummary:
        history = self.scorer.get_history()
        interval_scores = self.scorer.compute_interval_scores()
        overall = self.overall_total(interval_scores)
        offset = estimate_best_match_offset(self.scorer.reference_track, history)

        if self.session_logger is not None:
            self.session_logger.log_interval_scores(interval_scores)

        return SessionSummary(
            session_id=self.session_id,
            frames_consumed=self.frames_consumed,
            history_length=len(history),
            interval_scores=interval_scores,
            overall_total=overall,
            tier=classify_score(overall),
            weak_joints=find_weak_joints(self.scorer.last_score, self.scorer.comparator.catalog),
            timestamp_mappings=[
                TimestampMappingSchema(originalTimestamp=m.original_timestamp, mappedTimestamp=m.mapped_timestamp)
                for m in build_timestamp_mappings(history)
            ],
            best_match_offset=OffsetEstimateSchema(**offset.to_dict()),
            calibration=DelayEstimateSchema(**calibration.to_dict()) if calibration is not None else None,
        )
