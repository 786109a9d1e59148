"""
Modules Package for DANCESCORE.

Contains the session scorer, calibration, diagnostics and pose sources.
"""

from .session_scorer import SessionScorer
from .calibrator import (
    DelayEstimate, OffsetEstimate, ScoreSampleRecorder,
    estimate_delay_from_events, estimate_best_match_offset
)
from .diagnostics import (
    TimestampMapping, find_weak_joints, classify_score, clamp_display_score,
    build_timestamp_mappings, map_timestamp
)
from .pose_source import PoseSource, RecordedPoseSource

__all__ = [
    # Session Scorer
    'SessionScorer',

    # Calibration
    'DelayEstimate', 'OffsetEstimate', 'ScoreSampleRecorder',
    'estimate_delay_from_events', 'estimate_best_match_offset',

    # Diagnostics
    'TimestampMapping', 'find_weak_joints', 'classify_score', 'clamp_display_score',
    'build_timestamp_mappings', 'map_timestamp',

    # Pose Sources
    'PoseSource', 'RecordedPoseSource',
]
