# DANCESCORE Package
# Scores a live pose stream against a reference choreography

from .core import AngleCatalog, DEFAULT_ANGLE_CATALOG, PoseComparator, TimelineIndex
from .modules import SessionScorer, RecordedPoseSource, estimate_delay_from_events, estimate_best_match_offset
from .services import ScoringService
from .utils import SessionLogger

__all__ = [
    'AngleCatalog',
    'DEFAULT_ANGLE_CATALOG',
    'PoseComparator',
    'TimelineIndex',
    'SessionScorer',
    'RecordedPoseSource',
    'estimate_delay_from_events',
    'estimate_best_match_offset',
    'ScoringService',
    'SessionLogger'
]
