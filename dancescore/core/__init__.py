"""
Core Module for DANCESCORE.

Contains the data model, angle catalog, angle math, pose comparator and timeline lookup.
"""

from .data_types import (
    Keypoint, Pose, TimestampedPoseSet, ReferenceTrack, PoseScore, ScoredPose, Interval,
    MIDPOINT_KEYPOINTS
)
from .angle_catalog import AngleSpec, AngleCatalog, KEYPOINT_VOCABULARY, DEFAULT_ANGLE_CATALOG
from .kinematics import (
    calculate_angle_2d, calculate_angle_3d, angle_similarity, procrustes_distance, RMSD_KEYPOINTS
)
from .comparator import PoseComparator, filter_confident
from .timeline import nearest_index, nearest_by_timestamp, nearest, TimelineIndex

__all__ = [
    # Data types
    'Keypoint', 'Pose', 'TimestampedPoseSet', 'ReferenceTrack', 'PoseScore', 'ScoredPose', 'Interval',
    'MIDPOINT_KEYPOINTS',

    # Angle catalog
    'AngleSpec', 'AngleCatalog', 'KEYPOINT_VOCABULARY', 'DEFAULT_ANGLE_CATALOG',

    # Kinematics
    'calculate_angle_2d', 'calculate_angle_3d', 'angle_similarity', 'procrustes_distance', 'RMSD_KEYPOINTS',

    # Comparator
    'PoseComparator', 'filter_confident',

    # Timeline
    'nearest_index', 'nearest_by_timestamp', 'nearest', 'TimelineIndex',
]
