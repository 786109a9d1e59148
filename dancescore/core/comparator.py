"""
Pose Comparator Module for DANCESCORE.

Angular similarity between two single poses. Every catalog angle is
measured at its vertex in both poses and scored by the difference;
the total is the weighted mean over the whole catalog.

Occluded angles (any of the six required keypoints missing or below
the confidence threshold) are scored with a fixed penalty and still
counted in the total, so leaving the frame lowers the score.

Angles are rotation invariant, so no camera-angle normalization is
applied before comparing.

Author: DANCESCORE Team
Version: 1.0.0
"""

import logging
from typing import Dict, List, Optional, Sequence

from .angle_catalog import AngleCatalog, AngleSpec, DEFAULT_ANGLE_CATALOG
from .config import settings
from .data_types import Keypoint, Pose, PoseScore
from .kinematics import angle_similarity, calculate_angle_2d, calculate_angle_3d, procrustes_distance
from ..helpers.enums import PoseVariant

logger = logging.getLogger(__name__)


def filter_confident(keypoints: Sequence[Keypoint], threshold: float) -> Dict[str, Keypoint]:
    """Map name -> keypoint for keypoints at or above threshold. First occurrence wins."""
    confident: Dict[str, Keypoint] = {}
    for kp in keypoints:
        if kp.is_confident(threshold) and kp.name not in confident:
            confident[kp.name] = kp
    return confident


class PoseComparator:
    """
    Scores a pair of poses against an injected angle catalog.

    Example:
        >>> comparator = PoseComparator()
        >>> score = comparator.compare_by_angles(live_pose, reference_pose)
        >>> score.total
        100.0
    """

    def __init__(
        self,
        catalog: AngleCatalog = DEFAULT_ANGLE_CATALOG,
        score_threshold: float = settings.SCORE_THRESHOLD,
        occlusion_penalty: float = settings.OCCLUSION_PENALTY
    ):
        self._catalog = catalog
        self._score_threshold = score_threshold
        self._occlusion_penalty = occlusion_penalty

    @property
    def catalog(self) -> AngleCatalog:
        return self._catalog

    @property
    def occlusion_penalty(self) -> float:
        return self._occlusion_penalty

    def compare_by_angles(
        self,
        pose_a: Pose,
        pose_b: Pose,
        variant: PoseVariant = PoseVariant.THREE_D
    ) -> PoseScore:
        """
        Compare two poses angle by angle.

        Args:
            pose_a: First pose (usually the live one).
            pose_b: Second pose (usually the reference).
            variant: Use the 3D keypoints (default) or the 2D ones.

        Returns:
            PoseScore: Per-angle scores and weighted total. For the 3D
            variant, if either pose has no 3D keypoints the result is
            only the penalty total with no per-angle entries.
        """
        use_3d = variant == PoseVariant.THREE_D
        if use_3d:
            if not pose_a.has_3d() or not pose_b.has_3d():
                logger.warning("compare_by_angles: 3D keypoints missing on one of the poses")
                return PoseScore(per_angle={}, total=self._occlusion_penalty)
            points_a = filter_confident(pose_a.keypoints_3d, self._score_threshold)
            points_b = filter_confident(pose_b.keypoints_3d, self._score_threshold)
        else:
            points_a = filter_confident(pose_a.keypoints, self._score_threshold)
            points_b = filter_confident(pose_b.keypoints, self._score_threshold)

        per_angle: Dict[str, float] = {}
        weighted_sum = 0.0
        for spec in self._catalog:
            score = self._score_angle(spec, points_a, points_b, use_3d)
            per_angle[spec.name] = score
            weighted_sum += score * spec.weight

        return PoseScore(per_angle=per_angle, total=weighted_sum / self._catalog.total_weight)

    def _score_angle(
        self,
        spec: AngleSpec,
        points_a: Dict[str, Keypoint],
        points_b: Dict[str, Keypoint],
        use_3d: bool
    ) -> float:
        triple_a = self._lookup(spec, points_a, use_3d)
        triple_b = self._lookup(spec, points_b, use_3d)
        if triple_a is None or triple_b is None:
            return self._occlusion_penalty

        measure = calculate_angle_3d if use_3d else calculate_angle_2d
        return angle_similarity(measure(*triple_a), measure(*triple_b))

    @staticmethod
    def _lookup(spec: AngleSpec, points: Dict[str, Keypoint], use_3d: bool) -> Optional[List[Keypoint]]:
        triple = [points.get(name) for name in spec.keypoint_triple]
        if any(kp is None for kp in triple):
            return None
        if use_3d and any(kp.z is None for kp in triple):
            logger.debug(f"_lookup: angle {spec.name} has 3D keypoints without z")
            return None
        return triple

    def compare_by_rmsd(self, pose_a: Pose, pose_b: Pose) -> float:
        """
        Secondary whole-pose distance on confident 2D keypoints.

        Returns:
            float: Translation/scale normalized root-square distance, 0 is identical.
        """
        points_a = filter_confident(pose_a.keypoints, self._score_threshold)
        points_b = filter_confident(pose_b.keypoints, self._score_threshold)
        return procrustes_distance(points_a.values(), points_b.values())
