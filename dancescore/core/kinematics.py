"""
Kinematics Module for DANCESCORE.

Geometry helpers for the pose comparator: vertex angles in 2D and 3D,
the angle-difference similarity score, and a translation/scale
normalized distance between whole poses.

Author: DANCESCORE Team
Version: 1.0.0
"""

import math
from typing import Dict, Iterable, Sequence, Union

import numpy as np

from .data_types import Keypoint

PointLike = Union[np.ndarray, Keypoint, Sequence[float]]

# Keypoints used by the whole-pose distance (limb extremities and mid-joints)
RMSD_KEYPOINTS = (
    "left_wrist", "right_wrist",
    "left_elbow", "right_elbow",
    "left_knee", "right_knee",
    "left_ankle", "right_ankle",
)


def _to_numpy(point: PointLike, use_3d: bool) -> np.ndarray:
    if isinstance(point, Keypoint):
        return point.to_array(use_3d)
    arr = np.asarray(point, dtype=np.float64)
    return arr[:3] if use_3d else arr[:2]


def calculate_angle_2d(point_a: PointLike, point_b: PointLike, point_c: PointLike) -> float:
    """
    Undirected angle at point_b between BA and BC in the image plane.

    The signed difference of the two atan2 headings is wrapped into
    [0, 2*pi) and folded into [0, pi].

    Returns:
        float: Angle in radians, in [0, pi].
    """
    a = _to_numpy(point_a, use_3d=False)
    b = _to_numpy(point_b, use_3d=False)
    c = _to_numpy(point_c, use_3d=False)

    angle = math.atan2(a[1] - b[1], a[0] - b[0]) - math.atan2(c[1] - b[1], c[0] - b[0])
    angle = angle % (2 * math.pi)
    if angle > math.pi:
        angle = 2 * math.pi - angle
    return angle


def calculate_angle_3d(point_a: PointLike, point_b: PointLike, point_c: PointLike) -> float:
    """
    Angle at point_b between BA and BC using the dot-product formula.

    Zero-length vectors (coincident keypoints) give 0.0 instead of NaN.

    Returns:
        float: Angle in radians, in [0, pi].
    """
    a = _to_numpy(point_a, use_3d=True)
    b = _to_numpy(point_b, use_3d=True)
    c = _to_numpy(point_c, use_3d=True)

    vector_ba = a - b
    vector_bc = c - b
    norm_ba = np.linalg.norm(vector_ba)
    norm_bc = np.linalg.norm(vector_bc)
    if norm_ba < 1e-10 or norm_bc < 1e-10:
        return 0.0

    cos_angle = np.clip(np.dot(vector_ba, vector_bc) / (norm_ba * norm_bc), -1.0, 1.0)
    return float(np.arccos(cos_angle))


def angle_similarity(angle_a: float, angle_b: float) -> float:
    """
    Score two angles: 100 when equal, 0 at a pi-radian difference.

    Not clamped.
    """
    return 100.0 - 100.0 * abs(angle_a - angle_b) / math.pi


def _normalize_translation_scale(points: np.ndarray) -> np.ndarray:
    centered = points - points.mean(axis=0)
    rms = math.sqrt(float(np.sum(centered ** 2)) / len(centered))
    if rms < 1e-10:
        return centered
    return centered / rms


def procrustes_distance(
    keypoints_a: Iterable[Keypoint],
    keypoints_b: Iterable[Keypoint],
    names: Sequence[str] = RMSD_KEYPOINTS
) -> float:
    """
    Root-square distance between two 2D poses after removing translation and scale.

    Both poses are centered on their own centroid and divided by their
    RMS radius (no rotation alignment). The distance is summed over
    keypoints named in `names` that exist in both poses.

    Args:
        keypoints_a: Keypoints of the first pose.
        keypoints_b: Keypoints of the second pose.
        names: Keypoint names that contribute to the distance.

    Returns:
        float: 0.0 for identical poses; larger means more different.
    """
    keypoints_a = list(keypoints_a)
    keypoints_b = list(keypoints_b)
    if not keypoints_a or not keypoints_b:
        return 0.0

    norm_a = _normalize_translation_scale(np.array([[kp.x, kp.y] for kp in keypoints_a]))
    norm_b = _normalize_translation_scale(np.array([[kp.x, kp.y] for kp in keypoints_b]))

    index_b: Dict[str, int] = {kp.name: i for i, kp in enumerate(keypoints_b)}
    wanted = set(names)
    total = 0.0
    for i, kp in enumerate(keypoints_a):
        j = index_b.get(kp.name)
        if j is None or kp.name not in wanted:
            continue
        total += float(np.sum((norm_a[i] - norm_b[j]) ** 2))
    return math.sqrt(total)
