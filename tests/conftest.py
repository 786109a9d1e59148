"""
Shared fixtures: a synthetic standing pose and builders around it.
"""

from typing import Dict, Iterable, Optional, Tuple

import pytest

from dancescore.core.data_types import Keypoint, Pose, ReferenceTrack, TimestampedPoseSet

# name -> (x, y, z)
NEUTRAL_COORDS: Dict[str, Tuple[float, float, float]] = {
    "nose": (0.50, 0.10, 0.00),
    "left_shoulder": (0.60, 0.30, 0.00),
    "right_shoulder": (0.40, 0.30, 0.00),
    "left_elbow": (0.70, 0.45, 0.05),
    "right_elbow": (0.30, 0.45, 0.05),
    "left_wrist": (0.72, 0.60, 0.10),
    "right_wrist": (0.28, 0.60, 0.10),
    "left_hip": (0.58, 0.60, 0.00),
    "right_hip": (0.42, 0.60, 0.00),
    "left_knee": (0.60, 0.80, 0.02),
    "right_knee": (0.40, 0.80, 0.02),
    "left_ankle": (0.60, 1.00, 0.00),
    "right_ankle": (0.40, 1.00, 0.00),
}


def build_pose(
    moved: Optional[Dict[str, Tuple[float, float, float]]] = None,
    scores: Optional[Dict[str, Optional[float]]] = None,
    drop: Iterable[str] = (),
    with_3d: bool = True,
    default_score: float = 0.9
) -> Pose:
    coords = dict(NEUTRAL_COORDS)
    coords.update(moved or {})
    scores = scores or {}
    dropped = set(drop)

    keypoints = []
    keypoints_3d = []
    for name, (x, y, z) in coords.items():
        if name in dropped:
            continue
        score = scores.get(name, default_score)
        keypoints.append(Keypoint(name=name, x=x, y=y, score=score))
        keypoints_3d.append(Keypoint(name=name, x=x, y=y, z=z, score=score))

    pose = Pose(keypoints=keypoints, keypoints_3d=keypoints_3d if with_3d else None, score=default_score)
    return pose.with_midpoints()


def pose_to_json(pose: Pose) -> dict:
    def kp(k: Keypoint) -> dict:
        data = {"name": k.name, "x": k.x, "y": k.y, "score": k.score}
        if k.z is not None:
            data["z"] = k.z
        return data

    data = {"keypoints": [kp(k) for k in pose.keypoints], "score": pose.score}
    if pose.keypoints_3d is not None:
        data["keypoints3D"] = [kp(k) for k in pose.keypoints_3d]
    return data


@pytest.fixture
def make_pose():
    return build_pose


@pytest.fixture
def neutral_pose() -> Pose:
    return build_pose()


@pytest.fixture
def raised_arm_pose() -> Pose:
    """Left forearm swung up over the shoulder."""
    return build_pose(moved={"left_wrist": (0.80, 0.25, 0.05)})


@pytest.fixture
def make_track():
    def _make(timestamps, pose: Optional[Pose] = None) -> ReferenceTrack:
        pose = pose or build_pose()
        return ReferenceTrack([TimestampedPoseSet(timestamp=t, poses=[pose]) for t in timestamps])
    return _make


@pytest.fixture
def to_json():
    return pose_to_json
