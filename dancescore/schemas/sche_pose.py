"""
Pose Scoring Schemas - Data Transfer Objects.

JSON contract shared with the pose-estimation and level-data
collaborators. Field names follow the wire format (camelCase where
the producers use it); to_domain() converts into engine dataclasses.

Author: DANCESCORE Team
Version: 1.0.0
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.data_types import Interval, Keypoint, Pose, ReferenceTrack, TimestampedPoseSet
from ..helpers.enums import ScoreTier


# ==================== INPUT SCHEMAS ====================

class KeypointSchema(BaseModel):
    """One detected keypoint."""
    name: str = Field(..., description="Keypoint name, e.g. left_shoulder")
    x: float
    y: float
    z: Optional[float] = None
    score: Optional[float] = Field(None, ge=0.0, le=1.0, description="Detection confidence")

    def to_domain(self) -> Keypoint:
        return Keypoint(name=self.name, x=self.x, y=self.y, z=self.z, score=self.score)


class PoseSchema(BaseModel):
    """One detected person."""
    model_config = ConfigDict(populate_by_name=True)

    keypoints: List[KeypointSchema] = Field(default_factory=list)
    keypoints_3d: Optional[List[KeypointSchema]] = Field(None, alias="keypoints3D")
    score: Optional[float] = None

    def to_domain(self) -> Pose:
        keypoints_3d = None
        if self.keypoints_3d is not None:
            keypoints_3d = [kp.to_domain() for kp in self.keypoints_3d]
        pose = Pose(
            keypoints=[kp.to_domain() for kp in self.keypoints],
            keypoints_3d=keypoints_3d,
            score=self.score,
        )
        return pose.with_midpoints()


class TimestampedPosesSchema(BaseModel):
    """Detection result for one instant."""
    timestamp: float = Field(..., description="Timestamp in milliseconds")
    poses: List[PoseSchema] = Field(default_factory=list)

    def to_domain(self) -> TimestampedPoseSet:
        return TimestampedPoseSet(timestamp=self.timestamp, poses=[p.to_domain() for p in self.poses])


class LevelSchema(BaseModel):
    """Reference choreography: pose track plus intervals of interest."""
    title: str = ""
    pose_data: List[TimestampedPosesSchema] = Field(default_factory=list)
    intervals: List[Tuple[float, float]] = Field(default_factory=list, description="[start_ms, end_ms] pairs")

    @field_validator("intervals")
    @classmethod
    def check_interval_order(cls, intervals: List[Tuple[float, float]]) -> List[Tuple[float, float]]:
        for start, end in intervals:
            if start > end:
                raise ValueError(f"interval [{start}, {end}] ends before it starts")
        return intervals

    def reference_track(self) -> ReferenceTrack:
        return ReferenceTrack([frame.to_domain() for frame in self.pose_data])

    def domain_intervals(self) -> List[Interval]:
        return [Interval.from_pair(pair) for pair in self.intervals]


class RecordedFrameSchema(TimestampedPosesSchema):
    """A recorded live frame and the reference video position it was shown against."""
    video_position_ms: float = Field(..., alias="videoPositionMs")

    model_config = ConfigDict(populate_by_name=True)


class RecordedSessionSchema(BaseModel):
    """A recorded performance, replayed through the scorer."""
    frames: List[RecordedFrameSchema] = Field(default_factory=list)


# ==================== RESULT SCHEMAS ====================

class TimestampMappingSchema(BaseModel):
    originalTimestamp: float
    mappedTimestamp: float


class DelayEstimateSchema(BaseModel):
    offset_ms: int = 0
    median: float = 0.0
    mad: float = 0.0
    used: int = 0
    total: int = 0


class OffsetEstimateSchema(BaseModel):
    offset_ms: float = 0.0
    matched: int = 0
    total: int = 0


class SessionSummary(BaseModel):
    """Result of scoring one session."""
    session_id: str
    frames_consumed: int = 0
    history_length: int = 0
    interval_scores: List[Dict[str, float]] = Field(default_factory=list)
    overall_total: float = 0.0
    tier: ScoreTier = ScoreTier.POOR
    weak_joints: List[str] = Field(default_factory=list)
    timestamp_mappings: List[TimestampMappingSchema] = Field(default_factory=list)
    best_match_offset: OffsetEstimateSchema = Field(default_factory=OffsetEstimateSchema)
    calibration: Optional[DelayEstimateSchema] = None


# ==================== LOADERS ====================

def _read_json(path: Union[str, Path]):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_level_file(path: Union[str, Path]) -> LevelSchema:
    """Load and validate a level JSON file. Raises pydantic.ValidationError on bad data."""
    return LevelSchema.model_validate(_read_json(path))


def load_recorded_session_file(path: Union[str, Path]) -> RecordedSessionSchema:
    return RecordedSessionSchema.model_validate(_read_json(path))
