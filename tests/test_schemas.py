import json

import pytest
from pydantic import ValidationError

from dancescore.helpers.exception_handler import TrackOrderError
from dancescore.modules.pose_source import RecordedPoseSource
from dancescore.schemas.sche_pose import (
    KeypointSchema, LevelSchema, PoseSchema, RecordedSessionSchema, load_level_file
)


class TestPoseSchema:
    def test_reads_camel_case_3d(self, neutral_pose, to_json):
        pose = PoseSchema.model_validate(to_json(neutral_pose)).to_domain()
        assert pose.has_3d()
        assert {kp.name for kp in pose.keypoints_3d} >= {"left_wrist", "mid_hip"}

    def test_synthesizes_midpoints(self):
        pose = PoseSchema.model_validate({"keypoints": [
            {"name": "left_hip", "x": 0.4, "y": 0.6, "score": 0.9},
            {"name": "right_hip", "x": 0.6, "y": 0.6, "score": 0.7},
        ]}).to_domain()
        mid = {kp.name: kp for kp in pose.keypoints}["mid_hip"]
        assert mid.x == pytest.approx(0.5)
        assert mid.score == pytest.approx(0.7)
        assert pose.keypoints_3d is None

    def test_rejects_score_out_of_range(self):
        with pytest.raises(ValidationError):
            KeypointSchema(name="nose", x=0, y=0, score=1.5)


class TestLevelSchema:
    def _level(self, timestamps, to_json, pose):
        return {
            "title": "warmup",
            "pose_data": [{"timestamp": t, "poses": [to_json(pose)]} for t in timestamps],
            "intervals": [[0, 1000], [1000, 2000]],
        }

    def test_reference_track(self, to_json, neutral_pose):
        level = LevelSchema.model_validate(self._level([0, 500, 1500], to_json, neutral_pose))
        assert level.reference_track().timestamps == [0, 500, 1500]
        assert level.domain_intervals()[1].start_ms == 1000.0

    def test_unsorted_track(self, to_json, neutral_pose):
        level = LevelSchema.model_validate(self._level([500, 0], to_json, neutral_pose))
        with pytest.raises(TrackOrderError):
            level.reference_track()

    @pytest.mark.parametrize("intervals", [
        [[100]],
        [[0, 100, 200]],
        [[500, 100]],
    ])
    def test_malformed_intervals_rejected(self, intervals):
        with pytest.raises(ValidationError):
            LevelSchema.model_validate({"pose_data": [], "intervals": intervals})

    def test_zero_length_interval_allowed(self):
        level = LevelSchema.model_validate({"intervals": [[300, 300]]})
        assert level.domain_intervals()[0].contains(300)

    def test_load_file(self, tmp_path, to_json, neutral_pose):
        path = tmp_path / "level.json"
        path.write_text(json.dumps(self._level([0, 100], to_json, neutral_pose)), encoding="utf-8")
        assert len(load_level_file(path).pose_data) == 2

    def test_load_invalid_file(self, tmp_path):
        path = tmp_path / "level.json"
        path.write_text(json.dumps({"pose_data": [{"poses": []}]}), encoding="utf-8")
        with pytest.raises(ValidationError):
            load_level_file(path)


def test_recorded_pose_source(to_json, neutral_pose):
    session = RecordedSessionSchema.model_validate({"frames": [
        {"timestamp": 30, "videoPositionMs": 0, "poses": [to_json(neutral_pose)]},
        {"timestamp": 70, "videoPositionMs": 40, "poses": []},
    ]})
    source = RecordedPoseSource.from_schema(session)
    frames = list(source.frames())

    assert len(source) == 2
    assert frames[0][0].timestamp == 30
    assert frames[0][1] == 0
    assert frames[1][0].poses == []
