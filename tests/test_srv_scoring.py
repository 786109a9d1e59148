import json

import pytest

from dancescore.core.data_types import TimestampedPoseSet
from dancescore.helpers.enums import ScoreTier
from dancescore.main import main
from dancescore.modules.pose_source import RecordedPoseSource
from dancescore.schemas.sche_pose import LevelSchema, RecordedSessionSchema
from dancescore.services.srv_scoring import ScoringService
from dancescore.utils.logger import LogCategory, LogLevel, create_session_logger


@pytest.fixture
def level_json(to_json, neutral_pose):
    return {
        "title": "warmup",
        "pose_data": [{"timestamp": t, "poses": [to_json(neutral_pose)]} for t in (0, 500, 1000, 1500)],
        "intervals": [[0, 900], [1000, 1500], [5000, 6000]],
    }


@pytest.fixture
def session_json(to_json, neutral_pose):
    return {"frames": [
        {"timestamp": t + 100, "videoPositionMs": t, "poses": [to_json(neutral_pose)]}
        for t in (0, 500, 1000, 1500)
    ]}


@pytest.fixture
def service(level_json):
    return ScoringService.from_level(LevelSchema.model_validate(level_json), session_id="test")


def test_run_summary(service, session_json):
    source = RecordedPoseSource.from_schema(RecordedSessionSchema.model_validate(session_json))

    summary = service.run(source)

    assert summary.session_id == "test"
    assert summary.frames_consumed == 4
    assert summary.history_length == 4
    assert summary.interval_scores[0]["total"] == pytest.approx(100.0)
    assert summary.interval_scores[2] == {}
    assert summary.overall_total == pytest.approx(100.0)
    assert summary.tier is ScoreTier.GREAT
    assert summary.weak_joints == []
    assert summary.timestamp_mappings[1].originalTimestamp == 500
    assert summary.timestamp_mappings[1].mappedTimestamp == 600
    assert summary.best_match_offset.matched == 4
    assert summary.best_match_offset.total == 4
    assert summary.calibration is None


def test_calibration_offset_subtracted(level_json, neutral_pose):
    service = ScoringService.from_level(LevelSchema.model_validate(level_json), calibration_offset_ms=100)
    service.process_frame(TimestampedPoseSet(timestamp=600, poses=[neutral_pose]), 500)
    assert service.scorer.get_history()[0].live_timestamp == 500


def test_frames_without_people_are_counted_not_scored(service):
    source = RecordedPoseSource([(TimestampedPoseSet(timestamp=0, poses=[]), 0)])
    summary = service.run(source)
    assert summary.frames_consumed == 1
    assert summary.history_length == 0
    assert summary.overall_total == 0.0
    assert summary.tier is ScoreTier.POOR


def test_occluded_performance_lists_weak_joints(service, make_pose):
    live = make_pose(drop=["left_wrist"])
    service.process_frame(TimestampedPoseSet(timestamp=10, poses=[live]), 0)
    summary = service.summarize()
    assert summary.weak_joints == ["left_elbow"]


def test_calibrate(service, make_pose, neutral_pose):
    # Arm raised until the cue, matching pose 300ms after it
    off = make_pose(moved={"left_wrist": (0.9, 0.1, 0.3), "right_wrist": (0.1, 0.1, 0.3)})
    for position, pose in [(400, off), (600, off), (800, neutral_pose), (1000, neutral_pose)]:
        service.process_frame(TimestampedPoseSet(timestamp=position, poses=[pose]), position)

    estimate = service.calibrate([500], threshold=95)
    assert estimate.offset_ms == 300
    summary = service.summarize(calibration=estimate)
    assert summary.calibration.offset_ms == 300
    assert summary.calibration.used == 1


def test_session_log(tmp_path, level_json, session_json):
    session_logger = create_session_logger("logtest", str(tmp_path))
    service = ScoringService.from_level(LevelSchema.model_validate(level_json), session_logger=session_logger)
    service.run(RecordedPoseSource.from_schema(RecordedSessionSchema.model_validate(session_json)))

    categories = {entry.category for entry in session_logger.entries}
    assert {LogCategory.SYSTEM, LogCategory.SCORE, LogCategory.INTERVAL} <= categories
    warnings = [e for e in session_logger.entries if e.level is LogLevel.WARNING]
    assert len(warnings) == 1

    path = session_logger.save_session_log()
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["session_id"] == "logtest"
    assert len(data["entries"]) == len(session_logger.entries)


class TestCli:
    @pytest.fixture(autouse=True)
    def keep_logging(self, monkeypatch):
        monkeypatch.setattr("dancescore.main.setup_logging", lambda: None)

    @pytest.fixture
    def files(self, tmp_path, level_json, session_json):
        level = tmp_path / "level.json"
        session = tmp_path / "session.json"
        level.write_text(json.dumps(level_json), encoding="utf-8")
        session.write_text(json.dumps(session_json), encoding="utf-8")
        return str(level), str(session)

    def test_score(self, files, capsys):
        level, session = files
        assert main(["score", "--level", level, "--session", session, "--session-id", "cli"]) == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["session_id"] == "cli"
        assert summary["history_length"] == 4
        assert summary["tier"] == "GREAT"

    def test_calibrate(self, files, capsys):
        level, session = files
        assert main(["calibrate", "--level", level, "--session", session, "--events", "0,900"]) == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["calibration"]["total"] == 2

    def test_malformed_interval_exits_cleanly(self, tmp_path, files, level_json):
        _, session = files
        level_json["intervals"] = [[100]]
        level = tmp_path / "bad_level.json"
        level.write_text(json.dumps(level_json), encoding="utf-8")
        assert main(["score", "--level", str(level), "--session", session]) == 1

    def test_missing_file(self, tmp_path):
        missing = str(tmp_path / "nope.json")
        assert main(["score", "--level", missing, "--session", missing]) == 1
