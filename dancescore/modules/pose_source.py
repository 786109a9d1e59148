"""
Pose Source Module for DANCESCORE.

The scoring engine never runs a pose model itself. Whatever produces
poses (a live detector, a recording) is passed in as a PoseSource.
"""

from typing import Iterable, Iterator, List, Protocol, Tuple, Union
from pathlib import Path

from ..core.data_types import TimestampedPoseSet
from ..schemas.sche_pose import RecordedSessionSchema, load_recorded_session_file

# (live sample, reference video position in ms)
SourceFrame = Tuple[TimestampedPoseSet, float]


class PoseSource(Protocol):
    """Yields live samples in completion order, one at a time."""

    def frames(self) -> Iterator[SourceFrame]:
        ...


class RecordedPoseSource:
    """Replays recorded frames in the order they were captured."""

    def __init__(self, frames: Iterable[SourceFrame]):
        self._frames: List[SourceFrame] = list(frames)

    def __len__(self) -> int:
        return len(self._frames)

    def frames(self) -> Iterator[SourceFrame]:
        return iter(self._frames)

    @classmethod
    def from_schema(cls, session: RecordedSessionSchema) -> "RecordedPoseSource":
        return cls((frame.to_domain(), frame.video_position_ms) for frame in session.frames)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "RecordedPoseSource":
        return cls.from_schema(load_recorded_session_file(path))
