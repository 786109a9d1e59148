"""
Diagnostics Module for DANCESCORE.

Helpers that read score results for feedback: weak joints to
highlight, score tiers for messages, and mapping reference
timestamps to the live timestamps that matched them.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..core.angle_catalog import AngleCatalog, DEFAULT_ANGLE_CATALOG
from ..core.config import settings
from ..core.data_types import PoseScore, ScoredPose
from ..core.timeline import nearest_index
from ..helpers.enums import ScoreTier


def find_weak_joints(
    score: PoseScore,
    catalog: AngleCatalog = DEFAULT_ANGLE_CATALOG,
    threshold: float = settings.BAD_KEYPOINT_THRESHOLD
) -> List[str]:
    """
    Vertex keypoints of the angles scoring below threshold.

    Pass the catalog the comparator was built with, so every flagged
    joint is one that was scored. Angles unknown to the catalog are ignored.
    """
    weak: List[str] = []
    for angle_name, value in score.per_angle.items():
        if angle_name in catalog and value < threshold:
            vertex = catalog.vertex_of(angle_name)
            if vertex not in weak:
                weak.append(vertex)
    return weak


def classify_score(total: float) -> ScoreTier:
    if total >= settings.GREAT_THRESHOLD:
        return ScoreTier.GREAT
    if total >= settings.GOOD_THRESHOLD:
        return ScoreTier.GOOD
    if total >= settings.OKAY_THRESHOLD:
        return ScoreTier.OKAY
    if total >= settings.BAD_THRESHOLD:
        return ScoreTier.BAD
    return ScoreTier.POOR


def clamp_display_score(total: float, floor: float = 0.0, ceiling: float = 100.0) -> float:
    """Clamp a total for display. Use floor=occlusion penalty to keep negative totals visible."""
    return max(floor, min(ceiling, total))


@dataclass(frozen=True)
class TimestampMapping:
    """Reference timestamp and the live timestamp scored against it."""
    original_timestamp: float
    mapped_timestamp: float


def build_timestamp_mappings(history: Sequence[ScoredPose]) -> List[TimestampMapping]:
    """Mappings sorted by original timestamp (history order)."""
    return [
        TimestampMapping(original_timestamp=entry.original_timestamp, mapped_timestamp=entry.live_timestamp)
        for entry in history
    ]


def map_timestamp(
    mappings: Sequence[TimestampMapping],
    original_timestamp: float,
    max_diff_ms: float = settings.MAX_TIMESTAMP_MAPPING_DIFF_MS
) -> Optional[float]:
    """
    Live timestamp for a reference timestamp.

    Returns:
        The mapped timestamp of the nearest mapping, or None if there are
        no mappings or the nearest one is more than max_diff_ms away.
    """
    if not mappings:
        return None
    index = nearest_index(mappings, lambda m: m.original_timestamp, original_timestamp)
    closest = mappings[index]
    if abs(closest.original_timestamp - original_timestamp) > max_diff_ms:
        return None
    return closest.mapped_timestamp
