"""
Angle Catalog Module for DANCESCORE.

Registry of the joint angles used for scoring. Each angle is defined
by three keypoints (vertex in the middle) and a relative weight.

The comparator and every joint-level diagnostic read the same
AngleCatalog instance, so a joint flagged as weak is always an
angle that was actually scored.

Author: DANCESCORE Team
Version: 1.0.0
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Tuple

from ..helpers.exception_handler import CatalogError


# BlazePose 33-point names plus synthesized midpoints
KEYPOINT_VOCABULARY: FrozenSet[str] = frozenset([
    "nose",
    "left_eye_inner", "left_eye", "left_eye_outer",
    "right_eye_inner", "right_eye", "right_eye_outer",
    "left_ear", "right_ear",
    "mouth_left", "mouth_right",
    "left_shoulder", "right_shoulder",
    "left_elbow", "right_elbow",
    "left_wrist", "right_wrist",
    "left_pinky", "right_pinky",
    "left_index", "right_index",
    "left_thumb", "right_thumb",
    "left_hip", "right_hip",
    "left_knee", "right_knee",
    "left_ankle", "right_ankle",
    "left_heel", "right_heel",
    "left_foot_index", "right_foot_index",
    "mid_hip", "mid_shoulder",
])


@dataclass(frozen=True)
class AngleSpec:
    """
    Definition of one scored joint angle.

    Attributes:
        name: Angle name, used as key in score maps.
        keypoint_triple: (proximal, vertex, distal) keypoint names.
        weight: Relative weight in the total score, strictly positive.
    """
    name: str
    keypoint_triple: Tuple[str, str, str]
    weight: float

    @property
    def vertex(self) -> str:
        return self.keypoint_triple[1]


class AngleCatalog:
    """
    Read-only name -> AngleSpec registry.

    Validation happens once at construction; a malformed entry is a
    configuration error and raises CatalogError.
    """

    def __init__(self, specs: Iterable[AngleSpec], vocabulary: FrozenSet[str] = KEYPOINT_VOCABULARY):
        entries: Dict[str, AngleSpec] = {}
        for spec in specs:
            self._validate(spec, vocabulary)
            if spec.name in entries:
                raise CatalogError(message=f"Duplicate angle name '{spec.name}'")
            entries[spec.name] = spec
        if not entries:
            raise CatalogError(message="Angle catalog is empty")

        self._entries: Mapping[str, AngleSpec] = MappingProxyType(entries)
        self._total_weight = float(sum(spec.weight for spec in entries.values()))

    @staticmethod
    def _validate(spec: AngleSpec, vocabulary: FrozenSet[str]) -> None:
        if len(spec.keypoint_triple) != 3:
            raise CatalogError(message=f"Angle '{spec.name}' must name exactly 3 keypoints")
        if len(set(spec.keypoint_triple)) != 3:
            raise CatalogError(message=f"Angle '{spec.name}' repeats a keypoint")
        unknown = [name for name in spec.keypoint_triple if name not in vocabulary]
        if unknown:
            raise CatalogError(message=f"Angle '{spec.name}' uses unknown keypoints {unknown}")
        if not spec.weight > 0:
            raise CatalogError(message=f"Angle '{spec.name}' weight must be > 0, got {spec.weight}")

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[AngleSpec]:
        return iter(self._entries.values())

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __getitem__(self, name: str) -> AngleSpec:
        return self._entries[name]

    @property
    def names(self) -> List[str]:
        return list(self._entries.keys())

    @property
    def total_weight(self) -> float:
        """Normalization denominator for the total score."""
        return self._total_weight

    def vertex_of(self, name: str) -> str:
        return self._entries[name].vertex

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping]) -> "AngleCatalog":
        """
        Build a catalog from {"name": {"keypoints": [...], "raw_weight": w}}.

        Raises:
            CatalogError: If an entry lacks keypoints or weight.
        """
        specs = []
        for name, entry in raw.items():
            try:
                triple = tuple(entry["keypoints"])
                weight = float(entry["raw_weight"])
            except (KeyError, TypeError, ValueError) as e:
                raise CatalogError(message=f"Angle '{name}' is malformed: {e}")
            specs.append(AngleSpec(name=name, keypoint_triple=triple, weight=weight))
        return cls(specs)


DEFAULT_ANGLE_CATALOG = AngleCatalog([
    AngleSpec("left_elbow", ("left_shoulder", "left_elbow", "left_wrist"), 3.0),
    AngleSpec("right_elbow", ("right_shoulder", "right_elbow", "right_wrist"), 3.0),
    AngleSpec("left_knee", ("left_hip", "left_knee", "left_ankle"), 3.0),
    AngleSpec("right_knee", ("right_hip", "right_knee", "right_ankle"), 3.0),
    AngleSpec("left_armpit", ("left_hip", "left_shoulder", "left_elbow"), 3.0),
    AngleSpec("right_armpit", ("right_hip", "right_shoulder", "right_elbow"), 3.0),
    AngleSpec("between_legs_left", ("left_knee", "left_hip", "right_hip"), 1.5),
    AngleSpec("between_legs_right", ("right_knee", "right_hip", "left_hip"), 1.5),
    AngleSpec("top_left_chest", ("left_hip", "left_shoulder", "right_shoulder"), 1.0),
    AngleSpec("top_right_chest", ("right_hip", "right_shoulder", "left_shoulder"), 1.0),
    AngleSpec("bottom_left_chest", ("left_shoulder", "left_hip", "right_hip"), 1.0),
    AngleSpec("bottom_right_chest", ("right_shoulder", "right_hip", "left_hip"), 1.0),
])
