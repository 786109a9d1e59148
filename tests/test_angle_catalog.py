import pytest

from dancescore.core.angle_catalog import AngleCatalog, AngleSpec, DEFAULT_ANGLE_CATALOG
from dancescore.helpers.exception_handler import CatalogError, DanceScoreException


def test_default_catalog():
    assert len(DEFAULT_ANGLE_CATALOG) == 12
    assert DEFAULT_ANGLE_CATALOG.total_weight == pytest.approx(25.0)
    assert DEFAULT_ANGLE_CATALOG["left_knee"].weight == 3.0
    assert DEFAULT_ANGLE_CATALOG["between_legs_left"].weight == 1.5
    assert DEFAULT_ANGLE_CATALOG["top_left_chest"].weight == 1.0


def test_vertex_is_middle_keypoint():
    assert DEFAULT_ANGLE_CATALOG.vertex_of("left_elbow") == "left_elbow"
    assert DEFAULT_ANGLE_CATALOG.vertex_of("between_legs_left") == "left_hip"
    assert DEFAULT_ANGLE_CATALOG.vertex_of("top_right_chest") == "right_shoulder"


def test_iteration_yields_specs_in_order():
    names = [spec.name for spec in DEFAULT_ANGLE_CATALOG]
    assert names == DEFAULT_ANGLE_CATALOG.names
    assert names[0] == "left_elbow"
    assert "left_elbow" in DEFAULT_ANGLE_CATALOG
    assert "neck" not in DEFAULT_ANGLE_CATALOG


@pytest.mark.parametrize("spec", [
    AngleSpec("short", ("left_hip", "left_knee"), 1.0),
    AngleSpec("repeat", ("left_hip", "left_knee", "left_hip"), 1.0),
    AngleSpec("unknown", ("left_hip", "left_tail", "left_ankle"), 1.0),
    AngleSpec("zero", ("left_hip", "left_knee", "left_ankle"), 0.0),
    AngleSpec("negative", ("left_hip", "left_knee", "left_ankle"), -1.0),
])
def test_malformed_entry_rejected(spec):
    with pytest.raises(CatalogError):
        AngleCatalog([spec])


def test_duplicate_name_rejected():
    spec = AngleSpec("left_knee", ("left_hip", "left_knee", "left_ankle"), 1.0)
    with pytest.raises(CatalogError) as exc_info:
        AngleCatalog([spec, spec])
    assert "Duplicate" in exc_info.value.message


def test_empty_catalog_rejected():
    with pytest.raises(CatalogError):
        AngleCatalog([])


def test_catalog_error_shape():
    error = CatalogError(message="bad")
    assert isinstance(error, DanceScoreException)
    assert error.to_dict() == {"code": "001", "message": "bad"}


class TestFromMapping:
    def test_builds_catalog(self):
        catalog = AngleCatalog.from_mapping({
            "left_knee": {"keypoints": ["left_hip", "left_knee", "left_ankle"], "raw_weight": 3},
            "right_knee": {"keypoints": ["right_hip", "right_knee", "right_ankle"], "raw_weight": 1},
        })
        assert catalog.names == ["left_knee", "right_knee"]
        assert catalog.total_weight == pytest.approx(4.0)

    def test_missing_weight(self):
        with pytest.raises(CatalogError):
            AngleCatalog.from_mapping({"left_knee": {"keypoints": ["left_hip", "left_knee", "left_ankle"]}})
