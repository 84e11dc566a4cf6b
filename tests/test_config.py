from pathlib import Path

import pytest

from facelandmarks import InvalidConfiguration
from facelandmarks.config import SequenceConfig, load_config, validate_iou_threshold


def test_cli_overrides_win_over_yaml(tmp_path):
    cfg_path = tmp_path / "sequence.yaml"
    cfg_path.write_text("frame_scale: 2.0\ntrack_faces: true\niou_threshold: 0.4\n", encoding="utf-8")

    config = load_config(cfg_path, overrides={"frame_scale": 0.5, "track_faces": None})

    assert config.frame_scale == 0.5
    assert config.track_faces is True
    assert config.iou_threshold == 0.4


def test_missing_config_falls_back_to_defaults(tmp_path):
    config = load_config(tmp_path / "missing.yaml")

    assert config == SequenceConfig()
    assert config.model_path is None
    assert config.track_faces is False


def test_unknown_keys_are_ignored():
    config = SequenceConfig.from_dict({"frame_scale": 1.25, "stride": 3, "det_size": [320, 320]})

    assert config.frame_scale == 1.25
    assert config.det_size == (320, 320)


@pytest.mark.parametrize(
    "data",
    [{"frame_scale": 0}, {"frame_scale": -2}, {"iou_threshold": 1.5}, {"iou_threshold": -0.1}, {"iou_threshold": "x"}],
)
def test_invalid_values_raise(data):
    with pytest.raises(InvalidConfiguration):
        SequenceConfig.from_dict(data)


def test_repository_config_is_valid():
    config = load_config(Path(__file__).resolve().parent.parent / "configs" / "sequence.yaml")

    assert config.track_faces is True
    assert config.frame_scale == 1.0


def test_validate_iou_threshold_bounds():
    assert validate_iou_threshold(0) == 0.0
    assert validate_iou_threshold("0.45") == 0.45
    for bad in (-0.01, 1.0, float("nan")):
        with pytest.raises(InvalidConfiguration):
            validate_iou_threshold(bad)
