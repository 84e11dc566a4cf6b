from pathlib import Path

import pytest

pytest.importorskip("cv2")

from scripts import make_overlays, process_video


def test_process_video_track_flag_defaults_to_config():
    args = process_video.parse_args(["clip.mp4"])

    assert args.video == Path("clip.mp4")
    assert args.track_faces is None
    assert args.frame_scale is None
    assert args.config == Path("configs/sequence.yaml")


def test_process_video_cli_overrides():
    args = process_video.parse_args(
        ["clip.mp4", "--no-track-faces", "--frame-scale", "2.5", "--model", "lm.onnx", "--table", "csv"]
    )

    assert args.track_faces is False
    assert args.frame_scale == 2.5
    assert args.model_path == "lm.onnx"
    assert args.table == "csv"


def test_process_video_rejects_both_track_flags():
    with pytest.raises(SystemExit):
        process_video.parse_args(["clip.mp4", "--track-faces", "--no-track-faces"])


def test_make_overlays_requires_sequence_and_output():
    with pytest.raises(SystemExit):
        make_overlays.parse_args(["clip.mp4"])

    args = make_overlays.parse_args(["clip.mp4", "--sequence", "s.json", "--output", "o.mp4", "--draw-labels"])
    assert args.draw_labels is True
    assert args.thickness == 1
