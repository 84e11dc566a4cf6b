#!/usr/bin/env python3
"""CLI for running face landmark detection and tracking over a video."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

import cv2
from tqdm import tqdm

from facelandmarks.config import load_config
from facelandmarks.io_utils import ensure_dir, infer_video_stem, setup_logging
from facelandmarks.sequence import create_from_config
from facelandmarks.sequence.export import export_table, track_summary

LOGGER = logging.getLogger("scripts.process_video")


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detect and track face landmarks across a video")
    parser.add_argument("video", type=Path, help="Input video file")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("data/outputs"),
        help="Output directory root",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/sequence.yaml"),
        help="Sequence configuration YAML",
    )
    parser.add_argument("--model", dest="model_path", type=str, default=None, help="Landmark ONNX model override")
    parser.add_argument("--frame-scale", type=float, default=None, help="Resize factor applied before detection")
    track_group = parser.add_mutually_exclusive_group()
    track_group.add_argument("--track-faces", dest="track_faces", action="store_true", help="Keep face ids across frames")
    track_group.add_argument("--no-track-faces", dest="track_faces", action="store_false", help="New id for every face")
    track_group.set_defaults(track_faces=None)
    parser.add_argument("--iou-threshold", type=float, default=None, help="Minimum IoU to carry an id over")
    parser.add_argument("--max-frames", type=int, default=None, help="Stop after this many frames")
    parser.add_argument(
        "--format",
        choices=("json", "yaml"),
        default="json",
        help="Sequence file format",
    )
    parser.add_argument("--table", choices=("csv", "parquet"), default=None, help="Also export a per-face table")
    return parser.parse_args(argv)


def main(argv: Optional[list] = None) -> None:
    args = parse_args(argv)
    setup_logging()

    config = load_config(
        args.config,
        overrides={
            "model_path": args.model_path,
            "frame_scale": args.frame_scale,
            "track_faces": args.track_faces,
            "iou_threshold": args.iou_threshold,
        },
    )
    sequence = create_from_config(config)

    cap = cv2.VideoCapture(str(args.video))
    if not cap.isOpened():
        raise RuntimeError(f"Unable to open video {args.video}")
    total = int(cap.get(cv2.CAP_PROP_FRAME_COUNT)) or None
    if args.max_frames is not None:
        total = min(total, args.max_frames) if total else args.max_frames

    with tqdm(total=total, desc="frames", unit="frame") as progress:
        while args.max_frames is None or sequence.size() < args.max_frames:
            ret, image = cap.read()
            if not ret:
                break
            sequence.add_frame(image)
            progress.update(1)
    cap.release()

    stem = infer_video_stem(args.video)
    output_dir = ensure_dir(args.output_dir / stem)
    sequence_path = output_dir / f"{stem}-landmarks.{args.format}"
    sequence.save(sequence_path)

    frames = list(sequence.get_sequence())
    summary = track_summary(frames)
    LOGGER.info(
        "Processed %d frames: %d face ids, %d face observations",
        len(frames),
        len(summary),
        int(summary["frames"].sum()) if not summary.empty else 0,
    )
    if args.table:
        export_table(output_dir / f"{stem}-faces.{args.table}", frames)


if __name__ == "__main__":
    main()
