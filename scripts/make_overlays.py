#!/usr/bin/env python3
"""CLI for rendering a saved landmark sequence on top of its source video."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from facelandmarks.io_utils import ensure_dir, setup_logging
from facelandmarks.sequence.codec import load_sequence
from facelandmarks.viz.overlay import render_sequence_video

LOGGER = logging.getLogger("scripts.overlay")


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render face boxes and landmarks from a sequence file")
    parser.add_argument("video", type=Path, help="Original video path")
    parser.add_argument("--sequence", type=Path, required=True, help="Sequence file written by process_video")
    parser.add_argument("--output", type=Path, required=True, help="Output mp4 path")
    parser.add_argument("--fps", type=float, default=None, help="Output fps (defaults to the input's)")
    parser.add_argument("--draw-labels", action="store_true", help="Annotate each landmark with its index")
    parser.add_argument("--thickness", type=int, default=1, help="Line and point thickness")
    return parser.parse_args(argv)


def main(argv: Optional[list] = None) -> None:
    args = parse_args(argv)
    setup_logging()

    frames = load_sequence(args.sequence)
    ensure_dir(args.output.parent)
    written = render_sequence_video(
        str(args.video),
        frames,
        str(args.output),
        fps=args.fps,
        draw_labels=args.draw_labels,
        thickness=args.thickness,
    )
    LOGGER.info("Rendered %d of %d frames", written, len(frames))


if __name__ == "__main__":
    main()
