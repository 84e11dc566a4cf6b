"""Overlay rendering for faces, landmarks and whole sequences."""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from facelandmarks.types import BBox, Face, Frame, Point

LOGGER = logging.getLogger("facelandmarks.viz.overlay")

Color = Tuple[int, int, int]
GREEN: Color = (0, 255, 0)
RED: Color = (0, 0, 255)


def render_landmarks(
    img: np.ndarray,
    landmarks: Sequence[Point],
    draw_labels: bool = False,
    color: Color = GREEN,
    thickness: int = 1,
) -> None:
    """Draw each landmark as a dot, optionally labelled with its 0-based index."""
    for idx, (x, y) in enumerate(landmarks):
        center = (int(x), int(y))
        cv2.circle(img, center, max(1, thickness), color, -1)
        if draw_labels:
            cv2.putText(img, str(idx), (center[0] + 2, center[1] - 2), cv2.FONT_HERSHEY_SIMPLEX, 0.3, color, 1)


def render_bbox(img: np.ndarray, bbox: BBox, color: Color = GREEN, thickness: int = 1) -> None:
    x, y, w, h = (int(v) for v in bbox)
    cv2.rectangle(img, (x, y), (x + w - 1, y + h - 1), color, thickness)


def render_face(
    img: np.ndarray,
    face: Face,
    draw_labels: bool = False,
    bbox_color: Color = RED,
    landmarks_color: Color = GREEN,
    thickness: int = 1,
) -> None:
    """Draw the face box with its id above it, then its landmarks."""
    render_bbox(img, face.bbox, bbox_color, thickness)
    x, y, _, _ = face.bbox
    text_y = max(12, y - 4)
    cv2.putText(img, f"#{face.id}", (x, text_y), cv2.FONT_HERSHEY_SIMPLEX, 0.45, bbox_color, 1)
    render_landmarks(img, face.landmarks, draw_labels, landmarks_color, thickness)


def render_frame(
    img: np.ndarray,
    frame: Frame,
    draw_labels: bool = False,
    bbox_color: Color = RED,
    landmarks_color: Color = GREEN,
    thickness: int = 1,
) -> None:
    for face in frame.faces:
        render_face(img, face, draw_labels, bbox_color, landmarks_color, thickness)


def render_sequence_video(
    video_path: str,
    frames: Sequence[Frame],
    output_path: str,
    fps: Optional[float] = None,
    draw_labels: bool = False,
    thickness: int = 1,
) -> int:
    """Write a copy of ``video_path`` with the i-th frame's faces drawn on the i-th image.

    Returns the number of frames written.
    """
    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        raise RuntimeError(f"Unable to open video {video_path}")

    input_fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
    fps = fps or input_fps
    width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
    height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

    fourcc = cv2.VideoWriter_fourcc(*"mp4v")
    writer = cv2.VideoWriter(output_path, fourcc, fps, (width, height))

    written = 0
    try:
        for frame in frames:
            ret, image = cap.read()
            if not ret:
                LOGGER.warning("Video ended after %d frames; sequence has %d", written, len(frames))
                break
            render_frame(image, frame, draw_labels=draw_labels, thickness=thickness)
            writer.write(image)
            written += 1
    finally:
        cap.release()
        writer.release()
    LOGGER.info("Overlay written to %s (%d frames)", output_path, written)
    return written
