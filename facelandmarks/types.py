"""Common dataclasses and type aliases used across the facelandmarks package."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Tuple

import numpy as np

# Bounding box order: x, y, width, height (pixel coordinates)
BBox = Tuple[int, int, int, int]
Point = Tuple[int, int]


@dataclass(frozen=True)
class Face:
    """A face committed to a frame with its tracked id."""

    id: int
    bbox: BBox
    landmarks: Tuple[Point, ...] = ()

    @property
    def num_landmarks(self) -> int:
        return len(self.landmarks)


@dataclass(frozen=True)
class Frame:
    """A processed frame and the faces detected in it."""

    id: int
    width: int
    height: int
    faces: Tuple[Face, ...] = ()

    @property
    def face_ids(self) -> Tuple[int, ...]:
        return tuple(face.id for face in self.faces)


@dataclass
class Detection:
    """Raw detector output, in the coordinates of the image it was run on."""

    bbox: Tuple[float, float, float, float]
    landmarks: np.ndarray = field(default_factory=lambda: np.zeros((0, 2), dtype=np.float32))
    score: Optional[float] = None

    def __post_init__(self) -> None:
        self.bbox = tuple(float(v) for v in self.bbox)  # type: ignore[assignment]
        points = np.asarray(self.landmarks, dtype=np.float32)
        self.landmarks = points.reshape(-1, 2) if points.size else np.zeros((0, 2), dtype=np.float32)

    @classmethod
    def from_raw(cls, raw: Any) -> "Detection":
        """Accept either a Detection or a plain ``(bbox, landmarks)`` pair."""
        if isinstance(raw, Detection):
            return raw
        bbox, landmarks = raw
        return cls(bbox=tuple(bbox), landmarks=np.asarray(landmarks, dtype=np.float32))

    def scaled(self, factor: float) -> "Detection":
        """Return a copy with every coordinate divided by ``factor``."""
        x, y, w, h = self.bbox
        return Detection(
            bbox=(x / factor, y / factor, w / factor, h / factor),
            landmarks=self.landmarks / factor,
            score=self.score,
        )


def iou(box_a: Sequence[float], box_b: Sequence[float]) -> float:
    """Compute intersection-over-union between two (x, y, w, h) boxes."""
    ax1, ay1, aw, ah = box_a
    bx1, by1, bw, bh = box_b
    inter_x1 = max(ax1, bx1)
    inter_y1 = max(ay1, by1)
    inter_x2 = min(ax1 + aw, bx1 + bw)
    inter_y2 = min(ay1 + ah, by1 + bh)
    inter_w = max(0.0, inter_x2 - inter_x1)
    inter_h = max(0.0, inter_y2 - inter_y1)
    inter_area = inter_w * inter_h
    if inter_area == 0:
        return 0.0
    union = aw * ah + bw * bh - inter_area
    if union <= 0:
        return 0.0
    return float(inter_area / union)


def landmark_centroid(landmarks: Sequence[Sequence[float]], bbox: Sequence[float]) -> Tuple[float, float]:
    """Mean landmark position, or the bbox centre when there are no landmarks."""
    points = np.asarray(landmarks, dtype=np.float64).reshape(-1, 2)
    if points.shape[0] == 0:
        x, y, w, h = bbox
        return x + w / 2.0, y + h / 2.0
    cx, cy = points.mean(axis=0)
    return float(cx), float(cy)


def round_half_up(value: float) -> int:
    """Nearest whole pixel; halves go up, so 2.5 -> 3 and 3.5 -> 4."""
    return int(math.floor(float(value) + 0.5))


def round_bbox(bbox: Sequence[float], width: int, height: int) -> Optional[BBox]:
    """Round a float box half up to whole pixels and clamp it to ``[0, width) x [0, height)``.

    Returns ``None`` when nothing of the box is left inside the image.
    """
    x, y, w, h = bbox
    x1 = max(0, round_half_up(x))
    y1 = max(0, round_half_up(y))
    x2 = min(int(width), round_half_up(x + w))
    y2 = min(int(height), round_half_up(y + h))
    if x2 <= x1 or y2 <= y1:
        return None
    return x1, y1, x2 - x1, y2 - y1


def round_points(points: np.ndarray) -> Tuple[Point, ...]:
    """Round landmark coordinates half up to whole pixels, preserving their order."""
    return tuple((round_half_up(px), round_half_up(py)) for px, py in np.asarray(points).reshape(-1, 2))
