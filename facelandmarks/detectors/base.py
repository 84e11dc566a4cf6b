"""Detector contract shared by the controller and the concrete backends."""

from __future__ import annotations

from typing import Any, Callable, List, Protocol, Sequence, runtime_checkable

import numpy as np

from facelandmarks.errors import InvalidInput
from facelandmarks.types import Detection

SUPPORTED_DTYPES = (np.uint8, np.uint16, np.float32, np.float64)


@runtime_checkable
class FaceLandmarkDetector(Protocol):
    """Anything that turns an image into face boxes with landmark points.

    Implementations must not keep per-call mutable state: one instance is
    shared by every clone of a sequence and may be called from several
    threads at once.
    """

    def detect(self, image: np.ndarray) -> List[Detection]:
        ...


class CallableDetector:
    """Adapts a plain ``detect(image) -> [(bbox, landmarks), ...]`` function."""

    def __init__(self, func: Callable[[np.ndarray], Sequence[Any]]) -> None:
        self.func = func

    def detect(self, image: np.ndarray) -> List[Detection]:
        return [Detection.from_raw(raw) for raw in self.func(image)]


def as_detector(obj: Any) -> FaceLandmarkDetector:
    """Return ``obj`` if it already has ``detect``, else wrap it as a callable."""
    if hasattr(obj, "detect"):
        return obj
    if callable(obj):
        return CallableDetector(obj)
    raise TypeError(f"Object of type {type(obj)} is not a face landmark detector")


def validate_image(image: Any) -> np.ndarray:
    """Check that ``image`` is a non-empty 1, 3 or 4 channel buffer of a pixel type OpenCV can resize."""
    if image is None:
        raise InvalidInput("Frame image is None")
    array = np.asarray(image)
    if array.ndim not in (2, 3):
        raise InvalidInput(f"Frame image must be 2D or 3D, got shape {array.shape}")
    if array.shape[0] == 0 or array.shape[1] == 0:
        raise InvalidInput(f"Frame image has zero dimensions: {array.shape}")
    if array.ndim == 3 and array.shape[2] not in (1, 3, 4):
        raise InvalidInput(f"Unsupported channel count {array.shape[2]}")
    if array.dtype not in SUPPORTED_DTYPES:
        raise InvalidInput(f"Unsupported pixel type {array.dtype}")
    return array
