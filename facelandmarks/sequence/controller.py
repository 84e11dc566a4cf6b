"""Face landmarks over a sequence of frames: detection, tracking, storage."""

from __future__ import annotations

import abc
import functools
import logging
import threading
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, Union

import cv2
import numpy as np

from facelandmarks.config import SequenceConfig, validate_frame_scale, validate_iou_threshold
from facelandmarks.detectors.base import FaceLandmarkDetector, as_detector, validate_image
from facelandmarks.sequence.codec import load_sequence, save_sequence
from facelandmarks.sequence.store import FrameSequence, SequenceView
from facelandmarks.tracking import DEFAULT_IOU_THRESHOLD, FaceTracker, TrackedDetection, TrackerState
from facelandmarks.types import Detection, Frame, round_bbox, round_half_up, round_points

LOGGER = logging.getLogger("facelandmarks.sequence")

DetectorFactory = Callable[[Optional[str]], Any]
PathLike = Union[str, Path]


def _default_detector_factory(model_path: Optional[str]) -> FaceLandmarkDetector:
    from facelandmarks.detectors.face_insight import InsightFaceLandmarkDetector

    return InsightFaceLandmarkDetector(model_path=model_path)


class SequenceFaceLandmarks(abc.ABC):
    """Face landmarks over a sequence of frames, with optional id tracking."""

    @abc.abstractmethod
    def add_frame(self, image: np.ndarray, frame_id: int = -1) -> Frame:
        """Process ``image`` [BGR or grayscale] and commit it as the next frame.

        A negative ``frame_id`` means the internal frame counter is used.
        """

    @abc.abstractmethod
    def get_sequence(self) -> SequenceView:
        """All committed frames, in order. The view follows later additions."""

    @abc.abstractmethod
    def clear(self) -> None:
        """Drop all frames and tracking state; configuration is kept."""

    @abc.abstractmethod
    def clone(self) -> "SequenceFaceLandmarks":
        """Full copy; the loaded detector and landmark model are shared."""

    @abc.abstractmethod
    def get_model(self) -> Optional[str]:
        ...

    @abc.abstractmethod
    def set_model(self, model_path: Optional[str]) -> None:
        ...

    @abc.abstractmethod
    def get_frame_scale(self) -> float:
        ...

    @abc.abstractmethod
    def set_frame_scale(self, frame_scale: float) -> None:
        ...

    @abc.abstractmethod
    def get_track_faces(self) -> bool:
        ...

    @abc.abstractmethod
    def set_track_faces(self, track_faces: bool) -> None:
        """Keep face ids consistent across frames when enabled."""

    @abc.abstractmethod
    def load(self, path: PathLike) -> None:
        """Replace the current frames with the ones stored in ``path``."""

    @abc.abstractmethod
    def save(self, path: PathLike) -> None:
        ...

    @abc.abstractmethod
    def size(self) -> int:
        ...

    def __len__(self) -> int:
        return self.size()


class LandmarkSequence(SequenceFaceLandmarks):
    """Default implementation backed by a FrameSequence and a FaceTracker.

    Every operation that changes frames or tracker state holds the instance
    lock, so frames are committed one at a time and in call order. The
    detector is the only object shared between clones.
    """

    def __init__(
        self,
        detector: Any,
        model_path: Optional[str] = None,
        frame_scale: float = 1.0,
        track_faces: bool = False,
        iou_threshold: float = DEFAULT_IOU_THRESHOLD,
        detector_factory: Optional[DetectorFactory] = None,
    ) -> None:
        self._detector = as_detector(detector)
        self._detector_factory = detector_factory or _default_detector_factory
        self._model_path = model_path
        self._frame_scale = validate_frame_scale(frame_scale)
        self._track_faces = bool(track_faces)
        self._tracker = FaceTracker(iou_threshold=validate_iou_threshold(iou_threshold))
        self._tracker_state = TrackerState()
        self._frame_counter = 0
        self._store = FrameSequence()
        self._view = self._store.view()
        self._lock = threading.RLock()

    @property
    def detector(self) -> FaceLandmarkDetector:
        return self._detector

    @property
    def iou_threshold(self) -> float:
        return self._tracker.iou_threshold

    def add_frame(self, image: np.ndarray, frame_id: Optional[int] = -1) -> Frame:
        pixels = validate_image(image)
        height, width = pixels.shape[:2]
        with self._lock:
            scale = self._frame_scale
            detections = self._detect(pixels, scale)
            tracked = self._to_frame_coords(detections, scale, width, height)

            state = self._tracker_state.copy()
            faces = self._tracker.track(state, tracked, enabled=self._track_faces)

            counter = self._frame_counter
            if frame_id is None or frame_id < 0:
                frame_id = counter
                counter += 1
            frame = Frame(id=int(frame_id), width=int(width), height=int(height), faces=tuple(faces))

            self._store.append(frame)
            self._tracker_state = state
            self._frame_counter = counter
        LOGGER.debug(
            "Committed frame id=%d size=%dx%d faces=%s",
            frame.id,
            width,
            height,
            list(frame.face_ids),
        )
        return frame

    def _detect(self, pixels: np.ndarray, scale: float) -> List[Detection]:
        if scale != 1.0:
            height, width = pixels.shape[:2]
            dsize = (max(1, round_half_up(width * scale)), max(1, round_half_up(height * scale)))
            pixels = cv2.resize(pixels, dsize, interpolation=cv2.INTER_LINEAR)
        return [Detection.from_raw(raw) for raw in self._detector.detect(pixels)]

    @staticmethod
    def _to_frame_coords(
        detections: Sequence[Detection],
        scale: float,
        width: int,
        height: int,
    ) -> List[TrackedDetection]:
        """Map detections back to the caller's pixels, clamped to the image."""
        tracked: List[TrackedDetection] = []
        for det in detections:
            original = det.scaled(scale) if scale != 1.0 else det
            bbox = round_bbox(original.bbox, width, height)
            if bbox is None:
                LOGGER.debug("Dropping detection outside the image: %s", original.bbox)
                continue
            tracked.append(TrackedDetection(bbox=bbox, landmarks=round_points(original.landmarks)))
        return tracked

    def get_sequence(self) -> SequenceView:
        return self._view

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._tracker_state.reset()
            self._frame_counter = 0
        LOGGER.debug("Cleared sequence")

    def clone(self) -> "LandmarkSequence":
        with self._lock:
            other = LandmarkSequence(
                self._detector,
                model_path=self._model_path,
                frame_scale=self._frame_scale,
                track_faces=self._track_faces,
                iou_threshold=self.iou_threshold,
                detector_factory=self._detector_factory,
            )
            other._store = self._store.copy()
            other._view = other._store.view()
            other._tracker_state = self._tracker_state.copy()
            other._frame_counter = self._frame_counter
        return other

    def get_model(self) -> Optional[str]:
        return self._model_path

    def set_model(self, model_path: Optional[str]) -> None:
        detector = as_detector(self._detector_factory(model_path))
        with self._lock:
            self._detector = detector
            self._model_path = model_path
        LOGGER.info("Landmark model set to %s", model_path or "built-in default")

    def get_frame_scale(self) -> float:
        return self._frame_scale

    def set_frame_scale(self, frame_scale: float) -> None:
        scale = validate_frame_scale(frame_scale)
        with self._lock:
            self._frame_scale = scale

    def get_track_faces(self) -> bool:
        return self._track_faces

    def set_track_faces(self, track_faces: bool) -> None:
        with self._lock:
            self._track_faces = bool(track_faces)

    def load(self, path: PathLike) -> None:
        frames = load_sequence(path)
        with self._lock:
            self._store.replace(frames)
            face_ids = [face.id for frame in frames for face in frame.faces]
            self._tracker_state = TrackerState(
                last_faces=frames[-1].faces if frames else (),
                next_id=max(face_ids) + 1 if face_ids else 0,
            )
            self._frame_counter = max([0] + [frame.id + 1 for frame in frames])

    def save(self, path: PathLike) -> None:
        with self._lock:
            frames = list(self._store)
        save_sequence(path, frames)

    def size(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return (
            f"LandmarkSequence(frames={len(self)}, model={self._model_path!r}, "
            f"frame_scale={self._frame_scale}, track_faces={self._track_faces})"
        )


def create(
    model_path: Optional[str] = None,
    frame_scale: float = 1.0,
    track_faces: bool = False,
    *,
    detector: Any = None,
    detector_factory: Optional[DetectorFactory] = None,
    iou_threshold: float = DEFAULT_IOU_THRESHOLD,
) -> SequenceFaceLandmarks:
    """Build a sequence with the given landmark model, or the built-in one.

    ``frame_scale`` resizes each frame before detection, which helps with
    small faces; landmarks are still reported in the original frame's pixels.
    ``detector`` skips model loading and uses the given object (anything with
    ``detect(image)``, or a plain function) instead.
    """
    scale = validate_frame_scale(frame_scale)
    threshold = validate_iou_threshold(iou_threshold)
    factory = detector_factory or _default_detector_factory
    if detector is None:
        detector = factory(model_path)
    sequence = LandmarkSequence(
        detector,
        model_path=model_path,
        frame_scale=scale,
        track_faces=track_faces,
        iou_threshold=threshold,
        detector_factory=factory,
    )
    LOGGER.info(
        "Created landmark sequence model=%s frame_scale=%.3f track_faces=%s iou_threshold=%.2f",
        model_path or "built-in default",
        scale,
        track_faces,
        threshold,
    )
    return sequence


def create_from_config(config: SequenceConfig, detector: Any = None) -> SequenceFaceLandmarks:
    """Build a sequence (and, unless given, its InsightFace detector) from settings."""
    from facelandmarks.detectors.face_insight import InsightFaceLandmarkDetector

    factory = functools.partial(
        InsightFaceLandmarkDetector,
        providers=config.providers,
        det_size=config.det_size,
        det_thresh=config.det_thresh,
    )
    return create(
        config.model_path,
        config.frame_scale,
        config.track_faces,
        detector=detector,
        detector_factory=factory,
        iou_threshold=config.iou_threshold,
    )
