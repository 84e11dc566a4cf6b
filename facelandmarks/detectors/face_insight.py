"""InsightFace detection + landmark regression backend."""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path
from typing import List, Optional, Tuple

import cv2
import numpy as np

from facelandmarks.detectors.base import validate_image
from facelandmarks.errors import InvalidConfiguration
from facelandmarks.types import Detection

LOGGER = logging.getLogger("facelandmarks.detectors.insightface")

DEFAULT_PACK = "buffalo_l"
DEFAULT_LANDMARK_TASK = "landmark_2d_106"


def _default_providers() -> Tuple[str, ...]:
    """Choose default ONNX providers for the current platform."""
    system = platform.system()
    machine = platform.machine().lower()
    if system == "Darwin" and machine in {"arm64", "aarch64"}:
        return ("CoreMLExecutionProvider", "CPUExecutionProvider")
    return ("CPUExecutionProvider",)


def _to_bgr(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 1:
        return cv2.cvtColor(image[:, :, 0], cv2.COLOR_GRAY2BGR)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    return image


class InsightFaceLandmarkDetector:
    """Face detector plus landmark model, both served by InsightFace.

    With no ``model_path`` the ``buffalo_l`` pack supplies both the detector
    and its 106-point landmark model. With a ``model_path`` the pack only
    supplies the detector and the landmarks come from that ONNX file.
    The loaded sessions are read-only after construction, so one instance can
    serve several sequences concurrently.
    """

    def __init__(
        self,
        model_path: Optional[str] = None,
        providers: Optional[Tuple[str, ...]] = None,
        det_size: Tuple[int, int] = (640, 640),
        det_thresh: float = 0.5,
    ) -> None:
        os.environ.setdefault("OMP_NUM_THREADS", "2")
        os.environ.setdefault("MKL_NUM_THREADS", "2")
        os.environ.setdefault("ORT_INTRA_OP_NUM_THREADS", "2")
        try:
            from insightface.app import FaceAnalysis
            from insightface.model_zoo import get_model
        except ImportError as exc:  # pragma: no cover - import guard
            raise InvalidConfiguration(
                "insightface is required for InsightFaceLandmarkDetector. "
                "Install it via `pip install insightface`."
            ) from exc

        if model_path is not None and not Path(model_path).expanduser().is_file():
            raise InvalidConfiguration(f"Landmark model file not found: {model_path}")

        self.model_path = model_path
        self.det_size = det_size
        self.det_thresh = det_thresh
        self.providers = _default_providers() if providers is None else tuple(providers)

        modules = ["detection"] if model_path else ["detection", DEFAULT_LANDMARK_TASK]
        try:
            self.app = FaceAnalysis(name=DEFAULT_PACK, allowed_modules=modules, providers=list(self.providers))
            self.app.prepare(ctx_id=0, det_thresh=det_thresh, det_size=det_size)
        except Exception as exc:
            raise InvalidConfiguration(f"Unable to load face detector pack {DEFAULT_PACK}: {exc}") from exc

        self.landmark_model = None
        self.landmark_task = DEFAULT_LANDMARK_TASK
        if model_path:
            resolved = str(Path(model_path).expanduser())
            try:
                model = get_model(resolved, providers=list(self.providers))
            except Exception as exc:
                raise InvalidConfiguration(f"Unable to load landmark model {resolved}: {exc}") from exc
            taskname = getattr(model, "taskname", "") if model is not None else ""
            if not taskname.startswith("landmark"):
                raise InvalidConfiguration(f"{resolved} is not a landmark model (task={taskname or None})")
            model.prepare(ctx_id=0)
            self.landmark_model = model
            self.landmark_task = taskname

        LOGGER.info(
            "Loaded InsightFace detector pack=%s landmarks=%s det_size=%s det_thresh=%.2f providers=%s",
            DEFAULT_PACK,
            model_path or self.landmark_task,
            det_size,
            det_thresh,
            self.providers,
        )

    def detect(self, image: np.ndarray) -> List[Detection]:
        """Run detection and landmark regression on a BGR or grayscale image."""
        bgr = _to_bgr(validate_image(image))
        faces = self.app.get(bgr)
        detections: List[Detection] = []
        for face in faces:
            if self.landmark_model is not None:
                self.landmark_model.get(bgr, face)
            points = face.get(self.landmark_task)
            if points is None:
                points = face.kps
            landmarks = (
                np.asarray(points, dtype=np.float32)[:, :2] if points is not None else np.zeros((0, 2), np.float32)
            )
            x1, y1, x2, y2 = (float(v) for v in face.bbox)
            detections.append(
                Detection(
                    bbox=(x1, y1, x2 - x1, y2 - y1),
                    landmarks=landmarks,
                    score=float(face.det_score),
                )
            )
        LOGGER.debug("Detected %d faces in %sx%s image", len(detections), bgr.shape[1], bgr.shape[0])
        return detections
