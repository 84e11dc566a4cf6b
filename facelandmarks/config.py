"""Settings for building a landmark sequence from YAML config or CLI flags."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from facelandmarks.errors import InvalidConfiguration
from facelandmarks.io_utils import load_yaml
from facelandmarks.tracking import DEFAULT_IOU_THRESHOLD

LOGGER = logging.getLogger("facelandmarks.config")


def validate_frame_scale(value: Any) -> float:
    """Return ``value`` as a float, rejecting anything not strictly positive."""
    try:
        scale = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"Frame scale must be a number, got {value!r}") from exc
    if not math.isfinite(scale) or scale <= 0:
        raise InvalidConfiguration(f"Frame scale must be > 0, got {value!r}")
    return scale


def validate_iou_threshold(value: Any) -> float:
    """Return ``value`` as a float in ``[0, 1)``.

    Below zero, boxes that do not overlap at all would count as matches.
    """
    try:
        threshold = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"IoU threshold must be a number, got {value!r}") from exc
    if not 0.0 <= threshold < 1.0:
        raise InvalidConfiguration(f"IoU threshold must be in [0, 1), got {value!r}")
    return threshold


@dataclass
class SequenceConfig:
    model_path: Optional[str] = None
    frame_scale: float = 1.0
    track_faces: bool = False
    iou_threshold: float = DEFAULT_IOU_THRESHOLD
    # Detector backend
    det_size: Tuple[int, int] = (640, 640)
    det_thresh: float = 0.5
    providers: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        self.frame_scale = validate_frame_scale(self.frame_scale)
        self.iou_threshold = validate_iou_threshold(self.iou_threshold)
        self.det_size = tuple(int(v) for v in self.det_size)  # type: ignore[assignment]
        if self.providers is not None:
            self.providers = tuple(self.providers)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SequenceConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            LOGGER.warning("Ignoring unknown config keys: %s", unknown)
        return cls(**{key: value for key, value in data.items() if key in known and value is not None})


def load_config(path: Path, overrides: Optional[Dict[str, Any]] = None) -> SequenceConfig:
    """Read a YAML config; non-None ``overrides`` (usually CLI flags) win."""
    data = load_yaml(path) if path.exists() else {}
    if not path.exists():
        LOGGER.info("Config %s not found; using defaults", path)
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    return SequenceConfig.from_dict(data)
