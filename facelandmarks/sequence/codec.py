"""Read and write frame sequences as self-describing JSON or YAML documents.

Document layout::

    format: facelandmarks.sequence
    version: 1
    frames:
      - {id, width, height, faces: [{id, bbox: [x, y, w, h], landmarks: [[x, y], ...]}]}

Nothing about the detector or landmark model is stored, so a file can be
loaded by a sequence configured with any model.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import yaml

from facelandmarks.errors import IOFailure
from facelandmarks.io_utils import atomic_write_text
from facelandmarks.types import Face, Frame

LOGGER = logging.getLogger("facelandmarks.sequence.codec")

FORMAT_TAG = "facelandmarks.sequence"
FORMAT_VERSION = 1
YAML_SUFFIXES = {".yaml", ".yml"}

PathLike = Union[str, Path]


def face_to_dict(face: Face) -> Dict[str, Any]:
    return {
        "id": face.id,
        "bbox": list(face.bbox),
        "landmarks": [[x, y] for x, y in face.landmarks],
    }


def frame_to_dict(frame: Frame) -> Dict[str, Any]:
    return {
        "id": frame.id,
        "width": frame.width,
        "height": frame.height,
        "faces": [face_to_dict(face) for face in frame.faces],
    }


def encode_frames(frames: Sequence[Frame]) -> Dict[str, Any]:
    return {
        "format": FORMAT_TAG,
        "version": FORMAT_VERSION,
        "frames": [frame_to_dict(frame) for frame in frames],
    }


def _require_int(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise IOFailure(f"{where}: expected integer, got {value!r}")
    return value


def _require_list(value: Any, where: str) -> List[Any]:
    if not isinstance(value, list):
        raise IOFailure(f"{where}: expected list, got {type(value).__name__}")
    return value


def _require_dict(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise IOFailure(f"{where}: expected mapping, got {type(value).__name__}")
    return value


def _field(record: Dict[str, Any], key: str, where: str) -> Any:
    if key not in record:
        raise IOFailure(f"{where}: missing field '{key}'")
    return record[key]


def face_from_dict(raw: Any, where: str) -> Face:
    record = _require_dict(raw, where)
    face_id = _require_int(_field(record, "id", where), f"{where}.id")
    if face_id < 0:
        raise IOFailure(f"{where}.id: face id must be non-negative, got {face_id}")
    bbox = _require_list(_field(record, "bbox", where), f"{where}.bbox")
    if len(bbox) != 4:
        raise IOFailure(f"{where}.bbox: expected 4 values, got {len(bbox)}")
    x, y, w, h = (_require_int(v, f"{where}.bbox") for v in bbox)
    if w <= 0 or h <= 0:
        raise IOFailure(f"{where}.bbox: width and height must be positive, got {w}x{h}")
    landmarks = []
    for idx, point in enumerate(_require_list(_field(record, "landmarks", where), f"{where}.landmarks")):
        point = _require_list(point, f"{where}.landmarks[{idx}]")
        if len(point) != 2:
            raise IOFailure(f"{where}.landmarks[{idx}]: expected an (x, y) pair")
        landmarks.append(tuple(_require_int(v, f"{where}.landmarks[{idx}]") for v in point))
    return Face(
        id=face_id,
        bbox=(x, y, w, h),
        landmarks=tuple(landmarks),  # type: ignore[arg-type]
    )


def frame_from_dict(raw: Any, where: str) -> Frame:
    record = _require_dict(raw, where)
    width = _require_int(_field(record, "width", where), f"{where}.width")
    height = _require_int(_field(record, "height", where), f"{where}.height")
    if width <= 0 or height <= 0:
        raise IOFailure(f"{where}: frame dimensions must be positive, got {width}x{height}")
    faces = _require_list(_field(record, "faces", where), f"{where}.faces")
    return Frame(
        id=_require_int(_field(record, "id", where), f"{where}.id"),
        width=width,
        height=height,
        faces=tuple(face_from_dict(face, f"{where}.faces[{idx}]") for idx, face in enumerate(faces)),
    )


def decode_frames(payload: Any) -> List[Frame]:
    """Validate a decoded document and build its frames, all or nothing."""
    document = _require_dict(payload, "document")
    if document.get("format") != FORMAT_TAG:
        raise IOFailure(f"Not a face sequence document (format={document.get('format')!r})")
    version = document.get("version")
    if version != FORMAT_VERSION:
        raise IOFailure(f"Unsupported face sequence version {version!r}")
    frames = _require_list(_field(document, "frames", "document"), "frames")
    return [frame_from_dict(frame, f"frames[{idx}]") for idx, frame in enumerate(frames)]


def save_sequence(path: PathLike, frames: Sequence[Frame]) -> Path:
    """Write ``frames`` to ``path``, replacing any existing file atomically."""
    target = Path(path)
    payload = encode_frames(frames)
    if target.suffix.lower() in YAML_SUFFIXES:
        text = yaml.safe_dump(payload, sort_keys=False)
    else:
        text = json.dumps(payload, indent=2)
    try:
        atomic_write_text(target, text)
    except OSError as exc:
        raise IOFailure(f"Unable to write face sequence to {target}: {exc}") from exc
    LOGGER.info("Saved %d frames to %s", len(frames), target)
    return target


def load_sequence(path: PathLike) -> List[Frame]:
    """Read and validate a sequence file written by ``save_sequence``."""
    source = Path(path)
    try:
        with source.open("r", encoding="utf-8") as fh:
            if source.suffix.lower() in YAML_SUFFIXES:
                payload = yaml.safe_load(fh)
            else:
                payload = json.load(fh)
    except OSError as exc:
        raise IOFailure(f"Unable to read face sequence {source}: {exc}") from exc
    except (ValueError, yaml.YAMLError) as exc:
        raise IOFailure(f"Failed to parse {source}: {exc}") from exc
    frames = decode_frames(payload)
    LOGGER.info("Loaded %d frames from %s", len(frames), source)
    return frames
