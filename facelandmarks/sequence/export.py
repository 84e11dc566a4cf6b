"""Flatten a face sequence into a table for offline analysis."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Sequence, Union

import pandas as pd

from facelandmarks.errors import IOFailure
from facelandmarks.types import Frame

LOGGER = logging.getLogger("facelandmarks.sequence.export")

COLUMNS = [
    "frame_index",
    "frame_id",
    "width",
    "height",
    "face_id",
    "x",
    "y",
    "w",
    "h",
    "num_landmarks",
    "landmarks",
]


def frames_to_dataframe(frames: Sequence[Frame]) -> pd.DataFrame:
    """One row per face; landmarks are flattened to ``[x0, y0, x1, y1, ...]``."""
    rows: List[Dict] = []
    for frame_index, frame in enumerate(frames):
        for face in frame.faces:
            x, y, w, h = face.bbox
            rows.append(
                {
                    "frame_index": frame_index,
                    "frame_id": frame.id,
                    "width": frame.width,
                    "height": frame.height,
                    "face_id": face.id,
                    "x": x,
                    "y": y,
                    "w": w,
                    "h": h,
                    "num_landmarks": face.num_landmarks,
                    "landmarks": [coord for point in face.landmarks for coord in point],
                }
            )
    return pd.DataFrame(rows, columns=COLUMNS)


def track_summary(frames: Sequence[Frame]) -> pd.DataFrame:
    """Per face id: first/last frame index and how many frames it appears in."""
    df = frames_to_dataframe(frames)
    if df.empty:
        return pd.DataFrame(columns=["face_id", "first_frame", "last_frame", "frames"])
    summary = (
        df.groupby("face_id")["frame_index"]
        .agg(first_frame="min", last_frame="max", frames="count")
        .reset_index()
    )
    return summary


def export_table(path: Union[str, Path], frames: Sequence[Frame]) -> Path:
    """Write the per-face table as ``.csv`` or ``.parquet`` depending on the suffix."""
    target = Path(path)
    df = frames_to_dataframe(frames)
    suffix = target.suffix.lower()
    try:
        if suffix == ".parquet":
            df.to_parquet(target, index=False)
        elif suffix == ".csv":
            df = df.assign(landmarks=df["landmarks"].map(lambda pts: " ".join(str(v) for v in pts)))
            df.to_csv(target, index=False)
        else:
            raise IOFailure(f"Unsupported table format '{suffix}' (use .csv or .parquet)")
    except OSError as exc:
        raise IOFailure(f"Unable to write table {target}: {exc}") from exc
    LOGGER.info("Exported %d face rows to %s", len(df), target)
    return target
