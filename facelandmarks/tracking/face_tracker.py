"""Greedy IoU tracker that carries face ids from one frame to the next."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from facelandmarks.types import BBox, Face, Point, iou, landmark_centroid

LOGGER = logging.getLogger("facelandmarks.tracking.face")

DEFAULT_IOU_THRESHOLD = 0.3


@dataclass
class TrackedDetection:
    """A detection already mapped to the caller's pixel space, waiting for an id."""

    bbox: BBox
    landmarks: Tuple[Point, ...] = ()


@dataclass
class TrackerState:
    """Faces of the last committed frame and the next face id to hand out."""

    last_faces: Tuple[Face, ...] = ()
    next_id: int = 0

    def allocate_id(self) -> int:
        face_id = self.next_id
        self.next_id += 1
        return face_id

    def reset(self, start_id: int = 0) -> None:
        self.last_faces = ()
        self.next_id = start_id

    def copy(self) -> "TrackerState":
        return TrackerState(last_faces=tuple(self.last_faces), next_id=self.next_id)


@dataclass
class _Candidate:
    affinity: float
    distance: float
    prev_id: int
    det_idx: int

    def sort_key(self) -> Tuple[float, float, int, int]:
        return (-self.affinity, self.distance, self.prev_id, self.det_idx)


@dataclass
class FaceTracker:
    """Assigns ids to detections by greedily matching them to the previous frame.

    Pairs are ranked by IoU (highest first), then by landmark centroid
    distance, then by the previous face id, and a pair is only accepted while
    its IoU is strictly above ``iou_threshold``. Previous faces that find no
    match are retired for good; a face that reappears later gets a new id.
    """

    iou_threshold: float = DEFAULT_IOU_THRESHOLD

    def assign(self, previous: Sequence[Face], detections: Sequence[TrackedDetection]) -> Dict[int, int]:
        """Return ``{detection index: previous face id}`` for the matched pairs."""
        if not previous or not detections:
            return {}

        det_centroids = [landmark_centroid(det.landmarks, det.bbox) for det in detections]
        candidates: List[_Candidate] = []
        for face in previous:
            prev_centroid = landmark_centroid(face.landmarks, face.bbox)
            for det_idx, det in enumerate(detections):
                affinity = iou(face.bbox, det.bbox)
                if affinity <= self.iou_threshold:
                    continue
                cx, cy = det_centroids[det_idx]
                distance = math.hypot(cx - prev_centroid[0], cy - prev_centroid[1])
                candidates.append(_Candidate(affinity, distance, face.id, det_idx))

        candidates.sort(key=_Candidate.sort_key)
        matches: Dict[int, int] = {}
        used_prev = set()
        for cand in candidates:
            if cand.det_idx in matches or cand.prev_id in used_prev:
                continue
            matches[cand.det_idx] = cand.prev_id
            used_prev.add(cand.prev_id)
        return matches

    def track(
        self,
        state: TrackerState,
        detections: Sequence[TrackedDetection],
        enabled: bool = True,
    ) -> List[Face]:
        """Produce the faces of the next frame and advance ``state`` in place."""
        matches = self.assign(state.last_faces, detections) if enabled else {}

        faces: List[Face] = []
        for det_idx, det in enumerate(detections):
            face_id = matches.get(det_idx)
            if face_id is None:
                face_id = state.allocate_id()
            faces.append(Face(id=face_id, bbox=det.bbox, landmarks=tuple(det.landmarks)))

        dropped = len(state.last_faces) - len(matches)
        LOGGER.debug(
            "Tracked %d faces: matched=%d new=%d dropped=%d next_id=%d",
            len(faces),
            len(matches),
            len(detections) - len(matches),
            dropped,
            state.next_id,
        )
        state.last_faces = tuple(faces)
        return faces
