"""Face identity tracking across consecutive frames."""

from facelandmarks.tracking.face_tracker import (
    DEFAULT_IOU_THRESHOLD,
    FaceTracker,
    TrackedDetection,
    TrackerState,
)

__all__ = ["DEFAULT_IOU_THRESHOLD", "FaceTracker", "TrackedDetection", "TrackerState"]
