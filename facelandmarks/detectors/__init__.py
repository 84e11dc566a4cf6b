"""Face detection and landmark backends."""

from facelandmarks.detectors.base import CallableDetector, FaceLandmarkDetector, as_detector, validate_image

__all__ = ["CallableDetector", "FaceLandmarkDetector", "as_detector", "validate_image"]
