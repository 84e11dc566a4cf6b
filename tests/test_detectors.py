import numpy as np
import pytest

from facelandmarks import InvalidConfiguration, InvalidInput
from facelandmarks.detectors import CallableDetector, as_detector, validate_image
from facelandmarks.types import Detection


def test_callable_detector_normalizes_tuples():
    detector = CallableDetector(lambda image: [((1, 2, 3, 4), [(5, 6), (7, 8)])])

    (det,) = detector.detect(np.zeros((10, 10, 3), dtype=np.uint8))

    assert det.bbox == (1.0, 2.0, 3.0, 4.0)
    assert det.landmarks.shape == (2, 2)
    assert det.landmarks[1].tolist() == [7.0, 8.0]


def test_as_detector_keeps_objects_with_detect():
    class _Detector:
        def detect(self, image):
            return []

    detector = _Detector()
    assert as_detector(detector) is detector


def test_as_detector_rejects_other_objects():
    with pytest.raises(TypeError):
        as_detector(42)


def test_detection_scaled_divides_all_coordinates():
    det = Detection(bbox=(10, 20, 30, 40), landmarks=np.array([[10.0, 20.0]]), score=0.9)

    scaled = det.scaled(2.0)

    assert scaled.bbox == (5.0, 10.0, 15.0, 20.0)
    assert scaled.landmarks.tolist() == [[5.0, 10.0]]
    assert scaled.score == 0.9


def test_validate_image_accepts_supported_shapes():
    for shape in [(4, 5), (4, 5, 1), (4, 5, 3), (4, 5, 4)]:
        assert validate_image(np.zeros(shape, dtype=np.uint8)).shape == shape


def test_validate_image_rejects_empty():
    with pytest.raises(InvalidInput):
        validate_image(np.zeros((0, 5, 3), dtype=np.uint8))


def test_insightface_detector_rejects_missing_model(tmp_path):
    pytest.importorskip("insightface")
    from facelandmarks.detectors.face_insight import InsightFaceLandmarkDetector

    with pytest.raises(InvalidConfiguration):
        InsightFaceLandmarkDetector(model_path=str(tmp_path / "missing.onnx"))
