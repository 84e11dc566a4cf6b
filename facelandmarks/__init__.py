"""
Face landmarks over a sequence of video frames, with face id tracking.

Typical use::

    from facelandmarks import create

    sequence = create(track_faces=True)
    for image in frames:
        sequence.add_frame(image)
    sequence.save("faces.json")
"""

from facelandmarks.errors import InvalidConfiguration, InvalidInput, IOFailure
from facelandmarks.sequence import LandmarkSequence, SequenceFaceLandmarks, create, create_from_config
from facelandmarks.types import Detection, Face, Frame

__all__ = [
    "Detection",
    "Face",
    "Frame",
    "IOFailure",
    "InvalidConfiguration",
    "InvalidInput",
    "LandmarkSequence",
    "SequenceFaceLandmarks",
    "create",
    "create_from_config",
]
