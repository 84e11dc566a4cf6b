"""Frame sequence storage, persistence and the sequence controller."""

from facelandmarks.sequence.controller import (
    LandmarkSequence,
    SequenceFaceLandmarks,
    create,
    create_from_config,
)
from facelandmarks.sequence.store import FrameSequence, SequenceView

__all__ = [
    "FrameSequence",
    "LandmarkSequence",
    "SequenceFaceLandmarks",
    "SequenceView",
    "create",
    "create_from_config",
]
