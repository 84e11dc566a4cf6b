"""Exceptions raised by the facelandmarks package."""

from __future__ import annotations


class FaceLandmarksError(Exception):
    """Base class for all package errors."""


class InvalidConfiguration(FaceLandmarksError, ValueError):
    """Bad frame scale, or a landmark model that is missing or cannot be loaded."""


class InvalidInput(FaceLandmarksError, ValueError):
    """A frame image that is empty, has zero dimensions or an unsupported shape."""


class IOFailure(FaceLandmarksError, RuntimeError):
    """A sequence file that cannot be read, written or parsed."""
