from __future__ import annotations


class DetectionError(RuntimeError):
    """
    Base class for errors that make a single image's detections unusable.

    The caller decides whether to skip the image or abort the whole batch.
    """


class ShapeMismatch(DetectionError, ValueError):
    """Model output does not follow the `[1, 4 + C, A]` attribute layout."""


class ModelContractViolation(DetectionError):
    """Model declares no fixed input resolution and no fallback was configured."""
