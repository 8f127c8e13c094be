"""Error types raised by the face matching pipeline.

Gallery-time sample errors are recoverable and only collected; the
all-failed case surfaces as ``EmptyGalleryError``. Query-time errors are
isolated to the image they were raised for.
"""

from __future__ import annotations

from typing import Sequence


class FaceMatchError(Exception):
    """Base class for all pipeline errors."""


class ModelLoadError(FaceMatchError):
    """The inference backend could not be imported or initialized."""


class ImageFetchError(FaceMatchError):
    """An image could not be fetched or decoded."""

    def __init__(self, locator: str, reason: str):
        self.locator = locator
        self.reason = reason
        super().__init__(f"Failed to load image '{locator}': {reason}")


class SampleError(FaceMatchError):
    """A gallery sample produced no descriptor."""

    def __init__(self, label: str, locator: str, reason: str):
        self.label = label
        self.locator = locator
        self.reason = reason
        super().__init__(f"{label}: sample '{locator}' skipped ({reason})")


class SampleFetchError(SampleError):
    """The sample image could not be fetched or decoded."""


class SampleDetectError(SampleError):
    """No face was found in the sample, or extraction failed."""


class EmptyGalleryError(FaceMatchError):
    """No identity yielded a single descriptor."""

    def __init__(self, failures: Sequence[SampleError] = ()):
        self.failures = list(failures)
        message = "Gallery is empty: no identity yielded a face descriptor"
        if self.failures:
            message += f" ({len(self.failures)} sample(s) failed)"
        super().__init__(message)


class QueryDetectError(FaceMatchError):
    """Face detection failed for a query image."""
