"""Core interfaces and data structures for the face matching pipeline.

This module defines the abstract interfaces (Protocols) for the external
collaborators of the pipeline (inference backend, image loading, rendering)
and the data classes exchanged with them.

Components depend on these abstractions rather than on concrete
implementations, so the backend can be swapped and tests can use fakes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Tuple, runtime_checkable

import numpy as np

# 68-point landmarks grouped by facial feature, e.g. {"chin": [(x, y), ...]}
Landmarks = Dict[str, List[Tuple[int, int]]]


@dataclass(frozen=True)
class BBox:
    """Bounding box for a detected face.

    Attributes:
        x1: Left edge x-coordinate (pixels)
        y1: Top edge y-coordinate (pixels)
        x2: Right edge x-coordinate (pixels)
        y2: Bottom edge y-coordinate (pixels)
    """

    x1: int
    y1: int
    x2: int
    y2: int

    @classmethod
    def from_css(cls, location: Tuple[int, int, int, int]) -> BBox:
        """Create a box from a (top, right, bottom, left) tuple."""
        top, right, bottom, left = location
        return cls(x1=int(left), y1=int(top), x2=int(right), y2=int(bottom))

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    @property
    def area(self) -> int:
        return self.width * self.height

    def clamp(self, img_width: int, img_height: int) -> BBox:
        """Clamp bounding box coordinates to image boundaries.

        Args:
            img_width: Image width in pixels
            img_height: Image height in pixels

        Returns:
            New BBox with clamped coordinates.
        """
        return BBox(
            x1=max(0, min(self.x1, img_width - 1)),
            y1=max(0, min(self.y1, img_height - 1)),
            x2=max(0, min(self.x2, img_width - 1)),
            y2=max(0, min(self.y2, img_height - 1)),
        )


@dataclass
class FaceDetection:
    """One detected face with its landmarks and identity descriptor.

    Attributes:
        bbox: Bounding box around the face
        descriptor: 128-D identity embedding, dtype float32
        landmarks: Facial landmarks grouped by feature (may be empty)
    """

    bbox: BBox
    descriptor: np.ndarray
    landmarks: Landmarks = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.descriptor, np.ndarray):
            raise TypeError(
                f"descriptor must be numpy array, got {type(self.descriptor)}"
            )
        if self.descriptor.ndim != 1:
            raise ValueError(
                f"descriptor must be 1-D, got shape {self.descriptor.shape}"
            )

    def __repr__(self) -> str:
        return (
            f"FaceDetection(bbox={self.bbox}, "
            f"descriptor=array{self.descriptor.shape}, "
            f"landmarks={len(self.landmarks)} features)"
        )


@runtime_checkable
class FaceAnalyzer(Protocol):
    """Protocol for the detection + landmarks + descriptor backend."""

    def detect_all_faces(self, image_bgr: np.ndarray) -> List[FaceDetection]:
        """Detect every face in an image and describe each one.

        Args:
            image_bgr: Input image in BGR format, shape [H, W, 3]

        Returns:
            One FaceDetection per face found. May be empty.
        """
        ...

    def detect_single_face(self, image_bgr: np.ndarray) -> Optional[FaceDetection]:
        """Detect the most prominent face in an image.

        Args:
            image_bgr: Input image in BGR format, shape [H, W, 3]

        Returns:
            FaceDetection for the selected face, or None if no face was found.
        """
        ...


@runtime_checkable
class ImageLoader(Protocol):
    """Protocol for anything that turns a locator into decoded pixels."""

    def load(self, locator: str) -> np.ndarray:
        """Load an image.

        Args:
            locator: URL or filesystem path

        Returns:
            Decoded BGR image, shape [H, W, 3], dtype uint8.

        Raises:
            ImageFetchError: If the image cannot be fetched or decoded.
        """
        ...


@runtime_checkable
class RenderSurface(Protocol):
    """Protocol for a surface that receives face box drawing commands."""

    def clear(self) -> None:
        """Remove everything drawn so far."""
        ...

    def draw_box(self, bbox: BBox, label: str, known: bool = True) -> None:
        """Draw a labeled rectangle.

        Args:
            bbox: Box in pixel coordinates of the surface
            label: Text drawn with the box
            known: Whether the face matched a gallery identity
        """
        ...
