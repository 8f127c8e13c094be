"""Fakes shared by the test suite."""

from __future__ import annotations

from typing import Dict, Optional

import numpy as np

from facematch.errors import ImageFetchError

from facematch.interfaces import BBox, FaceDetection


def make_descriptor(axis: int, scale: float = 1.0, dim: int = 128) -> np.ndarray:
    """Descriptor pointing along one axis; different axes are sqrt(2) apart at scale 1."""
    descriptor = np.zeros(dim, dtype=np.float32)
    descriptor[axis] = scale
    return descriptor


def make_detection(descriptor: np.ndarray, x: int = 10) -> FaceDetection:
    return FaceDetection(bbox=BBox(x, 10, x + 80, 90), descriptor=descriptor)


class FakeImageSource:
    """Returns a distinct image per locator; locators in ``broken`` fail."""

    def __init__(self, broken=()):
        self.broken = set(broken)
        self.images: Dict[str, np.ndarray] = {}
        self.locators: Dict[int, str] = {}

    def load(self, locator: str) -> np.ndarray:
        if locator in self.broken:
            raise ImageFetchError(locator, "404 Not Found")
        image = np.zeros((120, 160, 3), dtype=np.uint8)
        self.images[locator] = image
        self.locators[id(image)] = locator
        return image


class FakeAnalyzer:
    """Analyzer keyed by image identity; unknown images contain no face."""

    def __init__(self):
        self.faces: Dict[int, list] = {}

    def register(self, image: np.ndarray, *detections: FaceDetection) -> None:
        self.faces[id(image)] = list(detections)

    def detect_all_faces(self, image_bgr: np.ndarray):
        return list(self.faces.get(id(image_bgr), []))

    def detect_single_face(self, image_bgr: np.ndarray) -> Optional[FaceDetection]:
        faces = self.detect_all_faces(image_bgr)
        return faces[0] if faces else None
