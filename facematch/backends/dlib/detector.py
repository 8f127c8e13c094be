"""Dlib face detector using face_recognition library.

This module provides a face detector based on dlib's HOG or CNN models
via the face_recognition library, returning face boxes together with
68-point landmarks.
"""

from __future__ import annotations

from typing import List, Literal, Tuple

import face_recognition
import numpy as np

from facematch.interfaces import Landmarks
from facematch.logging_config import get_logger

logger = get_logger(__name__)


class DlibDetector:
    """Face detector using dlib via the face_recognition library.

    Supports two detection models:
    - HOG: Faster, suitable for CPU, less accurate
    - CNN: More accurate, requires GPU for real-time performance

    Attributes:
        model: Detection model ("hog" or "cnn")
        upsample: Number of times to upsample image (higher = detect smaller faces)
        landmark_model: Landmark model ("large" = 68 points, "small" = 5 points)

    Example:
        >>> detector = DlibDetector(model="hog")
        >>> locations = detector.locate(image_rgb)
        >>> landmarks = detector.landmarks(image_rgb, locations)
    """

    def __init__(
        self,
        model: Literal["hog", "cnn"] = "hog",
        upsample: int = 1,
        landmark_model: Literal["large", "small"] = "large",
    ):
        if model not in ("hog", "cnn"):
            raise ValueError(f"model must be 'hog' or 'cnn', got '{model}'")
        if landmark_model not in ("large", "small"):
            raise ValueError(
                f"landmark_model must be 'large' or 'small', got '{landmark_model}'"
            )
        if upsample < 0:
            raise ValueError(f"upsample must be >= 0, got {upsample}")

        self.model = model
        self.upsample = upsample
        self.landmark_model = landmark_model

        logger.info(f"Initialized dlib detector (model={model}, upsample={upsample})")

    def locate(self, image_rgb: np.ndarray) -> List[Tuple[int, int, int, int]]:
        """Return face locations as (top, right, bottom, left) tuples."""
        return face_recognition.face_locations(
            image_rgb,
            number_of_times_to_upsample=self.upsample,
            model=self.model,
        )

    def landmarks(
        self,
        image_rgb: np.ndarray,
        locations: List[Tuple[int, int, int, int]],
    ) -> List[Landmarks]:
        """Return landmarks for each location, grouped by facial feature."""
        if not locations:
            return []
        return face_recognition.face_landmarks(
            image_rgb,
            face_locations=locations,
            model=self.landmark_model,
        )

    def __repr__(self) -> str:
        return f"DlibDetector(model='{self.model}', upsample={self.upsample})"
