"""Dlib embedder for face descriptor extraction using face_recognition library.

This module computes 128-dimensional identity descriptors with dlib's
ResNet-34 model via the face_recognition library.
"""

from __future__ import annotations

from typing import List, Literal, Tuple

import face_recognition
import numpy as np

from facematch.logging_config import get_logger

logger = get_logger(__name__)


class DlibEmbedder:
    """Dlib embedder for extracting 128-D face descriptors.

    This embedder uses dlib's ResNet-34 model (trained on ~3 million faces)
    to convert face regions into 128-dimensional feature vectors. Two faces
    of the same person are typically closer than 0.6 in Euclidean distance.

    Descriptors are returned as produced by the model (not re-normalized)
    so that the standard 0.6 tolerance applies.

    Attributes:
        model: Landmark model used to align the face ("large" or "small")
        num_jitters: Number of times to re-sample face for encoding
        embedding_dim: Dimension of output descriptors (128 for dlib)

    Example:
        >>> embedder = DlibEmbedder(model="large")
        >>> descriptors = embedder.embed_locations(image_rgb, [(40, 200, 180, 60)])
        >>> descriptors.shape
        (1, 128)
    """

    def __init__(
        self,
        model: Literal["large", "small"] = "large",
        num_jitters: int = 1,
    ):
        if model not in ("large", "small"):
            raise ValueError(f"model must be 'large' or 'small', got '{model}'")
        if num_jitters < 1:
            raise ValueError(f"num_jitters must be >= 1, got {num_jitters}")

        self.model = model
        self.num_jitters = num_jitters
        self.embedding_dim = 128

        logger.info(f"Initialized dlib embedder (model={model}, num_jitters={num_jitters})")

    def embed_locations(
        self,
        image_rgb: np.ndarray,
        locations: List[Tuple[int, int, int, int]],
    ) -> np.ndarray:
        """Compute one descriptor per face location.

        Args:
            image_rgb: Full image in RGB format.
            locations: Face locations as (top, right, bottom, left).

        Returns:
            Descriptor array, shape [N, 128], dtype float32, row i for locations[i].

        Raises:
            RuntimeError: If the model returns a different number of descriptors
                or an unexpected dimension.
        """
        if not locations:
            return np.zeros((0, self.embedding_dim), dtype=np.float32)

        encodings = face_recognition.face_encodings(
            image_rgb,
            known_face_locations=locations,
            num_jitters=self.num_jitters,
            model=self.model,
        )

        if len(encodings) != len(locations):
            raise RuntimeError(
                f"Expected {len(locations)} descriptors, got {len(encodings)}"
            )

        descriptors = np.asarray(encodings, dtype=np.float32)
        if descriptors.shape[1] != self.embedding_dim:
            raise RuntimeError(
                f"Unexpected embedding dimension {descriptors.shape[1]}, "
                f"expected {self.embedding_dim}"
            )
        return descriptors

    def __repr__(self) -> str:
        return (
            f"DlibEmbedder(model='{self.model}', "
            f"num_jitters={self.num_jitters}, dim={self.embedding_dim})"
        )
