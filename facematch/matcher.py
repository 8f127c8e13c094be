"""Nearest-descriptor matching against a labeled gallery.

The query is compared with every individual gallery descriptor using
Euclidean distance. The closest descriptor decides the label; if it is
farther than the threshold the face is reported as unknown.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from facematch.errors import EmptyGalleryError
from facematch.gallery import UNKNOWN_LABEL, Gallery
from facematch.logging_config import get_logger

logger = get_logger(__name__)

# Default tolerance of the dlib ResNet descriptor space
DEFAULT_THRESHOLD = 0.6


@dataclass(frozen=True)
class MatchResult:
    """Best match for one query descriptor.

    Attributes:
        label: Matched identity, or ``UNKNOWN_LABEL``
        distance: Distance to the nearest gallery descriptor
    """

    label: str
    distance: float

    @property
    def is_known(self) -> bool:
        return self.label != UNKNOWN_LABEL

    def __str__(self) -> str:
        return f"{self.label} ({self.distance:.2f})"


class FaceMatcher:
    """Matches descriptors against a gallery by Euclidean distance.

    The gallery is flattened once into a descriptor matrix and a parallel
    list of owning labels, both in gallery iteration order. When several
    descriptors are at the same minimum distance, the first one in that
    order wins.

    Attributes:
        gallery: Gallery matched against
        threshold: Maximum distance for a match (inclusive)

    Example:
        >>> matcher = FaceMatcher(gallery, threshold=0.6)
        >>> result = matcher.find_best_match(query)
        >>> print(result)
        Thor (0.41)
    """

    def __init__(self, gallery: Gallery, threshold: float = DEFAULT_THRESHOLD):
        if threshold < 0.0:
            raise ValueError(f"Threshold must be >= 0, got {threshold}")
        if len(gallery) == 0:
            raise EmptyGalleryError()

        self.gallery = gallery
        self.threshold = threshold

        encodings: List[np.ndarray] = []
        self._names: List[str] = []
        for labeled in gallery:
            for descriptor in labeled.descriptors:
                encodings.append(descriptor)
                self._names.append(labeled.label)

        self._encodings = np.stack(encodings, axis=0)
        self._encodings.setflags(write=False)
        self.dimension = self._encodings.shape[1]

        logger.debug(
            f"Initialized FaceMatcher with {len(self._names)} descriptors, "
            f"threshold={threshold}"
        )

    def distances(self, descriptor: np.ndarray) -> np.ndarray:
        """Distances from ``descriptor`` to every gallery descriptor, in gallery order.

        Raises:
            ValueError: If the descriptor dimension doesn't match the gallery.
        """
        query = np.asarray(descriptor, dtype=np.float32).reshape(-1)
        if query.shape[0] != self.dimension:
            raise ValueError(
                f"Expected descriptor dimension {self.dimension}, got {query.shape[0]}"
            )
        return np.linalg.norm(self._encodings - query, axis=1)

    def find_best_match(self, descriptor: np.ndarray) -> MatchResult:
        """Return the closest gallery label, or unknown if beyond the threshold."""
        distances = self.distances(descriptor)

        # argmin returns the first index on ties
        best_idx = int(np.argmin(distances))
        best_distance = float(distances[best_idx])
        best_label = self._names[best_idx]

        if best_distance <= self.threshold:
            result = MatchResult(best_label, best_distance)
        else:
            result = MatchResult(UNKNOWN_LABEL, best_distance)

        logger.debug(
            f"Best match: {best_label} at {best_distance:.3f} "
            f"(threshold={self.threshold:.2f}) -> {result.label}"
        )
        return result

    def match_all(self, descriptors: Sequence[np.ndarray]) -> List[MatchResult]:
        """Match several descriptors, preserving their order."""
        return [self.find_best_match(d) for d in descriptors]

    def __repr__(self) -> str:
        return (
            f"FaceMatcher(threshold={self.threshold}, "
            f"descriptors={len(self._names)}, labels={len(self.gallery)})"
        )
