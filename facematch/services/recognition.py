"""Recognition service for face identification in images.

This module combines the analyzer and the matcher: faces are detected and
described in one batched call per image, then every descriptor is matched
against the gallery. Results are positionally aligned with the detections.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from facematch.errors import ImageFetchError, QueryDetectError
from facematch.interfaces import FaceAnalyzer, FaceDetection, ImageLoader
from facematch.logging_config import get_logger
from facematch.matcher import FaceMatcher, MatchResult

logger = get_logger(__name__)


@dataclass(frozen=True)
class FaceRecognition:
    """Recognition result for a single detected face.

    Attributes:
        detection: Detected face (box, landmarks, descriptor)
        match: Best gallery match, or unknown
    """

    detection: FaceDetection
    match: MatchResult

    @property
    def label(self) -> str:
        return self.match.label

    @property
    def is_known(self) -> bool:
        return self.match.is_known

    def __repr__(self) -> str:
        return f"FaceRecognition(bbox={self.detection.bbox}, match='{self.match}')"


class RecognitionService:
    """Service for recognizing every face in a query image.

    The service holds no per-query state: the matcher (and the gallery
    behind it) is read-only, so one service can serve any number of queries.

    Attributes:
        analyzer: Detection + descriptor backend
        matcher: Gallery matcher

    Example:
        >>> service = RecognitionService(analyzer, FaceMatcher(gallery))
        >>> for result in service.recognize(image):
        ...     print(result.match)
        Thor (0.41)
        unknown (0.78)
    """

    def __init__(self, analyzer: FaceAnalyzer, matcher: FaceMatcher):
        self.analyzer = analyzer
        self.matcher = matcher

        logger.info(f"Initialized RecognitionService with {matcher}")

    def recognize(self, image: np.ndarray) -> List[FaceRecognition]:
        """Recognize all faces in an image.

        Args:
            image: Input image in BGR format [H, W, 3]

        Returns:
            One FaceRecognition per detected face, result[i] for detection i.
            Faces without a match within the threshold are labeled unknown.

        Raises:
            QueryDetectError: If the image is invalid, detection fails, or a
                descriptor does not fit the gallery.
        """
        if image is None or not isinstance(image, np.ndarray) or image.size == 0:
            raise QueryDetectError("Query image is empty or invalid")

        try:
            detections = self.analyzer.detect_all_faces(image)
        except Exception as e:
            logger.error(f"Face detection failed: {e}")
            raise QueryDetectError(f"Face detection failed: {e}") from e

        if not detections:
            logger.info("No faces detected")
            return []

        try:
            matches = self.matcher.match_all([d.descriptor for d in detections])
        except ValueError as e:
            logger.error(f"Face matching failed: {e}")
            raise QueryDetectError(f"Face matching failed: {e}") from e
        results = [FaceRecognition(d, m) for d, m in zip(detections, matches)]

        known = sum(1 for r in results if r.is_known)
        logger.info(f"{len(results)} face(s) detected, {known} recognized")
        return results

    def recognize_locator(self, locator: str, image_source: ImageLoader) -> List[FaceRecognition]:
        """Load an image by locator, then recognize it.

        Raises:
            QueryDetectError: If the image cannot be loaded or detection fails.
        """
        try:
            image = image_source.load(locator)
        except ImageFetchError as e:
            raise QueryDetectError(str(e)) from e
        return self.recognize(image)

    def __repr__(self) -> str:
        return f"RecognitionService(matcher={self.matcher})"
