"""Face analyzer combining the dlib detector and embedder.

Implements the ``FaceAnalyzer`` protocol: one call detects every face in an
image and returns box, landmarks and descriptor for each.
"""

from __future__ import annotations

from typing import List, Optional

import cv2
import numpy as np

from facematch.backends.dlib.detector import DlibDetector
from facematch.backends.dlib.embedder import DlibEmbedder
from facematch.interfaces import BBox, FaceDetection
from facematch.logging_config import get_logger

logger = get_logger(__name__)


class DlibFaceAnalyzer:
    """Detect + landmarks + descriptor in one pass over an image.

    Attributes:
        detector: Face detector (locations and landmarks)
        embedder: Descriptor extractor

    Example:
        >>> analyzer = DlibFaceAnalyzer(DlibDetector(), DlibEmbedder())
        >>> faces = analyzer.detect_all_faces(image)
        >>> faces[0].descriptor.shape
        (128,)
    """

    def __init__(self, detector: DlibDetector, embedder: DlibEmbedder):
        self.detector = detector
        self.embedder = embedder

    def detect_all_faces(self, image_bgr: np.ndarray) -> List[FaceDetection]:
        """Detect and describe every face, in detector order."""
        if image_bgr is None or image_bgr.size == 0:
            raise ValueError("Empty image provided to analyzer")
        if image_bgr.ndim != 3 or image_bgr.shape[2] != 3:
            raise ValueError(f"Expected 3-channel image, got shape {image_bgr.shape}")

        image_rgb = cv2.cvtColor(image_bgr, cv2.COLOR_BGR2RGB)
        locations = self.detector.locate(image_rgb)
        if not locations:
            logger.debug("No faces detected")
            return []

        landmarks = self.detector.landmarks(image_rgb, locations)
        descriptors = self.embedder.embed_locations(image_rgb, locations)

        h, w = image_bgr.shape[:2]
        faces = [
            FaceDetection(
                bbox=BBox.from_css(loc).clamp(w, h),
                descriptor=descriptor,
                landmarks=marks,
            )
            for loc, marks, descriptor in zip(locations, landmarks, descriptors)
        ]

        logger.debug(f"Analyzed {len(faces)} face(s)")
        return faces

    def detect_single_face(self, image_bgr: np.ndarray) -> Optional[FaceDetection]:
        """Return the largest face in the image, or None if there is none."""
        faces = self.detect_all_faces(image_bgr)
        if not faces:
            return None
        if len(faces) > 1:
            logger.debug(f"{len(faces)} faces found, keeping the largest")
        return max(faces, key=lambda face: face.bbox.area)

    def __repr__(self) -> str:
        return f"DlibFaceAnalyzer(detector={self.detector}, embedder={self.embedder})"
