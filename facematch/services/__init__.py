"""High-level services for the face matching pipeline.

This package contains the services that orchestrate detection and
matching for query images.
"""

from facematch.services.recognition import FaceRecognition, RecognitionService
from facematch.services.session import QueryOutcome, RecognitionSession

__all__ = [
    "FaceRecognition",
    "RecognitionService",
    "QueryOutcome",
    "RecognitionSession",
]
