"""Face identification by nearest-descriptor matching against a labeled gallery.

Inference backends live in ``facematch.backends`` and are loaded on demand
with ``create_analyzer``.
"""

from facematch.config import Config, get_config
from facematch.errors import (
    EmptyGalleryError,
    FaceMatchError,
    ImageFetchError,
    ModelLoadError,
    QueryDetectError,
    SampleDetectError,
    SampleError,
    SampleFetchError,
)
from facematch.gallery import (
    Gallery,
    GalleryBuilder,
    LabeledDescriptorSet,
    default_gallery_source,
    load_gallery_source,
)
from facematch.image_source import ImageSource
from facematch.interfaces import BBox, FaceAnalyzer, FaceDetection, ImageLoader, RenderSurface
from facematch.logging_config import get_logger, setup_logging
from facematch.matcher import DEFAULT_THRESHOLD, UNKNOWN_LABEL, FaceMatcher, MatchResult
from facematch.overlay import CanvasSurface, format_summary, render_results
from facematch.services import (
    FaceRecognition,
    QueryOutcome,
    RecognitionService,
    RecognitionSession,
)

__all__ = [
    # Config
    "Config",
    "get_config",
    # Errors
    "FaceMatchError",
    "ModelLoadError",
    "ImageFetchError",
    "SampleError",
    "SampleFetchError",
    "SampleDetectError",
    "EmptyGalleryError",
    "QueryDetectError",
    # Interfaces
    "BBox",
    "FaceDetection",
    "FaceAnalyzer",
    "ImageLoader",
    "RenderSurface",
    # Logging
    "setup_logging",
    "get_logger",
    # Gallery
    "Gallery",
    "GalleryBuilder",
    "LabeledDescriptorSet",
    "default_gallery_source",
    "load_gallery_source",
    # Matching
    "FaceMatcher",
    "MatchResult",
    "UNKNOWN_LABEL",
    "DEFAULT_THRESHOLD",
    # Images and rendering
    "ImageSource",
    "CanvasSurface",
    "render_results",
    "format_summary",
    # Services
    "FaceRecognition",
    "RecognitionService",
    "QueryOutcome",
    "RecognitionSession",
]
