"""Backend factory for the face matching pipeline.

This module creates the ``FaceAnalyzer`` used for both gallery construction
and query detection. Backend modules are imported here, not at package
import time, so model loading happens exactly once and its failure can be
reported as ``ModelLoadError``.

Usage:
    analyzer = create_analyzer(config)
    analyzer = create_analyzer(config, backend_type="dlib")
"""

from __future__ import annotations

from typing import Literal

from facematch.config import Config
from facematch.errors import ModelLoadError
from facematch.interfaces import FaceAnalyzer
from facematch.logging_config import get_logger

logger = get_logger(__name__)

BackendType = Literal["dlib"]


def create_analyzer(
    config: Config | None = None,
    backend_type: BackendType = "dlib",
) -> FaceAnalyzer:
    """Create and initialize a face analyzer.

    Args:
        config: Configuration object. If None, loads from .env
        backend_type: Backend to use (only "dlib" is available)

    Returns:
        Initialized FaceAnalyzer.

    Raises:
        ModelLoadError: If the backend cannot be imported or initialized.
        ValueError: If the backend type is unknown.
    """
    if config is None:
        from facematch.config import get_config

        config = get_config()

    if backend_type == "dlib":
        return _create_dlib_analyzer(config)

    raise ValueError(f"Unknown backend: '{backend_type}'. Supported backends: 'dlib'")


def _create_dlib_analyzer(config: Config) -> FaceAnalyzer:
    """Create the dlib analyzer.

    Uses:
    - dlib HOG or CNN detector (via face_recognition)
    - 68-point (or 5-point) landmark predictor
    - dlib ResNet-34 embedder (128-D descriptors)
    """
    logger.info(f"Loading dlib backend (detector={config.detector_model})...")

    try:
        from facematch.backends.dlib import DlibDetector, DlibEmbedder, DlibFaceAnalyzer
    # face_recognition calls quit() when its model package is missing
    except (ImportError, RuntimeError, SystemExit) as e:
        raise ModelLoadError(f"Failed to load dlib models: {e}") from e

    try:
        detector = DlibDetector(
            model=config.detector_model,
            upsample=config.upsample,
            landmark_model=config.embedder_model,
        )
        embedder = DlibEmbedder(
            model=config.embedder_model,
            num_jitters=config.num_jitters,
        )
    except (ValueError, RuntimeError) as e:
        raise ModelLoadError(f"Failed to initialize dlib backend: {e}") from e

    logger.info("dlib backend loaded successfully")
    return DlibFaceAnalyzer(detector, embedder)
