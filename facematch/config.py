"""Configuration management for the face matching pipeline.

This module loads configuration from environment variables (.env file) and
provides a centralized Config class for accessing application settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_GALLERY_BASE_URL = (
    "https://raw.githubusercontent.com/WebDevSimplified/"
    "Face-Recognition-JavaScript/master/labeled_images"
)

DEFAULT_GALLERY_LABELS = [
    "Black Widow",
    "Captain America",
    "Captain Marvel",
    "Hawkeye",
    "Jim Rhodes",
    "Thor",
    "Tony Stark",
]


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    Attributes:
        thresh: Maximum Euclidean distance for two descriptors to match
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        detector_model: dlib detector ("hog" or "cnn")
        upsample: Number of times to upsample images before detection
        embedder_model: Landmark model used for encoding ("large" or "small")
        num_jitters: Number of re-samples when computing a descriptor
        gallery_base_url: Root URL of the labeled sample images
        gallery_labels: Identities to load from ``gallery_base_url``
        samples_per_label: Number of sample images per identity
        gallery_manifest: Optional JSON file mapping label -> image locators
        gallery_workers: Thread pool size for gallery construction
        fetch_timeout: Timeout in seconds for remote image fetches
    """

    thresh: float
    log_level: str
    detector_model: str
    upsample: int
    embedder_model: str
    num_jitters: int
    gallery_base_url: str
    gallery_labels: List[str]
    samples_per_label: int
    gallery_manifest: Optional[Path]
    gallery_workers: int
    fetch_timeout: float

    # Paths
    models_dir: Path
    gallery_path: Path

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables.

        Returns:
            Config instance with values from environment or defaults.

        Raises:
            ValueError: If environment variables hold invalid values.
        """
        project_root = Path(__file__).parent.parent

        # Recognition threshold (distance, lower = stricter)
        thresh = float(os.getenv("THRESH", "0.6"))
        if thresh < 0.0:
            raise ValueError(f"THRESH must be >= 0.0, got {thresh}")

        # Logging configuration
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if log_level not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got {log_level}")

        # Model configuration
        detector_model = os.getenv("DETECTOR_MODEL", "hog").lower()
        if detector_model not in ("hog", "cnn"):
            raise ValueError(f"DETECTOR_MODEL must be 'hog' or 'cnn', got {detector_model}")

        upsample = int(os.getenv("UPSAMPLE", "1"))
        if upsample < 0:
            raise ValueError(f"UPSAMPLE must be >= 0, got {upsample}")

        embedder_model = os.getenv("EMBEDDER_MODEL", "large").lower()
        if embedder_model not in ("large", "small"):
            raise ValueError(
                f"EMBEDDER_MODEL must be 'large' or 'small', got {embedder_model}"
            )

        num_jitters = int(os.getenv("NUM_JITTERS", "1"))
        if num_jitters < 1:
            raise ValueError(f"NUM_JITTERS must be >= 1, got {num_jitters}")

        # Gallery source
        gallery_base_url = os.getenv("GALLERY_BASE_URL", DEFAULT_GALLERY_BASE_URL).rstrip("/")

        labels_env = os.getenv("GALLERY_LABELS")
        if labels_env:
            gallery_labels = [label.strip() for label in labels_env.split(",") if label.strip()]
        else:
            gallery_labels = list(DEFAULT_GALLERY_LABELS)
        if not gallery_labels:
            raise ValueError("GALLERY_LABELS must name at least one label")

        samples_per_label = int(os.getenv("SAMPLES_PER_LABEL", "2"))
        if samples_per_label < 1:
            raise ValueError(f"SAMPLES_PER_LABEL must be >= 1, got {samples_per_label}")

        manifest_env = os.getenv("GALLERY_MANIFEST")
        gallery_manifest = Path(manifest_env) if manifest_env else None

        gallery_workers = int(os.getenv("GALLERY_WORKERS", "4"))
        if gallery_workers < 1:
            raise ValueError(f"GALLERY_WORKERS must be >= 1, got {gallery_workers}")

        fetch_timeout = float(os.getenv("FETCH_TIMEOUT", "10"))
        if fetch_timeout <= 0:
            raise ValueError(f"FETCH_TIMEOUT must be > 0, got {fetch_timeout}")

        # Paths
        models_dir = project_root / "models"
        gallery_path = models_dir / "gallery.pkl"

        return cls(
            thresh=thresh,
            log_level=log_level,
            detector_model=detector_model,
            upsample=upsample,
            embedder_model=embedder_model,
            num_jitters=num_jitters,
            gallery_base_url=gallery_base_url,
            gallery_labels=gallery_labels,
            samples_per_label=samples_per_label,
            gallery_manifest=gallery_manifest,
            gallery_workers=gallery_workers,
            fetch_timeout=fetch_timeout,
            models_dir=models_dir,
            gallery_path=gallery_path,
        )

    def __repr__(self) -> str:
        """Return string representation of config."""
        return (
            f"Config(\n"
            f"  Threshold: {self.thresh},\n"
            f"  Log Level: {self.log_level},\n"
            f"  Detector: {self.detector_model} (upsample={self.upsample}),\n"
            f"  Embedder: {self.embedder_model} (jitters={self.num_jitters}),\n"
            f"  Gallery: {len(self.gallery_labels)} labels x {self.samples_per_label} samples,\n"
            f"  Manifest: {self.gallery_manifest or 'none'},\n"
            f"  Workers: {self.gallery_workers},\n"
            f"  Fetch Timeout: {self.fetch_timeout}s\n"
            f")"
        )


# Global config instance (lazy-loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get global config instance (singleton pattern).

    Returns:
        Config instance loaded from environment.
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config
