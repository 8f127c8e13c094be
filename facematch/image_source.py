"""Image loading from local files and remote URLs.

Remote locators (http/https) are downloaded with ``requests`` and decoded
in memory with OpenCV; everything else is treated as a filesystem path.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import cv2
import numpy as np
import requests

from facematch.errors import ImageFetchError
from facematch.logging_config import get_logger

logger = get_logger(__name__)


def is_remote(locator: str) -> bool:
    return locator.lower().startswith(("http://", "https://"))


def decode_image(data: bytes, locator: str = "<bytes>") -> np.ndarray:
    """Decode encoded image bytes (JPEG, PNG, ...) into a BGR array.

    Raises:
        ImageFetchError: If the bytes are not a decodable image.
    """
    if not data:
        raise ImageFetchError(locator, "empty response")

    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        raise ImageFetchError(locator, "could not decode image data")
    return image


class ImageSource:
    """Loads images by locator.

    Attributes:
        timeout: Request timeout in seconds for remote locators
        session: HTTP session reused across fetches

    Example:
        >>> source = ImageSource(timeout=5)
        >>> image = source.load("https://example.com/face.jpg")
        >>> image.shape
        (480, 640, 3)
    """

    def __init__(self, timeout: float = 10.0, session: Optional[requests.Session] = None):
        if timeout <= 0:
            raise ValueError(f"timeout must be > 0, got {timeout}")

        self.timeout = timeout
        self.session = session or requests.Session()

    def load(self, locator: str) -> np.ndarray:
        """Load and decode one image.

        Raises:
            ImageFetchError: If the image cannot be fetched or decoded.
        """
        if is_remote(locator):
            return self._fetch(locator)
        return self._read(locator)

    def _fetch(self, url: str) -> np.ndarray:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise ImageFetchError(url, f"timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise ImageFetchError(url, str(e)) from e

        image = decode_image(response.content, url)
        logger.debug(f"Fetched {url} ({image.shape[1]}x{image.shape[0]})")
        return image

    def _read(self, path: str) -> np.ndarray:
        if not Path(path).exists():
            raise ImageFetchError(path, "file not found")

        image = cv2.imread(path)
        if image is None:
            raise ImageFetchError(path, "could not decode image file")

        logger.debug(f"Read {path} ({image.shape[1]}x{image.shape[0]})")
        return image

    def __repr__(self) -> str:
        return f"ImageSource(timeout={self.timeout})"
