"""Drawing utilities for visualizing recognition results.

This module provides functions to draw labeled face boxes on images, and
``CanvasSurface``, an OpenCV implementation of the ``RenderSurface``
protocol that owns a drawable copy of one query image.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence, Tuple

import cv2
import numpy as np

from facematch.interfaces import BBox, RenderSurface

if TYPE_CHECKING:
    from facematch.services.recognition import FaceRecognition

# Color palette (BGR format for OpenCV)
COLOR_GREEN = (0, 255, 0)
COLOR_RED = (0, 0, 255)
COLOR_WHITE = (255, 255, 255)
COLOR_BLACK = (0, 0, 0)

NO_FACES_MESSAGE = "No faces recognized."


def draw_bbox(
    frame: np.ndarray,
    bbox: BBox,
    color: Tuple[int, int, int] = COLOR_GREEN,
    thickness: int = 2,
) -> None:
    """Draw bounding box on frame (in-place).

    Args:
        frame: Image to draw on (modified in-place)
        bbox: Bounding box to draw
        color: BGR color tuple (default: green)
        thickness: Line thickness in pixels
    """
    cv2.rectangle(frame, (bbox.x1, bbox.y1), (bbox.x2, bbox.y2), color, thickness)


def draw_text(
    frame: np.ndarray,
    text: str,
    position: Tuple[int, int],
    color: Tuple[int, int, int] = COLOR_WHITE,
    font_scale: float = 0.6,
    thickness: int = 2,
    bg_color: Optional[Tuple[int, int, int]] = None,
) -> None:
    """Draw text with optional background on frame (in-place).

    Args:
        frame: Image to draw on (modified in-place)
        text: Text string to draw
        position: (x, y) position for bottom-left corner of text
        color: Text color in BGR (default: white)
        font_scale: Font size scale factor
        thickness: Text thickness in pixels
        bg_color: Optional background color for text box (BGR)
    """
    font = cv2.FONT_HERSHEY_SIMPLEX
    x, y = position

    if bg_color is not None:
        (text_width, text_height), baseline = cv2.getTextSize(
            text, font, font_scale, thickness
        )
        cv2.rectangle(
            frame,
            (x, y - text_height - baseline),
            (x + text_width, y + baseline),
            bg_color,
            -1,  # Filled rectangle
        )

    cv2.putText(frame, text, (x, y), font, font_scale, color, thickness, cv2.LINE_AA)


def draw_label(
    frame: np.ndarray,
    bbox: BBox,
    text: str,
    bg_color: Tuple[int, int, int] = COLOR_GREEN,
    text_color: Tuple[int, int, int] = COLOR_WHITE,
    font_scale: float = 0.6,
    thickness: int = 2,
) -> None:
    """Draw label text above bounding box (in-place).

    The label moves below the box when there is no room above it.
    """
    x = bbox.x1
    y = bbox.y1 - 10

    if y < 20:
        y = bbox.y2 + 20

    draw_text(
        frame,
        text,
        (x, y),
        color=text_color,
        font_scale=font_scale,
        thickness=thickness,
        bg_color=bg_color,
    )


class CanvasSurface:
    """Drawable copy of a query image.

    The source image is never modified; ``clear`` restores the copy to it.

    Attributes:
        image: Current annotated image (BGR)

    Example:
        >>> surface = CanvasSurface(frame)
        >>> surface.draw_box(BBox(10, 10, 90, 90), "Thor (0.41)")
        >>> cv2.imwrite("out.jpg", surface.image)
    """

    def __init__(self, image: np.ndarray, thickness: int = 2):
        self._base = image.copy()
        self.image = image.copy()
        self.thickness = thickness
        self.num_boxes = 0

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) of the surface."""
        h, w = self._base.shape[:2]
        return (w, h)

    def clear(self) -> None:
        self.image = self._base.copy()
        self.num_boxes = 0

    def draw_box(self, bbox: BBox, label: str, known: bool = True) -> None:
        color = COLOR_GREEN if known else COLOR_RED
        box = bbox.clamp(*self.size)
        draw_bbox(self.image, box, color=color, thickness=self.thickness)
        draw_label(self.image, box, label, bg_color=color)
        self.num_boxes += 1

    def __repr__(self) -> str:
        w, h = self.size
        return f"CanvasSurface({w}x{h}, boxes={self.num_boxes})"


def render_results(surface: RenderSurface, results: Sequence[FaceRecognition]) -> None:
    """Clear the surface, then draw one labeled box per recognized face."""
    surface.clear()
    for result in results:
        surface.draw_box(
            result.detection.bbox,
            str(result.match),
            known=result.match.is_known,
        )


def format_summary(results: Sequence[FaceRecognition]) -> str:
    """Summary line listing every face label with its distance.

    Example:
        >>> format_summary(results)
        'Recognized Faces: Thor (0.41), unknown (0.72)'
    """
    if not results:
        return NO_FACES_MESSAGE
    return "Recognized Faces: " + ", ".join(str(r.match) for r in results)
