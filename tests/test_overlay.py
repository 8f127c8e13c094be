"""Unit tests for drawing and summaries."""

from __future__ import annotations

import numpy as np

from facematch.interfaces import BBox
from facematch.matcher import UNKNOWN_LABEL, MatchResult
from facematch.overlay import (
    COLOR_GREEN,
    COLOR_RED,
    NO_FACES_MESSAGE,
    CanvasSurface,
    format_summary,
    render_results,
)
from facematch.services.recognition import FaceRecognition

from tests.fakes import make_descriptor, make_detection


def recognition(label, distance, x=10):
    return FaceRecognition(make_detection(make_descriptor(0), x=x), MatchResult(label, distance))


def test_canvas_draws_on_copy():
    image = np.zeros((120, 160, 3), dtype=np.uint8)
    surface = CanvasSurface(image)

    surface.draw_box(BBox(40, 40, 100, 100), "Thor (0.41)")

    assert surface.num_boxes == 1
    assert surface.image.any()
    assert not image.any()


def test_canvas_colors_by_match():
    surface = CanvasSurface(np.zeros((120, 160, 3), dtype=np.uint8))

    surface.draw_box(BBox(40, 40, 100, 100), "Thor (0.41)", known=True)
    assert tuple(surface.image[100, 70]) == COLOR_GREEN

    surface.clear()
    surface.draw_box(BBox(40, 40, 100, 100), "unknown (0.80)", known=False)
    assert tuple(surface.image[100, 70]) == COLOR_RED


def test_canvas_clear_restores_image():
    image = np.full((120, 160, 3), 7, dtype=np.uint8)
    surface = CanvasSurface(image)
    surface.draw_box(BBox(10, 30, 60, 80), "Thor (0.41)")

    surface.clear()

    np.testing.assert_array_equal(surface.image, image)
    assert surface.num_boxes == 0


def test_canvas_clamps_boxes_outside_image():
    surface = CanvasSurface(np.zeros((50, 50, 3), dtype=np.uint8))

    surface.draw_box(BBox(-20, -20, 200, 200), "Thor (0.41)")

    assert surface.num_boxes == 1
    assert surface.size == (50, 50)


def test_render_results_draws_one_box_per_face():
    surface = CanvasSurface(np.zeros((120, 320, 3), dtype=np.uint8))
    results = [recognition("Thor", 0.41, x=10), recognition(UNKNOWN_LABEL, 0.8, x=150)]

    render_results(surface, results)
    render_results(surface, results)

    assert surface.num_boxes == 2


def test_format_summary():
    results = [recognition("Thor", 0.412), recognition(UNKNOWN_LABEL, 0.7251)]

    assert format_summary(results) == "Recognized Faces: Thor (0.41), unknown (0.73)"
    assert format_summary([]) == NO_FACES_MESSAGE
