"""Unit tests for the recognition service."""

from __future__ import annotations

from unittest.mock import Mock

import numpy as np
import pytest

from facematch.errors import ImageFetchError, QueryDetectError
from facematch.matcher import UNKNOWN_LABEL, FaceMatcher
from facematch.services.recognition import RecognitionService

from tests.fakes import FakeAnalyzer, make_descriptor, make_detection


@pytest.fixture
def analyzer():
    return FakeAnalyzer()


@pytest.fixture
def service(analyzer, gallery):
    return RecognitionService(analyzer, FaceMatcher(gallery))


@pytest.fixture
def image():
    return np.zeros((240, 320, 3), dtype=np.uint8)


def test_results_align_with_detections(service, analyzer, image):
    """Three detected faces yield exactly three results in detection order."""
    detections = [
        make_detection(make_descriptor(1), x=10),
        make_detection(make_descriptor(70), x=100),
        make_detection(make_descriptor(0), x=200),
    ]
    analyzer.register(image, *detections)

    results = service.recognize(image)

    assert len(results) == 3
    assert [r.detection for r in results] == detections
    assert [r.label for r in results] == ["Bob", UNKNOWN_LABEL, "Alice"]


def test_unknown_faces_are_kept(service, analyzer, image):
    analyzer.register(image, make_detection(make_descriptor(90)))

    results = service.recognize(image)

    assert len(results) == 1
    assert not results[0].is_known
    assert results[0].match.distance > 0.6


def test_no_faces_returns_empty_list(service, image):
    assert service.recognize(image) == []


def test_detection_is_called_once_per_image(gallery, image):
    analyzer = Mock()
    analyzer.detect_all_faces.return_value = [
        make_detection(make_descriptor(0)),
        make_detection(make_descriptor(1)),
    ]
    service = RecognitionService(analyzer, FaceMatcher(gallery))

    service.recognize(image)

    analyzer.detect_all_faces.assert_called_once_with(image)


def test_analyzer_failure_raises_query_error(gallery, image):
    analyzer = Mock()
    analyzer.detect_all_faces.side_effect = RuntimeError("CUDA out of memory")
    service = RecognitionService(analyzer, FaceMatcher(gallery))

    with pytest.raises(QueryDetectError, match="CUDA out of memory"):
        service.recognize(image)


def test_descriptor_dimension_mismatch_raises_query_error(service, analyzer, image):
    analyzer.register(image, make_detection(np.zeros(64, dtype=np.float32)))

    with pytest.raises(QueryDetectError, match="dimension"):
        service.recognize(image)


def test_failed_query_does_not_affect_next_one(gallery, image):
    analyzer = Mock()
    analyzer.detect_all_faces.side_effect = [
        RuntimeError("bad frame"),
        [make_detection(make_descriptor(2))],
    ]
    service = RecognitionService(analyzer, FaceMatcher(gallery))

    with pytest.raises(QueryDetectError):
        service.recognize(image)

    results = service.recognize(image)
    assert [r.label for r in results] == ["Carol"]
    assert service.matcher.gallery is gallery


@pytest.mark.parametrize("bad_image", [None, np.zeros((0, 0, 3), dtype=np.uint8)])
def test_invalid_image_raises_query_error(service, bad_image):
    with pytest.raises(QueryDetectError):
        service.recognize(bad_image)


def test_recognize_locator(service, analyzer, image):
    source = Mock()
    source.load.return_value = image
    analyzer.register(image, make_detection(make_descriptor(0)))

    results = service.recognize_locator("photo.jpg", source)

    source.load.assert_called_once_with("photo.jpg")
    assert [r.label for r in results] == ["Alice"]


def test_recognize_locator_fetch_error(service):
    source = Mock()
    source.load.side_effect = ImageFetchError("photo.jpg", "file not found")

    with pytest.raises(QueryDetectError, match="file not found"):
        service.recognize_locator("photo.jpg", source)
