"""Unit tests for the gallery and its builder."""

from __future__ import annotations

import json
import threading
import time

import numpy as np
import pytest

from facematch.errors import EmptyGalleryError, SampleDetectError, SampleFetchError
from facematch.gallery import (
    UNKNOWN_LABEL,
    Gallery,
    GalleryBuilder,
    LabeledDescriptorSet,
    default_gallery_source,
    load_gallery_source,
)

from tests.fakes import FakeAnalyzer, FakeImageSource, make_descriptor, make_detection


class ScriptedAnalyzer(FakeAnalyzer):
    """Fake analyzer that answers by locator through the image source."""

    def __init__(self, image_source: FakeImageSource, faces: dict, errors=()):
        super().__init__()
        self.image_source = image_source
        self.by_locator = faces
        self.errors = set(errors)

    def detect_single_face(self, image_bgr):
        locator = self.image_source.locators.get(id(image_bgr))
        if locator in self.errors:
            raise RuntimeError("model exploded")
        descriptor = self.by_locator.get(locator)
        return None if descriptor is None else make_detection(descriptor)


def test_labeled_set_requires_descriptors():
    with pytest.raises(ValueError, match="at least one"):
        LabeledDescriptorSet("Nobody", ())


def test_labeled_set_descriptors_are_read_only():
    source = make_descriptor(0)
    labeled = LabeledDescriptorSet("Alice", (source,))

    with pytest.raises(ValueError):
        labeled.descriptors[0][0] = 5.0

    # The caller's array is copied, not frozen in place
    source[0] = 2.0
    assert labeled.descriptors[0][0] == 1.0


def test_labeled_set_rejects_mixed_dimensions():
    with pytest.raises(ValueError, match="mixed dimensions"):
        LabeledDescriptorSet("Alice", (make_descriptor(0), make_descriptor(0, dim=64)))


def test_gallery_rejects_duplicate_labels():
    with pytest.raises(ValueError, match="Duplicate"):
        Gallery(
            [
                LabeledDescriptorSet("Alice", (make_descriptor(0),)),
                LabeledDescriptorSet("Alice", (make_descriptor(1),)),
            ]
        )


def test_gallery_rejects_unknown_label():
    with pytest.raises(ValueError, match="reserved"):
        Gallery(
            [
                LabeledDescriptorSet("Alice", (make_descriptor(0),)),
                LabeledDescriptorSet(UNKNOWN_LABEL, (make_descriptor(1),)),
            ]
        )


def test_gallery_accessors(gallery):
    assert gallery.labels == ["Alice", "Bob", "Carol"]
    assert len(gallery) == 3
    assert gallery.num_descriptors == 4
    assert gallery.dimension == 128
    assert "Bob" in gallery
    assert "Dave" not in gallery
    assert len(gallery["Alice"]) == 2
    with pytest.raises(KeyError):
        gallery["Dave"]


def test_save_and_load(gallery, tmp_path):
    path = tmp_path / "models" / "gallery.pkl"
    labels_path = tmp_path / "models" / "labels.json"

    gallery.save(path, labels_path)

    assert path.exists()
    assert json.loads(labels_path.read_text()) == ["Alice", "Bob", "Carol"]

    loaded = Gallery.load(path)

    assert loaded.labels == gallery.labels
    for original, restored in zip(gallery, loaded):
        assert len(original) == len(restored)
        for a, b in zip(original.descriptors, restored.descriptors):
            np.testing.assert_array_equal(a, b)


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Gallery.load(tmp_path / "missing.pkl")


def test_save_empty_gallery_raises(tmp_path):
    with pytest.raises(EmptyGalleryError):
        Gallery([]).save(tmp_path / "gallery.pkl")


def test_default_gallery_source():
    source = default_gallery_source("https://host/labeled_images/", ["Thor", "Hawkeye"], 2)

    assert source == {
        "Thor": ["https://host/labeled_images/Thor/1.jpg", "https://host/labeled_images/Thor/2.jpg"],
        "Hawkeye": [
            "https://host/labeled_images/Hawkeye/1.jpg",
            "https://host/labeled_images/Hawkeye/2.jpg",
        ],
    }


def test_load_gallery_source(tmp_path):
    path = tmp_path / "gallery.json"
    path.write_text(json.dumps({"Thor": ["a.jpg", "b.jpg"], "Hawkeye": ["c.jpg"]}))

    assert load_gallery_source(path) == {"Thor": ["a.jpg", "b.jpg"], "Hawkeye": ["c.jpg"]}


def test_load_gallery_source_rejects_bad_shape(tmp_path):
    path = tmp_path / "gallery.json"
    path.write_text(json.dumps({"Thor": "a.jpg"}))

    with pytest.raises(ValueError, match="must be a list"):
        load_gallery_source(path)


def test_build_keeps_source_order():
    images = FakeImageSource()
    analyzer = ScriptedAnalyzer(
        images,
        {
            "c1": make_descriptor(2),
            "a1": make_descriptor(0),
            "a2": make_descriptor(0, 0.9),
            "b1": make_descriptor(1),
        },
    )
    builder = GalleryBuilder(analyzer, images, max_workers=3)

    gallery = builder.build({"Carol": ["c1"], "Alice": ["a1", "a2"], "Bob": ["b1"]})

    assert gallery.labels == ["Carol", "Alice", "Bob"]
    np.testing.assert_array_equal(gallery["Alice"].descriptors[0], make_descriptor(0))
    np.testing.assert_array_equal(gallery["Alice"].descriptors[1], make_descriptor(0, 0.9))
    assert builder.failures == []


def test_build_omits_label_with_no_valid_samples():
    """{A: 2 valid, B: 0 valid} yields a gallery containing only A."""
    images = FakeImageSource(broken={"b1"})
    analyzer = ScriptedAnalyzer(images, {"a1": make_descriptor(0), "a2": make_descriptor(0, 0.9)})
    builder = GalleryBuilder(analyzer, images)

    gallery = builder.build({"A": ["a1", "a2"], "B": ["b1", "b2"]})

    assert gallery.labels == ["A"]
    assert len(gallery["A"]) == 2
    assert all(len(labeled) > 0 for labeled in gallery)


def test_build_skips_failed_samples_independently():
    images = FakeImageSource(broken={"a2"})
    analyzer = ScriptedAnalyzer(
        images,
        {"a1": make_descriptor(0), "b1": make_descriptor(1), "b2": make_descriptor(1, 0.9)},
        errors={"b2"},
    )
    builder = GalleryBuilder(analyzer, images)

    gallery = builder.build({"A": ["a1", "a2", "a3"], "B": ["b1", "b2"]})

    assert len(gallery["A"]) == 1
    assert len(gallery["B"]) == 1

    kinds = {(type(f), f.locator) for f in builder.failures}
    assert kinds == {
        (SampleFetchError, "a2"),
        (SampleDetectError, "a3"),
        (SampleDetectError, "b2"),
    }


def test_build_all_failed_raises_empty_gallery():
    images = FakeImageSource(broken={"a1"})
    analyzer = ScriptedAnalyzer(images, {})
    builder = GalleryBuilder(analyzer, images)

    with pytest.raises(EmptyGalleryError) as excinfo:
        builder.build({"A": ["a1"], "B": ["b1", "b2"]})

    assert len(excinfo.value.failures) == 3


def test_build_empty_source_raises():
    builder = GalleryBuilder(FakeAnalyzer(), FakeImageSource())

    with pytest.raises(EmptyGalleryError):
        builder.build({})


def test_build_runs_samples_concurrently():
    """Two samples wait for each other; this only finishes if they overlap."""
    barrier = threading.Barrier(2, timeout=5)

    class BarrierSource(FakeImageSource):
        def load(self, locator):
            barrier.wait()
            return super().load(locator)

    images = BarrierSource()
    analyzer = ScriptedAnalyzer(images, {"a1": make_descriptor(0), "b1": make_descriptor(1)})
    builder = GalleryBuilder(analyzer, images, max_workers=2)

    start = time.monotonic()
    gallery = builder.build({"A": ["a1"], "B": ["b1"]})

    assert gallery.labels == ["A", "B"]
    assert time.monotonic() - start < 5


def test_builder_rejects_bad_worker_count():
    with pytest.raises(ValueError):
        GalleryBuilder(FakeAnalyzer(), FakeImageSource(), max_workers=0)
