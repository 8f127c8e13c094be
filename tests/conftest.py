"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest

from facematch.gallery import Gallery, LabeledDescriptorSet

from tests.fakes import make_descriptor


@pytest.fixture
def gallery():
    """Gallery with three identities on separate axes; Alice has two samples."""
    return Gallery(
        [
            LabeledDescriptorSet("Alice", (make_descriptor(0), make_descriptor(0, 0.8))),
            LabeledDescriptorSet("Bob", (make_descriptor(1),)),
            LabeledDescriptorSet("Carol", (make_descriptor(2),)),
        ]
    )
