"""Inference backends for the face matching pipeline.

Backends are imported lazily through the factory so that a missing or
broken model package surfaces as ``ModelLoadError`` at initialization.
"""

from facematch.backends.factory import BackendType, create_analyzer

__all__ = [
    "create_analyzer",
    "BackendType",
]
