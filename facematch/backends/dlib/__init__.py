"""dlib backend for face detection and description.

Components:
- DlibDetector: Face locations (HOG or CNN) and 68-point landmarks
- DlibEmbedder: 128-D face descriptors using ResNet-34
- DlibFaceAnalyzer: Both combined behind the FaceAnalyzer protocol
"""

from facematch.backends.dlib.analyzer import DlibFaceAnalyzer
from facematch.backends.dlib.detector import DlibDetector
from facematch.backends.dlib.embedder import DlibEmbedder

__all__ = [
    "DlibDetector",
    "DlibEmbedder",
    "DlibFaceAnalyzer",
]
