"""Labeled descriptor gallery and its builder.

The gallery is built once from labeled sample images and is read-only
afterwards. Building fans out one task per sample; a sample that cannot be
fetched or that contains no face is skipped without affecting the others.
"""

from __future__ import annotations

import json
import pickle
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from facematch.errors import (
    EmptyGalleryError,
    ImageFetchError,
    SampleDetectError,
    SampleError,
    SampleFetchError,
)
from facematch.interfaces import FaceAnalyzer, ImageLoader
from facematch.logging_config import get_logger

logger = get_logger(__name__)

# Reserved for faces without a match; never a gallery identity
UNKNOWN_LABEL = "unknown"

GallerySource = Mapping[str, Sequence[str]]


def _freeze(descriptor: np.ndarray) -> np.ndarray:
    """Return a read-only float32 copy of a descriptor."""
    frozen = np.array(descriptor, dtype=np.float32).reshape(-1)
    frozen.setflags(write=False)
    return frozen


@dataclass(frozen=True)
class LabeledDescriptorSet:
    """All reference descriptors of one identity.

    Attributes:
        label: Identity name
        descriptors: One or more descriptors, in sample order
    """

    label: str
    descriptors: Tuple[np.ndarray, ...]

    def __post_init__(self) -> None:
        if not self.descriptors:
            raise ValueError(f"'{self.label}' needs at least one descriptor")

        frozen = tuple(_freeze(d) for d in self.descriptors)
        dims = {d.shape[0] for d in frozen}
        if len(dims) != 1:
            raise ValueError(
                f"'{self.label}' has descriptors of mixed dimensions: {sorted(dims)}"
            )
        object.__setattr__(self, "descriptors", frozen)

    @property
    def dimension(self) -> int:
        return self.descriptors[0].shape[0]

    def __len__(self) -> int:
        return len(self.descriptors)

    def __repr__(self) -> str:
        return f"LabeledDescriptorSet(label='{self.label}', descriptors={len(self)})"


class Gallery:
    """Immutable, ordered set of known identities.

    Iteration follows the order in which the sets were given, which is the
    order of the gallery source mapping when built by ``GalleryBuilder``.

    Example:
        >>> gallery = Gallery([LabeledDescriptorSet("Thor", (d1, d2))])
        >>> gallery.labels
        ['Thor']
    """

    def __init__(self, sets: Sequence[LabeledDescriptorSet] = ()):
        sets = tuple(sets)

        duplicates = [label for label, n in Counter(s.label for s in sets).items() if n > 1]
        if duplicates:
            raise ValueError(f"Duplicate labels in gallery: {duplicates}")

        if any(s.label == UNKNOWN_LABEL for s in sets):
            raise ValueError(f"'{UNKNOWN_LABEL}' is reserved and cannot be a gallery label")

        dims = {s.dimension for s in sets}
        if len(dims) > 1:
            raise ValueError(f"Gallery mixes descriptor dimensions: {sorted(dims)}")

        self._sets: Tuple[LabeledDescriptorSet, ...] = sets

    @property
    def labels(self) -> List[str]:
        return [s.label for s in self._sets]

    @property
    def num_descriptors(self) -> int:
        return sum(len(s) for s in self._sets)

    @property
    def dimension(self) -> Optional[int]:
        """Descriptor dimension, or None for an empty gallery."""
        return self._sets[0].dimension if self._sets else None

    def __iter__(self) -> Iterator[LabeledDescriptorSet]:
        return iter(self._sets)

    def __len__(self) -> int:
        return len(self._sets)

    def __contains__(self, label: object) -> bool:
        return any(s.label == label for s in self._sets)

    def __getitem__(self, label: str) -> LabeledDescriptorSet:
        for s in self._sets:
            if s.label == label:
                return s
        raise KeyError(label)

    def save(
        self,
        path: Union[str, Path],
        labels_path: Union[str, Path, None] = None,
    ) -> None:
        """Save the gallery as a pickle of parallel encodings/names lists.

        Args:
            path: Output pickle file
            labels_path: Optional JSON file receiving the label list

        Raises:
            EmptyGalleryError: If the gallery holds no identity.
        """
        if not self._sets:
            raise EmptyGalleryError()

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {"encodings": [], "names": []}
        for labeled in self._sets:
            for descriptor in labeled.descriptors:
                data["encodings"].append(np.array(descriptor))
                data["names"].append(labeled.label)

        with open(path, "wb") as f:
            pickle.dump(data, f)

        logger.info(
            f"Saved {len(data['encodings'])} descriptors for "
            f"{len(self._sets)} labels to {path}"
        )

        if labels_path is not None:
            labels_path = Path(labels_path)
            labels_path.parent.mkdir(parents=True, exist_ok=True)
            with open(labels_path, "w") as f:
                json.dump(self.labels, f, indent=2)
            logger.info(f"Saved {len(self._sets)} labels to {labels_path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> Gallery:
        """Load a gallery written by ``save``.

        Label order is the order of first appearance in the file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            EmptyGalleryError: If the file holds no descriptors.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Gallery file not found: {path}")

        with open(path, "rb") as f:
            data = pickle.load(f)

        grouped: Dict[str, List[np.ndarray]] = {}
        for encoding, name in zip(data["encodings"], data["names"]):
            grouped.setdefault(name, []).append(encoding)

        if not grouped:
            raise EmptyGalleryError()

        gallery = cls(
            [LabeledDescriptorSet(label, tuple(descs)) for label, descs in grouped.items()]
        )
        logger.info(f"Loaded {gallery!r} from {path}")
        return gallery

    def __repr__(self) -> str:
        return f"Gallery(labels={len(self)}, descriptors={self.num_descriptors})"


def default_gallery_source(
    base_url: str,
    labels: Sequence[str],
    samples_per_label: int = 2,
) -> Dict[str, List[str]]:
    """Build the locator mapping ``{label: [base_url/label/1.jpg, ...]}``.

    Example:
        >>> default_gallery_source("https://host/imgs", ["Thor"], 2)
        {'Thor': ['https://host/imgs/Thor/1.jpg', 'https://host/imgs/Thor/2.jpg']}
    """
    base_url = base_url.rstrip("/")
    return {
        label: [f"{base_url}/{label}/{i}.jpg" for i in range(1, samples_per_label + 1)]
        for label in labels
    }


def load_gallery_source(path: Union[str, Path]) -> Dict[str, List[str]]:
    """Read a ``{label: [locator, ...]}`` mapping from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the JSON is not a mapping of label to locator list.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Gallery manifest not found: {path}")

    with open(path) as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Gallery manifest must be a JSON object, got {type(raw).__name__}")

    source: Dict[str, List[str]] = {}
    for label, locators in raw.items():
        if isinstance(locators, str) or not isinstance(locators, list):
            raise ValueError(f"Locators for '{label}' must be a list")
        source[str(label)] = [str(loc) for loc in locators]
    return source


class GalleryBuilder:
    """Builds a ``Gallery`` from labeled sample images.

    Each (label, sample) pair is processed by an independent task: fetch the
    image, then extract a single face descriptor. Every task returns its own
    result and the results are merged in source order once all tasks are
    done, so the gallery order does not depend on completion order.

    Attributes:
        analyzer: Backend used for single-face extraction
        image_source: Loader for sample locators
        max_workers: Number of concurrent sample tasks
        failures: Samples skipped during the last ``build``

    Example:
        >>> builder = GalleryBuilder(analyzer, ImageSource(), max_workers=4)
        >>> gallery = builder.build({"Thor": ["thor/1.jpg", "thor/2.jpg"]})
    """

    def __init__(
        self,
        analyzer: FaceAnalyzer,
        image_source: ImageLoader,
        max_workers: int = 4,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        self.analyzer = analyzer
        self.image_source = image_source
        self.max_workers = max_workers
        self.failures: List[SampleError] = []

    def _extract(self, label: str, locator: str) -> np.ndarray:
        """Fetch one sample and return its descriptor.

        Raises:
            SampleFetchError: If the image cannot be loaded.
            SampleDetectError: If no face is found or extraction fails.
        """
        try:
            image = self.image_source.load(locator)
        except ImageFetchError as e:
            raise SampleFetchError(label, locator, e.reason) from e

        try:
            detection = self.analyzer.detect_single_face(image)
        except Exception as e:
            raise SampleDetectError(label, locator, f"extraction failed: {e}") from e

        if detection is None:
            raise SampleDetectError(label, locator, "no face detected")

        return detection.descriptor

    def _run_sample(
        self, label: str, locator: str
    ) -> Union[np.ndarray, SampleError]:
        try:
            return self._extract(label, locator)
        except SampleError as e:
            logger.warning(str(e))
            return e

    def build(self, source: GallerySource) -> Gallery:
        """Build the gallery.

        Args:
            source: Mapping from label to sample image locators

        Returns:
            Gallery holding one set per label with at least one descriptor.

        Raises:
            EmptyGalleryError: If no label yielded a descriptor.
        """
        tasks = [
            (label, locator)
            for label, locators in source.items()
            for locator in locators
        ]
        logger.info(
            f"Building gallery from {len(tasks)} samples for {len(source)} labels "
            f"(workers={self.max_workers})"
        )

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(self._run_sample, label, loc) for label, loc in tasks]
            outcomes = [future.result() for future in futures]

        descriptors: Dict[str, List[np.ndarray]] = {label: [] for label in source}
        failures: List[SampleError] = []
        for (label, _), outcome in zip(tasks, outcomes):
            if isinstance(outcome, SampleError):
                failures.append(outcome)
            else:
                descriptors[label].append(outcome)

        self.failures = failures

        sets = []
        for label, descs in descriptors.items():
            if not descs:
                logger.warning(f"No valid samples for '{label}', omitting it from the gallery")
                continue
            sets.append(LabeledDescriptorSet(label, tuple(descs)))

        if not sets:
            logger.error(f"Gallery build failed: all {len(tasks)} samples were skipped")
            raise EmptyGalleryError(failures)

        gallery = Gallery(sets)
        logger.info(f"Built {gallery!r} ({len(failures)} sample(s) skipped)")
        return gallery
