"""Recognition session: per-upload state for interactive use.

A session owns what belongs to the image currently shown (its annotated
surface and summary line) and nothing else; the gallery stays inside the
read-only matcher. Every query is tagged with an increasing id. Submitting
a new query discards the previous image's artifacts, and a query that
finishes after being replaced is returned as superseded without touching
what is displayed.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

import numpy as np

from facematch.errors import ImageFetchError, QueryDetectError
from facematch.interfaces import ImageLoader, RenderSurface
from facematch.logging_config import get_logger
from facematch.overlay import CanvasSurface, format_summary, render_results
from facematch.services.recognition import FaceRecognition, RecognitionService

logger = get_logger(__name__)

Query = Union[np.ndarray, str]
SurfaceFactory = Callable[[np.ndarray], RenderSurface]


@dataclass
class QueryOutcome:
    """Outcome of one submitted query.

    Attributes:
        query_id: Id assigned when the query was submitted
        results: Recognized faces (empty on error)
        error: Detection error for this image, if any
        superseded: True if a newer query replaced this one before it finished
    """

    query_id: int
    results: List[FaceRecognition] = field(default_factory=list)
    error: Optional[QueryDetectError] = None
    superseded: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.superseded


class RecognitionSession:
    """Runs queries one image at a time and keeps only the latest result.

    Attributes:
        service: Recognition service shared by all queries
        image_source: Loader used when a query is given as a locator
        surface_factory: Builds a render surface for a query image
        surface: Annotated surface of the current image, once it completes
        summary: Summary line of the current image, once it completes

    Example:
        >>> with RecognitionSession(service, ImageSource()) as session:
        ...     outcome = session.run("group_photo.jpg")
        ...     print(session.summary)
        Recognized Faces: Thor (0.41), unknown (0.78)
    """

    def __init__(
        self,
        service: RecognitionService,
        image_source: Optional[ImageLoader] = None,
        surface_factory: SurfaceFactory = CanvasSurface,
        max_workers: int = 2,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        self.service = service
        self.image_source = image_source
        self.surface_factory = surface_factory

        self.surface: Optional[RenderSurface] = None
        self.summary: Optional[str] = None

        self._lock = threading.Lock()
        self._current_id = 0
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="facematch-query",
        )

    @property
    def current_query_id(self) -> int:
        with self._lock:
            return self._current_id

    def is_current(self, query_id: int) -> bool:
        return query_id == self.current_query_id

    def submit(self, query: Query) -> "Future[QueryOutcome]":
        """Start recognizing an image, replacing the current one.

        Args:
            query: BGR image array, or a locator when ``image_source`` is set

        Returns:
            Future resolving to the QueryOutcome.
        """
        if isinstance(query, str) and self.image_source is None:
            raise ValueError("Locator queries need an image_source")

        with self._lock:
            self._current_id += 1
            query_id = self._current_id
            self.surface = None
            self.summary = None

        logger.debug(f"Submitted query {query_id}")
        return self._executor.submit(self._process, query_id, query)

    def run(self, query: Query) -> QueryOutcome:
        """Submit a query and wait for its outcome."""
        return self.submit(query).result()

    def _load(self, query: Query) -> np.ndarray:
        if isinstance(query, str):
            try:
                return self.image_source.load(query)
            except ImageFetchError as e:
                raise QueryDetectError(str(e)) from e
        return query

    def _process(self, query_id: int, query: Query) -> QueryOutcome:
        if not self.is_current(query_id):
            logger.info(f"Skipping query {query_id}, replaced before it started")
            return QueryOutcome(query_id, superseded=True)

        try:
            image = self._load(query)
            results = self.service.recognize(image)
        except QueryDetectError as e:
            logger.warning(f"Query {query_id} failed: {e}")
            return self._publish(QueryOutcome(query_id, error=e), None)

        return self._publish(QueryOutcome(query_id, results=results), image)

    def _publish(self, outcome: QueryOutcome, image: Optional[np.ndarray]) -> QueryOutcome:
        with self._lock:
            if outcome.query_id != self._current_id:
                outcome.superseded = True
                logger.info(
                    f"Discarding result of query {outcome.query_id} "
                    f"(replaced by query {self._current_id})"
                )
                return outcome

            if outcome.error is not None:
                self.summary = f"Face detection failed: {outcome.error}"
                return outcome

            surface = self.surface_factory(image)
            render_results(surface, outcome.results)
            self.surface = surface
            summary = self.summary = format_summary(outcome.results)

        logger.info(summary)
        return outcome

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> RecognitionSession:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"RecognitionSession(query={self.current_query_id}, service={self.service})"
