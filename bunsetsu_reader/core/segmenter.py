"""Phrase segmentation orchestration: precise service first, fallback second.

WHY: The reader wants linguistically accurate phrases, which need a
morphological analyzer that lives outside this package and can fail in
many ways (timeout, backend down, malformed response). The playback side
must never have to care which path produced its phrases.

HOW: SegmentationService is the narrow abstract contract for the precise
backend. PhraseSegmenter is the single decision point: it tries the
service and, on any failure, runs the FallbackSegmenter and tags the
result as Degraded with a human-readable reason.

RULES:
- PhraseSegmenter.segment() never raises for any string input
- Whitespace-only text returns Precise(()) without calling any segmenter
- No configured service counts as a failure (Degraded, not Precise)
- asyncio.CancelledError is propagated, never turned into a fallback
- The service result is trusted to reconstruct the input; not re-checked here
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from bunsetsu_reader.core.fallback import FallbackSegmenter
from bunsetsu_reader.core.ir import (
    EMPTY_SEQUENCE,
    Degraded,
    PhraseSequence,
    Precise,
    SegmentationOutcome,
)

logger = logging.getLogger(__name__)

NO_SERVICE_REASON = "No segmentation service configured; using simple phrase splitting."


class SegmentationUnavailable(Exception):
    """Raised when the precise segmentation service cannot produce phrases.

    WHY: Gives service implementations one typed base for every failure
    kind they detect themselves (bad status, malformed output, degraded
    upstream), so logs and tests can tell them apart from bugs.

    RULES:
    - Always recovered by PhraseSegmenter; never reaches the reader UI
    """


class SegmentationService(ABC):
    """Abstract base for precise (dictionary-backed) phrase segmentation.

    To plug in a new backend:
    1. Subclass SegmentationService
    2. Implement ``name`` and the async ``segment()``
    3. Pass an instance to PhraseSegmenter

    On success, the returned phrases must be non-empty strings whose
    concatenation equals the input text.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in logs, e.g. 'remote'."""

    @abstractmethod
    async def segment(self, text: str) -> PhraseSequence:
        """Split text into phrases; may raise any exception on failure."""


def describe_failure(exc: BaseException) -> str:
    """Render a service failure as a one-line reason for the reader."""
    detail = str(exc).strip() or exc.__class__.__name__
    return "Phrase segmentation failed: {}".format(detail)


class PhraseSegmenter:
    """Chooses between the segmentation service and the fallback heuristic.

    RULES:
    - service may be None (reader runs on the fallback only)
    - fallback defaults to FallbackSegmenter()
    """

    def __init__(
        self,
        service: Optional[SegmentationService] = None,
        fallback: Optional[FallbackSegmenter] = None,
    ) -> None:
        self._service = service
        self._fallback = fallback or FallbackSegmenter()

    @property
    def service(self) -> Optional[SegmentationService]:
        return self._service

    async def segment(self, text: str) -> SegmentationOutcome:
        """Segment text, degrading to the fallback heuristic on any failure.

        Args:
            text: The full input text.

        Returns:
            Precise(phrases) from the service, or Degraded(phrases, reason)
            from the fallback when the service is missing or failed.
        """
        if not text.strip():
            return Precise(EMPTY_SEQUENCE)

        if self._service is None:
            return Degraded(self._fallback.segment(text), NO_SERVICE_REASON)

        try:
            phrases = await self._service.segment(text)
        except Exception as exc:
            logger.warning(
                "Segmentation service %s failed, using fallback: %s",
                self._service.name,
                exc,
            )
            return Degraded(self._fallback.segment(text), describe_failure(exc))

        return Precise(tuple(phrases))
