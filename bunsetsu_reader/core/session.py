"""Reader session: couples text changes to segmentation and playback reset.

WHY: A new input text invalidates everything about the previous one —
its phrases, its reading position, its pending timer. This module is the
only place where a text change and a playback reset are tied together,
so the rest of the package never needs to know both exist.

HOW: Each text change gets a generation number. Segmentation runs
(possibly slowly, possibly on another thread) and its outcome is applied
only if no newer text change happened in the meantime. Hosts with an
event loop simply await on_text_changed(); hosts with a UI thread call
begin_text_change() there, segment elsewhere, and hand the outcome back
through apply_outcome() on the UI thread.

RULES:
- Only the newest generation's outcome is ever applied
- begin_text_change() stops playback at once; the old phrases stay visible
  until the new outcome arrives
- Every applied outcome fully resets playback (no incremental patching)
- After close(), no outcome is applied and the controller is torn down
"""

from __future__ import annotations

import logging
from typing import Optional

from bunsetsu_reader.core.ir import PlaybackState, SegmentationOutcome
from bunsetsu_reader.core.playback import PlaybackController
from bunsetsu_reader.core.segmenter import PhraseSegmenter

logger = logging.getLogger(__name__)


class ReaderSession:
    """One reader: a segmenter, a playback controller, and the current text."""

    def __init__(
        self,
        segmenter: Optional[PhraseSegmenter] = None,
        controller: Optional[PlaybackController] = None,
    ) -> None:
        self._segmenter = segmenter or PhraseSegmenter()
        self._controller = controller or PlaybackController()
        self._generation = 0
        self._applied_generation = 0
        self._outcome: Optional[SegmentationOutcome] = None
        self._text = ""
        self._closed = False

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def controller(self) -> PlaybackController:
        return self._controller

    @property
    def segmenter(self) -> PhraseSegmenter:
        return self._segmenter

    @property
    def state(self) -> PlaybackState:
        return self._controller.state

    @property
    def text(self) -> str:
        """The text whose phrases are currently loaded."""
        return self._text

    @property
    def outcome(self) -> Optional[SegmentationOutcome]:
        return self._outcome

    @property
    def degradation_reason(self) -> Optional[str]:
        """Warning to show the reader, or None when segmentation was precise."""
        if self._outcome is None:
            return None
        return self._outcome.reason

    @property
    def loading(self) -> bool:
        """True while a text change is waiting for its segmentation outcome."""
        return not self._closed and self._generation != self._applied_generation

    @property
    def generation(self) -> int:
        return self._generation

    # ------------------------------------------------------------------
    # Text changes
    # ------------------------------------------------------------------

    def begin_text_change(self, text: str) -> int:
        """Register a new text and return its generation number.

        Any outcome still pending for an older generation becomes stale.
        """
        self._generation += 1
        if not self._closed:
            self._controller.stop()
        logger.debug("Text change %d (%d chars)", self._generation, len(text))
        return self._generation

    def apply_outcome(self, generation: int, text: str, outcome: SegmentationOutcome) -> bool:
        """Apply a segmentation outcome if it is still the newest one.

        Returns:
            True if playback was reset with the outcome's phrases, False if
            the outcome was stale (or the session is closed) and discarded.
        """
        if self._closed or generation != self._generation:
            logger.debug(
                "Discarding stale segmentation result %d (current %d)",
                generation,
                self._generation,
            )
            return False
        self._outcome = outcome
        self._text = text
        self._applied_generation = generation
        self._controller.reset(outcome.phrases)
        return True

    async def on_text_changed(self, text: str) -> Optional[str]:
        """Segment the new text and reset playback with the result.

        Returns:
            The degradation reason (None when precise). When a newer text
            change overtook this one, nothing is applied and the reason of
            whatever outcome is currently loaded is returned.
        """
        generation = self.begin_text_change(text)
        outcome = await self._segmenter.segment(text)
        self.apply_outcome(generation, text, outcome)
        return self.degradation_reason

    def close(self) -> None:
        """Tear down: stop the timer for good and ignore pending outcomes."""
        self._closed = True
        self._generation += 1
        self._controller.close()
