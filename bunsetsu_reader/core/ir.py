"""Intermediate representation dataclasses for phrases and playback.

WHY: Segmentation (service or fallback) and playback are separate
concerns that must agree on one shape for "the text, cut into phrases".
The IR is that contract: segmenters produce it, the playback controller
consumes it, and the presentation layers only ever read it.

HOW: Four pieces form the model:
  Phrase               — one contiguous slice of the source text
  PhraseSequence       — an immutable tuple of phrases for one input
  SegmentationOutcome  — Precise or Degraded result of segmenting a text
  PlaybackState        — a frozen snapshot of the playback controller

RULES:
- Phrases are never empty; offsets are code-point offsets into the source
- Concatenating all phrase texts in order reconstructs the source exactly
- A Degraded outcome always carries a usable sequence and a reason
- PlaybackState is a snapshot — mutating the controller never changes it
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple


@dataclass(frozen=True)
class Phrase:
    """A single phrase (bunsetsu) cut from the source text.

    RULES:
    - text: non-empty slice of the source, whitespace kept as-is
    - start / end: code-point offsets, source[start:end] == text
    """

    text: str
    start: int
    end: int

    def __len__(self) -> int:
        return len(self.text)


PhraseSequence = Tuple[Phrase, ...]
"""Ordered, finite, immutable sequence of phrases for one input text."""

EMPTY_SEQUENCE: PhraseSequence = ()


def build_phrases(texts: Iterable[str], start: int = 0) -> PhraseSequence:
    """Turn an ordered list of phrase strings into a PhraseSequence.

    WHY: Both segmentation paths naturally produce plain strings; the
    offsets are derived, not reported, so they can never disagree with
    the text.

    HOW: Walks the strings, assigning each one the offset range right
    after the previous one.

    RULES:
    - Empty strings are skipped (a Phrase is never empty)
    - Offsets are contiguous: phrases[i].end == phrases[i + 1].start
    """
    phrases = []
    offset = start
    for text in texts:
        if not text:
            continue
        phrases.append(Phrase(text=text, start=offset, end=offset + len(text)))
        offset += len(text)
    return tuple(phrases)


def join_phrases(phrases: Iterable[Phrase]) -> str:
    """Concatenate phrase texts back into the source string."""
    return "".join(p.text for p in phrases)


# ---------------------------------------------------------------------------
# Segmentation outcome
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SegmentationOutcome:
    """Base for the tagged result of segmenting one text.

    Callers branch on ``is_degraded`` (or isinstance) and always get a
    usable ``phrases`` sequence either way.
    """

    phrases: PhraseSequence

    @property
    def reason(self) -> Optional[str]:
        return None

    @property
    def is_degraded(self) -> bool:
        return False


@dataclass(frozen=True)
class Precise(SegmentationOutcome):
    """Phrases produced by the segmentation service (or trivially empty)."""


@dataclass(frozen=True)
class Degraded(SegmentationOutcome):
    """Phrases produced by the fallback heuristic after the service failed.

    RULES:
    - failure: human-readable description of why the service was not used
    """

    failure: str = ""

    @property
    def reason(self) -> Optional[str]:
        return self.failure

    @property
    def is_degraded(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Playback state
# ---------------------------------------------------------------------------


class PlaybackStatus(str, enum.Enum):
    """Coarse state of the playback controller.

    RULES:
    - empty: the sequence has no phrases; every transport op is a no-op
    - idle: phrases loaded, index fixed, manual stepping allowed
    - running: index advances on every tick
    """

    EMPTY = "empty"
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class PlaybackState:
    """Snapshot of the playback controller, handed to subscribers.

    WHY: Presentation layers (terminal, tkinter, HTTP) only need to read
    the state. Handing them an immutable snapshot means they can never
    mutate playback behind the controller's back.

    RULES:
    - 0 <= current_index < len(sequence) whenever sequence is non-empty
    - current_index == 0 and running is False whenever sequence is empty
    - progress_fraction is None for an empty sequence
    """

    sequence: PhraseSequence
    current_index: int
    running: bool
    interval_ms: int

    @property
    def status(self) -> PlaybackStatus:
        if not self.sequence:
            return PlaybackStatus.EMPTY
        if self.running:
            return PlaybackStatus.RUNNING
        return PlaybackStatus.IDLE

    @property
    def current_phrase(self) -> Optional[Phrase]:
        if not self.sequence:
            return None
        return self.sequence[self.current_index]

    @property
    def progress_fraction(self) -> Optional[float]:
        if not self.sequence:
            return None
        return (self.current_index + 1) / len(self.sequence)

    @property
    def position_label(self) -> str:
        """Human-readable position, e.g. ``"3 / 10"``; empty when no phrases."""
        if not self.sequence:
            return ""
        return "{} / {}".format(self.current_index + 1, len(self.sequence))

    # Transport predicates: whether the matching operation would have an effect.

    @property
    def can_start(self) -> bool:
        return bool(self.sequence) and not self.running

    @property
    def can_stop(self) -> bool:
        return self.running

    @property
    def can_step_forward(self) -> bool:
        return (
            bool(self.sequence)
            and not self.running
            and self.current_index < len(self.sequence) - 1
        )

    @property
    def can_step_back(self) -> bool:
        return bool(self.sequence) and not self.running and self.current_index > 0
