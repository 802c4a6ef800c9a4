"""Deterministic, dependency-free fallback phrase segmentation.

WHY: The precise segmentation service may be slow, misconfigured or down.
The reader must still work, so this module cuts text into approximate
phrases from surface cues alone: particles, common verb endings and
punctuation usually end a bunsetsu in Japanese.

HOW: Scan the text one character at a time into a buffer. Close the
buffer as a phrase right after a boundary marker, when it reaches
MAX_PHRASE_CHARS, or at the last character. Whitespace-only chunks are
folded into a neighbouring phrase so nothing is ever lost.

RULES:
- Pure and total: same input → same output, never raises
- Marker test is per character (``char in BOUNDARY_MARKERS``); the
  multi-character entries of the marker set therefore never match
- Concatenation of the output reconstructs the input, except that
  empty/whitespace-only input yields no phrases at all
- A run of markers ("。」") yields one single-character phrase per marker
"""

from __future__ import annotations

from typing import AbstractSet, List

from bunsetsu_reader.config import BOUNDARY_MARKERS, MAX_PHRASE_CHARS
from bunsetsu_reader.core.ir import PhraseSequence, build_phrases


def split_phrases(
    text: str,
    markers: AbstractSet[str] = BOUNDARY_MARKERS,
    max_chars: int = MAX_PHRASE_CHARS,
) -> List[str]:
    """Split text into phrase strings using the boundary-marker heuristic.

    Args:
        text: Any string, including empty and whitespace-only input.
        markers: Characters that close the current phrase.
        max_chars: Buffer length that forces a phrase break.

    Returns:
        Ordered list of non-empty, non-whitespace-only phrase strings.
    """
    phrases: List[str] = []
    # Whitespace seen before the first real phrase; prefixed onto it.
    carry = ""
    buffer = ""

    def _flush() -> None:
        nonlocal buffer, carry
        if buffer.strip():
            phrases.append(carry + buffer)
            carry = ""
        elif phrases:
            phrases[-1] += buffer
        else:
            carry += buffer
        buffer = ""

    last = len(text) - 1
    for i, char in enumerate(text):
        buffer += char
        if char in markers or len(buffer) >= max_chars or i == last:
            _flush()

    # The loop always flushes on the last character; kept as a safety net.
    if buffer:
        _flush()

    return phrases


class FallbackSegmenter:
    """Heuristic segmenter used when the precise service is unavailable.

    RULES:
    - segment() is total and has no failure mode
    - Output offsets are contiguous code-point offsets into the input
    """

    name = "fallback"

    def __init__(
        self,
        markers: AbstractSet[str] = BOUNDARY_MARKERS,
        max_chars: int = MAX_PHRASE_CHARS,
    ) -> None:
        self._markers = markers
        self._max_chars = max_chars

    def segment(self, text: str) -> PhraseSequence:
        """Segment text into a PhraseSequence."""
        return build_phrases(split_phrases(text, self._markers, self._max_chars))
