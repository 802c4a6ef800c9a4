"""Character-level statistics for a text and its phrase sequence.

WHY: Readers like to know how long a passage is and how long a
read-through will take at the chosen speed before pressing start.

HOW: One pass over the text classifies each character by Unicode block
(kanji, hiragana, katakana, punctuation, whitespace, other). Phrase
count and the interval give the estimated read-through duration.

RULES:
- Counts are in code points
- Whitespace counts toward char_count but not non_space_char_count
- estimated_duration_s = phrase_count * interval_ms / 1000
- average_phrase_length is 0.0 when there are no phrases
"""

from __future__ import annotations

import unicodedata
from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

from bunsetsu_reader.config import DEFAULT_INTERVAL_MS
from bunsetsu_reader.core.ir import Phrase


@dataclass(frozen=True)
class TextStats:
    char_count: int
    non_space_char_count: int
    phrase_count: int
    kanji_count: int
    hiragana_count: int
    katakana_count: int
    punctuation_count: int
    other_count: int
    average_phrase_length: float
    estimated_duration_s: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _is_kanji(char: str) -> bool:
    code = ord(char)
    return (
        0x4E00 <= code <= 0x9FFF      # CJK unified ideographs
        or 0x3400 <= code <= 0x4DBF   # extension A
        or 0xF900 <= code <= 0xFAFF   # compatibility ideographs
        or 0x20000 <= code <= 0x2A6DF
        or char in "々〆ヶ"
    )


def _is_hiragana(char: str) -> bool:
    return 0x3041 <= ord(char) <= 0x309F


def _is_katakana(char: str) -> bool:
    code = ord(char)
    return 0x30A0 <= code <= 0x30FF or 0x31F0 <= code <= 0x31FF or 0xFF66 <= code <= 0xFF9F


def compute_stats(
    text: str,
    phrases: Sequence[Phrase],
    interval_ms: int = DEFAULT_INTERVAL_MS,
) -> TextStats:
    """Compute character and phrase statistics.

    Args:
        text: The source text.
        phrases: Its phrase sequence (from either segmentation path).
        interval_ms: Playback cadence used for the duration estimate.
    """
    kanji = hiragana = katakana = punctuation = other = spaces = 0
    for char in text:
        if char.isspace():
            spaces += 1
        elif _is_kanji(char):
            kanji += 1
        # Before the kana ranges: "・" and "゠" sit inside the katakana block.
        elif unicodedata.category(char).startswith("P"):
            punctuation += 1
        elif _is_katakana(char):
            katakana += 1
        elif _is_hiragana(char):
            hiragana += 1
        else:
            other += 1

    phrase_count = len(phrases)
    average = sum(len(p.text) for p in phrases) / phrase_count if phrase_count else 0.0

    return TextStats(
        char_count=len(text),
        non_space_char_count=len(text) - spaces,
        phrase_count=phrase_count,
        kanji_count=kanji,
        hiragana_count=hiragana,
        katakana_count=katakana,
        punctuation_count=punctuation,
        other_count=other,
        average_phrase_length=round(average, 2),
        estimated_duration_s=phrase_count * interval_ms / 1000.0,
    )
