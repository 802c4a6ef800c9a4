"""Configuration constants, segmentation rules, and .env loading.

WHY: Centralizes every configurable value so it is easy to find, update,
and override. The fallback boundary markers, the phrase length limit and
the playback ranges are plain data — not buried in logic — so the
heuristic stays reproducible and the UI ranges stay in one place.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level frozensets, ints and strings. The clamp helpers keep
user-supplied values inside the recognized ranges instead of rejecting
them.

RULES:
- BOUNDARY_MARKERS is matched one character at a time; multi-character
  entries are kept verbatim even though they can never match
- MAX_PHRASE_CHARS forces a phrase break when no marker shows up
- Interval is clamped to [INTERVAL_MIN_MS, INTERVAL_MAX_MS]
- Font size is presentation-only, clamped to [FONT_SIZE_MIN, FONT_SIZE_MAX]
- The segmentation service URL comes from the environment, never hardcoded
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

# Load .env from the project root (where the app is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Fallback segmentation rules
# ---------------------------------------------------------------------------

BOUNDARY_MARKERS: frozenset[str] = frozenset({
    # particles
    "は", "が", "を", "に", "へ", "で", "と", "より", "から", "まで",
    "の", "や", "など",
    # conjunctive particles
    "ので", "のに", "けど", "ため", "たり", "だり",
    # verb and auxiliary endings
    "ます", "です", "ました", "でした", "ません", "ない", "たい",
    # punctuation and brackets
    "、", "。", "！", "？", "「", "」", "（", "）",
})
"""Characters that close the current phrase in the fallback segmenter."""

MAX_PHRASE_CHARS = 10
"""A phrase is force-closed once its buffer holds this many characters."""

# ---------------------------------------------------------------------------
# Playback and display ranges
# ---------------------------------------------------------------------------

INTERVAL_MIN_MS = 100
INTERVAL_MAX_MS = 1000
INTERVAL_STEP_MS = 50

FONT_SIZE_MIN = 16
FONT_SIZE_MAX = 48


def clamp_interval_ms(value: int) -> int:
    """Clamp a phrase interval to the supported range.

    RULES:
    - Values below 100 become 100, values above 1000 become 1000
    - Floats are truncated to int before clamping
    """
    return max(INTERVAL_MIN_MS, min(INTERVAL_MAX_MS, int(value)))


def clamp_font_size(value: int) -> int:
    """Clamp a display font size to the supported range."""
    return max(FONT_SIZE_MIN, min(FONT_SIZE_MAX, int(value)))


DEFAULT_INTERVAL_MS = clamp_interval_ms(int(os.getenv("READER_INTERVAL_MS", "300")))
DEFAULT_FONT_SIZE = clamp_font_size(int(os.getenv("READER_FONT_SIZE", "24")))

# ---------------------------------------------------------------------------
# Segmentation service and HTTP server
# ---------------------------------------------------------------------------

SERVICE_TIMEOUT_S = float(os.getenv("BUNSETSU_SERVICE_TIMEOUT", "10"))
SERVER_HOST = os.getenv("READER_HOST", "127.0.0.1")
SERVER_PORT = int(os.getenv("READER_PORT", "8765"))


def load_service_url() -> Optional[str]:
    """Load the precise segmentation service URL from the environment.

    WHY: The morphological segmentation backend is optional. When it is
    not configured the reader still works, using the fallback heuristic.

    HOW: Reads BUNSETSU_SERVICE_URL from os.environ (populated by
    python-dotenv) at call time, so tests can monkeypatch it.

    RULES:
    - Returns None when the variable is missing or blank
    - Trailing slashes are stripped
    """
    url = os.getenv("BUNSETSU_SERVICE_URL", "").strip()
    if not url:
        return None
    return url.rstrip("/")


# ---------------------------------------------------------------------------
# Sample text shown when no input is given
# ---------------------------------------------------------------------------

SAMPLE_TEXT = (
    "人間は文章を読む時、滑らかに文字を読んでいる訳ではなく、"
    "「１点を見つめる」という事と「高速に視線を移動する」という事を繰り返しています。"
    "１点を見つめる事を固視と呼び、高速に視線を移動する事を跳躍運動（サッカード）と呼びます。"
    "文章の改行時には行末から次の行頭までの距離があるため、改行が多い程読むのに時間がかかります。"
    "しかし、印象の観点から言えば１行あたりの文字数が少ない方が好まれると言われています。"
    "おそらく文字数が多いと情報量が多くて疲れる印象になり、抵抗感が生まれてしまうためだと思います。"
)
