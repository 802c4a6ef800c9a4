"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: One request model per input shape, one response model per endpoint.
All fields carry Field(description=...) for the /docs UI.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- interval_ms is validated against the playback range, not clamped
- SplitResponse matches the remote segmentation protocol exactly, so one
  reader server can act as the segmentation service of another
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from bunsetsu_reader.config import INTERVAL_MAX_MS, INTERVAL_MIN_MS


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class TextRequest(BaseModel):
    """Text to segment or analyse."""

    text: str = Field(description="Input text; may contain newlines and punctuation.")
    interval_ms: Optional[int] = Field(
        default=None,
        ge=INTERVAL_MIN_MS,
        le=INTERVAL_MAX_MS,
        description="Playback interval used for the duration estimate (100–1000 ms).",
    )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SplitResponse(BaseModel):
    """Plain phrase list, the wire format of the segmentation service."""

    phrases: List[str] = Field(description="Ordered phrases; their concatenation is the input.")
    degraded: bool = Field(description="True when the fallback heuristic produced the phrases.")
    reason: Optional[str] = Field(
        default=None,
        description="Why segmentation was degraded, only present when degraded is true.",
    )


class PhraseInfo(BaseModel):
    text: str = Field(description="Phrase text.")
    start: int = Field(description="Start offset in code points.")
    end: int = Field(description="End offset in code points (exclusive).")


class StatsResponse(BaseModel):
    """Character and phrase statistics for a text."""

    char_count: int = Field(description="Total characters, whitespace included.")
    non_space_char_count: int = Field(description="Characters excluding whitespace.")
    phrase_count: int = Field(description="Number of phrases.")
    kanji_count: int = Field(description="Kanji characters.")
    hiragana_count: int = Field(description="Hiragana characters.")
    katakana_count: int = Field(description="Katakana characters.")
    punctuation_count: int = Field(description="Punctuation characters.")
    other_count: int = Field(description="All remaining non-space characters.")
    average_phrase_length: float = Field(description="Mean phrase length in characters.")
    estimated_duration_s: float = Field(description="Read-through time at the given interval.")


class SegmentResponse(BaseModel):
    """Phrases with offsets, degradation notice, and statistics."""

    phrases: List[PhraseInfo] = Field(description="Ordered phrases with source offsets.")
    degraded: bool = Field(description="True when the fallback heuristic produced the phrases.")
    reason: Optional[str] = Field(default=None, description="Degradation reason, if any.")
    stats: StatsResponse = Field(description="Statistics for the text and its phrases.")


class HealthResponse(BaseModel):
    status: str = Field(description="Always 'ok' when the service is up.")
    version: str = Field(description="Package version.")
    service_configured: bool = Field(
        description="Whether a precise segmentation service is configured.",
    )
