"""FastAPI application exposing segmentation and statistics over HTTP.

WHY: Web front ends and other tools need the reader's segmentation
without embedding Python. The same endpoint shape also lets one reader
server act as the precise segmentation service of another reader.

HOW: A single FastAPI app with four endpoints. Segmentation goes through
the module-level PhraseSegmenter (remote service when configured, the
fallback heuristic otherwise), so degradation is reported, never raised.

RULES:
- POST /split_bunsetsu speaks the remote segmentation protocol
- POST /segment adds offsets and statistics
- POST /stats returns statistics only
- Segmentation failures never produce a 5xx; they set degraded=true
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from bunsetsu_reader import __version__
from bunsetsu_reader.api.client import build_phrase_segmenter
from bunsetsu_reader.config import DEFAULT_INTERVAL_MS, SERVER_HOST, SERVER_PORT
from bunsetsu_reader.core.stats import compute_stats
from bunsetsu_reader.server.models import (
    HealthResponse,
    PhraseInfo,
    SegmentResponse,
    SplitResponse,
    StatsResponse,
    TextRequest,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and segmenter setup
# ---------------------------------------------------------------------------

phrase_segmenter = build_phrase_segmenter()

app = FastAPI(
    title="Bunsetsu Reader API",
    description=(
        "Splits Japanese text into bunsetsu-like phrases for "
        "phrase-at-a-time reading, with a heuristic fallback when the "
        "precise segmentation service is unavailable."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Endpoints: Segmentation
# ---------------------------------------------------------------------------


@app.post(
    "/split_bunsetsu",
    response_model=SplitResponse,
    tags=["segmentation"],
    summary="Split text into phrases",
    description=(
        "Returns the ordered phrase strings. When the precise service is "
        "unavailable the fallback heuristic is used and degraded is true."
    ),
)
async def split_bunsetsu(request: TextRequest) -> SplitResponse:
    outcome = await phrase_segmenter.segment(request.text)
    return SplitResponse(
        phrases=[p.text for p in outcome.phrases],
        degraded=outcome.is_degraded,
        reason=outcome.reason,
    )


@app.post(
    "/segment",
    response_model=SegmentResponse,
    tags=["segmentation"],
    summary="Split text into phrases with offsets and statistics",
)
async def segment(request: TextRequest) -> SegmentResponse:
    outcome = await phrase_segmenter.segment(request.text)
    interval_ms = request.interval_ms or DEFAULT_INTERVAL_MS
    stats = compute_stats(request.text, outcome.phrases, interval_ms)
    return SegmentResponse(
        phrases=[PhraseInfo(text=p.text, start=p.start, end=p.end) for p in outcome.phrases],
        degraded=outcome.is_degraded,
        reason=outcome.reason,
        stats=StatsResponse(**stats.to_dict()),
    )


@app.post(
    "/stats",
    response_model=StatsResponse,
    tags=["segmentation"],
    summary="Character and phrase statistics",
)
async def text_stats(request: TextRequest) -> StatsResponse:
    outcome = await phrase_segmenter.segment(request.text)
    interval_ms = request.interval_ms or DEFAULT_INTERVAL_MS
    return StatsResponse(**compute_stats(request.text, outcome.phrases, interval_ms).to_dict())


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        service_configured=phrase_segmenter.service is not None,
    )


def run_api() -> None:
    """Entry point for the bunsetsu-reader-api console script."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    logger.info("Serving on http://%s:%d", SERVER_HOST, SERVER_PORT)
    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT)
