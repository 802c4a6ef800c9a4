"""Remote segmentation service package — async HTTP client and schema.

WHY: The precise segmenter lives outside this process. This package
encapsulates all communication with it behind a SegmentationService
implementation.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Responses are
validated with jsonschema and turned into a PhraseSequence.

RULES:
- All HTTP calls to the segmentation service go through
  RemoteSegmentationService (no direct httpx usage elsewhere)
- Every failure is a SegmentationUnavailable or an httpx.HTTPError
"""

from bunsetsu_reader.api.client import (
    RemoteSegmentationService,
    SegmentationAPIError,
    SegmentationResponseError,
    build_phrase_segmenter,
)
from bunsetsu_reader.api.models import SplitResponse

__all__ = [
    "RemoteSegmentationService",
    "SegmentationAPIError",
    "SegmentationResponseError",
    "SplitResponse",
    "build_phrase_segmenter",
]
