"""Async HTTP client for a remote bunsetsu segmentation service.

WHY: Accurate bunsetsu boundaries need a morphological analyzer with a
dictionary (MeCab, Sudachi, Lindera...). Rather than bundling one, the
reader talks to any service that implements a tiny HTTP contract, and
falls back to its own heuristic when that service misbehaves.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. The client posts the
text to {base_url}/split_bunsetsu, validates the JSON body against the
response schema, checks that the phrases reconstruct the text, and
returns a PhraseSequence. It is a SegmentationService, so PhraseSegmenter
can use it directly.

RULES:
- One request per segment() call; the connection is closed afterwards
  unless the client is used as an async context manager
- Non-2xx responses raise SegmentationAPIError
- Malformed or non-reconstructing bodies raise SegmentationResponseError
- A degraded upstream raises SegmentationUnavailable
- Transport errors and timeouts propagate as httpx.HTTPError
- transport is injectable for tests (httpx.MockTransport)
"""

from __future__ import annotations

from typing import Optional

import httpx
import jsonschema

from bunsetsu_reader.api.models import SplitResponse
from bunsetsu_reader.config import SERVICE_TIMEOUT_S, load_service_url
from bunsetsu_reader.core.ir import PhraseSequence, build_phrases
from bunsetsu_reader.core.segmenter import (
    PhraseSegmenter,
    SegmentationService,
    SegmentationUnavailable,
)


class SegmentationAPIError(SegmentationUnavailable):
    """Raised when the segmentation service returns an error response.

    RULES:
    - Always include status_code and message
    - message is the response body text (truncated) or a summary
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Segmentation service error {status_code}: {message}")


class SegmentationResponseError(SegmentationUnavailable):
    """Raised when the service answers 2xx with an unusable body."""


class RemoteSegmentationService(SegmentationService):
    """SegmentationService backed by an HTTP endpoint.

    RULES:
    - base_url defaults to load_service_url(); ValueError if neither is set
    - timeout_s defaults to SERVICE_TIMEOUT_S from config
    - Use ``async with`` to reuse one connection pool across calls
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        url = base_url or load_service_url()
        if not url:
            raise ValueError(
                "Segmentation service URL not configured. "
                "Set BUNSETSU_SERVICE_URL or pass base_url."
            )
        self._base_url = url.rstrip("/")
        self._timeout_s = SERVICE_TIMEOUT_S if timeout_s is None else timeout_s
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return "remote"

    @property
    def base_url(self) -> str:
        return self._base_url

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout_s),
            transport=self._transport,
        )

    async def __aenter__(self) -> RemoteSegmentationService:
        self._client = self._make_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    async def segment(self, text: str) -> PhraseSequence:
        """Ask the service to split text into phrases.

        Args:
            text: The full input text.

        Returns:
            PhraseSequence whose concatenation equals text.
        """
        if self._client is not None:
            resp = await self._client.post("/split_bunsetsu", json={"text": text})
        else:
            async with self._make_client() as client:
                resp = await client.post("/split_bunsetsu", json={"text": text})

        if not resp.is_success:
            raise SegmentationAPIError(resp.status_code, resp.text[:200])

        try:
            parsed = SplitResponse.from_json(resp.json())
        except ValueError as exc:
            raise SegmentationResponseError("Response is not valid JSON") from exc
        except jsonschema.ValidationError as exc:
            raise SegmentationResponseError(
                "Unexpected response shape: {}".format(exc.message)
            ) from exc

        if parsed.degraded:
            raise SegmentationUnavailable(
                "Upstream segmenter degraded: {}".format(parsed.reason or "no reason given")
            )

        if not parsed.reconstructs(text):
            raise SegmentationResponseError("Phrases do not reconstruct the input text")

        return build_phrases(parsed.phrases)


def build_phrase_segmenter(service_url: Optional[str] = None) -> PhraseSegmenter:
    """Build a PhraseSegmenter wired to the configured remote service.

    RULES:
    - service_url overrides BUNSETSU_SERVICE_URL
    - With no URL at all, the segmenter runs on the fallback only
    """
    url = service_url or load_service_url()
    service = RemoteSegmentationService(base_url=url) if url else None
    return PhraseSegmenter(service=service)
