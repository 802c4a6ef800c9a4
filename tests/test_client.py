"""Unit tests for the remote segmentation client.

WHY: The remote service is outside our control. Every way it can answer
badly (error status, broken JSON, wrong shape, phrases that drop
characters, a degraded upstream) must raise a typed error so that
PhraseSegmenter can fall back, and a good answer must come back with
correct offsets.

HOW: httpx.MockTransport stands in for the network. Each test installs a
handler returning a canned response and inspects what the client sent.

RULES:
- No real network access
- Async calls are driven with asyncio.run()
"""

import asyncio
import json

import httpx
import pytest

from bunsetsu_reader.api.client import (
    RemoteSegmentationService,
    SegmentationAPIError,
    SegmentationResponseError,
    build_phrase_segmenter,
)
from bunsetsu_reader.api.models import SplitResponse
from bunsetsu_reader.core.ir import Degraded, Precise
from bunsetsu_reader.core.segmenter import PhraseSegmenter, SegmentationUnavailable

TEXT = "人間は文章を読む時、"
PHRASES = ["人間は", "文章を", "読む時、"]


def _service(handler, requests=None):
    def _record(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return handler(request)

    return RemoteSegmentationService(
        base_url="http://segmenter.test/",
        transport=httpx.MockTransport(_record),
    )


def _segment(service, text=TEXT):
    return asyncio.run(service.segment(text))


class TestSuccessfulResponses:
    """Well-formed answers become PhraseSequences."""

    def test_bare_list_body(self):
        requests = []
        service = _service(lambda r: httpx.Response(200, json=PHRASES), requests)
        phrases = _segment(service)
        assert [p.text for p in phrases] == PHRASES
        assert [(p.start, p.end) for p in phrases] == [(0, 3), (3, 6), (6, 10)]

        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/split_bunsetsu"
        assert json.loads(request.content) == {"text": TEXT}

    def test_object_body(self):
        body = {"phrases": PHRASES, "degraded": False, "reason": None}
        service = _service(lambda r: httpx.Response(200, json=body))
        assert [p.text for p in _segment(service)] == PHRASES

    def test_object_body_without_optional_fields(self):
        service = _service(lambda r: httpx.Response(200, json={"phrases": PHRASES}))
        assert len(_segment(service)) == 3

    def test_any_2xx_status_is_accepted(self):
        service = _service(lambda r: httpx.Response(201, json=PHRASES))
        assert [p.text for p in _segment(service)] == PHRASES

    def test_trailing_slash_is_stripped(self):
        service = _service(lambda r: httpx.Response(200, json=PHRASES))
        assert service.base_url == "http://segmenter.test"

    def test_context_manager_reuses_client(self):
        requests = []
        service = _service(lambda r: httpx.Response(200, json=PHRASES), requests)

        async def scenario():
            async with service:
                await service.segment(TEXT)
                await service.segment(TEXT)

        asyncio.run(scenario())
        assert len(requests) == 2


class TestFailures:
    """Bad answers raise SegmentationUnavailable subclasses."""

    def test_error_status(self):
        service = _service(lambda r: httpx.Response(500, text="internal error"))
        with pytest.raises(SegmentationAPIError) as exc_info:
            _segment(service)
        assert exc_info.value.status_code == 500
        assert "internal error" in str(exc_info.value)

    def test_redirect_status_is_an_error(self):
        service = _service(lambda r: httpx.Response(302, headers={"location": "/elsewhere"}))
        with pytest.raises(SegmentationAPIError) as exc_info:
            _segment(service)
        assert exc_info.value.status_code == 302

    def test_invalid_json(self):
        service = _service(lambda r: httpx.Response(200, text="not json"))
        with pytest.raises(SegmentationResponseError, match="not valid JSON"):
            _segment(service)

    @pytest.mark.parametrize("body", [
        {"result": PHRASES},
        [1, 2, 3],
        ["人間は", ""],
        {"phrases": "人間は"},
        "人間は",
    ])
    def test_unexpected_shape(self, body):
        service = _service(lambda r: httpx.Response(200, json=body))
        with pytest.raises(SegmentationResponseError, match="Unexpected response shape"):
            _segment(service)

    def test_phrases_must_reconstruct_text(self):
        service = _service(lambda r: httpx.Response(200, json=["人間は", "文章を"]))
        with pytest.raises(SegmentationResponseError, match="reconstruct"):
            _segment(service)

    def test_degraded_upstream_is_unavailable(self):
        body = {"phrases": PHRASES, "degraded": True, "reason": "dictionary missing"}
        service = _service(lambda r: httpx.Response(200, json=body))
        with pytest.raises(SegmentationUnavailable, match="dictionary missing"):
            _segment(service)

    def test_transport_error_propagates(self):
        def _refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(httpx.ConnectError):
            _segment(_service(_refuse))


class TestSplitResponse:
    """Parsing of decoded JSON bodies."""

    def test_list_shape(self):
        parsed = SplitResponse.from_json(["a", "b"])
        assert parsed.phrases == ["a", "b"]
        assert not parsed.degraded
        assert parsed.reason is None

    def test_object_shape(self):
        parsed = SplitResponse.from_json({"phrases": ["a"], "degraded": True, "reason": "x"})
        assert parsed.degraded
        assert parsed.reason == "x"

    def test_reconstructs(self):
        assert SplitResponse(["ab", "c"]).reconstructs("abc")
        assert not SplitResponse(["ab"]).reconstructs("abc")


class TestWiring:
    """Construction from configuration and integration with PhraseSegmenter."""

    def test_missing_url_raises(self, monkeypatch):
        monkeypatch.delenv("BUNSETSU_SERVICE_URL", raising=False)
        with pytest.raises(ValueError, match="not configured"):
            RemoteSegmentationService()

    def test_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("BUNSETSU_SERVICE_URL", "http://env.test/")
        assert RemoteSegmentationService().base_url == "http://env.test"

    def test_builder_without_url_uses_fallback_only(self, monkeypatch):
        monkeypatch.delenv("BUNSETSU_SERVICE_URL", raising=False)
        assert build_phrase_segmenter().service is None

    def test_builder_with_explicit_url(self, monkeypatch):
        monkeypatch.delenv("BUNSETSU_SERVICE_URL", raising=False)
        segmenter = build_phrase_segmenter("http://explicit.test")
        assert isinstance(segmenter.service, RemoteSegmentationService)
        assert segmenter.service.base_url == "http://explicit.test"

    def test_segmenter_precise_through_remote(self):
        service = _service(lambda r: httpx.Response(200, json=PHRASES))
        outcome = asyncio.run(PhraseSegmenter(service).segment(TEXT))
        assert isinstance(outcome, Precise)
        assert [p.text for p in outcome.phrases] == PHRASES

    def test_segmenter_degrades_on_remote_error(self):
        service = _service(lambda r: httpx.Response(503, text="busy"))
        outcome = asyncio.run(PhraseSegmenter(service).segment(TEXT))
        assert isinstance(outcome, Degraded)
        assert "503" in outcome.reason
        assert "".join(p.text for p in outcome.phrases) == TEXT
