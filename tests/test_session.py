"""Unit tests for ReaderSession.

WHY: The session is where text changes meet playback. A slow, stale
segmentation result landing after a newer edit would replace the newer
text's phrases, and a result landing after teardown would restart a
dead reader.

HOW: GatedService (conftest) holds each text until the test opens its
gate, so two overlapping text changes can complete in reverse order.
Playback runs on ManualScheduler.

RULES:
- Async flows are driven with asyncio.run() inside synchronous tests
- Outcomes are checked through session.state (the controller snapshot)
"""

import asyncio

from conftest import FailingService, GatedService, StaticService

from bunsetsu_reader.core.ir import Degraded, Precise, build_phrases
from bunsetsu_reader.core.segmenter import NO_SERVICE_REASON, PhraseSegmenter
from bunsetsu_reader.core.session import ReaderSession


def _texts(state):
    return [p.text for p in state.sequence]


class TestTextChange:
    """A text change segments and resets playback."""

    def test_precise_outcome_resets_playback(self, controller):
        session = ReaderSession(PhraseSegmenter(StaticService(["犬が", "走る。"])), controller)
        reason = asyncio.run(session.on_text_changed("犬が走る。"))
        assert reason is None
        assert _texts(session.state) == ["犬が", "走る。"]
        assert session.state.current_index == 0
        assert not session.state.running
        assert session.text == "犬が走る。"
        assert isinstance(session.outcome, Precise)
        assert not session.loading

    def test_degraded_outcome_exposes_reason(self, controller):
        session = ReaderSession(PhraseSegmenter(FailingService()), controller)
        reason = asyncio.run(session.on_text_changed("犬。猫"))
        assert reason is not None
        assert "backend unavailable" in reason
        assert session.degradation_reason == reason
        assert _texts(session.state) == ["犬。", "猫"]

    def test_no_service_reason(self, controller):
        session = ReaderSession(PhraseSegmenter(), controller)
        assert asyncio.run(session.on_text_changed("犬。猫")) == NO_SERVICE_REASON

    def test_empty_text_gives_empty_state(self, controller):
        session = ReaderSession(PhraseSegmenter(FailingService()), controller)
        reason = asyncio.run(session.on_text_changed("   "))
        assert reason is None
        assert session.state.sequence == ()

    def test_text_change_stops_running_playback(self, controller, scheduler, three_phrases):
        session = ReaderSession(PhraseSegmenter(), controller)
        session.apply_outcome(session.begin_text_change("x"), "x", Precise(three_phrases))
        controller.start()
        scheduler.advance(0.3)
        session.begin_text_change("新しい文章")
        assert not session.state.running
        assert session.state.current_index == 1
        assert session.loading
        assert scheduler.pending == []

    def test_new_text_rewinds_after_stepping(self, controller, three_phrases):
        session = ReaderSession(PhraseSegmenter(StaticService(["あ", "い"])), controller)
        session.apply_outcome(session.begin_text_change("x"), "x", Precise(three_phrases))
        controller.step_forward()
        asyncio.run(session.on_text_changed("あい"))
        assert session.state.current_index == 0
        assert _texts(session.state) == ["あ", "い"]


class TestStaleResults:
    """Only the newest text change's outcome is applied."""

    def test_older_result_arriving_late_is_dropped(self, controller):
        service = GatedService()
        session = ReaderSession(PhraseSegmenter(service), controller)

        async def scenario():
            first = asyncio.ensure_future(session.on_text_changed("古い"))
            await asyncio.sleep(0)
            second = asyncio.ensure_future(session.on_text_changed("新しい"))
            await asyncio.sleep(0)
            service.gate("新しい").set()
            await second
            service.gate("古い").set()
            await first

        asyncio.run(scenario())
        assert session.text == "新しい"
        assert _texts(session.state) == ["新", "し", "い"]
        assert not session.loading

    def test_apply_outcome_rejects_stale_generation(self, controller):
        session = ReaderSession(PhraseSegmenter(), controller)
        old = session.begin_text_change("古い")
        new = session.begin_text_change("新しい")
        assert not session.apply_outcome(old, "古い", Precise(build_phrases(["古い"])))
        assert session.state.sequence == ()
        assert session.loading
        assert session.apply_outcome(new, "新しい", Precise(build_phrases(["新しい"])))
        assert _texts(session.state) == ["新しい"]

    def test_degraded_stale_result_does_not_leak_reason(self, controller):
        session = ReaderSession(PhraseSegmenter(), controller)
        old = session.begin_text_change("a")
        new = session.begin_text_change("b")
        session.apply_outcome(new, "b", Precise(build_phrases(["b"])))
        session.apply_outcome(old, "a", Degraded(build_phrases(["a"]), "down"))
        assert session.degradation_reason is None


class TestClose:
    """Teardown discards pending work."""

    def test_result_after_close_is_discarded(self, controller):
        session = ReaderSession(PhraseSegmenter(), controller)
        generation = session.begin_text_change("犬")
        session.close()
        assert not session.apply_outcome(generation, "犬", Precise(build_phrases(["犬"])))
        assert session.state.sequence == ()
        assert not session.loading
        assert controller.closed

    def test_close_cancels_playback_timer(self, controller, scheduler, three_phrases):
        session = ReaderSession(PhraseSegmenter(), controller)
        session.apply_outcome(session.begin_text_change("x"), "x", Precise(three_phrases))
        controller.start()
        session.close()
        assert scheduler.pending == []
        scheduler.run_cancelled()
        assert session.state.current_index == 0
        assert not session.state.running

    def test_text_change_after_close_is_inert(self, controller):
        session = ReaderSession(PhraseSegmenter(StaticService(["犬"])), controller)
        session.close()
        assert asyncio.run(session.on_text_changed("犬")) is None
        assert session.state.sequence == ()
