"""Shared test fixtures for the bunsetsu_reader test suite.

WHY: Playback and session tests need to control time and the behaviour
of the segmentation service precisely. Centralizing the fakes here keeps
every test module on the same manual clock and the same scripted
services.

HOW: ManualScheduler is a Scheduler whose clock only moves when a test
calls advance(); it can also replay cancelled callbacks to simulate a
timer that fired just as it was being cancelled. StaticService and
FailingService are SegmentationService fakes with fixed behaviour;
GatedService blocks each text until the test releases it.

RULES:
- No test touches the network or a real timer thread
- Async code is driven with asyncio.run() inside synchronous tests
"""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, List, Optional

import pytest

from bunsetsu_reader.core.ir import PhraseSequence, build_phrases
from bunsetsu_reader.core.playback import PlaybackController, ScheduledTask, Scheduler
from bunsetsu_reader.core.segmenter import SegmentationService


SAMPLE_SENTENCE = "人間は文章を読む時、滑らかに文字を読んでいる。"


# ---------------------------------------------------------------------------
# Manual clock scheduler
# ---------------------------------------------------------------------------


class ManualTask(ScheduledTask):
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Scheduler driven by advance(); nothing runs on its own."""

    def __init__(self) -> None:
        self.now = 0.0
        self.tasks: List[ManualTask] = []

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ManualTask(self.now + delay_s, callback)
        self.tasks.append(task)
        return task

    @property
    def pending(self) -> List[ManualTask]:
        return [t for t in self.tasks if not t.cancelled and not t.fired]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every task that falls due."""
        target = self.now + seconds
        while True:
            due = sorted(
                (t for t in self.pending if t.due <= target + 1e-9),
                key=lambda t: t.due,
            )
            if not due:
                break
            task = due[0]
            self.now = task.due
            task.fired = True
            task.callback()
        self.now = target

    def run_cancelled(self) -> None:
        """Invoke cancelled callbacks anyway, as a late-firing timer would."""
        for task in [t for t in self.tasks if t.cancelled and not t.fired]:
            task.fired = True
            task.callback()


# ---------------------------------------------------------------------------
# Segmentation service fakes
# ---------------------------------------------------------------------------


class StaticService(SegmentationService):
    """Returns a fixed phrase list for every input."""

    def __init__(self, phrases: List[str]) -> None:
        self._phrases = phrases
        self.calls: List[str] = []

    @property
    def name(self) -> str:
        return "static"

    async def segment(self, text: str) -> PhraseSequence:
        self.calls.append(text)
        return build_phrases(self._phrases)


class FailingService(SegmentationService):
    """Always raises the given exception."""

    def __init__(self, exc: Optional[Exception] = None) -> None:
        self._exc = exc or ConnectionError("backend unavailable")
        self.calls: List[str] = []

    @property
    def name(self) -> str:
        return "failing"

    async def segment(self, text: str) -> PhraseSequence:
        self.calls.append(text)
        raise self._exc


class GatedService(SegmentationService):
    """Splits text per character, but only once the test opens its gate."""

    def __init__(self) -> None:
        self._gates: Dict[str, asyncio.Event] = {}

    @property
    def name(self) -> str:
        return "gated"

    def gate(self, text: str) -> asyncio.Event:
        if text not in self._gates:
            self._gates[text] = asyncio.Event()
        return self._gates[text]

    async def segment(self, text: str) -> PhraseSequence:
        await self.gate(text).wait()
        return build_phrases(list(text))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def controller(scheduler):
    """PlaybackController on the manual clock, 300 ms per phrase."""
    return PlaybackController(scheduler, interval_ms=300)


@pytest.fixture
def three_phrases():
    return build_phrases(["犬が", "走る。", "猫"])
