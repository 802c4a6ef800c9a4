"""Timed playback state machine over a phrase sequence.

WHY: The reader shows one phrase at a time and advances automatically
every N milliseconds, while still letting the user stop, restart, and
step manually. The hard part is timing: a timer that fires after the
text changed (or after teardown) would corrupt an unrelated sequence's
position, so every timed advance must be cancellable and guarded.

HOW: PlaybackController owns the mutable state (sequence, index, running,
interval). Timed advance is a chain of one-shot tasks obtained from a
Scheduler: each tick schedules the next. Every scheduled task carries the
controller's timer generation; reset/start/stop/close bump the generation
and cancel the pending task, so a callback that slips through after
cancellation sees a stale generation and does nothing.

RULES:
- States: EMPTY (no phrases), IDLE (not running), RUNNING (auto-advance)
- reset() cancels the pending tick before touching any state
- start() always rewinds to index 0; idempotent while running
- tick() past the last phrase stops and rewinds to 0
- Manual stepping only in IDLE, clamped at both ends
- set_interval_ms() clamps to [100, 1000]; restarts the timer if running
- Transport ops return True on effect, False on silent refusal; never raise
- After close(), every operation is a no-op
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Tuple

from bunsetsu_reader.config import DEFAULT_INTERVAL_MS, clamp_interval_ms
from bunsetsu_reader.core.ir import EMPTY_SEQUENCE, Phrase, PhraseSequence, PlaybackState

logger = logging.getLogger(__name__)

Listener = Callable[[PlaybackState], None]


# ---------------------------------------------------------------------------
# Schedulers
# ---------------------------------------------------------------------------


class ScheduledTask(ABC):
    """Handle for a pending one-shot callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running, if it has not run yet."""


class Scheduler(ABC):
    """Abstract source of delayed one-shot callbacks.

    WHY: The controller must not depend on a particular event loop. The
    terminal player uses threads, the tkinter GUI uses ``after()``, and
    tests drive time by hand.
    """

    @abstractmethod
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledTask:
        """Run callback once after delay_s seconds; return a cancel handle."""


class _TimerTask(ScheduledTask):
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler(Scheduler):
    """Scheduler backed by daemon threading.Timer objects.

    RULES:
    - Callbacks run on a timer thread; the controller locks around them
    """

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledTask:
        timer = threading.Timer(delay_s, callback)
        timer.daemon = True
        timer.start()
        return _TimerTask(timer)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class PlaybackController:
    """Owns the playback state and the timed advance.

    WHY: Keeping index, running flag and interval in one object, mutated
    only through its own operations, replaces loose UI-bound state and
    makes every transition explicit and testable.

    HOW: A threading.RLock serializes all mutations, so ticks arriving on
    a timer thread never interleave with commands from the UI thread.
    Listeners are notified with a fresh PlaybackState snapshot after each
    change, outside the state lock. Each change is numbered while the
    state lock is held; delivery is serialized by a separate notify lock
    and skips any snapshot older than one already delivered.

    RULES:
    - The scheduler is injected; defaults to ThreadingScheduler
    - Listeners must not raise; they are called in subscription order
    - Listeners never see an older state after a newer one
    """

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        interval_ms: int = DEFAULT_INTERVAL_MS,
    ) -> None:
        self._scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.RLock()
        self._sequence: PhraseSequence = EMPTY_SEQUENCE
        self._index = 0
        self._running = False
        self._interval_ms = clamp_interval_ms(interval_ms)
        self._pending: Optional[ScheduledTask] = None
        self._timer_generation = 0
        self._closed = False
        self._listeners: List[Listener] = []
        self._notify_lock = threading.RLock()
        self._change_seq = 0
        self._delivered_seq = 0

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        with self._lock:
            return self._snapshot()

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state listener; returns a function that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def reset(self, sequence: Sequence[Phrase]) -> bool:
        """Load a new sequence: IDLE at index 0, or EMPTY for no phrases."""
        with self._lock:
            if self._closed:
                return False
            self._cancel_pending()
            self._sequence = tuple(sequence)
            self._index = 0
            self._running = False
            state, seq = self._record_change()
        logger.debug("Playback reset with %d phrases", len(state.sequence))
        self._notify(state, seq)
        return True

    def start(self) -> bool:
        """Begin a fresh read-through from the first phrase."""
        with self._lock:
            if self._closed or not self._sequence or self._running:
                return False
            self._cancel_pending()
            self._index = 0
            self._running = True
            self._schedule_tick()
            state, seq = self._record_change()
        self._notify(state, seq)
        return True

    def stop(self) -> bool:
        """Stop auto-advance, keeping the current index."""
        with self._lock:
            if self._closed or not self._running:
                return False
            self._cancel_pending()
            self._running = False
            state, seq = self._record_change()
        self._notify(state, seq)
        return True

    def tick(self) -> bool:
        """Advance one phrase; the end of the sequence stops and rewinds."""
        return self._advance(None)

    def step_forward(self) -> bool:
        with self._lock:
            if self._closed or self._running:
                return False
            if self._index >= len(self._sequence) - 1:
                return False
            self._index += 1
            state, seq = self._record_change()
        self._notify(state, seq)
        return True

    def step_back(self) -> bool:
        with self._lock:
            if self._closed or self._running or self._index <= 0:
                return False
            self._index -= 1
            state, seq = self._record_change()
        self._notify(state, seq)
        return True

    def set_interval_ms(self, value: int) -> int:
        """Set the cadence (clamped); returns the interval actually applied."""
        with self._lock:
            if self._closed:
                return self._interval_ms
            self._interval_ms = clamp_interval_ms(value)
            if self._running:
                self._cancel_pending()
                self._schedule_tick()
            applied = self._interval_ms
            state, seq = self._record_change()
        self._notify(state, seq)
        return applied

    def close(self) -> None:
        """Tear down: cancel the timer and refuse every later operation."""
        with self._lock:
            if self._closed:
                return
            self._cancel_pending()
            self._running = False
            self._closed = True
            self._listeners.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _snapshot(self) -> PlaybackState:
        return PlaybackState(
            sequence=self._sequence,
            current_index=self._index,
            running=self._running,
            interval_ms=self._interval_ms,
        )

    def _cancel_pending(self) -> None:
        self._timer_generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _advance(self, generation: Optional[int]) -> bool:
        with self._lock:
            if self._closed or not self._running:
                return False
            if generation is not None and generation != self._timer_generation:
                logger.debug("Dropping stale playback tick")
                return False
            self._cancel_pending()
            self._index += 1
            if self._index >= len(self._sequence):
                self._index = 0
                self._running = False
            else:
                self._schedule_tick()
            state, seq = self._record_change()
        self._notify(state, seq)
        return True

    def _schedule_tick(self) -> None:
        generation = self._timer_generation
        self._pending = self._scheduler.call_later(
            self._interval_ms / 1000.0,
            lambda: self._advance(generation),
        )

    def _record_change(self) -> Tuple[PlaybackState, int]:
        self._change_seq += 1
        return self._snapshot(), self._change_seq

    def _notify(self, state: PlaybackState, seq: int) -> None:
        # A snapshot that lost the race to a newer one is never delivered.
        with self._notify_lock:
            if seq <= self._delivered_seq:
                return
            self._delivered_seq = seq
            with self._lock:
                listeners = list(self._listeners)
            for listener in listeners:
                # A listener may itself change the state; stop passing this one on.
                if seq < self._delivered_seq:
                    return
                listener(state)
