"""Tkinter desktop GUI for the Bunsetsu Reader.

WHY: Most readers want a window: paste or open a text, pick a speed and a
font size, press start, and watch the phrases go by. The GUI is only a
view and a set of buttons over a ReaderSession; every rule about timing
and segmentation lives in the core.

HOW: A single ReaderApp class builds the window: text input with Open and Save
buttons, speed and font sliders, transport buttons, the phrase display, a
progress bar and a warning line. Text edits are debounced, then
segmentation runs in a background thread via asyncio.run() so a slow
service never blocks the tkinter main loop. The outcome comes back
through a thread-safe queue polled with .after() and is applied with
ReaderSession.apply_outcome(), which drops results for outdated text.
Playback ticks use TkScheduler, so they also run on the main thread.

RULES:
- Python 3.9 compatible — no slots=True, no match/case, no X | Y unions
- tkinter widgets are ONLY touched from the main thread
- The result queue is the ONLY channel from the worker thread
- Degraded segmentation shows a warning line, never a modal dialog
- Controls are disabled while segmentation is pending
- Closing the window tears the session down before destroying widgets
"""

from __future__ import annotations

import asyncio
import queue
import threading
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox, ttk
from typing import Any, Callable, Optional, Tuple

from bunsetsu_reader.api.client import build_phrase_segmenter
from bunsetsu_reader.config import (
    DEFAULT_FONT_SIZE,
    DEFAULT_INTERVAL_MS,
    FONT_SIZE_MAX,
    FONT_SIZE_MIN,
    INTERVAL_MAX_MS,
    INTERVAL_MIN_MS,
    INTERVAL_STEP_MS,
    SAMPLE_TEXT,
    clamp_font_size,
)
from bunsetsu_reader.core.ir import PlaybackState, SegmentationOutcome
from bunsetsu_reader.core.playback import PlaybackController, ScheduledTask, Scheduler
from bunsetsu_reader.core.segmenter import PhraseSegmenter
from bunsetsu_reader.core.session import ReaderSession

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE = "文節リーダー"
_WINDOW_MIN_WIDTH = 640
_WINDOW_MIN_HEIGHT = 560
_PAD = 8
_TEXT_DEBOUNCE_MS = 400
_QUEUE_POLL_MS = 50


# ---------------------------------------------------------------------------
# Scheduler on top of tkinter's after()
# ---------------------------------------------------------------------------


class _AfterTask(ScheduledTask):
    def __init__(self, widget: tk.Misc, after_id: str) -> None:
        self._widget = widget
        self._after_id: Optional[str] = after_id

    def cancel(self) -> None:
        if self._after_id is not None:
            self._widget.after_cancel(self._after_id)
            self._after_id = None


class TkScheduler(Scheduler):
    """Runs playback ticks on the tkinter main loop via ``after()``."""

    def __init__(self, widget: tk.Misc) -> None:
        self._widget = widget

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledTask:
        after_id = self._widget.after(int(delay_s * 1000), callback)
        return _AfterTask(self._widget, after_id)


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


class ReaderApp:
    """Main tkinter application for the Bunsetsu Reader.

    RULES:
    - All tkinter widget access happens on the main thread only
    - Worker threads post (generation, text, outcome) to self._result_queue
    - The view is refreshed only from PlaybackController notifications
      and after applying an outcome
    """

    def __init__(self, root: tk.Tk, segmenter: Optional[PhraseSegmenter] = None) -> None:
        self._root = root
        self._root.title(_WINDOW_TITLE)
        self._root.minsize(_WINDOW_MIN_WIDTH, _WINDOW_MIN_HEIGHT)

        controller = PlaybackController(TkScheduler(root), interval_ms=DEFAULT_INTERVAL_MS)
        self._session = ReaderSession(segmenter or build_phrase_segmenter(), controller)

        # Thread communication
        self._result_queue: queue.Queue = queue.Queue()
        self._debounce_id: Optional[str] = None
        self._polling = False

        self._build_ui()
        self._unsubscribe = controller.subscribe(self._render_state)
        self._root.protocol("WM_DELETE_WINDOW", self._on_close)

        self._set_text(SAMPLE_TEXT)

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        """Build the main window layout."""
        main = ttk.Frame(self._root, padding=_PAD)
        main.pack(fill=tk.BOTH, expand=True)

        # --- Input text ---
        input_frame = ttk.LabelFrame(main, text="文章を入力または貼り付け", padding=_PAD)
        input_frame.pack(fill=tk.BOTH, expand=False)

        file_row = ttk.Frame(input_frame)
        file_row.pack(fill=tk.X, pady=(0, _PAD))
        self._open_btn = ttk.Button(file_row, text="ファイルを開く", command=self._open_file)
        self._open_btn.pack(side=tk.LEFT)
        self._save_btn = ttk.Button(file_row, text="保存", command=self._save_file)
        self._save_btn.pack(side=tk.LEFT, padx=(_PAD, 0))

        self._text_input = tk.Text(input_frame, height=8, wrap=tk.CHAR, undo=False)
        self._text_input.pack(fill=tk.BOTH, expand=True)
        self._text_input.bind("<<Modified>>", self._on_text_modified)

        # --- Settings ---
        settings = ttk.Frame(main, padding=(0, _PAD))
        settings.pack(fill=tk.X)

        self._speed_var = tk.IntVar(value=DEFAULT_INTERVAL_MS)
        self._speed_label = ttk.Label(settings, width=18)
        self._speed_label.grid(row=0, column=0, sticky=tk.W)
        self._speed_scale = ttk.Scale(
            settings,
            from_=INTERVAL_MIN_MS,
            to=INTERVAL_MAX_MS,
            orient=tk.HORIZONTAL,
            command=self._on_speed_changed,
        )
        self._speed_scale.set(DEFAULT_INTERVAL_MS)
        self._speed_scale.grid(row=0, column=1, sticky=tk.EW)

        self._font_var = tk.IntVar(value=DEFAULT_FONT_SIZE)
        self._font_label = ttk.Label(settings, width=18)
        self._font_label.grid(row=1, column=0, sticky=tk.W)
        self._font_scale = ttk.Scale(
            settings,
            from_=FONT_SIZE_MIN,
            to=FONT_SIZE_MAX,
            orient=tk.HORIZONTAL,
            command=self._on_font_changed,
        )
        self._font_scale.set(DEFAULT_FONT_SIZE)
        self._font_scale.grid(row=1, column=1, sticky=tk.EW)
        settings.columnconfigure(1, weight=1)

        # --- Transport ---
        transport = ttk.Frame(main)
        transport.pack(fill=tk.X)
        self._start_btn = ttk.Button(transport, text="読書開始", command=self._toggle_playback)
        self._start_btn.pack(side=tk.LEFT)
        self._prev_btn = ttk.Button(
            transport, text="前へ", command=self._session.controller.step_back
        )
        self._prev_btn.pack(side=tk.LEFT, padx=(_PAD, 0))
        self._next_btn = ttk.Button(
            transport, text="次へ", command=self._session.controller.step_forward
        )
        self._next_btn.pack(side=tk.LEFT, padx=(_PAD, 0))

        # --- Warning line (degraded segmentation) ---
        self._warning_label = ttk.Label(main, foreground="#b35c00", wraplength=600)
        self._warning_label.pack(fill=tk.X, pady=(_PAD, 0))

        # --- Phrase display ---
        self._phrase_label = tk.Label(
            main,
            text="",
            font=("TkDefaultFont", DEFAULT_FONT_SIZE),
            anchor=tk.CENTER,
            height=3,
        )
        self._phrase_label.pack(fill=tk.BOTH, expand=True, pady=_PAD)

        # --- Progress ---
        progress_row = ttk.Frame(main)
        progress_row.pack(fill=tk.X)
        self._progress = ttk.Progressbar(progress_row, maximum=1.0, mode="determinate")
        self._progress.pack(side=tk.LEFT, fill=tk.X, expand=True)
        self._position_label = ttk.Label(progress_row, width=12, anchor=tk.E)
        self._position_label.pack(side=tk.RIGHT)

        self._update_speed_label(DEFAULT_INTERVAL_MS)
        self._update_font_label(DEFAULT_FONT_SIZE)

    # ------------------------------------------------------------------
    # Input handling
    # ------------------------------------------------------------------

    def _set_text(self, text: str) -> None:
        self._text_input.delete("1.0", tk.END)
        self._text_input.insert("1.0", text)
        self._text_input.edit_modified(False)
        self._submit_text()

    def _open_file(self) -> None:
        path = filedialog.askopenfilename(
            filetypes=[("テキスト", "*.txt"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            messagebox.showerror("ファイルを開けませんでした", str(e))
            return
        self._set_text(content)

    def _save_file(self) -> None:
        """Write the current input text to a .txt file chosen by the user."""
        path = filedialog.asksaveasfilename(
            defaultextension=".txt",
            filetypes=[("テキスト", "*.txt"), ("All files", "*.*")],
        )
        if not path:
            return
        text = self._text_input.get("1.0", "end-1c")
        try:
            Path(path).write_text(text, encoding="utf-8")
        except OSError as e:
            messagebox.showerror("ファイルを保存できませんでした", str(e))

    def _on_text_modified(self, _event: Any = None) -> None:
        if not self._text_input.edit_modified():
            return
        self._text_input.edit_modified(False)
        if self._debounce_id is not None:
            self._root.after_cancel(self._debounce_id)
        self._debounce_id = self._root.after(_TEXT_DEBOUNCE_MS, self._submit_text)

    def _submit_text(self) -> None:
        """Start segmenting the current input in a background thread."""
        self._debounce_id = None
        # Text widgets always end with a newline that the user never typed.
        text = self._text_input.get("1.0", "end-1c")
        generation = self._session.begin_text_change(text)
        self._refresh_controls(self._session.state)

        worker = threading.Thread(
            target=self._segment_thread,
            args=(generation, text),
            daemon=True,
        )
        worker.start()
        if not self._polling:
            self._polling = True
            self._poll_results()

    def _segment_thread(self, generation: int, text: str) -> None:
        """Worker thread entry point: segment and post the outcome."""
        outcome = asyncio.run(self._session.segmenter.segment(text))
        self._result_queue.put((generation, text, outcome))

    def _poll_results(self) -> None:
        """Drain the result queue on the main thread."""
        try:
            while True:
                item: Tuple[int, str, SegmentationOutcome] = self._result_queue.get_nowait()
                generation, text, outcome = item
                if self._session.apply_outcome(generation, text, outcome):
                    self._show_warning(outcome.reason)
        except queue.Empty:
            pass

        self._refresh_controls(self._session.state)
        if self._session.loading:
            self._root.after(_QUEUE_POLL_MS, self._poll_results)
        else:
            self._polling = False

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _on_speed_changed(self, value: str) -> None:
        raw = int(float(value))
        snapped = INTERVAL_MIN_MS + round((raw - INTERVAL_MIN_MS) / INTERVAL_STEP_MS) * INTERVAL_STEP_MS
        if snapped == self._speed_var.get():
            return
        self._speed_var.set(snapped)
        applied = self._session.controller.set_interval_ms(snapped)
        self._update_speed_label(applied)

    def _on_font_changed(self, value: str) -> None:
        size = clamp_font_size(int(float(value)))
        if size == self._font_var.get():
            return
        self._font_var.set(size)
        self._phrase_label.configure(font=("TkDefaultFont", size))
        self._update_font_label(size)

    def _update_speed_label(self, interval_ms: int) -> None:
        self._speed_label.configure(text="表示速度: {}ms".format(interval_ms))

    def _update_font_label(self, size: int) -> None:
        self._font_label.configure(text="フォントサイズ: {}px".format(size))

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def _toggle_playback(self) -> None:
        controller = self._session.controller
        if controller.state.running:
            controller.stop()
        else:
            controller.start()

    def _render_state(self, state: PlaybackState) -> None:
        """PlaybackController listener: redraw phrase and progress."""
        if not state.sequence:
            self._phrase_label.configure(text="テキストを入力してください")
        elif state.running or state.current_index > 0:
            self._phrase_label.configure(text=state.current_phrase.text.strip())
        else:
            self._phrase_label.configure(text="「読書開始」ボタンを押してください")

        self._progress.configure(value=state.progress_fraction or 0.0)
        self._position_label.configure(text=state.position_label)
        self._refresh_controls(state)

    def _refresh_controls(self, state: PlaybackState) -> None:
        loading = self._session.loading

        def _enable(widget: ttk.Widget, enabled: bool) -> None:
            widget.configure(state=tk.NORMAL if enabled and not loading else tk.DISABLED)

        self._start_btn.configure(text="停止" if state.running else "読書開始")
        _enable(self._start_btn, state.can_start or state.can_stop)
        _enable(self._prev_btn, state.can_step_back)
        _enable(self._next_btn, state.can_step_forward)
        _enable(self._open_btn, True)
        _enable(self._save_btn, True)

    def _show_warning(self, reason: Optional[str]) -> None:
        self._warning_label.configure(text=reason or "")

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def _on_close(self) -> None:
        if self._debounce_id is not None:
            self._root.after_cancel(self._debounce_id)
            self._debounce_id = None
        self._unsubscribe()
        self._session.close()
        self._root.destroy()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Launch the Tkinter GUI application.

    RULES:
    - This function blocks until the window is closed
    - Must be called from the main thread
    """
    root = tk.Tk()
    ReaderApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
