"""Bunsetsu Reader — phrase-at-a-time reading aid for Japanese text.

WHY: Japanese text has no spaces between words, which makes rapid serial
visual presentation (one chunk at a time at a fixed cadence) hard: the
chunks must first be found. This package cuts text into bunsetsu-like
phrases and plays them back at an adjustable speed.

HOW: Two-stage pipeline — segment (precise remote service, or the
built-in heuristic when that fails), then play (a timer-driven state
machine with manual stepping). CLI, tkinter GUI and HTTP API are thin
front ends over the same session.

RULES:
- Segmentation never fails from the caller's point of view; a service
  failure becomes a warning attached to fallback phrases
- Playback timers are always cancelled before the phrases change
"""

__version__ = "0.1.0"
