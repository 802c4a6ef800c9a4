"""Core segmentation, playback and session modules.

WHY: The core package holds the parts of the reader with real invariants:
the phrase IR, the two segmentation paths, the timed playback state
machine, and the session that ties a text change to a playback reset.
Everything else (CLI, GUI, HTTP API) is a thin shell around it.

HOW: ir.py defines the data structures, fallback.py and segmenter.py
produce phrase sequences, playback.py advances through them, session.py
composes both, stats.py reports on a text and its phrases.

RULES:
- No module in core imports tkinter, FastAPI or httpx
- The playback controller never knows which segmenter produced its phrases
"""
