"""HTTP API package.

WHY: Exposes phrase segmentation and text statistics to non-Python
clients, and can serve as the remote segmentation service of another
reader instance.

HOW: app.py builds the FastAPI application; models.py holds the Pydantic
request/response schemas.

RULES:
- Import the app from bunsetsu_reader.server.app (not re-exported here,
  so importing the package does not build a segmenter)
"""
