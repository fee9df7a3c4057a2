"""Scrapbook backend: scrapbooks, page layouts and playlists over FastAPI."""

__version__ = "0.1.0"
