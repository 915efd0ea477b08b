"""
Base error types shared by the content pipeline.

Every failure raised by the opening-hours parser, the asset store and the
content projector derives from `ContentError`, so the HTTP layer can map the
whole family with one `except` clause.
"""

from __future__ import annotations


class ContentError(RuntimeError):
    """A record could not be turned into site content."""

    # HTTP status the API layer should answer with.
    status_code = 500
