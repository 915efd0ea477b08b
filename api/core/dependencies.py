"""
Shared FastAPI dependencies.
"""

from __future__ import annotations

from fastapi import Request

from .settings import Settings


def get_settings(request: Request) -> Settings:
    """
    The `Settings` the app was created with (see `main.create_app`).
    """
    return request.app.state.settings
