"""
Runtime settings.

Values come from environment variables and are resolved once, at startup, into
an immutable `Settings` value that is handed to the asset store and the content
projector. Nothing below `main.py` reads the environment directly.

- SITE_ROOT: output directory of the static site (content/ and static/ live here)
- FILES_DIR: directory holding the content-addressed image originals
- DATABASE_URL: Postgres DSN for the item store
- LOG_LEVEL: logging level name
- CORS_ORIGINS: comma-separated list of origins allowed to call the API
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_SITE_ROOT = "site"
DEFAULT_FILES_DIR = "files"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_CORS_ORIGINS = ("http://localhost:8000",)


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    site_root: Path
    files_dir: Path
    database_url: str = ""
    log_level: str = DEFAULT_LOG_LEVEL
    cors_origins: tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)

    @property
    def content_dir(self) -> Path:
        return self.site_root / "content"

    @property
    def static_dir(self) -> Path:
        return self.site_root / "static"


def log_level_from_name(name: str) -> int:
    """
    Resolve a level name like "debug" or "WARNING" to a logging constant.
    """
    level = logging.getLevelName((name or "").strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Invalid LOG_LEVEL '{name}'.")
    return level


def settings_from_env() -> Settings:
    return Settings(
        site_root=Path(_env_str("SITE_ROOT", DEFAULT_SITE_ROOT)),
        files_dir=Path(_env_str("FILES_DIR", DEFAULT_FILES_DIR)),
        database_url=os.environ.get("DATABASE_URL", "").strip(),
        log_level=_env_str("LOG_LEVEL", DEFAULT_LOG_LEVEL),
        cors_origins=_env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
    )
