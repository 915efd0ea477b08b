"""
Pytest fixtures shared by the test suite.

`api/` is put on sys.path by the pytest `pythonpath` setting in pyproject.toml,
so tests import feature packages the same way the app does (`from content ...`).
"""

import base64
from pathlib import Path

import pytest

from assets.store import AssetStore
from content.projector import ContentProjector
from core.settings import Settings


def data_url(data: bytes, mime: str = "image/jpeg") -> str:
    return f"data:{mime};base64," + base64.b64encode(data).decode("ascii")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(site_root=tmp_path / "site", files_dir=tmp_path / "files")


@pytest.fixture
def asset_store(settings: Settings) -> AssetStore:
    return AssetStore.from_settings(settings)


@pytest.fixture
def projector(settings: Settings, asset_store: AssetStore) -> ContentProjector:
    return ContentProjector(settings.site_root, asset_store)


@pytest.fixture
def week_text() -> str:
    return "\n".join(["7.30-15.30,19.30-28.00"] * 7)


@pytest.fixture
def make_data_url():
    return data_url
