"""
Content projector: typed record -> static-site page.

A page is TOML front matter between two `+++` lines followed by the record's
description as the body. Images are referenced by ImageRef and published
under `static/img/...`, copied from the asset store.

Layout under the site root:
- content/<type>s/<id>.md
- static/img/cover/<type>/<ref>.jpg
- static/img/<type>/<id>/<ref>.jpg
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from assets.store import AssetStore, StorageIO, StoredImages
from core import files
from core.settings import Settings

from . import opening_hours
from .records import (
    LOCATION,
    RECORD_TYPES,
    LocationRecord,
    ProjectionError,
    Record,
    UnknownRecordType,
)

FRONT_MATTER_DELIMITER = "+++\n"

logger = logging.getLogger(__name__)


class MissingSourceAsset(ProjectionError):
    status_code = 500

    def __init__(self, ref: str, path: Path) -> None:
        super().__init__(f"Image {ref!r} not found in asset store ({path})")
        self.ref = ref
        self.path = path


@dataclass(frozen=True)
class Document:
    front_matter: dict[str, Any]
    body: str


@dataclass(frozen=True)
class ProjectionResult:
    record_id: int
    record_type: str
    document_path: Path
    asset_paths: list[Path] = field(default_factory=list)


def cover_image_url(record_type: str, ref: str) -> str:
    return f"/img/cover/{record_type}/{ref}.jpg"


def image_url(record_type: str, record_id: int, ref: str) -> str:
    return f"/img/{record_type}/{record_id}/{ref}.jpg"


def render_document(document: Document) -> str:
    return FRONT_MATTER_DELIMITER + tomli_w.dumps(document.front_matter) + FRONT_MATTER_DELIMITER + document.body


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    # TOML has no null.
    return {k: v for k, v in values.items() if v is not None}


def _opening_hours(record: LocationRecord) -> dict[str, Any] | None:
    raw = record.opening_hours
    if raw is None:
        return None
    if isinstance(raw, dict):
        week = opening_hours.parse_day_mapping(raw)
    else:
        week = opening_hours.parse_week_schedule(raw)
    return opening_hours.week_as_front_matter(week)


class ContentProjector:
    def __init__(self, site_root: Path, assets: AssetStore) -> None:
        self.site_root = Path(site_root)
        self.assets = assets

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContentProjector":
        return cls(settings.site_root, AssetStore.from_settings(settings))

    def document_path(self, record_type: str, record_id: int) -> Path:
        return self.site_root / "content" / f"{record_type}s" / f"{record_id}.md"

    def static_path(self, url: str) -> Path:
        return self.site_root / "static" / url.lstrip("/")

    def project(self, record: Record, record_type: str) -> Document:
        document, _stored = self._project(record, record_type)
        return document

    def _project(self, record: Record, record_type: str) -> tuple[Document, StoredImages]:
        if record_type not in RECORD_TYPES or record.type != record_type:
            raise UnknownRecordType(record_type)

        stored = self.assets.store_all(record.cover_image_url, record.image_urls)

        extra: dict[str, Any] = {}
        if record_type != LOCATION:
            extra["type"] = record.type
        extra.update(
            {
                "address": record.address,
                "coordinates": list(record.coordinates),
                "phone": record.phone,
                "website_url": record.website_url,
            }
        )
        if stored.cover is not None:
            extra["cover_image_url"] = cover_image_url(record_type, stored.cover)
        # Same order as stored.images; materialize() relies on the index match.
        extra["image_urls"] = [image_url(record_type, record.id, ref) for ref in stored.images]
        if isinstance(record, LocationRecord):
            hours = _opening_hours(record)
            if hours is not None:
                extra["opening_hours"] = hours

        front_matter = _drop_none(
            {
                "id": record.id,
                "title": record.title,
                "date": record.created_at,
                "updated_at": record.updated_at,
            }
        )
        front_matter["taxonomies"] = {"tags": list(record.tags)}
        front_matter["extra"] = extra

        return Document(front_matter=front_matter, body=record.description), stored

    def _source(self, ref: str) -> Path:
        if not ref or ref in (".", "..") or "/" in ref or os.sep in ref:
            raise MissingSourceAsset(ref, self.assets.files_dir / ref)
        path = self.assets.path_for(ref)
        if not path.is_file():
            raise MissingSourceAsset(ref, path)
        return path

    def materialize(self, record: Record, record_type: str) -> ProjectionResult:
        """
        Write the record's page and publish its images.

        Every referenced image is checked before anything is written, and the
        page itself is written last, so a failing record leaves no page behind.
        """
        document, stored = self._project(record, record_type)
        extra = document.front_matter["extra"]

        copies: list[tuple[Path, Path]] = []
        if stored.cover is not None:
            copies.append((self._source(stored.cover), self.static_path(extra["cover_image_url"])))
        for i, ref in enumerate(stored.images):
            copies.append((self._source(ref), self.static_path(extra["image_urls"][i])))

        text = render_document(document)
        doc_path = self.document_path(record_type, record.id)

        try:
            for src, dest in copies:
                files.ensure_dir(dest.parent)
                try:
                    data = src.read_bytes()
                except FileNotFoundError:
                    raise MissingSourceAsset(src.name, src)
                files.atomic_write_bytes(dest, data)

            files.ensure_dir(doc_path.parent)
            files.atomic_write_text(doc_path, text)
        except OSError as e:
            raise StorageIO(f"Could not write content for {record_type} {record.id}: {e}") from e

        logger.info(
            "content_generated type=%s id=%s path=%s images=%s",
            record_type,
            record.id,
            doc_path,
            len(copies),
        )
        return ProjectionResult(
            record_id=record.id,
            record_type=record_type,
            document_path=doc_path,
            asset_paths=[dest for _src, dest in copies],
        )
