"""
Content-addressed image store.

Images arrive either as a reference to an already stored file or inline, as a
`data:<mime>;base64,<payload>` URL. Inline images are decoded, named after a
SHA-1 digest of their bytes and written once under `files_dir`; the returned
name (an ImageRef) is what gets saved in item data and rendered into pages.

Identical bytes always map to the same ImageRef, so a second store of the same
image finds the file already present and skips the write.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path

from core import files
from core.errors import ContentError
from core.settings import Settings

DATA_URL_PREFIX = "data:"
BASE64_MARKER = ";base64,"

logger = logging.getLogger(__name__)


class AssetStoreError(ContentError):
    def __init__(self, message: str, *, field_name: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field_name = field_name

    def for_field(self, field_name: str) -> "AssetStoreError":
        self.field_name = field_name
        return self

    def __str__(self) -> str:
        if self.field_name:
            return f"{self.message} [{self.field_name}]"
        return self.message


class InvalidEncoding(AssetStoreError):
    status_code = 422


class StorageIO(AssetStoreError):
    status_code = 500


@dataclass(frozen=True)
class StoredImages:
    cover: str | None
    images: list[str] = field(default_factory=list)


def image_ref(data: bytes) -> str:
    """
    Filename-safe identifier for `data`: base64 of its SHA-1, `/` swapped for `_`.
    """
    digest = hashlib.sha1(data).digest()
    return base64.b64encode(digest).decode("ascii").replace("/", "_")


def is_data_url(value: str) -> bool:
    return value.startswith(DATA_URL_PREFIX)


def _decode_payload(encoded: str) -> bytes:
    # Line breaks inside the payload are tolerated; anything else non-base64 is not.
    encoded = encoded.replace("\r", "").replace("\n", "")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidEncoding(f"Image payload is not valid base64: {e}") from e


class AssetStore:
    def __init__(self, files_dir: Path) -> None:
        self.files_dir = Path(files_dir)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AssetStore":
        return cls(settings.files_dir)

    def path_for(self, ref: str) -> Path:
        return self.files_dir / ref

    def store(self, payload: str) -> str | None:
        """
        Store one image and return its ImageRef.

        Plain references come back unchanged. A `data:` URL without a
        `;base64,` marker, or with nothing after it, is treated as nothing to
        store and yields None.
        """
        if not is_data_url(payload):
            return payload

        i = payload.find(BASE64_MARKER)
        if i < 0 or i + len(BASE64_MARKER) >= len(payload):
            logger.debug("asset_skipped reason=no_base64_payload prefix=%r", payload[:32])
            return None

        data = _decode_payload(payload[i + len(BASE64_MARKER) :])
        ref = image_ref(data)

        try:
            files.ensure_dir(self.files_dir)
        except OSError as e:
            raise StorageIO(f"Could not create asset directory {self.files_dir}: {e}") from e

        target = self.path_for(ref)
        if target.exists():
            logger.debug("asset_exists ref=%s", ref)
            return ref

        try:
            files.atomic_write_bytes(target, data)
        except OSError as e:
            raise StorageIO(f"Could not write asset {target}: {e}") from e

        logger.info("asset_stored ref=%s bytes=%s", ref, len(data))
        return ref

    def store_all(self, cover_image: str | None, image_urls: list[str] | None) -> StoredImages:
        """
        Store a record's cover image and image list.

        The list keeps its original order with repeated ImageRefs dropped. The
        cover is its own slot and is not compared against the list. The first
        failure aborts the batch.
        """
        cover: str | None = None
        if cover_image:
            try:
                cover = self.store(cover_image)
            except AssetStoreError as e:
                raise e.for_field("coverImageURL")

        images: list[str] = []
        seen: set[str] = set()
        for index, payload in enumerate(image_urls or []):
            try:
                ref = self.store(payload)
            except AssetStoreError as e:
                raise e.for_field(f"imageURLs[{index}]")
            if ref is None or ref in seen:
                continue
            seen.add(ref)
            images.append(ref)

        return StoredImages(cover=cover, images=images)
