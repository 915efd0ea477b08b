"""
Item business logic, independent of FastAPI routing:
- validate submitted item JSON against its record type
- move inline images into the asset store before the JSON is saved
- decode stored rows into typed records for responses
"""

from __future__ import annotations

import re
from typing import Any

from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool

from assets.store import AssetStore
from content.records import InvalidRecord, UnknownRecordType, record_from_data, record_from_item

from . import repository

DEFAULT_PAGE_SIZE = 10

COVER_IMAGE_KEY = "coverImageURL"
IMAGES_KEY = "imageURLs"


def page_size(size: str | None) -> int:
    if not size:
        return DEFAULT_PAGE_SIZE
    if not re.fullmatch(r"[+-]?[0-9]+", size):
        raise HTTPException(status_code=400, detail="size is not a valid number")
    n = int(size)
    return 1 if n < 0 else n


def store_item_images(data: dict[str, Any], assets: AssetStore) -> dict[str, Any]:
    """
    Return a copy of `data` whose image fields hold ImageRefs instead of
    inline payloads.
    """
    cover = data.get(COVER_IMAGE_KEY)
    images = data.get(IMAGES_KEY)
    if cover is not None and not isinstance(cover, str):
        raise HTTPException(status_code=422, detail=f"{COVER_IMAGE_KEY} must be a string.")
    if images is not None and not (isinstance(images, list) and all(isinstance(i, str) for i in images)):
        raise HTTPException(status_code=422, detail=f"{IMAGES_KEY} must be a list of strings.")

    stored = assets.store_all(cover, images)

    out = dict(data)
    if COVER_IMAGE_KEY in data:
        out[COVER_IMAGE_KEY] = stored.cover or ""
    if IMAGES_KEY in data:
        out[IMAGES_KEY] = stored.images
    return out


def decode_item(row: dict[str, Any]) -> dict[str, Any]:
    # Rows are validated on write, so a decode failure here is reported as 500.
    try:
        record = record_from_item(row)
    except (UnknownRecordType, InvalidRecord) as e:
        raise HTTPException(status_code=500, detail=f"Could not decode item {row['id']}: {e}") from e
    return record.model_dump(mode="json", by_alias=True)


async def _prepare(data: dict[str, Any], assets: AssetStore) -> dict[str, Any]:
    # Validate first so a bad payload never leaves files behind.
    record_from_data(data)
    return await run_in_threadpool(store_item_images, data, assets)


async def list_items(size: str | None) -> list[dict[str, Any]]:
    rows = await repository.list_items(limit=page_size(size))
    return [decode_item(row) for row in rows]


async def get_item(item_id: int) -> dict[str, Any]:
    row = await repository.get_item(item_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Item not found.")
    return decode_item(row)


async def create_item(data: dict[str, Any], assets: AssetStore) -> dict[str, Any]:
    prepared = await _prepare(data, assets)
    row = await repository.insert_item(prepared)
    return decode_item(row)


async def update_item(item_id: int, data: dict[str, Any], assets: AssetStore) -> dict[str, Any]:
    prepared = await _prepare(data, assets)
    row = await repository.update_item(item_id, prepared)
    if row is None:
        raise HTTPException(status_code=404, detail="Item not found.")
    return decode_item(row)


async def delete_item(item_id: int) -> None:
    if not await repository.delete_item(item_id):
        raise HTTPException(status_code=404, detail="Item not found.")
