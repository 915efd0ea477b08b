"""
FastAPI router for item (location / event) endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query

from assets.store import AssetStore
from core.dependencies import get_settings
from core.settings import Settings

from . import service

router = APIRouter()


def get_asset_store(settings: Settings = Depends(get_settings)) -> AssetStore:
    return AssetStore.from_settings(settings)


@router.get("/items")
async def list_items(size: str | None = Query(default=None)) -> list[dict]:
    """
    List items, `size` at a time (default 10).
    """
    return await service.list_items(size)


@router.get("/item/{item_id}")
async def get_item(item_id: int) -> dict:
    return await service.get_item(item_id)


@router.post("/item")
async def create_item(
    data: dict[str, Any] = Body(...),
    assets: AssetStore = Depends(get_asset_store),
) -> dict:
    """
    Create a location or event. Inline `data:` images are stored first and
    replaced by their ImageRefs.
    """
    item = await service.create_item(data, assets)
    return {"status": "ok", "message": "successfully created a new item", "item": item}


@router.put("/item/{item_id}")
async def update_item(
    item_id: int,
    data: dict[str, Any] = Body(...),
    assets: AssetStore = Depends(get_asset_store),
) -> dict:
    item = await service.update_item(item_id, data, assets)
    return {"status": "ok", "message": "successfully updated item", "item": item}


@router.delete("/item/{item_id}")
async def delete_item(item_id: int) -> dict:
    await service.delete_item(item_id)
    return {"status": "ok", "message": "successfully deleted item"}
