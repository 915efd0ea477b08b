"""
Item persistence.

Schema (see db/migrations):
- items(id bigserial, data jsonb, created_at timestamptz, updated_at timestamptz)

`data` holds the item's JSON as submitted (with images already replaced by
ImageRefs); its "type" key says whether it is a location or an event.
"""

from __future__ import annotations

from typing import Any

from core import db

_COLUMNS = "id, data, created_at, updated_at"


async def list_items(*, limit: int) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM items
        ORDER BY id
        LIMIT $1
        """,
        limit,
    )


async def list_items_by_type(record_type: str) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM items
        WHERE data->>'type' = $1
        ORDER BY id
        """,
        record_type,
    )


async def get_item(item_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"SELECT {_COLUMNS} FROM items WHERE id = $1",
        item_id,
    )


async def insert_item(data: dict[str, Any]) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        INSERT INTO items (data, created_at, updated_at)
        VALUES ($1::jsonb, now(), now())
        RETURNING {_COLUMNS}
        """,
        data,
    )
    if row is None:
        raise RuntimeError("Failed to insert item.")
    return row


async def update_item(item_id: int, data: dict[str, Any]) -> dict[str, Any] | None:
    """
    Replace an item's data. Returns the updated row, or None when not found.
    """
    return await db.fetch_one(
        f"""
        UPDATE items
        SET data = $1::jsonb,
            updated_at = now()
        WHERE id = $2
        RETURNING {_COLUMNS}
        """,
        data,
        item_id,
    )


async def delete_item(item_id: int) -> bool:
    status = await db.execute("DELETE FROM items WHERE id = $1", item_id)
    # asyncpg returns the command tag, e.g. "DELETE 1".
    return status.rsplit(" ", 1)[-1] != "0"
