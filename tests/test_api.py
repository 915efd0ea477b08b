"""
HTTP tests for the item and generation endpoints.

The item repository is replaced by an in-memory fake, so no database is
needed; the lifespan (which opens the DB pool) is not started.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from assets.store import image_ref
from items import repository
from main import create_app

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeItems:
    def __init__(self):
        self.rows = {}
        self.next_id = 1
        self.last_limit = None

    async def list_items(self, *, limit):
        self.last_limit = limit
        return list(self.rows.values())[:limit]

    async def list_items_by_type(self, record_type):
        return [r for r in self.rows.values() if r["data"].get("type") == record_type]

    async def get_item(self, item_id):
        return self.rows.get(item_id)

    async def insert_item(self, data):
        row = {"id": self.next_id, "data": data, "created_at": NOW, "updated_at": NOW}
        self.rows[self.next_id] = row
        self.next_id += 1
        return row

    async def update_item(self, item_id, data):
        if item_id not in self.rows:
            return None
        self.rows[item_id] = {**self.rows[item_id], "data": data}
        return self.rows[item_id]

    async def delete_item(self, item_id):
        return self.rows.pop(item_id, None) is not None


@pytest.fixture
def fake_items(monkeypatch):
    fake = FakeItems()
    for name in ("list_items", "list_items_by_type", "get_item", "insert_item", "update_item", "delete_item"):
        monkeypatch.setattr(repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def client(settings, fake_items):
    return TestClient(create_app(settings))


@pytest.fixture
def location_payload(make_data_url):
    return {
        "type": "location",
        "title": "Corner Cafe",
        "description": "Coffee.",
        "coverImageURL": make_data_url(b"cover"),
        "imageURLs": [make_data_url(b"a"), make_data_url(b"a"), make_data_url(b"b")],
        "tags": ["coffee"],
        "openingHours": "\n".join(["8-17"] * 7),
    }


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestItems:
    def test_create_stores_images_and_saves_refs(self, client, fake_items, location_payload, settings):
        resp = client.post("/item", json=location_payload)
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"

        saved = fake_items.rows[1]["data"]
        assert saved["coverImageURL"] == image_ref(b"cover")
        assert saved["imageURLs"] == [image_ref(b"a"), image_ref(b"b")]
        assert (settings.files_dir / image_ref(b"cover")).read_bytes() == b"cover"
        assert body["item"]["id"] == 1
        assert body["item"]["coverImageURL"] == image_ref(b"cover")

    def test_create_unknown_type(self, client, fake_items, settings):
        resp = client.post("/item", json={"type": "venue", "coverImageURL": "data:x;base64,aGk="})
        assert resp.status_code == 400
        assert resp.json()["error"] == "UnknownRecordType"
        assert fake_items.rows == {}
        assert not settings.files_dir.exists()

    def test_create_bad_image(self, client, fake_items):
        resp = client.post("/item", json={"type": "event", "imageURLs": ["data:x;base64,###"]})
        assert resp.status_code == 422
        assert resp.json()["error"] == "InvalidEncoding"
        assert fake_items.rows == {}

    def test_create_rejects_non_string_images(self, client):
        resp = client.post("/item", json={"type": "event", "imageURLs": [1, 2]})
        assert resp.status_code == 422

    def test_get_and_list(self, client, location_payload):
        client.post("/item", json=location_payload)
        item = client.get("/item/1").json()
        assert item["title"] == "Corner Cafe"
        assert item["type"] == "location"
        assert len(client.get("/items").json()) == 1

    def test_list_default_and_negative_size(self, client, fake_items):
        client.get("/items")
        assert fake_items.last_limit == 10
        client.get("/items", params={"size": -5})
        assert fake_items.last_limit == 1

    def test_list_rejects_non_numeric_size(self, client, fake_items):
        resp = client.get("/items", params={"size": "abc"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "size is not a valid number"
        assert fake_items.last_limit is None

    def test_get_missing(self, client):
        assert client.get("/item/99").status_code == 404

    def test_get_stored_unknown_type(self, client, fake_items):
        fake_items.rows[1] = {"id": 1, "data": {"type": "venue"}, "created_at": NOW, "updated_at": NOW}
        resp = client.get("/item/1")
        assert resp.status_code == 500
        assert "venue" in resp.json()["detail"]

    def test_update(self, client, fake_items, location_payload):
        client.post("/item", json=location_payload)
        resp = client.put("/item/1", json={**location_payload, "title": "Renamed"})
        assert resp.status_code == 200
        assert fake_items.rows[1]["data"]["title"] == "Renamed"
        assert client.put("/item/5", json=location_payload).status_code == 404

    def test_delete(self, client, fake_items, location_payload):
        client.post("/item", json=location_payload)
        assert client.delete("/item/1").json()["status"] == "ok"
        assert fake_items.rows == {}
        assert client.delete("/item/1").status_code == 404


class TestGenerate:
    def test_generates_pages_for_type(self, client, location_payload, settings):
        client.post("/item", json=location_payload)
        client.post("/item", json={"type": "event", "title": "Gig"})

        resp = client.post("/generate/location")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert [g["id"] for g in body["generated"]] == [1]
        assert (settings.site_root / "content" / "locations" / "1.md").is_file()
        assert not (settings.site_root / "content" / "events").exists()

    def test_unknown_type(self, client):
        resp = client.post("/generate/venue")
        assert resp.status_code == 400
        assert resp.json()["status"] == "error"

    def test_missing_asset_fails_run(self, client, fake_items):
        fake_items.rows[1] = {
            "id": 1,
            "data": {"type": "event", "coverImageURL": "missing"},
            "created_at": NOW,
            "updated_at": NOW,
        }
        resp = client.post("/generate/event")
        assert resp.status_code == 500
        assert resp.json()["error"] == "MissingSourceAsset"

    def test_continue_on_error(self, client, fake_items):
        fake_items.rows[1] = {
            "id": 1,
            "data": {"type": "event", "coverImageURL": "missing"},
            "created_at": NOW,
            "updated_at": NOW,
        }
        fake_items.rows[2] = {"id": 2, "data": {"type": "event"}, "created_at": NOW, "updated_at": NOW}
        resp = client.post("/generate/event", json={"continue_on_error": True})
        body = resp.json()
        assert body["status"] == "partial"
        assert [g["id"] for g in body["generated"]] == [2]
        assert [f["id"] for f in body["failed"]] == [1]

    def test_continue_on_error_reports_undecodable_row(self, client, fake_items, settings):
        fake_items.rows[1] = {
            "id": 1,
            "data": {"type": "event", "coordinates": "nope"},
            "created_at": NOW,
            "updated_at": NOW,
        }
        fake_items.rows[2] = {"id": 2, "data": {"type": "event"}, "created_at": NOW, "updated_at": NOW}
        resp = client.post("/generate/event", json={"continue_on_error": True})
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "partial"
        assert [g["id"] for g in body["generated"]] == [2]
        assert [f["id"] for f in body["failed"]] == [1]
        assert not (settings.site_root / "content" / "events" / "1.md").exists()

    def test_undecodable_row_stops_run_by_default(self, client, fake_items):
        fake_items.rows[1] = {
            "id": 1,
            "data": {"type": "event", "coordinates": "nope"},
            "created_at": NOW,
            "updated_at": NOW,
        }
        resp = client.post("/generate/event")
        assert resp.status_code == 422
        assert resp.json()["error"] == "InvalidRecord"
