"""Tests for store.py: the SQLite record store and snapshot loading."""

import os

import pytest

from farmops.errors import RemoteFailure
from farmops.store import LocalPhotoStore, SQLiteRecordStore, fetch_snapshot


@pytest.fixture
def store(tmp_path):
    return SQLiteRecordStore(str(tmp_path / "farm.db"))


def _land(store, name="North Field", status="active"):
    return store.insert("lands", {
        "name": name,
        "area_m2": 5000,
        "commodities": ["Tomatoes", "Others"],
        "custom_commodity": "Ginger",
        "photos": [],
        "status": status,
    })


def _production(store, land_id, commodity="Tomatoes", planting_date="2024-03-01"):
    return store.insert("productions", {
        "land_id": land_id,
        "commodity": commodity,
        "planting_date": planting_date,
        "seed_count": 10,
        "status": "planted",
    })


class TestSQLiteRecordStore:
    def test_insert_assigns_identity_and_timestamps(self, store):
        land = _land(store)
        assert land["id"]
        assert land["created_at"] == land["updated_at"]

    def test_json_columns_round_trip(self, store):
        _land(store)
        [row] = store.select("lands")
        assert row["commodities"] == ["Tomatoes", "Others"]
        assert row["photos"] == []

    def test_select_with_filter(self, store):
        _land(store, "A", status="active")
        _land(store, "B", status="vacant")
        assert [r["name"] for r in store.select("lands", status="vacant")] == ["B"]

    def test_insert_many_is_one_batch(self, store):
        land = _land(store)
        rows = store.insert_many("productions", [
            {"land_id": land["id"], "commodity": "Garlic", "planting_date": "2024-01-01", "seed_count": 1},
            {"land_id": land["id"], "commodity": "Tomatoes", "planting_date": "2024-02-01", "seed_count": 2,
             "notes": "second"},
        ])
        assert len(rows) == 2
        assert len(store.select("productions")) == 2

    def test_failed_batch_inserts_nothing(self, store):
        land = _land(store)
        with pytest.raises(RemoteFailure):
            store.insert_many("productions", [
                {"land_id": land["id"], "commodity": "Garlic", "planting_date": "2024-01-01", "seed_count": 1},
                {"land_id": "missing-land", "commodity": "Garlic", "planting_date": "2024-01-01", "seed_count": 1},
            ])
        assert store.select("productions") == []

    def test_update_sets_fields(self, store):
        land = _land(store)
        production = _production(store, land["id"])
        changed = store.update("productions", production["id"], {
            "harvest_date": "2024-06-01",
            "harvest_yield_kg": 42.5,
            "status": "harvested",
        })
        assert changed == 1
        [row] = store.select("productions")
        assert row["status"] == "harvested"
        assert row["harvest_yield_kg"] == 42.5

    def test_update_unknown_identity_changes_nothing(self, store):
        assert store.update("productions", "nope", {"status": "growing"}) == 0

    def test_delete_many(self, store):
        land = _land(store)
        ids = [_production(store, land["id"])["id"] for _ in range(3)]
        assert store.delete_many("productions", ids[:2]) == 2
        assert [r["id"] for r in store.select("productions")] == ids[2:]

    def test_deleting_land_cascades(self, store):
        land = _land(store)
        production = _production(store, land["id"])
        store.insert("activities", {
            "land_id": land["id"],
            "production_id": production["id"],
            "activity_type": "Irrigation",
            "description": "Water beds",
            "status": "pending",
        })
        store.delete("lands", land["id"])
        assert store.select("productions") == []
        assert store.select("activities") == []

    def test_unknown_column_is_rejected(self, store):
        with pytest.raises(RemoteFailure):
            store.select("lands", colour="green")

    def test_unknown_table_is_rejected(self, store):
        with pytest.raises(RemoteFailure):
            store.insert("crops", {"name": "x"})


class TestFetchSnapshot:
    def test_joins_and_dangling_references(self, store):
        land = _land(store)
        production = _production(store, land["id"])
        store.insert("activities", {
            "production_id": production["id"],
            "activity_type": "Spraying",
            "description": "Fungicide",
            "status": "in_progress",
        })

        snapshot = fetch_snapshot(store)

        assert snapshot.lands[0].custom_commodity == "Ginger"
        assert snapshot.productions[0].land.name == "North Field"
        activity = snapshot.activities[0]
        assert activity.land is None
        assert activity.production.id == production["id"]


class TestLocalPhotoStore:
    def test_upload_writes_file(self, tmp_path):
        photos = LocalPhotoStore(str(tmp_path / "photos"))
        reference = photos.upload(b"jpegbytes", "north field.jpg")
        assert os.path.exists(reference)
        assert reference.endswith("-north_field.jpg")
        with open(reference, "rb") as f:
            assert f.read() == b"jpegbytes"
