"""
Record and photo storage for the dashboard.

The pages talk to a RecordStore: a small CRUD surface over the lands,
productions and activities tables. SQLiteRecordStore is the bundled
implementation; anything that honours the protocol (a hosted database
client, a test double) can stand in for it.
"""

import json
import logging
import os
import sqlite3
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Protocol, Sequence

from .errors import RemoteFailure
from .models import Activity, Land, Production, Snapshot, join_activities, join_productions

logger = logging.getLogger(__name__)

TABLE_COLUMNS = {
    "lands": (
        "id", "name", "area_m2", "address", "latitude", "longitude", "commodities",
        "custom_commodity", "photos", "status", "created_at", "updated_at",
    ),
    "productions": (
        "id", "land_id", "commodity", "planting_date", "seed_count", "estimated_harvest_date",
        "harvest_date", "harvest_yield_kg", "status", "notes", "created_at", "updated_at",
    ),
    "activities": (
        "id", "land_id", "production_id", "activity_type", "description", "scheduled_date",
        "completed_at", "status", "created_at", "updated_at",
    ),
}
JSON_COLUMNS = {"commodities", "photos"}

SCHEMA = """
CREATE TABLE IF NOT EXISTS lands (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    area_m2 REAL NOT NULL,
    address TEXT,
    latitude REAL,
    longitude REAL,
    commodities TEXT NOT NULL DEFAULT '[]',
    custom_commodity TEXT,
    photos TEXT NOT NULL DEFAULT '[]',
    status TEXT NOT NULL DEFAULT 'active',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS productions (
    id TEXT PRIMARY KEY,
    land_id TEXT NOT NULL REFERENCES lands(id) ON DELETE CASCADE,
    commodity TEXT NOT NULL,
    planting_date TEXT NOT NULL,
    seed_count INTEGER NOT NULL DEFAULT 0,
    estimated_harvest_date TEXT,
    harvest_date TEXT,
    harvest_yield_kg REAL,
    status TEXT NOT NULL DEFAULT 'planted',
    notes TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS activities (
    id TEXT PRIMARY KEY,
    land_id TEXT REFERENCES lands(id) ON DELETE CASCADE,
    production_id TEXT REFERENCES productions(id) ON DELETE CASCADE,
    activity_type TEXT NOT NULL,
    description TEXT NOT NULL,
    scheduled_date TEXT,
    completed_at TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


class RecordStore(Protocol):
    def select(
        self,
        table: str,
        order_by: str | None = None,
        descending: bool = False,
        **filters: Any,
    ) -> List[Dict[str, Any]]:
        ...

    def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def insert_many(self, table: str, records: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        ...

    def update(self, table: str, record_id: str, changes: Dict[str, Any]) -> int:
        ...

    def update_many(self, table: str, record_ids: Sequence[str], changes: Dict[str, Any]) -> int:
        ...

    def delete(self, table: str, record_id: str) -> int:
        ...

    def delete_many(self, table: str, record_ids: Sequence[str]) -> int:
        ...


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_columns(table: str, columns: Iterable[str]) -> None:
    if table not in TABLE_COLUMNS:
        raise RemoteFailure("query", f"unknown table '{table}'")
    unknown = [c for c in columns if c not in TABLE_COLUMNS[table]]
    if unknown:
        raise RemoteFailure("query", f"unknown column(s) on {table}: {', '.join(unknown)}")


def _encode(column: str, value: Any) -> Any:
    if column in JSON_COLUMNS and value is not None and not isinstance(value, str):
        return json.dumps(list(value))
    return value


def _decode_row(row: sqlite3.Row) -> Dict[str, Any]:
    record = dict(row)
    for column in record.keys() & JSON_COLUMNS:
        if isinstance(record[column], str):
            record[column] = json.loads(record[column])
    return record


class SQLiteRecordStore:
    """RecordStore over a local SQLite file, one connection per operation."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA)
        logger.info(f"Record store ready at {db_path}")

    @contextmanager
    def _connect(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @contextmanager
    def _operation(self, name: str):
        try:
            with self._connect() as conn:
                yield conn
        except sqlite3.Error as e:
            logger.error(f"{name} failed: {e}")
            raise RemoteFailure(name, str(e)) from e

    # --- reads ---

    def select(self, table, order_by=None, descending=False, **filters):
        _check_columns(table, list(filters) + ([order_by] if order_by else []))
        sql = f"SELECT * FROM {table}"
        params: List[Any] = []
        if filters:
            sql += " WHERE " + " AND ".join(f"{column} = ?" for column in filters)
            params.extend(filters.values())
        if order_by:
            sql += f" ORDER BY {order_by} {'DESC' if descending else 'ASC'}"
        with self._operation(f"select {table}") as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_decode_row(row) for row in rows]

    # --- writes ---

    def insert(self, table, record):
        return self.insert_many(table, [record])[0]

    def insert_many(self, table, records):
        stamped = []
        for record in records:
            now = _now_iso()
            row = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
            row.update({k: v for k, v in record.items() if v is not None or k not in row})
            stamped.append(row)
        if not stamped:
            return []

        for row in stamped:
            _check_columns(table, row)
        # One transaction for the whole batch
        with self._operation(f"insert {table}") as conn:
            for row in stamped:
                columns = list(row)
                conn.execute(
                    f"INSERT INTO {table} ({', '.join(columns)}) "
                    f"VALUES ({', '.join('?' for _ in columns)})",
                    [_encode(column, row[column]) for column in columns],
                )
        logger.debug(f"Inserted {len(stamped)} row(s) into {table}")
        return stamped

    def update(self, table, record_id, changes):
        return self.update_many(table, [record_id], changes)

    def update_many(self, table, record_ids, changes):
        if not record_ids:
            return 0
        changes = dict(changes, updated_at=_now_iso())
        _check_columns(table, changes)
        assignments = ", ".join(f"{column} = ?" for column in changes)
        placeholders = ", ".join("?" for _ in record_ids)
        params = [_encode(column, value) for column, value in changes.items()] + list(record_ids)
        with self._operation(f"update {table}") as conn:
            cursor = conn.execute(
                f"UPDATE {table} SET {assignments} WHERE id IN ({placeholders})",
                params,
            )
            return cursor.rowcount

    def delete(self, table, record_id):
        return self.delete_many(table, [record_id])

    def delete_many(self, table, record_ids):
        _check_columns(table, [])
        if not record_ids:
            return 0
        placeholders = ", ".join("?" for _ in record_ids)
        with self._operation(f"delete {table}") as conn:
            cursor = conn.execute(f"DELETE FROM {table} WHERE id IN ({placeholders})", list(record_ids))
            return cursor.rowcount


def fetch_snapshot(store: RecordStore) -> Snapshot:
    """Read all three tables newest first and resolve the joins."""
    lands = [Land.from_record(r) for r in store.select("lands", order_by="created_at", descending=True)]
    productions = [
        Production.from_record(r)
        for r in store.select("productions", order_by="created_at", descending=True)
    ]
    activities = [
        Activity.from_record(r)
        for r in store.select("activities", order_by="created_at", descending=True)
    ]
    productions = join_productions(productions, lands)
    activities = join_activities(activities, lands, productions)
    return Snapshot(lands=lands, productions=productions, activities=activities)


class LocalPhotoStore:
    """Blob store for land photos: writes files and hands back their path."""

    def __init__(self, directory: str):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def upload(self, data: bytes, name: str) -> str:
        safe_name = os.path.basename(name).replace(" ", "_") or "photo"
        file_name = f"{int(time.time() * 1000)}-{safe_name}"
        path = os.path.join(self.directory, file_name)
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Photo upload failed for {name}: {e}")
            raise RemoteFailure("upload photo", str(e)) from e
        logger.info(f"Stored photo {file_name}")
        return path
