"""
Pytest configuration and shared fixtures for the farm operations tests.
"""

import os
import sys
from datetime import datetime

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault("LOG_DIR", "logs")

from farmops.errors import RemoteFailure  # noqa: E402
from farmops.models import Activity, Land, Production  # noqa: E402


class RecordingStore:
    """In-memory stand-in for the record store that remembers every write."""

    def __init__(self, fail_on_update_call=None):
        self.inserted = []
        self.updates = []
        self.deleted = []
        self.fail_on_update_call = fail_on_update_call

    def select(self, table, order_by=None, descending=False, **filters):
        return []

    def insert(self, table, record):
        return self.insert_many(table, [record])[0]

    def insert_many(self, table, records):
        rows = [dict(r, id=f"{table}-{len(self.inserted) + i + 1}") for i, r in enumerate(records)]
        self.inserted.extend((table, r) for r in rows)
        return rows

    def update(self, table, record_id, changes):
        if self.fail_on_update_call is not None and len(self.updates) + 1 == self.fail_on_update_call:
            raise RemoteFailure(f"update {table}", "connection reset")
        self.updates.append((table, record_id, dict(changes)))
        return 1

    def update_many(self, table, record_ids, changes):
        for record_id in record_ids:
            self.update(table, record_id, changes)
        return len(record_ids)

    def delete(self, table, record_id):
        self.deleted.append((table, record_id))
        return 1

    def delete_many(self, table, record_ids):
        for record_id in record_ids:
            self.delete(table, record_id)
        return len(record_ids)


@pytest.fixture
def now():
    return datetime(2024, 6, 15, 10, 30)


@pytest.fixture
def lands():
    return [
        Land(id="land-1", name="North Field", area_m2=5000, commodities=["Tomatoes"], status="active"),
        Land(id="land-2", name="River Plot", area_m2=2500, commodities=["Garlic", "Others"],
             custom_commodity="Ginger", status="active"),
        Land(id="land-3", name="Hill Terrace", area_m2=1200, commodities=["Shallots"], status="vacant"),
        Land(id="land-4", name="Old Orchard", area_m2=800, commodities=["Red Chili"], status="archived"),
    ]


@pytest.fixture
def productions():
    return [
        Production(id="prod-1", land_id="land-1", commodity="Tomatoes", planting_date="2024-03-01",
                   seed_count=200, status="harvested", harvest_date="2024-06-02", harvest_yield_kg=120.0),
        Production(id="prod-2", land_id="land-1", commodity="Red Chili", planting_date="2024-04-10",
                   seed_count=150, status="growing", estimated_harvest_date="2024-07-01"),
        Production(id="prod-3", land_id="land-2", commodity="Tomatoes", planting_date="2023-11-20",
                   seed_count=90, status="harvested", harvest_date="2024-01-15", harvest_yield_kg=80.0),
        Production(id="prod-4", land_id="land-2", commodity="Garlic", planting_date="2024-06-20",
                   seed_count=300, status="planted"),
        Production(id="prod-5", land_id="land-1", commodity="Tomatoes", planting_date="2024-03-01",
                   seed_count=50, status="harvested", harvest_date="2024-05-20", harvest_yield_kg=30.5),
    ]


@pytest.fixture
def activities():
    return [
        Activity(id="act-1", activity_type="Irrigation", description="Water north beds", status="pending",
                 land_id="land-1", scheduled_date="2024-06-16"),
        Activity(id="act-2", activity_type="Weeding", description="Clear river plot", status="completed",
                 land_id="land-2"),
        Activity(id="act-3", activity_type="Spraying", description="Fungicide round", status="in_progress",
                 land_id="land-9", production_id="prod-2"),
    ]


@pytest.fixture
def recording_store():
    return RecordingStore()
