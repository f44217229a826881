# farmops/models.py
import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Literal, Sequence

LandStatus = Literal["active", "vacant", "archived"]
ProductionStatus = Literal["planted", "growing", "harvested"]
ActivityStatus = Literal["pending", "in_progress", "completed"]

COMMODITIES = (
    "Red Chili",
    "Rawit Chili",
    "Tomatoes",
    "Shallots",
    "Garlic",
    "Others",
)
OTHER_COMMODITY = "Others"

LAND_STATUSES = ("active", "vacant", "archived")
PRODUCTION_STATUSES = ("planted", "growing", "harvested")
ACTIVITY_STATUSES = ("pending", "in_progress", "completed")


def _as_list(value: Any) -> List[str]:
    # SQLite hands JSON columns back as text
    if value is None or value == "":
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return [value]
    return [str(v) for v in value]


def _as_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


@dataclass(frozen=True)
class Land:
    id: str
    name: str
    area_m2: float
    commodities: List[str]
    status: LandStatus = "active"
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    custom_commodity: str | None = None
    photos: List[str] = field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Land":
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            area_m2=float(record["area_m2"]),
            commodities=_as_list(record.get("commodities")),
            status=record.get("status") or "active",
            address=record.get("address"),
            latitude=_as_float(record.get("latitude")),
            longitude=_as_float(record.get("longitude")),
            custom_commodity=record.get("custom_commodity"),
            photos=_as_list(record.get("photos")),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )


@dataclass(frozen=True)
class Production:
    id: str
    land_id: str
    commodity: str
    planting_date: str
    seed_count: int
    status: ProductionStatus = "planted"
    estimated_harvest_date: str | None = None
    harvest_date: str | None = None
    harvest_yield_kg: float | None = None
    notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    land: Land | None = None

    @property
    def is_harvested(self) -> bool:
        return self.status == "harvested"

    @property
    def is_active(self) -> bool:
        return self.status in ("planted", "growing")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Production":
        return cls(
            id=str(record["id"]),
            land_id=str(record["land_id"]),
            commodity=str(record["commodity"]),
            planting_date=str(record["planting_date"]),
            seed_count=int(record.get("seed_count") or 0),
            status=record.get("status") or "planted",
            estimated_harvest_date=record.get("estimated_harvest_date"),
            harvest_date=record.get("harvest_date"),
            harvest_yield_kg=_as_float(record.get("harvest_yield_kg")),
            notes=record.get("notes"),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )


@dataclass(frozen=True)
class Activity:
    id: str
    activity_type: str
    description: str
    status: ActivityStatus = "pending"
    land_id: str | None = None
    production_id: str | None = None
    scheduled_date: str | None = None
    completed_at: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    land: Land | None = None
    production: Production | None = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Activity":
        return cls(
            id=str(record["id"]),
            activity_type=str(record.get("activity_type") or ""),
            description=str(record.get("description") or ""),
            status=record.get("status") or "pending",
            land_id=record.get("land_id"),
            production_id=record.get("production_id"),
            scheduled_date=record.get("scheduled_date"),
            completed_at=record.get("completed_at"),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )


@dataclass(frozen=True)
class Snapshot:
    """Everything one page view reads from the store."""

    lands: List[Land]
    productions: List[Production]
    activities: List[Activity]


# === JOINS ===


def join_productions(productions: Sequence[Production], lands: Sequence[Land]) -> List[Production]:
    """Attach each production's land; a missing land joins as None."""
    by_id = {land.id: land for land in lands}
    return [replace(p, land=by_id.get(p.land_id)) for p in productions]


def join_activities(
    activities: Sequence[Activity],
    lands: Sequence[Land],
    productions: Sequence[Production],
) -> List[Activity]:
    lands_by_id = {land.id: land for land in lands}
    productions_by_id = {p.id: p for p in productions}
    joined = []
    for a in activities:
        joined.append(
            replace(
                a,
                land=lands_by_id.get(a.land_id) if a.land_id else None,
                production=productions_by_id.get(a.production_id) if a.production_id else None,
            )
        )
    return joined
