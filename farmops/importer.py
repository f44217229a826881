# farmops/importer.py
import io
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Sequence

import pandas as pd

from .errors import NoValidRecordsError, NotFoundReference, SpreadsheetError
from .models import Land, Production
from .store import RecordStore

logger = logging.getLogger(__name__)

RowKind = Literal["planting", "harvest"]

PLANTING_COLUMNS = ["land_name", "commodity", "planting_date", "seed_count", "estimated_harvest_date", "notes"]
HARVEST_COLUMNS = ["production_id", "land_name", "commodity", "planting_date", "harvest_date", "harvest_yield_kg"]

NO_VALID_RECORDS_MESSAGE = (
    "No valid records found. Ensure columns: land_name, commodity, planting_date, seed_count"
)

_LEADING_INT = re.compile(r"^\s*(-?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


# === DATA CLASSES ===


@dataclass(frozen=True)
class RawRow:
    """One untyped spreadsheet row, tagged with the import it belongs to."""

    kind: RowKind
    row_number: int
    values: Dict[str, Any]


@dataclass(frozen=True)
class RowRejection:
    row_number: int
    reason: str


@dataclass(frozen=True)
class PlantingRecord:
    land_id: str
    commodity: str
    planting_date: str
    seed_count: int
    estimated_harvest_date: str | None = None
    notes: str | None = None

    def to_insert(self) -> Dict[str, Any]:
        return {
            "land_id": self.land_id,
            "commodity": self.commodity,
            "planting_date": self.planting_date,
            "seed_count": self.seed_count,
            "estimated_harvest_date": self.estimated_harvest_date,
            "notes": self.notes,
            "status": "planted",
        }


@dataclass(frozen=True)
class HarvestUpdate:
    production_id: str
    harvest_date: str
    harvest_yield_kg: float

    def to_changes(self) -> Dict[str, Any]:
        return {
            "harvest_date": self.harvest_date,
            "harvest_yield_kg": self.harvest_yield_kg,
            "status": "harvested",
        }


@dataclass
class PlantingBatch:
    accepted: List[PlantingRecord] = field(default_factory=list)
    rejected: List[RowRejection] = field(default_factory=list)


@dataclass
class HarvestBatch:
    accepted: List[HarvestUpdate] = field(default_factory=list)
    rejected: List[RowRejection] = field(default_factory=list)


@dataclass(frozen=True)
class ImportResult:
    imported: int
    skipped: int


# === SHEET READING ===


def normalise_header(name: Any) -> str:
    """'Land Name ' -> 'land_name', the same clean-up the upload screens apply."""
    return (
        str(name).strip().lower()
        .replace(" ", "_")
        .replace("(", "")
        .replace(")", "")
        .replace("/", "_")
        .replace(".", "")
    )


def _cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, (pd.Timestamp, datetime)):
        if pd.isna(value):
            return None
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def read_spreadsheet(data: bytes, filename: str) -> List[Dict[str, Any]]:
    """
    Read the first sheet of a .csv/.xlsx/.xls upload into plain dict rows
    with normalised headers. Empty cells come back as None; date cells as
    'YYYY-MM-DD' strings.
    """
    lower = filename.lower()
    try:
        if lower.endswith(".csv"):
            df = pd.read_csv(io.BytesIO(data), dtype=str, keep_default_na=False)
        elif lower.endswith(".xlsx"):
            df = pd.read_excel(io.BytesIO(data), sheet_name=0, engine="openpyxl")
        elif lower.endswith(".xls"):
            df = pd.read_excel(io.BytesIO(data), sheet_name=0, engine="xlrd")
        else:
            raise SpreadsheetError(f"Unsupported file type: {filename}")
    except SpreadsheetError:
        raise
    except Exception as e:
        logger.error(f"Could not read spreadsheet {filename}: {e}")
        raise SpreadsheetError(f"Could not read {filename}: {e}") from e

    df.columns = [normalise_header(c) for c in df.columns]
    rows = []
    for record in df.to_dict(orient="records"):
        rows.append({k: _cell(v) for k, v in record.items()})
    return rows


def tag_rows(rows: Sequence[Dict[str, Any]], kind: RowKind) -> List[RawRow]:
    # Row 1 of the sheet is the header
    return [RawRow(kind=kind, row_number=i + 2, values=dict(row)) for i, row in enumerate(rows)]


# === FIELD COERCION ===


def _text(value: Any) -> str | None:
    value = _cell(value)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def coerce_seed_count(value: Any) -> int:
    """Leading integer of the cell ('120 seeds' -> 120); anything else, negatives included, is 0."""
    value = _cell(value)
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    match = _LEADING_INT.match(str(value))
    return max(int(match.group(1)), 0) if match else 0


def coerce_yield(value: Any) -> float | None:
    """Leading decimal of the cell; None when there is no number."""
    value = _cell(value)
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_FLOAT.match(str(value))
    return float(match.group(1)) if match else None


# === NATURAL KEY LOOKUPS ===


def find_land(lands: Sequence[Land], name: str) -> Land:
    """First land whose name matches case-insensitively."""
    wanted = name.lower()
    for land in lands:
        if land.name.lower() == wanted:
            return land
    raise NotFoundReference(f"Unknown land '{name}'")


def find_production(
    productions: Sequence[Production],
    land: Land,
    commodity: str,
    planting_date: str,
) -> Production:
    """First production on `land` with the same commodity (any case) and planting date string."""
    wanted = commodity.lower()
    for p in productions:
        if p.land_id == land.id and p.commodity.lower() == wanted and p.planting_date == planting_date:
            return p
    raise NotFoundReference(
        f"No production of '{commodity}' planted {planting_date} on '{land.name}'"
    )


# === ROW VALIDATION ===


def parse_planting_row(row: RawRow, lands: Sequence[Land]) -> PlantingRecord | RowRejection:
    values = row.values
    land_name = _text(values.get("land_name"))
    commodity = _text(values.get("commodity"))
    planting_date = _text(values.get("planting_date"))

    if land_name is None:
        return RowRejection(row.row_number, "land_name is missing")
    try:
        land = find_land(lands, land_name)
    except NotFoundReference as e:
        return RowRejection(row.row_number, str(e))
    if commodity is None:
        return RowRejection(row.row_number, "commodity is missing")
    if planting_date is None:
        return RowRejection(row.row_number, "planting_date is missing")

    return PlantingRecord(
        land_id=land.id,
        commodity=commodity,
        planting_date=planting_date,
        seed_count=coerce_seed_count(values.get("seed_count")),
        estimated_harvest_date=_text(values.get("estimated_harvest_date")),
        notes=_text(values.get("notes")),
    )


def parse_harvest_row(
    row: RawRow,
    lands: Sequence[Land],
    productions: Sequence[Production],
) -> HarvestUpdate | RowRejection:
    values = row.values
    production_id = _text(values.get("production_id"))

    if production_id is None:
        land_name = _text(values.get("land_name"))
        commodity = _text(values.get("commodity"))
        planting_date = _text(values.get("planting_date"))
        if not (land_name and commodity and planting_date):
            return RowRejection(
                row.row_number,
                "production_id or land_name, commodity and planting_date are required",
            )
        try:
            land = find_land(lands, land_name)
            production_id = find_production(productions, land, commodity, planting_date).id
        except NotFoundReference as e:
            return RowRejection(row.row_number, str(e))

    harvest_date = _text(values.get("harvest_date"))
    if harvest_date is None:
        return RowRejection(row.row_number, "harvest_date is missing")
    harvest_yield = coerce_yield(values.get("harvest_yield_kg"))
    if not harvest_yield or harvest_yield <= 0:
        return RowRejection(row.row_number, "harvest_yield_kg is missing or zero")

    return HarvestUpdate(
        production_id=production_id,
        harvest_date=harvest_date,
        harvest_yield_kg=harvest_yield,
    )


def reconcile_planting_rows(rows: Sequence[Dict[str, Any]], lands: Sequence[Land]) -> PlantingBatch:
    batch = PlantingBatch()
    for raw in tag_rows(rows, "planting"):
        parsed = parse_planting_row(raw, lands)
        if isinstance(parsed, RowRejection):
            batch.rejected.append(parsed)
        else:
            batch.accepted.append(parsed)
    return batch


def reconcile_harvest_rows(
    rows: Sequence[Dict[str, Any]],
    lands: Sequence[Land],
    productions: Sequence[Production],
) -> HarvestBatch:
    batch = HarvestBatch()
    for raw in tag_rows(rows, "harvest"):
        parsed = parse_harvest_row(raw, lands, productions)
        if isinstance(parsed, RowRejection):
            batch.rejected.append(parsed)
        else:
            batch.accepted.append(parsed)
    return batch


# === IMPORT ACTIONS ===


def import_plantings(
    rows: Sequence[Dict[str, Any]],
    lands: Sequence[Land],
    store: RecordStore,
) -> ImportResult:
    """
    Insert every valid planting row in one batch.

    Invalid rows are dropped; if none survive the whole import fails with
    NoValidRecordsError. Store failures propagate as RemoteFailure.
    """
    batch = reconcile_planting_rows(rows, lands)
    for rejection in batch.rejected:
        logger.debug(f"Planting row {rejection.row_number} skipped: {rejection.reason}")
    if not batch.accepted:
        raise NoValidRecordsError(NO_VALID_RECORDS_MESSAGE)

    store.insert_many("productions", [record.to_insert() for record in batch.accepted])
    logger.info(f"{len(batch.accepted)} planting records imported, {len(batch.rejected)} skipped")
    return ImportResult(imported=len(batch.accepted), skipped=len(batch.rejected))


def import_harvests(
    rows: Sequence[Dict[str, Any]],
    lands: Sequence[Land],
    productions: Sequence[Production],
    store: RecordStore,
) -> ImportResult:
    """
    Record harvests row by row.

    Each resolved row is its own update; unresolved rows are skipped. A
    store failure stops the loop and propagates, leaving earlier rows
    applied. Rows addressing the same production are applied in order, so
    the last one wins.
    """
    batch = reconcile_harvest_rows(rows, lands, productions)
    for rejection in batch.rejected:
        logger.debug(f"Harvest row {rejection.row_number} skipped: {rejection.reason}")

    applied = 0
    for update in batch.accepted:
        store.update("productions", update.production_id, update.to_changes())
        applied += 1
    logger.info(f"{applied} harvest records imported, {len(batch.rejected)} skipped")
    return ImportResult(imported=applied, skipped=len(batch.rejected))
