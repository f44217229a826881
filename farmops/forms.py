# farmops/forms.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from .errors import ValidationError
from .models import COMMODITIES, OTHER_COMMODITY, Land


@dataclass
class LandForm:
    name: str
    area_m2: Any
    commodities: List[str]
    address: str | None = None
    latitude: Any = None
    longitude: Any = None
    custom_commodity: str | None = None
    photo_count: int = 0


@dataclass
class ProductionForm:
    land_id: str
    commodity: str
    planting_date: str
    seed_count: Any
    custom_commodity: str | None = None
    estimated_harvest_date: str | None = None
    notes: str | None = None


@dataclass
class HarvestForm:
    harvest_date: str
    harvest_yield_kg: Any


@dataclass
class FormErrors:
    errors: Dict[str, str] = field(default_factory=dict)

    def add(self, field_name: str, message: str) -> None:
        self.errors.setdefault(field_name, message)

    def raise_if_any(self) -> None:
        if self.errors:
            field_name, message = next(iter(self.errors.items()))
            raise ValidationError(message, field=field_name, errors=dict(self.errors))


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _number(value: Any, field_name: str, errors: FormErrors) -> float | None:
    if _blank(value):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        errors.add(field_name, "Must be a number")
        return None


def _optional_text(value: Any) -> str | None:
    return None if _blank(value) else str(value).strip()


def validate_land_form(form: LandForm, max_photos: int = 3) -> Dict[str, Any]:
    """
    Check a land form and return the record to store (photos excluded).

    Raises ValidationError carrying every field problem in `.errors`.
    """
    errors = FormErrors()

    name = (form.name or "").strip()
    if not name:
        errors.add("name", "Farm name is required")
    elif len(name) > 100:
        errors.add("name", "Farm name must be 100 characters or fewer")

    area = _number(form.area_m2, "area_m2", errors)
    if area is None or area < 1:
        errors.add("area_m2", "Area must be at least 1 m²")

    address = _optional_text(form.address)
    if address and len(address) > 500:
        errors.add("address", "Address must be 500 characters or fewer")

    latitude = _number(form.latitude, "latitude", errors)
    longitude = _number(form.longitude, "longitude", errors)
    if latitude is not None and not -90 <= latitude <= 90:
        errors.add("latitude", "Latitude must be between -90 and 90")
    if longitude is not None and not -180 <= longitude <= 180:
        errors.add("longitude", "Longitude must be between -180 and 180")
    if (latitude is None) != (longitude is None):
        errors.add("latitude", "Latitude and longitude must be given together")

    commodities = [c for c in form.commodities or [] if c]
    if not commodities:
        errors.add("commodities", "Select at least one commodity")
    unknown = [c for c in commodities if c not in COMMODITIES]
    if unknown:
        errors.add("commodities", f"Unknown commodity: {', '.join(unknown)}")

    custom = _optional_text(form.custom_commodity)
    if OTHER_COMMODITY in commodities:
        if not custom:
            errors.add("custom_commodity", "Describe the other commodity")
        elif len(custom) > 100:
            errors.add("custom_commodity", "Custom commodity must be 100 characters or fewer")
    else:
        custom = None

    if form.photo_count > max_photos:
        errors.add("photos", f"Maximum {max_photos} photos allowed")

    errors.raise_if_any()
    return {
        "name": name,
        "area_m2": area,
        "address": address,
        "latitude": latitude,
        "longitude": longitude,
        "commodities": commodities,
        "custom_commodity": custom,
    }


def validate_production_form(form: ProductionForm) -> Dict[str, Any]:
    errors = FormErrors()

    if _blank(form.land_id):
        errors.add("land_id", "Please select a land")

    commodity = _optional_text(form.commodity)
    if commodity is None:
        errors.add("commodity", "Please select a commodity")
    elif commodity == OTHER_COMMODITY:
        # The free-text label is what gets stored
        commodity = _optional_text(form.custom_commodity)
        if commodity is None:
            errors.add("custom_commodity", "Describe the other commodity")

    if _blank(form.planting_date):
        errors.add("planting_date", "Planting date is required")

    seed_count = _number(form.seed_count, "seed_count", errors)
    if seed_count is None or seed_count < 1:
        errors.add("seed_count", "Seed count must be greater than 0")

    notes = _optional_text(form.notes)
    if notes and len(notes) > 500:
        errors.add("notes", "Notes must be 500 characters or fewer")

    errors.raise_if_any()
    return {
        "land_id": form.land_id,
        "commodity": commodity,
        "planting_date": str(form.planting_date).strip(),
        "seed_count": int(seed_count),
        "estimated_harvest_date": _optional_text(form.estimated_harvest_date),
        "notes": notes,
    }


def validate_harvest_form(form: HarvestForm) -> Dict[str, Any]:
    """Harvest fields and status always travel together."""
    errors = FormErrors()

    if _blank(form.harvest_date):
        errors.add("harvest_date", "Harvest date is required")
    harvest_yield = _number(form.harvest_yield_kg, "harvest_yield_kg", errors)
    if harvest_yield is None or harvest_yield < 0.01:
        errors.add("harvest_yield_kg", "Harvest yield must be greater than 0")

    errors.raise_if_any()
    return {
        "harvest_date": str(form.harvest_date).strip(),
        "harvest_yield_kg": harvest_yield,
        "status": "harvested",
    }


def land_options(lands: Sequence[Land], current_land_id: str | None = None) -> Dict[str, str]:
    """
    Label -> land id for the production land picker.

    Active lands are offered; the land a production already sits on is kept
    whatever its status, labelled with that status.
    """
    options: Dict[str, str] = {}
    for land in lands:
        if land.status != "active" and land.id != current_land_id:
            continue
        label = land.name if land.status == "active" else f"{land.name} ({land.status})"
        if label in options:
            label = f"{label} · {land.id[:8]}"
        options[label] = land.id
    return options
