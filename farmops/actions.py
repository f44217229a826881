# farmops/actions.py
import logging
from dataclasses import replace
from typing import Any, Dict, List, Sequence, Tuple

from .forms import (
    HarvestForm,
    LandForm,
    ProductionForm,
    validate_harvest_form,
    validate_land_form,
    validate_production_form,
)
from .errors import ValidationError
from .models import LAND_STATUSES
from .store import LocalPhotoStore, RecordStore

logger = logging.getLogger(__name__)

PhotoUpload = Tuple[bytes, str]


def save_land(
    store: RecordStore,
    form: LandForm,
    photo_store: LocalPhotoStore | None = None,
    new_photos: Sequence[PhotoUpload] = (),
    existing_photos: Sequence[str] = (),
    land_id: str | None = None,
    max_photos: int = 3,
) -> Dict[str, Any]:
    """
    Validate and create (or update, when `land_id` is given) a land.

    New photos are uploaded only after the form passes validation.
    """
    form = replace(form, photo_count=len(existing_photos) + len(new_photos))
    record = validate_land_form(form, max_photos=max_photos)

    photos: List[str] = list(existing_photos)
    if new_photos:
        if photo_store is None:
            raise ValueError("A photo store is required to upload photos")
        for data, name in new_photos:
            photos.append(photo_store.upload(data, name))
    record["photos"] = photos

    if land_id:
        store.update("lands", land_id, record)
        logger.info(f"Land {land_id} updated")
        return dict(record, id=land_id)

    created = store.insert("lands", dict(record, status="active"))
    logger.info(f"Land {created['id']} created ({record['name']})")
    return created


def set_land_status(store: RecordStore, land_id: str, status: str) -> None:
    if status not in LAND_STATUSES:
        raise ValidationError(f"Unknown land status: {status}", field="status")
    store.update("lands", land_id, {"status": status})
    logger.info(f"Land {land_id} marked {status}")


def delete_land(store: RecordStore, land_id: str) -> int:
    """Remove a land; the store drops its productions and activities with it."""
    removed = store.delete("lands", land_id)
    logger.info(f"Land {land_id} deleted")
    return removed


def save_production(
    store: RecordStore,
    form: ProductionForm,
    production_id: str | None = None,
) -> Dict[str, Any]:
    record = validate_production_form(form)
    if production_id:
        store.update("productions", production_id, record)
        logger.info(f"Production {production_id} updated")
        return dict(record, id=production_id)

    created = store.insert("productions", dict(record, status="planted"))
    logger.info(f"Production {created['id']} created ({record['commodity']})")
    return created


def record_harvest(store: RecordStore, production_id: str, form: HarvestForm) -> Dict[str, Any]:
    """Set harvest date, yield and status in a single update."""
    changes = validate_harvest_form(form)
    store.update("productions", production_id, changes)
    logger.info(f"Harvest recorded for production {production_id}: {changes['harvest_yield_kg']} kg")
    return changes


def delete_productions(store: RecordStore, production_ids: Sequence[str]) -> int:
    if not production_ids:
        return 0
    if len(production_ids) == 1:
        removed = store.delete("productions", production_ids[0])
    else:
        removed = store.delete_many("productions", list(production_ids))
    logger.info(f"{removed} production(s) deleted")
    return removed
