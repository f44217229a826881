"""Tests for forms.py and actions.py: validation and the write actions."""

import pytest

from farmops.actions import delete_productions, record_harvest, save_land, save_production, set_land_status
from farmops.errors import ValidationError
from farmops.models import Land
from farmops.forms import (
    HarvestForm,
    LandForm,
    ProductionForm,
    land_options,
    validate_harvest_form,
    validate_land_form,
    validate_production_form,
)


class FakePhotoStore:
    def __init__(self):
        self.uploaded = []

    def upload(self, data, name):
        self.uploaded.append(name)
        return f"photos/{name}"


def _land_form(**overrides):
    values = dict(name="North Field", area_m2="5000", commodities=["Tomatoes"])
    values.update(overrides)
    return LandForm(**values)


# ── Land form ──

class TestLandForm:
    def test_valid_form(self):
        record = validate_land_form(_land_form(address="  Jl. Sawah 1 ", latitude="-6.2", longitude="106.8"))
        assert record["area_m2"] == 5000.0
        assert record["address"] == "Jl. Sawah 1"
        assert (record["latitude"], record["longitude"]) == (-6.2, 106.8)
        assert record["custom_commodity"] is None

    def test_collects_every_problem(self):
        with pytest.raises(ValidationError) as exc:
            validate_land_form(_land_form(name="", area_m2="0", commodities=[]))
        assert set(exc.value.errors) == {"name", "area_m2", "commodities"}

    def test_others_needs_custom_label(self):
        with pytest.raises(ValidationError) as exc:
            validate_land_form(_land_form(commodities=["Others"]))
        assert exc.value.field == "custom_commodity"

    def test_custom_label_dropped_without_others(self):
        record = validate_land_form(_land_form(custom_commodity="Ginger"))
        assert record["custom_commodity"] is None

    def test_coordinates_in_range_and_paired(self):
        with pytest.raises(ValidationError) as exc:
            validate_land_form(_land_form(latitude="91", longitude="0"))
        assert "latitude" in exc.value.errors
        with pytest.raises(ValidationError):
            validate_land_form(_land_form(latitude="10"))

    def test_area_below_one_square_metre(self):
        with pytest.raises(ValidationError) as exc:
            validate_land_form(_land_form(area_m2="0.5"))
        assert exc.value.errors == {"area_m2": "Area must be at least 1 m²"}

    def test_photo_limit(self):
        with pytest.raises(ValidationError) as exc:
            validate_land_form(_land_form(photo_count=4))
        assert exc.value.field == "photos"


# ── Production and harvest forms ──

class TestProductionForm:
    def test_valid_form(self):
        record = validate_production_form(ProductionForm(
            land_id="land-1", commodity="Tomatoes", planting_date="2024-07-01", seed_count="25",
        ))
        assert record["seed_count"] == 25
        assert record["estimated_harvest_date"] is None

    def test_others_stores_custom_label(self):
        record = validate_production_form(ProductionForm(
            land_id="land-1", commodity="Others", custom_commodity="Ginger",
            planting_date="2024-07-01", seed_count=5,
        ))
        assert record["commodity"] == "Ginger"

    def test_seed_count_must_be_positive(self):
        with pytest.raises(ValidationError) as exc:
            validate_production_form(ProductionForm(
                land_id="land-1", commodity="Tomatoes", planting_date="2024-07-01", seed_count=0,
            ))
        assert exc.value.field == "seed_count"


class TestLandOptions:
    def test_new_production_offers_active_lands(self, lands):
        assert land_options(lands) == {"North Field": "land-1", "River Plot": "land-2"}

    def test_current_land_kept_when_not_active(self, lands):
        options = land_options(lands, current_land_id="land-3")
        assert options["Hill Terrace (vacant)"] == "land-3"
        assert "Old Orchard (archived)" not in options

    def test_duplicate_names_stay_distinct(self):
        twins = [
            Land(id="aaaaaaaa-1", name="Plot", area_m2=10, commodities=["Garlic"], status="active"),
            Land(id="bbbbbbbb-2", name="Plot", area_m2=10, commodities=["Garlic"], status="active"),
        ]
        assert sorted(land_options(twins).values()) == ["aaaaaaaa-1", "bbbbbbbb-2"]


class TestHarvestForm:
    def test_sets_status_with_fields(self):
        changes = validate_harvest_form(HarvestForm(harvest_date="2024-06-10", harvest_yield_kg="12.5"))
        assert changes == {"harvest_date": "2024-06-10", "harvest_yield_kg": 12.5, "status": "harvested"}

    def test_zero_yield_rejected(self):
        with pytest.raises(ValidationError):
            validate_harvest_form(HarvestForm(harvest_date="2024-06-10", harvest_yield_kg=0))


# ── Actions ──

class TestActions:
    def test_new_land_is_active_with_uploaded_photos(self, recording_store):
        photos = FakePhotoStore()
        created = save_land(
            recording_store,
            _land_form(),
            photo_store=photos,
            new_photos=[(b"a", "one.jpg"), (b"b", "two.jpg")],
        )
        assert created["status"] == "active"
        assert created["photos"] == ["photos/one.jpg", "photos/two.jpg"]

    def test_save_land_leaves_form_untouched(self, recording_store):
        form = _land_form()
        save_land(recording_store, form, existing_photos=["a.jpg", "b.jpg"])
        assert form.photo_count == 0

    def test_photo_limit_checked_before_upload(self, recording_store):
        photos = FakePhotoStore()
        with pytest.raises(ValidationError):
            save_land(
                recording_store,
                _land_form(),
                photo_store=photos,
                new_photos=[(b"x", "new.jpg"), (b"y", "newer.jpg")],
                existing_photos=["a.jpg", "b.jpg"],
            )
        assert photos.uploaded == []
        assert recording_store.inserted == []

    def test_editing_land_updates(self, recording_store):
        save_land(recording_store, _land_form(name="Renamed"), existing_photos=["a.jpg"], land_id="land-1")
        [(table, record_id, changes)] = recording_store.updates
        assert (table, record_id) == ("lands", "land-1")
        assert changes["name"] == "Renamed"
        assert changes["photos"] == ["a.jpg"]

    def test_new_production_is_planted(self, recording_store):
        created = save_production(recording_store, ProductionForm(
            land_id="land-1", commodity="Garlic", planting_date="2024-07-01", seed_count=3,
        ))
        assert created["status"] == "planted"

    def test_record_harvest_is_one_update(self, recording_store):
        record_harvest(recording_store, "prod-2", HarvestForm(harvest_date="2024-07-02", harvest_yield_kg=40))
        assert recording_store.updates == [(
            "productions",
            "prod-2",
            {"harvest_date": "2024-07-02", "harvest_yield_kg": 40.0, "status": "harvested"},
        )]

    def test_bulk_delete(self, recording_store):
        assert delete_productions(recording_store, ["prod-1", "prod-3"]) == 2
        assert delete_productions(recording_store, []) == 0
        assert recording_store.deleted == [("productions", "prod-1"), ("productions", "prod-3")]

    def test_land_status_change(self, recording_store):
        set_land_status(recording_store, "land-3", "active")
        assert recording_store.updates == [("lands", "land-3", {"status": "active"})]

    def test_unknown_land_status(self, recording_store):
        with pytest.raises(ValidationError):
            set_land_status(recording_store, "land-3", "flooded")
        assert recording_store.updates == []
