import streamlit as st
import pandas as pd

from farmops.actions import delete_land, save_land, set_land_status
from farmops.config import get_settings
from farmops.errors import FarmOpsError, ValidationError
from farmops.forms import LandForm
from farmops.models import COMMODITIES, LAND_STATUSES, OTHER_COMMODITY
from farmops.ui import flash, get_photo_store, get_store, init_page, load_snapshot, show_error

init_page("Land Management")
settings = get_settings()
store = get_store()

st.title("🗺️ Land Management")
st.caption("Manage your farms and agricultural lands")

snapshot = load_snapshot()
if snapshot is None:
    st.stop()

lands = snapshot.lands
st.markdown(f"**{len(lands)}** {'land' if len(lands) == 1 else 'lands'} registered")

# === TABLE ===
if lands:
    table = pd.DataFrame(
        [
            {
                "Name": land.name,
                "Area (m²)": f"{land.area_m2:,.0f}",
                "Commodities": ", ".join(
                    land.custom_commodity if c == OTHER_COMMODITY and land.custom_commodity else c
                    for c in land.commodities
                ),
                "Location": f"{land.latitude:.4f}, {land.longitude:.4f}" if land.has_location else (land.address or "-"),
                "Photos": len(land.photos),
                "Status": land.status.capitalize(),
            }
            for land in lands
        ]
    )
    st.dataframe(table, use_container_width=True, hide_index=True)
    with_location = [land for land in lands if land.has_location]
    if with_location:
        with st.expander("📍 Map"):
            st.map(
                pd.DataFrame(
                    {"lat": [land.latitude for land in with_location], "lon": [land.longitude for land in with_location]}
                )
            )
else:
    st.info("👋 No lands yet. Add your first land below.")

# === ADD / EDIT FORM ===
st.markdown("---")
options = {"➕ New land": None}
options.update({f"{land.name} · {land.id[:8]}": land for land in lands})
choice = st.selectbox("Add or edit", list(options))
editing = options[choice]

with st.form("land_form", clear_on_submit=editing is None):
    name = st.text_input("Farm name", value=editing.name if editing else "")
    area = st.number_input("Area (m²)", min_value=0.0, value=float(editing.area_m2) if editing else 0.0)
    address = st.text_area("Address", value=(editing.address or "") if editing else "")
    lat_col, lon_col = st.columns(2)
    latitude = lat_col.text_input(
        "Latitude", value=str(editing.latitude) if editing and editing.latitude is not None else ""
    )
    longitude = lon_col.text_input(
        "Longitude", value=str(editing.longitude) if editing and editing.longitude is not None else ""
    )
    commodities = st.multiselect(
        "Commodities",
        list(COMMODITIES),
        default=[c for c in editing.commodities if c in COMMODITIES] if editing else [],
    )
    custom = st.text_input(
        f"Custom commodity (when '{OTHER_COMMODITY}' is selected)",
        value=(editing.custom_commodity or "") if editing else "",
    )
    status = None
    if editing:
        status = st.selectbox("Status", LAND_STATUSES, index=LAND_STATUSES.index(editing.status))
    existing_photos = list(editing.photos) if editing else []
    keep_photos = st.multiselect("Keep photos", existing_photos, default=existing_photos) if existing_photos else []
    uploads = st.file_uploader(
        f"Photos (max {settings.max_photos})", type=["png", "jpg", "jpeg"], accept_multiple_files=True
    )
    submitted = st.form_submit_button("Save land", type="primary")

if submitted:
    form = LandForm(
        name=name,
        area_m2=area,
        commodities=commodities,
        address=address,
        latitude=latitude,
        longitude=longitude,
        custom_commodity=custom,
    )
    try:
        save_land(
            store,
            form,
            photo_store=get_photo_store(),
            new_photos=[(f.getvalue(), f.name) for f in uploads or []],
            existing_photos=keep_photos,
            land_id=editing.id if editing else None,
            max_photos=settings.max_photos,
        )
        if editing and status and status != editing.status:
            set_land_status(store, editing.id, status)
        flash("Land updated successfully" if editing else "Land created successfully")
        st.rerun()
    except ValidationError as e:
        for field_name, message in e.errors.items():
            st.error(f"**{field_name}**: {message}")
    except FarmOpsError as e:
        show_error("Error saving land", e)

# === DELETE ===
if editing:
    st.markdown("---")
    confirm = st.checkbox(
        f'Delete "{editing.name}". This cannot be undone and will also delete all associated productions.'
    )
    if st.button("Delete land", type="secondary", disabled=not confirm):
        try:
            delete_land(store, editing.id)
            flash("Land deleted successfully")
            st.rerun()
        except FarmOpsError as e:
            show_error("Error deleting land", e)
