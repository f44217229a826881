import streamlit as st
import pandas as pd
from datetime import date, datetime

from farmops.actions import delete_productions, record_harvest, save_production
from farmops.aggregations import commodity_summaries, yield_by_commodity, yield_by_period
from farmops.errors import FarmOpsError, ValidationError
from farmops.export import build_csv, build_excel, export_filename, render_productions_pdf
from farmops.forms import HarvestForm, ProductionForm, land_options
from farmops.importer import import_harvests, import_plantings, read_spreadsheet
from farmops.models import COMMODITIES, OTHER_COMMODITY
from farmops.ui import flash, get_store, init_page, load_snapshot, show_error
from farmops.visualisations import create_commodity_donut, create_period_bar
from farmops.windows import parse_date

init_page("Production Management")
store = get_store()

TREND_ICONS = {"up": "📈", "down": "📉", "neutral": "➖"}

st.title("🌱 Production Management")
st.caption("Track and manage your agricultural production")

snapshot = load_snapshot()
if snapshot is None:
    st.stop()

productions = snapshot.productions
active_lands = [land for land in snapshot.lands if land.status == "active"]


def _as_date(value: str | None) -> date | None:
    parsed = parse_date(value)
    return parsed.date() if parsed else None


def _show_form_errors(error: ValidationError) -> None:
    for field_name, message in error.errors.items():
        st.error(f"**{field_name}**: {message}")


# === CHARTS ===
bar_col, pie_col = st.columns(2)
with bar_col:
    by_period = yield_by_period(productions)
    if by_period:
        st.plotly_chart(create_period_bar(by_period), use_container_width=True, config={"displayModeBar": False})
    else:
        st.info("No harvest data available")
with pie_col:
    by_commodity = yield_by_commodity(productions)
    if by_commodity:
        st.plotly_chart(
            create_commodity_donut(by_commodity), use_container_width=True, config={"displayModeBar": False}
        )
    else:
        st.info("No harvest data available")

# === COMMODITY CARDS ===
summaries = commodity_summaries(productions, datetime.now())
if summaries:
    cols = st.columns(min(len(summaries), 4))
    for i, summary in enumerate(summaries):
        with cols[i % len(cols)]:
            st.metric(
                label=f"{summary.commodity} · {summary.count} production{'s' if summary.count != 1 else ''}",
                value=f"{summary.recent_yield_kg:,.1f} kg",
                delta=f"{TREND_ICONS[summary.trend.direction]} {summary.trend.change_pct:.1f}%",
                delta_color="off" if summary.trend.direction == "neutral" else "normal",
            )

# === IMPORT / EXPORT ===
st.markdown("---")
st.markdown(f"**{len(productions)}** {'production' if len(productions) == 1 else 'productions'}")
imp_col, exp_col = st.columns(2)

with imp_col:
    with st.expander("📥 Import"):
        import_type = st.radio("Import type", ["Planting data", "Harvest data"], horizontal=True)
        uploaded = st.file_uploader("Spreadsheet", type=["csv", "xlsx", "xls"], key="import_file")
        if uploaded is not None and st.button("Run import", type="primary"):
            try:
                rows = read_spreadsheet(uploaded.getvalue(), uploaded.name)
                if import_type == "Planting data":
                    result = import_plantings(rows, active_lands, store)
                    flash(f"{result.imported} planting records imported")
                else:
                    result = import_harvests(rows, snapshot.lands, productions, store)
                    flash(f"{result.imported} harvest records imported")
                if result.skipped:
                    flash(f"{result.skipped} row(s) skipped", kind="info")
                st.rerun()
            except FarmOpsError as e:
                show_error("Import failed", e)

with exp_col:
    with st.expander("📤 Export"):
        st.download_button(
            "Export as CSV",
            data=build_csv(productions),
            file_name=export_filename("csv"),
            mime="text/csv",
            use_container_width=True,
        )
        st.download_button(
            "Export as XLSX",
            data=build_excel(productions),
            file_name=export_filename("xlsx"),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            use_container_width=True,
        )
        st.download_button(
            "Export as PDF",
            data=render_productions_pdf(productions),
            file_name=export_filename("pdf"),
            mime="application/pdf",
            use_container_width=True,
        )

# === TABLE ===
if productions:
    table = pd.DataFrame(
        [
            {
                "Select": False,
                "Commodity": p.commodity,
                "Land": p.land.name if p.land else "-",
                "Planted": p.planting_date,
                "Seeds": p.seed_count,
                "Est. Harvest": p.estimated_harvest_date or "-",
                "Harvested": p.harvest_date or "-",
                "Yield (kg)": p.harvest_yield_kg,
                "Status": p.status.capitalize(),
            }
            for p in productions
        ]
    )
    edited = st.data_editor(
        table,
        use_container_width=True,
        hide_index=True,
        disabled=[c for c in table.columns if c != "Select"],
        key="productions_table",
    )
    selected_ids = [p.id for p, chosen in zip(productions, edited["Select"]) if chosen]
    if selected_ids:
        confirm = st.checkbox(
            f"Delete {len(selected_ids)} selected production records. This action cannot be undone."
        )
        if st.button(f"Delete ({len(selected_ids)})", disabled=not confirm):
            try:
                removed = delete_productions(store, selected_ids)
                flash(f"{removed} productions deleted")
                st.rerun()
            except FarmOpsError as e:
                show_error("Error deleting productions", e)
else:
    st.info("No productions yet.")

# === ADD / EDIT ===
st.markdown("---")
left, right = st.columns(2)

with left:
    st.subheader("Add / edit production")
    options = {"➕ New production": None}
    options.update({f"{p.commodity} · {p.planting_date} · {p.land.name if p.land else '-'} · {p.id[:8]}": p for p in productions})
    editing = options[st.selectbox("Production", list(options), key="edit_production")]

    land_names = land_options(snapshot.lands, editing.land_id if editing else None)
    if not land_names:
        st.warning("Add an active land before recording productions.")
    else:
        current_land = next((n for n, i in land_names.items() if editing and i == editing.land_id), None)
        commodity_choices = list(COMMODITIES)
        if editing and editing.commodity in COMMODITIES:
            commodity_index = commodity_choices.index(editing.commodity)
        elif editing:
            commodity_index = commodity_choices.index(OTHER_COMMODITY)
        else:
            commodity_index = 0

        form_key = f"production_form_{editing.id if editing else 'new'}"
        with st.form(form_key, clear_on_submit=editing is None):
            land_name = st.selectbox(
                "Land",
                list(land_names),
                index=list(land_names).index(current_land) if current_land else 0,
                key=f"{form_key}_land",
            )
            commodity = st.selectbox("Commodity", commodity_choices, index=commodity_index)
            custom = st.text_input(
                f"Custom commodity (when '{OTHER_COMMODITY}' is selected)",
                value=editing.commodity if editing and editing.commodity not in COMMODITIES else "",
            )
            planting_date = st.date_input(
                "Planting date",
                value=_as_date(editing.planting_date) if editing else date.today(),
            )
            seed_count = st.number_input("Seed count", min_value=0, step=1, value=max(editing.seed_count, 0) if editing else 0)
            estimated = st.date_input(
                "Estimated harvest date",
                value=_as_date(editing.estimated_harvest_date) if editing else None,
            )
            notes = st.text_area("Notes", value=(editing.notes or "") if editing else "", max_chars=500)
            submitted = st.form_submit_button("Save production", type="primary")

        if submitted:
            form = ProductionForm(
                land_id=land_names[land_name],
                commodity=commodity,
                custom_commodity=custom,
                planting_date=planting_date.isoformat() if planting_date else "",
                seed_count=seed_count,
                estimated_harvest_date=estimated.isoformat() if estimated else None,
                notes=notes,
            )
            try:
                save_production(store, form, production_id=editing.id if editing else None)
                flash("Production updated successfully" if editing else "Production created successfully")
                st.rerun()
            except ValidationError as e:
                _show_form_errors(e)
            except FarmOpsError as e:
                show_error("Error saving production", e)

with right:
    st.subheader("Record harvest")
    pending = [p for p in productions if not p.is_harvested]
    if not pending:
        st.info("Nothing waiting for harvest.")
    else:
        harvest_options = {
            f"{p.commodity} · {p.planting_date} · {p.land.name if p.land else '-'} · {p.id[:8]}": p for p in pending
        }
        with st.form("harvest_form", clear_on_submit=True):
            target = harvest_options[st.selectbox("Production", list(harvest_options), key="harvest_target")]
            harvest_date = st.date_input("Harvest date", value=date.today())
            harvest_yield = st.number_input("Harvest yield (kg)", min_value=0.0, step=0.1)
            harvested = st.form_submit_button("Record harvest", type="primary")

        if harvested:
            try:
                record_harvest(
                    store,
                    target.id,
                    HarvestForm(
                        harvest_date=harvest_date.isoformat() if harvest_date else "",
                        harvest_yield_kg=harvest_yield,
                    ),
                )
                flash("Harvest recorded successfully")
                st.rerun()
            except ValidationError as e:
                _show_form_errors(e)
            except FarmOpsError as e:
                show_error("Error recording harvest", e)
