import streamlit as st
from datetime import datetime
import html

from farmops.aggregations import monthly_yield, ongoing_activities, overview_stats
from farmops.config import get_settings
from farmops.schedule import upcoming_events
from farmops.ui import init_page, load_snapshot, stat_card
from farmops.visualisations import create_productivity_chart
from farmops.windows import parse_date

init_page("Overview")
settings = get_settings()

STATUS_LABELS = {
    "pending": "🕒 Pending",
    "in_progress": "⚠️ In Progress",
    "completed": "✅ Completed",
}

st.title("🌾 Overview")
st.caption("Welcome to the farm operations dashboard")

snapshot = load_snapshot()
if snapshot is None:
    st.stop()

now = datetime.now()

# === STATS CARDS ===
stats = overview_stats(snapshot.lands, snapshot.productions)

col1, col2, col3 = st.columns(3)
with col1:
    stat_card(
        "Total Productive Land",
        f"{stats.productive_area_m2:,.0f} m²",
        "Vacant Land",
        f"{stats.vacant_area_m2:,.0f} m²",
        icon="🗺️",
    )
with col2:
    stat_card(
        "Active Crops",
        f"{stats.active_crops}",
        "Current Cycle",
        "Ongoing" if stats.production_count > 0 else "None",
        icon="🌱",
    )
with col3:
    stat_card(
        "Total Harvest",
        f"{stats.total_harvest_kg:,.1f} kg",
        "All Time",
        f"{stats.harvested_count} harvests",
        icon="📈",
    )

# === CALENDAR AND ACTIVITIES ===
cal_col, act_col = st.columns(2)

with cal_col:
    st.subheader("📅 Planting Calendar")
    events = upcoming_events(
        snapshot.productions,
        now,
        days=settings.calendar_days,
        limit=settings.calendar_limit,
    )
    if not events:
        st.info(f"No upcoming events in the next {settings.calendar_days} days")
    for event in events:
        moment = event.moment
        when = moment.strftime("%b %d, %Y") if moment else event.date
        kind = "Expected Harvest" if event.kind == "harvest" else "Planting Date"
        dot = "🟢" if event.kind == "harvest" else "🟤"
        st.markdown(f"{dot} **{html.escape(event.label)}** · {kind} · {when}")

with act_col:
    st.subheader("🛠️ Ongoing Activities")
    ongoing = ongoing_activities(snapshot.activities)
    if not ongoing:
        st.info("No ongoing activities")
    for activity in ongoing:
        scheduled = parse_date(activity.scheduled_date)
        when = f" · {scheduled.strftime('%b %d, %Y')}" if scheduled else ""
        place = f" · {html.escape(activity.land.name)}" if activity.land else ""
        st.markdown(
            f"**{html.escape(activity.description)}**  \n"
            f"{html.escape(activity.activity_type)}{place}{when} · "
            f"{STATUS_LABELS.get(activity.status, activity.status)}"
        )

# === PRODUCTIVITY CHART ===
months = monthly_yield(snapshot.productions, now, months=settings.trend_months)
st.plotly_chart(
    create_productivity_chart(months),
    use_container_width=True,
    config={"displayModeBar": False},
)
