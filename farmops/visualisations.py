from typing import Dict, Sequence

import plotly.graph_objects as go

from .aggregations import MonthlyYield

PRIMARY = "#4a7c29"

# One colour per vocabulary commodity, then the primary green for the rest
COMMODITY_COLORS = {
    "Red Chili": "#d63031",
    "Rawit Chili": "#e1701a",
    "Tomatoes": "#e1a21a",
    "Shallots": "#8e2de2",
    "Garlic": "#1a8fe1",
}


def create_productivity_chart(months: Sequence[MonthlyYield]) -> go.Figure:
    """Line chart of harvest yield per month."""
    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=[m.month for m in months],
        y=[m.yield_kg for m in months],
        mode="lines+markers",
        name="Harvest Yield",
        line=dict(color=PRIMARY, width=3, shape="spline"),
        marker=dict(size=8, color=PRIMARY),
        hovertemplate="<b>%{x}</b><br>Harvest Yield: %{y} kg<extra></extra>",
    ))

    fig.update_layout(
        title=dict(text="Productivity Trend", font=dict(size=18)),
        yaxis=dict(ticksuffix="kg", gridcolor="#e0e0e0", rangemode="tozero"),
        xaxis=dict(showgrid=False),
        paper_bgcolor="white",
        plot_bgcolor="white",
        height=300,
        margin=dict(l=50, r=20, t=50, b=40),
    )

    return fig


def create_period_bar(yield_by_period: Dict[str, float]) -> go.Figure:
    """Bar chart of harvested yield per planting period."""
    periods = list(yield_by_period)
    values = [yield_by_period[p] for p in periods]

    fig = go.Figure(go.Bar(
        x=periods,
        y=values,
        marker_color=PRIMARY,
        hovertemplate="<b>%{x}</b><br>Yield: %{y:.1f} kg<extra></extra>",
    ))

    fig.update_layout(
        title=dict(text="Production by Period", font=dict(size=18)),
        yaxis=dict(title="kg", gridcolor="#e0e0e0"),
        paper_bgcolor="white",
        plot_bgcolor="white",
        height=300,
        margin=dict(l=50, r=20, t=50, b=40),
    )

    return fig


def create_commodity_donut(yield_by_commodity: Dict[str, float]) -> go.Figure:
    """Donut chart showing harvested yield by commodity."""
    labels = list(yield_by_commodity)
    values = [yield_by_commodity[label] for label in labels]
    colors = [COMMODITY_COLORS.get(label, PRIMARY) for label in labels]

    fig = go.Figure(data=[go.Pie(
        labels=labels,
        values=values,
        hole=0.45,
        marker=dict(colors=colors, line=dict(color="white", width=2)),
        textinfo="label+percent",
        hovertemplate="<b>%{label}</b><br>Yield: %{value:.1f} kg<br>%{percent}<extra></extra>",
    )])

    fig.update_layout(
        title=dict(text="Production by Commodity", font=dict(size=18)),
        showlegend=False,
        paper_bgcolor="white",
        height=300,
        margin=dict(l=20, r=20, t=50, b=20),
    )

    return fig
