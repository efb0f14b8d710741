from typing import Dict, List, Optional

import plotly.graph_objects as go

from .config import (
    BOX_COLOR,
    FALLBACK_COLOR,
    GENDER_COLORS,
    GENDER_DOMAIN,
    MEDIAN_COLOR,
    OUTLIER_COLOR,
    RADAR_AXIS_MIN,
    SERIES_COLORS,
)


# ============================================================
# Configuration / constants
# ============================================================

HOVER_TEMPLATE_CATEGORY = "%{x}<br>Count: %{y}<br>Share: %{customdata}%<extra></extra>"

HOVER_TEMPLATE_PICTOGRAPH = "%{customdata[0]}: %{customdata[1]} (%{customdata[2]}%)<extra></extra>"

HOVER_TEMPLATE_EDUCATION = (
    "%{y}<br>"
    "%{fullData.name}: %{x} (%{customdata[0]}% of level)<br>"
    "Level total: %{customdata[1]} (%{customdata[2]}% of respondents)<extra></extra>"
)

HOVER_TEMPLATE_SUNBURST = "%{label}<br>Respondents: %{value}<br>Share: %{customdata}%<extra></extra>"

HOVER_TEMPLATE_RADAR = "%{fullData.name}<br>%{theta}: %{r:.2f}<extra></extra>"

BASE_LAYOUT = dict(
    margin=dict(t=80, l=60, r=30, b=60),
    plot_bgcolor="#f5f7fb",
    font=dict(size=12),
)


# ============================================================
# Helper functions
# ============================================================


def _gender_color(gender: str) -> str:
    return GENDER_COLORS.get(gender, FALLBACK_COLOR)


def _series_color(index: int) -> str:
    return SERIES_COLORS[index % len(SERIES_COLORS)]


def _titled(fig: go.Figure, title: str, subtitle: Optional[str] = None) -> go.Figure:
    """Apply the shared layout and a bold title (plus optional subtitle)."""
    text = f"<b>{title}</b>"
    if subtitle:
        text += f"<br><sup>{subtitle}</sup>"
    fig.update_layout(title=dict(text=text, x=0.5, xanchor="center"), **BASE_LAYOUT)
    return fig


# ============================================================
# Chart builders
# ============================================================


def create_gender_pictograph(data: Dict[str, object]) -> go.Figure:
    """
    Grid of person markers, one per pictograph unit (each = 1%).

    Parameters
    ----------
    data : dict
        Output of ``datasets.gender_distribution``.

    Returns
    -------
    go.Figure
        One marker trace per gender; empty figure when there is no data.
    """
    units: List[Dict[str, object]] = data.get("units", [])
    if not units:
        return go.Figure()

    info = {item["gender"]: item for item in data["items"]}
    fig = go.Figure()
    for gender, item in info.items():
        cells = [u for u in units if u["gender"] == gender]
        if not cells:
            continue
        fig.add_trace(
            go.Scatter(
                x=[u["col"] for u in cells],
                y=[-u["row"] for u in cells],
                mode="markers",
                marker=dict(symbol="circle", size=18, color=_gender_color(gender)),
                name=gender,
                customdata=[[gender, item["count"], item["percentage"]]] * len(cells),
                hovertemplate=HOVER_TEMPLATE_PICTOGRAPH,
            )
        )

    legend = "  •  ".join(f"{g}: {i['percentage']}%" for g, i in info.items())
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False, scaleanchor="x")
    _titled(fig, "Gender Distribution (Each icon = 1%)", legend)
    fig.update_layout(plot_bgcolor="white")
    return fig


def create_education_chart(data: Dict[str, object]) -> go.Figure:
    """Horizontal stacked bars of education level by gender."""
    items = data.get("items", [])
    if not items:
        return go.Figure()

    levels = [item["education"] for item in items]
    fig = go.Figure()
    for gender in GENDER_DOMAIN:
        fig.add_trace(
            go.Bar(
                y=levels,
                x=[item["counts"][gender] for item in items],
                orientation="h",
                name=gender,
                marker=dict(color=_gender_color(gender)),
                customdata=[
                    [item["percentages"][gender], item["total"], item["total_percentage"]]
                    for item in items
                ],
                hovertemplate=HOVER_TEMPLATE_EDUCATION,
            )
        )

    fig.update_layout(barmode="stack", legend=dict(orientation="h", y=1.02, x=0.5, xanchor="center"))
    # Largest level on top
    fig.update_yaxes(autorange="reversed")
    fig.update_xaxes(title_text="Respondents")
    return _titled(fig, "Education Qualifications by Gender")


def create_occupation_sunburst(data: Dict[str, object]) -> go.Figure:
    """Sunburst of gender -> occupation."""
    root = data.get("hierarchy", {})
    if not root or not root.get("children"):
        return go.Figure()

    ids, labels, parents, values, shares, colors = [], [], [], [], [], []
    root_id = root["name"]
    ids.append(root_id)
    labels.append(root_id)
    parents.append("")
    values.append(root["value"])
    shares.append("100.0")
    colors.append("white")

    for gender in root["children"]:
        gender_id = f"{root_id}/{gender['name']}"
        ids.append(gender_id)
        labels.append(gender["name"])
        parents.append(root_id)
        values.append(gender["value"])
        shares.append(gender["percentage"])
        colors.append(_gender_color(gender["name"]))
        for occupation in gender["children"]:
            ids.append(f"{gender_id}/{occupation['name']}")
            labels.append(occupation["name"])
            parents.append(gender_id)
            values.append(occupation["value"])
            shares.append(occupation["percentage"])
            colors.append(_gender_color(gender["name"]))

    fig = go.Figure(
        go.Sunburst(
            ids=ids,
            labels=labels,
            parents=parents,
            values=values,
            branchvalues="total",
            customdata=shares,
            marker=dict(colors=colors, line=dict(color="white", width=1)),
            hovertemplate=HOVER_TEMPLATE_SUNBURST,
        )
    )
    return _titled(fig, "Occupation by Gender")


def create_political_view_chart(data: Dict[str, object]) -> go.Figure:
    """Bars of respondents per political view."""
    items = data.get("items", [])
    if not items:
        return go.Figure()

    fig = go.Figure(
        go.Bar(
            x=[item["view"] for item in items],
            y=[item["count"] for item in items],
            text=[f"{item['count']} ({item['percentage']}%)" for item in items],
            textposition="outside",
            customdata=[item["percentage"] for item in items],
            marker=dict(color=MEDIAN_COLOR, line=dict(color="white", width=1)),
            hovertemplate=HOVER_TEMPLATE_CATEGORY,
        )
    )
    fig.update_xaxes(title_text="Political View")
    fig.update_yaxes(title_text="Respondents", rangemode="tozero")
    return _titled(fig, "Political View Distribution", f"Total respondents: {data['total']}")


def create_usage_box_plot(data: Dict[str, object]) -> go.Figure:
    """
    Box plot of weekly shares per daily-usage bin.

    Boxes are drawn from the precomputed quartiles so the plot matches
    the aggregated statistics exactly; outliers are a separate marker
    trace.
    """
    groups = data.get("groups", [])
    if not groups:
        return go.Figure()

    labels = [group["label"] for group in groups]
    quartiles = [group["quartiles"] for group in groups]
    fig = go.Figure()
    fig.add_trace(
        go.Box(
            x=labels,
            q1=[q["q1"] for q in quartiles],
            median=[q["median"] for q in quartiles],
            q3=[q["q3"] for q in quartiles],
            lowerfence=[q["min"] for q in quartiles],
            upperfence=[q["max"] for q in quartiles],
            name="Shares per week",
            marker=dict(color=BOX_COLOR),
            line=dict(color=BOX_COLOR),
            boxpoints=False,
        )
    )

    outlier_x = [g["label"] for g in groups for _ in g["outliers"]]
    outlier_y = [v for g in groups for v in g["outliers"]]
    if outlier_y:
        fig.add_trace(
            go.Scatter(
                x=outlier_x,
                y=outlier_y,
                mode="markers",
                name="Outliers",
                marker=dict(color=OUTLIER_COLOR, size=7),
                hovertemplate="%{x}<br>Outlier: %{y}<extra></extra>",
            )
        )

    fig.update_xaxes(title_text="Minutes per day")
    fig.update_yaxes(title_text="Shares per week", rangemode="tozero")
    return _titled(fig, "Sharing Frequency by Daily Social Media Use")


def create_verification_radar(data: Dict[str, object]) -> go.Figure:
    """Radar with one closed polygon per political view."""
    items = data.get("items", [])
    if not items:
        return go.Figure()

    fig = go.Figure()
    min_value = max_value = RADAR_AXIS_MIN
    for i, item in enumerate(items):
        axes = [m["axis"] for m in item["metrics"]]
        values = [m["value"] for m in item["metrics"]]
        min_value = min(min_value, *values)
        max_value = max(max_value, *values)
        color = _series_color(i)
        fig.add_trace(
            go.Scatterpolar(
                r=values + values[:1],
                theta=axes + axes[:1],
                fill="toself",
                opacity=0.6,
                name=f"{item['political_view']} (n={item['count']})",
                line=dict(color=color, width=2),
                hovertemplate=HOVER_TEMPLATE_RADAR,
            )
        )

    fig.update_layout(
        polar=dict(radialaxis=dict(visible=True, range=[min_value, max_value])),
        showlegend=True,
    )
    return _titled(fig, "Verification Attitudes by Political View")
