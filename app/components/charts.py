"""Plotly chart helpers for the Streamlit UI."""

from __future__ import annotations

from typing import List, Sequence

import plotly.graph_objects as go

OFFER_COLORS = {"rent": "#1565C0", "sale": "#EF6C00"}


def _extract_points(flats: Sequence[dict], offer_type: str) -> tuple[list[float], list[float], list[str]]:
    subset = [f for f in flats if f.get("offer_type") == offer_type and f.get("area") and f.get("converted_price") is not None]
    return (
        [f["area"] for f in subset],
        [f["converted_price"] for f in subset],
        [f"{f.get('location')} · {f.get('display_price')}" for f in subset],
    )


def render_price_area_chart(flats: List[dict], currency: str) -> go.Figure:
    fig = go.Figure()
    for offer_type in sorted({f.get("offer_type") for f in flats if f.get("offer_type")}):
        xs, ys, labels = _extract_points(flats, offer_type)
        if not xs:
            continue
        fig.add_trace(
            go.Scatter(
                x=xs,
                y=ys,
                text=labels,
                name=offer_type.capitalize(),
                mode="markers",
                marker=dict(size=11, color=OFFER_COLORS.get(offer_type, "#757575")),
                hoverinfo="text",
            )
        )
    fig.update_layout(
        title="Price vs. area (loaded apartments)",
        margin=dict(l=10, r=10, t=40, b=30),
        height=320,
        yaxis_title=f"Price ({currency})",
        xaxis_title="Area (m²)",
        template="plotly_white",
    )
    return fig
