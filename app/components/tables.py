"""Tabular components for flat details."""

from __future__ import annotations

from typing import List, Optional

import pandas as pd
import streamlit as st

from .cards import amenity_label


def _fmt_number(value: Optional[float], unit: str = "") -> str:
    if value is None:
        return "N/A"
    text = f"{value:g}"
    return f"{text} {unit}".strip()


def render_specs_table(flat: dict) -> None:
    data = [
        {"Spec": "Offer", "Value": (flat.get("offer_type") or "N/A").capitalize()},
        {"Spec": "Type", "Value": flat.get("flat_type") or "N/A"},
        {"Spec": "Price", "Value": flat.get("display_price") or "N/A"},
        {"Spec": "Area", "Value": _fmt_number(flat.get("area"), "m²")},
        {"Spec": "Bedrooms", "Value": _fmt_number(flat.get("bedrooms"))},
        {"Spec": "Bathrooms", "Value": _fmt_number(flat.get("bathrooms"))},
        {"Spec": "Location", "Value": flat.get("location") or "N/A"},
    ]
    df = pd.DataFrame(data)
    st.dataframe(df, hide_index=True, width="stretch")


def render_amenities(amenities: List[str]) -> None:
    if not amenities:
        st.info("No amenities listed for this apartment.")
        return
    st.markdown(" · ".join(amenity_label(tag) for tag in amenities))
