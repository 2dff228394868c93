"""Streamlit components for flat listing cards."""

from __future__ import annotations

from html import escape
from typing import Callable, Dict, Optional

import streamlit as st

AMENITY_LABELS = {
    "parking": "🅿️ Parking",
    "gym": "🏋️ Gym",
    "pool": "🏊 Pool",
    "balcony": "🌇 Balcony",
    "security": "🛡️ Security",
    "pet-friendly": "🐾 Pet friendly",
    "furnished": "🛋️ Furnished",
    "laundry": "🧺 Laundry",
    "wifi": "📶 Wi-Fi",
    "garden": "🌿 Garden",
    "elevator": "🛗 Elevator",
}


def amenity_label(tag: str) -> str:
    return AMENITY_LABELS.get(tag, tag.replace("-", " ").capitalize())


def offer_pill(offer_type: str | None) -> str:
    label = (offer_type or "listing").lower()
    return f"offer-pill offer-{label}"


def flat_card_html(flat: Dict) -> str:
    """Card markup; every value taken from the store is HTML-escaped."""
    offer_type = flat.get("offer_type") or ""
    suffix = " / month" if offer_type == "rent" else ""
    beds = "Studio" if flat.get("bedrooms") == 0 else f"{flat.get('bedrooms') or '-'} bd"
    return f"""
        <div class="flat-card">
            <div class="flat-card__header">
                <span class="{escape(offer_pill(offer_type))}">{escape(offer_type.capitalize())}</span>
                <span class="flat-card__type">{escape(flat.get('flat_type') or '')}</span>
            </div>
            <h3>{escape(flat.get('location') or '')}</h3>
            <p class="flat-card__meta">{beds} · {flat.get('bathrooms') or '-'} ba · {flat.get('area') or '-'} m²</p>
            <p class="flat-card__price">{escape(str(flat.get('display_price') or ''))}{suffix}</p>
        </div>
    """


def render_flat_card(
    flat: Dict,
    on_open: Callable[[], None],
    on_favorite: Callable[[], None],
    key: Optional[str] = None,
) -> None:
    key = key or flat.get("id")
    image = (flat.get("image_urls") or [None])[0]
    heart = "❤️" if flat.get("favorite") else "🤍"
    card_html = flat_card_html(flat)
    with st.container():
        if image:
            st.image(image, use_container_width=True)
        st.markdown(card_html, unsafe_allow_html=True)
        open_col, fav_col = st.columns([3, 1])
        with open_col:
            st.button("View details", key=f"open-{key}", on_click=on_open)
        with fav_col:
            st.button(heart, key=f"fav-{key}", on_click=on_favorite)
