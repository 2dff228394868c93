"""Streamlit UI for the apartment complex listing site."""

from __future__ import annotations

from pathlib import Path

import sys
import uuid

import streamlit as st
from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

load_dotenv(dotenv_path=ROOT_DIR / ".env", override=False)

from app.backend_client import BackendClient
from app.components.cards import render_flat_card
from app.components.charts import render_price_area_chart
from app.components.forms import render_auth_form, render_contact_form
from app.components.tables import render_amenities, render_specs_table
from backend.services.currency import EXCHANGE_RATES, format_price
from backend.services.filters import FLAT_TYPES, OFFER_TYPES, SORT_LABELS
from backend.services.local_state import LocalStore
from backend.services.notifications import ERROR, SUCCESS
from backend.services.session import AppSession

st.set_page_config(page_title="Riverside Apartments", layout="wide", page_icon="🏢")

TOAST_ICONS = {SUCCESS: "✅", ERROR: "⚠️"}


@st.cache_resource(show_spinner=False)
def get_backend_client() -> BackendClient:
    return BackendClient()


def get_session() -> AppSession:
    session = st.session_state.get("app_session")
    if session is None:
        # One local cache per browser session; visitors never share favorites or history.
        client_id = st.session_state.setdefault("client_id", uuid.uuid4().hex)
        session = AppSession(
            local=LocalStore.for_client(client_id),
            send_inquiry=get_backend_client().submit_inquiry,
        ).start()
        st.session_state["app_session"] = session
    return session


def load_styles() -> None:
    css_path = Path(__file__).resolve().parent / "assets" / "styles.css"
    if css_path.exists():
        st.markdown(f"<style>{css_path.read_text()}</style>", unsafe_allow_html=True)


def flush_notifications(session: AppSession) -> None:
    for note in session.notifier.drain():
        st.toast(note.message, icon=TOAST_ICONS.get(note.level, "ℹ️"))


def open_flat(flat_id: str) -> None:
    st.query_params = {"flat_id": flat_id}


def close_flat() -> None:
    st.query_params = {}


def render_filters(session: AppSession) -> None:
    filters = session.state.filters
    with st.sidebar.form("filters"):
        st.markdown("### Filter apartments")
        offer_type = st.selectbox("Offer", OFFER_TYPES, index=OFFER_TYPES.index(filters.offer_type) if filters.offer_type in OFFER_TYPES else 0)
        flat_type = st.selectbox("Type", FLAT_TYPES, index=FLAT_TYPES.index(filters.flat_type) if filters.flat_type in FLAT_TYPES else 0)
        min_price = st.text_input("Min price (USD)", "" if filters.min_price is None else f"{filters.min_price:g}")
        max_price = st.text_input("Max price (USD)", "" if filters.max_price is None else f"{filters.max_price:g}")
        sort_keys = list(SORT_LABELS)
        sort_by = st.selectbox("Sort by", sort_keys, index=sort_keys.index(filters.sort_by), format_func=SORT_LABELS.get)
        search_term = st.text_input("Search location or description", filters.search_term)
        show_favorites = False
        if session.state.user is not None:
            show_favorites = st.checkbox(f"Favorites only ({len(session.state.favorites)})", value=filters.show_favorites)
        if st.form_submit_button("Apply filters"):
            session.apply_filters(
                {
                    "offer_type": offer_type,
                    "flat_type": flat_type,
                    "min_price": min_price,
                    "max_price": max_price,
                    "sort_by": sort_by,
                    "search_term": search_term,
                    "show_favorites": show_favorites,
                }
            )

    currencies = list(EXCHANGE_RATES)
    currency = st.sidebar.selectbox("Currency", currencies, index=currencies.index(session.state.currency))
    if currency != session.state.currency:
        session.change_currency(currency)


def render_account(session: AppSession) -> None:
    with st.sidebar:
        st.markdown("---")
        user = session.state.user
        if user is None:
            render_auth_form(session)
        else:
            st.markdown(f"Signed in as **{user.email}**")
            if st.button("Sign out"):
                session.sign_out()
                st.rerun()


def render_apartment_intro(session: AppSession) -> None:
    details = session.apartment_details()
    st.title("Riverside Apartments")
    if details is None:
        st.caption("Details not available.")
        return
    col1, col2, col3 = st.columns(3)
    col1.metric("Address", details["address"])
    col2.metric("Built", details["built_year"] or "N/A")
    col3.metric("Total flats", details["total_flats"])
    st.write(details["description"])
    if details["amenities"]:
        st.caption(" · ".join(details["amenities"]))


def render_grid(session: AppSession) -> None:
    flats = session.displayed_flats()
    if session.state.message and not flats:
        st.info(session.state.message)
        return
    columns = st.columns(3)
    for idx, flat in enumerate(flats):
        with columns[idx % 3]:
            render_flat_card(
                flat,
                on_open=lambda fid=flat["id"]: open_flat(fid),
                on_favorite=lambda fid=flat["id"]: session.toggle_favorite(fid),
                key=flat["id"],
            )
    if session.feed.has_more:
        st.button("Load more", on_click=session.load_more)
    if flats:
        st.plotly_chart(render_price_area_chart(flats, session.state.currency), use_container_width=True)


def render_recently_viewed(session: AppSession) -> None:
    st.subheader("Recently viewed")
    recent = session.recently_viewed()
    if not recent:
        st.caption("No recently viewed apartments.")
        return
    columns = st.columns(3)
    for idx, flat in enumerate(recent):
        with columns[idx % 3]:
            st.markdown(f"**{flat.get('location')}** · {flat.get('flat_type')}")
            st.button("Open", key=f"recent-{flat['id']}", on_click=lambda fid=flat["id"]: open_flat(fid))


def render_testimonials(session: AppSession) -> None:
    st.subheader("What residents say")
    testimonials = session.testimonials()
    if not testimonials:
        st.caption("No testimonials found.")
        return
    columns = st.columns(len(testimonials))
    for column, item in zip(columns, testimonials):
        column.markdown(f"_\"{item['quote']}\"_\n\n— **{item['author']}**")


def render_listing_page(session: AppSession) -> None:
    render_apartment_intro(session)
    st.subheader("Available apartments")
    render_grid(session)
    render_recently_viewed(session)
    render_testimonials(session)
    st.subheader("Contact us")
    render_contact_form(session)


def render_detail_page(session: AppSession, flat_id: str) -> None:
    flat = session.view_flat(flat_id)
    if flat is None:
        flat = get_backend_client().get_flat(flat_id)
    st.button("← Back to listings", on_click=close_flat)
    if flat is None:
        st.warning("Apartment not found.")
        return
    displayed = {**flat, "display_price": format_price(flat.get("price"), session.state.currency)}
    st.markdown(f"## {flat.get('location')}")
    images = flat.get("image_urls") or []
    if images:
        index = st.slider("Photo", 1, len(images), 1) if len(images) > 1 else 1
        st.image(images[index - 1], use_container_width=True)
    else:
        st.info("No images available for this flat.")
    st.write(flat.get("description") or "")
    render_specs_table(displayed)
    st.markdown("### Amenities")
    render_amenities(flat.get("amenities") or [])
    label = "Remove from favorites" if session.favorites.is_favorite(flat_id) else "Add to favorites"
    st.button(label, on_click=lambda: session.toggle_favorite(flat_id))


load_styles()
app_session = get_session()
render_filters(app_session)
render_account(app_session)

params = st.query_params
selected = params.get("flat_id")
if isinstance(selected, list):
    selected = selected[0] if selected else None

if selected:
    render_detail_page(app_session, selected)
else:
    render_listing_page(app_session)
flush_notifications(app_session)
