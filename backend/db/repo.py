"""Repository over the document store, in memory or Supabase backed."""

from __future__ import annotations

import os
from typing import Dict, List, Optional

from ..utils.caching import clear_prefix, memoize
from ..utils.io import load_json, load_records
from ..utils.logging import get_logger
from .mappers import map_apartment_document, map_flat_document, map_flat_row, map_testimonial_document
from .store import DocumentStore, InMemoryDocumentStore, Query
from .supabase_client import SupabaseDocumentStore, create_supabase_client

LOGGER = get_logger("db.repo")

DB_MODE = os.getenv("DB_MODE", "memory").lower()

FLATS = "flats"
USERS = "users"
TESTIMONIALS = "testimonials"
INQUIRIES = "inquiries"
APARTMENT_DETAILS = "apartmentDetails"

F_FLATS = "flats.csv"
F_TESTIMONIALS = "testimonials.csv"
F_APARTMENT = "apartment.json"

STATIC_CACHE_PREFIXES = ("testimonials", "apartment_details")


def seed_memory_store(data_dir: Optional[str] = None) -> InMemoryDocumentStore:
    """Build an in-memory store from the demo files; missing files leave collections empty."""

    collections: Dict[str, List[Dict]] = {}
    try:
        collections[FLATS] = [map_flat_row(row) for row in load_records(F_FLATS, data_dir)]
    except FileNotFoundError as exc:
        LOGGER.warning("seed_missing file=%s (%s)", F_FLATS, exc)
    try:
        collections[TESTIMONIALS] = load_records(F_TESTIMONIALS, data_dir)
    except FileNotFoundError as exc:
        LOGGER.warning("seed_missing file=%s (%s)", F_TESTIMONIALS, exc)
    try:
        collections[APARTMENT_DETAILS] = [{"id": "main", **load_json(F_APARTMENT, data_dir)}]
    except FileNotFoundError as exc:
        LOGGER.warning("seed_missing file=%s (%s)", F_APARTMENT, exc)
    return InMemoryDocumentStore(collections)


class Repo:
    def __init__(self, store: Optional[DocumentStore] = None) -> None:
        self.mode = DB_MODE if store is None else "custom"
        self.store: DocumentStore
        if store is not None:
            self.store = store
            return
        if self.mode == "supabase":
            client = create_supabase_client()
            if client is not None:
                self.store = SupabaseDocumentStore(client)
                LOGGER.info("Repository running in Supabase mode")
                return
            LOGGER.warning("Supabase client unavailable; falling back to in-memory store")
            self.mode = "memory"
        self.store = seed_memory_store()
        LOGGER.info("Repository running in memory mode")

    # ------------------------------------------------------------------
    # Listings
    def page_flats(self, query: Query) -> List[Dict]:
        """Run a flats query and return the raw documents (needed for cursors)."""
        return self.store.run_query(query)

    def list_flats(self, query: Query) -> List[Dict]:
        return [map_flat_document(doc) for doc in self.store.run_query(query)]

    def get_flat(self, flat_id: str) -> Optional[Dict]:
        doc = self.store.get_document(FLATS, flat_id)
        return map_flat_document(doc) if doc else None

    # ------------------------------------------------------------------
    # Users & inquiries
    def get_user_favorites(self, uid: str) -> Optional[List[str]]:
        """Return the stored favorites, or None when the user has no record yet."""
        doc = self.store.get_document(USERS, uid)
        if doc is None:
            return None
        favorites = doc.get("favorites") or []
        return [str(item) for item in favorites]

    def save_user_favorites(self, uid: str, favorites: List[str]) -> None:
        self.store.set_document(USERS, uid, {"favorites": list(favorites)}, merge=True)

    def add_inquiry(self, name: str, email: str, message: str) -> str:
        inquiry_id = self.store.add_document(INQUIRIES, {"name": name, "email": email, "message": message})
        LOGGER.info("inquiry_saved id=%s", inquiry_id)
        return inquiry_id

    # ------------------------------------------------------------------
    # Static content
    @memoize("testimonials")
    def list_testimonials(self) -> List[Dict]:
        return [map_testimonial_document(doc) for doc in self.store.list_documents(TESTIMONIALS)]

    @memoize("apartment_details")
    def get_apartment_details(self) -> Optional[Dict]:
        doc = self.store.get_document(APARTMENT_DETAILS, "main")
        if doc is None:
            LOGGER.info("No apartment details document found")
            return None
        return map_apartment_document(doc)


_repo_singleton: Repo | None = None


def get_repository() -> Repo:
    global _repo_singleton
    if _repo_singleton is None:
        _repo_singleton = Repo()
    return _repo_singleton


def reset_repository() -> None:
    """Forget the process-wide repository and its cached static content."""
    global _repo_singleton
    _repo_singleton = None
    for prefix in STATIC_CACHE_PREFIXES:
        clear_prefix(prefix)
