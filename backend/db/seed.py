"""Seed the Supabase tables from the demo data files."""

from __future__ import annotations

from dotenv import load_dotenv

from ..utils.io import load_json, load_records
from ..utils.logging import get_logger
from .mappers import map_flat_row, parse_tag_list
from .repo import APARTMENT_DETAILS, F_APARTMENT, F_FLATS, F_TESTIMONIALS, FLATS, TESTIMONIALS
from .store import StoreError
from .supabase_client import SupabaseDocumentStore, create_supabase_client

LOGGER = get_logger("db.seed")


def seed() -> None:
    load_dotenv()
    client = create_supabase_client()
    if client is None:
        raise RuntimeError("SUPABASE_URL and a Supabase key must be configured to seed")
    store = SupabaseDocumentStore(client)

    LOGGER.info("Loading flats")
    flats = [map_flat_row(row) for row in load_records(F_FLATS)]
    for doc in flats:
        # Tables hold real arrays; the CSV keeps them serialized.
        doc["amenities"] = parse_tag_list(doc.get("amenities"), "amenities")
        doc["imageUrls"] = parse_tag_list(doc.get("imageUrls"), "imageUrls")
        store.set_document(FLATS, doc.pop("id"), doc)
    LOGGER.info("Seeded %d flats", len(flats))

    LOGGER.info("Loading testimonials")
    testimonials = load_records(F_TESTIMONIALS)
    for row in testimonials:
        store.set_document(TESTIMONIALS, str(row.pop("id")), row)
    LOGGER.info("Seeded %d testimonials", len(testimonials))

    store.set_document(APARTMENT_DETAILS, "main", load_json(F_APARTMENT))
    LOGGER.info("Seeded apartment details")


if __name__ == "__main__":  # pragma: no cover
    try:
        seed()
    except (RuntimeError, StoreError) as exc:
        LOGGER.error("Seeding failed: %s", exc)
        raise SystemExit(1)
