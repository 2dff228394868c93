import json
from typing import Any, Dict, List

from ..utils.coerce import to_float, to_int, to_str, to_str_list
from ..utils.logging import get_logger

LOGGER = get_logger("db.mappers")


def _parse_serialized_list(text: str, field_name: str) -> List[str]:
    try:
        parsed = json.loads(text)
    except ValueError as exc:
        LOGGER.warning("malformed_list field=%s error=%s", field_name, exc)
        return []
    return to_str_list(parsed)


def parse_tag_list(value: Any, field_name: str = "amenities") -> List[str]:
    """Normalise a list field that may have been stored as a JSON string.

    Accepts a real list, a list holding a single serialized list, a serialized
    list string, or a comma separated string. Anything else is an empty list.
    """
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        if len(value) == 1 and isinstance(value[0], str) and value[0].strip().startswith("["):
            return _parse_serialized_list(value[0].strip(), field_name)
        return to_str_list(value)
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("[") and text.endswith("]"):
            return _parse_serialized_list(text, field_name)
        if text.startswith("[") or text.endswith("]"):
            LOGGER.warning("malformed_list field=%s value=%r", field_name, text[:40])
            return []
        return [part.strip() for part in text.split(",") if part.strip()]
    LOGGER.warning("unexpected_list_type field=%s type=%s", field_name, type(value).__name__)
    return []


def map_flat_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": to_str(doc.get("id")),
        "price": to_float(doc.get("price")),
        "area": to_float(doc.get("area")),
        "offer_type": to_str(doc.get("offerType")),
        "flat_type": to_str(doc.get("type")),
        "location": to_str(doc.get("location")),
        "bedrooms": to_int(doc.get("bedrooms")),
        "bathrooms": to_float(doc.get("bathrooms")),
        "amenities": parse_tag_list(doc.get("amenities"), "amenities"),
        "image_urls": parse_tag_list(doc.get("imageUrls"), "imageUrls"),
        "description": to_str(doc.get("description")),
    }


def map_flat_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Seed CSV row -> stored flat document (numbers typed, lists kept as stored)."""
    doc = dict(row)
    doc["id"] = to_str(row.get("id"))
    doc["price"] = to_float(row.get("price"))
    doc["area"] = to_float(row.get("area"))
    doc["bedrooms"] = to_int(row.get("bedrooms"))
    doc["bathrooms"] = to_float(row.get("bathrooms"))
    return doc


def map_testimonial_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "quote": to_str(doc.get("quote")) or "No quote available.",
        "author": to_str(doc.get("author")) or "Anonymous",
    }


def map_apartment_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    amenities = doc.get("amenities")
    return {
        "address": to_str(doc.get("address")) or "N/A",
        "built_year": to_int(doc.get("builtYear")),
        "total_flats": to_int(doc.get("totalFlats")) or 0,
        "description": to_str(doc.get("description")) or "No description available.",
        "amenities": to_str_list(amenities) if isinstance(amenities, list) else [],
    }
