"""Filter/sort state for the listing and its translation into a store query."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..db.store import MEMBERSHIP_LIMIT, Cursor, Query
from ..utils.coerce import to_price, to_str
from ..utils.logging import get_logger

LOGGER = get_logger("services.filters")

FLATS_COLLECTION = "flats"

OFFER_TYPES = ("all", "rent", "sale")
FLAT_TYPES = ("all", "studio", "1br", "2br", "3br", "penthouse")

DEFAULT_SORT = "price-desc"
SORT_OPTIONS: Dict[str, Tuple[str, bool]] = {
    "price-asc": ("price", False),
    "price-desc": ("price", True),
    "area-asc": ("area", False),
    "area-desc": ("area", True),
}
SORT_LABELS = {
    "price-asc": "Price: low to high",
    "price-desc": "Price: high to low",
    "area-asc": "Area: small to large",
    "area-desc": "Area: large to small",
}

SEARCH_FIELDS = ("location", "description")


def sort_spec(sort_by: str) -> Tuple[str, bool]:
    return SORT_OPTIONS.get(sort_by, SORT_OPTIONS[DEFAULT_SORT])


@dataclass
class FilterState:
    offer_type: str = "all"
    flat_type: str = "all"
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    sort_by: str = DEFAULT_SORT
    search_term: str = ""
    show_favorites: bool = False

    def apply(self, values: Mapping[str, Any]) -> None:
        """Replace every field from a UI snapshot; keys left out go back to defaults.

        Price bounds are parsed leniently and unparseable input is treated as
        absent. Accepts both ``offer_type`` and ``offerType`` spellings.
        """

        def pick(*names: str) -> Any:
            for name in names:
                if name in values:
                    return values[name]
            return None

        self.offer_type = to_str(pick("offer_type", "offerType")).strip() or "all"
        self.flat_type = to_str(pick("flat_type", "flatType")).strip() or "all"
        self.min_price = to_price(pick("min_price", "minPrice"))
        self.max_price = to_price(pick("max_price", "maxPrice"))
        sort_by = to_str(pick("sort_by", "sortBy")).strip()
        self.sort_by = sort_by if sort_by in SORT_OPTIONS else DEFAULT_SORT
        self.search_term = to_str(pick("search_term", "searchTerm")).strip()
        self.show_favorites = bool(pick("show_favorites", "showFavorites"))
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            LOGGER.warning("inverted_price_bounds min=%s max=%s", self.min_price, self.max_price)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "offer_type": self.offer_type,
            "flat_type": self.flat_type,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "sort_by": self.sort_by,
            "search_term": self.search_term,
            "show_favorites": self.show_favorites,
        }


def build_flat_query(
    filters: FilterState,
    favorites: Sequence[str] = (),
    cursor: Optional[Cursor] = None,
    limit: Optional[int] = None,
) -> Query:
    """Compose the flats query: equality, then range, then membership, then ordering.

    The caller must short-circuit ``show_favorites`` with no favorites; this
    function never produces an empty membership predicate.
    """

    query = Query(FLATS_COLLECTION)
    if filters.offer_type and filters.offer_type != "all":
        query = query.where("offerType", "==", filters.offer_type)
    if filters.flat_type and filters.flat_type != "all":
        query = query.where("type", "==", filters.flat_type)
    if filters.min_price is not None:
        query = query.where("price", ">=", filters.min_price)
    if filters.max_price is not None:
        query = query.where("price", "<=", filters.max_price)
    if filters.show_favorites and favorites:
        ids = list(favorites)
        if len(ids) > MEMBERSHIP_LIMIT:
            LOGGER.warning("favorites_truncated count=%d limit=%d", len(ids), MEMBERSHIP_LIMIT)
            ids = ids[-MEMBERSHIP_LIMIT:]
        query = query.where("id", "in", ids)
    if filters.search_term:
        query = query.search(SEARCH_FIELDS, filters.search_term)
    field_name, descending = sort_spec(filters.sort_by)
    query = query.order_by(field_name, descending=descending)
    if cursor is not None:
        query = query.start_after(cursor)
    if limit is not None:
        query = query.limit(limit)
    return query
