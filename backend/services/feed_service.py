"""Paginated fetching of flats for the listing grid.

``FlatFeed`` turns the session's ``FilterState`` into a store query, keeps the
cursor between "load more" calls and accumulates the fetched flats. Every
reset starts a new generation; a response that arrives for an older
generation is dropped instead of being merged into the newer result set.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..db.mappers import map_flat_document
from ..db.repo import Repo
from ..db.store import Cursor, QueryError, StoreError
from ..utils.logging import get_logger
from .currency import convert, format_price
from .filters import build_flat_query
from .state import AppState

LOGGER = get_logger("services.feed")

PAGE_SIZE = int(os.getenv("FLATS_PER_PAGE", "6"))


class FetchStatus(str, Enum):
    LOADED = "loaded"
    NO_RESULTS = "no_results"
    END = "end"
    NO_FAVORITES = "no_favorites"
    ERROR = "error"
    BUSY = "busy"
    STALE = "stale"


@dataclass(frozen=True)
class FetchOutcome:
    status: FetchStatus
    page: List[Dict] = field(default_factory=list)
    has_more: bool = False
    generation: int = 0


@dataclass
class PageState:
    records: List[Dict] = field(default_factory=list)
    cursor: Optional[Cursor] = None
    has_more: bool = False
    generation: int = 0
    in_flight: Optional[int] = None


class FlatFeed:
    def __init__(self, repo: Repo, state: AppState, page_size: int = PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.repo = repo
        self.state = state
        self.page_size = page_size
        self.page = PageState()
        self._lock = threading.Lock()

    @property
    def records(self) -> List[Dict]:
        with self._lock:
            return list(self.page.records)

    @property
    def has_more(self) -> bool:
        return self.page.has_more

    @property
    def generation(self) -> int:
        return self.page.generation

    def reset(self) -> FetchOutcome:
        return self.fetch(reset=True)

    def load_more(self) -> FetchOutcome:
        return self.fetch(reset=False)

    def fetch(self, reset: bool = False) -> FetchOutcome:
        with self._lock:
            page = self.page
            if reset:
                page.generation += 1
                page.records = []
                page.cursor = None
                page.has_more = False
                page.in_flight = None
            elif page.in_flight is not None:
                LOGGER.info("fetch_skipped reason=in_flight generation=%d", page.generation)
                return FetchOutcome(FetchStatus.BUSY, generation=page.generation)

            token = page.generation
            filters = self.state.filters
            favorites = list(self.state.favorites)
            if filters.show_favorites and not favorites:
                LOGGER.info("fetch_skipped reason=no_favorites generation=%d", token)
                return FetchOutcome(FetchStatus.NO_FAVORITES, generation=token)
            try:
                # One extra row tells us whether another page exists.
                query = build_flat_query(filters, favorites, cursor=page.cursor, limit=self.page_size + 1)
            except QueryError as exc:
                LOGGER.error("fetch_failed generation=%d error=%s", token, exc)
                return FetchOutcome(FetchStatus.ERROR, generation=token)
            page.in_flight = token

        LOGGER.debug("fetch_start reset=%s generation=%d filters=%s", reset, token, filters.as_dict())
        try:
            documents = self.repo.page_flats(query)
        except (StoreError, QueryError) as exc:
            LOGGER.error("fetch_failed generation=%d error=%s", token, exc)
            with self._lock:
                if self.page.generation != token:
                    return FetchOutcome(FetchStatus.STALE, generation=token)
                self.page.in_flight = None
            return FetchOutcome(FetchStatus.ERROR, generation=token)

        has_more = len(documents) > self.page_size
        documents = documents[: self.page_size]
        flats = [map_flat_document(doc) for doc in documents]

        with self._lock:
            page = self.page
            if page.generation != token:
                LOGGER.info("fetch_discarded generation=%d current=%d", token, page.generation)
                return FetchOutcome(FetchStatus.STALE, generation=token)
            page.in_flight = None
            if documents:
                page.cursor = query.cursor_for(documents[-1])
                page.records.extend(flats)
            page.has_more = has_more
            total = len(page.records)

        if flats:
            status = FetchStatus.LOADED
        elif reset:
            status = FetchStatus.NO_RESULTS
        else:
            status = FetchStatus.END
        LOGGER.info(
            "fetch_done reset=%s generation=%d rows=%d total=%d has_more=%s",
            reset,
            token,
            len(flats),
            total,
            has_more,
        )
        return FetchOutcome(status, page=flats, has_more=has_more, generation=token)

    def display(self, currency: Optional[str] = None) -> List[Dict]:
        """Accumulated flats with prices converted for display; never hits the store."""
        currency = currency or self.state.currency
        displayed = []
        for flat in self.records:
            price = flat.get("price")
            displayed.append(
                {
                    **flat,
                    "display_price": format_price(price, currency),
                    "converted_price": convert(price, currency) if price is not None else None,
                }
            )
        return displayed
