"""Composable document-store queries and an in-memory store implementation."""

from __future__ import annotations

import dataclasses
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from ..utils.logging import get_logger

LOGGER = get_logger("db.store")

MEMBERSHIP_LIMIT = 30

EQUALITY_OPS = ("==",)
RANGE_OPS = (">=", "<=")
WHERE_OPS = EQUALITY_OPS + RANGE_OPS + ("in",)


class StoreError(RuntimeError):
    """Raised when the document store cannot answer a read or write."""


class QueryError(ValueError):
    """Raised when a query is composed in a way the store cannot run."""


@dataclass(frozen=True)
class Predicate:
    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class Cursor:
    """Position after which the next page starts: the sort value and the document id."""

    value: Any
    doc_id: str


@dataclass(frozen=True)
class Query:
    collection: str
    predicates: Tuple[Predicate, ...] = ()
    order_field: Optional[str] = None
    descending: bool = False
    after: Optional[Cursor] = None
    max_results: Optional[int] = None

    def where(self, field_name: str, op: str, value: Any) -> "Query":
        if op not in WHERE_OPS:
            raise QueryError(f"unsupported operator {op!r}")
        if op == "in":
            values = tuple(value)
            if not values:
                raise QueryError("membership predicate needs at least one value")
            if len(values) > MEMBERSHIP_LIMIT:
                raise QueryError(f"membership predicate is limited to {MEMBERSHIP_LIMIT} values")
            value = values
        return dataclasses.replace(self, predicates=self.predicates + (Predicate(field_name, op, value),))

    def search(self, fields: Sequence[str], term: str) -> "Query":
        """Case-insensitive substring match of ``term`` against any of ``fields``."""
        predicate = Predicate(",".join(fields), "search", (tuple(fields), term))
        return dataclasses.replace(self, predicates=self.predicates + (predicate,))

    def order_by(self, field_name: str, descending: bool = False) -> "Query":
        return dataclasses.replace(self, order_field=field_name, descending=descending)

    def start_after(self, cursor: Optional[Cursor]) -> "Query":
        return dataclasses.replace(self, after=cursor)

    def limit(self, count: Optional[int]) -> "Query":
        if count is not None and count < 1:
            raise QueryError("limit must be positive")
        return dataclasses.replace(self, max_results=count)

    def cursor_for(self, document: Dict[str, Any]) -> Cursor:
        value = document.get(self.order_field) if self.order_field else None
        return Cursor(value=value, doc_id=str(document.get("id")))


class DocumentStore(Protocol):
    def run_query(self, query: Query) -> List[Dict[str, Any]]:
        ...

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    def set_document(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = True) -> None:
        ...

    def add_document(self, collection: str, data: Dict[str, Any]) -> str:
        ...

    def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        ...


def _matches(document: Dict[str, Any], predicate: Predicate) -> bool:
    if predicate.op == "search":
        fields, term = predicate.value
        needle = term.lower()
        return any(needle in str(document.get(name) or "").lower() for name in fields)
    if predicate.field == "id":
        actual: Any = str(document.get("id"))
    else:
        actual = document.get(predicate.field)
    if predicate.op == "==":
        return actual == predicate.value
    if predicate.op == "in":
        return actual in predicate.value
    if actual is None:
        return False
    try:
        if predicate.op == ">=":
            return actual >= predicate.value
        return actual <= predicate.value
    except TypeError:
        return False


def _sort_key(value: Any) -> Tuple[int, Any]:
    # Missing values sort first ascending, like the managed store does.
    if value is None:
        return (0, 0)
    if isinstance(value, (int, float)):
        return (1, float(value))
    return (2, str(value))


class InMemoryDocumentStore:
    """Dictionary-backed store with the query semantics the listing needs.

    Ordering is by ``order_field`` with the document id as tie-breaker, so a
    ``Cursor`` identifies a unique position and paging never repeats or skips
    a record.
    """

    def __init__(self, collections: Optional[Dict[str, Iterable[Dict[str, Any]]]] = None) -> None:
        self._lock = threading.Lock()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for name, documents in (collections or {}).items():
            for document in documents:
                doc = dict(document)
                doc_id = str(doc.pop("id", None) or uuid.uuid4().hex)
                self._collections.setdefault(name, {})[doc_id] = doc

    def run_query(self, query: Query) -> List[Dict[str, Any]]:
        with self._lock:
            documents = [
                {"id": doc_id, **data}
                for doc_id, data in self._collections.get(query.collection, {}).items()
            ]
        for predicate in query.predicates:
            documents = [doc for doc in documents if _matches(doc, predicate)]

        documents.sort(key=lambda doc: doc["id"])
        if query.order_field:
            # Stable sort: ties keep the ascending id order in both directions.
            documents.sort(key=lambda doc: _sort_key(doc.get(query.order_field)), reverse=query.descending)

        if query.after is not None:
            documents = self._after(documents, query)
        if query.max_results is not None:
            documents = documents[: query.max_results]
        LOGGER.debug("run_query collection=%s predicates=%d rows=%d", query.collection, len(query.predicates), len(documents))
        return documents

    @staticmethod
    def _after(documents: List[Dict[str, Any]], query: Query) -> List[Dict[str, Any]]:
        cursor = query.after
        for index, doc in enumerate(documents):
            if doc["id"] == cursor.doc_id:
                return documents[index + 1 :]
        # The cursor document vanished; resume from its sort position.
        marker = (_sort_key(cursor.value), cursor.doc_id)
        if query.descending:
            return [
                doc
                for doc in documents
                if _sort_key(doc.get(query.order_field)) < marker[0]
                or (_sort_key(doc.get(query.order_field)) == marker[0] and doc["id"] > cursor.doc_id)
            ]
        return [doc for doc in documents if (_sort_key(doc.get(query.order_field)), doc["id"]) > marker]

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            data = self._collections.get(collection, {}).get(str(doc_id))
            return None if data is None else {"id": str(doc_id), **data}

    def set_document(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = True) -> None:
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            current = docs.get(str(doc_id), {}) if merge else {}
            docs[str(doc_id)] = {**current, **data}

    def add_document(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex
        payload = dict(data)
        payload["timestamp"] = datetime.now(timezone.utc)
        with self._lock:
            self._collections.setdefault(collection, {})[doc_id] = payload
        return doc_id

    def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [{"id": doc_id, **data} for doc_id, data in self._collections.get(collection, {}).items()]


__all__ = [
    "Cursor",
    "DocumentStore",
    "InMemoryDocumentStore",
    "MEMBERSHIP_LIMIT",
    "Predicate",
    "Query",
    "QueryError",
    "StoreError",
]
