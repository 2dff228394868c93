"""Supabase client factory and a document-store adapter over its table API."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..utils.logging import get_logger
from .store import Cursor, Query, StoreError

LOGGER = get_logger("db.supabase")


def create_supabase_client():  # pragma: no cover - optional dependency
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")
    if not url or not key:
        LOGGER.info("Supabase credentials not configured; skipping client creation")
        return None
    try:
        from supabase import create_client

        return create_client(url, key)
    except Exception as exc:
        LOGGER.error("Failed to create Supabase client: %s", exc)
        return None


def _literal(value: Any) -> str:
    text = str(value)
    if any(ch in text for ch in ',.()"'):
        return '"' + text.replace('"', '\\"') + '"'
    return text


def _keyset_filter(field: str, cursor: Cursor, descending: bool) -> str:
    """PostgREST ``or`` filter for the rows after ``cursor`` in (field, id) order."""
    doc_id = _literal(cursor.doc_id)
    if cursor.value is None:
        same = f"and({field}.is.null,id.gt.{doc_id})"
        # Ascending, every non-null value still follows; descending, nulls are the tail.
        return same if descending else f"{same},{field}.not.is.null"
    value = _literal(cursor.value)
    op = "lt" if descending else "gt"
    branches = [f"{field}.{op}.{value}", f"and({field}.eq.{value},id.gt.{doc_id})"]
    if descending:
        branches.append(f"{field}.is.null")
    return ",".join(branches)


class SupabaseDocumentStore:
    """Runs listing queries against Supabase tables named after the collections.

    Each collection is a table with an ``id`` text primary key; the flats
    table keeps the document field names (``offerType``, ``imageUrls``).
    Keyset pagination uses the sort column plus ``id`` as tie-breaker.
    """

    def __init__(self, client) -> None:
        self.client = client

    def run_query(self, query: Query) -> List[Dict[str, Any]]:
        builder = self.client.table(query.collection).select("*")
        for predicate in query.predicates:
            if predicate.op == "==":
                builder = builder.eq(predicate.field, predicate.value)
            elif predicate.op == ">=":
                builder = builder.gte(predicate.field, predicate.value)
            elif predicate.op == "<=":
                builder = builder.lte(predicate.field, predicate.value)
            elif predicate.op == "in":
                builder = builder.in_(predicate.field, list(predicate.value))
            elif predicate.op == "search":
                fields, term = predicate.value
                pattern = _literal(f"*{term}*")
                builder = builder.or_(",".join(f"{name}.ilike.{pattern}" for name in fields))
        if query.order_field:
            # Nulls first ascending, last descending: the in-memory ordering.
            builder = builder.order(query.order_field, desc=query.descending, nullsfirst=not query.descending)
            builder = builder.order("id")
            if query.after is not None:
                builder = builder.or_(_keyset_filter(query.order_field, query.after, query.descending))
        else:
            builder = builder.order("id")
            if query.after is not None:
                builder = builder.gt("id", query.after.doc_id)
        if query.max_results is not None:
            builder = builder.limit(query.max_results)
        return self._execute(builder, f"query {query.collection}")

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        rows = self._execute(self.client.table(collection).select("*").eq("id", doc_id).limit(1), f"get {collection}")
        return rows[0] if rows else None

    def set_document(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = True) -> None:
        payload = {"id": doc_id, **data}
        if merge:
            builder = self.client.table(collection).upsert(payload, on_conflict="id")
        else:
            self._execute(self.client.table(collection).delete().eq("id", doc_id), f"replace {collection}")
            builder = self.client.table(collection).insert(payload)
        self._execute(builder, f"set {collection}")

    def add_document(self, collection: str, data: Dict[str, Any]) -> str:
        # The table default fills ``timestamp`` server side; sending it keeps parity with memory mode.
        payload = {**data, "timestamp": datetime.now(timezone.utc).isoformat()}
        rows = self._execute(self.client.table(collection).insert(payload), f"add {collection}")
        return str(rows[0].get("id")) if rows else ""

    def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        return self._execute(self.client.table(collection).select("*"), f"list {collection}")

    @staticmethod
    def _execute(builder, action: str) -> List[Dict[str, Any]]:
        try:
            response = builder.execute()
        except Exception as exc:
            LOGGER.error("supabase_failure action=%s error=%s", action, exc)
            raise StoreError(f"Supabase {action} failed") from exc
        return list(response.data or [])
