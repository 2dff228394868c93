from datetime import datetime

from backend.db.store import Cursor, InMemoryDocumentStore, Query


def _store():
    return InMemoryDocumentStore(
        {
            "flats": [
                {"id": "c", "price": 100.0},
                {"id": "a", "price": 100.0},
                {"id": "b", "price": 300.0},
                {"id": "d", "price": None},
                {"id": "e", "price": 200.0},
            ]
        }
    )


def test_ordering_breaks_ties_by_id_in_both_directions():
    store = _store()
    asc = store.run_query(Query("flats").order_by("price"))
    desc = store.run_query(Query("flats").order_by("price", descending=True))
    assert [doc["id"] for doc in asc] == ["d", "a", "c", "e", "b"]
    assert [doc["id"] for doc in desc] == ["b", "e", "a", "c", "d"]


def test_start_after_walks_pages_without_repeats():
    store = _store()
    base = Query("flats").where("price", ">=", 100).order_by("price").limit(2)
    first = store.run_query(base)
    second = store.run_query(base.start_after(base.cursor_for(first[-1])))
    third = store.run_query(base.start_after(base.cursor_for(second[-1])))
    assert [doc["id"] for doc in first] == ["a", "c"]
    assert [doc["id"] for doc in second] == ["e", "b"]
    assert third == []


def test_cursor_survives_deleted_anchor_document():
    store = _store()
    query = Query("flats").order_by("price").start_after(Cursor(value=150.0, doc_id="gone"))
    assert [doc["id"] for doc in store.run_query(query)] == ["e", "b"]


def test_search_predicate_is_case_insensitive():
    store = InMemoryDocumentStore(
        {"flats": [{"id": "1", "location": "Riverside", "description": ""}, {"id": "2", "location": "Hill", "description": "near the RIVER"}, {"id": "3", "location": "Park"}]}
    )
    rows = store.run_query(Query("flats").search(("location", "description"), "river"))
    assert {doc["id"] for doc in rows} == {"1", "2"}


def test_set_document_merges_and_add_document_stamps_time():
    store = InMemoryDocumentStore()
    store.set_document("users", "u1", {"favorites": ["a"], "name": "Ana"})
    store.set_document("users", "u1", {"favorites": ["a", "b"]})
    assert store.get_document("users", "u1") == {"id": "u1", "favorites": ["a", "b"], "name": "Ana"}
    store.set_document("users", "u1", {"favorites": []}, merge=False)
    assert store.get_document("users", "u1") == {"id": "u1", "favorites": []}

    doc_id = store.add_document("inquiries", {"name": "Ana"})
    saved = store.get_document("inquiries", doc_id)
    assert isinstance(saved["timestamp"], datetime)
    assert store.get_document("inquiries", "missing") is None
