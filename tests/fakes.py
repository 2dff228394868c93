"""Store doubles and the shared listing dataset used across the tests."""

from typing import Callable, List, Optional

from backend.db.store import InMemoryDocumentStore, StoreError


class ScriptedStore(InMemoryDocumentStore):
    """In-memory store that counts queries, can fail on demand and run a hook mid-query."""

    def __init__(self, collections=None) -> None:
        super().__init__(collections)
        self.queries: List = []
        self.fail_queries = False
        self.fail_writes = False
        self.hook: Optional[Callable[[], None]] = None

    def run_query(self, query):
        self.queries.append(query)
        if self.hook is not None:
            hook, self.hook = self.hook, None
            hook()
        if self.fail_queries:
            raise StoreError("query failed")
        return super().run_query(query)

    def get_document(self, collection, doc_id):
        if self.fail_queries:
            raise StoreError("read failed")
        return super().get_document(collection, doc_id)

    def set_document(self, collection, doc_id, data, merge=True):
        if self.fail_writes:
            raise StoreError("write failed")
        super().set_document(collection, doc_id, data, merge=merge)

    def add_document(self, collection, data):
        if self.fail_writes:
            raise StoreError("write failed")
        return super().add_document(collection, data)

    def list_documents(self, collection):
        if self.fail_queries:
            raise StoreError("list failed")
        return super().list_documents(collection)


def scenario_flats():
    """10 rent units priced 1000..1900 plus 5 that miss the rent/1000-2000 filter."""
    flats = [
        {
            "id": f"r{i:02d}",
            "price": 1000.0 + 100 * i,
            "area": 40.0 + i,
            "offerType": "rent",
            "type": "1br" if i % 2 else "studio",
            "location": f"Block A - Floor {i % 4 + 1}",
            "amenities": ["wifi"],
            "imageUrls": [],
            "description": "Rental unit",
        }
        for i in range(10)
    ]
    flats += [
        {"id": "s1", "price": 1500.0, "area": 60.0, "offerType": "sale", "type": "2br", "location": "Block B"},
        {"id": "s2", "price": 1200.0, "area": 55.0, "offerType": "sale", "type": "1br", "location": "Block B"},
        {"id": "x1", "price": 900.0, "area": 30.0, "offerType": "rent", "type": "studio", "location": "Block C"},
        {"id": "x2", "price": 2100.0, "area": 90.0, "offerType": "rent", "type": "3br", "location": "Block C riverside"},
        {"id": "x3", "price": 2500.0, "area": 120.0, "offerType": "rent", "type": "penthouse", "location": "Block C"},
    ]
    return flats
