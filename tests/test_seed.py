import pytest

from backend.db import seed as seed_module
from backend.db.store import InMemoryDocumentStore


def test_seed_requires_supabase_credentials(monkeypatch):
    monkeypatch.setattr(seed_module, "create_supabase_client", lambda: None)
    with pytest.raises(RuntimeError):
        seed_module.seed()


def test_seed_uploads_demo_files_with_parsed_lists(monkeypatch):
    target = InMemoryDocumentStore()
    monkeypatch.setattr(seed_module, "create_supabase_client", lambda: object())
    monkeypatch.setattr(seed_module, "SupabaseDocumentStore", lambda client: target)
    seed_module.seed()

    flat = target.get_document("flats", "A101")
    assert flat["amenities"] == ["wifi", "laundry"]
    assert flat["imageUrls"][0].endswith("a101-1.jpg")
    assert target.get_document("flats", "B302")["amenities"] == []
    assert len(target.list_documents("testimonials")) == 3
    assert target.get_document("apartmentDetails", "main")["totalFlats"] == 84
