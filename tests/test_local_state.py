from backend.services.local_state import RECENTLY_VIEWED_KEY, LocalStore, RecentlyViewed


def test_local_store_round_trips_through_file(tmp_path):
    path = tmp_path / "nested" / "state.json"
    store = LocalStore(path)
    store.set("favorites", ["a", "b"])
    assert LocalStore(path).get("favorites") == ["a", "b"]
    store.remove("favorites")
    assert LocalStore(path).get("favorites") is None


def test_corrupt_file_is_ignored(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    store = LocalStore(path)
    assert store.get("favorites", []) == []
    store.set("favorites", ["x"])
    assert LocalStore(path).get("favorites") == ["x"]


def test_recently_viewed_drops_entries_without_id(tmp_path):
    store = LocalStore(tmp_path / "state.json")
    store.set(RECENTLY_VIEWED_KEY, [{"id": "a"}, {"location": "no id"}, None, {"id": "b"}])
    recent = RecentlyViewed(store, limit=3)
    assert [item["id"] for item in recent.load()] == ["a", "b"]
    recent.add({"id": "c"})
    recent.add({"id": "a"})
    recent.add({"id": "d"})
    assert [item["id"] for item in recent.items] == ["d", "a", "c"]
