import pytest

from backend.services import local_state
from backend.services.feed_service import FetchStatus
from backend.services.local_state import FAVORITES_KEY, RECENTLY_VIEWED_KEY, LocalStore
from backend.services.notifications import ERROR, INFO, SUCCESS
from backend.services.session import NO_FAVORITES_MESSAGE, NO_RESULTS_MESSAGE, AppSession


def _levels(session):
    return [(note.level, note.message) for note in session.notifier.drain()]


def _signed_in(session, auth, email="ana@example.com"):
    auth.register(email, "secret123")
    session.notifier.drain()
    return session.state.user


def test_start_loads_first_page(session, store):
    assert len(store.queries) == 1
    assert len(session.feed.records) == 6
    assert session.feed.has_more is True
    prices = [flat["price"] for flat in session.feed.records]
    assert prices == sorted(prices, reverse=True)


def test_apply_filters_triggers_reset_and_reports_empty_state(session):
    outcome = session.apply_filters({"offerType": "sale", "minPrice": "99999"})
    assert outcome.status == FetchStatus.NO_RESULTS
    assert session.state.message == NO_RESULTS_MESSAGE
    assert session.displayed_flats() == []

    session.apply_filters({"offerType": "rent", "minPrice": "1000", "maxPrice": "2000", "sortBy": "price-asc"})
    assert session.state.message is None
    session.load_more()
    assert session.load_more().status == FetchStatus.END
    assert (INFO, "No more apartments to load.") in _levels(session)


def test_unauthenticated_favorite_toggle_is_refused(session, local):
    assert session.toggle_favorite("r01") is False
    assert session.state.favorites == []
    assert local.get(FAVORITES_KEY) is None
    assert _levels(session)[-1] == (INFO, "Please log in to manage favorites.")


def test_favorite_toggle_writes_remote_then_local(session, auth, store, local):
    user = _signed_in(session, auth)
    assert session.toggle_favorite("r01") is True
    assert session.state.favorites == ["r01"]
    assert store.get_document("users", user.uid)["favorites"] == ["r01"]
    assert local.get(FAVORITES_KEY) == ["r01"]
    assert _levels(session) == [(SUCCESS, "Added to favorites!")]

    assert session.toggle_favorite("r01") is True
    assert session.state.favorites == []
    assert store.get_document("users", user.uid)["favorites"] == []
    assert _levels(session) == [(INFO, "Removed from favorites.")]


def test_failed_remote_write_leaves_favorites_untouched(session, auth, store, local):
    _signed_in(session, auth)
    session.toggle_favorite("r01")
    store.fail_writes = True
    assert session.toggle_favorite("r02") is False
    assert session.state.favorites == ["r01"]
    assert local.get(FAVORITES_KEY) == ["r01"]
    assert (ERROR, "Error updating favorites. Please try again.") in _levels(session)


def test_unfavoriting_in_favorites_view_refetches(session, auth):
    _signed_in(session, auth)
    assert session.apply_filters({"show_favorites": True}).status == FetchStatus.NO_FAVORITES
    assert session.state.message == NO_FAVORITES_MESSAGE

    session.toggle_favorite("r01")
    session.toggle_favorite("s1")
    assert {flat["id"] for flat in session.feed.records} == {"r01", "s1"}

    session.toggle_favorite("r01")
    assert [flat["id"] for flat in session.feed.records] == ["s1"]
    assert all(flat["favorite"] for flat in session.displayed_flats())


def test_sign_in_loads_and_sign_out_clears_favorites(session, auth, store, local):
    user = _signed_in(session, auth)
    auth.sign_out()
    store.set_document("users", user.uid, {"favorites": ["r02", "x1"]})

    assert session.sign_in("ana@example.com", "secret123") is None
    assert session.state.favorites == ["r02", "x1"]
    assert local.get(FAVORITES_KEY) == ["r02", "x1"]
    assert (SUCCESS, "Logged in successfully!") in _levels(session)

    session.sign_out()
    assert session.state.user is None
    assert session.state.favorites == []
    assert local.get(FAVORITES_KEY) is None


def test_auth_errors_become_messages(session, auth):
    _signed_in(session, auth)
    auth.sign_out()
    assert session.sign_in("ana@example.com", "nope-nope") == "Invalid email or password."
    assert session.register("ana@example.com", "secret123") == "This email is already registered."
    assert session.register("bob@example.com", "123") == "Password should be at least 6 characters."
    assert session.sign_in("", "") == "Email and password are required."
    assert session.state.user is None


def test_recently_viewed_is_capped_and_persisted(session, local):
    for flat_id in ["r01", "r02", "r01", "r03", "s1"]:
        assert session.view_flat(flat_id) is not None
    assert [flat["id"] for flat in session.recently_viewed()] == ["s1", "r03", "r01"]
    assert [flat["id"] for flat in local.get(RECENTLY_VIEWED_KEY)] == ["s1", "r03", "r01"]

    reloaded = AppSession(repo=session.repo, auth=session.auth, local=LocalStore(local.path))
    reloaded.start()
    assert [flat["id"] for flat in reloaded.recently_viewed()] == ["s1", "r03", "r01"]
    reloaded.close()

    assert session.view_flat("nope") is None
    assert (ERROR, "Could not open flat details.") in _levels(session)


def test_currency_change_rerenders_without_fetch(session, store):
    calls = len(store.queries)
    flats = session.change_currency("GBP")
    assert len(store.queries) == calls
    assert flats[0]["display_price"].startswith("£")
    assert session.state.currency == "GBP"

    session.change_currency("XYZ")
    assert session.state.currency == "GBP"
    assert _levels(session)[-1][0] == ERROR


def test_load_error_is_reported_and_not_fatal(session, store):
    store.fail_queries = True
    outcome = session.refresh()
    assert outcome.status == FetchStatus.ERROR
    assert session.state.message == "Error loading apartments."
    assert (ERROR, "Error loading apartments.") in _levels(session)
    assert session.testimonials() == []
    assert session.apartment_details() is None

    store.fail_queries = False
    assert session.refresh().status == FetchStatus.LOADED


def test_submit_inquiry(session, store):
    assert session.submit_inquiry("Ana", "", "Hello") is False
    assert _levels(session) == [(ERROR, "Please fill in all fields.")]
    assert session.submit_inquiry("Ana", "ana@example.com", "Is A101 free?") is True
    saved = store.list_documents("inquiries")
    assert len(saved) == 1 and saved[0]["message"] == "Is A101 free?"
    store.fail_writes = True
    assert session.submit_inquiry("Ana", "ana@example.com", "Again") is False


def test_session_context_manager_subscribes_once(repo, auth, local, store):
    with AppSession(repo=repo, auth=auth, local=local, page_size=6) as app_session:
        assert app_session.started
        assert app_session.start() is app_session
        assert len(store.queries) == 1
        auth.register("bob@example.com", "secret123")
        assert app_session.state.user is not None
    assert not app_session.started
    auth.sign_out()
    assert app_session.state.user is not None


def test_sessions_without_explicit_store_do_not_share_local_state(repo, monkeypatch, tmp_path):
    monkeypatch.setattr(local_state, "LOCAL_STATE_DIR", tmp_path)
    first = AppSession(repo=repo).start()
    first.view_flat("r01")
    second = AppSession(repo=repo).start()
    assert second.recently_viewed() == []
    assert first.local.path != second.local.path
    first.close()
    second.close()


def test_client_store_is_reused_for_the_same_client(tmp_path):
    LocalStore.for_client("abc123", base_dir=tmp_path).set(FAVORITES_KEY, ["r01"])
    assert LocalStore.for_client("abc123", base_dir=tmp_path).get(FAVORITES_KEY) == ["r01"]
    assert LocalStore.for_client("other", base_dir=tmp_path).get(FAVORITES_KEY) is None
    with pytest.raises(ValueError):
        LocalStore.for_client("../escape", base_dir=tmp_path)


def test_register_shows_a_single_success_toast(session):
    assert session.register("new@example.com", "secret123") is None
    successes = [message for level, message in _levels(session) if level == SUCCESS]
    assert successes == ["Registration successful! Welcome!"]


def test_inquiries_go_through_the_configured_sender(repo, auth, local):
    sent = []

    def sender(name, email, message):
        sent.append((name, email, message))
        return message != "reject me"

    app_session = AppSession(repo=repo, auth=auth, local=local, send_inquiry=sender)
    assert app_session.submit_inquiry(" Ana ", "ana@example.com", "Hello") is True
    assert sent == [("Ana", "ana@example.com", "Hello")]
    assert app_session.submit_inquiry("Ana", "ana@example.com", "reject me") is False
    assert _levels(app_session) == [
        (SUCCESS, "Inquiry sent successfully!"),
        (ERROR, "Please fill in all fields."),
    ]
    assert repo.store.list_documents("inquiries") == []
