"""Application session: the state object and the actions the UI can trigger.

An ``AppSession`` is created when a visitor opens the site (``start``) and torn
down when they leave (``close``). It owns the ``AppState`` and hands it by
reference to the feed and favorites services.
"""

from __future__ import annotations

import uuid
from typing import Callable, Dict, List, Mapping, Optional

from ..db.repo import Repo, get_repository
from ..db.store import StoreError
from ..utils.logging import get_logger
from .auth_service import AuthError, AuthProvider, AuthUser, InMemoryAuthProvider, auth_error_message
from .currency import rate_for
from .favorites_service import FavoritesService
from .feed_service import PAGE_SIZE, FetchOutcome, FetchStatus, FlatFeed
from .local_state import LocalStore, RecentlyViewed
from .notifications import Notifier
from .state import AppState

LOGGER = get_logger("services.session")

NO_RESULTS_MESSAGE = "No apartments found matching your criteria."
NO_FAVORITES_MESSAGE = "No favorite apartments found."
LOAD_ERROR_MESSAGE = "Error loading apartments."

InquirySender = Callable[[str, str, str], bool]


class AppSession:
    def __init__(
        self,
        repo: Optional[Repo] = None,
        auth: Optional[AuthProvider] = None,
        local: Optional[LocalStore] = None,
        notifier: Optional[Notifier] = None,
        page_size: int = PAGE_SIZE,
        send_inquiry: Optional[InquirySender] = None,
    ) -> None:
        self.repo = repo or get_repository()
        self.auth = auth or InMemoryAuthProvider()
        # Without an explicit store every session gets its own file, never a shared one.
        self.local = local or LocalStore.for_client(uuid.uuid4().hex)
        self.notifier = notifier or Notifier()
        self.state = AppState()
        self.feed = FlatFeed(self.repo, self.state, page_size=page_size)
        self.favorites = FavoritesService(self.repo, self.state, self.local, self.notifier)
        self.recent = RecentlyViewed(self.local)
        self._send_inquiry = send_inquiry or self._store_inquiry
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._greeted_by_action = False

    # ------------------------------------------------------------------
    # Lifecycle
    @property
    def started(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> "AppSession":
        if self.started:
            return self
        self.recent.load()
        self.favorites.restore_cached()
        # The provider reports the current user right away, which triggers the first fetch.
        self._unsubscribe = self.auth.on_auth_state_changed(self._on_auth_changed)
        LOGGER.info("session_started favorites=%d recent=%d", len(self.state.favorites), len(self.recent.items))
        return self

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        LOGGER.info("session_closed")

    def __enter__(self) -> "AppSession":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.close()

    def _on_auth_changed(self, user: Optional[AuthUser]) -> None:
        previous = self.state.user
        self.state.user = user
        if user is not None:
            self.favorites.load(user.uid)
            if not self._greeted_by_action:
                self.notifier.success(f"Welcome back, {user.email}!")
        elif previous is not None:
            self.favorites.clear()
        self.refresh()

    # ------------------------------------------------------------------
    # Listing
    def refresh(self) -> FetchOutcome:
        outcome = self.feed.reset()
        self._report(outcome, reset=True)
        return outcome

    def apply_filters(self, values: Mapping) -> FetchOutcome:
        self.state.filters.apply(values)
        LOGGER.info("filters_applied %s", self.state.filters.as_dict())
        return self.refresh()

    def load_more(self) -> FetchOutcome:
        outcome = self.feed.load_more()
        self._report(outcome, reset=False)
        return outcome

    def _report(self, outcome: FetchOutcome, reset: bool) -> None:
        status = outcome.status
        if status == FetchStatus.LOADED:
            self.state.message = None
        elif status == FetchStatus.NO_RESULTS:
            self.state.message = NO_RESULTS_MESSAGE
        elif status == FetchStatus.NO_FAVORITES:
            self.state.message = NO_FAVORITES_MESSAGE
        elif status == FetchStatus.END:
            self.notifier.info("No more apartments to load.")
        elif status == FetchStatus.ERROR:
            self.notifier.error(LOAD_ERROR_MESSAGE)
            if reset:
                self.state.message = LOAD_ERROR_MESSAGE

    def change_currency(self, currency: str) -> List[Dict]:
        try:
            rate_for(currency)
        except ValueError as exc:
            LOGGER.warning("currency_rejected code=%s", currency)
            self.notifier.error(str(exc))
            return self.displayed_flats()
        self.state.currency = currency
        return self.displayed_flats()

    def displayed_flats(self) -> List[Dict]:
        favorites = set(self.state.favorites)
        return [{**flat, "favorite": flat["id"] in favorites} for flat in self.feed.display(self.state.currency)]

    # ------------------------------------------------------------------
    # Favorites & recently viewed
    def toggle_favorite(self, flat_id: str) -> bool:
        changed = self.favorites.toggle(flat_id)
        if changed and self.state.filters.show_favorites:
            self.refresh()
        return changed

    def view_flat(self, flat_id: str) -> Optional[Dict]:
        flat = next((item for item in self.feed.records if item["id"] == flat_id), None)
        if flat is None:
            try:
                flat = self.repo.get_flat(flat_id)
            except StoreError as exc:
                LOGGER.error("flat_detail_failed id=%s error=%s", flat_id, exc)
                self.notifier.error("Could not open flat details.")
                return None
        if flat is None:
            self.notifier.error("Could not open flat details.")
            return None
        self.recent.add(flat)
        return flat

    def recently_viewed(self) -> List[Dict]:
        return list(self.recent.items)

    # ------------------------------------------------------------------
    # Auth
    def sign_in(self, email: str, password: str) -> Optional[str]:
        return self._authenticate(self.auth.sign_in, email, password, "Logged in successfully!")

    def register(self, email: str, password: str) -> Optional[str]:
        return self._authenticate(self.auth.register, email, password, "Registration successful! Welcome!")

    def _authenticate(self, action, email: str, password: str, success: str) -> Optional[str]:
        """Run ``action``; returns the user-facing error message, or None on success."""
        if not email or not password:
            return auth_error_message(AuthError("missing_credentials"))
        # The auth listener fires inside ``action``; the success toast below replaces its greeting.
        self._greeted_by_action = True
        try:
            action(email, password)
        except AuthError as exc:
            LOGGER.warning("auth_failed code=%s", exc.code)
            message = auth_error_message(exc)
            self.notifier.error(message)
            return message
        finally:
            self._greeted_by_action = False
        self.notifier.success(success)
        return None

    def sign_out(self) -> None:
        try:
            self.auth.sign_out()
        except AuthError as exc:
            LOGGER.error("sign_out_failed code=%s", exc.code)
            self.notifier.error("Error signing out. Please try again.")
            return
        self.notifier.info("You have been signed out.")

    # ------------------------------------------------------------------
    # Inquiries & static content
    def _store_inquiry(self, name: str, email: str, message: str) -> bool:
        self.repo.add_inquiry(name, email, message)
        return True

    def submit_inquiry(self, name: str, email: str, message: str) -> bool:
        name, email, message = (value.strip() for value in (name or "", email or "", message or ""))
        if not (name and email and message):
            self.notifier.error("Please fill in all fields.")
            return False
        try:
            accepted = self._send_inquiry(name, email, message)
        except StoreError as exc:
            LOGGER.error("inquiry_failed error=%s", exc)
            self.notifier.error("Failed to send inquiry.")
            return False
        if not accepted:
            self.notifier.error("Please fill in all fields.")
            return False
        self.notifier.success("Inquiry sent successfully!")
        return True

    def apartment_details(self) -> Optional[Dict]:
        try:
            return self.repo.get_apartment_details()
        except StoreError as exc:
            LOGGER.error("apartment_details_failed error=%s", exc)
            self.notifier.error("Error loading apartment details.")
            return None

    def testimonials(self) -> List[Dict]:
        try:
            return self.repo.list_testimonials()
        except StoreError as exc:
            LOGGER.error("testimonials_failed error=%s", exc)
            self.notifier.error("Error loading testimonials.")
            return []
