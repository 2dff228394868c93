"""Per-user favorites mirrored between the users collection and the local cache.

Consistency policy: the remote write happens first. Local state and the
local cache only change after the store accepted the new list, so a failed
write leaves everything exactly as it was.
"""

from __future__ import annotations

from typing import List

from ..db.repo import Repo
from ..db.store import StoreError
from ..utils.logging import get_logger
from .local_state import FAVORITES_KEY, LocalStore
from .notifications import Notifier
from .state import AppState

LOGGER = get_logger("services.favorites")


class FavoritesService:
    def __init__(self, repo: Repo, state: AppState, local: LocalStore, notifier: Notifier) -> None:
        self.repo = repo
        self.state = state
        self.local = local
        self.notifier = notifier

    def restore_cached(self) -> List[str]:
        cached = self.local.get(FAVORITES_KEY, [])
        self.state.favorites = [str(item) for item in cached] if isinstance(cached, list) else []
        return list(self.state.favorites)

    def load(self, uid: str) -> List[str]:
        try:
            favorites = self.repo.get_user_favorites(uid)
        except StoreError as exc:
            LOGGER.error("favorites_load_failed uid=%s error=%s", uid, exc)
            self.clear()
            self.notifier.error("Error loading your favorites.")
            return []
        if favorites is None:
            self.clear()
            return []
        self.state.favorites = favorites
        self.local.set(FAVORITES_KEY, favorites)
        return list(favorites)

    def clear(self) -> None:
        self.state.favorites = []
        self.local.remove(FAVORITES_KEY)

    def is_favorite(self, flat_id: str) -> bool:
        return flat_id in self.state.favorites

    def toggle(self, flat_id: str) -> bool:
        """Flip ``flat_id`` in the favorites; returns True when the set changed."""
        user = self.state.user
        if user is None:
            self.notifier.info("Please log in to manage favorites.")
            return False
        try:
            remote = self.repo.get_user_favorites(user.uid) or []
            removing = flat_id in remote
            updated = [item for item in remote if item != flat_id] if removing else remote + [flat_id]
            self.repo.save_user_favorites(user.uid, updated)
        except StoreError as exc:
            LOGGER.error("favorites_toggle_failed uid=%s flat=%s error=%s", user.uid, flat_id, exc)
            self.notifier.error("Error updating favorites. Please try again.")
            return False

        self.state.favorites = updated
        self.local.set(FAVORITES_KEY, updated)
        if removing:
            self.notifier.info("Removed from favorites.")
        else:
            self.notifier.success("Added to favorites!")
        LOGGER.info("favorites_toggled uid=%s flat=%s removed=%s count=%d", user.uid, flat_id, removing, len(updated))
        return True
