"""Locally persisted key/value state (favorites cache, recently viewed)."""

from __future__ import annotations

import json
import os
import re
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..utils.logging import get_logger

LOGGER = get_logger("services.local_state")

LOCAL_STATE_DIR = Path(os.getenv("LOCAL_STATE_DIR", Path.home() / ".flat_listing"))
RECENTLY_VIEWED_LIMIT = int(os.getenv("RECENTLY_VIEWED_LIMIT", "3"))

FAVORITES_KEY = "favorites"
RECENTLY_VIEWED_KEY = "recentlyViewed"

_CLIENT_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class LocalStore:
    """A small JSON file of string keys; one file per browser-like client."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data: Dict[str, Any] = self._read()

    @classmethod
    def for_client(cls, client_id: str, base_dir: Optional[Path] = None) -> "LocalStore":
        """Store private to one browser session, kept under ``<base_dir>/clients/``."""
        if not _CLIENT_ID_RE.match(client_id or ""):
            raise ValueError(f"invalid client id {client_id!r}")
        return cls(Path(base_dir or LOCAL_STATE_DIR) / "clients" / f"{client_id}.json")

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            LOGGER.warning("local_state_unreadable path=%s error=%s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2, default=str)
        except OSError as exc:
            LOGGER.error("local_state_write_failed path=%s error=%s", self.path, exc)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            self._write()

    def remove(self, key: str) -> None:
        with self._lock:
            if self._data.pop(key, None) is not None:
                self._write()


class RecentlyViewed:
    """Most-recent-first list of viewed flats, unique by id and capped."""

    def __init__(self, store: LocalStore, limit: int = RECENTLY_VIEWED_LIMIT) -> None:
        self.store = store
        self.limit = limit
        self.items: List[Dict] = []

    def load(self) -> List[Dict]:
        raw = self.store.get(RECENTLY_VIEWED_KEY, [])
        if not isinstance(raw, list):
            raw = []
        self.items = [item for item in raw if isinstance(item, dict) and item.get("id")][: self.limit]
        return list(self.items)

    def add(self, flat: Dict) -> List[Dict]:
        if not flat.get("id"):
            return list(self.items)
        items = [item for item in self.items if item.get("id") != flat["id"]]
        items.insert(0, dict(flat))
        self.items = items[: self.limit]
        self.store.set(RECENTLY_VIEWED_KEY, self.items)
        return list(self.items)
