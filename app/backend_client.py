"""Client the Streamlit app uses for flat details and contact inquiries.

Talks to the REST relay when it answers its health check and otherwise uses
the local repository. Once a relay call fails the client stays in local mode
for the rest of the session.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import requests
from requests import Response

from backend.db.mappers import map_flat_document
from backend.db.repo import Repo, get_repository
from backend.db.store import StoreError
from backend.utils.logging import get_logger

LOGGER = get_logger("app.backend_client")

REQUEST_TIMEOUT = 10


class BackendClient:
    def __init__(self, base_url: Optional[str] = None) -> None:
        self.base_url = (base_url or os.getenv("API_BASE_URL", "http://localhost:8000")).rstrip("/")
        self.session = requests.Session()
        self.repository: Optional[Repo] = None
        self.use_api = self._ping_api()
        if not self.use_api:
            self._enable_local_mode()

    def _ping_api(self) -> bool:
        try:
            resp = self.session.get(f"{self.base_url}/api/health", timeout=2)
            return resp.status_code == 200
        except requests.RequestException:
            return False

    def _request(self, method: str, path: str, expected: tuple = (), **kwargs: Any) -> Optional[Response]:
        """Send one relay request; None means the caller should use the local repository.

        Status codes in ``expected`` are handed back to the caller instead of
        being treated as a relay failure.
        """
        if not self.use_api:
            return None
        try:
            resp = self.session.request(method, f"{self.base_url}/api{path}", timeout=REQUEST_TIMEOUT, **kwargs)
            if resp.status_code not in expected:
                resp.raise_for_status()
            return resp
        except requests.RequestException as exc:
            LOGGER.warning("relay_request_failed method=%s path=%s error=%s", method, path, exc)
            self._enable_local_mode()
            return None

    def get_flat(self, flat_id: str) -> Optional[Dict]:
        resp = self._request("GET", f"/flats/{flat_id}", expected=(404,))
        if resp is not None:
            # The relay answers with stored field names (offerType, imageUrls).
            return None if resp.status_code == 404 else map_flat_document(resp.json())
        return self.repository.get_flat(flat_id)

    def submit_inquiry(self, name: str, email: str, message: str) -> bool:
        """Returns False when the inquiry is rejected as incomplete."""
        payload = {"name": name, "email": email, "message": message}
        resp = self._request("POST", "/inquiries", expected=(400,), json=payload)
        if resp is not None:
            return resp.status_code != 400
        if not (name and email and message):
            return False
        try:
            self.repository.add_inquiry(name, email, message)
        except StoreError as exc:
            LOGGER.error("local_inquiry_failed error=%s", exc)
            raise
        return True

    def _enable_local_mode(self) -> None:
        if self.repository is None:
            self.repository = get_repository()
            LOGGER.info("Relay unavailable at %s; using local repository", self.base_url)
        self.use_api = False
