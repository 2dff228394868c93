import pytest
import requests

from app import backend_client as backend_client_module
from app.backend_client import BackendClient


class _FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def local_client(monkeypatch, repo):
    monkeypatch.setattr(BackendClient, "_ping_api", lambda self: False)
    monkeypatch.setattr(backend_client_module, "get_repository", lambda: repo)
    return BackendClient(base_url="http://relay.invalid")


@pytest.fixture
def relay_client(monkeypatch, repo):
    monkeypatch.setattr(BackendClient, "_ping_api", lambda self: True)
    monkeypatch.setattr(backend_client_module, "get_repository", lambda: repo)
    return BackendClient(base_url="http://relay.test/")


def test_falls_back_to_local_repository(local_client, repo):
    assert local_client.use_api is False
    assert local_client.repository is repo
    assert local_client.get_flat("r01")["price"] == 1100.0
    assert local_client.get_flat("missing") is None


def test_local_inquiry_submission(local_client, store):
    assert local_client.submit_inquiry("Ana", "ana@example.com", "") is False
    assert local_client.submit_inquiry("Ana", "ana@example.com", "Hello") is True
    assert len(store.list_documents("inquiries")) == 1


def test_relay_responses_are_used_when_available(relay_client, monkeypatch):
    sent = []

    def fake_request(method, url, timeout=None, **kwargs):
        sent.append((method, url, kwargs))
        if url.endswith("/flats/A101"):
            return _FakeResponse(
                200,
                {"id": "A101", "price": 1450, "offerType": "rent", "type": "studio", "imageUrls": ["a.jpg"]},
            )
        if url.endswith("/flats/Z999"):
            return _FakeResponse(404)
        return _FakeResponse(400, {"detail": "All fields are required"})

    monkeypatch.setattr(relay_client.session, "request", fake_request)
    flat = relay_client.get_flat("A101")
    assert sent[0] == ("GET", "http://relay.test/api/flats/A101", {})
    assert flat["offer_type"] == "rent"
    assert flat["flat_type"] == "studio"
    assert flat["image_urls"] == ["a.jpg"]
    assert relay_client.get_flat("Z999") is None
    assert relay_client.submit_inquiry("Ana", "", "Hi") is False
    assert relay_client.use_api is True
    assert relay_client.repository is None


def test_relay_failure_switches_to_local_mode(relay_client, monkeypatch, repo):
    def broken(method, url, timeout=None, **kwargs):
        raise requests.ConnectionError("relay down")

    monkeypatch.setattr(relay_client.session, "request", broken)
    assert relay_client.get_flat("r01")["price"] == 1100.0
    assert relay_client.use_api is False
    assert relay_client.repository is repo
