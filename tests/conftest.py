import logging

import pytest

from backend.db.repo import Repo, reset_repository
from backend.services.auth_service import InMemoryAuthProvider
from backend.services.local_state import LocalStore
from backend.services.notifications import Notifier
from backend.services.session import AppSession
from fakes import ScriptedStore, scenario_flats


@pytest.fixture
def store() -> ScriptedStore:
    return ScriptedStore(
        {
            "flats": scenario_flats(),
            "testimonials": [{"id": "t1", "quote": "Lovely place", "author": "Ana"}],
            "apartmentDetails": [{"id": "main", "address": "1 River Rd", "builtYear": 2015, "totalFlats": 15}],
        }
    )


@pytest.fixture
def repo(store) -> Repo:
    reset_repository()
    return Repo(store=store)


@pytest.fixture
def local(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "local_state.json")


@pytest.fixture
def auth() -> InMemoryAuthProvider:
    return InMemoryAuthProvider()


@pytest.fixture
def session(repo, auth, local) -> AppSession:
    app_session = AppSession(repo=repo, auth=auth, local=local, notifier=Notifier(), page_size=6)
    app_session.start()
    yield app_session
    app_session.close()


@pytest.fixture
def backend_logs(caplog, monkeypatch):
    """caplog that also sees the ``backend`` logger, which does not propagate by default."""
    monkeypatch.setattr(logging.getLogger("backend"), "propagate", True)
    caplog.set_level(logging.INFO, logger="backend")
    return caplog
