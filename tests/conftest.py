"""Shared fixtures: in-memory store, deterministic clock, recording ports."""
from datetime import datetime, timedelta, timezone

import pytest

from hazardhub.core.settings import Settings
from hazardhub.services.alert_store import AlertStore
from hazardhub.services.hazard_service import HazardService
from hazardhub.services.notifier import Notifier
from hazardhub.services.proposal_store import ProposalStore
from hazardhub.services.spot_catalog import SpotCatalog
from hazardhub.storage.memory import InMemoryStore


class TickingClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self, start=None):
        self.current = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.current = self.current + timedelta(seconds=1)
        return self.current


class RecordingNotifier(Notifier):

    def __init__(self):
        self.events = []

    def notify(self, event, payload):
        self.events.append((event, payload))

    def names(self):
        return [name for name, _ in self.events]


class RecordingCatalog(SpotCatalog):

    def __init__(self):
        self.levels = {}
        self.reasons = {}
        self.flagged = {}

    def set_danger_level(self, spot_id, level, reasons):
        self.levels[spot_id] = level
        self.reasons[spot_id] = list(reasons)

    def flag_for_deletion(self, spot_id, proposal_id):
        self.flagged[spot_id] = proposal_id


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module-level singletons before and after each test."""
    _do_reset()
    yield
    _do_reset()


def _do_reset():
    import hazardhub.services.hazard_service as service_mod
    import hazardhub.storage.registry as registry_mod
    service_mod._hazard_service = None
    registry_mod._store_instance = None


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def alert_store(store):
    return AlertStore(store)


@pytest.fixture
def proposal_store(store):
    return ProposalStore(store)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def catalog():
    return RecordingCatalog()


@pytest.fixture
def config():
    return Settings(
        STORAGE_BACKEND="memory",
        CONFIRM_THRESHOLD=3,
        DELETE_THRESHOLD=5,
        VOTE_QUORUM=5,
        DETAILS_MAX_LENGTH=500,
        WRITE_RETRY_LIMIT=3,
    )


@pytest.fixture
def service(store, catalog, notifier, config, clock):
    return HazardService(store, catalog=catalog, notifier=notifier, config=config, clock=clock)


@pytest.fixture
def client(service):
    """TestClient bound to the fixture service through the module singleton."""
    from fastapi.testclient import TestClient

    import hazardhub.services.hazard_service as service_mod
    from hazardhub.main import app

    service_mod._hazard_service = service
    return TestClient(app)
