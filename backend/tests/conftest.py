import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from rover_console import main as main_mod
from rover_console.core.config import settings
from rover_console.db import session as session_mod
from rover_console.db.session import get_session
from rover_console.main import app
from rover_console.services.detection_feed import RoverApiClient


class FakeRoverApi:
    """Stands in for the rover's HTTP API via httpx.MockTransport."""

    def __init__(self):
        self.reports = []
        self.status_code = 200
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"error": "upstream failure"})
        if request.url.path == "/api/reports":
            return httpx.Response(200, json=self.reports)
        if request.url.path == "/api/rover/update":
            return httpx.Response(200, json={"status": "received"})
        if request.url.path == "/":
            return httpx.Response(200, json={"message": "Rover API is running"})
        return httpx.Response(404, json={"error": "not found"})

    def client(self, token=None) -> RoverApiClient:
        return RoverApiClient("http://rover.test", token=token, transport=httpx.MockTransport(self.handler))


class DummyCelery:
    def __init__(self):
        self.sent = []

    def send_task(self, *args, **kwargs):
        self.sent.append((args, kwargs))
        return None


@pytest.fixture()
def engine():
    # SQLite in-memory, one shared connection across threads
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()



@pytest.fixture()
def engine_without_tables():
    # reachable database, missing schema: every query fails
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture()
def rover_api():
    return FakeRoverApi()


@pytest.fixture()
def celery_stub(monkeypatch):
    import rover_console.api.routes.rover as rover_mod

    stub = DummyCelery()
    monkeypatch.setattr(rover_mod, "celery_app", stub)
    return stub


@pytest.fixture()
def client(monkeypatch, engine, rover_api, celery_stub):
    monkeypatch.setattr(settings, "polling_enabled", False)
    monkeypatch.setattr(settings, "seed_sample_alerts", False)

    def override_get_session():
        with Session(engine) as s:
            yield s

    # Override dependency and engine reference
    app.dependency_overrides[get_session] = override_get_session
    monkeypatch.setattr(session_mod, "engine", engine, raising=False)
    monkeypatch.setattr(main_mod, "build_rover_client", rover_api.client)

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture()
def polling_client(monkeypatch, engine, rover_api, celery_stub):
    # pollers run, but the timer never fires again during a test
    monkeypatch.setattr(settings, "polling_enabled", True)
    monkeypatch.setattr(settings, "local_poll_seconds", 3600.0)
    monkeypatch.setattr(settings, "remote_poll_seconds", 3600.0)
    monkeypatch.setattr(settings, "seed_sample_alerts", False)
    monkeypatch.setattr(session_mod, "engine", engine, raising=False)
    monkeypatch.setattr(main_mod, "build_rover_client", rover_api.client)

    with TestClient(app) as c:
        yield c


@pytest.fixture()
def unusable_db_client(monkeypatch, tmp_path, rover_api, celery_stub):
    # parent directory does not exist, so SQLite cannot open the file
    broken = create_engine(f"sqlite:///{tmp_path / 'missing' / 'rover.db'}")
    monkeypatch.setattr(settings, "polling_enabled", False)
    monkeypatch.setattr(settings, "seed_sample_alerts", True)
    monkeypatch.setattr(session_mod, "engine", broken, raising=False)
    monkeypatch.setattr(main_mod, "build_rover_client", rover_api.client)

    with TestClient(app) as c:
        yield c
    broken.dispose()
