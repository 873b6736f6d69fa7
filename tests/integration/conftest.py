"""Integration test fixtures using testcontainers.

A session-scoped PostgreSQL container migrated with Alembic, a stand-in
Expo push service on httpx.MockTransport, and the relay served over real
HTTP from a background thread.
"""

import json
import os
import threading
from collections.abc import Generator
from pathlib import Path
from typing import Any

import httpx
import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session, sessionmaker
from testcontainers.postgres import PostgresContainer
from werkzeug.serving import make_server

from push_core.config import ExpoConfig
from push_core.db.base import create_db_engine, create_session_factory
from push_core.delivery import (
    ExpoPushClient,
    NotificationDispatcher,
    SqlTokenStore,
    TokenCleanup,
)

pytestmark = pytest.mark.integration


class ExpoServiceStub:
    """Answers Expo push requests; tokens in ``dead`` come back unregistered."""

    def __init__(self) -> None:
        self.requests: list[list[dict[str, Any]]] = []
        self.dead: set[str] = set()
        self.fail_next = 0
        self._lock = threading.Lock()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        messages = json.loads(request.content)
        with self._lock:
            self.requests.append(messages)
            if self.fail_next > 0:
                self.fail_next -= 1
                return httpx.Response(503, text="Service Unavailable")

        return httpx.Response(200, json={"data": [self._ticket(m) for m in messages]})

    def _ticket(self, message: dict[str, Any]) -> dict[str, Any]:
        token = message["to"]
        if token in self.dead:
            return {
                "status": "error",
                "message": f'"{token}" is not a registered push notification recipient',
                "details": {"error": "DeviceNotRegistered"},
            }
        return {"status": "ok", "id": f"ticket-{token}"}

    @property
    def delivered_to(self) -> list[str]:
        return [m["to"] for batch in self.requests for m in batch]


# ---------------------------------------------------------------------------
# Database (session-scoped)
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    with PostgresContainer("postgres:16-alpine", driver="psycopg2") as pg:
        yield pg


@pytest.fixture(scope="session")
def pg_dsn(postgres_container: PostgresContainer) -> str:
    return postgres_container.get_connection_url()


@pytest.fixture(scope="session", autouse=True)
def _set_env_vars(pg_dsn: str) -> Generator[None, None, None]:
    """Point pydantic-settings configs at the test container."""
    from urllib.parse import urlparse

    parsed = urlparse(pg_dsn)
    overrides = {
        "POSTGRES_HOST": parsed.hostname or "localhost",
        "POSTGRES_PORT": str(parsed.port or 5432),
        "POSTGRES_DATABASE": (parsed.path or "/test").lstrip("/"),
        "POSTGRES_USER": parsed.username or "test",
        "POSTGRES_PASSWORD": parsed.password or "test",
    }

    saved: dict[str, str | None] = {}
    for key, value in overrides.items():
        saved[key] = os.environ.get(key)
        os.environ[key] = value

    yield

    for key, old in saved.items():
        if old is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = old


@pytest.fixture(scope="session")
def db_engine(pg_dsn: str, _set_env_vars: None):  # noqa: ANN201
    """Create engine and run Alembic migrations against testcontainer PG."""
    from alembic import command
    from alembic.config import Config as AlembicConfig

    engine = create_db_engine(pg_dsn, pool_pre_ping=True)

    core_dir = Path(__file__).resolve().parents[2] / "core"
    alembic_cfg = AlembicConfig(str(core_dir / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(core_dir / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", pg_dsn)
    command.upgrade(alembic_cfg, "head")

    yield engine
    engine.dispose()


@pytest.fixture(scope="session")
def session_factory(db_engine) -> sessionmaker[Session]:  # noqa: ANN001
    return create_session_factory(db_engine)


@pytest.fixture(autouse=True)
def _cleanup_db(session_factory: sessionmaker[Session]) -> Generator[None, None, None]:
    """Truncate all tables after each test."""
    yield
    with session_factory() as session:
        session.execute(text(
            "TRUNCATE users, devotionals, events, announcements, sermons, messages"
        ))
        session.commit()


# ---------------------------------------------------------------------------
# Push pipeline (function-scoped)
# ---------------------------------------------------------------------------


@pytest.fixture()
def expo_stub() -> ExpoServiceStub:
    return ExpoServiceStub()


@pytest.fixture()
def dispatcher(
    expo_stub: ExpoServiceStub,
) -> Generator[NotificationDispatcher, None, None]:
    client = ExpoPushClient(ExpoConfig(), transport=httpx.MockTransport(expo_stub))
    dispatcher = NotificationDispatcher(client, batch_size=100)
    yield dispatcher
    dispatcher.close()


@pytest.fixture()
def token_cleanup(session_factory: sessionmaker[Session]) -> TokenCleanup:
    return TokenCleanup(SqlTokenStore(session_factory), max_workers=4)


# ---------------------------------------------------------------------------
# Push relay (function-scoped)
# ---------------------------------------------------------------------------


@pytest.fixture()
def relay_url(dispatcher: NotificationDispatcher) -> Generator[str, None, None]:
    """Start the Flask relay in a background thread, yield base URL."""
    from push_relay.app import create_app
    from push_relay.config import RelayConfig

    app = create_app(dispatcher, RelayConfig())
    app.config["TESTING"] = True

    server = make_server("127.0.0.1", 0, app, threaded=True)
    port = server.server_address[1]

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield f"http://127.0.0.1:{port}"

    server.shutdown()


@pytest.fixture()
def http_client(relay_url: str) -> Generator[httpx.Client, None, None]:
    with httpx.Client(base_url=relay_url, timeout=10.0) as client:
        yield client
