"""Test fixtures for push_scheduler tests."""

import threading
from collections.abc import Collection, Generator, Mapping, Sequence
from typing import Any
from unittest.mock import MagicMock

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from push_core.db.base import Base
from push_core.db.repositories import UserNotFoundError
from push_core.delivery import (
    NotificationDispatcher,
    PushGateway,
    PushTicket,
    TokenCleanup,
    TokenStore,
)

from push_scheduler.jobs import ScheduledPushJobs


class FakeGateway(PushGateway):
    """Accepts every message except those addressed to ``dead`` tokens."""

    def __init__(self) -> None:
        self.batches: list[list[dict[str, Any]]] = []
        self.dead: set[str] = set()

    def send_batch(self, messages: Sequence[Mapping[str, Any]]) -> list[PushTicket]:
        self.batches.append([dict(m) for m in messages])
        return [self._ticket(m["to"]) for m in messages]

    def _ticket(self, token: str) -> PushTicket:
        if token in self.dead:
            return PushTicket.from_response({
                "status": "error",
                "message": f"{token} is not a registered push notification recipient",
                "details": {"error": "DeviceNotRegistered"},
            })
        return PushTicket(status="ok", id=f"ticket-{token}")

    def close(self) -> None:
        pass

    @property
    def sent_messages(self) -> list[dict[str, Any]]:
        return [m for batch in self.batches for m in batch]


class RecordingTokenStore(TokenStore):
    """Records removals; mirrors them into ``users`` when the user is known."""

    def __init__(self) -> None:
        self.users: dict[str, list[str]] = {}
        self.calls: list[tuple[str, set[str]]] = []
        self._lock = threading.Lock()

    def remove_tokens(self, user_id: str, tokens: Collection[str]) -> bool:
        with self._lock:
            self.calls.append((user_id, set(tokens)))
            if user_id not in self.users:
                raise UserNotFoundError(user_id)
            current = self.users[user_id]
            updated = [t for t in current if t not in tokens]
            self.users[user_id] = updated
            return len(updated) != len(current)


def expo_token(n: int) -> str:
    return f"ExponentPushToken[{n:05d}]"


@pytest.fixture(scope="session")
def db_engine() -> Engine:
    """Create a single in-memory SQLite engine for the test session."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture()
def db_session(db_engine: Engine) -> Generator[Session, None, None]:
    """Transactional session that rolls back after each test."""
    connection = db_engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection)

    yield session

    session.close()
    if transaction.is_active:
        transaction.rollback()
    connection.close()


@pytest.fixture()
def session_factory(db_session: Session) -> MagicMock:
    """Session factory whose context manager yields the test session."""
    factory = MagicMock(spec=sessionmaker)
    ctx = MagicMock()
    ctx.__enter__ = MagicMock(return_value=db_session)
    ctx.__exit__ = MagicMock(return_value=False)
    factory.return_value = ctx
    return factory


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def token_store() -> RecordingTokenStore:
    return RecordingTokenStore()


@pytest.fixture()
def jobs(
    session_factory: MagicMock,
    gateway: FakeGateway,
    token_store: RecordingTokenStore,
) -> ScheduledPushJobs:
    return ScheduledPushJobs(
        session_factory,
        NotificationDispatcher(gateway, batch_size=2),
        TokenCleanup(token_store, max_workers=2),
        timezone="Africa/Accra",
        page_size=2,
    )
