"""Shared fixtures for push_core tests (SQLite in-memory, scripted gateway)."""

from collections.abc import Callable, Generator, Mapping, Sequence
from typing import Any
from unittest.mock import MagicMock

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from push_core.db.base import Base
from push_core.delivery.dispatcher import NotificationDispatcher
from push_core.delivery.gateway import PushGateway, PushTicket, PushTransportError


class ScriptedGateway(PushGateway):
    """Gateway double: records batches and answers from a script.

    ``ticket_for`` maps each message to its ticket; batches whose index is
    in ``failing_batches`` raise PushTransportError instead.
    """

    def __init__(self) -> None:
        self.batches: list[list[dict[str, Any]]] = []
        self.failing_batches: set[int] = set()
        self.ticket_for: Callable[[Mapping[str, Any]], PushTicket] = (
            lambda message: PushTicket(status="ok", id=f"ticket-{message['to']}")
        )
        self.closed = False

    def send_batch(self, messages: Sequence[Mapping[str, Any]]) -> list[PushTicket]:
        index = len(self.batches)
        self.batches.append([dict(m) for m in messages])
        if index in self.failing_batches:
            raise PushTransportError("gateway unavailable", status_code=503)
        return [self.ticket_for(m) for m in messages]

    def close(self) -> None:
        self.closed = True


def expo_token(n: int) -> str:
    return f"ExponentPushToken[{n:05d}]"


@pytest.fixture()
def make_token() -> Callable[[int], str]:
    return expo_token


@pytest.fixture()
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture()
def dispatcher(gateway: ScriptedGateway) -> NotificationDispatcher:
    return NotificationDispatcher(gateway)


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
    """Session factory that always returns the test session.

    Wraps db_session so that ``with session_factory() as session:``
    returns our transactional test session.
    """
    factory = MagicMock(spec=sessionmaker)
    ctx = MagicMock()
    ctx.__enter__ = MagicMock(return_value=db_session)
    ctx.__exit__ = MagicMock(return_value=False)
    factory.return_value = ctx
    return factory
