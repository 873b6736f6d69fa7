from unittest.mock import MagicMock

import pytest
from flask import Flask
from flask.testing import FlaskClient

from push_core.delivery import DispatchResult, NotificationDispatcher

from push_relay.app import create_app
from push_relay.config import RelayConfig


@pytest.fixture()
def mock_dispatcher() -> MagicMock:
    dispatcher = MagicMock(spec=NotificationDispatcher)
    dispatcher.dispatch_request.return_value = DispatchResult(success=True, sent=1)
    return dispatcher


@pytest.fixture()
def relay_config() -> RelayConfig:
    return RelayConfig(debug=False)


@pytest.fixture()
def app(mock_dispatcher: MagicMock, relay_config: RelayConfig) -> Flask:
    app = create_app(mock_dispatcher, relay_config)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    return app.test_client()
