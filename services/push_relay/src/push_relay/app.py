import atexit
import logging

from flask import Flask, Response, current_app, jsonify
from werkzeug.exceptions import HTTPException

from push_core.delivery import NotificationDispatcher

from push_relay.config import RelayConfig
from push_relay.log import setup_logging
from push_relay.routes import bp

logger = logging.getLogger(__name__)


def create_app(
    dispatcher: NotificationDispatcher, config: RelayConfig | None = None
) -> Flask:
    """Flask application factory.

    Args:
        dispatcher: Notification dispatcher (real or mock for tests).
        config: Relay settings; read from the environment when omitted.
    """
    config = config or RelayConfig()
    setup_logging(config.log_level)

    app = Flask(__name__)
    app.config["RELAY_DEBUG"] = config.debug
    app.extensions["push_dispatcher"] = dispatcher

    app.register_blueprint(bp)
    app.register_error_handler(Exception, _handle_unexpected_error)

    atexit.register(dispatcher.close)

    logger.info("Push relay initialized", extra={"debug": config.debug})
    return app


def _handle_unexpected_error(exc: Exception) -> tuple[Response, int] | HTTPException:
    if isinstance(exc, HTTPException):
        return exc

    logger.exception("Unhandled error")
    body: dict[str, object] = {
        "success": False,
        "error": "Internal server error",
    }
    if current_app.config.get("RELAY_DEBUG"):
        body["message"] = str(exc)
    return jsonify(body), 500
