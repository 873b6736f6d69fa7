import logging
from datetime import datetime, timezone
from typing import Any

from flask import Blueprint, Response, current_app, jsonify, request
from pydantic import ValidationError

from push_core.delivery import (
    DispatchResult,
    NotificationDispatcher,
    NotificationRequest,
)

logger = logging.getLogger(__name__)

bp = Blueprint("relay", __name__)

SERVICE_NAME = "push-notifications"
SERVICE_VERSION = "1.0.0"


class _RequestError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _error(message: str, status: int, **extra: Any) -> tuple[Response, int]:
    body: dict[str, Any] = {"success": False, "error": message}
    body.update(extra)
    return jsonify(body), status


def _parse_request() -> tuple[list[Any], NotificationRequest]:
    """Validate the shared body of the send and broadcast endpoints."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise _RequestError("Request body must be valid JSON")

    tokens = body.get("tokens")
    if not isinstance(tokens, list) or not tokens:
        raise _RequestError("tokens array is required and must not be empty")

    if not body.get("title") or not body.get("body"):
        raise _RequestError("title and body are required")

    # Field types are left to the model; ValidationError reaches the caller.
    notification = NotificationRequest(
        title=body["title"],
        body=body["body"],
        data=body.get("data") or {},
        options=body.get("options") or {},
    )
    return tokens, notification


def _dispatch() -> DispatchResult | tuple[Response, int]:
    try:
        tokens, notification = _parse_request()
    except _RequestError as exc:
        return _error(exc.message, 400)
    except ValidationError as exc:
        return _error(
            "Payload validation failed",
            400,
            details=exc.errors(include_url=False),
        )

    dispatcher: NotificationDispatcher = current_app.extensions["push_dispatcher"]
    return dispatcher.dispatch_request(tokens, notification)


@bp.post("/api/notifications/send")
def send() -> tuple[Response, int]:
    result = _dispatch()
    if not isinstance(result, DispatchResult):
        return result

    if result.success:
        body: dict[str, Any] = {
            "success": True,
            "message": f"Sent {result.sent} notification(s)",
        }
        body.update(result.to_dict())
        return jsonify(body), 200

    logger.warning(
        "Send request delivered nothing",
        extra={"errors": result.errors, "reason": result.error},
    )
    body = {"success": False, "error": "Failed to send notifications"}
    body.update(result.to_dict())
    return jsonify(body), 500


@bp.post("/api/notifications/broadcast")
def broadcast() -> tuple[Response, int]:
    result = _dispatch()
    if not isinstance(result, DispatchResult):
        return result

    body: dict[str, Any] = {
        "success": result.success,
        "message": f"Broadcast sent to {result.sent} device(s)",
    }
    body.update(result.to_dict())
    return jsonify(body), 200


@bp.get("/api/health")
def health() -> tuple[Response, int]:
    return jsonify({
        "status": "ok",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }), 200


@bp.get("/")
def index() -> tuple[Response, int]:
    return jsonify({
        "service": "Push Notifications Backend",
        "version": SERVICE_VERSION,
        "endpoints": {
            "health": "GET /api/health",
            "send": "POST /api/notifications/send",
            "broadcast": "POST /api/notifications/broadcast",
        },
    }), 200
