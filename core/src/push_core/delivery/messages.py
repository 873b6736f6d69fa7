"""Notification requests and the Expo message shape."""

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_SOUND = "default"
DEFAULT_PRIORITY = "default"
DEFAULT_CHANNEL_ID = "default"


class NotificationRequest(BaseModel):
    """What to send: shared by every token of one dispatch."""

    title: str
    body: str
    data: dict[str, Any] = Field(default_factory=dict)
    options: dict[str, Any] = Field(default_factory=dict)


def apply_defaults(
    base: Mapping[str, Any], overrides: Mapping[str, Any]
) -> dict[str, Any]:
    """Layer ``overrides`` on top of ``base``.

    Every key present in ``overrides`` wins, even when its value is None
    or would otherwise be rejected as a default. Callers rely on this to
    customise any field of an outgoing message per send.
    """
    merged = dict(base)
    merged.update(overrides)
    return merged


def build_message(token: str, request: NotificationRequest) -> dict[str, Any]:
    """Resolve ``request`` against a single device token."""
    options = request.options
    base: dict[str, Any] = {
        "to": token,
        "sound": options.get("sound") or DEFAULT_SOUND,
        "title": request.title,
        "body": request.body,
        "data": request.data,
        "priority": options.get("priority") or DEFAULT_PRIORITY,
        "channelId": options.get("channelId") or DEFAULT_CHANNEL_ID,
    }
    if options.get("badge") is not None:
        base["badge"] = options["badge"]
    return apply_defaults(base, options)


def chunk_messages(
    messages: Sequence[dict[str, Any]], size: int
) -> Iterator[Sequence[dict[str, Any]]]:
    """Yield consecutive slices of at most ``size`` messages."""
    if size < 1:
        raise ValueError("batch size must be positive")
    for start in range(0, len(messages), size):
        yield messages[start:start + size]
