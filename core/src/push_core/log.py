"""One-line JSON logs for the relay and the scheduler.

Push tokens are the only credential a device hands us, so anything that
looks like one is masked before it reaches the log stream.
"""

import json
import logging
import re
import sys
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came in via ``extra``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
    | {"message", "asctime"}
)

_TOKEN_RE = re.compile(r"(Expo(?:nent)?PushToken\[)([^\]]*)\]")


def mask_tokens(text: str) -> str:
    """Replace the body of every Expo push token with its last 4 characters."""
    return _TOKEN_RE.sub(lambda m: f"{m.group(1)}…{m.group(2)[-4:]}]", text)


def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        return mask_tokens(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_scrub(v) for v in value]
    if isinstance(value, dict):
        return {k: _scrub(v) for k, v in value.items()}
    return value


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON object.

    Fields passed through ``extra={...}`` become top-level keys. ``service``
    is stamped on every line so relay and scheduler logs can share a sink.
    """

    def __init__(self, service: str | None = None) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": mask_tokens(record.getMessage()),
        }
        if self.service:
            entry["service"] = self.service

        entry.update(
            (key, _scrub(value))
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS
        )

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = mask_tokens(self.formatException(record.exc_info))

        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(
    level: str = "INFO",
    service: str | None = None,
    suppress: Sequence[str] = (),
) -> None:
    """Send JSON logs to stdout from the root logger.

    Args:
        level: Root log level name; unknown names fall back to INFO.
        service: Value of the ``service`` field on every line.
        suppress: Chatty third-party loggers to raise to WARNING.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(service))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)

    for name in suppress:
        logging.getLogger(name).setLevel(logging.WARNING)
