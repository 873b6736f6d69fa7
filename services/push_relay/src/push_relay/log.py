"""Logging setup for push_relay (delegates to push_core)."""

from push_core.log import JsonFormatter, setup_logging as _setup

__all__ = ["JsonFormatter", "setup_logging"]


def setup_logging(level: str = "INFO") -> None:
    _setup(level, service="push-relay", suppress=["httpx", "httpcore", "werkzeug"])
