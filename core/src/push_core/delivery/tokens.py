"""Expo push token validation."""

import logging
from collections.abc import Iterable
from typing import Any

logger = logging.getLogger(__name__)

# Expo SDKs have emitted both prefixes over time.
TOKEN_PREFIXES = ("ExponentPushToken[", "ExpoPushToken[")


def is_valid_token(token: Any) -> bool:
    """Return True if ``token`` looks like an Expo push token."""
    return isinstance(token, str) and token.startswith(TOKEN_PREFIXES)


def filter_valid_tokens(tokens: Iterable[Any]) -> list[str]:
    """Keep valid tokens, preserving their order."""
    valid: list[str] = []
    dropped = 0
    for token in tokens:
        if is_valid_token(token):
            valid.append(token)
        else:
            dropped += 1

    if dropped:
        logger.debug("Dropped invalid push tokens", extra={"dropped": dropped})
    return valid
