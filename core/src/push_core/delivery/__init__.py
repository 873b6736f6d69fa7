"""Push delivery: token validation, message building, dispatch and cleanup."""

from push_core.delivery.cleanup import (
    CleanupReport,
    InvalidToken,
    SqlTokenStore,
    TokenCleanup,
    TokenStore,
)
from push_core.delivery.dispatcher import DispatchResult, NotificationDispatcher
from push_core.delivery.gateway import (
    ExpoPushClient,
    PushGateway,
    PushTicket,
    PushTransportError,
)
from push_core.delivery.messages import NotificationRequest, apply_defaults
from push_core.delivery.tokens import filter_valid_tokens, is_valid_token

__all__ = [
    "CleanupReport",
    "InvalidToken",
    "SqlTokenStore",
    "TokenCleanup",
    "TokenStore",
    "DispatchResult",
    "NotificationDispatcher",
    "ExpoPushClient",
    "PushGateway",
    "PushTicket",
    "PushTransportError",
    "NotificationRequest",
    "apply_defaults",
    "filter_valid_tokens",
    "is_valid_token",
]
