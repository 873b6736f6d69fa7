from enum import StrEnum


class TicketStatus(StrEnum):
    OK = "ok"
    ERROR = "error"


class PushErrorKind(StrEnum):
    DEVICE_NOT_REGISTERED = "DeviceNotRegistered"
    INVALID_CREDENTIALS = "InvalidCredentials"
    MESSAGE_TOO_BIG = "MessageTooBig"
    MESSAGE_RATE_EXCEEDED = "MessageRateExceeded"
    MISMATCH_SENDER_ID = "MismatchSenderId"


# Only this kind means the device token itself is dead.
TOKEN_INVALIDATING_ERRORS: frozenset[str] = frozenset(
    {PushErrorKind.DEVICE_NOT_REGISTERED}
)


class NotificationCategory(StrEnum):
    DEVOTIONALS = "devotionals"
    EVENTS = "events"
    ANNOUNCEMENTS = "announcements"
    SERMONS = "sermons"
    MESSAGES = "messages"


class PushPriority(StrEnum):
    DEFAULT = "default"
    NORMAL = "normal"
    HIGH = "high"
