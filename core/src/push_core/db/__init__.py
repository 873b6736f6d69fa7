"""Database layer: models, repositories, engine/session utilities."""

from push_core.db.base import Base, create_db_engine, create_session_factory
from push_core.db.models import (
    Announcement,
    ChurchEvent,
    Devotional,
    DirectMessage,
    Sermon,
    User,
)
from push_core.db.repositories import (
    AnnouncementRepository,
    DevotionalRepository,
    EventRepository,
    MessageRepository,
    SermonRepository,
    UserNotFoundError,
    UserRepository,
)

__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "Announcement",
    "ChurchEvent",
    "Devotional",
    "DirectMessage",
    "Sermon",
    "User",
    "AnnouncementRepository",
    "DevotionalRepository",
    "EventRepository",
    "MessageRepository",
    "SermonRepository",
    "UserNotFoundError",
    "UserRepository",
]
