"""SQLAlchemy ORM models for users, scheduled content and pushed content."""

import datetime
import uuid

from sqlalchemy import Boolean, DateTime, String, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column

from push_core.db.base import Base
from push_core.db.types import JSONObject, StringList


def _new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    push_tokens: Mapped[list] = mapped_column(
        StringList, nullable=False, default=list
    )
    notification_settings: Mapped[dict] = mapped_column(
        JSONObject(empty_as_dict=True), nullable=False, default=dict
    )
    # Older app builds wrote preferences under this name.
    notification_preferences: Mapped[dict | None] = mapped_column(
        JSONObject(), nullable=True
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class Devotional(Base):
    __tablename__ = "devotionals"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)


class ChurchEvent(Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    time: Mapped[str | None] = mapped_column(String(32), nullable=True)


class NotificationFlagMixin:
    """Marks a row whose push has gone out, so a retried task skips it."""

    notification_sent: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    notification_sent_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Announcement(NotificationFlagMixin, Base):
    __tablename__ = "announcements"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    # "High" pushes at high priority; anything else at default.
    priority: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class Sermon(NotificationFlagMixin, Base):
    __tablename__ = "sermons"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    speaker: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pastor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # None for rows written before drafts existed; those count as published.
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class DirectMessage(NotificationFlagMixin, Base):
    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    to_user_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    from_user_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    from_user_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subject: Mapped[str | None] = mapped_column(String(255), nullable=True)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
