"""Data access repositories with constructor-injected sessions."""

import datetime
from collections.abc import Collection, Iterator

from sqlalchemy import select
from sqlalchemy.orm import Session

from push_core.db.models import (
    Announcement,
    ChurchEvent,
    Devotional,
    DirectMessage,
    NotificationFlagMixin,
    Sermon,
    User,
)

DEFAULT_PAGE_SIZE = 500


class UserNotFoundError(LookupError):
    """Raised when a token update targets a user that no longer exists."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id!r}")
        self.user_id = user_id


class UserRepository:
    """Data access for the users table and their push tokens."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, user_id: str) -> User | None:
        """Fetch a user by primary key."""
        return self._session.get(User, user_id)

    def iter_all(self, page_size: int = DEFAULT_PAGE_SIZE) -> Iterator[User]:
        """Yield every user, fetching ``page_size`` rows at a time.

        Keyset pagination on ``id``: each page starts after the last id of
        the previous one, and a page shorter than ``page_size`` ends the
        scan. The iterator is single-pass.
        """
        if page_size < 1:
            raise ValueError("page_size must be positive")

        last_id: str | None = None
        while True:
            stmt = select(User).order_by(User.id).limit(page_size)
            if last_id is not None:
                stmt = stmt.where(User.id > last_id)

            page = list(self._session.scalars(stmt).all())
            yield from page

            if len(page) < page_size:
                return
            last_id = page[-1].id

    def add_token(self, user_id: str, token: str) -> bool:
        """Register a push token for a user.

        Returns True if the token was added, False if it was already present.
        """
        user = self.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        current = list(user.push_tokens or [])
        if token in current:
            return False

        user.push_tokens = [*current, token]
        self._session.flush()
        return True

    def remove_tokens(self, user_id: str, tokens: Collection[str]) -> bool:
        """Remove ``tokens`` from a user's token set.

        Writes only when something was removed. Returns True if the stored
        token list changed.
        """
        user = self.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        current = list(user.push_tokens or [])
        updated = [t for t in current if t not in tokens]
        if len(updated) == len(current):
            return False

        user.push_tokens = updated
        self._session.flush()
        return True


class DevotionalRepository:
    """Data access for daily devotionals."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_date(self, date: str) -> Devotional | None:
        """Fetch the devotional published for ``date`` (``YYYY-MM-DD``)."""
        stmt = select(Devotional).where(Devotional.date == date).limit(1)
        return self._session.scalars(stmt).first()


class EventRepository:
    """Data access for church calendar events."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_by_date(self, date: str) -> list[ChurchEvent]:
        """Fetch all events held on ``date`` (``YYYY-MM-DD``)."""
        stmt = (
            select(ChurchEvent)
            .where(ChurchEvent.date == date)
            .order_by(ChurchEvent.time, ChurchEvent.id)
        )
        return list(self._session.scalars(stmt).all())


class _NotifiedContentRepository:
    """Shared lookup and sent-flag update for content that triggers a push."""

    model: type[NotificationFlagMixin]

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, row_id: str):
        return self._session.get(self.model, row_id)

    def mark_notified(self, row_id: str) -> bool:
        """Set the sent flag and its timestamp.

        Returns False if the row no longer exists. Does not commit.
        """
        row = self.get_by_id(row_id)
        if row is None:
            return False

        row.notification_sent = True
        row.notification_sent_at = datetime.datetime.now(datetime.timezone.utc)
        self._session.flush()
        return True


class AnnouncementRepository(_NotifiedContentRepository):
    """Data access for announcements pushed to every subscriber."""

    model = Announcement


class SermonRepository(_NotifiedContentRepository):
    """Data access for sermons pushed when published."""

    model = Sermon


class MessageRepository(_NotifiedContentRepository):
    """Data access for direct messages between members."""

    model = DirectMessage
