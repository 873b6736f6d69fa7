"""Push jobs: scheduled broadcasts and pushes triggered by new content.

The beat schedule fires the daily devotional and next-day event reminders.
Announcements, sermons and direct messages are pushed once per row, by id,
when the content is created.
"""

import datetime
import logging
from dataclasses import dataclass
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session, sessionmaker

from push_core.audience import Audience, collect_audience
from push_core.db.repositories import (
    DEFAULT_PAGE_SIZE,
    AnnouncementRepository,
    DevotionalRepository,
    EventRepository,
    MessageRepository,
    SermonRepository,
    UserRepository,
)
from push_core.delivery import NotificationDispatcher, NotificationRequest, TokenCleanup
from push_core.enums import NotificationCategory, PushPriority

logger = logging.getLogger(__name__)

DEVOTIONAL_TITLE = "📖 Daily Devotional"
DEVOTIONAL_FALLBACK_BODY = "Your daily word of encouragement"
ANNOUNCEMENT_FALLBACK_BODY = "New announcement"
SERMON_FALLBACK_SPEAKER = "Pastor"
MESSAGE_FALLBACK_SENDER = "Someone"
MESSAGE_FALLBACK_SUBJECT = "New message"

# Direct messages are gated on the singular key older app builds wrote.
DIRECT_MESSAGE_CATEGORY = "message"


@dataclass(slots=True)
class JobSummary:
    """Counters for one scheduled run, for logs and tests."""

    recipients: int = 0
    sent: int = 0
    errors: int = 0
    invalid_tokens: int = 0
    users_cleaned: int = 0
    cleanup_failures: int = 0

    def merge(self, other: "JobSummary") -> None:
        self.sent += other.sent
        self.errors += other.errors
        self.invalid_tokens += other.invalid_tokens
        self.users_cleaned += other.users_cleaned
        self.cleanup_failures += other.cleanup_failures

    def to_dict(self) -> dict[str, int]:
        return {
            "recipients": self.recipients,
            "sent": self.sent,
            "errors": self.errors,
            "invalid_tokens": self.invalid_tokens,
            "users_cleaned": self.users_cleaned,
            "cleanup_failures": self.cleanup_failures,
        }


class ScheduledPushJobs:
    """Runs the push jobs against the user store.

    Each run scans users page by page, builds the token ownership table for
    that run, dispatches once over every collected token, and hands the
    tokens reported dead back to the cleanup worker.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        dispatcher: NotificationDispatcher,
        cleanup: TokenCleanup,
        timezone: str = "UTC",
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self._cleanup = cleanup
        self._tz = ZoneInfo(timezone)
        self._page_size = page_size

    def today(self) -> datetime.date:
        """Current date in the configured time zone."""
        return datetime.datetime.now(self._tz).date()

    def send_daily_devotional(
        self, today: datetime.date | None = None
    ) -> JobSummary | None:
        """Push today's devotional to every subscribed device.

        Returns None when nothing is published for today.
        """
        date_str = (today or self.today()).isoformat()

        with self._session_factory() as session:
            devotional = DevotionalRepository(session).get_by_date(date_str)
            if devotional is None:
                logger.info("No devotional found", extra={"date": date_str})
                return None

            request = NotificationRequest(
                title=DEVOTIONAL_TITLE,
                body=devotional.title or DEVOTIONAL_FALLBACK_BODY,
                data={
                    "type": "devotional",
                    "devotionalId": devotional.id,
                    "screen": "Devotional",
                },
                options={"priority": PushPriority.HIGH.value},
            )
            logger.info(
                "Found devotional",
                extra={"date": date_str, "devotional_id": devotional.id},
            )
            audience = self._collect(session, NotificationCategory.DEVOTIONALS)

        if not audience.tokens:
            logger.info(
                "No recipients for devotional",
                extra={"users_scanned": audience.users_scanned},
            )
            return JobSummary()

        summary = self._deliver(audience, request)
        logger.info(
            "Devotional notification complete",
            extra={"date": date_str, **summary.to_dict()},
        )
        return summary

    def send_event_reminders(
        self, today: datetime.date | None = None
    ) -> JobSummary | None:
        """Remind subscribed users of events happening tomorrow.

        Returns None when there are no events tomorrow.
        """
        tomorrow = ((today or self.today()) + datetime.timedelta(days=1)).isoformat()

        with self._session_factory() as session:
            events = EventRepository(session).list_by_date(tomorrow)
            if not events:
                logger.info("No events found", extra={"date": tomorrow})
                return None

            requests = [
                NotificationRequest(
                    title=f"📅 Reminder: {event.title}",
                    body=(
                        f"Don't forget! {event.title} is tomorrow "
                        f"at {event.time or 'TBA'}"
                    ),
                    data={
                        "type": "event",
                        "eventId": event.id,
                        "screen": "EventDetails",
                    },
                    options={"priority": PushPriority.HIGH.value},
                )
                for event in events
            ]
            audience = self._collect(session, NotificationCategory.EVENTS)

        if not audience.tokens:
            logger.info(
                "No recipients for event reminders",
                extra={"users_scanned": audience.users_scanned},
            )
            return JobSummary()

        total = JobSummary(recipients=len(audience.tokens))
        for request in requests:
            total.merge(self._deliver(audience, request))

        logger.info(
            "Event reminders complete",
            extra={"date": tomorrow, "events": len(requests), **total.to_dict()},
        )
        return total

    def notify_announcement(self, announcement_id: str) -> JobSummary | None:
        """Push a new announcement to every subscribed device.

        The row is marked sent afterwards, even with no recipients. Returns
        None when the row is missing or was already sent.
        """
        with self._session_factory() as session:
            announcement = AnnouncementRepository(session).get_by_id(announcement_id)
            if announcement is None:
                logger.warning(
                    "Announcement not found",
                    extra={"announcement_id": announcement_id},
                )
                return None
            if announcement.notification_sent:
                logger.info(
                    "Notification already sent for announcement",
                    extra={"announcement_id": announcement_id},
                )
                return None

            priority = (
                PushPriority.HIGH
                if announcement.priority == "High"
                else PushPriority.DEFAULT
            )
            request = NotificationRequest(
                title=f"📢 {announcement.title}",
                body=(
                    announcement.message
                    or announcement.content
                    or ANNOUNCEMENT_FALLBACK_BODY
                ),
                data={
                    "type": "announcement",
                    "announcementId": announcement.id,
                    "screen": "Home",
                    "tab": "Announcements",
                },
                options={"priority": priority.value, "channelId": "announcements"},
            )
            audience = self._collect(session, NotificationCategory.ANNOUNCEMENTS)

        summary = self._deliver(audience, request) if audience.tokens else JobSummary()
        self._mark_sent(AnnouncementRepository, announcement_id)
        logger.info(
            "Announcement notification complete",
            extra={"announcement_id": announcement_id, **summary.to_dict()},
        )
        return summary

    def notify_sermon(self, sermon_id: str) -> JobSummary | None:
        """Push a newly published sermon to every subscribed device.

        Sermons with a status other than ``published`` are skipped; rows with
        no status count as published. Returns None when nothing was sent.
        """
        with self._session_factory() as session:
            sermon = SermonRepository(session).get_by_id(sermon_id)
            if sermon is None:
                logger.warning("Sermon not found", extra={"sermon_id": sermon_id})
                return None
            if sermon.status not in (None, "published"):
                logger.info(
                    "Sermon is not published, skipping notification",
                    extra={"sermon_id": sermon_id, "status": sermon.status},
                )
                return None
            if sermon.notification_sent:
                logger.info(
                    "Notification already sent for sermon",
                    extra={"sermon_id": sermon_id},
                )
                return None

            request = NotificationRequest(
                title=f"🎧 New Sermon: {sermon.title}",
                body=f"By {sermon.speaker or sermon.pastor or SERMON_FALLBACK_SPEAKER}",
                data={"type": "sermon", "sermonId": sermon.id, "screen": "Sermons"},
                options={"priority": PushPriority.DEFAULT.value},
            )
            audience = self._collect(session, NotificationCategory.SERMONS)

        summary = self._deliver(audience, request) if audience.tokens else JobSummary()
        self._mark_sent(SermonRepository, sermon_id)
        logger.info(
            "Sermon notification complete",
            extra={"sermon_id": sermon_id, **summary.to_dict()},
        )
        return summary

    def notify_message(self, message_id: str) -> JobSummary | None:
        """Push a direct message to its recipient's devices.

        Only the recipient is loaded, so the ownership table holds one user.
        A recipient who opted out or has no devices still gets the message
        marked sent. Returns None when the message or its recipient is
        missing, or the push already went out.
        """
        with self._session_factory() as session:
            message = MessageRepository(session).get_by_id(message_id)
            if message is None:
                logger.warning("Message not found", extra={"message_id": message_id})
                return None
            if not message.to_user_id:
                logger.info(
                    "Message has no recipient, skipping notification",
                    extra={"message_id": message_id},
                )
                return None
            if message.notification_sent:
                logger.info(
                    "Notification already sent for message",
                    extra={"message_id": message_id},
                )
                return None

            recipient_id = message.to_user_id
            recipient = UserRepository(session).get_by_id(recipient_id)
            if recipient is None:
                logger.info(
                    "Recipient not found, skipping notification",
                    extra={"message_id": message_id, "recipient_id": recipient_id},
                )
                return None

            sender = message.from_user_name or MESSAGE_FALLBACK_SENDER
            subject = message.subject or MESSAGE_FALLBACK_SUBJECT
            request = NotificationRequest(
                title="💬 New Message",
                body=f"{sender}: {subject}",
                data={
                    "type": "message",
                    "messageId": message.id,
                    "screen": "Messages",
                    "tab": "Inbox",
                },
                options={"priority": PushPriority.HIGH.value, "channelId": "messages"},
            )
            audience = collect_audience([recipient], DIRECT_MESSAGE_CATEGORY)

        if audience.users_opted_out:
            logger.info(
                "Recipient has message notifications disabled",
                extra={"message_id": message_id, "recipient_id": recipient_id},
            )
            summary = JobSummary()
        elif not audience.tokens:
            logger.info(
                "Recipient has no push tokens",
                extra={"message_id": message_id, "recipient_id": recipient_id},
            )
            summary = JobSummary()
        else:
            summary = self._deliver(audience, request)

        self._mark_sent(MessageRepository, message_id)
        logger.info(
            "Message notification complete",
            extra={
                "message_id": message_id,
                "recipient_id": recipient_id,
                **summary.to_dict(),
            },
        )
        return summary

    def _mark_sent(self, repository, row_id: str) -> None:
        with self._session_factory() as session:
            if repository(session).mark_notified(row_id):
                session.commit()

    def _collect(self, session: Session, category: NotificationCategory) -> Audience:
        users = UserRepository(session).iter_all(self._page_size)
        audience = collect_audience(users, category)
        logger.info(
            "Collected recipients",
            extra={
                "category": category.value,
                "tokens": len(audience.tokens),
                "users_scanned": audience.users_scanned,
                "users_opted_out": audience.users_opted_out,
            },
        )
        return audience

    def _deliver(self, audience: Audience, request: NotificationRequest) -> JobSummary:
        result = self._dispatcher.dispatch_request(audience.tokens, request)
        summary = JobSummary(
            recipients=len(audience.tokens),
            sent=result.sent,
            errors=result.errors,
            invalid_tokens=len(result.invalid_tokens),
        )
        if not result.invalid_tokens:
            return summary

        report = self._cleanup.cleanup(audience.invalid_entries(result.invalid_tokens))
        summary.users_cleaned = report.users_updated
        summary.cleanup_failures = len(report.failures)
        # Later broadcasts in the same run skip tokens already known dead.
        audience.discard(result.invalid_tokens)
        return summary

