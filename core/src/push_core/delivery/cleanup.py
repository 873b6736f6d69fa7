"""Remove permanently-invalid push tokens from their owners' records."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Collection, Iterable
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from sqlalchemy.orm import Session, sessionmaker

from push_core.db.repositories import UserRepository
from push_core.log import mask_tokens

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InvalidToken:
    """A dead token and the user it was collected from."""

    token: str
    user_id: str | None


@dataclass(slots=True)
class CleanupReport:
    users_updated: int = 0
    users_unchanged: int = 0
    failures: dict[str, str] = field(default_factory=dict)


class TokenStore(ABC):
    """Per-user push token storage."""

    @abstractmethod
    def remove_tokens(self, user_id: str, tokens: Collection[str]) -> bool:
        """Remove ``tokens`` from one user's token set.

        Returns True if the stored set changed. Raises on store errors,
        including UserNotFoundError when the user no longer exists.
        """


class SqlTokenStore(TokenStore):
    """TokenStore over the users table, one session per user update."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def remove_tokens(self, user_id: str, tokens: Collection[str]) -> bool:
        with self._session_factory() as session:
            changed = UserRepository(session).remove_tokens(user_id, tokens)
            if changed:
                session.commit()
            return changed


def group_by_user(invalid: Iterable[InvalidToken]) -> dict[str, set[str]]:
    """Group tokens by owner, skipping entries with no known owner."""
    grouped: dict[str, set[str]] = {}
    for entry in invalid:
        if not entry.user_id:
            logger.warning(
                "Invalid token has no owner, skipping",
                extra={"token": mask_tokens(entry.token)},
            )
            continue
        grouped.setdefault(entry.user_id, set()).add(entry.token)
    return grouped


class TokenCleanup:
    """Best-effort removal of invalid tokens, isolated per user.

    Each user's update runs independently on a thread pool. All updates
    are awaited; a failure for one user is logged and reported without
    cancelling the others. Nothing is rolled back: a token that survives
    this run is found invalid again on the next one.
    """

    def __init__(self, store: TokenStore, max_workers: int = 8) -> None:
        self._store = store
        self._max_workers = max(1, max_workers)

    def cleanup(self, invalid: Iterable[InvalidToken]) -> CleanupReport:
        report = CleanupReport()
        by_user = group_by_user(invalid)
        if not by_user:
            return report

        workers = min(self._max_workers, len(by_user))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="token-cleanup"
        ) as pool:
            futures = {
                pool.submit(self._store.remove_tokens, user_id, tokens): user_id
                for user_id, tokens in by_user.items()
            }
            wait(futures)

        for future, user_id in futures.items():
            exc = future.exception()
            if exc is not None:
                logger.error(
                    "Token cleanup failed for user",
                    exc_info=exc,
                    extra={"user_id": user_id},
                )
                report.failures[user_id] = str(exc)
            elif future.result():
                report.users_updated += 1
            else:
                report.users_unchanged += 1

        logger.info(
            "Token cleanup complete",
            extra={
                "users": len(by_user),
                "users_updated": report.users_updated,
                "users_failed": len(report.failures),
            },
        )
        return report
