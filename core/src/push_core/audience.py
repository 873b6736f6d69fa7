"""Collect push recipients from a stream of users."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from push_core.db.models import User
from push_core.delivery.cleanup import InvalidToken
from push_core.delivery.tokens import is_valid_token
from push_core.preferences import should_notify

logger = logging.getLogger(__name__)

# token -> owning user id, built once per job run.
TokenOwnership = dict[str, str]


@dataclass(slots=True)
class Audience:
    tokens: list[str] = field(default_factory=list)
    owners: TokenOwnership = field(default_factory=dict)
    users_scanned: int = 0
    users_opted_out: int = 0

    def invalid_entries(self, tokens: Sequence[str]) -> list[InvalidToken]:
        """Attach owners to tokens reported invalid by a dispatch."""
        return [InvalidToken(token=t, user_id=self.owners.get(t)) for t in tokens]

    def discard(self, tokens: Iterable[str]) -> None:
        """Drop tokens from the audience."""
        dead = set(tokens)
        self.tokens = [t for t in self.tokens if t not in dead]
        for token in dead:
            self.owners.pop(token, None)


def collect_audience(users: Iterable[User], category: str | None = None) -> Audience:
    """Gather valid tokens of users who accept ``category`` notifications.

    ``users`` is consumed once, so a lazily paginated scan never has to be
    held in memory. A token registered by more than one user is sent once
    and attributed to the last user seen; that reassignment is logged.
    """
    audience = Audience()
    for user in users:
        audience.users_scanned += 1
        if not should_notify(
            user.notification_settings, user.notification_preferences, category
        ):
            audience.users_opted_out += 1
            continue

        tokens = user.push_tokens
        if not isinstance(tokens, list):
            continue

        for token in tokens:
            if not is_valid_token(token):
                continue
            previous = audience.owners.get(token)
            if previous is None:
                audience.tokens.append(token)
            elif previous != user.id:
                logger.warning(
                    "Push token registered by multiple users",
                    extra={"previous_user_id": previous, "user_id": user.id},
                )
            audience.owners[token] = user.id

    return audience
