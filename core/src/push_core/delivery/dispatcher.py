"""Fan a notification out to many device tokens in bounded batches."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from push_core.delivery.gateway import PushGateway, PushTicket
from push_core.delivery.messages import (
    NotificationRequest,
    build_message,
    chunk_messages,
)
from push_core.delivery.tokens import filter_valid_tokens
from push_core.enums import TOKEN_INVALIDATING_ERRORS, TicketStatus

logger = logging.getLogger(__name__)

EXPO_MAX_BATCH_SIZE = 100

NO_VALID_TOKENS = "No valid push tokens provided"
MISSING_CONTENT = "title and body are required"


@dataclass(slots=True)
class DispatchResult:
    """Aggregate outcome of one dispatch."""

    success: bool
    sent: int = 0
    errors: int = 0
    invalid_tokens: list[str] = field(default_factory=list)
    results: list[PushTicket] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def rejected(cls, reason: str) -> "DispatchResult":
        return cls(success=False, error=reason)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": self.success,
            "sent": self.sent,
            "errors": self.errors,
            "invalidTokens": list(self.invalid_tokens),
            "results": [t.to_dict() for t in self.results],
        }
        if self.error is not None:
            body["error"] = self.error
        return body


class NotificationDispatcher:
    """Builds Expo messages, submits them batch by batch, classifies tickets.

    Batches go out strictly one after another. Tickets from batch ``i`` form
    a contiguous slice of the overall ticket list, so ticket ``k`` always
    belongs to the ``k``-th valid token.
    """

    def __init__(
        self, gateway: PushGateway, batch_size: int = EXPO_MAX_BATCH_SIZE
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self._gateway = gateway
        self._batch_size = batch_size

    def dispatch(
        self,
        tokens: Sequence[Any],
        title: str,
        body: str,
        data: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> DispatchResult:
        if not title or not body:
            return DispatchResult.rejected(MISSING_CONTENT)

        request = NotificationRequest(
            title=title,
            body=body,
            data=dict(data or {}),
            options=dict(options or {}),
        )
        return self.dispatch_request(tokens, request)

    def dispatch_request(
        self, tokens: Sequence[Any], request: NotificationRequest
    ) -> DispatchResult:
        if not request.title or not request.body:
            return DispatchResult.rejected(MISSING_CONTENT)

        tokens = list(tokens or [])
        valid_tokens = filter_valid_tokens(tokens)
        if not valid_tokens:
            return DispatchResult.rejected(NO_VALID_TOKENS)

        messages = [build_message(token, request) for token in valid_tokens]

        tickets: list[PushTicket] = []
        batches = list(chunk_messages(messages, self._batch_size))
        for index, batch in enumerate(batches):
            tickets.extend(self._send_batch(index, len(batches), batch))

        sent = sum(1 for t in tickets if t.status == TicketStatus.OK)
        errors = sum(1 for t in tickets if t.status == TicketStatus.ERROR)
        invalid_tokens = [
            valid_tokens[k]
            for k, ticket in enumerate(tickets)
            if ticket.status == TicketStatus.ERROR
            and ticket.error in TOKEN_INVALIDATING_ERRORS
        ]

        logger.info(
            "Dispatch complete",
            extra={
                "tokens": len(valid_tokens),
                "dropped_tokens": len(tokens) - len(valid_tokens),
                "batches": len(batches),
                "sent": sent,
                "errors": errors,
                "invalid_tokens": len(invalid_tokens),
            },
        )

        return DispatchResult(
            success=sent > 0,
            sent=sent,
            errors=errors,
            invalid_tokens=invalid_tokens,
            results=tickets,
        )

    def close(self) -> None:
        self._gateway.close()

    def _send_batch(
        self, index: int, total: int, batch: Sequence[dict[str, Any]]
    ) -> list[PushTicket]:
        """Submit one batch; a failed submission yields one error ticket per message."""
        log_ctx = {"batch": index + 1, "batches": total, "messages": len(batch)}
        try:
            tickets = self._gateway.send_batch(batch)
        except Exception as exc:
            logger.exception("Push batch failed", extra=log_ctx)
            return [PushTicket.transport_failure(str(exc)) for _ in batch]

        if len(tickets) != len(batch):
            logger.error(
                "Push gateway returned a mismatched ticket count",
                extra={**log_ctx, "tickets": len(tickets)},
            )
            return [
                PushTicket.transport_failure("Ticket count mismatch") for _ in batch
            ]

        logger.debug("Push batch sent", extra=log_ctx)
        return list(tickets)
