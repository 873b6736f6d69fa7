"""Push gateway interface and the Expo push service client."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

from push_core.config import ExpoConfig
from push_core.enums import TicketStatus

logger = logging.getLogger(__name__)


class PushTransportError(Exception):
    """A whole batch could not be submitted (network, 5xx, bad response)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class PushTicket:
    """Delivery outcome for one submitted message."""

    status: str
    id: str | None = None
    message: str | None = None
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == TicketStatus.OK

    @classmethod
    def from_response(cls, raw: Mapping[str, Any]) -> "PushTicket":
        """Parse one ticket as returned by the Expo push API."""
        details = raw.get("details")
        if not isinstance(details, dict):
            details = {}
        return cls(
            status=raw.get("status", TicketStatus.ERROR),
            id=raw.get("id"),
            message=raw.get("message"),
            error=details.get("error"),
            details=details,
        )

    @classmethod
    def transport_failure(cls, message: str) -> "PushTicket":
        """Synthetic error ticket for a message whose batch never got through."""
        return cls(status=TicketStatus.ERROR, message=message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"status": self.status}
        if self.id is not None:
            result["id"] = self.id
        if self.message is not None:
            result["message"] = self.message
        if self.details:
            result["details"] = dict(self.details)
        return result


class PushGateway(ABC):
    """Submits batches of push messages to a delivery provider."""

    @abstractmethod
    def send_batch(self, messages: Sequence[Mapping[str, Any]]) -> list[PushTicket]:
        """Submit one batch.

        Must return exactly one ticket per message, in submission order.
        Raises PushTransportError when the batch as a whole fails.
        """

    def close(self) -> None:
        """Release network resources."""


class ExpoPushClient(PushGateway):
    """Expo push service client over httpx.

    Args:
        config: Endpoint, access token and timeout settings.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        config: ExpoConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
            "Content-Type": "application/json",
        }
        if config.access_token:
            headers["Authorization"] = f"Bearer {config.access_token}"

        self._url = config.push_url
        self._client = httpx.Client(
            headers=headers,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    def send_batch(self, messages: Sequence[Mapping[str, Any]]) -> list[PushTicket]:
        try:
            response = self._client.post(self._url, json=[dict(m) for m in messages])
        except httpx.HTTPError as exc:
            raise PushTransportError(f"Push service request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            raise PushTransportError(
                _describe_errors(payload)
                or f"Push service responded with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        if not isinstance(payload, dict):
            raise PushTransportError("Push service returned a non-JSON body")

        request_errors = _describe_errors(payload)
        if request_errors:
            raise PushTransportError(request_errors, status_code=response.status_code)

        data = payload.get("data")
        if not isinstance(data, list) or len(data) != len(messages):
            raise PushTransportError(
                "Push service returned "
                f"{len(data) if isinstance(data, list) else 'no'} tickets "
                f"for {len(messages)} messages"
            )

        logger.debug("Push batch accepted", extra={"messages": len(messages)})
        return [PushTicket.from_response(item) for item in data]

    def close(self) -> None:
        self._client.close()


def _describe_errors(payload: Any) -> str | None:
    """Join the request-level ``errors`` array of an Expo response, if any."""
    if not isinstance(payload, dict):
        return None
    errors = payload.get("errors")
    if not errors:
        return None
    parts = []
    for err in errors:
        if isinstance(err, dict):
            code = err.get("code")
            text = err.get("message", "")
            parts.append(f"{code}: {text}" if code else text)
        else:
            parts.append(str(err))
    return "; ".join(parts)
