# cloka_events/services/check_in_token.py
"""
Short-lived, event-bound check-in tokens.

Format: base64("{event_id}:{issued_at_ms}")

The organizer's screen shows a freshly issued token as a QR code; an
attendee scans it and presents it back with their check-in request. A
token is accepted for ``ttl_ms`` milliseconds after issuance (inclusive).

The token is NOT signed. Anyone who has seen a valid token can replay it
until it expires, and anyone who knows the issuance moment can mint one.
The short window is the only protection.
"""

import base64
import binascii
import logging
import time
from typing import Callable, Optional, Tuple

from cloka_events.core.config import settings
from cloka_events.core.exceptions import (
    EventMismatchError,
    MalformedTokenError,
    TokenExpiredError,
)

logger = logging.getLogger(__name__)

TOKEN_DELIMITER = ":"


def current_millis() -> int:
    return time.time_ns() // 1_000_000


class CheckInTokenService:
    def __init__(
        self,
        ttl_ms: int = 5 * 60 * 1000,
        clock: Callable[[], int] = current_millis,
    ):
        self.ttl_ms = ttl_ms
        self.clock = clock

    def issue(self, event_id: str, *, now_ms: Optional[int] = None) -> str:
        issued_at = self.clock() if now_ms is None else now_ms
        raw = f"{event_id}{TOKEN_DELIMITER}{issued_at}"
        return base64.b64encode(raw.encode("utf-8")).decode("ascii")

    def decode(self, token: str) -> Tuple[str, int]:
        """Returns ``(event_id, issued_at_ms)`` or raises MalformedTokenError."""
        token = (token or "").strip()
        if not token:
            raise MalformedTokenError()

        # Missing padding is accepted
        padded = token + "=" * (-len(token) % 4)
        try:
            raw = base64.b64decode(padded, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError, ValueError):
            raise MalformedTokenError()

        event_id, sep, timestamp = raw.rpartition(TOKEN_DELIMITER)
        if not sep or not event_id:
            raise MalformedTokenError()

        # Plain ASCII digits only; int() would also take signs, spaces and "_"
        if not (timestamp.isascii() and timestamp.isdigit()):
            raise MalformedTokenError()

        return event_id, int(timestamp)

    def validate(
        self, event_id: str, token: str, *, now_ms: Optional[int] = None
    ) -> int:
        """
        Checks a token against an event and returns its issuance time (ms).

        Raises MalformedTokenError, EventMismatchError or TokenExpiredError,
        in that order of precedence.
        """
        token_event_id, issued_at = self.decode(token)

        if token_event_id != event_id:
            raise EventMismatchError()

        now = self.clock() if now_ms is None else now_ms
        age = now - issued_at
        if age > self.ttl_ms:
            logger.debug(f"Expired check-in token for {event_id}: age={age}ms")
            raise TokenExpiredError()

        return issued_at


check_in_tokens = CheckInTokenService(ttl_ms=settings.CHECK_IN_TOKEN_TTL_MS)
