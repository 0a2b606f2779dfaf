"""
Tests for check-in tokens.

Verifies that CheckInTokenService:
- Encodes base64("{event_id}:{issued_at_ms}")
- Accepts a token up to and including the expiry window
- Rejects tokens for other events, expired tokens and garbage
"""

import base64

import pytest

from cloka_events.core.exceptions import (
    EventMismatchError,
    MalformedTokenError,
    TokenExpiredError,
)
from cloka_events.services.check_in_token import CheckInTokenService

ISSUED_AT = 1_700_000_000_000


def encode(raw: str) -> str:
    return base64.b64encode(raw.encode()).decode()


class TestCheckInTokenService:
    def setup_method(self):
        self.tokens = CheckInTokenService(ttl_ms=300_000, clock=lambda: ISSUED_AT)

    def test_issue_encodes_event_and_timestamp(self):
        token = self.tokens.issue("evt_abc")

        assert base64.b64decode(token).decode() == f"evt_abc:{ISSUED_AT}"

    def test_validate_immediately_after_issue(self):
        token = self.tokens.issue("evt_abc")

        assert self.tokens.validate("evt_abc", token) == ISSUED_AT

    def test_valid_at_exactly_the_expiry_window(self):
        token = self.tokens.issue("evt_abc")

        issued = self.tokens.validate("evt_abc", token, now_ms=ISSUED_AT + 300_000)

        assert issued == ISSUED_AT

    def test_expired_one_millisecond_after_window(self):
        token = self.tokens.issue("evt_abc")

        with pytest.raises(TokenExpiredError):
            self.tokens.validate("evt_abc", token, now_ms=ISSUED_AT + 300_001)

    def test_token_for_other_event_is_rejected(self):
        token = self.tokens.issue("evt_a")

        with pytest.raises(EventMismatchError):
            self.tokens.validate("evt_b", token)

    def test_mismatch_takes_precedence_over_expiry(self):
        token = self.tokens.issue("evt_a", now_ms=0)

        with pytest.raises(EventMismatchError):
            self.tokens.validate("evt_b", token, now_ms=ISSUED_AT)

    def test_uses_clock_when_no_time_given(self):
        clock_values = iter([ISSUED_AT, ISSUED_AT + 400_000])
        tokens = CheckInTokenService(ttl_ms=300_000, clock=lambda: next(clock_values))
        token = tokens.issue("evt_abc")

        with pytest.raises(TokenExpiredError):
            tokens.validate("evt_abc", token)

    def test_missing_padding_is_tolerated(self):
        token = encode(f"evt_abcd:{ISSUED_AT}").rstrip("=")

        assert self.tokens.validate("evt_abcd", token) == ISSUED_AT

    def test_event_id_containing_delimiter(self):
        token = encode(f"evt:with:colons:{ISSUED_AT}")

        assert self.tokens.validate("evt:with:colons", token) == ISSUED_AT

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "   ",
            "not base64 at all!",
            encode(f"evt_abc{ISSUED_AT}"),  # no delimiter
            encode("evt_abc:soon"),  # timestamp is not a number
            encode("evt_abc:-5"),  # signed
            encode("evt_abc: +12"),  # whitespace and sign
            encode("evt_abc:1_000"),  # digit separators
            encode("evt_abc:"),  # empty timestamp
            encode(f":{ISSUED_AT}"),  # empty event id
            base64.b64encode(b"\xff\xfe:123").decode(),  # not text
        ],
    )
    def test_malformed_tokens(self, token):
        with pytest.raises(MalformedTokenError):
            self.tokens.validate("evt_abc", token)
