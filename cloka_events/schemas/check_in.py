# cloka_events/schemas/check_in.py
from pydantic import BaseModel, Field


class CheckInTokenResponse(BaseModel):
    """A freshly issued token, meant to be rendered as a QR code."""

    token: str
    event_id: str
    expires_in_ms: int


class CheckInRequest(BaseModel):
    token: str = Field(..., min_length=1)


class TokenValidation(BaseModel):
    valid: bool
    event_id: str
    issued_at: int
