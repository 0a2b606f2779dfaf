# cloka_events/api/v1/endpoints/check_in.py
"""
Attendee-facing check-in endpoints.

The organizer's screen shows a QR code carrying a check-in token (see the
admin token endpoint); the attendee's app scans it and posts it here.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from cloka_events.api import deps
from cloka_events.schemas.check_in import CheckInRequest, TokenValidation
from cloka_events.schemas.registration import Registration
from cloka_events.schemas.token import TokenPayload
from cloka_events.services.registration_workflow import registration_workflow

router = APIRouter(tags=["Check-in"])


@router.post(
    "/events/{event_id}/check-in/validate-token", response_model=TokenValidation
)
def validate_check_in_token(
    event_id: str,
    body: CheckInRequest,
    db: Session = Depends(deps.get_db),
):
    """Check a scanned token before asking the user to confirm check-in."""
    issued_at = registration_workflow.validate_token(
        db, event_id=event_id, token=body.token
    )
    return TokenValidation(valid=True, event_id=event_id, issued_at=issued_at)


@router.post("/events/{event_id}/check-in", response_model=Registration)
def check_in(
    event_id: str,
    body: CheckInRequest,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Check the current user in to an event.

    Requires an approved registration that is not checked in yet and a
    token issued for this event within the last five minutes.
    """
    return registration_workflow.check_in(
        db, user_id=current_user.sub, event_id=event_id, token=body.token
    )
