# cloka_events/api/v1/endpoints/admin_events.py
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from cloka_events.api import deps
from cloka_events.core.exceptions import EventNotFoundError
from cloka_events.crud import crud_event
from cloka_events.schemas.check_in import CheckInTokenResponse
from cloka_events.schemas.event import AdminEvent, EventCreate, EventUpdate
from cloka_events.schemas.token import TokenPayload
from cloka_events.services.registration_workflow import registration_workflow

router = APIRouter(
    prefix="/admin",
    tags=["Admin: Events"],
    dependencies=[Depends(deps.get_current_admin)],
)


@router.post(
    "/events", response_model=AdminEvent, status_code=status.HTTP_201_CREATED
)
def create_event(
    event_in: EventCreate,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_admin),
):
    return crud_event.event.create_with_owner(
        db, obj_in=event_in, owner_id=current_user.sub
    )


@router.get("/events", response_model=List[AdminEvent])
def list_events(db: Session = Depends(deps.get_db)):
    """All events, past and upcoming, latest start first."""
    return crud_event.event.get_all_newest_first(db)


@router.get("/events/{event_id}", response_model=AdminEvent)
def get_event(event_id: str, db: Session = Depends(deps.get_db)):
    event = crud_event.event.get(db, event_id)
    if not event:
        raise EventNotFoundError()
    return event


@router.put("/events/{event_id}", response_model=AdminEvent)
def update_event(
    event_id: str, event_in: EventUpdate, db: Session = Depends(deps.get_db)
):
    event = crud_event.event.get(db, event_id)
    if not event:
        raise EventNotFoundError()
    return crud_event.event.update(db, db_obj=event, obj_in=event_in)


@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: str, db: Session = Depends(deps.get_db)):
    """Deletes an event together with all of its registrations."""
    if not crud_event.event.remove(db, id=event_id):
        raise EventNotFoundError()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/events/{event_id}/check-in/token", response_model=CheckInTokenResponse
)
def issue_check_in_token(event_id: str, db: Session = Depends(deps.get_db)):
    """
    Issue a check-in token for display as a QR code at the venue.

    Tokens expire after a few minutes, so the display should poll this
    endpoint and refresh the code.
    """
    token = registration_workflow.issue_token(db, event_id=event_id)
    return CheckInTokenResponse(
        token=token,
        event_id=event_id,
        expires_in_ms=registration_workflow.tokens.ttl_ms,
    )
