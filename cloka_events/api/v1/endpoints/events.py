# cloka_events/api/v1/endpoints/events.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from cloka_events.api import deps
from cloka_events.core.exceptions import EventNotFoundError
from cloka_events.crud import crud_event
from cloka_events.schemas.event import (
    Event as EventSchema,
    LocationDisclosure,
    SecretVerification,
)
from cloka_events.schemas.token import TokenPayload
from cloka_events.services.registration_workflow import registration_workflow

router = APIRouter(tags=["Events"])


@router.get("/events", response_model=List[EventSchema])
def list_upcoming_events(db: Session = Depends(deps.get_db)):
    """
    Retrieve all events that have not started yet, soonest first.
    """
    return crud_event.event.get_upcoming(db)


@router.get("/events/{event_id}", response_model=EventSchema)
def get_event(event_id: str, db: Session = Depends(deps.get_db)):
    event = crud_event.event.get(db, event_id)
    if not event:
        raise EventNotFoundError()
    return event


@router.post("/events/{event_id}/verify-secret", response_model=LocationDisclosure)
def verify_event_secret(
    event_id: str,
    body: SecretVerification,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Reveal the exact meeting point of an event.

    The caller must know the event's secret and hold an approved
    registration for the event.
    """
    return registration_workflow.verify_secret(
        db, user_id=current_user.sub, event_id=event_id, secret=body.secret
    )
