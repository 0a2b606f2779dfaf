# cloka_events/api/v1/endpoints/registrations.py
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from cloka_events.api import deps
from cloka_events.schemas.registration import MyEvent, Registration
from cloka_events.schemas.token import TokenPayload
from cloka_events.services.registration_workflow import registration_workflow

router = APIRouter(tags=["Registrations"])


@router.post(
    "/events/{event_id}/registrations",
    response_model=Registration,
    status_code=status.HTTP_201_CREATED,
)
def create_registration(
    event_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """
    Register the current user for an upcoming event.

    The registration starts out pending until an admin approves or
    rejects it. Registering twice for the same event is a 409.
    """
    return registration_workflow.register(
        db, user_id=current_user.sub, event_id=event_id
    )


@router.delete(
    "/events/{event_id}/registrations/me", status_code=status.HTTP_204_NO_CONTENT
)
def cancel_registration(
    event_id: str,
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    registration_workflow.cancel(db, user_id=current_user.sub, event_id=event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users/me/events", response_model=List[MyEvent])
def list_my_events(
    db: Session = Depends(deps.get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Events the current user registered for, with approval and check-in state."""
    return registration_workflow.get_user_events(db, user_id=current_user.sub)
