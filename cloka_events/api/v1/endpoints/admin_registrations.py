# cloka_events/api/v1/endpoints/admin_registrations.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from cloka_events.api import deps
from cloka_events.crud import crud_registration
from cloka_events.schemas.registration import (
    ApprovalFilter,
    ApprovalUpdate,
    PaginatedRegistrations,
    Registration,
    RegistrationStats,
)
from cloka_events.services.registration_workflow import registration_workflow

router = APIRouter(
    prefix="/admin",
    tags=["Admin: Registrations"],
    dependencies=[Depends(deps.get_current_admin)],
)


@router.get("/registrations", response_model=PaginatedRegistrations)
def list_registrations(
    db: Session = Depends(deps.get_db),
    event_id: Optional[str] = Query(None, description="Only this event"),
    approved: Optional[ApprovalFilter] = Query(
        None, description="true, false or pending"
    ),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
):
    """
    Retrieve registrations, newest first, optionally filtered by event
    and approval state.
    """
    filters = {}
    if approved is not None:
        filters["approved"] = approved.value_for_query
    return crud_registration.registration.get_multi_filtered(
        db, event_id=event_id, page=page, limit=limit, **filters
    )


@router.get("/registrations/stats", response_model=RegistrationStats)
def registration_stats(
    db: Session = Depends(deps.get_db),
    event_id: Optional[str] = Query(None),
):
    return crud_registration.registration.get_stats(db, event_id=event_id)


@router.patch(
    "/registrations/{registration_id}/approval", response_model=Registration
)
def set_registration_approval(
    registration_id: str,
    body: ApprovalUpdate,
    db: Session = Depends(deps.get_db),
):
    """Approve (`true`), reject (`false`) or reset to pending (`null`)."""
    return registration_workflow.set_approval(
        db, registration_id=registration_id, approved=body.approved
    )


@router.post(
    "/registrations/{registration_id}/revoke-check-in", response_model=Registration
)
def revoke_check_in(registration_id: str, db: Session = Depends(deps.get_db)):
    return registration_workflow.revoke_check_in(
        db, registration_id=registration_id
    )


@router.delete(
    "/registrations/{registration_id}", status_code=status.HTTP_204_NO_CONTENT
)
def delete_registration(registration_id: str, db: Session = Depends(deps.get_db)):
    registration_workflow.delete_registration(db, registration_id=registration_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
