# cloka_events/schemas/registration.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from cloka_events.schemas.event import Event


class ApprovalFilter(str, Enum):
    approved = "true"
    rejected = "false"
    pending = "pending"

    @property
    def value_for_query(self) -> Optional[bool]:
        return {"true": True, "false": False, "pending": None}[self.value]


class Registration(BaseModel):
    id: str
    user_id: str
    event_id: str
    # None while pending
    approved: Optional[bool] = None
    checked_in: bool = False
    checked_in_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ApprovalUpdate(BaseModel):
    # Required, but null is accepted and resets the registration to pending
    approved: Optional[bool]


class RegistrationEventSummary(BaseModel):
    id: str
    title: str
    start_date: datetime
    location: str

    model_config = {"from_attributes": True}


class AdminRegistration(Registration):
    event: Optional[RegistrationEventSummary] = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class PaginatedRegistrations(BaseModel):
    data: List[AdminRegistration]
    pagination: Pagination


class RegistrationStats(BaseModel):
    total: int
    approved: int
    rejected: int
    pending: int
    events_count: int
    users_count: int


class MyEvent(Event):
    """An event as seen by one of its registrants."""

    registration_id: str
    approved: Optional[bool] = None
    checked_in: bool = False
    checked_in_at: Optional[datetime] = None
    exact_location: Optional[str] = None
    post_approval_message: Optional[str] = None
    post_rejection_message: Optional[str] = None
