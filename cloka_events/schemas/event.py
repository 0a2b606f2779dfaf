# cloka_events/schemas/event.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class EventBase(BaseModel):
    title: str = Field(
        ..., min_length=1, json_schema_extra={"example": "Sunday Social Run"}
    )
    description: str = Field(
        ..., min_length=1, json_schema_extra={"example": "5k along the lake, coffee after."}
    )
    start_date: datetime
    location: str = Field(..., min_length=1, json_schema_extra={"example": "Bandra"})


class EventCreate(EventBase):
    exact_location: Optional[str] = Field(
        None, json_schema_extra={"example": "https://maps.app.goo.gl/abc123"}
    )
    post_approval_message: Optional[str] = None
    post_rejection_message: Optional[str] = None
    secret: Optional[str] = None


# All fields are optional so admins can send partial edits.
class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    start_date: Optional[datetime] = None
    location: Optional[str] = Field(None, min_length=1)
    exact_location: Optional[str] = None
    post_approval_message: Optional[str] = None
    post_rejection_message: Optional[str] = None
    secret: Optional[str] = None


class Event(EventBase):
    """Public view of an event: no secret, no exact location."""

    id: str = Field(..., json_schema_extra={"example": "evt_c5a6d8e0f9b1"})
    created_at: datetime

    model_config = {"from_attributes": True}


class AdminEvent(EventCreate):
    id: str
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SecretVerification(BaseModel):
    secret: str = Field(..., min_length=1)


class LocationDisclosure(BaseModel):
    exact_location: str
    is_google_maps_link: bool
