# cloka_events/models/event.py
import uuid

from sqlalchemy import Column, DateTime, String, Text, func
from sqlalchemy.orm import relationship

from cloka_events.db.base_class import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(
        String, primary_key=True, default=lambda: f"evt_{uuid.uuid4().hex[:12]}"
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    location = Column(String, nullable=False)

    # Only disclosed to approved attendees
    exact_location = Column(String, nullable=True)
    post_approval_message = Column(Text, nullable=True)
    post_rejection_message = Column(Text, nullable=True)
    secret = Column(String, nullable=True)

    created_by = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    registrations = relationship(
        "Registration",
        back_populates="event",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
