# cloka_events/models/registration.py
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
    false,
    func,
)
from sqlalchemy.orm import relationship

from cloka_events.db.base_class import Base


class Registration(Base):
    __tablename__ = "registrations"
    __table_args__ = (
        # A user can only register once for an event
        UniqueConstraint("user_id", "event_id", name="uq_registrations_user_event"),
    )

    id = Column(
        String, primary_key=True, default=lambda: f"reg_{uuid.uuid4().hex[:12]}"
    )
    user_id = Column(String, nullable=False, index=True)
    event_id = Column(
        String,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # None = pending, True = approved, False = rejected
    approved = Column(Boolean, nullable=True, default=None)

    checked_in = Column(Boolean, nullable=False, default=False, server_default=false())
    checked_in_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    event = relationship("Event", back_populates="registrations")
