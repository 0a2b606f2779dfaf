# cloka_events/crud/crud_registration.py
"""
The registration ledger: the authoritative mapping of (user, event) to
approval and check-in state.

At most one registration exists per (user, event). The pre-insert lookup
gives a friendly error in the common case; the unique constraint on the
table is what actually holds the invariant when two requests race.
"""

import logging
import math
from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy import and_, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from cloka_events.core.exceptions import (
    AlreadyRegisteredError,
    EventInPastError,
    EventNotFoundError,
    RegistrationNotFoundError,
)
from cloka_events.crud.base import CRUDBase
from cloka_events.crud.crud_event import event as event_crud
from cloka_events.models.event import Event
from cloka_events.models.registration import Registration
from cloka_events.utils.timeutils import ensure_utc, utcnow

logger = logging.getLogger(__name__)

# Sentinel so that ``approved=None`` can mean "pending" in filters
ANY_APPROVAL = object()


class CRUDRegistration(CRUDBase[Registration, BaseModel, BaseModel]):
    def get_by_user_and_event(
        self, db: Session, *, user_id: str, event_id: str
    ) -> Optional[Registration]:
        return (
            db.query(self.model)
            .filter(
                and_(self.model.user_id == user_id, self.model.event_id == event_id)
            )
            .first()
        )

    def get_or_404(self, db: Session, *, registration_id: str) -> Registration:
        registration = self.get(db, registration_id)
        if not registration:
            raise RegistrationNotFoundError()
        return registration

    # ------------------------------------------------------------------ #
    # State transitions
    # ------------------------------------------------------------------ #

    def register(
        self,
        db: Session,
        *,
        user_id: str,
        event_id: str,
        now: Optional[datetime] = None,
    ) -> Registration:
        """Creates a pending registration for a future event."""
        now = now or utcnow()

        event = event_crud.get(db, event_id)
        if not event:
            raise EventNotFoundError()

        if ensure_utc(event.start_date) < now:
            raise EventInPastError()

        if self.get_by_user_and_event(db, user_id=user_id, event_id=event_id):
            raise AlreadyRegisteredError()

        db_obj = self.model(
            user_id=user_id, event_id=event_id, approved=None, created_at=now
        )
        db.add(db_obj)
        try:
            db.commit()
        except IntegrityError:
            # Lost the race against a concurrent registration for the same pair
            db.rollback()
            logger.info(
                f"Duplicate registration rejected by constraint: user={user_id} event={event_id}"
            )
            raise AlreadyRegisteredError()
        db.refresh(db_obj)
        return db_obj

    def cancel(self, db: Session, *, user_id: str, event_id: str) -> Registration:
        registration = self.get_by_user_and_event(
            db, user_id=user_id, event_id=event_id
        )
        if not registration:
            raise RegistrationNotFoundError()
        db.delete(registration)
        db.commit()
        return registration

    def delete(self, db: Session, *, registration_id: str) -> Registration:
        registration = self.remove(db, id=registration_id)
        if not registration:
            raise RegistrationNotFoundError()
        return registration

    def set_approval(
        self, db: Session, *, registration_id: str, approved: Optional[bool]
    ) -> Registration:
        """Overwrites the approval state. Any state is reachable from any other."""
        registration = self.get_or_404(db, registration_id=registration_id)
        registration.approved = approved
        db.add(registration)
        db.commit()
        db.refresh(registration)
        return registration

    def set_checked_in(
        self,
        db: Session,
        *,
        registration_id: str,
        value: bool,
        now: Optional[datetime] = None,
    ) -> Registration:
        registration = self.get_or_404(db, registration_id=registration_id)
        registration.checked_in = value
        registration.checked_in_at = (now or utcnow()) if value else None
        db.add(registration)
        db.commit()
        db.refresh(registration)
        return registration

    def mark_checked_in(
        self,
        db: Session,
        *,
        registration_id: str,
        now: Optional[datetime] = None,
    ) -> Tuple[bool, Optional[Registration]]:
        """
        Checks in an approved registration using an atomic UPDATE so two
        concurrent check-ins cannot both succeed.

        Returns ``(updated, registration)``; when ``updated`` is False the
        caller inspects the returned row to find out which guard failed.
        """
        now = now or utcnow()
        result = db.execute(
            update(self.model)
            .where(
                and_(
                    self.model.id == registration_id,
                    self.model.approved.is_(True),
                    self.model.checked_in.is_(False),
                )
            )
            .values(checked_in=True, checked_in_at=now)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        return result.rowcount == 1, self.get(db, registration_id)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def _filtered(self, db: Session, *, event_id: Optional[str], approved):
        query = db.query(self.model)
        if event_id:
            query = query.filter(self.model.event_id == event_id)
        if approved is not ANY_APPROVAL:
            if approved is None:
                query = query.filter(self.model.approved.is_(None))
            else:
                query = query.filter(self.model.approved.is_(approved))
        return query

    def get_multi_filtered(
        self,
        db: Session,
        *,
        event_id: Optional[str] = None,
        approved=ANY_APPROVAL,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        """Registrations newest first, with their events eager-loaded."""
        query = self._filtered(db, event_id=event_id, approved=approved)
        total = query.count()
        registrations = (
            query.options(joinedload(self.model.event))
            .order_by(self.model.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {
            "data": registrations,
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "pages": math.ceil(total / limit),
            },
        }

    def get_stats(self, db: Session, *, event_id: Optional[str] = None) -> dict:
        def count(approved=ANY_APPROVAL) -> int:
            return self._filtered(db, event_id=event_id, approved=approved).count()

        base = self._filtered(db, event_id=event_id, approved=ANY_APPROVAL)
        events_count = base.with_entities(
            func.count(func.distinct(self.model.event_id))
        ).scalar()
        users_count = base.with_entities(
            func.count(func.distinct(self.model.user_id))
        ).scalar()

        return {
            "total": count(),
            "approved": count(True),
            "rejected": count(False),
            "pending": count(None),
            "events_count": events_count or 0,
            "users_count": users_count or 0,
        }

    def get_multi_by_user(
        self, db: Session, *, user_id: str
    ) -> List[Tuple[Registration, Event]]:
        """A user's registrations with their events, most recent registration first."""
        return (
            db.query(self.model, Event)
            .join(Event, Event.id == self.model.event_id)
            .filter(self.model.user_id == user_id)
            .order_by(self.model.created_at.desc())
            .all()
        )


registration = CRUDRegistration(Registration)
