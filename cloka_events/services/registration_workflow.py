# cloka_events/services/registration_workflow.py
"""
Registration Workflow

Orchestrates the life of a registration:

    UNREGISTERED -> PENDING -> APPROVED | REJECTED
    APPROVED -> CHECKED_IN            (user, with a valid check-in token)
    CHECKED_IN -> APPROVED            (admin revokes the check-in)
    any -> UNREGISTERED               (user cancel, admin delete)

Every method returns its payload or raises one WorkflowError. Unexpected
database failures surface as StorageError so the HTTP layer can answer 503.
"""

import logging
from datetime import datetime, timezone
from functools import wraps
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cloka_events.core.exceptions import (
    AlreadyCheckedInError,
    EventNotFoundError,
    InvalidSecretError,
    NotApprovedError,
    RegistrationNotFoundError,
    StorageError,
)
from cloka_events.crud import crud_event, crud_registration
from cloka_events.models.event import Event
from cloka_events.models.registration import Registration
from cloka_events.services.check_in_token import CheckInTokenService, check_in_tokens

logger = logging.getLogger(__name__)

GOOGLE_MAPS_HOSTS = ("maps.google.com", "goo.gl/maps", "maps.app.goo.gl")


def translate_storage_errors(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.exception(f"Storage failure in {func.__name__}: {e}")
            raise StorageError() from e

    return wrapper


class RegistrationWorkflow:
    """Service for the registration / approval / check-in state machine."""

    def __init__(
        self,
        tokens: CheckInTokenService,
        ledger: crud_registration.CRUDRegistration = crud_registration.registration,
        events: crud_event.CRUDEvent = crud_event.event,
    ):
        self.tokens = tokens
        self.ledger = ledger
        self.events = events

    def _get_event(self, db: Session, event_id: str) -> Event:
        event = self.events.get(db, event_id)
        if not event:
            raise EventNotFoundError()
        return event

    # ========================================
    # User actions
    # ========================================

    @translate_storage_errors
    def register(self, db: Session, *, user_id: str, event_id: str) -> Registration:
        registration = self.ledger.register(db, user_id=user_id, event_id=event_id)
        logger.info(f"User {user_id} registered for event {event_id} ({registration.id})")
        return registration

    @translate_storage_errors
    def cancel(self, db: Session, *, user_id: str, event_id: str) -> None:
        """Self-service cancellation; refused once the user has checked in."""
        registration = self.ledger.get_by_user_and_event(
            db, user_id=user_id, event_id=event_id
        )
        if not registration:
            raise RegistrationNotFoundError()
        if registration.checked_in:
            raise AlreadyCheckedInError(
                "You have already checked in and can no longer cancel this registration"
            )
        self.ledger.cancel(db, user_id=user_id, event_id=event_id)
        logger.info(f"User {user_id} cancelled registration for event {event_id}")

    @translate_storage_errors
    def validate_token(
        self, db: Session, *, event_id: str, token: str, now_ms: Optional[int] = None
    ) -> int:
        self._get_event(db, event_id)
        return self.tokens.validate(event_id, token, now_ms=now_ms)

    @translate_storage_errors
    def check_in(
        self,
        db: Session,
        *,
        user_id: str,
        event_id: str,
        token: str,
        now_ms: Optional[int] = None,
    ) -> Registration:
        self._get_event(db, event_id)
        issued_at = self.tokens.validate(event_id, token, now_ms=now_ms)

        registration = self.ledger.get_by_user_and_event(
            db, user_id=user_id, event_id=event_id
        )
        if not registration:
            raise RegistrationNotFoundError("You are not registered for this event")
        if registration.approved is not True:
            raise NotApprovedError()
        if registration.checked_in:
            raise AlreadyCheckedInError()

        now = None
        if now_ms is not None:
            now = datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc)
        updated, registration = self.ledger.mark_checked_in(
            db, registration_id=registration.id, now=now
        )
        if not updated:
            # State changed between the read and the conditional update
            if registration is None:
                raise RegistrationNotFoundError("You are not registered for this event")
            if registration.approved is not True:
                raise NotApprovedError()
            raise AlreadyCheckedInError()

        logger.info(
            f"User {user_id} checked in to event {event_id} with token issued at {issued_at}"
        )
        return registration

    @translate_storage_errors
    def verify_secret(
        self, db: Session, *, user_id: str, event_id: str, secret: str
    ) -> dict:
        """Discloses the exact location to approved attendees who know the secret."""
        event = self._get_event(db, event_id)
        if not event.secret or event.secret.lower() != secret.strip().lower():
            raise InvalidSecretError()

        registration = self.ledger.get_by_user_and_event(
            db, user_id=user_id, event_id=event_id
        )
        if not registration or registration.approved is not True:
            raise NotApprovedError()

        exact_location = event.exact_location or event.location
        return {
            "exact_location": exact_location,
            "is_google_maps_link": any(
                host in exact_location for host in GOOGLE_MAPS_HOSTS
            ),
        }

    @translate_storage_errors
    def get_user_events(self, db: Session, *, user_id: str) -> List[dict]:
        results = []
        for registration, event in self.ledger.get_multi_by_user(db, user_id=user_id):
            approved = registration.approved
            results.append(
                {
                    "id": event.id,
                    "title": event.title,
                    "description": event.description,
                    "start_date": event.start_date,
                    "location": event.location,
                    "created_at": event.created_at,
                    "registration_id": registration.id,
                    "approved": approved,
                    "checked_in": registration.checked_in,
                    "checked_in_at": registration.checked_in_at,
                    "exact_location": event.exact_location if approved is True else None,
                    "post_approval_message": (
                        event.post_approval_message if approved is True else None
                    ),
                    "post_rejection_message": (
                        event.post_rejection_message if approved is False else None
                    ),
                }
            )
        return results

    # ========================================
    # Admin actions
    # ========================================

    @translate_storage_errors
    def set_approval(
        self, db: Session, *, registration_id: str, approved: Optional[bool]
    ) -> Registration:
        registration = self.ledger.set_approval(
            db, registration_id=registration_id, approved=approved
        )
        state = {True: "approved", False: "rejected", None: "pending"}[approved]
        logger.info(f"Registration {registration_id} set to {state}")
        return registration

    @translate_storage_errors
    def delete_registration(self, db: Session, *, registration_id: str) -> None:
        self.ledger.delete(db, registration_id=registration_id)
        logger.info(f"Registration {registration_id} deleted by admin")

    @translate_storage_errors
    def issue_token(self, db: Session, *, event_id: str) -> str:
        self._get_event(db, event_id)
        return self.tokens.issue(event_id)

    @translate_storage_errors
    def revoke_check_in(self, db: Session, *, registration_id: str) -> Registration:
        """Sets checked_in back to False; a no-op on registrations never checked in."""
        registration = self.ledger.set_checked_in(
            db, registration_id=registration_id, value=False
        )
        logger.info(f"Check-in revoked for registration {registration_id}")
        return registration


# Singleton instance
registration_workflow = RegistrationWorkflow(check_in_tokens)
