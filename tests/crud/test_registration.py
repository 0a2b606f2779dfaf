# tests/crud/test_registration.py
from datetime import datetime, timedelta, timezone

import pytest

from cloka_events.core.exceptions import (
    AlreadyRegisteredError,
    EventInPastError,
    EventNotFoundError,
    RegistrationNotFoundError,
)
from cloka_events.crud import crud_registration
from cloka_events.models.registration import Registration
from tests.utils.event import create_random_event

ledger = crud_registration.registration


def test_register_creates_pending_registration(db_session):
    event = create_random_event(db_session)

    registration = ledger.register(db_session, user_id="user_1", event_id=event.id)

    assert registration.id.startswith("reg_")
    assert registration.approved is None
    assert registration.checked_in is False
    assert registration.checked_in_at is None
    assert registration.created_at is not None


def test_register_twice_is_a_conflict(db_session):
    event = create_random_event(db_session)
    ledger.register(db_session, user_id="user_1", event_id=event.id)

    with pytest.raises(AlreadyRegisteredError):
        ledger.register(db_session, user_id="user_1", event_id=event.id)


def test_unique_constraint_wins_a_race(db_session, monkeypatch):
    """
    Simulates two concurrent requests: both pass the existence check before
    either commits. The unique constraint must reject the second insert.
    """
    event = create_random_event(db_session)
    ledger.register(db_session, user_id="user_1", event_id=event.id)

    monkeypatch.setattr(ledger, "get_by_user_and_event", lambda *a, **kw: None)

    with pytest.raises(AlreadyRegisteredError):
        ledger.register(db_session, user_id="user_1", event_id=event.id)

    assert (
        db_session.query(Registration)
        .filter_by(user_id="user_1", event_id=event.id)
        .count()
        == 1
    )


def test_register_unknown_event(db_session):
    with pytest.raises(EventNotFoundError):
        ledger.register(db_session, user_id="user_1", event_id="evt_missing")


def test_register_for_past_event(db_session):
    event = create_random_event(db_session, days_from_now=-1)

    with pytest.raises(EventInPastError):
        ledger.register(db_session, user_id="user_1", event_id=event.id)


def test_past_event_rejected_regardless_of_other_registrations(db_session):
    event = create_random_event(db_session, days_from_now=1)
    other = ledger.register(db_session, user_id="user_2", event_id=event.id)
    ledger.set_approval(db_session, registration_id=other.id, approved=True)
    ledger.set_checked_in(db_session, registration_id=other.id, value=True)

    later = datetime.now(timezone.utc) + timedelta(days=2)
    with pytest.raises(EventInPastError):
        ledger.register(db_session, user_id="user_1", event_id=event.id, now=later)


def test_cancel_deletes_and_allows_registering_again(db_session):
    event = create_random_event(db_session)
    ledger.register(db_session, user_id="user_1", event_id=event.id)

    ledger.cancel(db_session, user_id="user_1", event_id=event.id)

    assert ledger.get_by_user_and_event(
        db_session, user_id="user_1", event_id=event.id
    ) is None
    again = ledger.register(db_session, user_id="user_1", event_id=event.id)
    assert again.approved is None


def test_cancel_missing_registration(db_session):
    with pytest.raises(RegistrationNotFoundError):
        ledger.cancel(db_session, user_id="user_1", event_id="evt_missing")


@pytest.mark.parametrize("approved", [True, False, None])
def test_set_approval_is_idempotent(db_session, approved):
    event = create_random_event(db_session)
    registration = ledger.register(db_session, user_id="user_1", event_id=event.id)

    first = ledger.set_approval(
        db_session, registration_id=registration.id, approved=approved
    )
    second = ledger.set_approval(
        db_session, registration_id=registration.id, approved=approved
    )

    assert first.approved is approved
    assert second.approved is approved
    assert second.checked_in is False


def test_set_approval_missing_registration(db_session):
    with pytest.raises(RegistrationNotFoundError):
        ledger.set_approval(db_session, registration_id="reg_missing", approved=True)


def test_set_checked_in_stamps_and_clears_time(db_session):
    event = create_random_event(db_session)
    registration = ledger.register(db_session, user_id="user_1", event_id=event.id)

    checked = ledger.set_checked_in(
        db_session, registration_id=registration.id, value=True
    )
    assert checked.checked_in is True
    assert checked.checked_in_at is not None

    revoked = ledger.set_checked_in(
        db_session, registration_id=registration.id, value=False
    )
    assert revoked.checked_in is False
    assert revoked.checked_in_at is None


def test_mark_checked_in_requires_approval(db_session):
    event = create_random_event(db_session)
    registration = ledger.register(db_session, user_id="user_1", event_id=event.id)

    updated, row = ledger.mark_checked_in(db_session, registration_id=registration.id)

    assert updated is False
    assert row.checked_in is False


def test_mark_checked_in_only_once(db_session):
    event = create_random_event(db_session)
    registration = ledger.register(db_session, user_id="user_1", event_id=event.id)
    ledger.set_approval(db_session, registration_id=registration.id, approved=True)

    first, row = ledger.mark_checked_in(db_session, registration_id=registration.id)
    second, _ = ledger.mark_checked_in(db_session, registration_id=registration.id)

    assert first is True
    assert row.checked_in is True
    assert row.checked_in_at is not None
    assert second is False


def test_get_multi_filtered_by_approval(db_session):
    event = create_random_event(db_session)
    pending = ledger.register(db_session, user_id="user_1", event_id=event.id)
    approved = ledger.register(db_session, user_id="user_2", event_id=event.id)
    rejected = ledger.register(db_session, user_id="user_3", event_id=event.id)
    ledger.set_approval(db_session, registration_id=approved.id, approved=True)
    ledger.set_approval(db_session, registration_id=rejected.id, approved=False)

    result = ledger.get_multi_filtered(db_session, event_id=event.id, approved=None)
    assert [r.id for r in result["data"]] == [pending.id]

    result = ledger.get_multi_filtered(db_session, event_id=event.id, approved=True)
    assert [r.id for r in result["data"]] == [approved.id]

    result = ledger.get_multi_filtered(db_session, event_id=event.id, limit=2)
    assert result["pagination"] == {"total": 3, "page": 1, "limit": 2, "pages": 2}


def test_get_stats(db_session):
    first = create_random_event(db_session)
    second = create_random_event(db_session)
    a = ledger.register(db_session, user_id="user_1", event_id=first.id)
    b = ledger.register(db_session, user_id="user_2", event_id=first.id)
    ledger.register(db_session, user_id="user_1", event_id=second.id)
    ledger.set_approval(db_session, registration_id=a.id, approved=True)
    ledger.set_approval(db_session, registration_id=b.id, approved=False)

    stats = ledger.get_stats(db_session)
    assert stats == {
        "total": 3,
        "approved": 1,
        "rejected": 1,
        "pending": 1,
        "events_count": 2,
        "users_count": 2,
    }

    scoped = ledger.get_stats(db_session, event_id=second.id)
    assert scoped["total"] == 1
    assert scoped["pending"] == 1
    assert scoped["events_count"] == 1
