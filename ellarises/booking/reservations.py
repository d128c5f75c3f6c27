"""Reservation writer.

Taking a seat is a single transaction that starts by locking the occurrence
row with a no-op UPDATE:

    UPDATE eventoccurrences SET eventcapacity = eventcapacity
    WHERE eventoccurrenceid = :id

The UPDATE holds the row lock (PostgreSQL) or the database write lock (SQLite)
until the transaction ends, so a second writer racing for the last seat waits
and then counts the registrations the first one committed. Capacity is always
checked against the live count of active registrations; no seat counter is
stored. Duplicate bookings are refused by a lookup under that lock and, as a
backstop, by the partial unique index on active registrations.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db import Database, with_retry
from ..errors import NotFound, CapacityExceeded, DuplicateRegistration, ConstraintViolation
from ..models import (
    EventOccurrence,
    EventRegistration,
    Person,
    REGISTRATION_ACTIVE,
    REGISTRATION_CANCELLED,
)

logger = logging.getLogger(__name__)

def _is_duplicate_violation(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return (
        'uq_eventregistrations_active_person_occurrence' in message
        or 'eventregistrations.personid, eventregistrations.eventoccurrenceid' in message
    )

def _find_active(session: Session, person_id: int, occurrence_id: int) -> Optional[EventRegistration]:
    return session.scalars(
        select(EventRegistration).where(
            EventRegistration.person_id == person_id,
            EventRegistration.occurrence_id == occurrence_id,
            EventRegistration.status == REGISTRATION_ACTIVE,
        )
    ).first()

def lock_occurrence(session: Session, occurrence_id: int) -> EventOccurrence:
    """
    Lock an occurrence for the rest of the transaction and return it.

    Must be the first statement of the transaction on SQLite, where only a
    writer that holds no read lock yet waits for the busy timeout.

    Raises:
        NotFound: The occurrence does not exist
    """
    matched = session.execute(
        update(EventOccurrence)
        .where(EventOccurrence.id == occurrence_id)
        .values(capacity=EventOccurrence.capacity)
        .execution_options(synchronize_session=False)
    ).rowcount
    if not matched:
        raise NotFound(f"Event occurrence {occurrence_id} does not exist")
    return session.scalars(
        select(EventOccurrence)
        .where(EventOccurrence.id == occurrence_id)
        .execution_options(populate_existing=True)
    ).one()

def reserve_seat(session: Session, person_id: int, occurrence_id: int) -> EventRegistration:
    """
    Register ``person_id`` for ``occurrence_id`` inside the caller's transaction.

    The caller commits. Any error leaves the transaction needing a rollback.

    Raises:
        NotFound: The occurrence or the person does not exist
        DuplicateRegistration: The person already holds an active registration
        CapacityExceeded: No seat was left at the time of the attempt
        ConstraintViolation: Any other integrity failure on insert
    """
    occurrence = lock_occurrence(session, occurrence_id)

    if session.get(Person, person_id) is None:
        raise NotFound(f"Person {person_id} does not exist")

    if _find_active(session, person_id, occurrence_id) is not None:
        raise DuplicateRegistration(
            f"Person {person_id} is already registered for occurrence {occurrence_id}"
        )

    taken = count_active_registrations(session, occurrence_id)
    if taken >= occurrence.capacity:
        logger.info(f"Occurrence {occurrence_id} is full; refused person {person_id}")
        raise CapacityExceeded(f"Event occurrence {occurrence_id} has no seats left")

    registration = EventRegistration(
        person_id=person_id,
        occurrence_id=occurrence_id,
        status=REGISTRATION_ACTIVE,
        attended=False,
        created_at=datetime.now(),
    )
    session.add(registration)
    try:
        session.flush()
    except IntegrityError as e:
        if _is_duplicate_violation(e):
            raise DuplicateRegistration(
                f"Person {person_id} is already registered for occurrence {occurrence_id}"
            ) from e
        raise ConstraintViolation(f"Registration rejected: {e.orig}") from e

    logger.info(f"Registered person {person_id} for occurrence {occurrence_id} (registration {registration.id})")
    return registration

@with_retry()
def book_seat(database: Database, person_id: int, occurrence_id: int) -> EventRegistration:
    """Run ``reserve_seat`` in its own committed transaction, retrying on transient lock errors."""
    with database.session() as session:
        return reserve_seat(session, person_id, occurrence_id)

def cancel_registration(
    session: Session,
    registration_id: int,
    person_id: Optional[int] = None,
) -> EventRegistration:
    """
    Cancel an active registration, which frees its seat.

    Args:
        session: Open database session; the caller commits
        registration_id: Registration to cancel
        person_id: When given, only a registration owned by this person matches

    Returns:
        The registration. Cancelling an already cancelled registration
        changes nothing.

    Raises:
        NotFound: No such registration (or it belongs to someone else)
    """
    ownership = [EventRegistration.person_id == person_id] if person_id is not None else []

    cancelled = session.execute(
        update(EventRegistration)
        .where(
            EventRegistration.id == registration_id,
            EventRegistration.status == REGISTRATION_ACTIVE,
            *ownership,
        )
        .values(status=REGISTRATION_CANCELLED, cancelled_at=datetime.now())
        .execution_options(synchronize_session=False)
    ).rowcount

    registration = session.scalars(
        select(EventRegistration)
        .where(EventRegistration.id == registration_id, *ownership)
        .execution_options(populate_existing=True)
    ).first()
    if registration is None:
        raise NotFound(f"Registration {registration_id} does not exist")

    if cancelled:
        logger.info(f"Cancelled registration {registration_id} for occurrence {registration.occurrence_id}")

    return registration

def list_registrations_for_person(
    session: Session,
    person_id: int,
    include_cancelled: bool = False,
) -> List[Dict[str, Any]]:
    """A person's registrations with the occurrence they point at, soonest first."""
    stmt = (
        select(EventRegistration, EventOccurrence)
        .join(EventOccurrence, EventRegistration.occurrence_id == EventOccurrence.id)
        .where(EventRegistration.person_id == person_id)
        .order_by(EventOccurrence.start_time.asc())
    )
    if not include_cancelled:
        stmt = stmt.where(EventRegistration.status == REGISTRATION_ACTIVE)

    results = []
    for registration, occurrence in session.execute(stmt).all():
        data = registration.to_dict()
        data['occurrence'] = occurrence.to_dict()
        results.append(data)
    return results

def count_active_registrations(session: Session, occurrence_id: int) -> int:
    return session.scalar(
        select(func.count())
        .select_from(EventRegistration)
        .where(
            EventRegistration.occurrence_id == occurrence_id,
            EventRegistration.status == REGISTRATION_ACTIVE,
        )
    ) or 0

def mark_attendance(session: Session, registration_id: int, attended: bool = True) -> EventRegistration:
    """
    Record whether the person showed up.

    Raises:
        NotFound: No such registration
        ConstraintViolation: The registration was cancelled
    """
    registration = session.get(EventRegistration, registration_id)
    if registration is None:
        raise NotFound(f"Registration {registration_id} does not exist")
    if not registration.is_active:
        raise ConstraintViolation(f"Registration {registration_id} is cancelled")

    registration.attended = attended
    session.flush()
    logger.info(f"Registration {registration_id} marked {'attended' if attended else 'not attended'}")
    return registration
