"""Availability queries.

``remaining`` is always derived from the registrations table:
``capacity - count(active registrations)``. The public query drops
occurrences with nothing left; sold-out displays use
``list_occurrences_with_remaining`` instead.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from ..models import EventOccurrence, EventRegistration, EventTemplate, REGISTRATION_ACTIVE

logger = logging.getLogger(__name__)

@dataclass
class AvailableOccurrence:
    """
    An occurrence together with its seat count.

    Fields:
        id: Occurrence id
        template_id: Template the occurrence was created from
        name: Display name
        event_type: Category copied from the template
        start_time / end_time: Scheduled times
        location: Where it takes place (optional)
        capacity: Total seats
        remaining: Seats not held by an active registration
    """
    id: int
    template_id: int
    name: str
    event_type: Optional[str]
    start_time: datetime
    end_time: Optional[datetime]
    location: Optional[str]
    capacity: int
    remaining: int

    @property
    def sold_out(self) -> bool:
        return self.remaining <= 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['sold_out'] = self.sold_out
        return data

def _active_counts():
    return (
        select(
            EventRegistration.occurrence_id.label('occurrence_id'),
            func.count().label('taken'),
        )
        .where(EventRegistration.status == REGISTRATION_ACTIVE)
        .group_by(EventRegistration.occurrence_id)
        .subquery('active_counts')
    )

def _occurrence_query(on_date: Optional[date] = None, template_id: Optional[int] = None, available_only: bool = False):
    counts = _active_counts()
    remaining = EventOccurrence.capacity - func.coalesce(counts.c.taken, 0)

    stmt = (
        select(EventOccurrence, EventTemplate.event_type, remaining.label('remaining'))
        .join(EventTemplate, EventOccurrence.template_id == EventTemplate.id)
        .outerjoin(counts, counts.c.occurrence_id == EventOccurrence.id)
    )

    if on_date is not None:
        day_start = datetime.combine(on_date, time.min)
        stmt = stmt.where(
            EventOccurrence.start_time >= day_start,
            EventOccurrence.start_time < day_start + timedelta(days=1),
        )
    if template_id is not None:
        stmt = stmt.where(EventOccurrence.template_id == template_id)
    if available_only:
        stmt = stmt.where(remaining > 0)

    return stmt.order_by(EventOccurrence.start_time.asc(), EventOccurrence.id.asc())

def _to_available(occurrence: EventOccurrence, event_type: Optional[str], remaining: int) -> AvailableOccurrence:
    return AvailableOccurrence(
        id=occurrence.id,
        template_id=occurrence.template_id,
        name=occurrence.name,
        event_type=event_type,
        start_time=occurrence.start_time,
        end_time=occurrence.end_time,
        location=occurrence.location,
        capacity=occurrence.capacity,
        remaining=int(remaining),
    )

def find_available_occurrences(
    session: Session,
    on_date: date,
    template_id: Optional[int] = None,
) -> List[AvailableOccurrence]:
    """
    Occurrences starting on ``on_date`` that still have seats.

    Args:
        session: Open database session
        on_date: Calendar date to look at
        template_id: Only return occurrences of this template

    Returns:
        Occurrences with ``remaining > 0`` ordered by start time. A date with
        no occurrences gives an empty list.
    """
    rows = session.execute(_occurrence_query(on_date, template_id, available_only=True)).all()
    results = [_to_available(occ, event_type, remaining) for occ, event_type, remaining in rows]
    logger.debug(f"{len(results)} available occurrences on {on_date}")
    return results

def list_occurrences_with_remaining(
    session: Session,
    on_date: Optional[date] = None,
    template_id: Optional[int] = None,
) -> List[AvailableOccurrence]:
    """All matching occurrences, full ones included, with their remaining seats."""
    rows = session.execute(_occurrence_query(on_date, template_id)).all()
    return [_to_available(occ, event_type, remaining) for occ, event_type, remaining in rows]

def find_available_dates(
    session: Session,
    start: date,
    days: int = 31,
    template_id: Optional[int] = None,
) -> List[date]:
    """Distinct dates in ``[start, start + days)`` with at least one bookable occurrence."""
    if days <= 0:
        return []

    counts = _active_counts()
    remaining = EventOccurrence.capacity - func.coalesce(counts.c.taken, 0)
    window_start = datetime.combine(start, time.min)

    stmt = (
        select(EventOccurrence.start_time)
        .outerjoin(counts, counts.c.occurrence_id == EventOccurrence.id)
        .where(
            EventOccurrence.start_time >= window_start,
            EventOccurrence.start_time < window_start + timedelta(days=days),
            remaining > 0,
        )
    )
    if template_id is not None:
        stmt = stmt.where(EventOccurrence.template_id == template_id)

    return sorted({start_time.date() for start_time in session.scalars(stmt)})
