"""Back-office operations on event templates and occurrences.

Deletion policy: an occurrence that still has active registrations cannot be
deleted; cancel the registrations first. Cancelled registrations are removed
together with the occurrence. A template cannot be deleted while any
occurrence references it.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from ..booking.reservations import count_active_registrations, lock_occurrence
from ..errors import NotFound, ConstraintViolation
from ..models import EventTemplate, EventOccurrence

logger = logging.getLogger(__name__)

TEMPLATE_FIELDS = ('name', 'event_type', 'description', 'recurrence_pattern', 'default_capacity')
OCCURRENCE_FIELDS = ('template_id', 'name', 'start_time', 'end_time', 'location', 'capacity')
REQUIRED_OCCURRENCE_FIELDS = ('template_id', 'name', 'start_time', 'capacity')

def _require_positive(value: Optional[int], field: str) -> None:
    if value is None or value <= 0:
        raise ConstraintViolation(f"{field} must be a positive number")

def _require_ordered(start_time: datetime, end_time: Optional[datetime]) -> None:
    if end_time is not None and end_time < start_time:
        raise ConstraintViolation("An event can't end before it starts")

def get_template(session: Session, template_id: int) -> EventTemplate:
    template = session.get(EventTemplate, template_id)
    if template is None:
        raise NotFound(f"Event template {template_id} does not exist")
    return template

def list_templates(session: Session) -> List[EventTemplate]:
    return list(session.scalars(select(EventTemplate).order_by(EventTemplate.name)))

def create_template(
    session: Session,
    name: str,
    event_type: Optional[str] = None,
    description: Optional[str] = None,
    recurrence_pattern: Optional[str] = None,
    default_capacity: int = 50,
) -> EventTemplate:
    """Create a reusable event definition."""
    if not name or not name.strip():
        raise ConstraintViolation("Template name is required")
    _require_positive(default_capacity, 'default_capacity')

    template = EventTemplate(
        name=name.strip(),
        event_type=event_type,
        description=description,
        recurrence_pattern=recurrence_pattern,
        default_capacity=default_capacity,
    )
    session.add(template)
    session.flush()
    logger.info(f"Created event template {template.id} ({template.name})")
    return template

def update_template(session: Session, template_id: int, changes: Dict[str, Any]) -> EventTemplate:
    """Apply ``changes`` (only known fields) to a template."""
    template = get_template(session, template_id)
    for field, value in changes.items():
        if field not in TEMPLATE_FIELDS:
            continue
        if field == 'default_capacity':
            _require_positive(value, field)
        if field == 'name' and (not value or not value.strip()):
            raise ConstraintViolation("Template name is required")
        setattr(template, field, value)
    session.flush()
    logger.info(f"Updated event template {template_id}")
    return template

def delete_template(session: Session, template_id: int) -> None:
    template = get_template(session, template_id)
    occurrences = session.scalar(
        select(func.count()).select_from(EventOccurrence).where(EventOccurrence.template_id == template_id)
    )
    if occurrences:
        raise ConstraintViolation(
            f"Event template {template_id} still has {occurrences} occurrence(s); delete them first"
        )
    session.delete(template)
    session.flush()
    logger.info(f"Deleted event template {template_id}")

def get_occurrence(session: Session, occurrence_id: int, lock: bool = False) -> EventOccurrence:
    """With ``lock``, take the occurrence lock first; it must then be the first statement of the transaction."""
    if lock:
        return lock_occurrence(session, occurrence_id)
    occurrence = session.get(EventOccurrence, occurrence_id)
    if occurrence is None:
        raise NotFound(f"Event occurrence {occurrence_id} does not exist")
    return occurrence

def create_occurrence(
    session: Session,
    template_id: int,
    start_time: datetime,
    end_time: Optional[datetime] = None,
    name: Optional[str] = None,
    location: Optional[str] = None,
    capacity: Optional[int] = None,
) -> EventOccurrence:
    """
    Schedule a dated instance of a template.

    The name and capacity default to the template's name and default capacity.
    """
    template = get_template(session, template_id)
    capacity = template.default_capacity if capacity is None else capacity
    _require_positive(capacity, 'capacity')
    _require_ordered(start_time, end_time)

    occurrence = EventOccurrence(
        template_id=template.id,
        name=name or template.name,
        start_time=start_time,
        end_time=end_time,
        location=location,
        capacity=capacity,
    )
    session.add(occurrence)
    session.flush()
    logger.info(f"Created occurrence {occurrence.id} of template {template.id} at {start_time}")
    return occurrence

def update_occurrence(session: Session, occurrence_id: int, changes: Dict[str, Any]) -> EventOccurrence:
    """
    Apply ``changes`` to an occurrence.

    The occurrence is locked first so that a capacity change can't race a booking.

    Raises:
        NotFound: The occurrence or a newly referenced template does not exist
        ConstraintViolation: A required field set to null, capacity below the
            active registrations, or end before start
    """
    occurrence = get_occurrence(session, occurrence_id, lock=True)
    changes = {field: value for field, value in changes.items() if field in OCCURRENCE_FIELDS}
    for field in REQUIRED_OCCURRENCE_FIELDS:
        if field in changes and changes[field] is None:
            raise ConstraintViolation(f"{field} can't be empty")
    if 'name' in changes and not changes['name'].strip():
        raise ConstraintViolation("name can't be empty")

    if 'template_id' in changes:
        get_template(session, changes['template_id'])

    if 'capacity' in changes:
        _require_positive(changes['capacity'], 'capacity')
        taken = count_active_registrations(session, occurrence_id)
        if changes['capacity'] < taken:
            raise ConstraintViolation(
                f"Capacity can't drop below the {taken} active registration(s)"
            )

    start_time = changes.get('start_time', occurrence.start_time)
    end_time = changes.get('end_time', occurrence.end_time)
    _require_ordered(start_time, end_time)

    for field, value in changes.items():
        setattr(occurrence, field, value)
    session.flush()
    logger.info(f"Updated occurrence {occurrence_id}: {', '.join(sorted(changes)) or 'no changes'}")
    return occurrence

def delete_occurrence(session: Session, occurrence_id: int) -> None:
    """Delete an occurrence that has no active registrations."""
    occurrence = get_occurrence(session, occurrence_id, lock=True)
    taken = count_active_registrations(session, occurrence_id)
    if taken:
        raise ConstraintViolation(
            f"Event occurrence {occurrence_id} has {taken} active registration(s); cancel them before deleting"
        )
    session.delete(occurrence)
    session.flush()
    logger.info(f"Deleted occurrence {occurrence_id}")
