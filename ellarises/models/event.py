"""Event templates, their dated occurrences and the registrations against them."""

from datetime import datetime
from typing import Dict, Any, Optional
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    Boolean,
    ForeignKey,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from .base import Base

REGISTRATION_ACTIVE = 'Registered'
REGISTRATION_CANCELLED = 'Cancelled'

class EventTemplate(Base):
    """
    A reusable event definition.

    Fields:
        id: Unique identifier (auto-generated, reconciled at startup)
        name: Program name shown to visitors
        event_type: Free-form category (workshop, summit, ...)
        description: Long description
        recurrence_pattern: Human readable recurrence note (e.g. 'Monthly')
        default_capacity: Seats used when an occurrence doesn't specify its own
    """
    __tablename__ = 'eventtemplate'
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column('eventtemplateid', Integer, primary_key=True, autoincrement=True)
    name = Column('eventname', String(255), nullable=False)
    event_type = Column('eventtype', String(100))
    description = Column('eventdescription', Text)
    recurrence_pattern = Column('eventrecurrencepattern', String(100))
    default_capacity = Column('eventdefaultcapacity', Integer, nullable=False, default=50)

    occurrences = relationship('EventOccurrence', back_populates='template')

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'event_type': self.event_type,
            'description': self.description,
            'recurrence_pattern': self.recurrence_pattern,
            'default_capacity': self.default_capacity,
        }

    def __str__(self) -> str:
        return f"EventTemplate(id={self.id}, name={self.name})"

class EventOccurrence(Base):
    """
    A concrete, dated instance of an event template.

    Seats are never stored: remaining = capacity - count(active registrations).
    """
    __tablename__ = 'eventoccurrences'
    __table_args__ = (
        CheckConstraint('eventcapacity > 0', name='ck_eventoccurrences_capacity_positive'),
        {'sqlite_autoincrement': True},
    )

    id = Column('eventoccurrenceid', Integer, primary_key=True, autoincrement=True)
    template_id = Column('eventtemplateid', Integer, ForeignKey('eventtemplate.eventtemplateid'), nullable=False)
    name = Column('eventname', String(255), nullable=False)
    start_time = Column('eventdatetimestart', DateTime, nullable=False, index=True)
    end_time = Column('eventdatetimeend', DateTime)
    location = Column('eventlocation', String(255))
    capacity = Column('eventcapacity', Integer, nullable=False)

    template = relationship('EventTemplate', back_populates='occurrences')
    registrations = relationship(
        'EventRegistration',
        back_populates='occurrence',
        cascade='all, delete-orphan',
    )

    def to_dict(self, remaining: Optional[int] = None) -> Dict[str, Any]:
        """Convert to dictionary, optionally including the remaining seat count."""
        data = {
            'id': self.id,
            'template_id': self.template_id,
            'name': self.name,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'location': self.location,
            'capacity': self.capacity,
        }
        if remaining is not None:
            data['remaining'] = remaining
        return data

    def __str__(self) -> str:
        return f"EventOccurrence(id={self.id}, name={self.name}, start_time={self.start_time})"

class EventRegistration(Base):
    """One person holding one seat in one occurrence."""
    __tablename__ = 'eventregistrations'

    id = Column('registrationid', Integer, primary_key=True, autoincrement=True)
    person_id = Column('personid', Integer, ForeignKey('people.personid'), nullable=False, index=True)
    occurrence_id = Column(
        'eventoccurrenceid',
        Integer,
        ForeignKey('eventoccurrences.eventoccurrenceid'),
        nullable=False,
        index=True,
    )
    status = Column('registrationstatus', String(20), nullable=False, default=REGISTRATION_ACTIVE)
    attended = Column('registrationattendedflag', Boolean, nullable=False, default=False)
    created_at = Column('registrationcreatedat', DateTime, nullable=False, default=datetime.now)
    cancelled_at = Column('registrationcancelledat', DateTime)

    occurrence = relationship('EventOccurrence', back_populates='registrations')
    person = relationship('Person')

    @property
    def is_active(self) -> bool:
        return self.status == REGISTRATION_ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'person_id': self.person_id,
            'occurrence_id': self.occurrence_id,
            'status': self.status,
            'attended': self.attended,
            'created_at': self.created_at,
            'cancelled_at': self.cancelled_at,
        }

    def __str__(self) -> str:
        return (
            f"EventRegistration(id={self.id}, person_id={self.person_id}, "
            f"occurrence_id={self.occurrence_id}, status={self.status})"
        )

# At most one active registration per (person, occurrence). Cancelled rows are
# kept for history and don't count.
Index(
    'uq_eventregistrations_active_person_occurrence',
    EventRegistration.person_id,
    EventRegistration.occurrence_id,
    unique=True,
    postgresql_where=(EventRegistration.status == REGISTRATION_ACTIVE),
    sqlite_where=(EventRegistration.status == REGISTRATION_ACTIVE),
)
