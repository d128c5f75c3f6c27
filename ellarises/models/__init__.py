"""Models package initialization."""

from .base import Base
from .person import (
    Person,
    Role,
    RoleAssignment,
    AdminDetail,
    VolunteerDetail,
    ParticipantDetail,
    ROLE_DETAIL_MODELS,
)
from .event import (
    EventTemplate,
    EventOccurrence,
    EventRegistration,
    REGISTRATION_ACTIVE,
    REGISTRATION_CANCELLED,
)
from .records import Survey, Milestone, Donation
from .testimonial import Testimonial

__all__ = [
    'Base',
    'Person',
    'Role',
    'RoleAssignment',
    'AdminDetail',
    'VolunteerDetail',
    'ParticipantDetail',
    'ROLE_DETAIL_MODELS',
    'EventTemplate',
    'EventOccurrence',
    'EventRegistration',
    'REGISTRATION_ACTIVE',
    'REGISTRATION_CANCELLED',
    'Survey',
    'Milestone',
    'Donation',
    'Testimonial',
]
