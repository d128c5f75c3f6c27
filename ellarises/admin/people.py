"""People, role assignments and role detail records.

A role detail row (admin, volunteer, participant) may only exist for a role
the person actually holds in ``peopleroles``.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from ..passwords import hash_password
from ..errors import NotFound, ConstraintViolation
from ..booking.reservations import reserve_seat
from ..models import (
    EventRegistration,
    Milestone,
    Person,
    Role,
    RoleAssignment,
    ROLE_DETAIL_MODELS,
)

logger = logging.getLogger(__name__)

PERSON_FIELDS = ('email', 'first_name', 'last_name', 'birthdate', 'phone', 'city', 'state', 'zip', 'country')
REQUIRED_PERSON_FIELDS = ('email', 'first_name', 'last_name')
MIN_PASSWORD_LENGTH = 6

DEFAULT_ROLES = ('Admin', 'Volunteer', 'Participant')

# Order in which role credentials are tried at login
LOGIN_ROLE_ORDER = ('admin', 'volunteer', 'participant')

def _detail_model(role_name: str):
    model = ROLE_DETAIL_MODELS.get(role_name.lower())
    if model is None:
        raise ConstraintViolation(f"Role '{role_name}' has no detail record")
    return model

def get_person(session: Session, person_id: int) -> Person:
    person = session.get(Person, person_id)
    if person is None:
        raise NotFound(f"Person {person_id} does not exist")
    return person

def find_person_by_email(session: Session, email: str) -> Optional[Person]:
    """Case-insensitive email lookup."""
    return session.scalars(
        select(Person).where(func.lower(Person.email) == email.strip().lower())
    ).first()

def create_person(session: Session, email: str, first_name: str, last_name: str, **profile: Any) -> Person:
    if not email or '@' not in email:
        raise ConstraintViolation("A valid email address is required")
    if find_person_by_email(session, email) is not None:
        raise ConstraintViolation(f"A person with email {email} already exists")

    person = Person(email=email.strip(), first_name=first_name, last_name=last_name, **profile)
    session.add(person)
    session.flush()
    logger.info(f"Created person {person.id}")
    return person

def get_or_create_role(session: Session, role_name: str) -> Role:
    role = session.scalars(select(Role).where(func.lower(Role.name) == role_name.lower())).first()
    if role is None:
        role = Role(name=role_name)
        session.add(role)
        session.flush()
        logger.info(f"Created role {role.name}")
    return role

def seed_roles(session: Session) -> List[Role]:
    return [get_or_create_role(session, name) for name in DEFAULT_ROLES]

def role_names_for(session: Session, person_id: int) -> List[str]:
    return list(session.scalars(
        select(Role.name)
        .join(RoleAssignment, RoleAssignment.role_id == Role.id)
        .where(RoleAssignment.person_id == person_id)
    ))

def assign_role(session: Session, person_id: int, role_name: str) -> RoleAssignment:
    """Give a person a role. Assigning a role they already hold is a no-op."""
    get_person(session, person_id)
    role = get_or_create_role(session, role_name)
    assignment = session.get(RoleAssignment, (person_id, role.id))
    if assignment is None:
        assignment = RoleAssignment(person_id=person_id, role_id=role.id)
        session.add(assignment)
        session.flush()
        logger.info(f"Assigned role {role.name} to person {person_id}")
    return assignment

def assign_role_detail(
    session: Session,
    person_id: int,
    role_name: str,
    password: Optional[str] = None,
    **attributes: Any,
):
    """
    Create or update the role-specific detail row for a person.

    Args:
        session: Open database session
        person_id: Person the detail belongs to
        role_name: Admin, Volunteer or Participant (any case)
        password: Plain-text password; stored as a bcrypt hash
        **attributes: Role-specific columns (e.g. ``volunteer_role``)

    Raises:
        NotFound: The person does not exist
        ConstraintViolation: The person isn't assigned ``role_name``
    """
    model = _detail_model(role_name)
    get_person(session, person_id)

    held = {name.lower() for name in role_names_for(session, person_id)}
    if role_name.lower() not in held:
        raise ConstraintViolation(
            f"Person {person_id} is not assigned the {role_name} role"
        )

    detail = session.get(model, person_id)
    if detail is None:
        detail = model(person_id=person_id)
        session.add(detail)
    for field, value in attributes.items():
        if not hasattr(model, field):
            raise ConstraintViolation(f"Unknown {role_name} detail field '{field}'")
        setattr(detail, field, value)
    if password is not None:
        detail.password = hash_password(password)
    session.flush()
    return detail

def login_candidates(session: Session, email: str) -> List[Tuple[Person, str, Optional[str]]]:
    """
    (person, role name, password hash) for every role the person holds,
    in LOGIN_ROLE_ORDER.
    """
    person = find_person_by_email(session, email)
    if person is None:
        return []

    candidates = []
    held = {name.lower(): name for name in role_names_for(session, person.id)}
    for role_key in LOGIN_ROLE_ORDER:
        if role_key not in held:
            continue
        detail = session.get(ROLE_DETAIL_MODELS[role_key], person.id)
        candidates.append((person, held[role_key], detail.password if detail else None))
    return candidates

def person_summary(session: Session, person_id: int) -> Dict[str, Any]:
    person = get_person(session, person_id)
    data = person.to_dict()
    data['roles'] = role_names_for(session, person_id)
    return data

def list_people(session: Session, role_name: Optional[str] = None) -> List[Dict[str, Any]]:
    """People with their role names, newest first. ``role_name`` keeps only holders of that role."""
    stmt = select(Person).order_by(Person.id.desc())
    if role_name:
        stmt = stmt.where(
            Person.id.in_(
                select(RoleAssignment.person_id)
                .join(Role, RoleAssignment.role_id == Role.id)
                .where(func.lower(Role.name) == role_name.lower())
            )
        )

    results = []
    for person in session.scalars(stmt):
        data = person.to_dict()
        data['roles'] = role_names_for(session, person.id)
        results.append(data)
    return results

def update_person(session: Session, person_id: int, changes: Dict[str, Any]) -> Person:
    """
    Apply profile ``changes`` to a person.

    Raises:
        NotFound: The person does not exist
        ConstraintViolation: A required field is emptied, or the email belongs to someone else
    """
    person = get_person(session, person_id)
    changes = {field: value for field, value in changes.items() if field in PERSON_FIELDS}

    for field in REQUIRED_PERSON_FIELDS:
        if field in changes and not (changes[field] or '').strip():
            raise ConstraintViolation(f"{field} can't be empty")

    if 'email' in changes:
        owner = find_person_by_email(session, changes['email'])
        if owner is not None and owner.id != person_id:
            raise ConstraintViolation(f"A person with email {changes['email']} already exists")
        changes['email'] = changes['email'].strip()

    for field, value in changes.items():
        setattr(person, field, value)
    session.flush()
    logger.info(f"Updated person {person_id}")
    return person

def delete_person(session: Session, person_id: int) -> None:
    """Delete a person with their roles and role details. People with registrations or milestones are kept."""
    person = get_person(session, person_id)

    registrations = session.scalar(
        select(func.count()).select_from(EventRegistration).where(EventRegistration.person_id == person_id)
    )
    milestones = session.scalar(
        select(func.count()).select_from(Milestone).where(Milestone.person_id == person_id)
    )
    if registrations or milestones:
        raise ConstraintViolation(
            f"Person {person_id} has {registrations} registration(s) and {milestones} milestone(s); "
            "they can't be deleted"
        )

    for model in ROLE_DETAIL_MODELS.values():
        detail = session.get(model, person_id)
        if detail is not None:
            session.delete(detail)
    session.delete(person)
    session.flush()
    logger.info(f"Deleted person {person_id}")

def register_participant(
    session: Session,
    email: str,
    first_name: str,
    last_name: str,
    password: str,
    occurrence_id: Optional[int] = None,
    school_or_employer: Optional[str] = None,
    field_of_interest: Optional[str] = None,
    newsletter: bool = False,
    **profile: Any,
) -> Tuple[Person, Optional[EventRegistration]]:
    """
    Public signup: a new person with the Participant role and credentials,
    optionally booked into ``occurrence_id`` in the same transaction.

    Returns:
        (person, registration) where registration is None without an occurrence

    Raises:
        ConstraintViolation: Short password, bad or taken email
        NotFound / CapacityExceeded: From the booking; nothing is created then
    """
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ConstraintViolation(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    person = create_person(session, email, first_name, last_name, **profile)
    assign_role(session, person.id, 'Participant')
    assign_role_detail(
        session,
        person.id,
        'Participant',
        password=password,
        school_or_employer=school_or_employer,
        field_of_interest=field_of_interest,
        newsletter=newsletter,
    )

    registration = None
    if occurrence_id is not None:
        registration = reserve_seat(session, person.id, occurrence_id)
    logger.info(f"Signed up participant {person.id}")
    return person, registration

def grant_role(
    session: Session,
    person_id: int,
    role_name: str,
    password: Optional[str] = None,
    **details: Any,
) -> Dict[str, Any]:
    """Assign a role and, for roles that have one, write its detail record in the same step."""
    assign_role(session, person_id, role_name)
    if role_name.lower() in ROLE_DETAIL_MODELS:
        assign_role_detail(session, person_id, role_name, password=password, **details)
    elif password is not None or details:
        raise ConstraintViolation(f"Role '{role_name}' has no detail record")
    return person_summary(session, person_id)
