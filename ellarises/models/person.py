"""People, roles and role-specific detail records.

Table and column names are lower-case and unquoted so that they match the
existing PostgreSQL schema, whose identifiers were folded to lower case.
"""

from typing import Dict, Any
from sqlalchemy import Column, Integer, String, Date, Boolean, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from .base import Base

class Person(Base):
    """
    A person known to the site.

    Fields:
        id: Unique identifier (auto-generated)
        email: Login and contact address, unique across people
        first_name / last_name: Display name
        birthdate, phone, city, state, zip, country: Optional profile data
    """
    __tablename__ = 'people'

    id = Column('personid', Integer, primary_key=True, autoincrement=True)
    email = Column('email', String(255), nullable=False, unique=True)
    first_name = Column('firstname', String(100), nullable=False)
    last_name = Column('lastname', String(100), nullable=False)
    birthdate = Column('birthdate', Date)
    phone = Column('phonenumber', String(30))
    city = Column('city', String(100))
    state = Column('state', String(50))
    zip = Column('zip', String(20))
    country = Column('country', String(50), default='USA')

    roles = relationship('RoleAssignment', back_populates='person', cascade='all, delete-orphan')

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'phone': self.phone,
            'city': self.city,
            'state': self.state,
            'zip': self.zip,
        }

    def __str__(self) -> str:
        return f"Person(id={self.id}, email={self.email})"

class Role(Base):
    """A named capability such as Admin, Volunteer or Participant."""
    __tablename__ = 'roles'

    id = Column('roleid', Integer, primary_key=True, autoincrement=True)
    name = Column('rolename', String(50), nullable=False, unique=True)

    def __str__(self) -> str:
        return f"Role(id={self.id}, name={self.name})"

class RoleAssignment(Base):
    """Join of Person and Role; a person may hold several roles at once."""
    __tablename__ = 'peopleroles'

    person_id = Column('personid', Integer, ForeignKey('people.personid', ondelete='CASCADE'), primary_key=True)
    role_id = Column('roleid', Integer, ForeignKey('roles.roleid'), primary_key=True)

    person = relationship('Person', back_populates='roles')
    role = relationship('Role')

class AdminDetail(Base):
    __tablename__ = 'admindetails'

    person_id = Column('personid', Integer, ForeignKey('people.personid', ondelete='CASCADE'), primary_key=True)
    admin_role = Column('adminrole', String(100))
    salary = Column('salary', Numeric(10, 2))
    password = Column('password', String(255))

class VolunteerDetail(Base):
    __tablename__ = 'volunteerdetails'

    person_id = Column('personid', Integer, ForeignKey('people.personid', ondelete='CASCADE'), primary_key=True)
    volunteer_role = Column('volunteerrole', String(100))
    password = Column('password', String(255))

class ParticipantDetail(Base):
    __tablename__ = 'participantdetails'

    person_id = Column('personid', Integer, ForeignKey('people.personid', ondelete='CASCADE'), primary_key=True)
    school_or_employer = Column('participantschooloremployer', String(255))
    field_of_interest = Column('participantfieldofinterest', String(255))
    newsletter = Column('newsletter', Boolean, default=False)
    password = Column('password', String(255))

# Role name -> detail model. Lookups are case-insensitive on the role name.
ROLE_DETAIL_MODELS = {
    'admin': AdminDetail,
    'volunteer': VolunteerDetail,
    'participant': ParticipantDetail,
}
