"""Request bodies for the JSON API."""

from datetime import date, datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

class LoginRequest(BaseModel):
    email: str
    password: str

class RegistrationRequest(BaseModel):
    occurrence_id: int

class AdminRegistrationRequest(BaseModel):
    person_id: int
    occurrence_id: int

class TemplateCreate(BaseModel):
    name: str = Field(min_length=1)
    event_type: Optional[str] = None
    description: Optional[str] = None
    recurrence_pattern: Optional[str] = None
    default_capacity: int = Field(default=50, gt=0)

class TemplateUpdate(BaseModel):
    name: Optional[str] = None
    event_type: Optional[str] = None
    description: Optional[str] = None
    recurrence_pattern: Optional[str] = None
    default_capacity: Optional[int] = None

class OccurrenceCreate(BaseModel):
    template_id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    name: Optional[str] = None
    location: Optional[str] = None
    capacity: Optional[int] = Field(default=None, gt=0)

class OccurrenceUpdate(BaseModel):
    template_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    name: Optional[str] = None
    location: Optional[str] = None
    capacity: Optional[int] = None

class TestimonialCreate(BaseModel):
    name: str = Field(min_length=1)
    quote: str = Field(min_length=1)
    is_active: bool = True
    display_order: int = 0

class TestimonialUpdate(BaseModel):
    name: Optional[str] = None
    quote: Optional[str] = None
    is_active: Optional[bool] = None
    display_order: Optional[int] = None

class SignupRequest(BaseModel):
    email: str
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    password: str
    confirm_password: Optional[str] = None
    occurrence_id: Optional[int] = None
    birthdate: Optional[date] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    school_or_employer: Optional[str] = None
    field_of_interest: Optional[str] = None
    newsletter: bool = False

class AttendanceRequest(BaseModel):
    attended: bool = True

class PersonCreate(BaseModel):
    email: str
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    birthdate: Optional[date] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

class PersonUpdate(BaseModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    birthdate: Optional[date] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

class RoleGrant(BaseModel):
    role: str = Field(min_length=1)
    password: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
