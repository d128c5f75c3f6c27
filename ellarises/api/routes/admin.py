"""Back-office routes. Every route requires a manager session."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...admin import events as event_admin
from ...admin import people as people_admin
from ...admin import testimonials as testimonial_admin
from ...booking import book_seat, cancel_registration, list_occurrences_with_remaining, mark_attendance
from ..deps import RequestContext, require_manager
from ..schemas import (
    AdminRegistrationRequest,
    AttendanceRequest,
    OccurrenceCreate,
    OccurrenceUpdate,
    PersonCreate,
    PersonUpdate,
    RoleGrant,
    TemplateCreate,
    TemplateUpdate,
    TestimonialCreate,
    TestimonialUpdate,
)

router = APIRouter(prefix="/admin", tags=["admin"])

# Event templates

@router.get("/templates")
def list_templates(ctx: RequestContext = Depends(require_manager)):
    with ctx.transaction() as session:
        return [t.to_dict() for t in event_admin.list_templates(session)]

@router.post("/templates", status_code=201)
def create_template(body: TemplateCreate, ctx: RequestContext = Depends(require_manager)):
    return ctx.run(event_admin.create_template, **body.model_dump()).to_dict()

@router.put("/templates/{template_id}")
def update_template(template_id: int, body: TemplateUpdate, ctx: RequestContext = Depends(require_manager)):
    template = ctx.run(event_admin.update_template, template_id, body.model_dump(exclude_unset=True))
    return template.to_dict()

@router.delete("/templates/{template_id}")
def delete_template(template_id: int, ctx: RequestContext = Depends(require_manager)):
    ctx.run(event_admin.delete_template, template_id)
    return {"status": "success", "message": "Event template deleted"}

# Event occurrences

@router.get("/occurrences")
def list_occurrences(
    on_date: Optional[date] = Query(None, alias="date"),
    template_id: Optional[int] = None,
    ctx: RequestContext = Depends(require_manager),
):
    with ctx.transaction() as session:
        occurrences = list_occurrences_with_remaining(session, on_date, template_id)
    return [occ.to_dict() for occ in occurrences]

@router.post("/occurrences", status_code=201)
def create_occurrence(body: OccurrenceCreate, ctx: RequestContext = Depends(require_manager)):
    occurrence = ctx.run(event_admin.create_occurrence, **body.model_dump())
    return occurrence.to_dict(remaining=occurrence.capacity)

@router.put("/occurrences/{occurrence_id}")
def update_occurrence(occurrence_id: int, body: OccurrenceUpdate, ctx: RequestContext = Depends(require_manager)):
    occurrence = ctx.run(event_admin.update_occurrence, occurrence_id, body.model_dump(exclude_unset=True))
    return occurrence.to_dict()

@router.delete("/occurrences/{occurrence_id}")
def delete_occurrence(occurrence_id: int, ctx: RequestContext = Depends(require_manager)):
    ctx.run(event_admin.delete_occurrence, occurrence_id)
    return {"status": "success", "message": "Event occurrence deleted"}

# Registrations

@router.post("/registrations", status_code=201)
def register_person(body: AdminRegistrationRequest, ctx: RequestContext = Depends(require_manager)):
    """Book a seat on someone's behalf, through the same writer as the public flow."""
    registration = book_seat(ctx.require_database(), body.person_id, body.occurrence_id)
    return {"status": "success", "registration": registration.to_dict()}

@router.post("/registrations/{registration_id}/cancel")
def cancel_any_registration(registration_id: int, ctx: RequestContext = Depends(require_manager)):
    registration = ctx.run(cancel_registration, registration_id)
    return {"status": "success", "registration": registration.to_dict()}

@router.post("/registrations/{registration_id}/attendance")
def record_attendance(
    registration_id: int,
    body: AttendanceRequest,
    ctx: RequestContext = Depends(require_manager),
):
    registration = ctx.run(mark_attendance, registration_id, body.attended)
    return {"status": "success", "registration": registration.to_dict()}

# People

@router.get("/people")
def list_people(role: Optional[str] = None, ctx: RequestContext = Depends(require_manager)):
    with ctx.transaction() as session:
        return people_admin.list_people(session, role)

@router.get("/people/{person_id}")
def get_person(person_id: int, ctx: RequestContext = Depends(require_manager)):
    with ctx.transaction() as session:
        return people_admin.person_summary(session, person_id)

@router.post("/people", status_code=201)
def create_person(body: PersonCreate, ctx: RequestContext = Depends(require_manager)):
    return ctx.run(people_admin.create_person, **body.model_dump()).to_dict()

@router.put("/people/{person_id}")
def update_person(person_id: int, body: PersonUpdate, ctx: RequestContext = Depends(require_manager)):
    return ctx.run(people_admin.update_person, person_id, body.model_dump(exclude_unset=True)).to_dict()

@router.delete("/people/{person_id}")
def delete_person(person_id: int, ctx: RequestContext = Depends(require_manager)):
    ctx.run(people_admin.delete_person, person_id)
    return {"status": "success", "message": "Person deleted"}

@router.post("/people/{person_id}/roles")
def grant_role(person_id: int, body: RoleGrant, ctx: RequestContext = Depends(require_manager)):
    """Assign a role and write its detail record (credentials included) in one step."""
    return ctx.run(people_admin.grant_role, person_id, body.role, password=body.password, **body.details)

# Testimonials

@router.get("/testimonials")
def list_testimonials(ctx: RequestContext = Depends(require_manager)):
    with ctx.transaction() as session:
        return [t.to_dict() for t in testimonial_admin.list_testimonials(session)]

@router.post("/testimonials", status_code=201)
def create_testimonial(body: TestimonialCreate, ctx: RequestContext = Depends(require_manager)):
    return ctx.run(testimonial_admin.create_testimonial, **body.model_dump()).to_dict()

@router.put("/testimonials/{testimonial_id}")
def update_testimonial(testimonial_id: int, body: TestimonialUpdate, ctx: RequestContext = Depends(require_manager)):
    testimonial = ctx.run(
        testimonial_admin.update_testimonial, testimonial_id, body.model_dump(exclude_unset=True)
    )
    return testimonial.to_dict()

@router.delete("/testimonials/{testimonial_id}")
def delete_testimonial(testimonial_id: int, ctx: RequestContext = Depends(require_manager)):
    ctx.run(testimonial_admin.delete_testimonial, testimonial_id)
    return {"status": "success", "message": "Testimonial deleted"}
