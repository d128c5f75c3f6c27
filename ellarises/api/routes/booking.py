"""Customer-facing booking routes."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...admin.testimonials import list_testimonials
from ...booking import (
    find_available_occurrences,
    find_available_dates,
    list_occurrences_with_remaining,
    book_seat,
    cancel_registration,
    list_registrations_for_person,
)
from ..deps import RequestContext, get_request_context, require_auth
from ..schemas import RegistrationRequest

router = APIRouter(tags=["booking"])

@router.get("/availability")
def get_availability(
    on_date: date = Query(..., alias="date"),
    template_id: Optional[int] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    """Occurrences on a date that still have seats, earliest first."""
    with ctx.transaction() as session:
        occurrences = find_available_occurrences(session, on_date, template_id)
    return {"date": on_date, "occurrences": [occ.to_dict() for occ in occurrences]}

@router.get("/available-dates")
def get_available_dates(
    start: Optional[date] = None,
    days: int = Query(31, ge=1, le=366),
    template_id: Optional[int] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    """Dates in a window that have at least one bookable occurrence (date picker)."""
    start = start or date.today()
    with ctx.transaction() as session:
        dates = find_available_dates(session, start, days, template_id)
    return {"start": start, "days": days, "dates": dates}

@router.get("/occurrences")
def get_occurrences(
    on_date: Optional[date] = Query(None, alias="date"),
    template_id: Optional[int] = None,
    ctx: RequestContext = Depends(get_request_context),
):
    """All occurrences with their remaining seats, sold-out ones included."""
    with ctx.transaction() as session:
        occurrences = list_occurrences_with_remaining(session, on_date, template_id)
    return [occ.to_dict() for occ in occurrences]

@router.post("/registrations", status_code=201)
def create_registration(
    body: RegistrationRequest,
    ctx: RequestContext = Depends(require_auth),
):
    """Reserve a seat for the logged-in person."""
    registration = book_seat(ctx.require_database(), ctx.user.id, body.occurrence_id)
    return {"status": "success", "registration": registration.to_dict()}

@router.get("/my-registrations")
def get_my_registrations(
    include_cancelled: bool = False,
    ctx: RequestContext = Depends(require_auth),
):
    with ctx.transaction() as session:
        registrations = list_registrations_for_person(session, ctx.user.id, include_cancelled)
    return {"registrations": registrations}

@router.post("/registrations/{registration_id}/cancel")
def cancel_my_registration(
    registration_id: int,
    ctx: RequestContext = Depends(require_auth),
):
    """Cancel a registration. Managers may cancel anyone's, users only their own."""
    owner = None if ctx.user.is_manager else ctx.user.id
    registration = ctx.run(cancel_registration, registration_id, person_id=owner)
    return {"status": "success", "registration": registration.to_dict()}

@router.get("/testimonials")
def get_testimonials(ctx: RequestContext = Depends(get_request_context)):
    with ctx.transaction() as session:
        return [t.to_dict() for t in list_testimonials(session, active_only=True)]
