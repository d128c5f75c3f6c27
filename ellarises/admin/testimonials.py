"""Testimonial maintenance."""

import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..errors import NotFound, ConstraintViolation
from ..models import Testimonial

logger = logging.getLogger(__name__)

TESTIMONIAL_FIELDS = ('name', 'quote', 'is_active', 'display_order')

def list_testimonials(session: Session, active_only: bool = False) -> List[Testimonial]:
    """Testimonials by display order; the public page passes ``active_only=True``."""
    stmt = select(Testimonial).order_by(Testimonial.display_order, Testimonial.id)
    if active_only:
        stmt = stmt.where(Testimonial.is_active.is_(True))
    return list(session.scalars(stmt))

def get_testimonial(session: Session, testimonial_id: int) -> Testimonial:
    testimonial = session.get(Testimonial, testimonial_id)
    if testimonial is None:
        raise NotFound(f"Testimonial {testimonial_id} does not exist")
    return testimonial

def create_testimonial(
    session: Session,
    name: str,
    quote: str,
    is_active: bool = True,
    display_order: int = 0,
) -> Testimonial:
    if not name or not quote:
        raise ConstraintViolation("A testimonial needs a name and a quote")
    testimonial = Testimonial(name=name, quote=quote, is_active=is_active, display_order=display_order)
    session.add(testimonial)
    session.flush()
    logger.info(f"Created testimonial {testimonial.id}")
    return testimonial

def update_testimonial(session: Session, testimonial_id: int, changes: Dict[str, Any]) -> Testimonial:
    testimonial = get_testimonial(session, testimonial_id)
    for field, value in changes.items():
        if field not in TESTIMONIAL_FIELDS:
            continue
        if field in ('name', 'quote') and not value:
            raise ConstraintViolation(f"{field} can't be empty")
        if value is None:
            raise ConstraintViolation(f"{field} can't be null")
        setattr(testimonial, field, value)
    session.flush()
    logger.info(f"Updated testimonial {testimonial_id}")
    return testimonial

def delete_testimonial(session: Session, testimonial_id: int) -> None:
    session.delete(get_testimonial(session, testimonial_id))
    session.flush()
    logger.info(f"Deleted testimonial {testimonial_id}")
