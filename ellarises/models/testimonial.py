"""Testimonials shown on the public pages."""

from typing import Dict, Any
from sqlalchemy import Column, Integer, String, Text, Boolean

from .base import Base

class Testimonial(Base):
    __tablename__ = 'testimonials'

    id = Column('testimonial_id', Integer, primary_key=True, autoincrement=True)
    name = Column('name', String(255), nullable=False)
    quote = Column('quote', Text, nullable=False)
    is_active = Column('is_active', Boolean, nullable=False, default=True)
    display_order = Column('display_order', Integer, nullable=False, default=0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'quote': self.quote,
            'is_active': self.is_active,
            'display_order': self.display_order,
        }
