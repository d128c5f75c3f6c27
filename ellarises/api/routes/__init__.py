"""Routes package initialization."""

from . import (
    admin,
    auth,
    booking,
    health
)

__all__ = [
    'admin',
    'auth',
    'booking',
    'health'
]
