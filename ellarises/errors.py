"""Domain error taxonomy for the booking core.

Availability and reservation operations never raise for "no results"; they
only raise one of these. Each error knows the HTTP status and the stable code
the API reports, so the presentation layer never sees raw database text.
"""

class BookingError(Exception):
    """Base class for booking and back-office failures."""

    status_code = 400
    code = 'booking_error'

    def __init__(self, message: str = ''):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = message or (self.__class__.__doc__ or self.code).strip()

    def to_dict(self):
        return {'status': 'error', 'code': self.code, 'message': self.message}

class NotFound(BookingError):
    """The referenced record does not exist."""
    status_code = 404
    code = 'not_found'

class CapacityExceeded(BookingError):
    """No seats remain for this event."""
    status_code = 409
    code = 'capacity_exceeded'

class DuplicateRegistration(BookingError):
    """You are already registered for this event."""
    status_code = 409
    code = 'duplicate_registration'

class ConstraintViolation(BookingError):
    """The change would break a data integrity rule."""
    status_code = 409
    code = 'constraint_violation'

class Unavailable(BookingError):
    """The database is unavailable. Please try again later."""
    status_code = 503
    code = 'unavailable'
