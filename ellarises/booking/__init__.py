"""Booking core: availability queries and the reservation writer."""

from .availability import (
    AvailableOccurrence,
    find_available_occurrences,
    list_occurrences_with_remaining,
    find_available_dates,
)
from .reservations import (
    lock_occurrence,
    reserve_seat,
    book_seat,
    mark_attendance,
    cancel_registration,
    list_registrations_for_person,
    count_active_registrations,
)

__all__ = [
    'AvailableOccurrence',
    'find_available_occurrences',
    'list_occurrences_with_remaining',
    'find_available_dates',
    'lock_occurrence',
    'reserve_seat',
    'book_seat',
    'mark_attendance',
    'cancel_registration',
    'list_registrations_for_person',
    'count_active_registrations',
]
