import threading
from datetime import datetime

import pytest
from sqlalchemy import select

from ellarises.admin import events as event_admin
from ellarises.admin import testimonials as testimonial_admin
from ellarises.booking import book_seat, cancel_registration, count_active_registrations
from ellarises.db import execute_in_transaction
from ellarises.errors import CapacityExceeded, ConstraintViolation, NotFound
from ellarises.models import EventOccurrence, EventRegistration, Role

class TestTemplates:
    def test_create_and_update(self, database):
        with database.session() as session:
            template = event_admin.create_template(session, "  Dance Night ", event_type="social")
            template_id = template.id

        with database.session() as session:
            updated = event_admin.update_template(
                session, template_id, {'default_capacity': 12, 'ignored': 'value'}
            )
            assert updated.name == "Dance Night"
            assert updated.default_capacity == 12

    def test_invalid_capacity(self, database):
        with pytest.raises(ConstraintViolation):
            with database.session() as session:
                event_admin.create_template(session, "Empty", default_capacity=0)

    def test_delete_rejected_while_occurrences_exist(self, database, seeded):
        with pytest.raises(ConstraintViolation):
            with database.session() as session:
                event_admin.delete_template(session, seeded['template'])

    def test_delete_unused_template(self, database):
        with database.session() as session:
            template_id = event_admin.create_template(session, "Short lived").id

        with database.session() as session:
            event_admin.delete_template(session, template_id)

        with pytest.raises(NotFound):
            with database.session() as session:
                event_admin.get_template(session, template_id)

class TestOccurrences:
    def test_defaults_come_from_template(self, database, seeded):
        with database.session() as session:
            occurrence = event_admin.create_occurrence(session, seeded['other_template'], datetime(2025, 6, 1, 9))
            assert occurrence.name == "STEAM Summit"
            assert occurrence.capacity == 10
            assert occurrence.location is None

    def test_end_before_start_rejected(self, database, seeded):
        with pytest.raises(ConstraintViolation):
            with database.session() as session:
                event_admin.create_occurrence(
                    session, seeded['template'], datetime(2025, 6, 1, 9), end_time=datetime(2025, 6, 1, 8)
                )

    def test_unknown_template(self, database):
        with pytest.raises(NotFound):
            with database.session() as session:
                event_admin.create_occurrence(session, 42, datetime(2025, 6, 1, 9))

    def test_capacity_cannot_drop_below_active_registrations(self, database, seeded):
        for person in seeded['people'][:2]:
            book_seat(database, person, seeded['summit'])

        with pytest.raises(ConstraintViolation):
            with database.session() as session:
                event_admin.update_occurrence(session, seeded['summit'], {'capacity': 1})

        with database.session() as session:
            occurrence = event_admin.update_occurrence(session, seeded['summit'], {'capacity': 2, 'location': 'Hall B'})
            assert occurrence.capacity == 2
            assert occurrence.location == 'Hall B'

    def test_delete_rejected_with_active_registrations(self, database, seeded):
        registration = book_seat(database, seeded['people'][0], seeded['afternoon'])

        with pytest.raises(ConstraintViolation):
            with database.session() as session:
                event_admin.delete_occurrence(session, seeded['afternoon'])

        with database.session() as session:
            cancel_registration(session, registration.id)

        with database.session() as session:
            event_admin.delete_occurrence(session, seeded['afternoon'])

        with database.session() as session:
            assert session.get(EventOccurrence, seeded['afternoon']) is None
            # Cancelled history goes with the occurrence
            assert session.get(EventRegistration, registration.id) is None

class TestTestimonials:
    def test_active_only_listing_in_display_order(self, database):
        with database.session() as session:
            testimonial_admin.create_testimonial(session, "B", "Second", display_order=2)
            testimonial_admin.create_testimonial(session, "A", "First", display_order=1)
            hidden = testimonial_admin.create_testimonial(session, "C", "Hidden", is_active=False)
            hidden_id = hidden.id

        with database.session() as session:
            assert [t.name for t in testimonial_admin.list_testimonials(session, active_only=True)] == ["A", "B"]
            assert len(testimonial_admin.list_testimonials(session)) == 3

        with database.session() as session:
            testimonial_admin.update_testimonial(session, hidden_id, {'is_active': True})
            testimonial_admin.delete_testimonial(session, hidden_id)

        with pytest.raises(NotFound):
            with database.session() as session:
                testimonial_admin.get_testimonial(session, hidden_id)

    def test_empty_quote_rejected(self, database):
        with pytest.raises(ConstraintViolation):
            with database.session() as session:
                testimonial_admin.create_testimonial(session, "Someone", "")

class TestRequiredFields:
    """Writes that would null a NOT NULL column come back as ConstraintViolation, never a raw driver error."""

    @pytest.mark.parametrize('field', ['name', 'start_time', 'template_id', 'capacity'])
    def test_occurrence_field_cannot_be_nulled(self, database, seeded, field):
        with pytest.raises(ConstraintViolation):
            execute_in_transaction(database, event_admin.update_occurrence, seeded['summit'], {field: None})

        with database.session() as session:
            assert getattr(session.get(EventOccurrence, seeded['summit']), field) is not None

    @pytest.mark.parametrize('field', ['is_active', 'display_order'])
    def test_testimonial_field_cannot_be_nulled(self, database, field):
        testimonial = execute_in_transaction(database, testimonial_admin.create_testimonial, "Rosa", "Thank you")

        with pytest.raises(ConstraintViolation):
            execute_in_transaction(database, testimonial_admin.update_testimonial, testimonial.id, {field: None})

    def test_integrity_error_becomes_constraint_violation(self, database):
        def add_duplicate_roles(session):
            session.add(Role(name="Mentor"))
            session.add(Role(name="Mentor"))
            session.flush()

        with pytest.raises(ConstraintViolation):
            execute_in_transaction(database, add_duplicate_roles)

        with database.session() as session:
            assert session.scalars(select(Role).where(Role.name == "Mentor")).first() is None

    def test_update_unknown_occurrence(self, database):
        with pytest.raises(NotFound):
            execute_in_transaction(database, event_admin.update_occurrence, 404, {'location': 'Nowhere'})

def test_capacity_change_races_booking(database, seeded):
    """A capacity cut and a booking for the last seat serialize; exactly one of them wins."""
    occurrence = seeded['afternoon']  # capacity 2
    book_seat(database, seeded['people'][0], occurrence)
    barrier = threading.Barrier(2)
    outcomes = []

    def shrink():
        barrier.wait()
        try:
            execute_in_transaction(database, event_admin.update_occurrence, occurrence, {'capacity': 1})
            outcomes.append('shrunk')
        except ConstraintViolation:
            outcomes.append('kept')

    def book():
        barrier.wait()
        try:
            book_seat(database, seeded['people'][1], occurrence)
            outcomes.append('booked')
        except CapacityExceeded:
            outcomes.append('full')

    threads = [threading.Thread(target=shrink), threading.Thread(target=book)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(outcomes) in (['booked', 'kept'], ['full', 'shrunk'])
    with database.session() as session:
        capacity = session.get(EventOccurrence, occurrence).capacity
        assert count_active_registrations(session, occurrence) <= capacity
