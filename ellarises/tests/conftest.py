# ellarises/tests/conftest.py

from datetime import datetime

import pytest

from ellarises.admin.events import create_template, create_occurrence
from ellarises.admin.people import create_person
from ellarises.db import Database, DatabaseConfig

DAY = datetime(2025, 3, 14)

@pytest.fixture
def database(tmp_path):
    """A fresh SQLite file database per test. A file, not :memory:, so threads get their own connections."""
    db = Database(DatabaseConfig(url=f"sqlite:///{tmp_path / 'test.db'}"))
    db.init_db()
    yield db
    db.dispose()

@pytest.fixture
def seeded(database):
    """
    One template with three occurrences on DAY (capacities 2, 1 and 5) and
    one the day after, plus three people. Returns their ids.
    """
    with database.session() as session:
        template = create_template(session, "Heritage Workshop", event_type="workshop", default_capacity=5)
        other = create_template(session, "STEAM Summit", event_type="summit", default_capacity=10)

        afternoon = create_occurrence(session, template.id, DAY.replace(hour=14), capacity=2)
        morning = create_occurrence(session, template.id, DAY.replace(hour=9), capacity=1)
        summit = create_occurrence(session, other.id, DAY.replace(hour=11))
        next_day = create_occurrence(session, template.id, DAY.replace(day=15, hour=10))

        people = [
            create_person(session, f"person{i}@example.com", f"First{i}", f"Last{i}")
            for i in range(3)
        ]

        ids = {
            'template': template.id,
            'other_template': other.id,
            'afternoon': afternoon.id,
            'morning': morning.id,
            'summit': summit.id,
            'next_day': next_day.id,
            'people': [p.id for p in people],
        }
    return ids
