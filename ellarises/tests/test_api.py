import time

import pytest
from fastapi.testclient import TestClient

from ellarises.admin.people import assign_role, assign_role_detail, create_person
from ellarises.api.app import create_application
from conftest import DAY

@pytest.fixture
def accounts(database, seeded):
    """A manager and a regular participant with known passwords."""
    with database.session() as session:
        manager = create_person(session, "manager@example.com", "Mia", "Admin")
        assign_role(session, manager.id, "Admin")
        assign_role_detail(session, manager.id, "Admin", password="manager-pw")

        user_id = seeded['people'][0]
        assign_role(session, user_id, "Participant")
        assign_role_detail(session, user_id, "Participant", password="user-pw")
        return {'manager': manager.id, 'user': user_id}

@pytest.fixture
def client(database, seeded):
    app = create_application(database=database, connect_timeout=5)
    with TestClient(app) as client:
        yield client

def _login(client, email, password):
    return client.post("/auth/login", json={"email": email, "password": password})

def test_health_reports_connected_database(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "connected"
    assert "timestamp" in data

def test_availability_is_public(client, seeded):
    response = client.get("/api/availability", params={"date": DAY.date().isoformat()})
    assert response.status_code == 200
    ids = [occ["id"] for occ in response.json()["occurrences"]]
    assert ids == [seeded['morning'], seeded['summit'], seeded['afternoon']]

def test_available_dates(client):
    response = client.get("/api/available-dates", params={"start": "2025-03-10", "days": 10})
    assert response.status_code == 200
    assert response.json()["dates"] == ["2025-03-14", "2025-03-15"]

def test_login_failure(client, accounts):
    response = _login(client, "user@nowhere.com", "x")
    assert response.status_code == 401

def test_booking_requires_login(client, seeded):
    response = client.post("/api/registrations", json={"occurrence_id": seeded['morning']})
    assert response.status_code == 401

def test_booking_flow(client, seeded, accounts):
    assert _login(client, "person0@example.com", "user-pw").status_code == 200
    assert client.get("/auth/me").json() == {"id": accounts['user'], "role": "user"}

    response = client.post("/api/registrations", json={"occurrence_id": seeded['afternoon']})
    assert response.status_code == 201
    registration_id = response.json()["registration"]["id"]

    response = client.post("/api/registrations", json={"occurrence_id": seeded['afternoon']})
    assert response.status_code == 409
    assert response.json()["code"] == "duplicate_registration"

    mine = client.get("/api/my-registrations").json()["registrations"]
    assert [r["id"] for r in mine] == [registration_id]

    listing = client.get("/api/occurrences", params={"date": DAY.date().isoformat()}).json()
    afternoon = next(occ for occ in listing if occ["id"] == seeded['afternoon'])
    assert afternoon["remaining"] == 1

    response = client.post(f"/api/registrations/{registration_id}/cancel")
    assert response.status_code == 200
    assert response.json()["registration"]["status"] == "Cancelled"

    client.post("/auth/logout")
    assert client.get("/auth/me").status_code == 401

def test_sold_out_returns_conflict(client, seeded, accounts):
    _login(client, "manager@example.com", "manager-pw")
    response = client.post(
        "/admin/registrations",
        json={"person_id": seeded['people'][1], "occurrence_id": seeded['morning']},
    )
    assert response.status_code == 201

    client.post("/auth/logout")
    _login(client, "person0@example.com", "user-pw")
    response = client.post("/api/registrations", json={"occurrence_id": seeded['morning']})
    assert response.status_code == 409
    assert response.json() == {
        "status": "error",
        "code": "capacity_exceeded",
        "message": f"Event occurrence {seeded['morning']} has no seats left",
    }

def test_user_cannot_cancel_someone_elses_registration(client, seeded, accounts):
    _login(client, "manager@example.com", "manager-pw")
    other = client.post(
        "/admin/registrations",
        json={"person_id": seeded['people'][2], "occurrence_id": seeded['summit']},
    ).json()["registration"]["id"]
    client.post("/auth/logout")

    _login(client, "person0@example.com", "user-pw")
    response = client.post(f"/api/registrations/{other}/cancel")
    assert response.status_code == 404

def test_admin_routes_require_manager(client, accounts):
    assert client.get("/admin/templates").status_code == 401

    _login(client, "person0@example.com", "user-pw")
    assert client.get("/admin/templates").status_code == 403

def test_admin_crud(client, seeded, accounts):
    _login(client, "manager@example.com", "manager-pw")

    response = client.post("/admin/templates", json={"name": "Folklorico", "default_capacity": 3})
    assert response.status_code == 201
    template_id = response.json()["id"]

    response = client.post(
        "/admin/occurrences",
        json={"template_id": template_id, "start_time": "2025-04-01T18:00:00"},
    )
    assert response.status_code == 201
    occurrence = response.json()
    assert occurrence["capacity"] == 3
    assert occurrence["remaining"] == 3

    response = client.put(f"/admin/occurrences/{occurrence['id']}", json={"location": "Main Hall"})
    assert response.json()["location"] == "Main Hall"

    # Template in use
    assert client.delete(f"/admin/templates/{template_id}").status_code == 409

    assert client.delete(f"/admin/occurrences/{occurrence['id']}").status_code == 200
    assert client.delete(f"/admin/templates/{template_id}").status_code == 200
    assert client.put(f"/admin/templates/{template_id}", json={"name": "Gone"}).status_code == 404

def test_testimonials(client, accounts):
    _login(client, "manager@example.com", "manager-pw")
    client.post("/admin/testimonials", json={"name": "Rosa", "quote": "Life changing", "display_order": 1})
    client.post("/admin/testimonials", json={"name": "Hidden", "quote": "Draft", "is_active": False})
    client.post("/auth/logout")

    public = client.get("/api/testimonials").json()
    assert [t["name"] for t in public] == ["Rosa"]

def test_degraded_mode_when_connect_times_out(database, monkeypatch):
    def slow_check():
        time.sleep(0.5)

    monkeypatch.setattr(database, "check_connection", slow_check)
    app = create_application(database=database, connect_timeout=0.05)

    with TestClient(app) as client:
        health = client.get("/health")
        assert health.status_code == 200
        assert health.json()["database"] == "unavailable"

        response = client.get("/api/availability", params={"date": "2025-03-14"})
        assert response.status_code == 503
        assert response.json()["code"] == "unavailable"

def test_degraded_mode_when_connect_fails(database, monkeypatch):
    from ellarises.db import ConnectionError

    def failing_check():
        raise ConnectionError("refused")

    monkeypatch.setattr(database, "check_connection", failing_check)
    app = create_application(database=database, connect_timeout=1)

    with TestClient(app) as client:
        assert client.get("/health").json()["database"] == "unavailable"
        assert client.post("/auth/login", json={"email": "a@b.c", "password": "x"}).status_code == 503

def test_admin_null_updates_are_conflicts(client, seeded, accounts):
    _login(client, "manager@example.com", "manager-pw")
    occurrence = seeded['summit']

    for body in (
        {"name": None},
        {"start_time": None, "end_time": "2025-03-14T12:00:00"},
        {"template_id": None},
        {"capacity": None},
    ):
        response = client.put(f"/admin/occurrences/{occurrence}", json=body)
        assert response.status_code == 409, body
        assert response.json()["code"] == "constraint_violation"

    testimonial = client.post("/admin/testimonials", json={"name": "Rosa", "quote": "Life changing"}).json()
    for body in ({"is_active": None}, {"display_order": None}):
        response = client.put(f"/admin/testimonials/{testimonial['id']}", json=body)
        assert response.status_code == 409, body

    assert client.get("/admin/testimonials").json()[0]["is_active"] is True

def test_signup_logs_in(client, seeded):
    response = client.post("/auth/register", json={
        "email": "newbie@example.com",
        "first_name": "Nora",
        "last_name": "Vega",
        "password": "secret-pw",
        "confirm_password": "secret-pw",
        "field_of_interest": "Art",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["registration"] is None
    assert client.get("/auth/me").json() == {"id": data["user"]["id"], "role": "user"}

    client.post("/auth/logout")
    assert _login(client, "newbie@example.com", "secret-pw").status_code == 200

def test_signup_with_booking(client, seeded):
    response = client.post("/auth/register", json={
        "email": "newbie@example.com",
        "first_name": "Nora",
        "last_name": "Vega",
        "password": "secret-pw",
        "occurrence_id": seeded['afternoon'],
    })
    assert response.status_code == 201
    registration_id = response.json()["registration"]["id"]

    mine = client.get("/api/my-registrations").json()["registrations"]
    assert [r["id"] for r in mine] == [registration_id]

def test_signup_for_full_program_creates_no_account(client, seeded, accounts):
    _login(client, "manager@example.com", "manager-pw")
    client.post("/admin/registrations", json={"person_id": seeded['people'][1], "occurrence_id": seeded['morning']})
    client.post("/auth/logout")

    response = client.post("/auth/register", json={
        "email": "late@example.com",
        "first_name": "Lia",
        "last_name": "Diaz",
        "password": "secret-pw",
        "occurrence_id": seeded['morning'],
    })
    assert response.status_code == 409
    assert response.json()["code"] == "capacity_exceeded"
    assert client.get("/auth/me").status_code == 401
    assert _login(client, "late@example.com", "secret-pw").status_code == 401

def test_signup_validation(client, seeded, accounts):
    base = {"email": "x@example.com", "first_name": "X", "last_name": "Y"}

    response = client.post("/auth/register", json={**base, "password": "abc"})
    assert response.status_code == 409

    response = client.post("/auth/register", json={**base, "password": "secret-pw", "confirm_password": "other"})
    assert response.status_code == 400

    response = client.post("/auth/register", json={**base, "email": "person0@example.com", "password": "secret-pw"})
    assert response.status_code == 409

def test_admin_attendance(client, seeded, accounts):
    _login(client, "manager@example.com", "manager-pw")
    registration_id = client.post(
        "/admin/registrations",
        json={"person_id": seeded['people'][1], "occurrence_id": seeded['summit']},
    ).json()["registration"]["id"]

    response = client.post(f"/admin/registrations/{registration_id}/attendance", json={})
    assert response.status_code == 200
    assert response.json()["registration"]["attended"] is True

    response = client.post(f"/admin/registrations/{registration_id}/attendance", json={"attended": False})
    assert response.json()["registration"]["attended"] is False

    client.post(f"/admin/registrations/{registration_id}/cancel")
    response = client.post(f"/admin/registrations/{registration_id}/attendance", json={})
    assert response.status_code == 409

    assert client.post("/admin/registrations/9999/attendance", json={}).status_code == 404

def test_attendance_requires_manager(client, seeded, accounts):
    _login(client, "person0@example.com", "user-pw")
    assert client.post("/admin/registrations/1/attendance", json={}).status_code == 403

def test_admin_people(client, seeded, accounts):
    _login(client, "manager@example.com", "manager-pw")

    response = client.post("/admin/people", json={"email": "vol@example.com", "first_name": "Val", "last_name": "Ortiz"})
    assert response.status_code == 201
    person_id = response.json()["id"]

    assert client.post("/admin/people", json={"email": "vol@example.com", "first_name": "A", "last_name": "B"}).status_code == 409

    response = client.post(
        f"/admin/people/{person_id}/roles",
        json={"role": "Volunteer", "password": "volunteer-pw", "details": {"volunteer_role": "Mentor"}},
    )
    assert response.status_code == 200
    assert response.json()["roles"] == ["Volunteer"]

    volunteers = client.get("/admin/people", params={"role": "Volunteer"}).json()
    assert [p["id"] for p in volunteers] == [person_id]
    assert len(client.get("/admin/people").json()) == 5

    response = client.put(f"/admin/people/{person_id}", json={"city": "Orem"})
    assert response.json()["city"] == "Orem"
    assert client.put(f"/admin/people/{person_id}", json={"first_name": None}).status_code == 409

    assert client.get(f"/admin/people/{person_id}").json()["city"] == "Orem"

    assert client.delete(f"/admin/people/{person_id}").status_code == 200
    assert client.get(f"/admin/people/{person_id}").status_code == 404

def test_admin_cannot_delete_person_with_registrations(client, seeded, accounts):
    _login(client, "manager@example.com", "manager-pw")
    client.post("/admin/registrations", json={"person_id": seeded['people'][2], "occurrence_id": seeded['summit']})

    response = client.delete(f"/admin/people/{seeded['people'][2]}")
    assert response.status_code == 409
    assert response.json()["code"] == "constraint_violation"
