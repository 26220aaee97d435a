from __future__ import annotations

import pytest
from flask import Flask

from src.geo_attendance.geo_attendance.attendance.controller import register
from src.geo_attendance.geo_attendance.attendance.service import AttendanceService
from src.geo_attendance.geo_attendance.container import Container
from src.geo_attendance.geo_attendance.core.exceptions import ValidationError


@pytest.fixture
def container(attendance_repo, locations_repo, organization_repo, clock):
    return Container(
        attendance_repo=attendance_repo,
        locations_repo=locations_repo,
        organization_repo=organization_repo,
        attendance_service=AttendanceService(attendance_repo, locations_repo, clock=clock),
    )


@pytest.fixture
def client(container):
    app = Flask(__name__)
    app.config["TESTING"] = True
    register(app, container)
    return app.test_client()


def _payload(point, **overrides):
    data = {
        "name": "Budi Santoso",
        "division_id": 1,
        "campus_id": 2,
        "latitude": point.latitude,
        "longitude": point.longitude,
    }
    data.update(overrides)
    return data


def test_check_in_and_out(client, head_office, north_of, clock):
    resp = client.post("/api/attendance/check-in", json=_payload(north_of(head_office.coordinate, 50)))
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["action"] == "check_in"
    assert body["record"]["check_in"] == "08:00:00"

    clock.advance(hours=9)
    resp = client.post("/api/attendance/check-out", json=_payload(north_of(head_office.coordinate, 30)))
    assert resp.status_code == 200
    assert resp.get_json()["record"]["worked_hours"] == "9h 0m"


def test_outside_geofence_is_actionable(client, head_office, north_of):
    resp = client.post("/api/attendance/check-in", json=_payload(north_of(head_office.coordinate, 150)))

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"] == "OUTSIDE_GEOFENCE"
    assert body["state"] == "NO_SESSION"
    assert body["nearest_location"] == "Head Office"
    assert body["distance_meters"] == 150


def test_duplicate_check_in_conflict(client, head_office):
    client.post("/api/attendance/check-in", json=_payload(head_office.coordinate))
    resp = client.post("/api/attendance/check-in", json=_payload(head_office.coordinate))

    assert resp.status_code == 409
    assert resp.get_json()["error"] == "DUPLICATE_SESSION"
    assert resp.get_json()["state"] == "CHECKED_IN"


def test_check_out_without_session_conflict(client, head_office):
    resp = client.post("/api/attendance/check-out", json=_payload(head_office.coordinate))

    assert resp.status_code == 409
    assert resp.get_json()["error"] == "NO_OPEN_SESSION"


def test_incomplete_identity(client, head_office):
    resp = client.post("/api/attendance/check-in", json=_payload(head_office.coordinate, name="  ", campus_id=None))

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "INCOMPLETE_IDENTITY"


@pytest.mark.parametrize("lat, lon", [(None, None), (123.0, 106.8), ("abc", 106.8)])
def test_invalid_coordinates(client, head_office, lat, lon):
    resp = client.post("/api/attendance/check-in", json=_payload(head_office.coordinate, latitude=lat, longitude=lon))

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "VALIDATION_ERROR"


def test_no_active_locations_is_unavailable(client, locations_repo, head_office):
    locations_repo.locations.clear()

    resp = client.post("/api/attendance/check-in", json=_payload(head_office.coordinate))

    assert resp.status_code == 503
    assert resp.get_json()["error"] == "NO_ACTIVE_LOCATIONS"


def test_integrity_error_is_a_system_fault(client, attendance_repo, make_record, fixed_now, head_office):
    attendance_repo.seed(make_record(1, check_in_time=fixed_now.replace(hour=6)))
    attendance_repo.seed(make_record(2, check_in_time=fixed_now.replace(hour=7)))

    resp = client.post("/api/attendance/check-out", json=_payload(head_office.coordinate))

    assert resp.status_code == 500
    assert resp.get_json()["error"] == "INTEGRITY_ERROR"


def test_status_with_location(client, head_office, north_of):
    point = north_of(head_office.coordinate, 80)
    resp = client.get(
        "/api/attendance/status",
        query_string={"name": "Budi Santoso", "division_id": "1", "campus_id": "2", "latitude": point.latitude, "longitude": point.longitude},
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["state"] == "NO_SESSION"
    assert body["within_geofence"] is True
    assert body["distance_meters"] == 80


def test_list_for_day(client, head_office):
    client.post("/api/attendance/check-in", json=_payload(head_office.coordinate))

    resp = client.get("/api/attendance", query_string={"date": "2026-02-02"})
    assert resp.status_code == 200
    assert resp.get_json()["count"] == 1

    resp = client.get("/api/attendance", query_string={"date": "02/02/2026"})
    assert resp.status_code == 400


def test_active_locations(client):
    resp = client.get("/api/locations/active")

    assert resp.status_code == 200
    assert [loc["name"] for loc in resp.get_json()["locations"]] == ["Head Office", "Branch Office"]


def test_unexpected_errors_are_reported_as_500(client, attendance_repo, head_office):
    def broken(*args, **kwargs):
        raise RuntimeError("connection lost")

    attendance_repo.find_in_window = broken

    resp = client.post("/api/attendance/check-in", json=_payload(head_office.coordinate))

    assert resp.status_code == 500
    assert resp.get_json()["error"] == "SYSTEM_ERROR"


@pytest.mark.parametrize("name", [123, ["Budi"], {"first": "Budi"}, True])
def test_non_text_name_is_a_validation_error(client, attendance_repo, head_office, name):
    resp = client.post("/api/attendance/check-in", json=_payload(head_office.coordinate, name=name))

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "VALIDATION_ERROR"
    assert attendance_repo.records == []


@pytest.mark.parametrize("division_id", [1.7, "abc", [1]])
def test_invalid_division_id_is_a_validation_error(client, head_office, division_id):
    resp = client.post("/api/attendance/check-in", json=_payload(head_office.coordinate, division_id=division_id))

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "VALIDATION_ERROR"


def test_unknown_division_or_campus_from_store(client, attendance_repo, head_office):
    def reject(mutation):
        raise ValidationError("Unknown division or campus")

    attendance_repo.insert = reject

    resp = client.post("/api/attendance/check-in", json=_payload(head_office.coordinate, division_id=42))

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Unknown division or campus"


def test_list_for_day_by_division_with_names(client, head_office, clock):
    client.post("/api/attendance/check-in", json=_payload(head_office.coordinate))
    clock.advance(minutes=5)
    client.post("/api/attendance/check-in", json=_payload(head_office.coordinate, name="Rina Wati", division_id=3, campus_id=1))

    resp = client.get("/api/attendance", query_string={"date": "2026-02-02"})
    body = resp.get_json()
    assert body["count"] == 2
    assert sorted(body["by_division"]) == ["Academic", "IT"]

    resp = client.get("/api/attendance", query_string={"date": "2026-02-02", "division_id": "3"})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["count"] == 1
    row = body["rows"][0]
    assert (row["name"], row["division_name"], row["campus_name"]) == ("Rina Wati", "IT", "Campus A")

    resp = client.get("/api/attendance", query_string={"division_id": "x"})
    assert resp.status_code == 400


def test_divisions_and_campuses(client):
    resp = client.get("/api/divisions")
    assert resp.status_code == 200
    assert resp.get_json()["divisions"] == [
        {"division_id": 1, "name": "Academic"},
        {"division_id": 3, "name": "IT"},
    ]

    resp = client.get("/api/campuses")
    assert resp.status_code == 200
    assert [c["name"] for c in resp.get_json()["campuses"]] == ["Campus A", "Campus B"]
