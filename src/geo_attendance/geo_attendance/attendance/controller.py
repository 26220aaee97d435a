from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Mapping

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_int, optional_text, require_coordinate
from ..core.enums import AttendanceAction
from ..core.exceptions import AttendanceRejected, IntegrityError, RecordNotFound, ValidationError
from ..container import Container
from .model import Identity
from .service import group_by_division, record_to_dict

logger = logging.getLogger(__name__)

_REJECTION_STATUS = {
    "INCOMPLETE_IDENTITY": 400,
    "OUTSIDE_GEOFENCE": 400,
    "DUPLICATE_SESSION": 409,
    "NO_OPEN_SESSION": 409,
    "NO_ACTIVE_LOCATIONS": 503,
}


def _identity_from(data: Mapping[str, Any]) -> Identity:
    return Identity.of(
        optional_text(data.get("name"), "name"),
        optional_int(data.get("division_id"), "division_id"),
        optional_int(data.get("campus_id"), "campus_id"),
    )


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def json_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except AttendanceRejected as e:
                return jsonify({"success": False, **e.to_dict()}), _REJECTION_STATUS.get(e.code, 400)
            except ValidationError as e:
                return jsonify({"success": False, "error": "VALIDATION_ERROR", "message": str(e)}), 400
            except RecordNotFound as e:
                logger.warning("Attendance record %s vanished before update", e.attendance_id)
                return jsonify({"success": False, "error": e.code, "message": str(e)}), 404
            except IntegrityError as e:
                logger.error("Attendance store integrity violation: %s (record_ids=%s)", e.message, list(e.record_ids))
                return jsonify({
                    "success": False,
                    "error": e.code,
                    "message": "Attendance data is inconsistent, please contact an administrator",
                }), 500
            except Exception:
                logger.exception("Unexpected error in %s", view.__name__)
                return jsonify({
                    "success": False,
                    "error": "SYSTEM_ERROR",
                    "message": "System error while recording attendance",
                }), 500

        return wrapper

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="api_check_in")
    @json_errors
    def api_check_in():
        data = request.get_json(silent=True) or {}
        identity = _identity_from(data)
        point = require_coordinate(data.get("latitude"), data.get("longitude"))

        record = service.check_in(identity, point)
        return jsonify({
            "success": True,
            "action": AttendanceAction.CHECK_IN.value,
            "message": "Check-in successful!",
            "record": record_to_dict(record),
        }), 201

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="api_check_out")
    @json_errors
    def api_check_out():
        data = request.get_json(silent=True) or {}
        identity = _identity_from(data)
        point = require_coordinate(data.get("latitude"), data.get("longitude"))

        record = service.check_out(identity, point)
        return jsonify({
            "success": True,
            "action": AttendanceAction.CHECK_OUT.value,
            "message": "Check-out successful!",
            "record": record_to_dict(record),
        }), 200

    @app.route("/api/attendance/status", methods=["GET"], endpoint="api_attendance_status")
    @json_errors
    def api_attendance_status():
        identity = _identity_from(request.args)

        point = None
        if request.args.get("latitude") or request.args.get("longitude"):
            point = require_coordinate(request.args.get("latitude"), request.args.get("longitude"))

        view = service.get_status(identity, point)
        return jsonify({"success": True, **view.to_dict()}), 200

    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_list")
    @json_errors
    def api_attendance_list():
        day = None
        date_s = request.args.get("date")
        if date_s:
            try:
                day = parse_iso_date(date_s)
            except ValueError:
                raise ValidationError("date must be YYYY-MM-DD") from None
        division_id = optional_int(request.args.get("division_id"), "division_id")

        rows = service.list_for_day(day, division_id=division_id)
        return jsonify({
            "success": True,
            "count": len(rows),
            "rows": rows,
            "by_division": group_by_division(rows),
        }), 200

    @app.route("/api/locations/active", methods=["GET"], endpoint="api_active_locations")
    @json_errors
    def api_active_locations():
        locations = container.locations_repo.list_active()
        return jsonify({
            "success": True,
            "locations": [
                {
                    "location_id": loc.location_id,
                    "name": loc.name,
                    "latitude": loc.latitude,
                    "longitude": loc.longitude,
                    "radius_meters": loc.radius_meters,
                }
                for loc in locations
            ],
        }), 200

    @app.route("/api/divisions", methods=["GET"], endpoint="api_divisions")
    @json_errors
    def api_divisions():
        divisions = container.organization_repo.list_divisions()
        return jsonify({
            "success": True,
            "divisions": [{"division_id": d.division_id, "name": d.name} for d in divisions],
        }), 200

    @app.route("/api/campuses", methods=["GET"], endpoint="api_campuses")
    @json_errors
    def api_campuses():
        campuses = container.organization_repo.list_campuses()
        return jsonify({
            "success": True,
            "campuses": [{"campus_id": c.campus_id, "name": c.name} for c in campuses],
        }), 200
