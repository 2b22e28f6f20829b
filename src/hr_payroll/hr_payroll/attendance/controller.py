from __future__ import annotations

from functools import wraps
from typing import Any

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import error_response, to_json, unexpected_error
from ..core.enums import Role, WorkLocation
from ..core.exceptions import AuthorizationError, DomainError, ValidationError
from .model import CaptureContext


def _capture_context(body: dict[str, Any]) -> CaptureContext:
    """Collect image/location/network metadata sent with a clock-in or clock-out."""
    location = {
        key: body.get(key)
        for key in ("latitude", "longitude", "address", "accuracy")
        if body.get(key) is not None
    }
    image = {key: body.get(key) for key in ("imageUrl", "imageFilename") if body.get(key) is not None}
    network = {
        "ipAddress": request.headers.get("X-Forwarded-For", request.remote_addr),
        "userAgent": request.headers.get("User-Agent"),
        "networkType": body.get("networkType"),
    }
    return CaptureContext(image=image, location=location, network=network)


def _work_location(body: dict[str, Any]) -> WorkLocation:
    value = body.get("workLocation")
    if not value:
        return WorkLocation.OFFICE
    try:
        return WorkLocation(value)
    except ValueError:
        raise ValidationError(f"workLocation must be one of: {', '.join(w.value for w in WorkLocation)}") from None


def register(app: Flask, container) -> None:
    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "employee_id" not in session:
                return jsonify({"success": False, "message": "Authentication required", "code": "UNAUTHORIZED"}), 401
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "employee_id" not in session:
                return jsonify({"success": False, "message": "Authentication required", "code": "UNAUTHORIZED"}), 401
            if session.get("role") != Role.ADMIN.value:
                return error_response(AuthorizationError("Admin access required"))
            return view(*args, **kwargs)

        return wrapper

    def _ok(data: Any, status: int = 200, **extra: Any):
        body = {"success": True, "data": to_json(data)}
        body.update(to_json(extra))
        return jsonify(body), status

    @app.route("/attendance/clock-in", methods=["POST"], endpoint="attendance_clock_in")
    @login_required
    def clock_in():
        body = request.get_json(silent=True) or {}
        try:
            record = container.attendance_service.clock_in(
                int(session["employee_id"]),
                now=now_local(),
                context=_capture_context(body),
                work_location=_work_location(body),
            )
            return _ok(record, 201, message="Clocked in successfully")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="clocking in")

    @app.route("/attendance/break-in", methods=["POST"], endpoint="attendance_break_in")
    @login_required
    def break_in():
        try:
            record = container.attendance_service.break_in(int(session["employee_id"]), now=now_local())
            return _ok(record, message="Break started")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="starting a break")

    @app.route("/attendance/break-out", methods=["POST"], endpoint="attendance_break_out")
    @login_required
    def break_out():
        try:
            record = container.attendance_service.break_out(int(session["employee_id"]), now=now_local())
            return _ok(record, message="Break ended")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="ending a break")

    @app.route("/attendance/force-end-break", methods=["POST"], endpoint="attendance_force_end_break")
    @login_required
    def force_end_break():
        try:
            record = container.attendance_service.force_end_break(int(session["employee_id"]), now=now_local())
            return _ok(record, message="All active breaks ended")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="force-ending breaks")

    @app.route("/attendance/clock-out", methods=["POST"], endpoint="attendance_clock_out")
    @login_required
    def clock_out():
        body = request.get_json(silent=True) or {}
        try:
            record = container.attendance_service.clock_out(
                int(session["employee_id"]),
                now=now_local(),
                context=_capture_context(body),
            )
            return _ok(record, message="Clocked out successfully")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="clocking out")

    @app.route("/attendance/logs", methods=["GET"], endpoint="attendance_logs")
    @login_required
    def logs():
        try:
            start_s = request.args.get("startDate")
            end_s = request.args.get("endDate")
            start = end = None
            if start_s and end_s:
                try:
                    start, end = parse_iso_date(start_s), parse_iso_date(end_s)
                except ValueError:
                    raise ValidationError("startDate and endDate must be YYYY-MM-DD") from None

            result = container.attendance_service.get_logs(int(session["employee_id"]), start_date=start, end_date=end)
            return jsonify({"success": True, **to_json(result)}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="loading attendance logs")

    @app.route("/attendance/today", methods=["GET"], endpoint="attendance_today")
    @admin_required
    def today_status():
        try:
            result = container.attendance_service.get_today_status(now=now_local())
            return jsonify({"success": True, **to_json(result)}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="loading today's attendance")

    @app.route("/attendance/employees/<int:employee_id>", methods=["GET"], endpoint="attendance_employee_details")
    @admin_required
    def employee_details(employee_id: int):
        try:
            start_s = request.args.get("startDate")
            end_s = request.args.get("endDate")
            try:
                start = parse_iso_date(start_s) if start_s else None
                end = parse_iso_date(end_s) if end_s else None
            except ValueError:
                raise ValidationError("startDate and endDate must be YYYY-MM-DD") from None

            result = container.attendance_service.get_employee_attendance_details(
                employee_id,
                start_date=start,
                end_date=end,
                today=now_local().date(),
            )
            return _ok(result)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="loading employee attendance")
