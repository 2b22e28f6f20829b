from __future__ import annotations

from functools import wraps
from typing import Any

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import now_local
from ..common.http import error_response, to_json, unexpected_error
from ..common.validators import amounts_from, require_amount, require_int, require_month_year
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import PayrollStatus, Role
from ..core.exceptions import AuthorizationError, DomainError, ValidationError
from .model import DEDUCTION_FIELDS, EARNING_FIELDS


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

    def _is_admin() -> bool:
        return session.get("role") == Role.ADMIN.value

    def _ok(data: Any, status: int = 200, **extra: Any):
        body = {"success": True, "data": to_json(data)}
        body.update(to_json(extra))
        return jsonify(body), status

    def _breakdown(body: dict[str, Any]) -> tuple[dict[str, float], dict[str, float]]:
        earnings = body.get("earnings") or {}
        deductions = body.get("deductions") or {}
        if not isinstance(earnings, dict) or not isinstance(deductions, dict):
            raise ValidationError("earnings and deductions must be objects")
        return amounts_from(earnings, EARNING_FIELDS), amounts_from(deductions, DEDUCTION_FIELDS)

    @app.route("/payroll/current", methods=["GET"], endpoint="payroll_current")
    @login_required
    def current_payroll():
        try:
            record = container.payroll_service.get_current_payroll(int(session["employee_id"]), now=now_local())
            return _ok(record)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="loading current payroll")

    @app.route("/payroll/generate-bulk", methods=["POST"], endpoint="payroll_generate_bulk")
    @admin_required
    def generate_bulk():
        body = request.get_json(silent=True) or {}
        try:
            month, year = require_month_year(body.get("month"), body.get("year"))
            created = container.payroll_service.generate_payrolls_for_month_year(month, year)
            return jsonify(
                {
                    "success": True,
                    "message": f"Generated {created} payroll record(s) for {month} {year}",
                    "created": created,
                }
            ), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="generating payrolls")

    @app.route("/payroll/disburse", methods=["POST"], endpoint="payroll_disburse")
    @admin_required
    def disburse():
        body = request.get_json(silent=True) or {}
        try:
            month, year = require_month_year(body.get("month"), body.get("year"))
            report = container.disbursement_service.disburse_for_period(month, year, now=now_local())
            return jsonify({"success": True, **to_json(report)}), 200
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="disbursing payroll")

    @app.route("/payroll", methods=["POST"], endpoint="payroll_create")
    @admin_required
    def create_payroll():
        body = request.get_json(silent=True) or {}
        try:
            month, year = require_month_year(body.get("month"), body.get("year"))
            earnings, deductions = _breakdown(body)
            status_s = body.get("status") or PayrollStatus.PENDING.value
            try:
                status = PayrollStatus(status_s)
            except ValueError:
                raise ValidationError(f"invalid payroll status: {status_s!r}") from None
            if status == PayrollStatus.PAID:
                raise ValidationError("Payroll records are marked Paid by disbursement only")

            basic = body.get("basicSalary")
            record = container.payroll_service.create_payroll(
                employee_id=require_int(body.get("employeeId"), "employeeId"),
                month=month,
                year=year,
                basic_salary=require_amount(basic, "basicSalary") if basic not in (None, "") else None,
                earnings=earnings,
                deductions=deductions,
                notes=body.get("notes"),
                status=status,
                actor_id=int(session["employee_id"]),
            )
            return _ok(record, 201, message="Payroll created")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="creating payroll")

    @app.route("/payroll", methods=["GET"], endpoint="payroll_list")
    @login_required
    def list_payrolls():
        try:
            month, year = require_month_year(request.args.get("month"), request.args.get("year"))
            records = container.payroll_service.list_payrolls(month, year, include_hidden=_is_admin())
            return _ok(records, count=len(records))
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="listing payrolls")

    @app.route("/payroll/<int:payroll_id>", methods=["PUT"], endpoint="payroll_update")
    @admin_required
    def update_payroll(payroll_id: int):
        body = request.get_json(silent=True) or {}
        try:
            earnings, deductions = _breakdown(body)
            record = container.payroll_service.update_payroll(
                payroll_id,
                earnings=earnings,
                deductions=deductions,
                notes=body.get("notes"),
                actor_id=int(session["employee_id"]),
            )
            return _ok(record, message="Payroll updated")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="updating payroll")

    @app.route("/payroll/<int:payroll_id>/visibility", methods=["PATCH"], endpoint="payroll_visibility")
    @admin_required
    def toggle_visibility(payroll_id: int):
        body = request.get_json(silent=True) or {}
        try:
            if not isinstance(body.get("isVisible"), bool):
                raise ValidationError("isVisible must be a boolean")
            record = container.payroll_service.set_visibility(payroll_id, body["isVisible"])
            return _ok(record)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="changing payroll visibility")

    @app.route("/payroll/history", methods=["GET"], endpoint="payroll_history")
    @login_required
    def history():
        try:
            page = require_int(request.args.get("page", 1), "page")
            limit = require_int(request.args.get("limit", DEFAULT_HISTORY_LIMIT), "limit")
            result = container.payroll_service.get_history(int(session["employee_id"]), page=page, limit=limit)
            return _ok(result["payrolls"], pagination={k: v for k, v in result.items() if k != "payrolls"})
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="loading payroll history")

    @app.route("/payroll/<int:payroll_id>/payslip", methods=["GET"], endpoint="payroll_payslip")
    @login_required
    def payslip(payroll_id: int):
        try:
            result = container.payroll_service.get_payslip(int(session["employee_id"]), payroll_id)
            return _ok(result)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="building payslip")

    @app.route("/payroll/structures/applicable/<int:employee_id>", methods=["GET"], endpoint="payroll_structures_applicable")
    @admin_required
    def applicable_structures(employee_id: int):
        try:
            structures = container.payroll_service.applicable_structures(employee_id)
            return _ok(structures)
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="loading salary structures")

    @app.route("/payroll/generate-with-structure", methods=["POST"], endpoint="payroll_generate_with_structure")
    @admin_required
    def generate_with_structure():
        body = request.get_json(silent=True) or {}
        try:
            month, year = require_month_year(body.get("month"), body.get("year"))
            record = container.payroll_service.generate_with_structure(
                employee_id=require_int(body.get("employeeId"), "employeeId"),
                month=month,
                year=year,
                structure_id=require_int(body.get("structureId"), "structureId"),
            )
            return _ok(record, 201, message="Payroll generated from salary structure")
        except DomainError as e:
            return error_response(e)
        except Exception:
            return unexpected_error(action="generating payroll from structure")
