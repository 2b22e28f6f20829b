from __future__ import annotations

import pytest

from src.hr_payroll.hr_payroll.container import wire_services
from src.hr_payroll.hr_payroll.main import create_app
from tests.fakes import make_employee


@pytest.fixture
def container(employees, attendance_repo, leaves_repo, payrolls_repo, structures_repo, gateway, sink):
    return wire_services(
        employees_repo=employees,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        payrolls_repo=payrolls_repo,
        structures_repo=structures_repo,
        gateway=gateway,
        notifier=sink,
    )


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def login(client, employee_id: int, role: str = "employee") -> None:
    with client.session_transaction() as sess:
        sess["employee_id"] = employee_id
        sess["role"] = role


def test_requests_without_session_are_unauthorized(client):
    resp = client.post("/attendance/clock-in")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_clock_in_returns_created_then_conflict(client):
    login(client, 1)

    resp = client.post(
        "/attendance/clock-in",
        json={"latitude": 12.9, "longitude": 77.6, "networkType": "wifi", "workLocation": "home"},
        headers={"User-Agent": "pytest"},
    )
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["workLocation"] == "home"
    assert data["clockInContext"]["location"] == {"latitude": 12.9, "longitude": 77.6}
    assert data["clockInContext"]["network"]["userAgent"] == "pytest"

    resp = client.post("/attendance/clock-in")
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["code"] == "ALREADY_CLOCKED_IN"
    assert body["session"]["employeeId"] == 1


def test_invalid_work_location_is_rejected(client):
    login(client, 1)
    resp = client.post("/attendance/clock-in", json={"workLocation": "beach"})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"


def test_break_then_clock_out_is_refused(client):
    login(client, 1)
    client.post("/attendance/clock-in")

    resp = client.post("/attendance/break-in")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "onBreak"

    resp = client.post("/attendance/clock-out")
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "BREAK_STILL_ACTIVE"

    assert client.post("/attendance/break-out").status_code == 200
    assert client.post("/attendance/break-out").get_json()["code"] == "NO_ACTIVE_BREAK"
    assert client.post("/attendance/force-end-break").status_code == 400
    assert client.post("/attendance/clock-out").status_code == 200


def test_logs_endpoint_shape(client):
    login(client, 1)
    client.post("/attendance/clock-in")

    resp = client.get("/attendance/logs?startDate=2000-01-01&endDate=2100-01-01")
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["summary"]["totalDays"] == 1
    assert len(body["sessions"]) == 1

    assert client.get("/attendance/logs?startDate=yesterday&endDate=today").status_code == 400


def test_admin_routes_are_forbidden_for_employees(client):
    login(client, 1)

    assert client.get("/attendance/today").status_code == 403
    resp = client.post("/payroll/generate-bulk", json={"month": "March", "year": 2024})
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "FORBIDDEN"


def test_admin_today_and_employee_details(client):
    login(client, 2, role="admin")

    body = client.get("/attendance/today").get_json()
    assert body["counts"]["absent"] == 2

    assert client.get("/attendance/employees/1").status_code == 200
    assert client.get("/attendance/employees/77").status_code == 404


def test_current_payroll_is_created_on_first_read(client, payrolls_repo):
    login(client, 1)

    resp = client.get("/payroll/current")
    data = resp.get_json()["data"]
    assert resp.status_code == 200
    assert data["inHandSalary"] == 43050
    assert data["earnings"]["totalEarnings"] == 50075
    assert data["deductions"]["total"] == 7025

    client.get("/payroll/current")
    assert len(payrolls_repo.records) == 1


def test_current_payroll_for_unknown_employee(client):
    login(client, 55)
    assert client.get("/payroll/current").status_code == 404


def test_generate_bulk_requires_month_and_year(client):
    login(client, 2, role="admin")

    resp = client.post("/payroll/generate-bulk", json={"month": "March"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "month and year are required"


def test_generate_then_disburse(client, employees):
    employees.add(make_employee(3, ifsc=None))
    login(client, 2, role="admin")

    resp = client.post("/payroll/generate-bulk", json={"month": "March", "year": 2024})
    assert resp.get_json()["created"] == 3
    assert client.post("/payroll/generate-bulk", json={"month": "March", "year": 2024}).get_json()["created"] == 0

    body = client.post("/payroll/disburse", json={"month": "March", "year": 2024}).get_json()
    assert (body["total"], body["paid"], body["failed"]) == (3, 2, 1)
    assert {r["status"] for r in body["results"]} == {"Success", "Failed"}

    body = client.post("/payroll/disburse", json={"month": "March", "year": 2024}).get_json()
    assert body["total"] == 1


def test_admin_edits_payroll_until_paid(client):
    login(client, 2, role="admin")

    resp = client.post(
        "/payroll",
        json={"employeeId": 1, "month": "May", "year": 2024, "earnings": {"basicWage": 20000}, "deductions": {"incomeTax": "2000"}},
    )
    assert resp.status_code == 201
    payroll_id = resp.get_json()["data"]["payrollId"]
    assert client.post("/payroll", json={"employeeId": 1, "month": "May", "year": 2024}).status_code == 400

    resp = client.put(f"/payroll/{payroll_id}", json={"earnings": {"projectBonus": 500}, "notes": "bonus"})
    assert resp.get_json()["data"]["inHandSalary"] == 18500

    assert client.put(f"/payroll/{payroll_id}", json={"earnings": {"projectBonus": "abc"}}).status_code == 400
    assert client.patch(f"/payroll/{payroll_id}/visibility", json={"isVisible": "no"}).status_code == 400
    assert client.patch(f"/payroll/{payroll_id}/visibility", json={"isVisible": False}).get_json()["data"]["isVisible"] is False

    client.post("/payroll/disburse", json={"month": "May", "year": 2024})
    resp = client.put(f"/payroll/{payroll_id}", json={"notes": "too late"})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "PAYROLL_LOCKED"


def test_employee_list_history_and_payslip(client):
    login(client, 2, role="admin")
    client.post("/payroll/generate-bulk", json={"month": "March", "year": 2024})
    hidden = client.post("/payroll", json={"employeeId": 1, "month": "April", "year": 2024}).get_json()["data"]
    client.patch(f"/payroll/{hidden['payrollId']}/visibility", json={"isVisible": False})
    assert len(client.get("/payroll?month=April&year=2024").get_json()["data"]) == 1

    login(client, 1)
    assert client.get("/payroll?month=April&year=2024").get_json()["count"] == 0

    body = client.get("/payroll/history?page=1&limit=1").get_json()
    assert body["pagination"] == {"totalPages": 2, "currentPage": 1, "total": 2}
    assert body["data"][0]["month"] == "April"

    march = client.get("/payroll/history?page=2&limit=1").get_json()["data"][0]
    assert client.get(f"/payroll/{march['payrollId']}/payslip").status_code == 200

    login(client, 2)
    assert client.get(f"/payroll/{march['payrollId']}/payslip").status_code == 404


def test_structures_endpoints(client, structures_repo):
    from src.hr_payroll.hr_payroll.payroll.calculator.structure_calculator import SalaryLineItem, SalaryStructure

    structures_repo.structures[1] = SalaryStructure(
        structure_id=1, name="Basic only", earnings={"basic_wage": SalaryLineItem(percentage=100)}, deductions={}
    )
    login(client, 2, role="admin")

    body = client.get("/payroll/structures/applicable/1").get_json()
    assert [s["name"] for s in body["data"]] == ["Basic only"]

    resp = client.post(
        "/payroll/generate-with-structure", json={"employeeId": 1, "month": "June", "year": 2024, "structureId": 1}
    )
    assert resp.status_code == 201
    assert resp.get_json()["data"]["ctc"] == 30000
    assert client.post(
        "/payroll/generate-with-structure", json={"employeeId": 1, "month": "June", "year": 2024, "structureId": 1}
    ).get_json()["code"] == "DUPLICATE_PAYROLL_PERIOD"


def test_create_payroll_rejects_non_numeric_basic_salary(client, payrolls_repo):
    login(client, 2, role="admin")

    resp = client.post("/payroll", json={"employeeId": 1, "month": "May", "year": 2024, "basicSalary": "abc"})

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"
    assert payrolls_repo.records == {}

    resp = client.post("/payroll", json={"employeeId": 1, "month": "May", "year": 2024, "basicSalary": "25000"})
    assert resp.get_json()["data"]["basicSalary"] == 25000
