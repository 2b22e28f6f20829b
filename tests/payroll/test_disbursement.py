from __future__ import annotations

import pytest

from src.hr_payroll.hr_payroll.core.enums import PaymentStatus, PayrollStatus
from src.hr_payroll.hr_payroll.employees.model import BankDetails
from src.hr_payroll.hr_payroll.payroll.bank import MockBankGateway
from src.hr_payroll.hr_payroll.payroll.disbursement import PayrollDisbursementService
from src.hr_payroll.hr_payroll.payroll.service import PayrollService
from tests.fakes import RecordingGateway, make_employee


@pytest.fixture
def payroll_service(payrolls_repo, employees, attendance_repo, leaves_repo, structures_repo, sink) -> PayrollService:
    return PayrollService(payrolls_repo, employees, attendance_repo, leaves_repo, structures_repo, notifier=sink)


def _disburser(payrolls_repo, employees, gateway, sink) -> PayrollDisbursementService:
    return PayrollDisbursementService(payrolls_repo, employees, gateway, notifier=sink)


def test_one_missing_ifsc_fails_only_that_record(payroll_service, payrolls_repo, employees, gateway, sink, fixed_now):
    employees.add(make_employee(3, ifsc=None))
    for employee_id in (1, 2, 3):
        payroll_service.get_current_payroll(employee_id, now=fixed_now)

    report = _disburser(payrolls_repo, employees, gateway, sink).disburse_for_period("March", 2024, now=fixed_now)

    assert (report.total, report.paid, report.failed) == (3, 2, 1)
    failed = payroll_service.get_payroll_for_period(3, "March", 2024)
    assert failed.payment.status == PaymentStatus.FAILED
    assert "ifsc" in failed.payment.error
    assert failed.status == PayrollStatus.PENDING

    paid = payroll_service.get_payroll_for_period(1, "March", 2024)
    assert paid.status == PayrollStatus.PAID
    assert paid.paid_date == fixed_now
    assert paid.payment.status == PaymentStatus.SUCCESS
    assert paid.payment.provider == "mock-bank"
    assert paid.payment.reference.startswith("MOCK-")
    assert len(paid.payment.reference) == len("MOCK-") + 12
    assert gateway.calls[0][0] == 43050

    assert sink.kinds().count("payroll.paid") == 2
    assert sink.kinds().count("payroll.payment_failed") == 1


def test_second_run_does_not_pay_twice(payroll_service, payrolls_repo, employees, gateway, sink, fixed_now):
    employees.add(make_employee(3, ifsc=None))
    payroll_service.generate_payrolls_for_month_year("March", 2024)
    disburser = _disburser(payrolls_repo, employees, gateway, sink)

    disburser.disburse_for_period("March", 2024, now=fixed_now)
    calls_after_first = len(gateway.calls)
    report = disburser.disburse_for_period("March", 2024, now=fixed_now)

    assert report.total == 1
    assert report.results[0].employee_id == 3
    assert len(gateway.calls) == calls_after_first + 1


def test_gateway_outage_is_recorded_and_batch_continues(payroll_service, payrolls_repo, employees, sink, fixed_now):
    payroll_service.generate_payrolls_for_month_year("March", 2024)
    unreachable = employees.get_by_id(1).bank.account_no
    gateway = RecordingGateway(unreachable_for=[unreachable])

    report = _disburser(payrolls_repo, employees, gateway, sink).disburse_for_period("March", 2024, now=fixed_now)

    assert (report.paid, report.failed) == (1, 1)
    assert payroll_service.get_payroll_for_period(1, "March", 2024).payment.error == "bank gateway timeout"
    assert payroll_service.get_payroll_for_period(2, "March", 2024).is_paid


def test_processed_records_are_eligible_and_empty_period_reports_zero(payrolls_repo, employees, gateway, sink, payroll_service, fixed_now):
    record = payroll_service.create_payroll(
        employee_id=1, month="May", year=2024, earnings={"basic_wage": 1000}, status=PayrollStatus.PROCESSED
    )
    disburser = _disburser(payrolls_repo, employees, gateway, sink)

    assert disburser.disburse_for_period("May", 2024, now=fixed_now).paid == 1
    assert record.is_paid
    assert disburser.disburse_for_period("June", 2024, now=fixed_now).to_dict()["total"] == 0


def test_missing_employee_is_a_failed_transfer(payroll_service, payrolls_repo, employees, gateway, sink, fixed_now):
    payroll_service.get_current_payroll(2, now=fixed_now)
    del employees.employees[2]

    report = _disburser(payrolls_repo, employees, gateway, sink).disburse_for_period("March", 2024, now=fixed_now)

    assert report.failed == 1
    assert report.results[0].error == "Employee not found"
    assert gateway.calls == []


def test_mock_gateway_rejects_non_positive_amount():
    bank = BankDetails(bank_name="SBI", ifsc="SBIN0000001", account_no="123456789", account_name="A")

    assert MockBankGateway().transfer(amount=0, beneficiary=bank).success is False
    assert MockBankGateway().transfer(amount=1, beneficiary=bank).success is True
    assert bank.masked_account == "****6789"
