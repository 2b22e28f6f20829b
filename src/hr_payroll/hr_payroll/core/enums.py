from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role supplied by the authentication layer."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ON_BREAK = "onBreak"
    LOGGED_OUT = "loggedOut"
    HALF_DAY = "half-day"
    ABSENT = "absent"


class WorkLocation(str, Enum):
    OFFICE = "office"
    HOME = "home"


class PayrollStatus(str, Enum):
    PENDING = "Pending"
    PROCESSED = "Processed"
    PAID = "Paid"


class PaymentStatus(str, Enum):
    SUCCESS = "Success"
    FAILED = "Failed"
    PENDING = "Pending"


class LeaveStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class StructureScope(str, Enum):
    """Which employees a salary structure applies to."""

    ALL = "all"
    DEPARTMENT = "department"
    POSITION = "position"
