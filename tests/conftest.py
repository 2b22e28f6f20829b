from __future__ import annotations

from datetime import datetime

import pytest

from tests.fakes import (
    InMemoryAttendance,
    InMemoryEmployees,
    InMemoryLeaves,
    InMemoryPayrolls,
    InMemoryStructures,
    RecordingGateway,
    RecordingSink,
    make_employee,
)


@pytest.fixture
def fixed_now() -> datetime:
    # Monday, office opens at 09:00.
    return datetime(2024, 3, 4, 9, 0)


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees().add(make_employee(1, name="Asha Rao"), make_employee(2, name="Vikram Shah"))


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def leaves_repo() -> InMemoryLeaves:
    return InMemoryLeaves()


@pytest.fixture
def payrolls_repo() -> InMemoryPayrolls:
    return InMemoryPayrolls()


@pytest.fixture
def structures_repo() -> InMemoryStructures:
    return InMemoryStructures()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()
