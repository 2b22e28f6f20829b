from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveRecord:
    """Leave request as decided by the approval workflow."""

    leave_id: int
    employee_id: int
    start_date: date
    end_date: date
    status: LeaveStatus
    leave_type: Optional[str] = None
    reason: Optional[str] = None

    def days_within(self, start: date, end: date) -> int:
        """Calendar days of this leave that fall inside [start, end]."""
        lo = max(self.start_date, start)
        hi = min(self.end_date, end)
        if hi < lo:
            return 0
        return (hi - lo).days + 1
