from __future__ import annotations

from typing import Any, Mapping, Optional

from ..core.exceptions import ValidationError
from .datetime_utils import month_number


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer") from None


def require_amount(value: Any, field_name: str) -> float:
    """Accept ints/floats/numeric strings; reject anything else."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be numeric")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be numeric") from None


def require_month_year(month: Any, year: Any) -> tuple[str, int]:
    """Validate a (month name, year) pair and normalize the month's casing."""
    if not month or not year:
        raise ValidationError("month and year are required")
    month_s = require_non_empty(str(month), "month")
    month_number(month_s)
    return month_s.capitalize(), require_int(year, "year")


def amounts_from(payload: Optional[Mapping[str, Any]], fields: Mapping[str, str]) -> dict[str, float]:
    """Pick numeric fields from a camelCase JSON mapping.

    ``fields`` maps JSON keys to attribute names; unknown keys are ignored.
    """
    payload = payload or {}
    return {attr: require_amount(payload.get(key), key) for key, attr in fields.items() if key in payload}
