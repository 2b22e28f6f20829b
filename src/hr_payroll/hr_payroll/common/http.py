from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any

from flask import jsonify

from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def to_json(value: Any) -> Any:
    """Convert domain values (dates, enums, nested containers) to JSON-safe types."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if hasattr(value, "to_dict"):
        return to_json(value.to_dict())
    return value


def error_response(exc: DomainError):
    body = {"success": False, "message": exc.message, "code": exc.code}
    body.update(to_json(exc.details))
    return jsonify(body), exc.status_code


def unexpected_error(*, action: str):
    logger.exception("Unexpected error while %s", action)
    return jsonify({"success": False, "message": "Internal server error", "code": "INTERNAL_ERROR"}), 500
