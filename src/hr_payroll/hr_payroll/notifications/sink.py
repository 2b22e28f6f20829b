from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationEvent:
    kind: str
    employee_id: int
    payload: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=datetime.now)


class NotificationSink(Protocol):
    """Delivery is fire-and-forget; callers never wait on a recipient."""

    def notify(self, event: NotificationEvent) -> None:
        raise NotImplementedError


class LoggingNotificationSink(NotificationSink):
    def notify(self, event: NotificationEvent) -> None:
        logger.info("notification %s employee=%s payload=%s", event.kind, event.employee_id, event.payload)
