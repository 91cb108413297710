"""Notifier that emits notifications as structured log events."""

from __future__ import annotations

import structlog

from ..schemas import Notification


class LoggingNotifier:
    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__)
        self.delivered: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.delivered.append(notification)
        log = self._logger.warning if notification.priority == "high" else self._logger.info
        log(
            "notification.sent",
            type=notification.type,
            candidate_id=notification.candidate_id,
            new_status=notification.new_status,
            recipient_role=notification.recipient_role,
            message=notification.message,
        )
