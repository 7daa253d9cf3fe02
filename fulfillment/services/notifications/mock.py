"""
Mock Alert Notifier

Simulates alert delivery for development.
No actual messages are sent - just logged.
"""

import uuid
import logging

from fulfillment.services.notifications.base import (
    BaseAlertNotifier,
    NotificationResult,
    format_alert_message,
)

logger = logging.getLogger(__name__)


class MockAlertNotifier(BaseAlertNotifier):
    """Mock notifier for development. Keeps every delivered alert in ``sent``."""

    def __init__(self):
        self.sent: list[dict] = []
        logger.info("MockAlertNotifier initialized")

    @property
    def provider_name(self) -> str:
        return "mock"

    def send_alert(self, alert: dict) -> NotificationResult:
        message_id = f"alert_mock_{uuid.uuid4().hex[:12]}"
        self.sent.append(alert)
        logger.info(
            f"Mock alert delivered ({message_id}): "
            f"{format_alert_message(alert).splitlines()[0]}"
        )
        return NotificationResult(
            success=True,
            message_id=message_id,
            provider="mock",
        )

    def health_check(self) -> bool:
        """Mock always returns healthy."""
        return True
