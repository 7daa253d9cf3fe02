"""
Twilio Alert Notifier

Production implementation that texts stock alerts to the restaurant's
alert recipient (kitchen or manager phone) using Twilio SMS.
"""

import logging
from typing import Optional

from twilio.rest import Client as TwilioClient
from twilio.base.exceptions import TwilioException

from fulfillment.core.config import get_settings
from fulfillment.services.notifications.base import (
    BaseAlertNotifier,
    NotificationResult,
    format_alert_message,
)

logger = logging.getLogger(__name__)


class TwilioAlertNotifier(BaseAlertNotifier):
    """Production notifier using Twilio SMS."""

    def __init__(self, client: Optional[TwilioClient] = None):
        settings = get_settings()
        self.from_number = settings.twilio_phone_number
        self.recipient = settings.alert_sms_recipient

        if client is not None:
            self.twilio_client = client
        elif settings.twilio_account_sid and settings.twilio_auth_token:
            self.twilio_client = TwilioClient(
                settings.twilio_account_sid,
                settings.twilio_auth_token
            )
        else:
            self.twilio_client = None
            logger.warning("Twilio credentials not configured")

        logger.info("TwilioAlertNotifier initialized")

    @property
    def provider_name(self) -> str:
        return "twilio"

    def send_alert(self, alert: dict) -> NotificationResult:
        """Text an alert to the configured recipient."""
        if not self.twilio_client or not self.recipient:
            return NotificationResult(
                success=False,
                error_message="Twilio or alert recipient not configured",
                provider="twilio",
                retryable=False
            )

        try:
            result = self.twilio_client.messages.create(
                body=format_alert_message(alert),
                from_=self.from_number,
                to=self.recipient
            )

            logger.info(f"Alert SMS sent for {alert['product_id']}: {result.sid}")

            return NotificationResult(
                success=True,
                message_id=result.sid,
                provider="twilio"
            )

        except TwilioException as e:
            logger.error(f"Twilio error: {e}")
            return NotificationResult(
                success=False,
                error_message=str(e),
                provider="twilio"
            )

    def health_check(self) -> bool:
        return self.twilio_client is not None and bool(self.recipient)
