"""
Alert Notifier Factory

Returns Mock or Twilio alert notifier based on ENV_MODE.
"""

import logging
from functools import lru_cache

from fulfillment.core.config import get_settings
from fulfillment.services.notifications.base import (
    BaseAlertNotifier,
    NotificationResult,
    format_alert_message,
)
from fulfillment.services.notifications.mock import MockAlertNotifier
from fulfillment.services.notifications.real import TwilioAlertNotifier

logger = logging.getLogger(__name__)


@lru_cache()
def get_alert_notifier() -> BaseAlertNotifier:
    """Get the configured alert notifier."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Alert Notifier: Using MockAlertNotifier (development mode)")
        return MockAlertNotifier()
    else:
        logger.info(f"Alert Notifier: Using TwilioAlertNotifier ({settings.env_mode.value} mode)")
        return TwilioAlertNotifier()


def reset_alert_notifier() -> None:
    """Clear the cached notifier instance."""
    get_alert_notifier.cache_clear()


__all__ = [
    "get_alert_notifier",
    "reset_alert_notifier",
    "BaseAlertNotifier",
    "NotificationResult",
    "format_alert_message",
    "MockAlertNotifier",
    "TwilioAlertNotifier",
]
