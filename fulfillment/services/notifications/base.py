"""
Alert Notifier Abstract Base Class

Defines the interface for delivering stock alerts to restaurant staff.
Supports both Mock (development) and Twilio SMS (production)
implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class NotificationResult:
    """Result from delivering a notification."""
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"
    # False when retrying cannot help (missing credentials or recipient)
    retryable: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "message_id": self.message_id,
            "error_message": self.error_message,
            "provider": self.provider,
            "retryable": self.retryable,
        }


def format_alert_message(alert: dict) -> str:
    """Human readable text for an alert payload (``Alert.to_dict()``)."""
    if alert["type"] == "out_of_stock":
        headline = f"OUT OF STOCK: {alert['product_name']}"
    else:
        headline = f"Low stock: {alert['product_name']}"
    return (
        f"{headline}\n"
        f"Remaining: {alert['current_quantity']} (threshold {alert['threshold']})"
    )


class BaseAlertNotifier(ABC):
    """Abstract base class for alert notifiers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    def send_alert(self, alert: dict) -> NotificationResult:
        """
        Deliver one alert.

        Args:
            alert: Serialized alert (``Alert.to_dict()``), as carried by
                the Celery task payload
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check service connectivity."""
        pass
