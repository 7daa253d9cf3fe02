"""
Stock Alert Engine

Keeps at most one alert slot per product. Every stock change for a
product supersedes (removes) the previous slot before a new alert is
possibly raised, so the active set can never hold duplicates.

Alert types:
    - low_stock: 0 < quantity <= threshold
    - out_of_stock: quantity == 0
"""

import logging
import threading
import uuid
from typing import Callable, Optional

from fulfillment.models import Alert, AlertType
from fulfillment.services.catalog.base import BaseProductCatalog

logger = logging.getLogger(__name__)

AlertListener = Callable[[Alert], None]


class AlertEngine:
    """
    Single-slot-per-product alert store.

    Args:
        catalog: Used for product names and restaurant filtering
        on_alert_raised: Called with every newly raised alert (e.g. to
            queue a staff notification). Failures are logged, never raised.
    """

    def __init__(
        self,
        catalog: Optional[BaseProductCatalog] = None,
        on_alert_raised: Optional[AlertListener] = None,
    ):
        self._catalog = catalog
        self._on_alert_raised = on_alert_raised
        self._slots: dict[str, Alert] = {}
        self._lock = threading.Lock()

    def _product_name(self, product_id: str) -> str:
        if self._catalog:
            return self._catalog.display_name(product_id)
        return product_id.replace("-", " ").title()

    def on_quantity_changed(
        self,
        product_id: str,
        new_quantity: int,
        threshold: int,
    ) -> Optional[Alert]:
        """
        Re-evaluate the alert slot of one product.

        Removes any existing alert for the product, then raises a new one
        when ``new_quantity <= threshold``.

        Returns:
            The newly raised alert, or None. The alert is not yet
            published; call ``publish`` once the caller has released its
            own locks.
        """
        alert = None
        if new_quantity <= threshold:
            alert = Alert(
                id=f"alert-{product_id}-{uuid.uuid4().hex[:12]}",
                product_id=product_id,
                product_name=self._product_name(product_id),
                type=AlertType.OUT_OF_STOCK if new_quantity == 0 else AlertType.LOW_STOCK,
                current_quantity=new_quantity,
                threshold=threshold,
            )

        with self._lock:
            superseded = self._slots.pop(product_id, None)
            if alert:
                self._slots[product_id] = alert

        if superseded:
            logger.debug(f"Alert {superseded.id} superseded for {product_id}")
        if alert:
            logger.info(
                f"{alert.type.value} alert raised for {product_id} "
                f"(quantity={new_quantity}, threshold={threshold})"
            )
        return alert

    def publish(self, alert: Alert) -> None:
        """Hand a raised alert to the listener, if one is configured."""
        if not self._on_alert_raised:
            return
        try:
            self._on_alert_raised(alert)
        except Exception as e:
            logger.exception(f"Alert listener failed for {alert.id}: {e}")

    def list_active_alerts(self, restaurant_id: Optional[str] = None) -> list[Alert]:
        """
        Return unacknowledged alerts, newest first.

        Args:
            restaurant_id: Only alerts for products of this restaurant.
                Products unknown to the catalog never match a filter.
        """
        with self._lock:
            alerts = [a for a in self._slots.values() if not a.acknowledged]

        if restaurant_id is not None:
            if self._catalog is None:
                return []
            alerts = [
                a for a in alerts
                if self._catalog.restaurant_of(a.product_id) == restaurant_id
            ]

        return sorted(alerts, key=lambda a: a.raised_at, reverse=True)

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        with self._lock:
            for alert in self._slots.values():
                if alert.id == alert_id:
                    return alert
        return None

    def acknowledge(self, alert_id: str) -> bool:
        """
        Mark an alert as acknowledged.

        Returns:
            False for unknown ids and for alerts already acknowledged.
        """
        with self._lock:
            for alert in self._slots.values():
                if alert.id == alert_id:
                    if alert.acknowledged:
                        return False
                    alert.acknowledged = True
                    logger.info(f"Alert {alert_id} acknowledged")
                    return True

        logger.debug(f"Acknowledge ignored, unknown alert {alert_id}")
        return False

    def clear(self) -> None:
        with self._lock:
            self._slots.clear()
