"""
Celery Tasks
Background delivery of stock alerts to restaurant staff.
"""

import logging
import time

from fulfillment.celery_worker import celery_app
from fulfillment.services.notifications import get_alert_notifier

logger = logging.getLogger(__name__)


class AlertDeliveryError(Exception):
    """The notifier reported a failed delivery; Celery retries the task."""


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(AlertDeliveryError,),
    retry_backoff=True
)
def dispatch_inventory_alert(self, alert: dict) -> dict:
    """
    Deliver a raised stock alert through the configured notifier.

    Args:
        alert: Serialized alert (``Alert.to_dict()``)

    Returns:
        dict: Notification result plus task bookkeeping

    Raises:
        AlertDeliveryError: Retryable delivery failure. A misconfigured
            notifier is logged and returned without a retry.
    """
    task_id = self.request.id
    start_time = time.time()

    logger.info(f"Task {task_id}: dispatching {alert['type']} alert for {alert['product_id']}")

    result = get_alert_notifier().send_alert(alert)
    elapsed = round(time.time() - start_time, 3)

    if not result.success and not result.retryable:
        logger.error(
            f"Task {task_id}: alert {alert['id']} dropped, notifier misconfigured - "
            f"{result.error_message}"
        )
    elif not result.success:
        logger.warning(
            f"Task {task_id}: alert {alert['id']} not delivered after {elapsed}s - "
            f"{result.error_message}"
        )
        raise AlertDeliveryError(result.error_message or "delivery failed")
    else:
        logger.info(f"Task {task_id}: alert {alert['id']} delivered in {elapsed}s")

    payload = result.to_dict()
    payload['task_id'] = task_id
    payload['alert_id'] = alert['id']
    payload['processing_time_seconds'] = elapsed
    return payload

