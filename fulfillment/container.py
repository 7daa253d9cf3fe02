"""
Service Container

Owns one instance of every fulfillment component. Built once at
application startup, stored on ``app.state`` and handed to route handlers
through the ``get_container`` dependency. Tests build isolated containers.
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from fulfillment.core.config import Settings, get_settings
from fulfillment.models import Alert
from fulfillment.services.catalog import BaseProductCatalog, get_product_catalog
from fulfillment.services.inventory import (
    AlertEngine,
    AvailabilityResolver,
    InventoryReporter,
    StockLedger,
)
from fulfillment.services.inventory.alerts import AlertListener
from fulfillment.services.orders import OrderManager

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    catalog: BaseProductCatalog
    alerts: AlertEngine
    ledger: StockLedger
    resolver: AvailabilityResolver
    orders: OrderManager
    reporter: InventoryReporter


def queue_alert_notification(alert: Alert) -> None:
    """Hand a raised alert to the Celery worker."""
    from fulfillment.tasks import dispatch_inventory_alert

    dispatch_inventory_alert.delay(alert.to_dict())
    logger.debug(f"Alert {alert.id} queued for delivery")


def seed_demo_inventory(container: ServiceContainer) -> int:
    """
    Give every catalog product a random demo quantity.

    Returns:
        Number of products seeded
    """
    settings = container.settings
    rng = random.Random(settings.demo_seed)
    products = container.catalog.list_products()
    for product in products:
        container.ledger.initialize(
            product.id,
            rng.randint(settings.demo_stock_min, settings.demo_stock_max),
            updated_by="demo-seed",
        )
    logger.info(f"Demo inventory seeded for {len(products)} products")
    return len(products)


def build_container(
    settings: Optional[Settings] = None,
    catalog: Optional[BaseProductCatalog] = None,
    on_alert_raised: Optional[AlertListener] = None,
) -> ServiceContainer:
    """
    Wire all components together.

    Args:
        settings: Defaults to the cached application settings
        catalog: Defaults to the bundled in-memory catalog
        on_alert_raised: Alert listener; defaults to Celery dispatch when
            ``alert_notifications_enabled`` is set, otherwise none
    """
    settings = settings or get_settings()
    catalog = catalog or get_product_catalog()

    if on_alert_raised is None and settings.alert_notifications_enabled:
        on_alert_raised = queue_alert_notification

    alerts = AlertEngine(catalog=catalog, on_alert_raised=on_alert_raised)
    ledger = StockLedger(
        alert_engine=alerts,
        default_threshold=settings.default_low_stock_threshold,
        unseen_quantity=settings.unseen_product_quantity,
    )
    resolver = AvailabilityResolver(ledger)

    container = ServiceContainer(
        settings=settings,
        catalog=catalog,
        alerts=alerts,
        ledger=ledger,
        resolver=resolver,
        orders=OrderManager(catalog, ledger, resolver),
        reporter=InventoryReporter(
            catalog,
            ledger,
            alerts,
            default_threshold=settings.default_low_stock_threshold,
        ),
    )

    if settings.seed_demo_inventory:
        seed_demo_inventory(container)

    return container


def get_container(request: Request) -> ServiceContainer:
    """
    Dependency injection for FastAPI routes.
    Returns the container created at application startup.
    """
    return request.app.state.container
