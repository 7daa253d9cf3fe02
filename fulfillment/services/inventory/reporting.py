"""
Inventory Reporting

Per-restaurant inventory summary and dashboard statistics, built from
the catalog, the ledger and the alert engine. Catalog products that were
never initialized are reported with the ledger's unseen baseline.
"""

from dataclasses import dataclass
from decimal import Decimal

from fulfillment.models import AvailabilityVerdict
from fulfillment.services.catalog.base import BaseProductCatalog
from fulfillment.services.inventory.alerts import AlertEngine
from fulfillment.services.inventory.ledger import StockLedger


@dataclass(frozen=True)
class InventoryLine:
    product_id: str
    name: str
    quantity: int
    low_stock_threshold: int
    manually_enabled: bool
    verdict: AvailabilityVerdict

    @property
    def stock_level(self) -> str:
        """Stock band from quantity and threshold, ignoring the manual flag."""
        if self.quantity == 0:
            return "out_of_stock"
        if self.quantity <= self.low_stock_threshold:
            return "low_stock"
        return "in_stock"


@dataclass(frozen=True)
class InventoryStats:
    total_products: int
    available_products: int
    low_stock_products: int
    out_of_stock_products: int
    disabled_products: int
    total_alerts: int
    total_value: Decimal


class InventoryReporter:

    def __init__(
        self,
        catalog: BaseProductCatalog,
        ledger: StockLedger,
        alerts: AlertEngine,
        default_threshold: int = 5,
    ):
        self._catalog = catalog
        self._ledger = ledger
        self._alerts = alerts
        self._default_threshold = default_threshold

    def inventory_summary(self, restaurant_id: str) -> list[InventoryLine]:
        """One line per catalog product of the restaurant, in menu order."""
        lines = []
        for product in self._catalog.list_products(restaurant_id):
            record = self._ledger.get_record(product.id)
            if record is None:
                quantity = self._ledger.get_quantity(product.id)
                threshold = self._default_threshold
                enabled = True
            else:
                quantity = record.quantity
                threshold = record.low_stock_threshold
                enabled = record.manually_enabled

            lines.append(
                InventoryLine(
                    product_id=product.id,
                    name=product.name,
                    quantity=quantity,
                    low_stock_threshold=threshold,
                    manually_enabled=enabled,
                    verdict=AvailabilityVerdict.from_stock(quantity, enabled),
                )
            )
        return lines

    def inventory_stats(self, restaurant_id: str) -> InventoryStats:
        lines = self.inventory_summary(restaurant_id)
        prices = {p.id: p.price for p in self._catalog.list_products(restaurant_id)}

        levels = [line.stock_level for line in lines]
        total_value = sum(
            (prices[line.product_id] * line.quantity for line in lines),
            Decimal("0"),
        )

        return InventoryStats(
            total_products=len(lines),
            available_products=levels.count("in_stock"),
            low_stock_products=levels.count("low_stock"),
            out_of_stock_products=levels.count("out_of_stock"),
            disabled_products=sum(1 for line in lines if not line.manually_enabled),
            total_alerts=len(self._alerts.list_active_alerts(restaurant_id)),
            total_value=total_value,
        )
