"""
Inventory Services

    - ledger: per-product stock, the only mutator of quantities
    - availability: four-way availability verdicts
    - alerts: low-stock / out-of-stock alert slots
    - reporting: per-restaurant summaries and statistics
"""

from fulfillment.services.inventory.alerts import AlertEngine
from fulfillment.services.inventory.availability import AvailabilityResolver
from fulfillment.services.inventory.ledger import StockLedger, StockUpdate
from fulfillment.services.inventory.reporting import (
    InventoryLine,
    InventoryReporter,
    InventoryStats,
)

__all__ = [
    "AlertEngine",
    "AvailabilityResolver",
    "StockLedger",
    "StockUpdate",
    "InventoryLine",
    "InventoryReporter",
    "InventoryStats",
]
