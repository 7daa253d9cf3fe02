"""
Availability Resolver

Combines the ledger quantity with the manual enable/disable flag into a
single verdict. Verdicts are recomputed on every call and never cached.
"""

from typing import Iterable

from fulfillment.models import AvailabilityVerdict
from fulfillment.services.inventory.ledger import StockLedger


class AvailabilityResolver:
    """Side-effect-free reader over a StockLedger."""

    def __init__(self, ledger: StockLedger):
        self._ledger = ledger

    def resolve(self, product_id: str) -> AvailabilityVerdict:
        """
        Resolve one product.

        Quantity and flag are read from a single record copy, so a verdict
        never mixes two different stock states.
        """
        record = self._ledger.get_record(product_id)
        if record is None:
            return AvailabilityVerdict.from_stock(
                self._ledger.get_quantity(product_id), manually_enabled=True
            )
        return AvailabilityVerdict.from_stock(record.quantity, record.manually_enabled)

    def resolve_all(self, product_ids: Iterable[str]) -> dict[str, AvailabilityVerdict]:
        return {pid: self.resolve(pid) for pid in product_ids}

    def can_fulfil(self, product_id: str, quantity: int) -> bool:
        """True when the product is available and covers ``quantity`` units."""
        verdict = self.resolve(product_id)
        return verdict.is_available and verdict.available_quantity >= quantity
