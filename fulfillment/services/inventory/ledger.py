"""
Stock Ledger

The only component that mutates raw product quantities.

Concurrency:
    Writes are serialized per product id with one ``threading.Lock`` per
    key, so two concurrent orders can never both take the last unit.
    ``decrement_many`` acquires every lock it needs in sorted key order,
    checks all amounts and only then applies them, which makes a
    multi-product order all-or-nothing.

Every successful mutation re-evaluates the product's alert slot while the
product lock is held; raised alerts are published after the locks are
released.
"""

import logging
import threading
from contextlib import ExitStack
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from fulfillment.core.exceptions import InsufficientStock, InvalidArgument
from fulfillment.models import Alert, StockRecord, utcnow
from fulfillment.services.inventory.alerts import AlertEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockUpdate:
    """One entry of a bulk inventory update. ``None`` fields are left as is."""
    product_id: str
    quantity: Optional[int] = None
    manually_enabled: Optional[bool] = None
    low_stock_threshold: Optional[int] = None


def _require_non_negative(name: str, value: int) -> None:
    if value < 0:
        raise InvalidArgument(f"{name} cannot be negative (got {value})")


class StockLedger:
    """
    Per-product stock store.

    Args:
        alert_engine: Re-evaluated after every quantity or threshold change
        default_threshold: Low-stock threshold for newly tracked products
        unseen_quantity: Quantity reported for products never initialized
    """

    def __init__(
        self,
        alert_engine: Optional[AlertEngine] = None,
        default_threshold: int = 5,
        unseen_quantity: int = 0,
    ):
        _require_non_negative("default_threshold", default_threshold)
        _require_non_negative("unseen_quantity", unseen_quantity)

        self._alerts = alert_engine
        self._default_threshold = default_threshold
        self._unseen_quantity = unseen_quantity
        self._records: dict[str, StockRecord] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _lock_for(self, product_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(product_id)
            if lock is None:
                lock = self._locks[product_id] = threading.Lock()
            return lock

    def _record_for(self, product_id: str) -> StockRecord:
        """Fetch or lazily create a record. Caller holds the product lock."""
        record = self._records.get(product_id)
        if record is None:
            record = StockRecord(
                product_id=product_id,
                quantity=self._unseen_quantity,
                low_stock_threshold=self._default_threshold,
            )
            self._records[product_id] = record
        return record

    def _current(self, product_id: str) -> int:
        """Quantity without creating a record. Caller holds the product lock."""
        record = self._records.get(product_id)
        return record.quantity if record else self._unseen_quantity

    def _evaluate(self, record: StockRecord) -> Optional[Alert]:
        """Re-run alert evaluation. Caller holds the product lock."""
        if self._alerts is None:
            return None
        return self._alerts.on_quantity_changed(
            record.product_id, record.quantity, record.low_stock_threshold
        )

    def _publish(self, raised: Iterable[Optional[Alert]]) -> None:
        if self._alerts is None:
            return
        for alert in raised:
            if alert:
                self._alerts.publish(alert)

    # =========================================================================
    # READS
    # =========================================================================

    def get_quantity(self, product_id: str) -> int:
        """Current quantity, or the unseen baseline for untracked products."""
        if product_id not in self._records:
            return self._unseen_quantity
        with self._lock_for(product_id):
            return self._records[product_id].quantity

    def get_record(self, product_id: str) -> Optional[StockRecord]:
        """Return a copy of the product's record, or None if untracked."""
        if product_id not in self._records:
            return None
        with self._lock_for(product_id):
            return replace(self._records[product_id])

    def snapshot(self, product_ids: Optional[Iterable[str]] = None) -> list[StockRecord]:
        """Copies of tracked records, optionally limited to some products."""
        if product_ids is None:
            product_ids = list(self._records)
        records = (self.get_record(pid) for pid in product_ids)
        return [r for r in records if r is not None]

    def is_tracked(self, product_id: str) -> bool:
        return product_id in self._records

    # =========================================================================
    # WRITES
    # =========================================================================

    def initialize(
        self,
        product_id: str,
        quantity: int,
        low_stock_threshold: Optional[int] = None,
        manually_enabled: bool = True,
        updated_by: Optional[str] = None,
    ) -> None:
        """Explicitly start tracking a product (or reset its record)."""
        _require_non_negative("quantity", quantity)
        threshold = self._default_threshold if low_stock_threshold is None else low_stock_threshold
        _require_non_negative("low_stock_threshold", threshold)

        with self._lock_for(product_id):
            record = StockRecord(
                product_id=product_id,
                quantity=quantity,
                low_stock_threshold=threshold,
                manually_enabled=manually_enabled,
                updated_by=updated_by,
            )
            self._records[product_id] = record
            raised = self._evaluate(record)

        logger.debug(f"Stock initialized for {product_id}: {quantity} (threshold={threshold})")
        self._publish([raised])

    def set_quantity(
        self,
        product_id: str,
        new_quantity: int,
        updated_by: Optional[str] = None,
    ) -> None:
        """
        Administrative override of a product's quantity.

        Raises:
            InvalidArgument: If new_quantity is negative
        """
        _require_non_negative("quantity", new_quantity)

        with self._lock_for(product_id):
            record = self._record_for(product_id)
            previous = record.quantity
            record.quantity = new_quantity
            record.last_updated = utcnow()
            record.updated_by = updated_by
            raised = self._evaluate(record)

        logger.info(f"Stock set for {product_id}: {previous} -> {new_quantity}")
        self._publish([raised])

    def decrement(self, product_id: str, amount: int) -> bool:
        """
        Subtract ``amount`` units atomically.

        Returns:
            False without touching state when stock is insufficient.

        Raises:
            InvalidArgument: If amount is less than 1
        """
        if amount < 1:
            raise InvalidArgument(f"Decrement amount must be at least 1 (got {amount})")

        # Untracked ids that the baseline cannot cover never get a lock
        if product_id not in self._records and amount > self._unseen_quantity:
            logger.warning(
                f"Insufficient stock for untracked {product_id}. "
                f"Available: {self._unseen_quantity}, Requested: {amount}"
            )
            return False

        with self._lock_for(product_id):
            current = self._current(product_id)
            if amount > current:
                logger.warning(
                    f"Insufficient stock for {product_id}. "
                    f"Available: {current}, Requested: {amount}"
                )
                return False

            record = self._record_for(product_id)
            record.quantity = current - amount
            record.last_updated = utcnow()
            raised = self._evaluate(record)

        logger.info(f"Stock decremented for {product_id}: {current} -> {current - amount}")
        self._publish([raised])
        return True

    def decrement_many(self, amounts: dict[str, int]) -> None:
        """
        Decrement several products as one all-or-nothing step.

        Locks are taken in sorted product order, every amount is checked,
        and only if all products can cover their amount is anything
        subtracted.

        Raises:
            InvalidArgument: If any amount is less than 1
            InsufficientStock: Naming every product that falls short;
                no quantity is changed
        """
        for product_id, amount in amounts.items():
            if amount < 1:
                raise InvalidArgument(
                    f"Decrement amount must be at least 1 (got {amount} for {product_id})"
                )

        product_ids = sorted(amounts)
        raised = []

        with ExitStack() as stack:
            for product_id in product_ids:
                stack.enter_context(self._lock_for(product_id))

            short = [pid for pid in product_ids if amounts[pid] > self._current(pid)]
            if short:
                logger.warning(f"Batch decrement refused, insufficient stock: {short}")
                raise InsufficientStock(short)

            now = utcnow()
            for product_id in product_ids:
                record = self._record_for(product_id)
                record.quantity -= amounts[product_id]
                record.last_updated = now
                raised.append(self._evaluate(record))

        logger.info(
            "Stock decremented: "
            + ", ".join(f"{pid} -{amounts[pid]}" for pid in product_ids)
        )
        self._publish(raised)

    def set_manual_enabled(
        self,
        product_id: str,
        enabled: bool,
        updated_by: Optional[str] = None,
    ) -> None:
        with self._lock_for(product_id):
            record = self._record_for(product_id)
            record.manually_enabled = enabled
            record.last_updated = utcnow()
            record.updated_by = updated_by

        logger.info(f"Product {product_id} manually {'enabled' if enabled else 'disabled'}")

    def set_threshold(
        self,
        product_id: str,
        threshold: int,
        updated_by: Optional[str] = None,
    ) -> None:
        """
        Change a product's low-stock threshold and re-evaluate its alert.

        Raises:
            InvalidArgument: If threshold is negative
        """
        _require_non_negative("low_stock_threshold", threshold)

        with self._lock_for(product_id):
            record = self._record_for(product_id)
            record.low_stock_threshold = threshold
            record.last_updated = utcnow()
            record.updated_by = updated_by
            raised = self._evaluate(record)

        logger.info(f"Low-stock threshold for {product_id} set to {threshold}")
        self._publish([raised])

    def apply_bulk(
        self,
        updates: Iterable[StockUpdate],
        reason: Optional[str] = None,
        updated_by: Optional[str] = None,
    ) -> int:
        """
        Apply several inventory updates.

        Every entry is validated before the first one is applied, so a bad
        entry rejects the whole batch.

        Returns:
            Number of products updated
        """
        updates = list(updates)
        for update in updates:
            if update.quantity is not None:
                _require_non_negative(f"quantity for {update.product_id}", update.quantity)
            if update.low_stock_threshold is not None:
                _require_non_negative(
                    f"low_stock_threshold for {update.product_id}", update.low_stock_threshold
                )

        for update in updates:
            if update.manually_enabled is not None:
                self.set_manual_enabled(update.product_id, update.manually_enabled, updated_by)
            if update.low_stock_threshold is not None:
                self.set_threshold(update.product_id, update.low_stock_threshold, updated_by)
            if update.quantity is not None:
                self.set_quantity(update.product_id, update.quantity, updated_by)

        logger.info(
            f"Bulk inventory update applied to {len(updates)} products"
            + (f" ({reason})" if reason else "")
        )
        return len(updates)
