"""
Order Lifecycle Manager

Creates orders from validated line items, takes their stock from the
ledger and owns the order status state machine.

Order creation flow:
    1. Restaurant and products are checked against the catalog
    2. Every required customization group must have a selection
    3. Every product must be available for the summed requested quantity
    4. All quantities are decremented in one all-or-nothing ledger call
    5. The order is priced, stored in ``pending`` and returned

Steps 1-3 run before any state is touched. Step 4 can still lose a race
to a concurrent order; the ledger then leaves every quantity unchanged
and the order fails with InsufficientStock.
"""

import logging
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from datetime import timedelta
from decimal import Decimal
from typing import Callable, Optional

from fulfillment.core.exceptions import (
    InsufficientStock,
    InvalidArgument,
    InvalidRestaurant,
    InvalidTransition,
    MissingRequiredSelection,
    NotFound,
)
from fulfillment.models import (
    CustomerInfo,
    Order,
    OrderItem,
    OrderItemCustomization,
    OrderStatus,
    OrderType,
    Product,
    utcnow,
)
from fulfillment.services.catalog.base import BaseProductCatalog
from fulfillment.services.inventory.availability import AvailabilityResolver
from fulfillment.services.inventory.ledger import StockLedger
from fulfillment.services.orders.state_machine import PAYABLE_STATUSES, can_transition

logger = logging.getLogger(__name__)

OrderListener = Callable[[list[Order]], None]


# =============================================================================
# REQUESTS
# =============================================================================

@dataclass(frozen=True)
class SelectionRequest:
    category: str
    option: str


@dataclass(frozen=True)
class OrderLineRequest:
    product_id: str
    quantity: int
    selections: tuple[SelectionRequest, ...] = ()


@dataclass(frozen=True)
class OrderRequest:
    restaurant_id: str
    items: tuple[OrderLineRequest, ...]
    payment_method: Optional[str] = None
    order_type: OrderType = OrderType.DELIVERY
    customer: Optional[CustomerInfo] = None
    notes: Optional[str] = None
    waiter_id: Optional[str] = None


@dataclass
class _ValidatedLine:
    product: Product
    quantity: int
    customizations: list[OrderItemCustomization] = field(default_factory=list)


# =============================================================================
# MANAGER
# =============================================================================

class OrderManager:
    """
    In-memory order store plus the order state machine.

    Args:
        catalog: Product prices, restaurants and required groups
        ledger: Stock ledger decremented on order creation
        resolver: Availability verdicts checked before decrementing
    """

    def __init__(
        self,
        catalog: BaseProductCatalog,
        ledger: StockLedger,
        resolver: AvailabilityResolver,
    ):
        self._catalog = catalog
        self._ledger = ledger
        self._resolver = resolver
        self._orders: "OrderedDict[str, Order]" = OrderedDict()
        self._listeners: list[OrderListener] = []
        self._lock = threading.Lock()

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def _validate_lines(self, request: OrderRequest) -> list[_ValidatedLine]:
        if not request.items:
            raise InvalidArgument("An order needs at least one item")

        restaurant = self._catalog.get_restaurant(request.restaurant_id)
        if restaurant is None:
            raise InvalidRestaurant(f"Unknown restaurant '{request.restaurant_id}'")
        if not restaurant.is_open:
            raise InvalidRestaurant(f"{restaurant.name} is not taking orders")

        lines = []
        missing: list[str] = []

        for line in request.items:
            if line.quantity < 1:
                raise InvalidArgument(
                    f"Quantity for {line.product_id} must be at least 1 (got {line.quantity})"
                )

            product = self._catalog.get_product(line.product_id)
            if product is None or product.restaurant_id != restaurant.id:
                raise InvalidRestaurant(
                    f"'{line.product_id}' is not on the menu of {restaurant.name}"
                )

            chosen = {s.category for s in line.selections}
            for category in product.required_categories:
                if category not in chosen and category not in missing:
                    missing.append(category)

            lines.append(_ValidatedLine(product=product, quantity=line.quantity))

        if missing:
            raise MissingRequiredSelection(missing)

        for validated, line in zip(lines, request.items):
            validated.customizations = self._price_selections(validated.product, line.selections)

        return lines

    @staticmethod
    def _price_selections(
        product: Product,
        selections: tuple[SelectionRequest, ...],
    ) -> list[OrderItemCustomization]:
        customizations = []
        seen = set()
        for selection in selections:
            group = product.find_group(selection.category)
            if group is None:
                raise InvalidArgument(
                    f"{product.name} has no '{selection.category}' option group"
                )
            if selection.category in seen:
                raise InvalidArgument(
                    f"Only one '{selection.category}' choice is allowed for {product.name}"
                )
            option = group.find_option(selection.option)
            if option is None:
                raise InvalidArgument(
                    f"'{selection.option}' is not a valid {selection.category} for {product.name}"
                )
            seen.add(selection.category)
            customizations.append(
                OrderItemCustomization(
                    category=group.category,
                    selected_option=option.name,
                    extra_cost=option.extra_cost,
                )
            )
        return customizations

    def _check_availability(self, amounts: dict[str, int]) -> None:
        verdicts = self._resolver.resolve_all(amounts)
        short = [
            pid for pid, verdict in verdicts.items()
            if not verdict.is_available or verdict.available_quantity < amounts[pid]
        ]
        if short:
            names = ", ".join(self._catalog.display_name(pid) for pid in short)
            raise InsufficientStock(short, f"Not enough stock for: {names}")

    # =========================================================================
    # CREATION
    # =========================================================================

    def create_order(self, request: OrderRequest) -> Order:
        """
        Validate, reserve stock and store a new ``pending`` order.

        Raises:
            InvalidArgument: Empty order, bad quantity or unknown selection
            InvalidRestaurant: Unknown or closed restaurant, foreign product
            MissingRequiredSelection: Required groups without a selection
            InsufficientStock: Any product unavailable or short of stock
        """
        lines = self._validate_lines(request)

        amounts: dict[str, int] = {}
        for line in lines:
            amounts[line.product.id] = amounts.get(line.product.id, 0) + line.quantity

        self._check_availability(amounts)

        try:
            self._ledger.decrement_many(amounts)
        except InsufficientStock as e:
            names = ", ".join(self._catalog.display_name(pid) for pid in e.product_ids)
            raise InsufficientStock(e.product_ids, f"Not enough stock for: {names}") from e

        items = tuple(
            OrderItem(
                product_id=line.product.id,
                name=line.product.name,
                quantity=line.quantity,
                unit_price=line.product.price,
                customizations=tuple(line.customizations),
            )
            for line in lines
        )

        order = Order(
            id=f"order-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}",
            restaurant_id=request.restaurant_id,
            items=items,
            total_amount=sum((item.total_price for item in items), Decimal("0")),
            order_type=request.order_type,
            payment_method=request.payment_method,
            customer=request.customer,
            notes=request.notes,
            waiter_id=request.waiter_id,
        )

        with self._lock:
            self._orders[order.id] = order

        logger.info(
            f"New order created: {order.id} for {request.restaurant_id} "
            f"({len(items)} items, total={order.total_amount})"
        )
        self._notify()
        return replace(order)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def transition(self, order_id: str, new_status: OrderStatus) -> Order:
        """
        Move an order to ``new_status``.

        Raises:
            NotFound: Unknown order id
            InvalidArgument: Unknown status value
            InvalidTransition: Move not in the transition table
        """
        try:
            new_status = OrderStatus(new_status)
        except ValueError:
            raise InvalidArgument(f"Unknown order status '{new_status}'")

        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                raise NotFound(f"Order {order_id} not found")
            if not can_transition(order.status, new_status):
                raise InvalidTransition(order.status.value, new_status.value)
            previous = order.status
            order.status = new_status
            snapshot = replace(order)

        logger.info(f"Order {order_id} status updated: {previous.value} -> {new_status.value}")
        self._notify()
        return snapshot

    def update_status(self, order_id: str, new_status: OrderStatus) -> bool:
        """Boolean form of ``transition``; never raises for bad ids or moves."""
        try:
            self.transition(order_id, new_status)
        except (NotFound, InvalidTransition, InvalidArgument) as e:
            logger.warning(f"Status update rejected for {order_id}: {e.message}")
            return False
        return True

    def mark_paid(self, order_id: str, payment_method: str) -> bool:
        """
        Record payment of a served order.

        Only orders in ``ready`` or ``completed`` that were not paid yet
        can be marked.
        """
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                logger.warning(f"Order {order_id} not found")
                return False
            if order.status not in PAYABLE_STATUSES or order.paid_at is not None:
                logger.warning(
                    f"Order {order_id} cannot be marked paid "
                    f"(status={order.status.value}, paid={order.paid_at is not None})"
                )
                return False
            order.paid_at = utcnow()
            order.payment_method = payment_method

        logger.info(f"Order {order_id} paid via {payment_method}")
        self._notify()
        return True

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_order(self, order_id: str) -> Optional[Order]:
        with self._lock:
            order = self._orders.get(order_id)
            return replace(order) if order else None

    def list_orders(
        self,
        restaurant_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
    ) -> list[Order]:
        """Orders newest first, optionally filtered."""
        with self._lock:
            orders = [replace(o) for o in reversed(self._orders.values())]
        if restaurant_id is not None:
            orders = [o for o in orders if o.restaurant_id == restaurant_id]
        if status is not None:
            orders = [o for o in orders if o.status == status]
        return orders

    def recent_orders(
        self,
        restaurant_id: Optional[str] = None,
        hours: int = 24,
    ) -> list[Order]:
        cutoff = utcnow() - timedelta(hours=hours)
        return [o for o in self.list_orders(restaurant_id) if o.created_at >= cutoff]

    # =========================================================================
    # SUBSCRIPTIONS
    # =========================================================================

    def subscribe(self, listener: OrderListener) -> Callable[[], None]:
        """
        Register a listener for order changes.

        The listener receives the full order list right away and again
        after every creation, status change or payment.

        Returns:
            A callable that removes the listener.
        """
        with self._lock:
            self._listeners.append(listener)
        self._deliver(listener, self.list_orders())

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        if not listeners:
            return
        orders = self.list_orders()
        for listener in listeners:
            self._deliver(listener, orders)

    @staticmethod
    def _deliver(listener: OrderListener, orders: list[Order]) -> None:
        try:
            listener(list(orders))
        except Exception as e:
            logger.exception(f"Order listener failed: {e}")
