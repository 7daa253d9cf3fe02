"""
Order status transition table.

    pending   -> preparing, cancelled
    preparing -> ready, cancelled
    ready     -> completed, preparing (kitchen correction)
    completed, cancelled: terminal
"""

from fulfillment.models import OrderStatus

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED, OrderStatus.PREPARING}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Table and dine-in orders are settled once the food has been served
PAYABLE_STATUSES = frozenset({OrderStatus.READY, OrderStatus.COMPLETED})


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return requested in TRANSITIONS[current]
