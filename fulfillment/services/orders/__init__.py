"""
Order Services

    - manager: order creation, stock reservation, status lifecycle
    - state_machine: the order status transition table
"""

from fulfillment.services.orders.manager import (
    OrderLineRequest,
    OrderManager,
    OrderRequest,
    SelectionRequest,
)
from fulfillment.services.orders.state_machine import TRANSITIONS, can_transition

__all__ = [
    "OrderLineRequest",
    "OrderManager",
    "OrderRequest",
    "SelectionRequest",
    "TRANSITIONS",
    "can_transition",
]
