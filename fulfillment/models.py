"""
Fulfillment Domain Models

In-memory records owned by the fulfillment services:
- StockRecord: per-product stock held by the stock ledger
- AvailabilityVerdict: derived purchasability answer (never stored)
- Alert: low-stock / out-of-stock warning, one active slot per product
- Order / OrderItem: customer orders and their priced line items

Catalog shapes (Product, SideGroup, SideOption) describe the external
product catalog the order manager validates selections against.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class AvailabilityReason(str, enum.Enum):
    """Why a product is, or is not, purchasable."""
    AVAILABLE = "available"
    OUT_OF_STOCK = "out_of_stock"
    MANUALLY_DISABLED = "manually_disabled"
    BOTH_DISABLED = "both_disabled"


class AlertType(str, enum.Enum):
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderType(str, enum.Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"
    DINE_IN = "dine_in"


# =============================================================================
# CATALOG
# =============================================================================

@dataclass(frozen=True)
class SideOption:
    name: str
    extra_cost: Decimal = Decimal("0")


@dataclass(frozen=True)
class SideGroup:
    """A customization group such as "Contorno" or "Tamaño"."""
    category: str
    required: bool
    options: tuple[SideOption, ...] = ()

    def find_option(self, name: str) -> Optional[SideOption]:
        for option in self.options:
            if option.name == name:
                return option
        return None


@dataclass(frozen=True)
class Product:
    id: str
    restaurant_id: str
    name: str
    price: Decimal
    side_groups: tuple[SideGroup, ...] = ()

    @property
    def required_categories(self) -> list[str]:
        return [group.category for group in self.side_groups if group.required]

    def find_group(self, category: str) -> Optional[SideGroup]:
        for group in self.side_groups:
            if group.category == category:
                return group
        return None


@dataclass(frozen=True)
class Restaurant:
    id: str
    name: str
    is_open: bool = True


# =============================================================================
# INVENTORY
# =============================================================================

@dataclass
class StockRecord:
    """
    Current stock for one product.

    Owned exclusively by the stock ledger; callers only ever receive copies.
    """
    product_id: str
    quantity: int = 0
    low_stock_threshold: int = 5
    manually_enabled: bool = True
    last_updated: datetime = field(default_factory=utcnow)
    updated_by: Optional[str] = None


@dataclass(frozen=True)
class AvailabilityVerdict:
    is_available: bool
    reason: AvailabilityReason
    available_quantity: int
    manually_enabled: bool

    @classmethod
    def from_stock(cls, quantity: int, manually_enabled: bool) -> "AvailabilityVerdict":
        """Apply the four-way truth table over (quantity > 0, manually_enabled)."""
        in_stock = quantity > 0
        if in_stock and manually_enabled:
            reason = AvailabilityReason.AVAILABLE
        elif manually_enabled:
            reason = AvailabilityReason.OUT_OF_STOCK
        elif in_stock:
            reason = AvailabilityReason.MANUALLY_DISABLED
        else:
            reason = AvailabilityReason.BOTH_DISABLED

        return cls(
            is_available=reason is AvailabilityReason.AVAILABLE,
            reason=reason,
            available_quantity=quantity,
            manually_enabled=manually_enabled,
        )


@dataclass
class Alert:
    id: str
    product_id: str
    product_name: str
    type: AlertType
    current_quantity: int
    threshold: int
    raised_at: datetime = field(default_factory=utcnow)
    acknowledged: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization (Celery payloads)."""
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "type": self.type.value,
            "current_quantity": self.current_quantity,
            "threshold": self.threshold,
            "raised_at": self.raised_at.isoformat(),
            "acknowledged": self.acknowledged,
        }


# =============================================================================
# ORDERS
# =============================================================================

@dataclass(frozen=True)
class OrderItemCustomization:
    category: str
    selected_option: str
    extra_cost: Decimal = Decimal("0")


@dataclass(frozen=True)
class OrderItem:
    product_id: str
    name: str
    quantity: int
    unit_price: Decimal
    customizations: tuple[OrderItemCustomization, ...] = ()

    @property
    def total_price(self) -> Decimal:
        extras = sum((c.extra_cost for c in self.customizations), Decimal("0"))
        return (self.unit_price + extras) * self.quantity


@dataclass(frozen=True)
class CustomerInfo:
    name: str
    phone: str
    email: Optional[str] = None
    table_number: Optional[str] = None


@dataclass
class Order:
    """
    A customer order.

    Line items and totals are fixed at creation; only ``status``,
    ``paid_at`` and ``payment_method`` change afterwards.
    """
    id: str
    restaurant_id: str
    items: tuple[OrderItem, ...]
    total_amount: Decimal
    status: OrderStatus = OrderStatus.PENDING
    order_type: OrderType = OrderType.DELIVERY
    created_at: datetime = field(default_factory=utcnow)
    paid_at: Optional[datetime] = None
    payment_method: Optional[str] = None
    customer: Optional[CustomerInfo] = None
    notes: Optional[str] = None
    waiter_id: Optional[str] = None

    def __repr__(self):
        return f"<Order {self.id} - {self.restaurant_id} - {self.status.value}>"
