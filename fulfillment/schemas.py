"""
Pydantic Schemas for Request/Response Validation

JSON bodies use camelCase keys (``isAvailable``, ``restaurantId``...);
Python code uses the snake_case field names.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fulfillment.models import (
    Alert,
    AlertType,
    AvailabilityReason,
    AvailabilityVerdict,
    CustomerInfo,
    Order,
    OrderStatus,
    OrderType,
)
from fulfillment.services.inventory import InventoryLine, InventoryStats


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# INVENTORY
# =============================================================================

class AvailabilityResponse(CamelModel):
    is_available: bool
    reason: AvailabilityReason
    available_quantity: int
    manually_enabled: bool

    @classmethod
    def from_verdict(cls, verdict: AvailabilityVerdict) -> "AvailabilityResponse":
        return cls(
            is_available=verdict.is_available,
            reason=verdict.reason,
            available_quantity=verdict.available_quantity,
            manually_enabled=verdict.manually_enabled,
        )


class DecrementRequest(CamelModel):
    amount: int = Field(..., ge=1, examples=[2])


class SetQuantityRequest(CamelModel):
    quantity: int = Field(..., ge=0, examples=[20])


class SetManualEnabledRequest(CamelModel):
    enabled: bool


class SetThresholdRequest(CamelModel):
    threshold: int = Field(..., ge=0, examples=[5])


class StockUpdateItem(CamelModel):
    product_id: str = Field(..., min_length=1)
    quantity: Optional[int] = Field(None, ge=0)
    manually_enabled: Optional[bool] = None
    low_stock_threshold: Optional[int] = Field(None, ge=0)


class BulkUpdateRequest(CamelModel):
    updates: List[StockUpdateItem] = Field(..., min_length=1)
    reason: Optional[str] = Field(None, max_length=200)


class SuccessResponse(CamelModel):
    success: bool


class BulkUpdateResponse(CamelModel):
    success: bool
    updated: int


class InventoryLineResponse(CamelModel):
    product_id: str
    name: str
    quantity: int
    low_stock_threshold: int
    manually_enabled: bool
    stock_level: str
    availability: AvailabilityResponse

    @classmethod
    def from_line(cls, line: InventoryLine) -> "InventoryLineResponse":
        return cls(
            product_id=line.product_id,
            name=line.name,
            quantity=line.quantity,
            low_stock_threshold=line.low_stock_threshold,
            manually_enabled=line.manually_enabled,
            stock_level=line.stock_level,
            availability=AvailabilityResponse.from_verdict(line.verdict),
        )


class InventoryStatsResponse(CamelModel):
    total_products: int
    available_products: int
    low_stock_products: int
    out_of_stock_products: int
    disabled_products: int
    total_alerts: int
    total_value: float

    @classmethod
    def from_stats(cls, stats: InventoryStats) -> "InventoryStatsResponse":
        return cls(
            total_products=stats.total_products,
            available_products=stats.available_products,
            low_stock_products=stats.low_stock_products,
            out_of_stock_products=stats.out_of_stock_products,
            disabled_products=stats.disabled_products,
            total_alerts=stats.total_alerts,
            total_value=float(stats.total_value),
        )


class RestaurantInventoryResponse(CamelModel):
    restaurant_id: str
    items: List[InventoryLineResponse]
    stats: InventoryStatsResponse


# =============================================================================
# ALERTS
# =============================================================================

class AlertResponse(CamelModel):
    id: str
    product_id: str
    product_name: str
    type: AlertType
    current_quantity: int
    threshold: int
    raised_at: datetime
    acknowledged: bool

    @classmethod
    def from_alert(cls, alert: Alert) -> "AlertResponse":
        return cls(
            id=alert.id,
            product_id=alert.product_id,
            product_name=alert.product_name,
            type=alert.type,
            current_quantity=alert.current_quantity,
            threshold=alert.threshold,
            raised_at=alert.raised_at,
            acknowledged=alert.acknowledged,
        )


# =============================================================================
# ORDERS
# =============================================================================

class CustomizationSelect(CamelModel):
    """Chosen option of one customization group, e.g. Tamaño = Mediana."""
    category: str = Field(..., min_length=1, examples=["Tamaño"])
    option: str = Field(..., min_length=1, examples=['Mediana (12")'])


class OrderItemCreate(CamelModel):
    product_id: str = Field(..., min_length=1, examples=["pizza-arabe-carne-andalus"])
    quantity: int = Field(..., ge=1, le=99, examples=[2])
    customizations: List[CustomizationSelect] = Field(default_factory=list)


class CustomerCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100, examples=["María González"])
    phone: str = Field(..., min_length=7, max_length=20, examples=["0414-123-4567"])
    email: Optional[str] = Field(None, max_length=255)
    table_number: Optional[str] = Field(None, max_length=10)

    def to_domain(self) -> CustomerInfo:
        return CustomerInfo(
            name=self.name,
            phone=self.phone,
            email=self.email,
            table_number=self.table_number,
        )


class OrderCreate(CamelModel):
    """Request schema for creating a new order."""
    restaurant_id: str = Field(..., min_length=1, examples=["al-andalus"])
    items: List[OrderItemCreate] = Field(..., min_length=1)
    payment_method: Optional[str] = Field(None, examples=["card", "cash"])
    order_type: OrderType = OrderType.DELIVERY
    customer: Optional[CustomerCreate] = None
    notes: Optional[str] = Field(None, max_length=500)
    waiter_id: Optional[str] = None


class CustomizationResponse(CamelModel):
    category: str
    selected_option: str
    extra_cost: float


class OrderItemResponse(CamelModel):
    product_id: str
    name: str
    quantity: int
    unit_price: float
    customizations: List[CustomizationResponse]
    total_price: float


class CustomerResponse(CamelModel):
    name: str
    phone: str
    email: Optional[str] = None
    table_number: Optional[str] = None


class OrderResponse(CamelModel):
    """Response schema for a single order."""
    id: str
    restaurant_id: str
    items: List[OrderItemResponse]
    total_amount: float
    status: OrderStatus
    order_type: OrderType
    created_at: datetime
    paid_at: Optional[datetime] = None
    payment_method: Optional[str] = None
    customer: Optional[CustomerResponse] = None
    notes: Optional[str] = None
    waiter_id: Optional[str] = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            restaurant_id=order.restaurant_id,
            items=[
                OrderItemResponse(
                    product_id=item.product_id,
                    name=item.name,
                    quantity=item.quantity,
                    unit_price=float(item.unit_price),
                    customizations=[
                        CustomizationResponse(
                            category=c.category,
                            selected_option=c.selected_option,
                            extra_cost=float(c.extra_cost),
                        )
                        for c in item.customizations
                    ],
                    total_price=float(item.total_price),
                )
                for item in order.items
            ],
            total_amount=float(order.total_amount),
            status=order.status,
            order_type=order.order_type,
            created_at=order.created_at,
            paid_at=order.paid_at,
            payment_method=order.payment_method,
            customer=(
                CustomerResponse(
                    name=order.customer.name,
                    phone=order.customer.phone,
                    email=order.customer.email,
                    table_number=order.customer.table_number,
                )
                if order.customer else None
            ),
            notes=order.notes,
            waiter_id=order.waiter_id,
        )


class StatusUpdateRequest(CamelModel):
    new_status: OrderStatus = Field(..., examples=["preparing"])


class MarkPaidRequest(CamelModel):
    payment_method: str = Field(..., min_length=1, examples=["cash"])


# =============================================================================
# COMMON
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    kind: str
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    catalog: str
    notifier: str
    redis: str
    tracked_products: int
    orders: int
    timestamp: datetime
