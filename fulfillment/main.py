"""
FastAPI Application Entry Point

Marketplace Fulfillment Service - inventory availability and order
fulfillment for the restaurant marketplace.

Endpoints:
    - GET  /inventory/{productId}: Availability verdict
    - POST /inventory/{productId}:decrement|setQuantity|setManualEnabled|setThreshold
    - POST /inventory:bulkUpdate: Several stock changes in one call
    - GET  /restaurants/{id}/inventory: Inventory summary and statistics
    - GET  /alerts, POST /alerts/{id}:acknowledge: Stock alerts
    - POST /orders, GET /orders, GET /orders/{id}: Orders
    - POST /orders/{id}:status|markPaid: Order lifecycle
    - GET  /health: System health check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import redis
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fulfillment.container import ServiceContainer, build_container, get_container
from fulfillment.core.config import get_settings, setup_logging
from fulfillment.core.exceptions import FulfillmentError, InvalidRestaurant, NotFound
from fulfillment.identity import Caller, Role, get_caller, require_admin, require_staff
from fulfillment.models import OrderStatus
from fulfillment.schemas import (
    AlertResponse,
    AvailabilityResponse,
    BulkUpdateRequest,
    BulkUpdateResponse,
    DecrementRequest,
    ErrorResponse,
    HealthResponse,
    InventoryLineResponse,
    InventoryStatsResponse,
    MarkPaidRequest,
    OrderCreate,
    OrderResponse,
    RestaurantInventoryResponse,
    SetManualEnabledRequest,
    SetQuantityRequest,
    SetThresholdRequest,
    StatusUpdateRequest,
    SuccessResponse,
)
from fulfillment.services.inventory import StockUpdate
from fulfillment.services.notifications import get_alert_notifier
from fulfillment.services.orders import OrderLineRequest, OrderRequest, SelectionRequest

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    # A container set before startup (tests) is kept as is
    if getattr(app.state, "container", None) is None:
        app.state.container = build_container(settings)
    container: ServiceContainer = app.state.container
    logger.info(f"✅ Product Catalog: {container.catalog.provider_name}")
    logger.info(f"✅ Tracked products: {len(container.ledger.snapshot())}")

    if settings.alert_notifications_enabled:
        logger.info(f"✅ Alert Notifier: {get_alert_notifier().provider_name}")
    else:
        logger.info("ℹ️ Alert notifications disabled")

    # Validate production config
    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Inventory availability and order fulfillment for the restaurant "
        "marketplace: stock ledger, availability verdicts, stock alerts "
        "and the order lifecycle."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def to_order_request(order_data: OrderCreate, caller: Caller) -> OrderRequest:
    """Convert the API payload into the order manager's request type."""
    waiter_id = order_data.waiter_id
    if waiter_id is None and caller.role == Role.WAITER:
        waiter_id = caller.caller_id

    return OrderRequest(
        restaurant_id=order_data.restaurant_id,
        items=tuple(
            OrderLineRequest(
                product_id=item.product_id,
                quantity=item.quantity,
                selections=tuple(
                    SelectionRequest(category=c.category, option=c.option)
                    for c in item.customizations
                ),
            )
            for item in order_data.items
        ),
        payment_method=order_data.payment_method,
        order_type=order_data.order_type,
        customer=order_data.customer.to_domain() if order_data.customer else None,
        notes=order_data.notes,
        waiter_id=waiter_id,
    )


# =============================================================================
# ROOT & HEALTH
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    container: ServiceContainer = Depends(get_container),
) -> HealthResponse:
    """Verify all system components are operational."""

    catalog_status = "healthy" if container.catalog.list_restaurants() else "empty"

    # Redis and the notifier only matter when alerts are dispatched
    redis_status = "disabled"
    notifier_status = "disabled"
    if container.settings.alert_notifications_enabled:
        redis_status = "healthy"
        try:
            r = redis.Redis.from_url(container.settings.redis_url, socket_timeout=2)
            r.ping()
            r.close()
        except redis.RedisError as e:
            redis_status = f"unhealthy: {str(e)}"
            logger.error(f"Redis health check failed: {e}")

        notifier_status = "healthy" if get_alert_notifier().health_check() else "unhealthy"

    overall = "operational" if all(
        s in ("healthy", "disabled") for s in [catalog_status, redis_status, notifier_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        catalog=catalog_status,
        notifier=notifier_status,
        redis=redis_status,
        tracked_products=len(container.ledger.snapshot()),
        orders=len(container.orders.list_orders()),
        timestamp=datetime.now(),
    )


# =============================================================================
# INVENTORY ENDPOINTS
# =============================================================================

@app.get(
    "/inventory/{product_id}",
    response_model=AvailabilityResponse,
    tags=["Inventory"],
    summary="Product Availability",
)
async def get_availability(
    product_id: str,
    container: ServiceContainer = Depends(get_container),
) -> AvailabilityResponse:
    return AvailabilityResponse.from_verdict(container.resolver.resolve(product_id))


@app.post(
    "/inventory/{product_id}:decrement",
    response_model=SuccessResponse,
    responses=ERROR_RESPONSES,
    tags=["Inventory"],
)
async def decrement_stock(
    product_id: str,
    body: DecrementRequest,
    caller: Caller = Depends(require_staff),
    container: ServiceContainer = Depends(get_container),
) -> SuccessResponse:
    """Take units out of stock; ``success`` is false when stock is insufficient."""
    return SuccessResponse(success=container.ledger.decrement(product_id, body.amount))


@app.post(
    "/inventory/{product_id}:setQuantity",
    response_model=SuccessResponse,
    responses=ERROR_RESPONSES,
    tags=["Inventory"],
)
async def set_quantity(
    product_id: str,
    body: SetQuantityRequest,
    caller: Caller = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
) -> SuccessResponse:
    container.ledger.set_quantity(product_id, body.quantity, updated_by=caller.caller_id)
    return SuccessResponse(success=True)


@app.post(
    "/inventory/{product_id}:setManualEnabled",
    response_model=SuccessResponse,
    responses=ERROR_RESPONSES,
    tags=["Inventory"],
)
async def set_manual_enabled(
    product_id: str,
    body: SetManualEnabledRequest,
    caller: Caller = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
) -> SuccessResponse:
    container.ledger.set_manual_enabled(product_id, body.enabled, updated_by=caller.caller_id)
    return SuccessResponse(success=True)


@app.post(
    "/inventory/{product_id}:setThreshold",
    response_model=SuccessResponse,
    responses=ERROR_RESPONSES,
    tags=["Inventory"],
)
async def set_threshold(
    product_id: str,
    body: SetThresholdRequest,
    caller: Caller = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
) -> SuccessResponse:
    container.ledger.set_threshold(product_id, body.threshold, updated_by=caller.caller_id)
    return SuccessResponse(success=True)


@app.post(
    "/inventory:bulkUpdate",
    response_model=BulkUpdateResponse,
    responses=ERROR_RESPONSES,
    tags=["Inventory"],
    summary="Bulk Inventory Update",
)
async def bulk_update(
    body: BulkUpdateRequest,
    caller: Caller = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
) -> BulkUpdateResponse:
    updated = container.ledger.apply_bulk(
        [
            StockUpdate(
                product_id=u.product_id,
                quantity=u.quantity,
                manually_enabled=u.manually_enabled,
                low_stock_threshold=u.low_stock_threshold,
            )
            for u in body.updates
        ],
        reason=body.reason,
        updated_by=caller.caller_id,
    )
    return BulkUpdateResponse(success=True, updated=updated)


@app.get(
    "/restaurants/{restaurant_id}/inventory",
    response_model=RestaurantInventoryResponse,
    responses=ERROR_RESPONSES,
    tags=["Inventory"],
    summary="Restaurant Inventory Summary",
)
async def restaurant_inventory(
    restaurant_id: str,
    caller: Caller = Depends(require_staff),
    container: ServiceContainer = Depends(get_container),
) -> RestaurantInventoryResponse:
    if container.catalog.get_restaurant(restaurant_id) is None:
        raise InvalidRestaurant(f"Unknown restaurant '{restaurant_id}'")

    return RestaurantInventoryResponse(
        restaurant_id=restaurant_id,
        items=[
            InventoryLineResponse.from_line(line)
            for line in container.reporter.inventory_summary(restaurant_id)
        ],
        stats=InventoryStatsResponse.from_stats(
            container.reporter.inventory_stats(restaurant_id)
        ),
    )


# =============================================================================
# ALERT ENDPOINTS
# =============================================================================

@app.get(
    "/alerts",
    response_model=list[AlertResponse],
    tags=["Alerts"],
    summary="Active Stock Alerts",
)
async def list_alerts(
    restaurant_id: Optional[str] = Query(None, alias="restaurantId"),
    container: ServiceContainer = Depends(get_container),
) -> list[AlertResponse]:
    return [
        AlertResponse.from_alert(alert)
        for alert in container.alerts.list_active_alerts(restaurant_id)
    ]


@app.post(
    "/alerts/{alert_id}:acknowledge",
    response_model=SuccessResponse,
    responses=ERROR_RESPONSES,
    tags=["Alerts"],
)
async def acknowledge_alert(
    alert_id: str,
    caller: Caller = Depends(require_staff),
    container: ServiceContainer = Depends(get_container),
) -> SuccessResponse:
    return SuccessResponse(success=container.alerts.acknowledge(alert_id))


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/orders",
    response_model=OrderResponse,
    responses=ERROR_RESPONSES,
    status_code=201,
    tags=["Orders"],
    summary="Create Order",
)
async def create_order(
    order_data: OrderCreate,
    caller: Caller = Depends(get_caller),
    container: ServiceContainer = Depends(get_container),
) -> OrderResponse:
    """
    Create an order and take its stock.

    Either every line item's stock is taken or none is; failures come back
    as ``{kind, message}``.
    """
    logger.info(
        f"Creating order for {order_data.restaurant_id} "
        f"({len(order_data.items)} items, caller={caller.caller_id or 'anonymous'})"
    )
    order = container.orders.create_order(to_order_request(order_data, caller))
    return OrderResponse.from_order(order)


@app.get(
    "/orders",
    response_model=list[OrderResponse],
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="List Orders",
)
async def list_orders(
    restaurant_id: Optional[str] = Query(None, alias="restaurantId"),
    status: Optional[OrderStatus] = Query(None),
    recent: bool = Query(False),
    caller: Caller = Depends(require_staff),
    container: ServiceContainer = Depends(get_container),
) -> list[OrderResponse]:
    """
    Orders newest first.

    With ``recent=true`` only orders created within the last
    ``RECENT_ORDERS_HOURS`` are listed.
    """
    if recent:
        orders = container.orders.recent_orders(
            restaurant_id, container.settings.recent_orders_hours
        )
        if status is not None:
            orders = [o for o in orders if o.status == status]
    else:
        orders = container.orders.list_orders(restaurant_id, status)

    return [OrderResponse.from_order(order) for order in orders]


@app.get(
    "/orders/{order_id}",
    response_model=OrderResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
)
async def get_order(
    order_id: str,
    container: ServiceContainer = Depends(get_container),
) -> OrderResponse:
    """Get a specific order by ID."""
    order = container.orders.get_order(order_id)
    if order is None:
        raise NotFound(f"Order {order_id} not found")
    return OrderResponse.from_order(order)


@app.post(
    "/orders/{order_id}:status",
    response_model=SuccessResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
)
async def update_order_status(
    order_id: str,
    body: StatusUpdateRequest,
    caller: Caller = Depends(require_staff),
    container: ServiceContainer = Depends(get_container),
) -> SuccessResponse:
    """Rejected moves and unknown ids come back as ``{success: false}``."""
    return SuccessResponse(success=container.orders.update_status(order_id, body.new_status))


@app.post(
    "/orders/{order_id}:markPaid",
    response_model=SuccessResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
)
async def mark_order_paid(
    order_id: str,
    body: MarkPaidRequest,
    caller: Caller = Depends(require_staff),
    container: ServiceContainer = Depends(get_container),
) -> SuccessResponse:
    return SuccessResponse(success=container.orders.mark_paid(order_id, body.payment_method))


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(FulfillmentError)
async def fulfillment_exception_handler(request: Request, exc: FulfillmentError) -> JSONResponse:
    """Business rule violations as ``{kind, message}``."""
    logger.info(f"{request.method} {request.url.path} rejected: {exc.kind} - {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies and parameters are invalid arguments."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"kind": "InvalidArgument", "message": problems or "Invalid request"},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "kind": "InternalError",
            "message": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "fulfillment.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
