"""
Fulfillment domain exceptions.

Raised by the service layer when a business rule is violated. The API
layer translates them into ``{kind, message}`` JSON responses; the
``kind`` attribute is the stable, machine-readable error name.
"""

from typing import Iterable, Optional


class FulfillmentError(Exception):
    """Base class for every error the fulfillment core raises."""

    kind = "FulfillmentError"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"kind": self.kind, "message": self.message}


class InvalidArgument(FulfillmentError):
    """A negative quantity, a non-positive amount or a malformed selection."""

    kind = "InvalidArgument"


class InsufficientStock(FulfillmentError):
    """One or more products cannot cover the requested quantity."""

    kind = "InsufficientStock"
    status_code = 409

    def __init__(self, product_ids: Iterable[str], message: Optional[str] = None):
        self.product_ids = list(product_ids)
        super().__init__(
            message or f"Out of stock: {', '.join(self.product_ids)}"
        )


class MissingRequiredSelection(FulfillmentError):
    """Required customization groups were left without a selection."""

    kind = "MissingRequiredSelection"

    def __init__(self, categories: Iterable[str]):
        self.categories = list(categories)
        super().__init__(f"Please select: {', '.join(self.categories)}")


class InvalidRestaurant(FulfillmentError):
    """Unknown restaurant, or a product that restaurant does not offer."""

    kind = "InvalidRestaurant"


class NotFound(FulfillmentError):
    kind = "NotFound"
    status_code = 404


class InvalidTransition(FulfillmentError):
    """An order status change outside the transition table."""

    kind = "InvalidTransition"
    status_code = 409

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move order from '{current}' to '{requested}'")


class PermissionDenied(FulfillmentError):
    kind = "PermissionDenied"
    status_code = 403
