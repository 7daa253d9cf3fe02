"""
Core module initialization.
Exports configuration, logging utilities and the error hierarchy.
"""

from fulfillment.core.config import get_settings, Settings, EnvironmentMode
from fulfillment.core.exceptions import (
    FulfillmentError,
    InvalidArgument,
    InsufficientStock,
    MissingRequiredSelection,
    InvalidRestaurant,
    NotFound,
    InvalidTransition,
    PermissionDenied,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "FulfillmentError",
    "InvalidArgument",
    "InsufficientStock",
    "MissingRequiredSelection",
    "InvalidRestaurant",
    "NotFound",
    "InvalidTransition",
    "PermissionDenied",
]
