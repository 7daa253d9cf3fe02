"""
                Marketplace Fulfillment Service

Inventory availability and order fulfillment core for the restaurant
marketplace: per-product stock, availability verdicts, stock alerts
and the order status lifecycle.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
