"""
Product Catalog Factory

Provides a single entry point for obtaining the product catalog.

Usage:
    from fulfillment.services.catalog import get_product_catalog

    catalog = get_product_catalog()
    product = catalog.get_product("knafe-andalus")
"""

import logging
from functools import lru_cache

from fulfillment.services.catalog.base import BaseProductCatalog
from fulfillment.services.catalog.memory import InMemoryProductCatalog
from fulfillment.services.catalog.menu_data import RESTAURANTS

logger = logging.getLogger(__name__)


@lru_cache()
def get_product_catalog() -> BaseProductCatalog:
    """
    Get the configured product catalog instance.

    The instance is cached so every component built from it sees the
    same products.
    """
    logger.info("Product Catalog: Using InMemoryProductCatalog (bundled menu)")
    return InMemoryProductCatalog.from_menu(RESTAURANTS)


def reset_product_catalog() -> None:
    """Clear the cached catalog instance."""
    get_product_catalog.cache_clear()
    logger.debug("Product catalog cache cleared")


__all__ = [
    "get_product_catalog",
    "reset_product_catalog",
    "BaseProductCatalog",
    "InMemoryProductCatalog",
]
