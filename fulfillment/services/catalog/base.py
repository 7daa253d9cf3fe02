"""
Product Catalog Abstract Base Class

The catalog is an external collaborator: it owns product prices, the
restaurant each product belongs to and the customization groups marked
``required``. The fulfillment core only reads from it.
"""

from abc import ABC, abstractmethod
from typing import Optional

from fulfillment.models import Product, Restaurant


class BaseProductCatalog(ABC):
    """
    Read-only product lookup consumed by the order manager, the alert
    engine (restaurant filtering) and inventory reporting.

    Lookups of unknown ids return ``None`` or an empty list; they never
    raise.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @abstractmethod
    def get_product(self, product_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    def get_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        pass

    @abstractmethod
    def list_restaurants(self) -> list[Restaurant]:
        pass

    @abstractmethod
    def list_products(self, restaurant_id: Optional[str] = None) -> list[Product]:
        """List catalog products, optionally limited to one restaurant."""
        pass

    def restaurant_of(self, product_id: str) -> Optional[str]:
        product = self.get_product(product_id)
        return product.restaurant_id if product else None

    def display_name(self, product_id: str) -> str:
        """Catalog name, or a title-cased id for products the catalog lacks."""
        product = self.get_product(product_id)
        if product:
            return product.name
        return product_id.replace("-", " ").title()
