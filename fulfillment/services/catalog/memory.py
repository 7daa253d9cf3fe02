"""
In-Memory Product Catalog

Catalog implementation backed by plain dictionaries. Loaded from the
bundled marketplace menu by default; tests build their own catalogs with
``InMemoryProductCatalog.from_menu``.
"""

import logging
from decimal import Decimal
from typing import Any, Iterable, Optional

from fulfillment.models import Product, Restaurant, SideGroup, SideOption
from fulfillment.services.catalog.base import BaseProductCatalog

logger = logging.getLogger(__name__)


def _parse_product(restaurant_id: str, raw: dict[str, Any]) -> Product:
    groups = tuple(
        SideGroup(
            category=side["category"],
            required=bool(side.get("required", False)),
            options=tuple(
                SideOption(
                    name=option["name"],
                    extra_cost=Decimal(str(option.get("extra_cost", "0"))),
                )
                for option in side.get("options", [])
            ),
        )
        for side in raw.get("sides", [])
    )
    return Product(
        id=raw["id"],
        restaurant_id=restaurant_id,
        name=raw["name"],
        price=Decimal(str(raw["price"])),
        side_groups=groups,
    )


class InMemoryProductCatalog(BaseProductCatalog):
    """Dictionary-backed catalog."""

    def __init__(
        self,
        restaurants: Iterable[Restaurant] = (),
        products: Iterable[Product] = (),
    ):
        self._restaurants: dict[str, Restaurant] = {r.id: r for r in restaurants}
        self._products: dict[str, Product] = {p.id: p for p in products}

    @classmethod
    def from_menu(cls, menu: list[dict[str, Any]]) -> "InMemoryProductCatalog":
        """
        Build a catalog from restaurant dictionaries.

        Args:
            menu: ``[{"id", "name", "is_open"?, "menu": [product, ...]}]``
                where each product is ``{"id", "name", "price", "sides"?}``
                and each side is ``{"category", "required", "options"}``.
        """
        restaurants = []
        products = []
        for raw in menu:
            restaurants.append(
                Restaurant(
                    id=raw["id"],
                    name=raw["name"],
                    is_open=raw.get("is_open", True),
                )
            )
            products.extend(_parse_product(raw["id"], item) for item in raw.get("menu", []))

        catalog = cls(restaurants, products)
        logger.info(
            f"Product catalog loaded: {len(restaurants)} restaurants, "
            f"{len(products)} products"
        )
        return catalog

    @property
    def provider_name(self) -> str:
        return "memory"

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def get_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        return self._restaurants.get(restaurant_id)

    def list_restaurants(self) -> list[Restaurant]:
        return list(self._restaurants.values())

    def list_products(self, restaurant_id: Optional[str] = None) -> list[Product]:
        if restaurant_id is None:
            return list(self._products.values())
        return [p for p in self._products.values() if p.restaurant_id == restaurant_id]
