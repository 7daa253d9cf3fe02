"""
Shared fixtures.

Every test gets its own container built from explicit settings, so no
state leaks between tests and no ``.env`` file is read.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from fulfillment.container import build_container
from fulfillment.core.config import Settings
from fulfillment.models import Product, Restaurant, SideGroup, SideOption
from fulfillment.services.catalog import InMemoryProductCatalog
from fulfillment.services.catalog.menu_data import RESTAURANTS
from fulfillment.services.inventory import AlertEngine, AvailabilityResolver, StockLedger

STAFF = {"X-Caller-Id": "waiter-7", "X-Caller-Role": "waiter"}
ADMIN = {"X-Caller-Id": "admin-1", "X-Caller-Role": "restaurant_admin"}


def make_settings(**overrides) -> Settings:
    values = {
        "env_mode": "development",
        "seed_demo_inventory": False,
        "alert_notifications_enabled": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def catalog() -> InMemoryProductCatalog:
    """The bundled marketplace menu."""
    return InMemoryProductCatalog.from_menu(RESTAURANTS)


@pytest.fixture
def small_catalog() -> InMemoryProductCatalog:
    """Two-product restaurant plus a closed one, for focused order tests."""
    size = SideGroup(
        category="Tamaño",
        required=True,
        options=(SideOption('Personal (8")'), SideOption('Mediana (12")', Decimal("4"))),
    )
    products = [
        Product(id="knafe", restaurant_id="andalus", name="Knafe", price=Decimal("8")),
        Product(
            id="pizza",
            restaurant_id="andalus",
            name="Pizza Árabe",
            price=Decimal("16"),
            side_groups=(size,),
        ),
        Product(id="arepa", restaurant_id="closed", name="Arepa", price=Decimal("5")),
    ]
    restaurants = [
        Restaurant(id="andalus", name="Al Andalus"),
        Restaurant(id="closed", name="Cerrado", is_open=False),
    ]
    return InMemoryProductCatalog(restaurants, products)


@pytest.fixture
def alerts(catalog) -> AlertEngine:
    return AlertEngine(catalog=catalog)


@pytest.fixture
def ledger(alerts) -> StockLedger:
    return StockLedger(alert_engine=alerts, default_threshold=5)


@pytest.fixture
def resolver(ledger) -> AvailabilityResolver:
    return AvailabilityResolver(ledger)


@pytest.fixture
def container(settings, catalog):
    return build_container(settings, catalog=catalog)


@pytest.fixture
def client(container):
    from fulfillment.main import app

    app.state.container = container
    with TestClient(app) as test_client:
        yield test_client
    app.state.container = None
