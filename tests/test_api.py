"""
API Tests through FastAPI's TestClient

Routes, camelCase payloads, role checks and the ``{kind, message}`` error
contract.
"""

import pytest

from tests.conftest import ADMIN, STAFF

PIZZA = "pizza-arabe-carne-andalus"
KNAFE = "knafe-andalus"


@pytest.fixture
def stocked(client, container):
    container.ledger.initialize(PIZZA, 10)
    container.ledger.initialize(KNAFE, 10)
    return client


def order_payload(**overrides) -> dict:
    payload = {
        "restaurantId": "al-andalus",
        "items": [
            {"productId": KNAFE, "quantity": 2},
            {
                "productId": PIZZA,
                "quantity": 1,
                "customizations": [{"category": "Tamaño", "option": 'Familiar (16")'}],
            },
        ],
        "paymentMethod": "cash",
        "customer": {"name": "María González", "phone": "0414-123-4567"},
    }
    payload.update(overrides)
    return payload


class TestInventoryEndpoints:

    def test_availability_of_unseen_product(self, client):
        response = client.get(f"/inventory/{KNAFE}")
        assert response.status_code == 200
        assert response.json() == {
            "isAvailable": False,
            "reason": "out_of_stock",
            "availableQuantity": 0,
            "manuallyEnabled": True,
        }

    def test_admin_sets_quantity(self, client, container):
        response = client.post(f"/inventory/{KNAFE}:setQuantity", json={"quantity": 12}, headers=ADMIN)
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get(f"/inventory/{KNAFE}").json()["availableQuantity"] == 12
        assert container.ledger.get_record(KNAFE).updated_by == "admin-1"

    def test_negative_quantity_rejected(self, client):
        response = client.post(f"/inventory/{KNAFE}:setQuantity", json={"quantity": -1}, headers=ADMIN)
        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidArgument"

    def test_customer_cannot_set_quantity(self, client):
        response = client.post(f"/inventory/{KNAFE}:setQuantity", json={"quantity": 5})
        assert response.status_code == 403
        assert response.json()["kind"] == "PermissionDenied"

    def test_waiter_cannot_set_quantity(self, client):
        response = client.post(f"/inventory/{KNAFE}:setQuantity", json={"quantity": 5}, headers=STAFF)
        assert response.status_code == 403

    def test_unknown_role_rejected(self, client):
        response = client.post(
            f"/inventory/{KNAFE}:setQuantity",
            json={"quantity": 5},
            headers={"X-Caller-Role": "owner"},
        )
        assert response.status_code == 403

    def test_decrement(self, stocked):
        response = stocked.post(f"/inventory/{KNAFE}:decrement", json={"amount": 4}, headers=STAFF)
        assert response.json() == {"success": True}

        response = stocked.post(f"/inventory/{KNAFE}:decrement", json={"amount": 7}, headers=STAFF)
        assert response.status_code == 200
        assert response.json() == {"success": False}
        assert stocked.get(f"/inventory/{KNAFE}").json()["availableQuantity"] == 6

    def test_decrement_amount_must_be_positive(self, stocked):
        response = stocked.post(f"/inventory/{KNAFE}:decrement", json={"amount": 0}, headers=STAFF)
        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidArgument"

    def test_manual_disable(self, stocked):
        response = stocked.post(
            f"/inventory/{KNAFE}:setManualEnabled", json={"enabled": False}, headers=ADMIN
        )
        assert response.status_code == 200
        verdict = stocked.get(f"/inventory/{KNAFE}").json()
        assert verdict["reason"] == "manually_disabled"
        assert verdict["isAvailable"] is False

    def test_threshold_raises_alert(self, stocked):
        stocked.post(f"/inventory/{KNAFE}:setThreshold", json={"threshold": 10}, headers=ADMIN)
        alerts = stocked.get("/alerts").json()
        assert [a["productId"] for a in alerts] == [KNAFE]
        assert alerts[0]["type"] == "low_stock"

    def test_bulk_update(self, client, container):
        response = client.post(
            "/inventory:bulkUpdate",
            json={
                "updates": [
                    {"productId": KNAFE, "quantity": 15},
                    {"productId": PIZZA, "quantity": 4, "lowStockThreshold": 2},
                ],
                "reason": "morning count",
            },
            headers=ADMIN,
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "updated": 2}
        assert container.ledger.get_quantity(KNAFE) == 15
        assert container.ledger.get_record(PIZZA).low_stock_threshold == 2

    def test_restaurant_inventory(self, stocked):
        response = stocked.get("/restaurants/al-andalus/inventory", headers=STAFF)
        assert response.status_code == 200
        body = response.json()
        assert body["restaurantId"] == "al-andalus"
        assert len(body["items"]) == 4
        assert body["stats"]["totalProducts"] == 4
        assert body["stats"]["outOfStockProducts"] == 2
        assert body["stats"]["totalValue"] == 240.0

    def test_restaurant_inventory_unknown_restaurant(self, client):
        response = client.get("/restaurants/nowhere/inventory", headers=STAFF)
        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidRestaurant"


class TestAlertEndpoints:

    def test_list_and_acknowledge(self, client, container):
        container.ledger.initialize(KNAFE, 1)
        container.ledger.initialize("tabbouleh-muna", 0)

        alerts = client.get("/alerts", params={"restaurantId": "al-andalus"}).json()
        assert len(alerts) == 1
        alert_id = alerts[0]["id"]
        assert alerts[0]["productName"] == "Knafe Al Andalus"

        assert client.post(f"/alerts/{alert_id}:acknowledge", headers=STAFF).json() == {"success": True}
        assert client.post(f"/alerts/{alert_id}:acknowledge", headers=STAFF).json() == {"success": False}
        assert client.get("/alerts", params={"restaurantId": "al-andalus"}).json() == []
        assert len(client.get("/alerts").json()) == 1

    def test_acknowledge_requires_staff(self, client, container):
        container.ledger.initialize(KNAFE, 1)
        alert_id = client.get("/alerts").json()[0]["id"]
        assert client.post(f"/alerts/{alert_id}:acknowledge").status_code == 403


class TestOrderEndpoints:

    def test_create_order(self, stocked):
        response = stocked.post("/orders", json=order_payload())

        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "pending"
        assert order["restaurantId"] == "al-andalus"
        assert order["totalAmount"] == 40.0
        assert order["items"][1]["customizations"][0]["extraCost"] == 8.0
        assert order["customer"]["name"] == "María González"
        assert stocked.get(f"/inventory/{KNAFE}").json()["availableQuantity"] == 8
        assert stocked.get(f"/inventory/{PIZZA}").json()["availableQuantity"] == 9

    def test_waiter_is_recorded(self, stocked):
        order = stocked.post("/orders", json=order_payload(orderType="dine_in"), headers=STAFF).json()
        assert order["waiterId"] == "waiter-7"
        assert order["orderType"] == "dine_in"

    def test_missing_required_selection(self, stocked):
        payload = order_payload(
            items=[{"productId": KNAFE, "quantity": 1}, {"productId": PIZZA, "quantity": 1}]
        )
        response = stocked.post("/orders", json=payload)

        assert response.status_code == 400
        assert response.json()["kind"] == "MissingRequiredSelection"
        assert "Tamaño" in response.json()["message"]
        assert stocked.get(f"/inventory/{KNAFE}").json()["availableQuantity"] == 10

    def test_insufficient_stock(self, stocked):
        payload = order_payload(items=[{"productId": KNAFE, "quantity": 11}])
        response = stocked.post("/orders", json=payload)
        assert response.status_code == 409
        assert response.json()["kind"] == "InsufficientStock"

    def test_product_of_other_restaurant(self, stocked):
        payload = order_payload(items=[{"productId": "tabbouleh-muna", "quantity": 1}])
        response = stocked.post("/orders", json=payload)
        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidRestaurant"

    def test_empty_items_rejected(self, stocked):
        response = stocked.post("/orders", json=order_payload(items=[]))
        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidArgument"

    def test_get_order(self, stocked):
        order_id = stocked.post("/orders", json=order_payload()).json()["id"]
        assert stocked.get(f"/orders/{order_id}").json()["id"] == order_id

    def test_get_unknown_order(self, client):
        response = client.get("/orders/order-nope")
        assert response.status_code == 404
        assert response.json()["kind"] == "NotFound"

    def test_list_orders_requires_staff(self, stocked):
        stocked.post("/orders", json=order_payload())
        assert stocked.get("/orders").status_code == 403

        orders = stocked.get("/orders", params={"restaurantId": "al-andalus"}, headers=STAFF).json()
        assert len(orders) == 1
        assert stocked.get("/orders", params={"status": "ready"}, headers=STAFF).json() == []

    def test_status_lifecycle(self, stocked):
        order_id = stocked.post("/orders", json=order_payload()).json()["id"]

        response = stocked.post(f"/orders/{order_id}:status", json={"newStatus": "completed"}, headers=STAFF)
        assert response.status_code == 200
        assert response.json() == {"success": False}
        assert stocked.get(f"/orders/{order_id}").json()["status"] == "pending"

        for status in ("preparing", "ready"):
            response = stocked.post(f"/orders/{order_id}:status", json={"newStatus": status}, headers=STAFF)
            assert response.json() == {"success": True}

        response = stocked.post(f"/orders/{order_id}:markPaid", json={"paymentMethod": "card"}, headers=STAFF)
        assert response.json() == {"success": True}
        response = stocked.post(f"/orders/{order_id}:markPaid", json={"paymentMethod": "card"}, headers=STAFF)
        assert response.json() == {"success": False}

        order = stocked.get(f"/orders/{order_id}").json()
        assert order["status"] == "ready"
        assert order["paymentMethod"] == "card"
        assert order["paidAt"] is not None

    def test_status_of_unknown_order_is_false(self, client):
        response = client.post("/orders/order-nope:status", json={"newStatus": "preparing"}, headers=STAFF)
        assert response.status_code == 200
        assert response.json() == {"success": False}

    def test_mark_paid_unknown_order_is_false(self, client):
        response = client.post("/orders/order-nope:markPaid", json={"paymentMethod": "cash"}, headers=STAFF)
        assert response.status_code == 200
        assert response.json() == {"success": False}

    def test_unknown_status_value_rejected(self, stocked):
        order_id = stocked.post("/orders", json=order_payload()).json()["id"]
        response = stocked.post(f"/orders/{order_id}:status", json={"newStatus": "lost"}, headers=STAFF)
        assert response.status_code == 400
        assert response.json()["kind"] == "InvalidArgument"

    def test_recent_orders_window(self, stocked, container, monkeypatch):
        order_id = stocked.post("/orders", json=order_payload()).json()["id"]
        params = {"restaurantId": "al-andalus", "recent": "true"}

        orders = stocked.get("/orders", params=params, headers=STAFF).json()
        assert [o["id"] for o in orders] == [order_id]
        assert stocked.get("/orders", params={**params, "status": "ready"}, headers=STAFF).json() == []

        monkeypatch.setattr(container.settings, "recent_orders_hours", 0)
        assert stocked.get("/orders", params=params, headers=STAFF).json() == []


class TestHealth:

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "operational"
        assert body["catalog"] == "healthy"
        assert body["redis"] == "disabled"
