"""
Unit Tests for the Order Lifecycle Manager

Order validation, all-or-nothing stock reservation, pricing and the
status state machine.
"""

from decimal import Decimal

import pytest

from fulfillment.core.exceptions import (
    InsufficientStock,
    InvalidArgument,
    InvalidRestaurant,
    InvalidTransition,
    MissingRequiredSelection,
    NotFound,
)
from fulfillment.models import CustomerInfo, OrderStatus, OrderType
from fulfillment.services.inventory import AlertEngine, AvailabilityResolver, StockLedger
from fulfillment.services.orders import (
    OrderLineRequest,
    OrderManager,
    OrderRequest,
    SelectionRequest,
    can_transition,
)

MEDIANA = SelectionRequest("Tamaño", 'Mediana (12")')


@pytest.fixture
def stock(small_catalog):
    ledger = StockLedger(alert_engine=AlertEngine(small_catalog))
    ledger.initialize("knafe", 10)
    ledger.initialize("pizza", 10)
    return ledger


@pytest.fixture
def manager(small_catalog, stock):
    return OrderManager(small_catalog, stock, AvailabilityResolver(stock))


def order_for(*lines, **kwargs) -> OrderRequest:
    return OrderRequest(restaurant_id="andalus", items=tuple(lines), **kwargs)


def place(manager, *lines, **kwargs):
    return manager.create_order(order_for(*lines, **kwargs))


class TestCreateOrder:

    def test_prices_and_decrements(self, manager, stock):
        order = place(
            manager,
            OrderLineRequest("knafe", 2),
            OrderLineRequest("pizza", 1, (MEDIANA,)),
            payment_method="cash",
            order_type=OrderType.PICKUP,
            customer=CustomerInfo(name="María", phone="0414-123-4567"),
        )

        assert order.status == OrderStatus.PENDING
        assert order.id.startswith("order-")
        assert [item.total_price for item in order.items] == [Decimal("16"), Decimal("20")]
        assert order.total_amount == Decimal("36")
        assert order.items[1].customizations[0].selected_option == 'Mediana (12")'
        assert order.payment_method == "cash"
        assert order.order_type == OrderType.PICKUP
        assert stock.get_quantity("knafe") == 8
        assert stock.get_quantity("pizza") == 9

    def test_scenario_d_missing_required_selection(self, manager, stock):
        with pytest.raises(MissingRequiredSelection) as exc_info:
            place(manager, OrderLineRequest("knafe", 1), OrderLineRequest("pizza", 1))

        assert exc_info.value.categories == ["Tamaño"]
        assert stock.get_quantity("knafe") == 10
        assert stock.get_quantity("pizza") == 10
        assert manager.list_orders() == []

    def test_missing_categories_listed_once(self, manager):
        with pytest.raises(MissingRequiredSelection) as exc_info:
            place(manager, OrderLineRequest("pizza", 1), OrderLineRequest("pizza", 2))
        assert exc_info.value.categories == ["Tamaño"]

    def test_empty_order(self, manager):
        with pytest.raises(InvalidArgument):
            place(manager)

    def test_unknown_restaurant(self, manager):
        request = OrderRequest(restaurant_id="nowhere", items=(OrderLineRequest("knafe", 1),))
        with pytest.raises(InvalidRestaurant):
            manager.create_order(request)

    def test_closed_restaurant(self, manager):
        request = OrderRequest(restaurant_id="closed", items=(OrderLineRequest("arepa", 1),))
        with pytest.raises(InvalidRestaurant):
            manager.create_order(request)

    def test_product_from_another_restaurant(self, manager):
        with pytest.raises(InvalidRestaurant):
            place(manager, OrderLineRequest("arepa", 1))

    def test_unknown_option(self, manager, stock):
        with pytest.raises(InvalidArgument):
            place(manager, OrderLineRequest("pizza", 1, (SelectionRequest("Tamaño", "Gigante"),)))
        assert stock.get_quantity("pizza") == 10

    def test_unknown_category(self, manager):
        with pytest.raises(InvalidArgument):
            place(
                manager,
                OrderLineRequest("pizza", 1, (MEDIANA, SelectionRequest("Salsa", "Ajo"))),
            )

    def test_duplicate_category(self, manager):
        personal = SelectionRequest("Tamaño", 'Personal (8")')
        with pytest.raises(InvalidArgument):
            place(manager, OrderLineRequest("pizza", 1, (MEDIANA, personal)))

    def test_insufficient_stock_leaves_everything_untouched(self, manager, stock):
        stock.set_quantity("pizza", 1)

        with pytest.raises(InsufficientStock) as exc_info:
            place(manager, OrderLineRequest("knafe", 2), OrderLineRequest("pizza", 2, (MEDIANA,)))

        assert exc_info.value.product_ids == ["pizza"]
        assert "Pizza Árabe" in exc_info.value.message
        assert stock.get_quantity("knafe") == 10
        assert stock.get_quantity("pizza") == 1

    def test_quantities_of_repeated_product_are_summed(self, manager, stock):
        stock.set_quantity("knafe", 3)
        with pytest.raises(InsufficientStock):
            place(manager, OrderLineRequest("knafe", 2), OrderLineRequest("knafe", 2))
        assert stock.get_quantity("knafe") == 3

    def test_manually_disabled_product_refused(self, manager, stock):
        stock.set_manual_enabled("knafe", False)
        with pytest.raises(InsufficientStock):
            place(manager, OrderLineRequest("knafe", 1))
        assert stock.get_quantity("knafe") == 10

    def test_lost_race_reported_as_insufficient_stock(self, manager, stock, monkeypatch):
        # Availability passes, then another order takes the stock first
        original = stock.decrement_many

        def racing(amounts):
            stock.set_quantity("knafe", 0)
            return original(amounts)

        monkeypatch.setattr(stock, "decrement_many", racing)

        with pytest.raises(InsufficientStock) as exc_info:
            place(manager, OrderLineRequest("knafe", 1), OrderLineRequest("pizza", 1, (MEDIANA,)))

        assert "Knafe" in exc_info.value.message
        assert stock.get_quantity("pizza") == 10


class TestLifecycle:

    @pytest.fixture
    def order(self, manager):
        return place(manager, OrderLineRequest("knafe", 1))

    def test_pending_cannot_jump_to_completed(self, manager, order):
        assert manager.update_status(order.id, OrderStatus.COMPLETED) is False
        assert manager.get_order(order.id).status == OrderStatus.PENDING

        with pytest.raises(InvalidTransition):
            manager.transition(order.id, OrderStatus.COMPLETED)

    def test_full_lifecycle(self, manager, order):
        for status in (OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.COMPLETED):
            assert manager.update_status(order.id, status) is True
        assert manager.get_order(order.id).status == OrderStatus.COMPLETED

    def test_ready_can_go_back_to_preparing(self, manager, order):
        manager.transition(order.id, OrderStatus.PREPARING)
        manager.transition(order.id, OrderStatus.READY)
        assert manager.transition(order.id, OrderStatus.PREPARING).status == OrderStatus.PREPARING

    def test_terminal_states(self, manager, order):
        manager.transition(order.id, OrderStatus.CANCELLED)
        for status in OrderStatus:
            assert manager.update_status(order.id, status) is False

    def test_cancel_does_not_restock(self, manager, stock, order):
        manager.transition(order.id, OrderStatus.CANCELLED)
        assert stock.get_quantity("knafe") == 9

    def test_unknown_order(self, manager):
        assert manager.update_status("order-nope", OrderStatus.PREPARING) is False
        with pytest.raises(NotFound):
            manager.transition("order-nope", OrderStatus.PREPARING)

    def test_unknown_status_value(self, manager, order):
        with pytest.raises(InvalidArgument):
            manager.transition(order.id, "eaten")

    def test_transition_table(self):
        assert can_transition(OrderStatus.PENDING, OrderStatus.PREPARING)
        assert can_transition(OrderStatus.PREPARING, OrderStatus.CANCELLED)
        assert not can_transition(OrderStatus.READY, OrderStatus.CANCELLED)
        assert not can_transition(OrderStatus.COMPLETED, OrderStatus.PENDING)


class TestPayment:

    @pytest.fixture
    def order(self, manager):
        return place(manager, OrderLineRequest("knafe", 1))

    def test_pending_order_cannot_be_paid(self, manager, order):
        assert manager.mark_paid(order.id, "cash") is False
        assert manager.get_order(order.id).paid_at is None

    def test_ready_order_paid_once(self, manager, order):
        manager.transition(order.id, OrderStatus.PREPARING)
        manager.transition(order.id, OrderStatus.READY)

        assert manager.mark_paid(order.id, "card") is True
        paid = manager.get_order(order.id)
        assert paid.payment_method == "card"
        assert paid.paid_at is not None

        assert manager.mark_paid(order.id, "cash") is False
        assert manager.get_order(order.id).payment_method == "card"

    def test_unknown_order(self, manager):
        assert manager.mark_paid("order-nope", "cash") is False


class TestQueries:

    def test_list_newest_first_and_filtered(self, manager):
        first = place(manager, OrderLineRequest("knafe", 1))
        second = place(manager, OrderLineRequest("knafe", 1))
        manager.transition(second.id, OrderStatus.PREPARING)

        assert [o.id for o in manager.list_orders()] == [second.id, first.id]
        assert [o.id for o in manager.list_orders(status=OrderStatus.PENDING)] == [first.id]
        assert manager.list_orders(restaurant_id="closed") == []

    def test_recent_orders(self, manager):
        order = place(manager, OrderLineRequest("knafe", 1))
        assert [o.id for o in manager.recent_orders("andalus", hours=1)] == [order.id]
        assert manager.recent_orders("andalus", hours=0) == []

    def test_returned_orders_are_copies(self, manager):
        order = place(manager, OrderLineRequest("knafe", 1))
        order.status = OrderStatus.COMPLETED
        assert manager.get_order(order.id).status == OrderStatus.PENDING


class TestSubscriptions:

    def test_listener_gets_current_list_and_updates(self, manager):
        seen = []
        unsubscribe = manager.subscribe(lambda orders: seen.append(len(orders)))

        order = place(manager, OrderLineRequest("knafe", 1))
        manager.transition(order.id, OrderStatus.PREPARING)
        unsubscribe()
        place(manager, OrderLineRequest("knafe", 1))

        assert seen == [0, 1, 1]

    def test_failing_listener_does_not_break_orders(self, manager):
        def explode(orders):
            raise RuntimeError("socket closed")

        manager.subscribe(explode)
        order = place(manager, OrderLineRequest("knafe", 1))
        assert manager.get_order(order.id) is not None
