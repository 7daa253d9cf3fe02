"""
Unit Tests for the Stock Alert Engine

One alert slot per product, acknowledgement and restaurant filtering.
"""

from fulfillment.models import AlertType
from fulfillment.services.inventory import AlertEngine, StockLedger


class TestRaising:

    def test_no_alert_above_threshold(self, alerts):
        assert alerts.on_quantity_changed("knafe-andalus", 6, 5) is None
        assert alerts.list_active_alerts() == []

    def test_low_stock_at_threshold(self, alerts):
        alert = alerts.on_quantity_changed("knafe-andalus", 5, 5)
        assert alert.type == AlertType.LOW_STOCK
        assert alert.product_name == "Knafe Al Andalus"

    def test_out_of_stock_at_zero(self, alerts):
        alert = alerts.on_quantity_changed("knafe-andalus", 0, 5)
        assert alert.type == AlertType.OUT_OF_STOCK

    def test_at_most_one_alert_per_product(self, alerts):
        for quantity in (4, 3, 2, 1, 0):
            alerts.on_quantity_changed("knafe-andalus", quantity, 5)
        active = alerts.list_active_alerts()
        assert len(active) == 1
        assert active[0].current_quantity == 0

    def test_restock_clears_slot(self, alerts):
        alerts.on_quantity_changed("knafe-andalus", 2, 5)
        alerts.on_quantity_changed("knafe-andalus", 20, 5)
        assert alerts.list_active_alerts() == []

    def test_unknown_product_name_falls_back_to_id(self, alerts):
        alert = alerts.on_quantity_changed("mystery-dish", 1, 5)
        assert alert.product_name == "Mystery Dish"


class TestAcknowledge:

    def test_acknowledge_is_idempotent(self, alerts):
        alert = alerts.on_quantity_changed("knafe-andalus", 1, 5)

        assert alerts.acknowledge(alert.id) is True
        assert alerts.acknowledge(alert.id) is False
        assert alerts.list_active_alerts() == []
        assert alerts.get_alert(alert.id).acknowledged is True

    def test_acknowledge_unknown_alert(self, alerts):
        assert alerts.acknowledge("alert-nope") is False

    def test_new_change_raises_fresh_alert_after_acknowledge(self, ledger, alerts):
        ledger.initialize("knafe-andalus", 4)
        first = alerts.list_active_alerts()[0]
        alerts.acknowledge(first.id)

        ledger.decrement("knafe-andalus", 1)

        active = alerts.list_active_alerts()
        assert len(active) == 1
        assert active[0].id != first.id
        assert active[0].current_quantity == 3


class TestFiltering:

    def test_filter_by_restaurant(self, alerts):
        alerts.on_quantity_changed("knafe-andalus", 1, 5)
        alerts.on_quantity_changed("tabbouleh-muna", 0, 5)

        andalus = alerts.list_active_alerts("al-andalus")
        muna = alerts.list_active_alerts("muna")

        assert [a.product_id for a in andalus] == ["knafe-andalus"]
        assert [a.product_id for a in muna] == ["tabbouleh-muna"]
        assert len(alerts.list_active_alerts()) == 2

    def test_filter_without_catalog_matches_nothing(self):
        engine = AlertEngine()
        engine.on_quantity_changed("knafe-andalus", 1, 5)
        assert engine.list_active_alerts("al-andalus") == []
        assert len(engine.list_active_alerts()) == 1

    def test_clear(self, alerts):
        alerts.on_quantity_changed("knafe-andalus", 1, 5)
        alerts.clear()
        assert alerts.list_active_alerts() == []


class TestListener:

    def test_listener_receives_raised_alerts(self, catalog):
        received = []
        ledger = StockLedger(alert_engine=AlertEngine(catalog, on_alert_raised=received.append))

        ledger.initialize("knafe-andalus", 10)
        ledger.decrement("knafe-andalus", 7)
        ledger.decrement("knafe-andalus", 3)

        assert [a.type for a in received] == [AlertType.LOW_STOCK, AlertType.OUT_OF_STOCK]

    def test_failing_listener_does_not_break_stock_change(self, catalog):
        def explode(alert):
            raise RuntimeError("pager offline")

        ledger = StockLedger(alert_engine=AlertEngine(catalog, on_alert_raised=explode))
        ledger.initialize("knafe-andalus", 10)

        assert ledger.decrement("knafe-andalus", 8) is True
        assert ledger.get_quantity("knafe-andalus") == 2
