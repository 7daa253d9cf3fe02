"""
Unit Tests for Availability Verdicts

The four-way truth table over (quantity > 0, manually enabled).
"""

import pytest

from fulfillment.models import AvailabilityReason, AvailabilityVerdict


@pytest.mark.parametrize(
    "quantity, enabled, available, reason",
    [
        (5, True, True, AvailabilityReason.AVAILABLE),
        (0, True, False, AvailabilityReason.OUT_OF_STOCK),
        (5, False, False, AvailabilityReason.MANUALLY_DISABLED),
        (0, False, False, AvailabilityReason.BOTH_DISABLED),
    ],
)
def test_truth_table(quantity, enabled, available, reason):
    verdict = AvailabilityVerdict.from_stock(quantity, enabled)
    assert verdict.is_available is available
    assert verdict.reason is reason
    assert verdict.available_quantity == quantity
    assert verdict.manually_enabled is enabled


def test_scenario_e_manually_disabled_with_stock(ledger, resolver):
    ledger.initialize("y", 8)
    ledger.set_manual_enabled("y", False)

    verdict = resolver.resolve("y")

    assert verdict.is_available is False
    assert verdict.reason == AvailabilityReason.MANUALLY_DISABLED
    assert verdict.available_quantity == 8


def test_unseen_product_is_out_of_stock(resolver, ledger):
    verdict = resolver.resolve("never-seen")
    assert verdict.reason == AvailabilityReason.OUT_OF_STOCK
    assert not ledger.is_tracked("never-seen")


def test_verdict_follows_latest_stock(ledger, resolver):
    ledger.initialize("x", 1)
    assert resolver.resolve("x").is_available
    ledger.decrement("x", 1)
    assert resolver.resolve("x").reason == AvailabilityReason.OUT_OF_STOCK
    ledger.set_manual_enabled("x", False)
    assert resolver.resolve("x").reason == AvailabilityReason.BOTH_DISABLED


def test_resolve_all(ledger, resolver):
    ledger.initialize("a", 3)
    verdicts = resolver.resolve_all(["a", "b"])
    assert verdicts["a"].is_available
    assert not verdicts["b"].is_available


def test_can_fulfil(ledger, resolver):
    ledger.initialize("x", 3)
    assert resolver.can_fulfil("x", 3)
    assert not resolver.can_fulfil("x", 4)
    ledger.set_manual_enabled("x", False)
    assert not resolver.can_fulfil("x", 1)
