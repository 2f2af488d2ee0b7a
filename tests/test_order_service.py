"""
Unit tests for order assembly, placement recovery and the order lifecycle.

Runs against both storage backends.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest

from core.exceptions import (
    DuplicateOrderError,
    EmptyCartError,
    IllegalTransitionError,
    InvalidInputError,
    OrderNotFoundError,
    StorageFailureError,
)
from core.locks import ResourceLocks
from models import CartLine, Order
from services import CartLedger, OrderAssembler, OrderLifecycleManager


@pytest.fixture
def locks():
    return ResourceLocks()


@pytest.fixture
def cart(storage, locks):
    return CartLedger(storage.cart, locks)


@pytest.fixture
def assembler(storage, cart, locks):
    return OrderAssembler(cart, storage.orders, storage.journal, locks)


@pytest.fixture
def lifecycle(storage, locks):
    return OrderLifecycleManager(storage.orders, locks)


@pytest.fixture
def filled_cart(cart):
    cart.upsert("1", 8, Decimal("19.99"))
    cart.upsert("2", 1, Decimal("29.99"))
    return cart


@pytest.fixture
def placed_order(storage):
    order = Order.assemble("o1", "2024-01-01", "addr", (CartLine("1", 1, Decimal("19.99")),))
    storage.orders.create(order)
    return order


class TestPlaceOrder:
    """Test the cart-to-order transition."""

    def test_places_order_and_clears_cart(self, assembler, filled_cart, storage):
        order = assembler.place_order("o1", "2024-01-01", "addr")

        assert order.status == "Pending"
        assert order.total_cost == Decimal("189.91")
        assert len(order.lines) == 2
        assert storage.orders.find_by_id("o1") == order
        assert storage.cart.list_all() == []
        assert storage.journal.pending() is None

    def test_accepts_datetime_strings(self, assembler, filled_cart):
        order = assembler.place_order("o1", "2024-01-01T10:30:00Z", "addr")
        assert order.date == "2024-01-01T10:30:00Z"

    def test_accepts_free_form_dates(self, assembler, filled_cart, storage):
        order = assembler.place_order("o1", "Jan 1 2024", "addr")

        assert order.date == "Jan 1 2024"
        assert storage.orders.find_by_id("o1").date == "Jan 1 2024"

    @pytest.mark.parametrize("order_id,date,address,field", [
        (None, "2024-01-01", "addr", "id"),
        ("o1", None, "addr", "date"),
        ("o1", "2024-01-01", "", "address"),
    ])
    def test_invalid_input(self, assembler, filled_cart, storage, order_id, date, address, field):
        with pytest.raises(InvalidInputError) as exc_info:
            assembler.place_order(order_id, date, address)

        assert exc_info.value.field == field
        assert storage.orders.find_all() == []
        assert len(storage.cart.list_all()) == 2

    def test_empty_cart(self, assembler, storage):
        with pytest.raises(EmptyCartError):
            assembler.place_order("o1", "2024-01-01", "addr")

        assert storage.orders.find_all() == []
        assert storage.journal.pending() is None

    def test_duplicate_id_keeps_cart(self, assembler, filled_cart, storage, placed_order):
        with pytest.raises(DuplicateOrderError):
            assembler.place_order("o1", "2024-01-02", "elsewhere")

        assert storage.orders.find_all() == [placed_order]
        assert len(storage.cart.list_all()) == 2

    def test_order_keeps_prices_from_cart(self, assembler, cart, storage):
        """Totals come from the cart lines, not from current catalog prices."""
        cart.upsert("1", 2, Decimal("10.00"))
        cart.upsert("1", 1, Decimal("12.50"))

        order = assembler.place_order("o1", "2024-01-01", "addr")

        assert order.total_cost == Decimal("32.50")


class TestPlacementRecovery:
    """Test exactly-once cart consumption across failures."""

    def test_failed_clear_is_finished_by_next_placement(self, assembler, filled_cart, storage):
        with patch.object(storage.cart, "clear", side_effect=StorageFailureError("write", "cart")):
            with pytest.raises(StorageFailureError):
                assembler.place_order("o1", "2024-01-01", "addr")

        # Order persisted, cart still full, marker left behind
        assert storage.orders.find_by_id("o1") is not None
        assert len(storage.cart.list_all()) == 2
        assert storage.journal.pending() == "o1"

        # The stale cart cannot be replayed into a second order
        with pytest.raises(EmptyCartError):
            assembler.place_order("o2", "2024-01-01", "addr")

        assert [o.id for o in storage.orders.find_all()] == ["o1"]
        assert storage.journal.pending() is None

    def test_recover_clears_cart_of_persisted_order(self, assembler, filled_cart, storage, placed_order):
        storage.journal.begin("o1")

        assert assembler.recover() == "o1"
        assert storage.cart.list_all() == []
        assert storage.journal.pending() is None

    def test_recover_keeps_cart_when_order_never_persisted(self, assembler, filled_cart, storage):
        storage.journal.begin("o9")

        assert assembler.recover() == "o9"
        assert len(storage.cart.list_all()) == 2
        assert storage.journal.pending() is None

    def test_recover_without_marker(self, assembler, filled_cart, storage):
        assert assembler.recover() is None
        assert len(storage.cart.list_all()) == 2

    def test_failed_persist_leaves_cart_for_retry(self, assembler, filled_cart, storage):
        with patch.object(storage.orders, "create", side_effect=StorageFailureError("write", "orders")):
            with pytest.raises(StorageFailureError):
                assembler.place_order("o1", "2024-01-01", "addr")

        order = assembler.place_order("o1", "2024-01-01", "addr")

        assert order.total_cost == Decimal("189.91")
        assert storage.cart.list_all() == []


class TestLifecycle:
    """Test status updates, lookup and deletion."""

    def test_update_status(self, lifecycle, storage, placed_order):
        updated = lifecycle.update_status("o1", "Shipped")

        assert updated.status == "Shipped"
        assert storage.orders.find_by_id("o1").status == "Shipped"

    def test_any_status_accepted_by_default(self, lifecycle, storage, placed_order):
        lifecycle.update_status("o1", "Delivered")
        lifecycle.update_status("o1", "Pending")
        lifecycle.update_status("o1", "on the moon")
        assert storage.orders.find_by_id("o1").status == "on the moon"

    def test_update_unknown_order(self, lifecycle, storage, placed_order):
        with pytest.raises(OrderNotFoundError):
            lifecycle.update_status("ghost", "Shipped")
        assert storage.orders.find_all() == [placed_order]

    @pytest.mark.parametrize("order_id,status", [(None, "Shipped"), ("o1", None), ("o1", "")])
    def test_update_missing_fields(self, lifecycle, storage, placed_order, order_id, status):
        with pytest.raises(InvalidInputError):
            lifecycle.update_status(order_id, status)
        assert storage.orders.find_by_id("o1").status == "Pending"

    def test_strict_transitions(self, storage, locks, placed_order):
        strict = OrderLifecycleManager(storage.orders, locks, strict_transitions=True)

        with pytest.raises(IllegalTransitionError) as exc_info:
            strict.update_status("o1", "Delivered")
        assert exc_info.value.current == "Pending"

        strict.update_status("o1", "Shipped")
        strict.update_status("o1", "Delivered")

        with pytest.raises(IllegalTransitionError):
            strict.update_status("o1", "Cancelled")
        assert storage.orders.find_by_id("o1").status == "Delivered"

    def test_strict_rejects_unknown_status(self, storage, locks, placed_order):
        strict = OrderLifecycleManager(storage.orders, locks, strict_transitions=True)
        with pytest.raises(IllegalTransitionError):
            strict.update_status("o1", "Lost")

    def test_delete(self, lifecycle, storage, placed_order):
        lifecycle.delete_by_id("o1")
        assert storage.orders.find_by_id("o1") is None

        with pytest.raises(OrderNotFoundError):
            lifecycle.delete_by_id("o1")

    def test_delete_missing_id(self, lifecycle):
        with pytest.raises(InvalidInputError):
            lifecycle.delete_by_id(None)

    def test_reads(self, lifecycle, placed_order):
        assert lifecycle.get_all() == [placed_order]
        assert lifecycle.get_by_id("o1") == placed_order
        with pytest.raises(OrderNotFoundError):
            lifecycle.get_by_id("ghost")
