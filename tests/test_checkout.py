"""
Unit tests for the checkout operation.

Runs against both storage backends through the `stocked_storage` fixture.
"""

from decimal import Decimal

import pytest

from core.exceptions import (
    InsufficientStockError,
    InvalidInputError,
    ProductNotFoundError,
)
from core.locks import ResourceLocks
from services import CartLedger, CatalogReader, CheckoutService


def _checkout_service(storage, reserve_cart_stock=True):
    locks = ResourceLocks()
    catalog = CatalogReader(storage.catalog, locks)
    cart = CartLedger(storage.cart, locks)
    return CheckoutService(catalog, cart, locks, reserve_cart_stock=reserve_cart_stock)


@pytest.fixture
def checkout_service(stocked_storage):
    return _checkout_service(stocked_storage)


class TestValidation:
    """Test inputs are rejected before storage is touched."""

    @pytest.mark.parametrize("product_id", [None, "", "   "])
    def test_missing_product_id(self, checkout_service, product_id):
        with pytest.raises(InvalidInputError) as exc_info:
            checkout_service.checkout(product_id, 1)
        assert exc_info.value.field == "id"

    @pytest.mark.parametrize("quantity", [None, 0, -3, 1.5, "2", True])
    def test_bad_quantity(self, checkout_service, stocked_storage, quantity):
        with pytest.raises(InvalidInputError) as exc_info:
            checkout_service.checkout("1", quantity)
        assert exc_info.value.field == "quantity"
        assert stocked_storage.cart.list_all() == []

    def test_unknown_product(self, checkout_service, stocked_storage):
        with pytest.raises(ProductNotFoundError):
            checkout_service.checkout("99", 1)
        assert stocked_storage.cart.list_all() == []


class TestStockCheck:
    """Test the stock check and the resulting cart line."""

    def test_first_checkout_creates_line(self, checkout_service):
        line = checkout_service.checkout("1", 5)
        assert line.product_id == "1"
        assert line.quantity == 5
        assert line.price == Decimal("99.95")

    def test_repeat_checkout_accumulates(self, checkout_service, stocked_storage):
        checkout_service.checkout("1", 5)
        line = checkout_service.checkout("1", 3)

        assert line.quantity == 8
        assert line.price == Decimal("159.92")
        assert stocked_storage.cart.list_all() == [line]

    def test_request_above_stock_rejected(self, checkout_service, stocked_storage):
        with pytest.raises(InsufficientStockError) as exc_info:
            checkout_service.checkout("1", 51)

        assert exc_info.value.requested == 51
        assert exc_info.value.available == 50
        assert stocked_storage.cart.list_all() == []

    def test_exact_stock_accepted(self, checkout_service):
        assert checkout_service.checkout("4", 15).quantity == 15

    def test_stock_never_decremented(self, checkout_service, stocked_storage):
        checkout_service.checkout("1", 10)
        assert stocked_storage.catalog.find_by_id("1").stock == 50

    def test_integer_product_id_accepted(self, checkout_service):
        assert checkout_service.checkout(1, 2).product_id == "1"


class TestReservations:
    """Test cart contents count against stock."""

    def test_cart_contents_reduce_availability(self, checkout_service, stocked_storage):
        checkout_service.checkout("1", 30)

        with pytest.raises(InsufficientStockError) as exc_info:
            checkout_service.checkout("1", 21)

        assert exc_info.value.available == 20
        assert stocked_storage.cart.find_by_product("1").quantity == 30

    def test_remaining_stock_still_available(self, checkout_service):
        checkout_service.checkout("1", 30)
        assert checkout_service.checkout("1", 20).quantity == 50

    def test_other_products_unaffected(self, checkout_service):
        checkout_service.checkout("1", 50)
        assert checkout_service.checkout("2", 30).quantity == 30

    def test_per_request_check_when_disabled(self, stocked_storage):
        """Without reservations each request is checked against full stock."""
        service = _checkout_service(stocked_storage, reserve_cart_stock=False)

        service.checkout("1", 30)
        line = service.checkout("1", 30)

        assert line.quantity == 60
        with pytest.raises(InsufficientStockError):
            service.checkout("1", 51)
