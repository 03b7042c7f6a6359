"""
Cart checkout: batch ids, shipping apportionment and partial failures
"""
from decimal import Decimal

import pytest

from storefront.models import Order, Product
from storefront.schemas.order import CheckoutRequest
from storefront.services.checkout_service import CheckoutService, generate_batch_id
from storefront.services.pricing import apportion_shipping

from tests.conftest import CUSTOMER, add_product


@pytest.fixture
def checkout_service(db, order_service):
    return CheckoutService(db, order_service)


def cart(*lines, country="albania", **extra):
    customer = dict(CUSTOMER, customer_country=country)
    items = [
        {"product_id": product_id, "product_price": price, "quantity": quantity, "product_size": size}
        for product_id, price, quantity, size in lines
    ]
    return CheckoutRequest(**customer, items=items, **extra)


def test_apportion_shipping_rounds_each_share():
    shares = apportion_shipping(Decimal("4.00"), [Decimal("10"), Decimal("100"), Decimal("30")])
    assert shares == [Decimal("0.29"), Decimal("2.86"), Decimal("0.86")]


def test_apportion_shipping_with_zero_subtotal():
    assert apportion_shipping(Decimal("4.00"), [Decimal("0"), Decimal("0")]) == [Decimal("0.00")] * 2


def test_batch_id_format():
    batch_id = generate_batch_id()
    prefix, millis, suffix = batch_id.split("-")
    assert prefix == "BATCH"
    assert millis.isdigit()
    assert len(suffix) == 9


def test_all_lines_succeed(db, checkout_service):
    shoes = add_product(db, name="Shoes", price="30.00", size_stocks={"42": 2})
    socks = add_product(db, name="Socks", price="10.00", stock_quantity=10)

    result = checkout_service.checkout(cart(
        (shoes, "30.00", 1, "42"),
        (socks, "10.00", 1, None),
    ))

    assert result.status == "completed"
    assert result.failures == []
    assert result.batch_id.startswith("BATCH-")
    assert {o.batch_id for o in result.orders} == {result.batch_id}
    assert [o.shipping_fee for o in result.orders] == [Decimal("3.00"), Decimal("1.00")]
    assert result.shipping_fee == Decimal("4.00")
    assert result.orders[0].total_amount == Decimal("33.00")
    assert result.orders[0].notes == "Part of 2 item order"


def test_failed_middle_line_keeps_other_orders(db, checkout_service):
    first = add_product(db, name="First", price="10.00", stock_quantity=5)
    second = add_product(db, name="Second", price="20.00", stock_quantity=1)
    third = add_product(db, name="Third", price="30.00", stock_quantity=5)

    result = checkout_service.checkout(cart(
        (first, "10.00", 1, None),
        (second, "20.00", 5, None),
        (third, "30.00", 1, None),
    ))

    assert result.status == "partial"
    assert [o.product_id for o in result.orders] == [first, third]
    assert len(result.failures) == 1
    failure = result.failures[0]
    assert failure.line == 2
    assert failure.code == "insufficient_stock"
    assert failure.details == {"available": 1}

    # Shares come from the full cart subtotal of 140.00
    assert [o.shipping_fee for o in result.orders] == [Decimal("0.29"), Decimal("0.86")]
    assert result.shipping_fee == Decimal("1.15")
    assert [o.total_amount for o in result.orders] == [Decimal("10.29"), Decimal("30.86")]

    stored = db.query(Order).filter_by(batch_id=result.batch_id).order_by(Order.id).all()
    assert [o.product_id for o in stored] == [first, third]
    assert db.get(Product, first).stock_quantity == 4
    assert db.get(Product, second).stock_quantity == 1
    assert db.get(Product, third).stock_quantity == 4


def test_every_line_failing(db, checkout_service):
    sized = add_product(db, size_stocks={"40": 1})

    result = checkout_service.checkout(cart(
        (sized, "49.99", 1, "47"),
        (999, "5.00", 1, None),
    ))

    assert result.status == "failed"
    assert result.orders == []
    assert [f.code for f in result.failures] == ["size_not_available", "not_found"]
    assert result.failures[0].details["available_sizes"] == ["40"]
    assert db.query(Order).count() == 0


def test_single_line_has_no_batch(db, checkout_service):
    product_id = add_product(db, price="25.00", stock_quantity=2)

    result = checkout_service.checkout(cart((product_id, "25.00", 2, None), country="kosovo"))

    assert result.status == "completed"
    assert result.batch_id is None
    assert result.orders[0].shipping_fee == Decimal("0.00")
    assert result.orders[0].total_amount == Decimal("50.00")
    assert result.orders[0].notes is None


def test_two_lines_for_same_size_share_the_stock(db, checkout_service):
    product_id = add_product(db, price="15.00", size_stocks={"39": 3})

    result = checkout_service.checkout(cart(
        (product_id, "15.00", 2, "39"),
        (product_id, "15.00", 2, "39"),
    ))

    assert result.status == "partial"
    assert result.failures[0].line == 2
    assert result.failures[0].message == "Insufficient stock for size 39. Only 1 available."
