"""
Concurrent orders against the same stock row never oversell
"""
import threading

from storefront.exceptions import InsufficientStockError
from storefront.models import Order, Product, ProductSizeStock
from storefront.services.order_service import OrderService

from tests.conftest import RecordingPublisher, add_product, order_request


def run_concurrently(session_factory, requests):
    """Submit every request from its own thread and session"""
    outcomes = []
    lock = threading.Lock()
    barrier = threading.Barrier(len(requests))

    def submit(request):
        session = session_factory()
        try:
            barrier.wait()
            service = OrderService(session, event_publisher=RecordingPublisher())
            try:
                service.create_order(request)
                result = ("ok", request.quantity)
            except InsufficientStockError as e:
                result = ("insufficient", e.available)
        finally:
            session.close()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=submit, args=(r,)) for r in requests]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)
    return outcomes


def test_concurrent_size_orders_exhaust_stock_exactly(seed, session_factory):
    product_id = seed(add_product, size_stocks={"42": 4})

    outcomes = run_concurrently(
        session_factory,
        [order_request(product_id, quantity=1, size="42") for _ in range(7)]
    )

    assert len(outcomes) == 7
    assert sum(1 for status, _ in outcomes if status == "ok") == 4
    assert sum(1 for status, _ in outcomes if status == "insufficient") == 3
    with session_factory() as session:
        row = session.query(ProductSizeStock).filter_by(product_id=product_id, size="42").one()
        assert row.quantity == 0
        assert session.query(Order).count() == 4


def test_concurrent_orders_never_exceed_on_hand(seed, session_factory):
    product_id = seed(add_product, size_stocks={"41": 5})

    outcomes = run_concurrently(
        session_factory,
        [order_request(product_id, quantity=2, size="41") for _ in range(4)]
    )

    ordered = sum(quantity for status, quantity in outcomes if status == "ok")
    assert ordered == 4
    with session_factory() as session:
        row = session.query(ProductSizeStock).filter_by(product_id=product_id, size="41").one()
        assert row.quantity == 1
        assert sum(o.quantity for o in session.query(Order).all()) == ordered


def test_concurrent_flat_orders(seed, session_factory):
    product_id = seed(add_product, stock_quantity=3)

    outcomes = run_concurrently(
        session_factory,
        [order_request(product_id, quantity=1) for _ in range(5)]
    )

    assert sum(1 for status, _ in outcomes if status == "ok") == 3
    with session_factory() as session:
        assert session.get(Product, product_id).stock_quantity == 0
