"""
Order status workflow
"""
import threading

import pytest

from storefront.exceptions import NotFoundError, ValidationError
from storefront.models import Order
from storefront.models.order import can_transition
from storefront.schemas.order import OrderStatusUpdate
from storefront.services.order_service import OrderService

from tests.conftest import RecordingPublisher, add_product, order_request


@pytest.fixture
def order(db, order_service):
    product_id = add_product(db, stock_quantity=5)
    return order_service.create_order(order_request(product_id))


def move(order_service, order_id, status, notes=None):
    return order_service.update_order_status(order_id, OrderStatusUpdate(status=status, notes=notes))


@pytest.mark.parametrize("current,new,allowed", [
    ("pending", "confirmed", True),
    ("pending", "cancelled", True),
    ("pending", "shipped", False),
    ("confirmed", "processing", True),
    ("confirmed", "cancelled", True),
    ("processing", "shipped", True),
    ("processing", "cancelled", True),
    ("shipped", "delivered", True),
    ("shipped", "cancelled", False),
    ("delivered", "cancelled", False),
    ("cancelled", "pending", False),
    ("confirmed", "confirmed", False),
])
def test_transition_table(current, new, allowed):
    assert can_transition(current, new) is allowed


def test_full_lifecycle_sets_timestamps(order_service, publisher, order):
    confirmed = move(order_service, order.id, "confirmed", notes="Called the customer")
    assert confirmed.confirmed_at is not None
    assert confirmed.shipped_at is None
    assert confirmed.notes == "Called the customer"

    move(order_service, order.id, "processing")
    shipped = move(order_service, order.id, "shipped")
    assert shipped.shipped_at is not None
    assert shipped.confirmed_at == confirmed.confirmed_at

    delivered = move(order_service, order.id, "delivered")
    assert delivered.status == "delivered"
    assert delivered.delivered_at is not None
    assert delivered.notes == "Called the customer"

    assert [(e["old_status"], e["new_status"]) for e in publisher.status_changed] == [
        ("pending", "confirmed"),
        ("confirmed", "processing"),
        ("processing", "shipped"),
        ("shipped", "delivered"),
    ]


def test_illegal_transition_is_rejected(order_service, order):
    with pytest.raises(ValidationError) as exc_info:
        move(order_service, order.id, "shipped")

    assert exc_info.value.details["allowed_statuses"] == ["cancelled", "confirmed"]
    assert order_service.get_order_by_id(order.id).status == "pending"


def test_cancelled_is_terminal(order_service, order):
    move(order_service, order.id, "cancelled")

    with pytest.raises(ValidationError):
        move(order_service, order.id, "confirmed")


def test_unknown_order(order_service):
    with pytest.raises(NotFoundError):
        move(order_service, 404, "confirmed")


def test_status_is_read_under_row_lock(order_service, order, monkeypatch):
    locked = []
    real_lock = order_service.repository.lock_by_id

    def spy(order_id):
        locked.append(order_id)
        return real_lock(order_id)

    monkeypatch.setattr(order_service.repository, "lock_by_id", spy)

    move(order_service, order.id, "confirmed")

    assert locked == [order.id]


def test_concurrent_updates_apply_one_transition(db, order_service, order, session_factory):
    move(order_service, order.id, "confirmed")
    move(order_service, order.id, "processing")
    db.close()

    outcomes = []
    outcomes_lock = threading.Lock()
    barrier = threading.Barrier(2)

    def update(status):
        session = session_factory()
        try:
            barrier.wait()
            service = OrderService(session, event_publisher=RecordingPublisher())
            try:
                move(service, order.id, status)
                result = ("ok", status)
            except ValidationError:
                result = ("rejected", status)
        finally:
            session.close()
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=update, args=(s,)) for s in ("shipped", "cancelled")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert sorted(result for result, _ in outcomes) == ["ok", "rejected"]
    winner = next(status for result, status in outcomes if result == "ok")
    with session_factory() as session:
        assert session.get(Order, order.id).status == winner
