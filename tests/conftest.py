"""
Shared pytest fixtures
"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["EVENTS_ENABLED"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from storefront.database import create_db_engine, get_db, init_db
from storefront.main import app
from storefront.models import Campaign, Product, ProductSizeStock
from storefront.models.product import STOCK_TRACKING_FLAT, STOCK_TRACKING_PER_SIZE
from storefront.publishers.event_publisher import get_event_publisher
from storefront.schemas.order import OrderCreate
from storefront.services.order_service import OrderService

CUSTOMER = {
    "customer_full_name": "Arta Krasniqi",
    "customer_email": "arta@example.com",
    "customer_phone": "+38344111222",
    "customer_address": "Rruga Agim Ramadani 12",
    "customer_city": "Prishtina",
    "customer_country": "kosovo",
}


class RecordingPublisher:
    """Collects events instead of sending them to RabbitMQ"""

    def __init__(self):
        self.created = []
        self.status_changed = []

    def publish_order_created(self, order_data):
        self.created.append(order_data)
        return True

    def publish_order_status_changed(self, order_data):
        self.status_changed.append(order_data)
        return True


def add_product(session, name="Runner", price="49.99", stock_quantity=0, size_stocks=None, image=None):
    product = Product(
        name=name,
        price=Decimal(price),
        image=image,
        stock_quantity=stock_quantity,
        stock_tracking=STOCK_TRACKING_PER_SIZE if size_stocks else STOCK_TRACKING_FLAT,
    )
    for size, quantity in (size_stocks or {}).items():
        product.size_stocks.append(ProductSizeStock(size=size, quantity=quantity))
    session.add(product)
    session.commit()
    return product.id


def add_campaign(session, product_id, price, **kwargs):
    campaign = Campaign(product_id=product_id, name="Promo", price=Decimal(price), **kwargs)
    session.add(campaign)
    session.commit()
    return campaign.id


def order_request(product_id, quantity=1, price="49.99", size=None, **overrides):
    data = dict(
        CUSTOMER,
        product_id=product_id,
        product_price=Decimal(price),
        product_size=size,
        product_color="Black",
        quantity=quantity,
    )
    data.update(overrides)
    return OrderCreate(**data)


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def order_service(db, publisher):
    return OrderService(db, event_publisher=publisher)


@pytest.fixture
def seed(session_factory):
    """Run a seeding function in its own short-lived session"""
    def _seed(func, *args, **kwargs):
        with session_factory() as session:
            return func(session, *args, **kwargs)
    return _seed


@pytest.fixture
def client(session_factory, publisher):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    yield TestClient(app)
    app.dependency_overrides.clear()
