"""
SQLAlchemy Order model and the order status workflow
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, ForeignKey, CheckConstraint
from sqlalchemy.sql import func

from storefront.database import Base

ORDER_STATUSES = ("pending", "confirmed", "processing", "shipped", "delivered", "cancelled")
COUNTRIES = ("albania", "kosovo", "macedonia")

ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"processing", "cancelled"},
    "processing": {"shipped", "cancelled"},
    "shipped": {"delivered"},
    "delivered": set(),
    "cancelled": set(),
}

# Timestamp set the first time an order enters the status
STATUS_TIMESTAMPS = {
    "confirmed": "confirmed_at",
    "shipped": "shipped_at",
    "delivered": "delivered_at",
}


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, set())


class Order(Base):
    """Order database model"""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    unique_id = Column(String(20), nullable=False, unique=True, index=True)
    batch_id = Column(String(64), nullable=True, index=True)

    # Customer
    customer_full_name = Column(String(255), nullable=False)
    customer_email = Column(String(255), nullable=False, index=True)
    customer_phone = Column(String(20), nullable=False)
    customer_address = Column(Text, nullable=False)
    customer_city = Column(String(100), nullable=False)
    customer_country = Column(String(20), nullable=False)

    # Product snapshot at time of order
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    product_price = Column(Numeric(10, 2), nullable=False)
    product_image = Column(String(500), nullable=True)
    product_size = Column(String(50), nullable=True)
    product_color = Column(String(50), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)

    shipping_fee = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(20), nullable=False, default='cash')
    status = Column(String(50), nullable=False, default='pending', index=True)
    notes = Column(Text, nullable=True)

    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    shipped_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Constraints
    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_quantity_positive'),
        CheckConstraint("payment_method IN ('cash')", name='check_payment_method_valid'),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled')",
            name='check_status_valid'
        ),
        CheckConstraint(
            "customer_country IN ('albania', 'kosovo', 'macedonia')",
            name='check_customer_country_valid'
        ),
    )

    def __repr__(self):
        return f"<Order(id={self.id}, unique_id='{self.unique_id}', product_id={self.product_id}, quantity={self.quantity}, status='{self.status}')>"
