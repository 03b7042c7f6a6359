"""
SQLAlchemy Product and ProductSizeStock models
"""
from dataclasses import dataclass, field
from typing import Dict, List, Union

from sqlalchemy import (
    Column, Integer, String, Numeric, DateTime, Text, ForeignKey,
    CheckConstraint, UniqueConstraint
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from storefront.database import Base

STOCK_TRACKING_FLAT = "flat"
STOCK_TRACKING_PER_SIZE = "per_size"

LOW_STOCK_THRESHOLD = 10


@dataclass(frozen=True)
class FlatStock:
    """Product tracks one stock counter"""
    quantity: int


@dataclass(frozen=True)
class PerSizeStock:
    """Product tracks stock per size; keys keep ledger order"""
    sizes: Dict[str, int] = field(default_factory=dict)

    @property
    def available_sizes(self) -> List[str]:
        return list(self.sizes)


StockModel = Union[FlatStock, PerSizeStock]


class Product(Base):
    """Product database model"""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(500), nullable=True)
    stock_quantity = Column(Integer, nullable=False, default=0)
    stock_tracking = Column(String(20), nullable=False, default=STOCK_TRACKING_FLAT)
    category = Column(String(100), nullable=True, index=True)
    gender = Column(String(20), nullable=True)
    color = Column(String(50), nullable=True)
    sizes = Column(String(255), nullable=True)  # Cosmetic, comma separated
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    size_stocks = relationship(
        "ProductSizeStock",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductSizeStock.id"
    )
    campaigns = relationship("Campaign", back_populates="product", cascade="all, delete-orphan")

    # Constraints
    __table_args__ = (
        CheckConstraint('price >= 0', name='check_price_positive'),
        CheckConstraint('stock_quantity >= 0', name='check_stock_quantity_non_negative'),
        CheckConstraint(
            "stock_tracking IN ('flat', 'per_size')",
            name='check_stock_tracking_valid'
        ),
    )

    @property
    def stock_model(self) -> StockModel:
        """Tagged view of the stock ledger this product uses"""
        if self.stock_tracking == STOCK_TRACKING_PER_SIZE:
            return PerSizeStock({s.size: s.quantity for s in self.size_stocks})
        return FlatStock(self.stock_quantity or 0)

    def __repr__(self):
        return (
            f"<Product(id={self.id}, name='{self.name}', price={self.price}, "
            f"stock_tracking='{self.stock_tracking}')>"
        )


class ProductSizeStock(Base):
    """Per-size stock ledger row"""

    __tablename__ = "product_size_stocks"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    size = Column(String(10), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    product = relationship("Product", back_populates="size_stocks")

    __table_args__ = (
        UniqueConstraint('product_id', 'size', name='uq_product_size'),
        CheckConstraint('quantity >= 0', name='check_size_quantity_non_negative'),
    )

    @property
    def stock_status(self) -> str:
        if self.quantity == 0:
            return "out of stock"
        if self.quantity <= LOW_STOCK_THRESHOLD:
            return "low stock"
        return "in stock"

    def __repr__(self):
        return f"<ProductSizeStock(product_id={self.product_id}, size='{self.size}', quantity={self.quantity})>"
