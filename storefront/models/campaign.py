"""
SQLAlchemy Campaign model
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, Boolean, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from storefront.database import Base


class Campaign(Base):
    """Promotional price for a single product within a date window"""

    __tablename__ = "campaigns"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    product = relationship("Product", back_populates="campaigns")

    __table_args__ = (
        CheckConstraint('price >= 0', name='check_campaign_price_positive'),
    )

    def __repr__(self):
        return f"<Campaign(id={self.id}, product_id={self.product_id}, price={self.price}, is_active={self.is_active})>"
