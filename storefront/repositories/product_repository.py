"""
Product Repository - Data Access Layer
"""
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_

from storefront.models.product import (
    Product, ProductSizeStock, STOCK_TRACKING_FLAT, STOCK_TRACKING_PER_SIZE
)
from storefront.models.campaign import Campaign


class ProductRepository:
    """Repository for Product and size stock access"""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self, skip: int = 0, limit: int = 100) -> List[Product]:
        """Get all products with pagination"""
        return self.db.query(Product).order_by(Product.id).offset(skip).limit(limit).all()

    def get_by_id(self, product_id: int) -> Optional[Product]:
        """Get product by ID"""
        return self.db.query(Product).filter(Product.id == product_id).first()

    def lock_by_id(self, product_id: int) -> Optional[Product]:
        """Load a product row with a write lock held until commit/rollback"""
        return self.db.query(Product).filter(
            Product.id == product_id
        ).with_for_update().populate_existing().first()

    def lock_size_stock(self, product_id: int, size: str) -> Optional[ProductSizeStock]:
        """Load the (product, size) stock row with a write lock held until commit/rollback"""
        return self.db.query(ProductSizeStock).filter(
            ProductSizeStock.product_id == product_id,
            ProductSizeStock.size == size
        ).with_for_update().populate_existing().first()

    def get_sizes(self, product_id: int) -> List[str]:
        """Sizes that have a stock row, in ledger order"""
        rows = self.db.query(ProductSizeStock.size).filter(
            ProductSizeStock.product_id == product_id
        ).order_by(ProductSizeStock.id).all()
        return [row.size for row in rows]

    def create(self, product_data: dict, size_stocks: Optional[Dict[str, int]] = None) -> Product:
        """Create new product, size tracked when size stocks are given"""
        product = Product(**product_data)
        if size_stocks:
            product.stock_tracking = STOCK_TRACKING_PER_SIZE
            product.size_stocks = [
                ProductSizeStock(size=size, quantity=quantity)
                for size, quantity in size_stocks.items()
            ]
        else:
            product.stock_tracking = STOCK_TRACKING_FLAT
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def set_size_stock(self, product: Product, size: str, quantity: int) -> ProductSizeStock:
        """Insert or overwrite one size stock row; the product becomes size tracked"""
        row = self.lock_size_stock(product.id, size)
        if row is None:
            row = ProductSizeStock(product_id=product.id, size=size, quantity=quantity)
            self.db.add(row)
        else:
            row.quantity = quantity
        product.stock_tracking = STOCK_TRACKING_PER_SIZE
        self.db.commit()
        self.db.refresh(product)
        return row

    def count(self) -> int:
        """Get total count of products"""
        return self.db.query(Product).count()


class CampaignRepository:
    """Repository for Campaign access"""

    def __init__(self, db: Session):
        self.db = db

    def _effective_filter(self, now: datetime):
        return and_(
            Campaign.is_active.is_(True),
            or_(Campaign.start_date.is_(None), Campaign.start_date <= now),
            or_(Campaign.end_date.is_(None), Campaign.end_date >= now),
        )

    def get_effective_for_product(self, product_id: int, now: datetime) -> Optional[Campaign]:
        """Cheapest campaign of the product that is active and within its window"""
        return self.db.query(Campaign).filter(
            Campaign.product_id == product_id,
            self._effective_filter(now)
        ).order_by(Campaign.price, Campaign.id).first()

    def get_effective(self, now: datetime) -> List[Campaign]:
        """All campaigns currently in effect"""
        return self.db.query(Campaign).filter(
            self._effective_filter(now)
        ).order_by(Campaign.product_id, Campaign.price).all()

    def get_by_id(self, campaign_id: int) -> Optional[Campaign]:
        """Get campaign by ID"""
        return self.db.query(Campaign).filter(Campaign.id == campaign_id).first()

    def create(self, campaign_data: dict) -> Campaign:
        """Create new campaign"""
        campaign = Campaign(**campaign_data)
        self.db.add(campaign)
        self.db.commit()
        self.db.refresh(campaign)
        return campaign

    def update(self, campaign: Campaign, campaign_data: dict) -> Campaign:
        """Apply changed fields to a campaign"""
        for field, value in campaign_data.items():
            setattr(campaign, field, value)
        self.db.commit()
        self.db.refresh(campaign)
        return campaign
