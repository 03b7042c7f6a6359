"""
Models package
"""
from storefront.models.product import (
    Product,
    ProductSizeStock,
    FlatStock,
    PerSizeStock,
    StockModel,
    STOCK_TRACKING_FLAT,
    STOCK_TRACKING_PER_SIZE
)
from storefront.models.campaign import Campaign
from storefront.models.order import Order

__all__ = [
    "Product",
    "ProductSizeStock",
    "FlatStock",
    "PerSizeStock",
    "StockModel",
    "STOCK_TRACKING_FLAT",
    "STOCK_TRACKING_PER_SIZE",
    "Campaign",
    "Order"
]
