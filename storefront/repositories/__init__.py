"""
Repositories package
"""
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository, CampaignRepository

__all__ = ["OrderRepository", "ProductRepository", "CampaignRepository"]
