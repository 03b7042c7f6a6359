"""
Services package
"""
from storefront.services.order_service import OrderService
from storefront.services.checkout_service import CheckoutService
from storefront.services.pricing import PricingService
from storefront.services.product_service import ProductService, CampaignService

__all__ = ["OrderService", "CheckoutService", "PricingService", "ProductService", "CampaignService"]
