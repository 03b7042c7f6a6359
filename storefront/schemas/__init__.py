"""
Schemas package
"""
from storefront.schemas.order import (
    CustomerDetails,
    OrderLine,
    OrderCreate,
    OrderStatusUpdate,
    OrderResponse,
    OrderListResponse,
    CheckoutRequest,
    CheckoutLineFailure,
    CheckoutResponse,
    OrderEvent
)
from storefront.schemas.product import (
    ProductCreate,
    SizeStockUpdate,
    SizeStockResponse,
    ProductResponse,
    ProductListResponse,
    CampaignCreate,
    CampaignUpdate,
    CampaignResponse
)

__all__ = [
    "CustomerDetails",
    "OrderLine",
    "OrderCreate",
    "OrderStatusUpdate",
    "OrderResponse",
    "OrderListResponse",
    "CheckoutRequest",
    "CheckoutLineFailure",
    "CheckoutResponse",
    "OrderEvent",
    "ProductCreate",
    "SizeStockUpdate",
    "SizeStockResponse",
    "ProductResponse",
    "ProductListResponse",
    "CampaignCreate",
    "CampaignUpdate",
    "CampaignResponse"
]
