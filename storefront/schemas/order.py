"""
Pydantic schemas for order request/response validation
"""
from pydantic import BaseModel, Field, EmailStr, ConfigDict
from typing import Any, Dict, List, Optional, Literal
from datetime import datetime
from decimal import Decimal

from storefront.config import settings

Country = Literal['albania', 'kosovo', 'macedonia']
OrderStatus = Literal['pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled']


class CustomerDetails(BaseModel):
    """Customer contact and delivery address"""
    customer_full_name: str = Field(..., min_length=1, max_length=255)
    customer_email: EmailStr = Field(..., description="Customer email address")
    customer_phone: str = Field(..., min_length=1, max_length=20)
    customer_address: str = Field(..., min_length=1, max_length=1000)
    customer_city: str = Field(..., min_length=1, max_length=100)
    customer_country: Country = Field(..., description="Delivery country")


class OrderLine(BaseModel):
    """One product line of a purchase"""
    product_id: int = Field(..., gt=0, description="Product ID")
    product_price: Decimal = Field(
        ..., ge=0, description="Unit price shown to the customer (campaign or list)"
    )
    product_size: Optional[str] = Field(None, max_length=50)
    product_color: Optional[str] = Field(None, max_length=50)
    quantity: int = Field(..., ge=1, le=settings.MAX_ORDER_QUANTITY, description="Quantity to order")


class OrderCreate(CustomerDetails, OrderLine):
    """Schema for creating a new order"""
    shipping_fee: Decimal = Field(Decimal("0"), ge=0, description="Shipping fee for this order")
    batch_id: Optional[str] = Field(None, max_length=64)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderStatusUpdate(BaseModel):
    """Schema for updating order status"""
    status: OrderStatus = Field(..., description="Order status")
    notes: Optional[str] = Field(None, max_length=1000)


class OrderResponse(BaseModel):
    """Schema for order response"""
    id: int
    unique_id: str
    batch_id: Optional[str]
    customer_full_name: str
    customer_email: str
    customer_phone: str
    customer_address: str
    customer_city: str
    customer_country: str
    product_id: int
    product_name: str
    product_price: Decimal
    product_image: Optional[str]
    product_size: Optional[str]
    product_color: Optional[str]
    quantity: int
    shipping_fee: Decimal
    total_amount: Decimal
    payment_method: str
    status: str
    notes: Optional[str]
    confirmed_at: Optional[datetime]
    shipped_at: Optional[datetime]
    delivered_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderListResponse(BaseModel):
    """Schema for list of orders response"""
    orders: list[OrderResponse]
    total: int


class CheckoutRequest(CustomerDetails):
    """Cart checkout: one customer, several product lines"""
    items: List[OrderLine] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=1000)


class CheckoutLineFailure(BaseModel):
    """A cart line that could not be ordered"""
    line: int
    product_id: int
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class CheckoutResponse(BaseModel):
    """Outcome of a cart checkout"""
    batch_id: Optional[str]
    status: Literal['completed', 'partial', 'failed']
    shipping_fee: Decimal
    orders: List[OrderResponse]
    failures: List[CheckoutLineFailure]


class OrderEvent(BaseModel):
    """Schema for published order event envelopes"""
    event_type: str
    event_id: str
    event_version: str = "1.0"
    timestamp: str
    source: str
    data: dict
