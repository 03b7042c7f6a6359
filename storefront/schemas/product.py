"""
Pydantic schemas for catalog request/response validation
"""
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Dict, List, Optional
from datetime import datetime, timezone
from decimal import Decimal


class ProductBase(BaseModel):
    """Base Product schema with common fields"""
    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    price: Decimal = Field(..., gt=0, description="List price (must be positive)")
    image: Optional[str] = Field(None, max_length=500, description="Product image path")
    category: Optional[str] = Field(None, max_length=100, description="Product category")
    gender: Optional[str] = Field(None, max_length=20)
    color: Optional[str] = Field(None, max_length=50)
    sizes: Optional[str] = Field(None, max_length=255, description="Comma separated sizes shown to customers")


class ProductCreate(ProductBase):
    """Schema for creating a new product

    Passing ``size_stocks`` makes the product size tracked; otherwise
    ``stock_quantity`` is its single stock counter.
    """
    stock_quantity: int = Field(0, ge=0, description="Flat stock quantity")
    size_stocks: Optional[Dict[str, int]] = Field(None, description="Stock per size")

    @model_validator(mode="after")
    def check_size_stocks(self):
        for size, quantity in (self.size_stocks or {}).items():
            if not size.strip() or len(size) > 10:
                raise ValueError(f"Invalid size '{size}'")
            if quantity < 0:
                raise ValueError(f"Stock for size {size} must be non-negative")
        return self


class SizeStockUpdate(BaseModel):
    """Schema for setting the stock of one size"""
    quantity: int = Field(..., ge=0)


class SizeStockResponse(BaseModel):
    size: str
    quantity: int
    stock_status: str

    model_config = ConfigDict(from_attributes=True)


class ProductResponse(ProductBase):
    """Schema for product response"""
    id: int
    stock_quantity: int
    stock_tracking: str
    size_stocks: List[SizeStockResponse]
    effective_price: Optional[Decimal] = None
    active_campaign_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Schema for list of products response"""
    products: list[ProductResponse]
    total: int


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize to UTC; naive values are taken as UTC already"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    # SQLite stores the wall clock time without its offset
    return value.astimezone(timezone.utc)


class CampaignCreate(BaseModel):
    """Schema for creating a campaign"""
    product_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0, description="Campaign price, lower than the list price")
    is_active: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_window(self):
        self.start_date = as_utc(self.start_date)
        self.end_date = as_utc(self.end_date)
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class CampaignUpdate(BaseModel):
    """Schema for updating a campaign (all fields optional)"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0)
    is_active: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def normalize_window(self):
        # Assigning marks a field as set, so leave omitted dates alone
        if self.start_date is not None:
            self.start_date = as_utc(self.start_date)
        if self.end_date is not None:
            self.end_date = as_utc(self.end_date)
        return self


class CampaignResponse(BaseModel):
    id: int
    product_id: int
    name: str
    description: Optional[str]
    price: Decimal
    is_active: bool
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
