"""
Product and campaign API endpoints
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from storefront.database import get_db
from storefront.exceptions import NotFoundError
from storefront.services.product_service import ProductService, CampaignService
from storefront.schemas.product import (
    ProductCreate,
    SizeStockUpdate,
    ProductResponse,
    ProductListResponse,
    CampaignCreate,
    CampaignUpdate,
    CampaignResponse
)

router = APIRouter(prefix="/products", tags=["products"])
campaign_router = APIRouter(prefix="/campaigns", tags=["campaigns"])


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    """Dependency to get ProductService instance"""
    return ProductService(db)


def get_campaign_service(db: Session = Depends(get_db)) -> CampaignService:
    """Dependency to get CampaignService instance"""
    return CampaignService(db)


@router.get("", response_model=ProductListResponse, summary="Get all products")
def get_products(
    skip: int = Query(0, ge=0, description="Number of products to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of products to return"),
    service: ProductService = Depends(get_product_service)
):
    """Retrieve products with pagination"""
    return service.get_all_products(skip=skip, limit=limit)


@router.get("/{product_id}", response_model=ProductResponse, summary="Get product by ID")
def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    """
    Retrieve a product with its size stocks and current price

    - **product_id**: Product ID
    """
    product = service.get_product_by_id(product_id)
    if not product:
        raise NotFoundError(f"Product with id={product_id} not found")
    return product


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED, summary="Create product")
def create_product(
    product_data: ProductCreate,
    service: ProductService = Depends(get_product_service)
):
    """
    Create a new product

    - **price**: List price (required, must be positive)
    - **stock_quantity**: Stock counter for products without sizes
    - **size_stocks**: Map of size to quantity; makes the product size tracked
    """
    return service.create_product(product_data)


@router.put("/{product_id}/sizes/{size}", response_model=ProductResponse, summary="Set size stock")
def set_size_stock(
    product_id: int,
    size: str,
    stock_data: SizeStockUpdate,
    service: ProductService = Depends(get_product_service)
):
    """
    Set the stock quantity of one size

    - **product_id**: Product ID
    - **size**: Size label, e.g. "42"
    - **quantity**: New quantity (non-negative)
    """
    return service.set_size_stock(product_id, size, stock_data.quantity)


@campaign_router.post("", response_model=CampaignResponse, status_code=status.HTTP_201_CREATED, summary="Create campaign")
def create_campaign(
    campaign_data: CampaignCreate,
    service: CampaignService = Depends(get_campaign_service)
):
    """
    Create a promotional campaign

    The campaign price must be strictly lower than the product's list price.
    """
    return service.create_campaign(campaign_data)


@campaign_router.get("/active", response_model=List[CampaignResponse], summary="Get active campaigns")
def get_active_campaigns(service: CampaignService = Depends(get_campaign_service)):
    """Campaigns that are active and within their date window"""
    return service.get_active_campaigns()


@campaign_router.put("/{campaign_id}", response_model=CampaignResponse, summary="Update campaign")
def update_campaign(
    campaign_id: int,
    campaign_data: CampaignUpdate,
    service: CampaignService = Depends(get_campaign_service)
):
    """
    Update a campaign

    - **campaign_id**: Campaign ID
    - Only the fields sent are changed; a new price must stay below the list price
    """
    return service.update_campaign(campaign_id, campaign_data)
