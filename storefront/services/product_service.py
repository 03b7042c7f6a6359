"""
Product Service - catalog lookups used by the order pipeline
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from storefront.exceptions import NotFoundError, ValidationError
from storefront.models.product import Product
from storefront.repositories.product_repository import ProductRepository, CampaignRepository
from storefront.schemas.product import (
    ProductCreate,
    ProductResponse,
    ProductListResponse,
    CampaignCreate,
    CampaignUpdate,
    CampaignResponse,
    as_utc
)
from storefront.services.pricing import PricingService


class ProductService:
    """Service layer for product business logic"""

    def __init__(self, db: Session, pricing: Optional[PricingService] = None):
        self.repository = ProductRepository(db)
        self.pricing = pricing or PricingService(db)

    def _to_response(self, product: Product) -> ProductResponse:
        campaign = self.pricing.active_campaign(product)
        return ProductResponse.model_validate(product).model_copy(update={
            "effective_price": self.pricing.effective_price(product),
            "active_campaign_id": campaign.id if campaign else None,
        })

    def get_all_products(self, skip: int = 0, limit: int = 100) -> ProductListResponse:
        """Get all products with pagination"""
        products = self.repository.get_all(skip=skip, limit=limit)
        total = self.repository.count()

        return ProductListResponse(
            products=[self._to_response(p) for p in products],
            total=total
        )

    def get_product_by_id(self, product_id: int) -> Optional[ProductResponse]:
        """Get product by ID"""
        product = self.repository.get_by_id(product_id)
        if not product:
            return None
        return self._to_response(product)

    def create_product(self, product_data: ProductCreate) -> ProductResponse:
        """Create new product"""
        product = self.repository.create(
            product_data.model_dump(exclude={"size_stocks"}),
            size_stocks=product_data.size_stocks
        )
        return self._to_response(product)

    def set_size_stock(self, product_id: int, size: str, quantity: int) -> ProductResponse:
        """
        Set the stock of one size, creating the size row if needed

        Raises:
            NotFoundError: If product not found
            ValidationError: If the size is blank or too long
        """
        size = size.strip()
        if not size or len(size) > 10:
            raise ValidationError(f"Invalid size '{size}'")

        product = self.repository.get_by_id(product_id)
        if not product:
            raise NotFoundError(f"Product with id={product_id} not found")

        self.repository.set_size_stock(product, size, quantity)
        return self._to_response(product)


class CampaignService:
    """Service layer for promotional campaigns"""

    def __init__(self, db: Session, pricing: Optional[PricingService] = None):
        self.repository = CampaignRepository(db)
        self.products = ProductRepository(db)
        self.pricing = pricing or PricingService(db)

    def create_campaign(self, campaign_data: CampaignCreate) -> CampaignResponse:
        """
        Create a campaign for a product

        Raises:
            NotFoundError: If product not found
            ValidationError: If the campaign price is not below the list price
        """
        product = self.products.get_by_id(campaign_data.product_id)
        if not product:
            raise NotFoundError(f"Product with id={campaign_data.product_id} not found")

        if campaign_data.price >= product.price:
            raise ValidationError(
                "Campaign price must be lower than the product price",
                {"errors": {"price": [f"Must be lower than {product.price}"]}}
            )

        campaign = self.repository.create(campaign_data.model_dump())
        return CampaignResponse.model_validate(campaign)

    def get_active_campaigns(self) -> List[CampaignResponse]:
        """Campaigns currently in effect"""
        campaigns = self.repository.get_effective(self.pricing.clock())
        return [CampaignResponse.model_validate(c) for c in campaigns]

    def update_campaign(self, campaign_id: int, campaign_data: CampaignUpdate) -> CampaignResponse:
        """
        Update a campaign; only the fields sent are changed

        Raises:
            NotFoundError: If campaign not found
            ValidationError: If the new price is not below the list price
                or the resulting window ends before it starts
        """
        campaign = self.repository.get_by_id(campaign_id)
        if not campaign:
            raise NotFoundError(f"Campaign with id={campaign_id} not found")

        changes = campaign_data.model_dump(exclude_unset=True)
        product = campaign.product
        if "price" in changes and (changes["price"] is None or changes["price"] >= product.price):
            raise ValidationError(
                "Campaign price must be lower than the product price",
                {"errors": {"price": [f"Must be lower than {product.price}"]}}
            )

        # Stored dates come back naive from SQLite
        start_date = as_utc(changes.get("start_date", campaign.start_date))
        end_date = as_utc(changes.get("end_date", campaign.end_date))
        if start_date and end_date and end_date < start_date:
            raise ValidationError(
                "end_date must not be before start_date",
                {"errors": {"end_date": ["Must not be before start_date"]}}
            )

        for field in ("name", "is_active"):
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be null", {"errors": {field: ["Cannot be null"]}})

        campaign = self.repository.update(campaign, changes)
        return CampaignResponse.model_validate(campaign)
