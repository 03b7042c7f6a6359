"""
Pricing - effective unit price and money arithmetic
"""
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from storefront.models.campaign import Campaign
from storefront.models.product import Product
from storefront.repositories.product_repository import CampaignRepository

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Quantize a value to currency precision"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def apportion_shipping(fee: Decimal, subtotals: List[Decimal]) -> List[Decimal]:
    """
    Split a shipping fee across lines proportionally to their subtotals

    Each share is rounded to currency precision on its own, so the shares
    may not add up to the fee exactly.
    """
    total = sum(subtotals, Decimal("0"))
    if total <= 0:
        return [to_money(0) for _ in subtotals]
    return [to_money(fee * subtotal / total) for subtotal in subtotals]


class PricingService:
    """Derives the price a customer pays for a product right now"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.campaigns = CampaignRepository(db)
        self.clock = clock

    def active_campaign(self, product: Product) -> Optional[Campaign]:
        return self.campaigns.get_effective_for_product(product.id, self.clock())

    def effective_price(self, product: Product) -> Decimal:
        """Campaign price when a campaign is in effect, list price otherwise"""
        campaign = self.active_campaign(product)
        if campaign is not None and campaign.price < product.price:
            return to_money(campaign.price)
        return to_money(product.price)
