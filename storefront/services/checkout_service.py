"""
Checkout Service - multi-item cart orders

Each cart line becomes its own order through OrderService.create_order, in
its own transaction. A failing line does not roll back lines that were
already placed; the result reports placed orders and failed lines side by
side and the caller decides how to present a partial checkout.
"""
import logging
import secrets
import string
import time
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.exceptions import StorefrontError
from storefront.repositories.product_repository import ProductRepository
from storefront.schemas.order import (
    CheckoutRequest,
    CheckoutResponse,
    CheckoutLineFailure,
    OrderCreate,
    OrderLine,
    OrderResponse
)
from storefront.services.order_service import OrderService
from storefront.services.pricing import PricingService, apportion_shipping, to_money

module_logger = logging.getLogger(__name__)


def generate_batch_id() -> str:
    """Batch reference shared by sibling orders, e.g. BATCH-1760788800000-K3J9QZ1XA"""
    suffix = "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(9))
    return f"BATCH-{int(time.time() * 1000)}-{suffix}"


def shipping_fee_for(country: str) -> Decimal:
    return to_money(settings.SHIPPING_FEES.get(country, Decimal("0")))


class CheckoutService:
    """Places one order per cart line under a shared batch id"""

    def __init__(
        self,
        db: Session,
        order_service: OrderService,
        pricing: Optional[PricingService] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.products = ProductRepository(db)
        self.order_service = order_service
        self.pricing = pricing or order_service.pricing
        self.logger = logger or module_logger

    def line_subtotals(self, items: List[OrderLine]) -> List[Decimal]:
        """Subtotal of every line at current prices; unknown products count as zero"""
        subtotals = []
        for item in items:
            product = self.products.get_by_id(item.product_id)
            if product is None:
                subtotals.append(Decimal("0"))
            else:
                subtotals.append(self.pricing.effective_price(product) * item.quantity)
        return subtotals

    def checkout(self, request: CheckoutRequest) -> CheckoutResponse:
        items = request.items
        batch_id = generate_batch_id() if len(items) > 1 else None
        shipping_fee = shipping_fee_for(request.customer_country)
        shares = apportion_shipping(shipping_fee, self.line_subtotals(items))

        notes = request.notes
        if notes is None and batch_id:
            notes = f"Part of {len(items)} item order"

        customer = request.model_dump(exclude={"items", "notes"})

        orders: List[OrderResponse] = []
        failures: List[CheckoutLineFailure] = []
        for index, (item, share) in enumerate(zip(items, shares), start=1):
            order_data = OrderCreate(
                **customer,
                **item.model_dump(),
                shipping_fee=share,
                batch_id=batch_id,
                notes=notes
            )
            try:
                orders.append(self.order_service.create_order(order_data))
            except StorefrontError as e:
                self.logger.warning(
                    "Checkout line failed",
                    extra={
                        "batch_id": batch_id,
                        "line": index,
                        "product_id": item.product_id,
                        "error_code": e.code,
                    }
                )
                failures.append(CheckoutLineFailure(
                    line=index,
                    product_id=item.product_id,
                    code=e.code,
                    message=e.message,
                    details=e.details
                ))

        if not failures:
            status = "completed"
        elif orders:
            status = "partial"
        else:
            status = "failed"

        self.logger.info(
            "Checkout finished",
            extra={
                "batch_id": batch_id,
                "checkout_status": status,
                "placed": len(orders),
                "failed": len(failures),
            }
        )

        return CheckoutResponse(
            batch_id=batch_id,
            status=status,
            shipping_fee=sum((o.shipping_fee for o in orders), to_money(0)),
            orders=orders,
            failures=failures
        )
