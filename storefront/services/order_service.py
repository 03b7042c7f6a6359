"""
Order Service - Business Logic Layer
"""
import logging
import secrets
import string
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type, before_sleep_log

from storefront.config import settings
from storefront.database import is_lock_conflict
from storefront.exceptions import (
    StorefrontError,
    ValidationError,
    SizeNotAvailableError,
    NotFoundError,
    InsufficientStockError,
    ConcurrencyConflictError,
    PersistenceError
)
from storefront.models.order import Order, ALLOWED_TRANSITIONS, STATUS_TIMESTAMPS, can_transition
from storefront.models.product import Product, STOCK_TRACKING_PER_SIZE
from storefront.publishers.event_publisher import EventPublisher
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.schemas.order import OrderCreate, OrderStatusUpdate, OrderResponse, OrderListResponse
from storefront.services.pricing import PricingService, to_money, utcnow

module_logger = logging.getLogger(__name__)

UNIQUE_ID_PREFIX = "ORD-"
UNIQUE_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_unique_id() -> str:
    """Human readable order reference, e.g. ORD-7KQ2M9XA"""
    return UNIQUE_ID_PREFIX + "".join(secrets.choice(UNIQUE_ID_ALPHABET) for _ in range(8))


class OrderService:
    """Service layer for order business logic"""

    def __init__(
        self,
        db: Session,
        event_publisher: Optional[EventPublisher] = None,
        logger: Optional[logging.Logger] = None,
        pricing: Optional[PricingService] = None
    ):
        self.db = db
        self.repository = OrderRepository(db)
        self.products = ProductRepository(db)
        self.pricing = pricing or PricingService(db)
        self.event_publisher = event_publisher or EventPublisher()
        self.logger = logger or module_logger

    def get_all_orders(self, skip: int = 0, limit: int = 100, status: Optional[str] = None) -> OrderListResponse:
        """Get all orders with pagination"""
        orders = self.repository.get_all(skip=skip, limit=limit, status=status)
        total = self.repository.count(status=status)

        return OrderListResponse(
            orders=[OrderResponse.model_validate(o) for o in orders],
            total=total
        )

    def get_order_by_id(self, order_id: int) -> Optional[OrderResponse]:
        """Get order by ID"""
        order = self.repository.get_by_id(order_id)
        if not order:
            return None
        return OrderResponse.model_validate(order)

    def get_order_by_reference(self, unique_id: str) -> Optional[OrderResponse]:
        """Get order by its ORD- reference"""
        order = self.repository.get_by_unique_id(unique_id)
        if not order:
            return None
        return OrderResponse.model_validate(order)

    def get_batch_orders(self, batch_id: str) -> List[OrderResponse]:
        """Get all orders placed by one checkout"""
        return [OrderResponse.model_validate(o) for o in self.repository.get_by_batch(batch_id)]

    def create_order(self, order_data: OrderCreate) -> OrderResponse:
        """
        Place an order and reserve its stock

        Steps:
        1. Load the product
        2. Lock the stock ledger row (size row or product row) and check it
        3. Decrement the stock
        4. Price the order server-side
        5. Insert the order and commit, all in one transaction
        6. Publish OrderCreated event

        Args:
            order_data: Order creation data

        Returns:
            Created order

        Raises:
            NotFoundError: If product not found
            ValidationError: If size is missing or unknown
            InsufficientStockError: If not enough stock on hand
            ConcurrencyConflictError: If the stock lock could not be taken twice in a row
            PersistenceError: On unexpected storage failures
        """
        order = self._place_order(order_data)

        self.logger.info(
            "Order created",
            extra={
                "order_id": order.id,
                "unique_id": order.unique_id,
                "product_id": order.product_id,
                "quantity": order.quantity,
                "batch_id": order.batch_id,
            }
        )
        self._publish_created(order)
        return OrderResponse.model_validate(order)

    @retry(
        stop=stop_after_attempt(settings.LOCK_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=settings.RETRY_DELAY, max=1),
        retry=retry_if_exception_type(ConcurrencyConflictError),
        before_sleep=before_sleep_log(module_logger, logging.WARNING),
        reraise=True
    )
    def _place_order(self, order_data: OrderCreate) -> Order:
        try:
            product = self.products.get_by_id(order_data.product_id)
            if product is None:
                raise NotFoundError(f"Product with id={order_data.product_id} not found")

            if product.stock_tracking == STOCK_TRACKING_PER_SIZE:
                self._reserve_size_stock(product, order_data)
            else:
                self._reserve_flat_stock(product, order_data)

            unit_price = self._resolve_unit_price(product, order_data)
            shipping_fee = to_money(order_data.shipping_fee)
            total_amount = to_money(unit_price * order_data.quantity + shipping_fee)
            unique_id = self._new_unique_id()

            order = self.repository.add({
                'unique_id': unique_id,
                'batch_id': order_data.batch_id,
                'customer_full_name': order_data.customer_full_name,
                'customer_email': order_data.customer_email,
                'customer_phone': order_data.customer_phone,
                'customer_address': order_data.customer_address,
                'customer_city': order_data.customer_city,
                'customer_country': order_data.customer_country,
                'product_id': product.id,
                'product_name': product.name,
                'product_price': unit_price,
                'product_image': product.image,
                'product_size': (order_data.product_size or "").strip() or None,
                'product_color': order_data.product_color,
                'quantity': order_data.quantity,
                'shipping_fee': shipping_fee,
                'total_amount': total_amount,
                'payment_method': 'cash',
                'status': 'pending',
                'notes': order_data.notes,
            })
            self.db.commit()
        except StorefrontError:
            self.db.rollback()
            raise
        except OperationalError as e:
            self.db.rollback()
            if is_lock_conflict(e):
                self.logger.warning(
                    "Stock lock conflict",
                    extra={"product_id": order_data.product_id, "product_size": order_data.product_size}
                )
                raise ConcurrencyConflictError(
                    "The product is being ordered by someone else, please try again"
                ) from e
            self._log_persistence_failure(order_data)
            raise PersistenceError("Failed to create order") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            self._log_persistence_failure(order_data)
            raise PersistenceError("Failed to create order") from e

        # Committed already: a failure here must not be retried as a conflict
        try:
            self.db.refresh(order)
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.exception(
                "Error reloading created order",
                extra={"unique_id": unique_id, "product_id": order_data.product_id}
            )
            raise PersistenceError("Failed to create order") from e
        return order

    def _reserve_size_stock(self, product: Product, order_data: OrderCreate) -> None:
        size = (order_data.product_size or "").strip()
        if not size:
            self.logger.warning("Size required but not provided", extra={"product_id": product.id})
            raise ValidationError(
                "Product size is required for this product",
                {"errors": {"product_size": ["Product size is required for this product"]}}
            )

        size_stock = self.products.lock_size_stock(product.id, size)
        if size_stock is None:
            available_sizes = self.products.get_sizes(product.id)
            self.logger.warning(
                "Size not found",
                extra={"product_id": product.id, "requested_size": size, "available_sizes": available_sizes}
            )
            raise SizeNotAvailableError(size, available_sizes)

        if size_stock.quantity < order_data.quantity:
            raise InsufficientStockError(
                f"Insufficient stock for size {size}. Only {size_stock.quantity} available.",
                available=size_stock.quantity
            )

        size_stock.quantity -= order_data.quantity
        self.db.flush()

    def _reserve_flat_stock(self, product: Product, order_data: OrderCreate) -> None:
        locked = self.products.lock_by_id(product.id)
        if locked.stock_quantity < order_data.quantity:
            raise InsufficientStockError(
                f"Insufficient stock. Only {locked.stock_quantity} available.",
                available=locked.stock_quantity
            )

        locked.stock_quantity -= order_data.quantity
        self.db.flush()

    def _resolve_unit_price(self, product: Product, order_data: OrderCreate) -> Decimal:
        unit_price = self.pricing.effective_price(product)
        if to_money(order_data.product_price) != unit_price:
            self.logger.warning(
                "Submitted price differs from current price, using current price",
                extra={
                    "product_id": product.id,
                    "submitted_price": str(order_data.product_price),
                    "current_price": str(unit_price),
                }
            )
        return unit_price

    def _new_unique_id(self) -> str:
        unique_id = generate_unique_id()
        while self.repository.unique_id_exists(unique_id):
            unique_id = generate_unique_id()
        return unique_id

    def _log_persistence_failure(self, order_data: OrderCreate) -> None:
        self.logger.exception(
            "Error creating order",
            extra={"product_id": order_data.product_id, "payload": order_data.model_dump(mode="json")}
        )

    def _publish_created(self, order: Order) -> None:
        event_data = {
            'order_id': order.id,
            'unique_id': order.unique_id,
            'batch_id': order.batch_id,
            'product_id': order.product_id,
            'product_name': order.product_name,
            'product_size': order.product_size,
            'quantity': order.quantity,
            'unit_price': str(order.product_price),
            'total_amount': str(order.total_amount),
            'customer_email': order.customer_email,
            'status': order.status
        }

        # Publishing never undoes a committed order
        try:
            self.event_publisher.publish_order_created(event_data)
        except Exception:
            self.logger.exception("Failed to publish OrderCreated event", extra={"order_id": order.id})

    def update_order_status(self, order_id: int, status_data: OrderStatusUpdate) -> OrderResponse:
        """
        Move an order to a new status

        Args:
            order_id: Order ID
            status_data: New status and optional notes

        Returns:
            Updated order

        Raises:
            NotFoundError: If the order does not exist
            ValidationError: If the transition is not allowed
            ConcurrencyConflictError: If the order row is locked by another update
        """
        try:
            order = self.repository.lock_by_id(order_id)
        except OperationalError as e:
            self.db.rollback()
            if is_lock_conflict(e):
                raise ConcurrencyConflictError(
                    "The order is being updated by someone else, please try again"
                ) from e
            self.logger.exception("Error loading order for update", extra={"order_id": order_id})
            raise PersistenceError("Failed to update order") from e

        if not order:
            self.db.rollback()
            raise NotFoundError(f"Order with id={order_id} not found")

        old_status = order.status
        new_status = status_data.status
        if not can_transition(old_status, new_status):
            self.db.rollback()
            raise ValidationError(
                f"Cannot change order status from {old_status} to {new_status}",
                {"allowed_statuses": sorted(ALLOWED_TRANSITIONS.get(old_status, set()))}
            )

        order.status = new_status
        timestamp_field = STATUS_TIMESTAMPS.get(new_status)
        if timestamp_field and getattr(order, timestamp_field) is None:
            setattr(order, timestamp_field, utcnow())
        if status_data.notes is not None:
            order.notes = status_data.notes

        try:
            order = self.repository.save(order)
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.exception("Error updating order status", extra={"order_id": order_id})
            raise PersistenceError("Failed to update order") from e

        self.logger.info(
            "Order status changed",
            extra={"order_id": order.id, "old_status": old_status, "new_status": new_status}
        )

        event_data = {
            'order_id': order.id,
            'unique_id': order.unique_id,
            'old_status': old_status,
            'new_status': order.status,
            'customer_email': order.customer_email,
            'updated_at': order.updated_at.isoformat()
        }

        try:
            self.event_publisher.publish_order_status_changed(event_data)
        except Exception:
            self.logger.exception("Failed to publish OrderStatusChanged event", extra={"order_id": order.id})

        return OrderResponse.model_validate(order)
