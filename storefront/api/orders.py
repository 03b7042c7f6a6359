"""
Order API endpoints
"""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import List, Optional

from storefront.database import get_db
from storefront.exceptions import NotFoundError
from storefront.publishers.event_publisher import EventPublisher, get_event_publisher
from storefront.schemas.order import (
    OrderCreate,
    OrderStatus,
    OrderStatusUpdate,
    OrderResponse,
    OrderListResponse,
    CheckoutRequest,
    CheckoutResponse
)
from storefront.services.checkout_service import CheckoutService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])

CHECKOUT_STATUS_CODES = {
    "completed": status.HTTP_201_CREATED,
    "partial": status.HTTP_207_MULTI_STATUS,
    "failed": status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def get_order_service(
    db: Session = Depends(get_db),
    publisher: EventPublisher = Depends(get_event_publisher)
) -> OrderService:
    """Dependency to get OrderService instance"""
    return OrderService(db, event_publisher=publisher)


def get_checkout_service(
    db: Session = Depends(get_db),
    order_service: OrderService = Depends(get_order_service)
) -> CheckoutService:
    """Dependency to get CheckoutService instance"""
    return CheckoutService(db, order_service)


@router.get("", response_model=OrderListResponse, summary="Get all orders")
def get_orders(
    skip: int = Query(0, ge=0, description="Number of orders to skip"),
    limit: int = Query(15, ge=1, le=1000, description="Maximum number of orders to return"),
    order_status: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    service: OrderService = Depends(get_order_service)
):
    """
    Retrieve orders with pagination, newest first

    - **skip**: Number of orders to skip (default: 0)
    - **limit**: Maximum number of orders to return (default: 15, max: 1000)
    - **status**: Only orders in this status
    """
    return service.get_all_orders(skip=skip, limit=limit, status=order_status)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED, summary="Create order")
def create_order(
    order_data: OrderCreate,
    service: OrderService = Depends(get_order_service)
):
    """
    Place a cash-on-delivery order for one product

    Process:
    1. Validate product exists
    2. Lock and check the stock of the requested size (or the product stock)
    3. Decrement stock and price the order
    4. Save order to database in the same transaction
    5. Publish OrderCreated event to RabbitMQ

    Errors: 404 unknown product, 422 invalid input / unknown size /
    insufficient stock, 409 lock conflict, 500 internal error.
    """
    return service.create_order(order_data)


@router.post("/checkout", response_model=CheckoutResponse, summary="Checkout cart")
def checkout(
    checkout_data: CheckoutRequest,
    response: Response,
    service: CheckoutService = Depends(get_checkout_service)
):
    """
    Place one order per cart line

    Lines are independent: a rejected line does not cancel lines already
    placed. Returns 201 when every line succeeds, 207 when some do and 422
    when none do.
    """
    result = service.checkout(checkout_data)
    response.status_code = CHECKOUT_STATUS_CODES[result.status]
    return result


@router.get("/by-reference/{unique_id}", response_model=OrderResponse, summary="Get order by reference")
def get_order_by_reference(
    unique_id: str,
    service: OrderService = Depends(get_order_service)
):
    """
    Retrieve an order by its ORD- reference

    - **unique_id**: Order reference shown to the customer
    """
    order = service.get_order_by_reference(unique_id)
    if not order:
        raise NotFoundError(f"Order {unique_id} not found")
    return order


@router.get("/batch/{batch_id}", response_model=List[OrderResponse], summary="Get orders of a checkout")
def get_batch_orders(
    batch_id: str,
    service: OrderService = Depends(get_order_service)
):
    """Get all orders sharing a batch id"""
    return service.get_batch_orders(batch_id)


@router.get("/{order_id}", response_model=OrderResponse, summary="Get order by ID")
def get_order(
    order_id: int,
    service: OrderService = Depends(get_order_service)
):
    """
    Retrieve a specific order by ID

    - **order_id**: Order ID
    """
    order = service.get_order_by_id(order_id)
    if not order:
        raise NotFoundError(f"Order with id={order_id} not found")
    return order


@router.patch("/{order_id}/status", response_model=OrderResponse, summary="Update order status")
def update_order_status(
    order_id: int,
    status_data: OrderStatusUpdate,
    service: OrderService = Depends(get_order_service)
):
    """
    Update order status

    - **order_id**: Order ID
    - **status**: pending → confirmed → processing → shipped → delivered;
      cancelled from any state before shipping
    - **notes**: Optional admin notes
    """
    return service.update_order_status(order_id, status_data)
