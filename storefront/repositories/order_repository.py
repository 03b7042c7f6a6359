"""
Order Repository - Data Access Layer
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from storefront.models.order import Order


class OrderRepository:
    """Repository for Order CRUD operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self, skip: int = 0, limit: int = 100, status: Optional[str] = None) -> List[Order]:
        """Get all orders with pagination, newest first"""
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        return query.order_by(desc(Order.created_at), desc(Order.id)).offset(skip).limit(limit).all()

    def get_by_id(self, order_id: int) -> Optional[Order]:
        """Get order by ID"""
        return self.db.query(Order).filter(Order.id == order_id).first()

    def lock_by_id(self, order_id: int) -> Optional[Order]:
        """
        Get order by ID with its row locked until the transaction ends

        populate_existing() makes sure the status is read fresh even if the
        order is already in the session identity map.
        """
        return self.db.query(Order).filter(
            Order.id == order_id
        ).with_for_update().populate_existing().first()

    def get_by_unique_id(self, unique_id: str) -> Optional[Order]:
        """Get order by its customer-facing reference"""
        return self.db.query(Order).filter(Order.unique_id == unique_id).first()

    def get_by_batch(self, batch_id: str) -> List[Order]:
        """Get the sibling orders of one checkout"""
        return self.db.query(Order).filter(
            Order.batch_id == batch_id
        ).order_by(Order.id).all()

    def unique_id_exists(self, unique_id: str) -> bool:
        return self.db.query(Order.id).filter(Order.unique_id == unique_id).first() is not None

    def add(self, order_data: dict) -> Order:
        """
        Stage a new order in the current transaction

        The caller owns the transaction: the order is flushed so the row
        exists, but it is only durable once the caller commits.
        """
        order = Order(**order_data)
        self.db.add(order)
        self.db.flush()
        return order

    def save(self, order: Order) -> Order:
        """Commit pending changes of an order"""
        self.db.commit()
        self.db.refresh(order)
        return order

    def count(self, status: Optional[str] = None) -> int:
        """Get total count of orders"""
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)
        return query.count()
