"""SQLAlchemy Subscription Order Repository Implementation

Implements subscription order persistence using SQLAlchemy async session.
"""

import secrets
from datetime import date, datetime
from typing import Optional, List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.subscription_order_repository import SubscriptionOrderRepository
from src.domain.subscription_order import (
    SubscriptionOrder,
    SubscriptionOrderItem,
    OrderStatus,
)


class SqlAlchemySubscriptionOrderRepository(SubscriptionOrderRepository):
    """
    SQLAlchemy implementation of SubscriptionOrderRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession, order_number_prefix: str = "SUB"):
        self.session = session
        self.order_number_prefix = order_number_prefix

    async def create(
        self, order: SubscriptionOrder, items: List[SubscriptionOrderItem]
    ) -> SubscriptionOrder:
        """
        Create a new order and its line items

        Args:
            order: Order entity to persist
            items: Line item snapshots

        Returns:
            Created SubscriptionOrder with generated ID
        """
        self.session.add(order)
        await self.session.flush()

        for item in items:
            item.order_id = order.id
            self.session.add(item)
        await self.session.flush()

        await self.session.refresh(order)
        return order

    async def get_by_id(self, order_id: int) -> Optional[SubscriptionOrder]:
        statement = select(SubscriptionOrder).where(SubscriptionOrder.id == order_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_items(self, order_id: int) -> List[SubscriptionOrderItem]:
        statement = (
            select(SubscriptionOrderItem)
            .where(SubscriptionOrderItem.order_id == order_id)
            .order_by(SubscriptionOrderItem.id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_by_subscription_and_date(
        self, subscription_id: int, delivery_date: date
    ) -> Optional[SubscriptionOrder]:
        statement = (
            select(SubscriptionOrder)
            .where(SubscriptionOrder.subscription_id == subscription_id)
            .where(SubscriptionOrder.delivery_date == delivery_date)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list_ids_by_subscription(self, subscription_id: int) -> List[int]:
        statement = (
            select(SubscriptionOrder.id)
            .where(SubscriptionOrder.subscription_id == subscription_id)
            .order_by(SubscriptionOrder.created_at, SubscriptionOrder.id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def list(
        self,
        subscription_id: Optional[int] = None,
        customer_id: Optional[str] = None,
        distributor_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[SubscriptionOrder]:
        """
        List orders matching the filters

        Args:
            subscription_id: Optional parent subscription filter
            customer_id: Optional customer filter
            distributor_id: Optional distributor filter
            status: Optional status filter
            date_from: Optional earliest delivery date (inclusive)
            date_to: Optional latest delivery date (inclusive)
            limit: Maximum number of orders to return
            offset: Offset for pagination

        Returns:
            List of orders, latest delivery date first
        """
        statement = select(SubscriptionOrder)

        if subscription_id is not None:
            statement = statement.where(SubscriptionOrder.subscription_id == subscription_id)
        if customer_id:
            statement = statement.where(SubscriptionOrder.customer_id == customer_id)
        if distributor_id:
            statement = statement.where(SubscriptionOrder.distributor_id == distributor_id)
        if status:
            statement = statement.where(SubscriptionOrder.status == status)
        if date_from:
            statement = statement.where(SubscriptionOrder.delivery_date >= date_from)
        if date_to:
            statement = statement.where(SubscriptionOrder.delivery_date <= date_to)

        statement = statement.order_by(
            SubscriptionOrder.delivery_date.desc(), SubscriptionOrder.id.desc()
        )
        statement = statement.limit(limit).offset(offset)

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update(self, order: SubscriptionOrder) -> SubscriptionOrder:
        order.updated_at = datetime.utcnow()
        self.session.add(order)
        await self.session.flush()
        await self.session.refresh(order)
        return order

    def generate_order_number(self, subscription_id: int, now: datetime) -> str:
        """
        Generate a unique order number

        Format: {prefix}-{YYYYMMDDHHMMSSffffff}-{subscription_id}-{8 hex chars}
        (e.g., SUB-20240101063000123456-42-9F2C4A1B)

        Microsecond timestamp plus subscription ID plus a random suffix;
        no database read is involved.
        """
        return (
            f"{self.order_number_prefix}-{now.strftime('%Y%m%d%H%M%S%f')}-"
            f"{subscription_id}-{secrets.token_hex(4).upper()}"
        )
