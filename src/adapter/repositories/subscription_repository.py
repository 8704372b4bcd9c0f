"""SQLAlchemy Subscription Repository Implementation

Implements subscription persistence using SQLAlchemy async session.
"""

from datetime import date, datetime
from typing import Optional, List
from sqlalchemy import or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.domain.subscription import Subscription, SubscriptionItem, SubscriptionStatus


class SqlAlchemySubscriptionRepository(SubscriptionRepository):
    """
    SQLAlchemy implementation of SubscriptionRepository

    Features:
    - Row-level locking via SELECT FOR UPDATE (ignored by SQLite)
    - Due-subscription query backed by the (status, next_delivery_date) index
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(
        self, subscription_id: int, for_update: bool = False
    ) -> Optional[Subscription]:
        """
        Retrieve subscription by ID with optional row-level locking

        Args:
            subscription_id: Subscription ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Subscription if found, None otherwise
        """
        statement = select(Subscription).where(Subscription.id == subscription_id)

        if for_update:
            statement = statement.with_for_update()

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_due_subscriptions(self, as_of: date) -> List[Subscription]:
        """
        Retrieve active subscriptions whose next delivery is due

        end_date is the last day a delivery may happen, so a subscription
        ending today is still picked up today.

        Args:
            as_of: Processing date

        Returns:
            List of due subscriptions, oldest due date first
        """
        statement = (
            select(Subscription)
            .where(Subscription.status == SubscriptionStatus.ACTIVE)
            .where(Subscription.next_delivery_date.is_not(None))
            .where(Subscription.next_delivery_date <= as_of)
            .where(
                or_(
                    Subscription.end_date.is_(None),
                    Subscription.end_date >= as_of,
                )
            )
            .order_by(Subscription.next_delivery_date, Subscription.id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def get_items(self, subscription_id: int) -> List[SubscriptionItem]:
        statement = (
            select(SubscriptionItem)
            .where(SubscriptionItem.subscription_id == subscription_id)
            .order_by(SubscriptionItem.id)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def create(
        self, subscription: Subscription, items: List[SubscriptionItem]
    ) -> Subscription:
        """
        Create a new subscription and its line items

        Args:
            subscription: Subscription entity to persist
            items: Line items to attach

        Returns:
            Created Subscription with generated ID
        """
        self.session.add(subscription)
        await self.session.flush()

        for item in items:
            item.subscription_id = subscription.id
            self.session.add(item)
        await self.session.flush()

        await self.session.refresh(subscription)
        return subscription

    async def update(self, subscription: Subscription) -> Subscription:
        """
        Update an existing subscription

        Args:
            subscription: Subscription entity with updated values

        Returns:
            Updated Subscription
        """
        subscription.updated_at = datetime.utcnow()
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription
