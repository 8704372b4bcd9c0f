"""Subscription Order Repository Interface

Defines the contract for persistence of orders generated from subscriptions.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional, List
from src.domain.subscription_order import (
    SubscriptionOrder,
    SubscriptionOrderItem,
    OrderStatus,
)


class SubscriptionOrderRepository(ABC):

    @abstractmethod
    async def create(
        self, order: SubscriptionOrder, items: List[SubscriptionOrderItem]
    ) -> SubscriptionOrder:
        """
        Create an order together with its line item snapshots

        Args:
            order: Order entity to persist
            items: Line items (order_id is filled in)

        Returns:
            Created SubscriptionOrder with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, order_id: int) -> Optional[SubscriptionOrder]:
        pass

    @abstractmethod
    async def get_items(self, order_id: int) -> List[SubscriptionOrderItem]:
        pass

    @abstractmethod
    async def get_by_subscription_and_date(
        self, subscription_id: int, delivery_date: date
    ) -> Optional[SubscriptionOrder]:
        """
        Retrieve the order generated for a subscription's due date

        (subscription_id, delivery_date) is the materialization idempotency key.
        """
        pass

    @abstractmethod
    async def list_ids_by_subscription(self, subscription_id: int) -> List[int]:
        """Order IDs of a subscription in generation order"""
        pass

    @abstractmethod
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
        List orders matching the filters, latest delivery date first
        """
        pass

    @abstractmethod
    async def update(self, order: SubscriptionOrder) -> SubscriptionOrder:
        pass

    @abstractmethod
    def generate_order_number(self, subscription_id: int, now: datetime) -> str:
        """
        Generate a collision-free order number

        Must not depend on reading existing rows, so concurrent writers
        cannot produce the same number.
        """
        pass
