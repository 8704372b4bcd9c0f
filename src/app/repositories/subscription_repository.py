"""Subscription Repository Interface

Defines the contract for subscription persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, List
from src.domain.subscription import Subscription, SubscriptionItem


class SubscriptionRepository(ABC):
    """
    Repository interface for Subscription persistence

    Serves both the order generation worker (due queries, progress
    updates) and the subscription lifecycle use cases.
    """

    @abstractmethod
    async def get_by_id(
        self, subscription_id: int, for_update: bool = False
    ) -> Optional[Subscription]:
        """
        Retrieve subscription by ID

        Args:
            subscription_id: Subscription ID
            for_update: If True, locks the row until the transaction ends

        Returns:
            Subscription if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_due_subscriptions(self, as_of: date) -> List[Subscription]:
        """
        Retrieve subscriptions due for delivery

        Due means: status is active, next_delivery_date <= as_of, and
        end_date is either unset or after as_of.

        Args:
            as_of: Processing date

        Returns:
            List of due subscriptions ordered by next_delivery_date
        """
        pass

    @abstractmethod
    async def get_items(self, subscription_id: int) -> List[SubscriptionItem]:
        """
        Retrieve the product lines of a subscription

        Args:
            subscription_id: Subscription ID

        Returns:
            Line items in insertion order
        """
        pass

    @abstractmethod
    async def create(
        self, subscription: Subscription, items: List[SubscriptionItem]
    ) -> Subscription:
        """
        Create a subscription together with its line items

        Args:
            subscription: Subscription entity to persist
            items: Line items (subscription_id is filled in)

        Returns:
            Created Subscription with generated ID
        """
        pass

    @abstractmethod
    async def update(self, subscription: Subscription) -> Subscription:
        """
        Update an existing subscription

        Args:
            subscription: Subscription entity with updated values

        Returns:
            Updated Subscription
        """
        pass
