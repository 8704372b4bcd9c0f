"""Get Subscription Use Case

Read-only lookup of a subscription with its lines and generated orders.
"""

from libs.result import Result, Return, Error
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.subscription_order_repository import SubscriptionOrderRepository
from .dtos import SubscriptionResponseDTO
from .mappers import to_subscription_response


class GetSubscription:

    def __init__(
        self,
        subscription_repo: SubscriptionRepository,
        order_repo: SubscriptionOrderRepository,
    ):
        self.subscription_repo = subscription_repo
        self.order_repo = order_repo

    async def execute(self, subscription_id: int) -> Result[SubscriptionResponseDTO]:
        """
        Errors:
            SUBSCRIPTION_NOT_FOUND: No subscription with this ID
        """
        subscription = await self.subscription_repo.get_by_id(subscription_id)
        if not subscription:
            return Return.err(
                Error(
                    code="SUBSCRIPTION_NOT_FOUND",
                    message=f"Subscription {subscription_id} not found",
                )
            )

        items = await self.subscription_repo.get_items(subscription.id)
        order_ids = await self.order_repo.list_ids_by_subscription(subscription.id)
        return Return.ok(to_subscription_response(subscription, items, order_ids))
