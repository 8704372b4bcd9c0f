"""PauseSubscription Use Case"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.subscription_order_repository import SubscriptionOrderRepository
from src.domain.subscription import SubscriptionStatus
from .dtos import SubscriptionResponseDTO
from .mappers import enum_value, to_subscription_response


class PauseSubscription:
    """
    Use Case: Pause an active subscription

    Paused subscriptions keep their next_delivery_date but are skipped by
    order generation until resumed.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        order_repo: SubscriptionOrderRepository,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.order_repo = order_repo

    async def execute(self, subscription_id: int) -> Result[SubscriptionResponseDTO]:
        try:
            subscription = await self.subscription_repo.get_by_id(
                subscription_id, for_update=True
            )
            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"Subscription {subscription_id} not found",
                    )
                )

            if subscription.status != SubscriptionStatus.ACTIVE:
                return Return.err(
                    Error(
                        code="INVALID_SUBSCRIPTION_STATUS",
                        message=f"Only active subscriptions can be paused "
                                f"(current: {enum_value(subscription.status)})",
                    )
                )

            subscription.status = SubscriptionStatus.PAUSED
            updated = await self.subscription_repo.update(subscription)
            await self.uow.commit()

            items = await self.subscription_repo.get_items(updated.id)
            order_ids = await self.order_repo.list_ids_by_subscription(updated.id)
            return Return.ok(to_subscription_response(updated, items, order_ids))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="PAUSE_SUBSCRIPTION_FAILED",
                    message="Failed to pause subscription",
                    reason=str(e),
                )
            )
