"""ResumeSubscription Use Case"""

from datetime import datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.subscription_order_repository import SubscriptionOrderRepository
from src.domain.subscription import SubscriptionStatus
from .dtos import SubscriptionResponseDTO
from .mappers import enum_value, to_subscription_response


class ResumeSubscription:
    """
    Use Case: Resume a paused subscription

    Business Rules:
    1. Only paused subscriptions can be resumed
    2. Next delivery becomes due today (never before start_date), so the
       next run delivers immediately instead of replaying the pause
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

    async def execute(
        self, subscription_id: int, now: Optional[datetime] = None
    ) -> Result[SubscriptionResponseDTO]:
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

            if subscription.status != SubscriptionStatus.PAUSED:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_PAUSED",
                        message=f"Only paused subscriptions can be resumed "
                                f"(current: {enum_value(subscription.status)})",
                    )
                )

            today = (now or datetime.utcnow()).date()
            subscription.status = SubscriptionStatus.ACTIVE
            subscription.next_delivery_date = max(today, subscription.start_date)

            updated = await self.subscription_repo.update(subscription)
            await self.uow.commit()

            items = await self.subscription_repo.get_items(updated.id)
            order_ids = await self.order_repo.list_ids_by_subscription(updated.id)
            return Return.ok(to_subscription_response(updated, items, order_ids))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="RESUME_SUBSCRIPTION_FAILED",
                    message="Failed to resume subscription",
                    reason=str(e),
                )
            )
