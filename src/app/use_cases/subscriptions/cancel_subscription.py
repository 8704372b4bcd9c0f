"""CancelSubscription Use Case"""

from datetime import datetime
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.subscription_order_repository import SubscriptionOrderRepository
from src.app.repositories.product_repository import ProductRepository
from src.domain.subscription import SubscriptionStatus
from .dtos import SubscriptionResponseDTO
from .mappers import to_subscription_response


class CancelSubscription:
    """
    Use Case: Cancel a subscription

    Business Rules:
    1. Cancellation is a status change; the row and its orders stay
    2. next_delivery_date is cleared so nothing else is generated
    3. Stock reserved by an active subscription is returned
    4. Cancelling twice is an error
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        order_repo: SubscriptionOrderRepository,
        product_repo: ProductRepository,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.order_repo = order_repo
        self.product_repo = product_repo

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

            if subscription.status == SubscriptionStatus.CANCELLED:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_ALREADY_CANCELLED",
                        message="Subscription is already cancelled",
                    )
                )

            was_active = subscription.status == SubscriptionStatus.ACTIVE
            items = await self.subscription_repo.get_items(subscription.id)

            subscription.status = SubscriptionStatus.CANCELLED
            subscription.cancelled_at = datetime.utcnow()
            subscription.next_delivery_date = None
            updated = await self.subscription_repo.update(subscription)

            if was_active:
                for item in items:
                    await self.product_repo.adjust_stock(item.product_id, item.quantity)

            await self.uow.commit()

            order_ids = await self.order_repo.list_ids_by_subscription(updated.id)
            return Return.ok(to_subscription_response(updated, items, order_ids))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CANCEL_SUBSCRIPTION_FAILED",
                    message="Failed to cancel subscription",
                    reason=str(e),
                )
            )
