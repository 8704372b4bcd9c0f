"""Get Subscription Order Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.subscription_order_repository import SubscriptionOrderRepository
from .dtos import SubscriptionOrderResponseDTO
from .mappers import to_order_response


class GetSubscriptionOrder:

    def __init__(self, order_repo: SubscriptionOrderRepository):
        self.order_repo = order_repo

    async def execute(self, order_id: int) -> Result[SubscriptionOrderResponseDTO]:
        order = await self.order_repo.get_by_id(order_id)
        if not order:
            return Return.err(
                Error(
                    code="SUBSCRIPTION_ORDER_NOT_FOUND",
                    message=f"Subscription order {order_id} not found",
                )
            )

        items = await self.order_repo.get_items(order.id)
        return Return.ok(to_order_response(order, items))
