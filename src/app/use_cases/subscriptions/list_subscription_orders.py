"""List Subscription Orders Use Case"""

from libs.result import Result, Return, Error
from src.app.repositories.subscription_order_repository import SubscriptionOrderRepository
from .dtos import ListSubscriptionOrdersQueryDTO, ListSubscriptionOrdersResponseDTO
from .mappers import to_order_response


class ListSubscriptionOrders:
    """
    Use Case: List generated orders with filters

    Filters are combined with AND. Orders come back latest delivery first.
    """

    def __init__(self, order_repo: SubscriptionOrderRepository):
        self.order_repo = order_repo

    async def execute(
        self, query: ListSubscriptionOrdersQueryDTO
    ) -> Result[ListSubscriptionOrdersResponseDTO]:
        if query.date_from and query.date_to and query.date_from > query.date_to:
            return Return.err(
                Error(
                    code="INVALID_DATE_RANGE",
                    message="date_from must not be after date_to",
                )
            )

        orders = await self.order_repo.list(
            subscription_id=query.subscription_id,
            customer_id=query.customer_id,
            distributor_id=query.distributor_id,
            status=query.status,
            date_from=query.date_from,
            date_to=query.date_to,
            limit=query.limit,
            offset=query.offset,
        )

        responses = []
        for order in orders:
            items = await self.order_repo.get_items(order.id)
            responses.append(to_order_response(order, items))

        return Return.ok(
            ListSubscriptionOrdersResponseDTO(orders=responses, count=len(responses))
        )
