"""UpdateSubscriptionOrderStatus Use Case

Moves a generated order through its fulfilment lifecycle.
"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.subscription_order_repository import SubscriptionOrderRepository
from src.domain.subscription_order import OrderStatus, can_transition
from .dtos import UpdateOrderStatusCommandDTO, SubscriptionOrderResponseDTO
from .mappers import enum_value, to_order_response


class UpdateSubscriptionOrderStatus:
    """
    Use Case: Update order status

    Business Rules:
    1. PENDING -> CONFIRMED -> IN_TRANSIT -> DELIVERED, forward only
    2. CANCELLED from any non-terminal status
    3. DELIVERED and CANCELLED are terminal

    Errors:
        SUBSCRIPTION_ORDER_NOT_FOUND: No order with this ID
        INVALID_STATUS_TRANSITION: Transition not allowed
    """

    def __init__(self, uow: UnitOfWork, order_repo: SubscriptionOrderRepository):
        self.uow = uow
        self.order_repo = order_repo

    async def execute(
        self, command: UpdateOrderStatusCommandDTO
    ) -> Result[SubscriptionOrderResponseDTO]:
        try:
            order = await self.order_repo.get_by_id(command.order_id)
            if not order:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_ORDER_NOT_FOUND",
                        message=f"Subscription order {command.order_id} not found",
                    )
                )

            current = OrderStatus(order.status)
            if not can_transition(current, command.status):
                return Return.err(
                    Error(
                        code="INVALID_STATUS_TRANSITION",
                        message=f"Cannot move order from {current.value} "
                                f"to {enum_value(command.status)}",
                    )
                )

            order.status = command.status
            updated = await self.order_repo.update(order)
            await self.uow.commit()

            items = await self.order_repo.get_items(updated.id)
            return Return.ok(to_order_response(updated, items))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="UPDATE_ORDER_STATUS_FAILED",
                    message="Failed to update order status",
                    reason=str(e),
                )
            )
