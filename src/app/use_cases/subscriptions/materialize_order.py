"""MaterializeSubscriptionOrder Use Case

Turns one due delivery of a subscription into a persisted order.
Used by the subscription order worker for every due subscription.
"""

from datetime import datetime
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.subscription_order_repository import SubscriptionOrderRepository
from src.app.repositories.product_repository import ProductRepository
from src.domain.subscription import SubscriptionStatus
from src.domain.subscription_order import (
    SubscriptionOrder,
    SubscriptionOrderItem,
    OrderStatus,
    PaymentStatus,
)
from .dtos import MaterializeOrderCommandDTO, SubscriptionOrderResponseDTO
from .mappers import enum_value, to_order_response

UNKNOWN_PRODUCT_NAME = "N/A"


class MaterializeSubscriptionOrder:
    """
    Use Case: Generate the order for a subscription's due delivery

    Business Rules:
    1. Only active subscriptions generate orders
    2. At most one order per (subscription, delivery_date)
    3. Line items are snapshots (name, price, unit, total) and never follow later catalog changes
    4. total_amount = sum of line totals, computed once
    5. Order number does not depend on counting existing rows
    6. Order and subscription change commit together or not at all

    Flow:
    1. Load subscription with row lock and check it is active
    2. Reject if an order already exists for the delivery date
    3. Snapshot line items and compute the total
    4. Persist order (PENDING / payment PENDING)
    5. Stamp subscription.last_order_date
    6. Commit transaction
    7. Return response
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

    async def execute(
        self, command: MaterializeOrderCommandDTO
    ) -> Result[SubscriptionOrderResponseDTO]:
        """
        Execute order materialization

        Args:
            command: MaterializeOrderCommandDTO with subscription_id and delivery_date

        Returns:
            Result[SubscriptionOrderResponseDTO]: Created order or error
        """
        try:
            # Step 1: Load and validate subscription
            subscription = await self.subscription_repo.get_by_id(
                command.subscription_id, for_update=True
            )

            if not subscription:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_FOUND",
                        message=f"Subscription {command.subscription_id} not found",
                    )
                )

            if subscription.status != SubscriptionStatus.ACTIVE:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_NOT_ACTIVE",
                        message=f"Subscription {subscription.id} is "
                                f"{enum_value(subscription.status)}, not active",
                    )
                )

            # Step 2: Idempotency on (subscription, delivery_date)
            existing = await self.order_repo.get_by_subscription_and_date(
                subscription.id, command.delivery_date
            )
            if existing:
                return Return.err(
                    Error(
                        code="ORDER_ALREADY_EXISTS",
                        message=f"Order {existing.order_number} already exists for "
                                f"subscription {subscription.id} on {command.delivery_date}",
                        reason="Duplicate delivery prevention",
                    )
                )

            items = await self.subscription_repo.get_items(subscription.id)
            if not items:
                return Return.err(
                    Error(
                        code="SUBSCRIPTION_HAS_NO_ITEMS",
                        message=f"Subscription {subscription.id} has no products",
                    )
                )

            # Step 3: Snapshot line items
            products = await self.product_repo.get_by_ids([item.product_id for item in items])

            order_items = []
            for item in items:
                product = products.get(item.product_id)
                order_items.append(
                    SubscriptionOrderItem(
                        product_id=item.product_id,
                        product_name=product.name if product else UNKNOWN_PRODUCT_NAME,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        unit=item.unit or "piece",
                        line_total=item.line_total,
                    )
                )

            total_amount = sum((i.line_total for i in order_items), Decimal("0"))

            # Step 4: Persist order
            requested_at = command.requested_at or datetime.utcnow()

            order = SubscriptionOrder(
                order_number=self.order_repo.generate_order_number(
                    subscription.id, requested_at
                ),
                subscription_id=subscription.id,
                customer_id=subscription.customer_id,
                distributor_id=subscription.distributor_id,
                status=OrderStatus.PENDING,
                payment_status=PaymentStatus.PENDING,
                delivery_date=command.delivery_date,
                delivery_time=enum_value(subscription.delivery_time or "morning"),
                delivery_address=subscription.delivery_address,
                payment_method=subscription.payment_method or "cash",
                total_amount=total_amount,
                notes=subscription.special_instructions or "",
            )

            created_order = await self.order_repo.create(order, order_items)

            # Step 5: Link back to the subscription in the same transaction
            subscription.last_order_date = requested_at
            await self.subscription_repo.update(subscription)

            # Step 6: Commit transaction
            await self.uow.commit()

            # Step 7: Build response
            return Return.ok(to_order_response(created_order, order_items))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="MATERIALIZE_ORDER_FAILED",
                    message="Failed to create subscription order",
                    reason=str(e),
                )
            )
