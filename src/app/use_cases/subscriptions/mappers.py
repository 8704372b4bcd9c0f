"""Entity to DTO conversion shared by the subscription use cases"""

from enum import Enum
from typing import List

from src.domain.subscription import Subscription, SubscriptionItem
from src.domain.subscription_order import SubscriptionOrder, SubscriptionOrderItem
from .dtos import (
    SubscriptionItemDTO,
    SubscriptionResponseDTO,
    SubscriptionOrderItemDTO,
    SubscriptionOrderResponseDTO,
)


def enum_value(value) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def to_subscription_response(
    subscription: Subscription,
    items: List[SubscriptionItem],
    order_ids: List[int],
) -> SubscriptionResponseDTO:
    return SubscriptionResponseDTO(
        subscription_id=subscription.id,
        customer_id=subscription.customer_id,
        distributor_id=subscription.distributor_id,
        frequency=enum_value(subscription.frequency),
        delivery_days=list(subscription.delivery_days or []),
        delivery_day_of_month=subscription.delivery_day_of_month,
        start_date=subscription.start_date,
        end_date=subscription.end_date,
        delivery_time=enum_value(subscription.delivery_time),
        status=enum_value(subscription.status),
        next_delivery_date=subscription.next_delivery_date,
        last_delivery_date=subscription.last_delivery_date,
        total_deliveries=subscription.total_deliveries,
        items=[
            SubscriptionItemDTO(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                unit=item.unit,
                line_total=item.line_total,
            )
            for item in items
        ],
        order_ids=order_ids,
        created_at=subscription.created_at,
    )


def to_order_response(
    order: SubscriptionOrder, items: List[SubscriptionOrderItem]
) -> SubscriptionOrderResponseDTO:
    return SubscriptionOrderResponseDTO(
        order_id=order.id,
        order_number=order.order_number,
        subscription_id=order.subscription_id,
        customer_id=order.customer_id,
        distributor_id=order.distributor_id,
        status=enum_value(order.status),
        payment_status=enum_value(order.payment_status),
        delivery_date=order.delivery_date,
        delivery_time=order.delivery_time,
        delivery_address=order.delivery_address,
        payment_method=order.payment_method,
        total_amount=order.total_amount,
        notes=order.notes,
        items=[
            SubscriptionOrderItemDTO(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                unit=item.unit,
                line_total=item.line_total,
            )
            for item in items
        ],
        created_at=order.created_at,
    )
