from .base import BaseModel
from .product import Product
from .subscription import (
    Subscription,
    SubscriptionItem,
    SubscriptionStatus,
    DeliveryFrequency,
    DeliveryTime,
    Weekday,
)
from .subscription_order import (
    SubscriptionOrder,
    SubscriptionOrderItem,
    OrderStatus,
    PaymentStatus,
    can_transition,
)
from .recurrence import (
    RecurrenceRule,
    InvalidRecurrenceError,
    compute_next_delivery,
    next_delivery_for,
)

__all__ = [
    "BaseModel",
    "Product",
    "Subscription",
    "SubscriptionItem",
    "SubscriptionStatus",
    "DeliveryFrequency",
    "DeliveryTime",
    "Weekday",
    "SubscriptionOrder",
    "SubscriptionOrderItem",
    "OrderStatus",
    "PaymentStatus",
    "can_transition",
    "RecurrenceRule",
    "InvalidRecurrenceError",
    "compute_next_delivery",
    "next_delivery_for",
]
