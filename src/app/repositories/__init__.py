from .subscription_repository import SubscriptionRepository
from .subscription_order_repository import SubscriptionOrderRepository
from .product_repository import ProductRepository

__all__ = [
    "SubscriptionRepository",
    "SubscriptionOrderRepository",
    "ProductRepository",
]
