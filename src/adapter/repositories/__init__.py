from .subscription_repository import SqlAlchemySubscriptionRepository
from .subscription_order_repository import SqlAlchemySubscriptionOrderRepository
from .product_repository import SqlAlchemyProductRepository

__all__ = [
    "SqlAlchemySubscriptionRepository",
    "SqlAlchemySubscriptionOrderRepository",
    "SqlAlchemyProductRepository",
]
