"""Background workers for subscription order generation"""
from .subscription_orders import SubscriptionOrderWorker
from .scheduler import SubscriptionScheduler

__all__ = ["SubscriptionOrderWorker", "SubscriptionScheduler"]
