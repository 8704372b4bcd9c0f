from .create_subscription import CreateSubscription
from .pause_subscription import PauseSubscription
from .resume_subscription import ResumeSubscription
from .cancel_subscription import CancelSubscription
from .get_subscription import GetSubscription
from .materialize_order import MaterializeSubscriptionOrder
from .advance_schedule import AdvanceSubscriptionSchedule
from .list_subscription_orders import ListSubscriptionOrders
from .get_subscription_order import GetSubscriptionOrder
from .update_order_status import UpdateSubscriptionOrderStatus

__all__ = [
    "CreateSubscription",
    "PauseSubscription",
    "ResumeSubscription",
    "CancelSubscription",
    "GetSubscription",
    "MaterializeSubscriptionOrder",
    "AdvanceSubscriptionSchedule",
    "ListSubscriptionOrders",
    "GetSubscriptionOrder",
    "UpdateSubscriptionOrderStatus",
]
