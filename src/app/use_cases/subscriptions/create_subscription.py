"""CreateSubscription Use Case

Creates a recurring delivery subscription for a customer.
"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.app.repositories.product_repository import ProductRepository
from src.domain.recurrence import (
    InvalidRecurrenceError,
    RecurrenceRule,
    effective_delivery_days,
    weekday_numbers,
)
from src.domain.subscription import Subscription, SubscriptionItem, SubscriptionStatus
from .dtos import CreateSubscriptionCommandDTO, SubscriptionResponseDTO
from .mappers import to_subscription_response


class CreateSubscription:
    """
    Use Case: Create subscription

    Business Rules:
    1. At least one product, each existing and in stock
    2. end_date (if any) strictly after start_date
    3. Weekday names must be valid; weekly/twice-weekly get default days when missing
    4. Unit price is captured from the catalog at creation time
    5. First delivery is due on start_date
    6. Subscribed quantities are reserved from product stock

    Flow:
    1. Validate dates and recurrence fields
    2. Load products and check stock
    3. Persist subscription and items
    4. Reserve stock
    5. Commit transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        subscription_repo: SubscriptionRepository,
        product_repo: ProductRepository,
    ):
        self.uow = uow
        self.subscription_repo = subscription_repo
        self.product_repo = product_repo

    async def execute(
        self, command: CreateSubscriptionCommandDTO
    ) -> Result[SubscriptionResponseDTO]:
        """
        Execute subscription creation

        Args:
            command: CreateSubscriptionCommandDTO

        Returns:
            Result[SubscriptionResponseDTO]: Created subscription or error

        Errors:
            VALIDATION_ERROR: No products requested
            INVALID_DATE_RANGE: end_date not after start_date
            INVALID_DELIVERY_DAYS: Unknown weekday name
            PRODUCT_NOT_FOUND: Unknown product
            INSUFFICIENT_STOCK: Not enough stock for a product
        """
        if not command.items:
            return Return.err(
                Error(code="VALIDATION_ERROR", message="At least one product is required")
            )

        if command.end_date and command.end_date <= command.start_date:
            return Return.err(
                Error(
                    code="INVALID_DATE_RANGE",
                    message="End date must be after start date",
                )
            )

        rule = RecurrenceRule(
            frequency=command.frequency,
            delivery_days=tuple(command.delivery_days or ()),
            delivery_day_of_month=command.delivery_day_of_month,
        )
        try:
            delivery_days = list(effective_delivery_days(rule))
            weekday_numbers(delivery_days)
        except InvalidRecurrenceError as e:
            return Return.err(
                Error(code="INVALID_DELIVERY_DAYS", message=str(e))
            )

        try:
            products = await self.product_repo.get_by_ids(
                [item.product_id for item in command.items]
            )

            items = []
            for requested in command.items:
                product = products.get(requested.product_id)
                if not product:
                    return Return.err(
                        Error(
                            code="PRODUCT_NOT_FOUND",
                            message=f"Product not found: {requested.product_id}",
                        )
                    )
                if product.quantity < requested.quantity:
                    return Return.err(
                        Error(
                            code="INSUFFICIENT_STOCK",
                            message=f"Insufficient stock for {product.name}. "
                                    f"Available: {product.quantity}",
                        )
                    )
                items.append(
                    SubscriptionItem(
                        product_id=product.id,
                        quantity=requested.quantity,
                        unit_price=product.price,
                        unit=requested.unit or product.unit,
                    )
                )

            subscription = Subscription(
                customer_id=command.customer_id,
                distributor_id=command.distributor_id,
                frequency=command.frequency,
                delivery_days=delivery_days or None,
                delivery_day_of_month=command.delivery_day_of_month,
                start_date=command.start_date,
                end_date=command.end_date,
                delivery_time=command.delivery_time,
                delivery_address=command.delivery_address,
                payment_method=command.payment_method,
                special_instructions=command.special_instructions,
                status=SubscriptionStatus.ACTIVE,
                next_delivery_date=command.start_date,
                total_deliveries=0,
            )

            created = await self.subscription_repo.create(subscription, items)

            for item in items:
                await self.product_repo.adjust_stock(item.product_id, -item.quantity)

            await self.uow.commit()

            return Return.ok(to_subscription_response(created, items, []))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="CREATE_SUBSCRIPTION_FAILED",
                    message="Failed to create subscription",
                    reason=str(e),
                )
            )
