"""AdvanceSubscriptionSchedule Use Case

Moves a subscription past a delivery that has just been materialized.
"""

from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.subscription_repository import SubscriptionRepository
from src.domain.recurrence import InvalidRecurrenceError, next_delivery_for
from src.domain.subscription import SubscriptionStatus
from .dtos import AdvanceScheduleCommandDTO, ScheduleAdvanceResponseDTO
from .mappers import enum_value


class AdvanceSubscriptionSchedule:
    """
    Use Case: Advance or complete a subscription after a delivery

    Business Rules:
    1. Must only run after the order for fulfilled_date is committed
    2. total_deliveries += 1 and last_delivery_date = fulfilled_date, always
    3. Schedule moves only while the subscription is still active
    4. If the next date is after end_date: status=completed, next_delivery_date=None
    5. An unusable recurrence rule leaves the subscription untouched

    Flow:
    1. Load subscription with row lock
    2. Compute next delivery date (if active)
    3. Apply completion or new next_delivery_date
    4. Update counters
    5. Commit transaction
    """

    def __init__(self, uow: UnitOfWork, subscription_repo: SubscriptionRepository):
        self.uow = uow
        self.subscription_repo = subscription_repo

    async def execute(
        self, command: AdvanceScheduleCommandDTO
    ) -> Result[ScheduleAdvanceResponseDTO]:
        try:
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

            completed = False

            # Paused or cancelled meanwhile: count the delivery, leave the schedule alone
            if subscription.status == SubscriptionStatus.ACTIVE:
                try:
                    next_date = next_delivery_for(subscription, command.now)
                except InvalidRecurrenceError as e:
                    return Return.err(
                        Error(
                            code="INVALID_RECURRENCE",
                            message=f"Cannot compute next delivery for subscription "
                                    f"{subscription.id}",
                            reason=str(e),
                        )
                    )

                if subscription.end_date and next_date > subscription.end_date:
                    subscription.status = SubscriptionStatus.COMPLETED
                    subscription.next_delivery_date = None
                    completed = True
                else:
                    subscription.next_delivery_date = next_date

            subscription.total_deliveries = (subscription.total_deliveries or 0) + 1
            subscription.last_delivery_date = command.fulfilled_date

            updated = await self.subscription_repo.update(subscription)
            await self.uow.commit()

            return Return.ok(
                ScheduleAdvanceResponseDTO(
                    subscription_id=updated.id,
                    status=enum_value(updated.status),
                    next_delivery_date=updated.next_delivery_date,
                    last_delivery_date=updated.last_delivery_date,
                    total_deliveries=updated.total_deliveries,
                    completed=completed,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code="ADVANCE_SCHEDULE_FAILED",
                    message="Failed to advance subscription schedule",
                    reason=str(e),
                )
            )
