"""Subscription Order Background Worker

Turns due subscriptions into dated delivery orders and advances their
schedules. Can be run as a standalone script or driven by
SubscriptionScheduler inside the API process.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.subscription_repository import SqlAlchemySubscriptionRepository
from src.adapter.repositories.subscription_order_repository import SqlAlchemySubscriptionOrderRepository
from src.adapter.repositories.product_repository import SqlAlchemyProductRepository
from src.adapter.services.clock import SystemClock
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.clock import Clock
from src.app.use_cases.subscriptions import (
    MaterializeSubscriptionOrder,
    AdvanceSubscriptionSchedule,
)
from src.app.use_cases.subscriptions.dtos import (
    AdvanceScheduleCommandDTO,
    MaterializeOrderCommandDTO,
    RunErrorDTO,
    SubscriptionRunReportDTO,
)
from src.domain.subscription import SubscriptionStatus

logger = logging.getLogger(__name__)

ORDER_CREATED = "created"
DUPLICATE_SKIPPED = "duplicate"
NOT_DUE = "not_due"


class SubscriptionProcessingError(Exception):
    """Raised when one subscription could not be processed"""

    def __init__(self, code: str, message: str, reason: Optional[str] = None):
        detail = f"{code}: {message}"
        if reason:
            detail = f"{detail} ({reason})"
        super().__init__(detail)
        self.code = code
        self.message = message
        self.reason = reason

    @classmethod
    def from_error(cls, error) -> "SubscriptionProcessingError":
        return cls(error.code, error.message, error.reason)


class SubscriptionOrderWorker:
    """
    Background worker for subscription order generation

    Features:
    - Finds active subscriptions whose next delivery is due
    - Materializes one order per due subscription, then advances its schedule
    - Each subscription runs in its own session; one failure never aborts the run
    - Overlapping runs on the same worker are rejected (already_running)
    - Safe to re-run after a crash: an existing order for the due date is
      detected and only the schedule is advanced

    Usage:
        # Run once
        worker = SubscriptionOrderWorker()
        report = await worker.run_once()

        # Run periodically
        scheduler = SubscriptionScheduler(worker)
        scheduler.start()
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        session_factory=None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            session_factory: Existing async session factory to reuse instead
                of creating an engine
            clock: Source of processing time (defaults to SystemClock)
        """
        self.clock = clock or SystemClock()
        self.is_running = False
        self.last_report: Optional[SubscriptionRunReportDTO] = None

        if session_factory is not None:
            self.engine = None
            self.async_session_factory = session_factory
        else:
            self.db_uri = db_uri or ApplicationConfig.DB_URI
            self.engine = create_async_engine(self.db_uri, echo=False, future=True)
            self.async_session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )

        logger.info("SubscriptionOrderWorker initialized")

    async def run_once(self, now: Optional[datetime] = None) -> SubscriptionRunReportDTO:
        """
        Run one order generation pass

        Args:
            now: Processing time (defaults to the worker clock)

        Returns:
            SubscriptionRunReportDTO summarizing the run. Never raises.
        """
        now = now or self.clock.now()

        if not getattr(ApplicationConfig, "SUBSCRIPTION_ORDERS_ENABLED", True):
            logger.info("Subscription order generation is disabled, skipping")
            return SubscriptionRunReportDTO(status="disabled", started_at=now)

        if self.is_running:
            logger.warning("Subscription order run already in progress, skipping")
            return SubscriptionRunReportDTO(status="already_running", started_at=now)

        self.is_running = True
        try:
            report = await self._run(now)
            self.last_report = report
            return report
        finally:
            self.is_running = False

    async def _run(self, now: datetime) -> SubscriptionRunReportDTO:
        start_time = time.time()
        as_of = now.date()

        logger.info(
            f"Starting subscription order run for {as_of.isoformat()}",
            extra={"as_of": as_of.isoformat()},
        )

        total_processed = 0
        orders_created = 0
        duplicates_skipped = 0
        subscriptions_completed = 0
        error_details = []

        try:
            async with self.async_session_factory() as session:
                subscription_repo = SqlAlchemySubscriptionRepository(session)
                due = await subscription_repo.get_due_subscriptions(as_of)
                due_ids = [subscription.id for subscription in due]
        except Exception as e:
            logger.exception(f"Subscription order run failed: {e}")
            error_details.append(
                RunErrorDTO(
                    subscription_id=None,
                    error=f"Fatal error: {e}",
                    timestamp=self.clock.now(),
                )
            )
            return SubscriptionRunReportDTO(
                status="error",
                errors=len(error_details),
                error_details=error_details,
                started_at=now,
                execution_time_ms=int((time.time() - start_time) * 1000),
            )

        logger.info(f"Found {len(due_ids)} due subscriptions")

        for subscription_id in due_ids:
            total_processed += 1
            try:
                outcome, completed = await self._process_subscription(subscription_id, now)

                if outcome == ORDER_CREATED:
                    orders_created += 1
                elif outcome == DUPLICATE_SKIPPED:
                    duplicates_skipped += 1
                if completed:
                    subscriptions_completed += 1

            except Exception as e:
                logger.error(
                    f"Failed to process subscription {subscription_id}: {e}",
                    extra={
                        "subscription_id": subscription_id,
                        "error_code": getattr(e, "code", type(e).__name__),
                        "reason": getattr(e, "reason", None) or str(e),
                    },
                )
                error_details.append(
                    RunErrorDTO(
                        subscription_id=subscription_id,
                        error=str(e),
                        timestamp=self.clock.now(),
                    )
                )

        execution_time_ms = int((time.time() - start_time) * 1000)

        report = SubscriptionRunReportDTO(
            status="completed",
            total_processed=total_processed,
            orders_created=orders_created,
            duplicates_skipped=duplicates_skipped,
            subscriptions_completed=subscriptions_completed,
            errors=len(error_details),
            error_details=error_details,
            started_at=now,
            execution_time_ms=execution_time_ms,
        )

        logger.info(
            f"Subscription order run complete. "
            f"Processed {total_processed}, created {orders_created} orders, "
            f"{report.errors} errors in {execution_time_ms}ms",
            extra={
                "total_processed": total_processed,
                "orders_created": orders_created,
                "duplicates_skipped": duplicates_skipped,
                "subscriptions_completed": subscriptions_completed,
                "errors": report.errors,
                "execution_time_ms": execution_time_ms,
            },
        )

        return report

    async def _process_subscription(self, subscription_id: int, now: datetime):
        """
        Materialize and advance a single due subscription

        Uses a fresh session so a failure here cannot leak into other
        subscriptions of the same run.

        Returns:
            Tuple of (outcome, completed)

        Raises:
            SubscriptionProcessingError: Materialization or advancement failed
        """
        as_of = now.date()

        async with self.async_session_factory() as session:
            uow = SqlAlchemyUnitOfWork(session)
            subscription_repo = SqlAlchemySubscriptionRepository(session)
            order_repo = SqlAlchemySubscriptionOrderRepository(
                session,
                order_number_prefix=getattr(ApplicationConfig, "ORDER_NUMBER_PREFIX", "SUB"),
            )
            product_repo = SqlAlchemyProductRepository(session)

            # Re-check: the subscription may have changed since the due query
            subscription = await subscription_repo.get_by_id(subscription_id)
            if (
                not subscription
                or subscription.status != SubscriptionStatus.ACTIVE
                or subscription.next_delivery_date is None
                or subscription.next_delivery_date > as_of
            ):
                logger.info(
                    f"Subscription {subscription_id} no longer due, skipping",
                    extra={"subscription_id": subscription_id},
                )
                return NOT_DUE, False

            delivery_date = subscription.next_delivery_date

            # Step 1: Materialize the order
            materialize = MaterializeSubscriptionOrder(
                uow=uow,
                subscription_repo=subscription_repo,
                order_repo=order_repo,
                product_repo=product_repo,
            )
            materialize_result = await materialize.execute(
                MaterializeOrderCommandDTO(
                    subscription_id=subscription_id,
                    delivery_date=delivery_date,
                    requested_at=now,
                )
            )

            if materialize_result.is_ok():
                outcome = ORDER_CREATED
                logger.info(
                    f"Created order {materialize_result.value.order_number} for "
                    f"subscription {subscription_id}",
                    extra={
                        "subscription_id": subscription_id,
                        "order_id": materialize_result.value.order_id,
                        "delivery_date": delivery_date.isoformat(),
                    },
                )
            elif materialize_result.error.code == "ORDER_ALREADY_EXISTS":
                # Earlier run stopped between order creation and schedule advance
                outcome = DUPLICATE_SKIPPED
                logger.warning(
                    f"Order already exists for subscription {subscription_id} on "
                    f"{delivery_date.isoformat()}, advancing schedule only",
                    extra={"subscription_id": subscription_id},
                )
            else:
                raise SubscriptionProcessingError.from_error(materialize_result.error)

            # Step 2: Advance the schedule
            advance = AdvanceSubscriptionSchedule(uow=uow, subscription_repo=subscription_repo)
            advance_result = await advance.execute(
                AdvanceScheduleCommandDTO(
                    subscription_id=subscription_id,
                    fulfilled_date=delivery_date,
                    now=now,
                )
            )

            if advance_result.is_err():
                raise SubscriptionProcessingError.from_error(advance_result.error)

            advanced = advance_result.value
            if advanced.completed:
                logger.info(
                    f"Subscription {subscription_id} completed",
                    extra={
                        "subscription_id": subscription_id,
                        "total_deliveries": advanced.total_deliveries,
                    },
                )

            return outcome, advanced.completed

    async def shutdown(self):
        """Cleanup resources"""
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("SubscriptionOrderWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m src.worker.subscription_orders --once

        # Run once as of a given day (backfill)
        python -m src.worker.subscription_orders --once --as-of 2024-01-15

        # Run continuously (default: every 5 minutes)
        python -m src.worker.subscription_orders

        # Run continuously with custom interval (in seconds)
        python -m src.worker.subscription_orders --interval 60
    """
    import argparse
    from src.adapter.services.clock import FixedClock
    from src.worker.scheduler import SubscriptionScheduler

    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Subscription Order Worker")
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--interval", type=int,
        default=ApplicationConfig.SUBSCRIPTION_SCHEDULER_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: 300)"
    )
    parser.add_argument(
        "--as-of", type=str, default=None,
        help="Processing date YYYY-MM-DD (default: today, UTC)"
    )
    args = parser.parse_args()

    clock = None
    if args.as_of:
        clock = FixedClock(datetime.strptime(args.as_of, "%Y-%m-%d"))

    worker = SubscriptionOrderWorker(clock=clock)

    try:
        if args.once:
            report = await worker.run_once()
            print(f"Subscription order run {report.status}:")
            print(f"  Due subscriptions processed: {report.total_processed}")
            print(f"  Orders created: {report.orders_created}")
            print(f"  Duplicates skipped: {report.duplicates_skipped}")
            print(f"  Subscriptions completed: {report.subscriptions_completed}")
            print(f"  Errors: {report.errors}")
            print(f"  Execution time: {report.execution_time_ms}ms")
            for detail in report.error_details:
                print(f"  - Subscription {detail.subscription_id}: {detail.error}")
        else:
            scheduler = SubscriptionScheduler(worker, interval_seconds=args.interval)
            scheduler.install_signal_handlers()
            scheduler.start()
            await scheduler.wait_stopped()
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
