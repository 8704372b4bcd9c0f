"""Periodic trigger for subscription order generation

Runs SubscriptionOrderWorker.run_once immediately on start and then at a
fixed rate until stopped.
"""

import asyncio
import logging
import signal
from typing import Optional

from config import ApplicationConfig
from src.app.use_cases.subscriptions.dtos import SchedulerStatusDTO

logger = logging.getLogger(__name__)


class SubscriptionScheduler:
    """
    Fixed-rate scheduler around a SubscriptionOrderWorker

    Features:
    - First run happens right away, later runs every interval_seconds
      measured from the start of the previous run
    - Overlap protection lives in the worker; a slow run delays the next tick
    - stop() is idempotent and lets an in-flight run finish

    Usage:
        scheduler = SubscriptionScheduler(worker)
        scheduler.start()
        ...
        scheduler.stop()
        await scheduler.wait_stopped()
    """

    def __init__(self, worker, interval_seconds: Optional[int] = None):
        self.worker = worker
        self.interval_seconds = int(
            interval_seconds
            or getattr(ApplicationConfig, "SUBSCRIPTION_SCHEDULER_INTERVAL_SECONDS", 300)
        )
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    @property
    def is_started(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, interval_seconds: Optional[int] = None) -> bool:
        """
        Start the periodic loop on the running event loop

        Args:
            interval_seconds: Optional override of the cadence

        Returns:
            True if started, False if it was already running
        """
        if self.is_started:
            logger.warning("Subscription scheduler is already running")
            return False

        if interval_seconds:
            self.interval_seconds = int(interval_seconds)

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run_loop())

        logger.info(
            f"Subscription scheduler started with {self.interval_seconds}s interval",
            extra={"interval_seconds": self.interval_seconds},
        )
        return True

    def stop(self):
        """Signal the loop to exit after the current run"""
        if not self.is_started or self._stop_event.is_set():
            return
        self._stop_event.set()
        logger.info("Subscription scheduler stopping")

    async def wait_stopped(self):
        """Wait until the loop has exited"""
        if self._task is None:
            return
        await self._task

    def status(self) -> SchedulerStatusDTO:
        return SchedulerStatusDTO(
            started=self.is_started,
            running=self.worker.is_running,
            interval_seconds=self.interval_seconds,
            last_report=self.worker.last_report,
        )

    def install_signal_handlers(self):
        """Stop the scheduler on SIGINT/SIGTERM"""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.stop)
            except NotImplementedError:
                # Event loops without add_signal_handler (Windows)
                signal.signal(
                    sig, lambda s, f: loop.call_soon_threadsafe(self.stop)
                )

    async def _run_loop(self):
        loop = asyncio.get_running_loop()

        while not self._stop_event.is_set():
            started = loop.time()

            try:
                report = await self.worker.run_once()
                logger.info(
                    f"Subscription order cycle {report.status}. "
                    f"Created {report.orders_created} orders, {report.errors} errors",
                )
            except Exception as e:
                logger.error(f"Subscription order cycle failed: {e}")

            delay = max(0.0, self.interval_seconds - (loop.time() - started))
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass

        logger.info("Subscription scheduler stopped")
