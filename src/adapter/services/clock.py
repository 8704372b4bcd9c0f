from datetime import datetime
from src.app.services.clock import Clock


class SystemClock(Clock):
    """Wall clock in naive UTC, matching the timestamps stored by the entities"""

    def now(self) -> datetime:
        return datetime.utcnow()


class FixedClock(Clock):
    """Clock frozen at a given instant, for replays and manual backfills"""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant
