"""Clock Interface

Source of "now" for schedule processing, injectable so runs can be
replayed at a fixed time.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current UTC time (naive)"""
        pass
