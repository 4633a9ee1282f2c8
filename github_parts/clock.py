"""
Time sources used for token expiry calculations
"""

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current time as an aware UTC datetime"""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
