"""SLA due date arithmetic."""

from datetime import datetime, timedelta
from typing import Callable, Optional


class SLAClock:
    """Computes due dates relative to an injectable "now"."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or datetime.utcnow

    def now(self) -> datetime:
        return self._clock()

    def due_date(self, hours: float, start: Optional[datetime] = None) -> datetime:
        return (start or self.now()) + timedelta(hours=hours)
