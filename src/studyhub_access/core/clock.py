"""
STUDYHUB Access Core - Clock
Sources de temps: horloge système et horloge manuelle pour les tests.
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Optional

from .interfaces import IClock


class SystemClock(IClock):
    """Horloge murale UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock(IClock):
    """
    Horloge pilotée à la main.

    Example:
        clock = ManualClock()
        clock.advance(timedelta(minutes=15))
    """

    DEFAULT_START = datetime(2025, 3, 3, 8, 0, 0, tzinfo=timezone.utc)

    def __init__(self, start: Optional[datetime] = None):
        start = start or self.DEFAULT_START
        if start.tzinfo is None:
            raise ValueError("start must be timezone-aware")
        self._now = start.astimezone(timezone.utc)
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, delta: timedelta) -> datetime:
        """Avance l'horloge et retourne le nouvel instant."""
        if delta < timedelta(0):
            raise ValueError("Clock cannot go backwards")
        with self._lock:
            self._now = self._now + delta
            return self._now

    def set(self, moment: datetime) -> None:
        """Positionne l'horloge sur un instant donné."""
        if moment.tzinfo is None:
            raise ValueError("moment must be timezone-aware")
        with self._lock:
            self._now = moment.astimezone(timezone.utc)
