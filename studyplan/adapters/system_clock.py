"""Clock adapters — implement Clock.

SystemClock reads the local wall clock; FixedClock returns whatever day it
was set to and can be moved forward, for tests and previews.
"""

from __future__ import annotations

from datetime import date, timedelta


class SystemClock:
    """Local-time implementation of Clock."""

    def today(self) -> date:
        return date.today()


class FixedClock:
    """Clock frozen on a given day."""

    def __init__(self, day: date) -> None:
        self._day = day

    def today(self) -> date:
        return self._day

    def set(self, day: date) -> None:
        self._day = day

    def advance(self, days: int = 1) -> None:
        self._day += timedelta(days=days)
