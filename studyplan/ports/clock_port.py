"""Clock port — abstract source of the as-of date.

Core modules never read the system clock directly; they ask a Clock, so
tests can freeze time by injecting a fixed one.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol


class Clock(Protocol):
    """Abstract clock used by the calendar facade."""

    def today(self) -> date: ...
