"""Shared test fixtures and configuration.

Sets environment variables before any studyplan import so the settings
singleton is deterministic, and provides common dataset fixtures.
"""

import os

# Patch env vars BEFORE any studyplan imports
os.environ.setdefault("UPCOMING_REVIEWS_LIMIT", "15")
os.environ.setdefault("WEEK_STARTS_ON", "0")
os.environ.setdefault("CACHE_VERIFY_ON_HIT", "true")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import date, timedelta

import pytest


@pytest.fixture
def today():
    """Saturday, 1 June 2024."""
    return date(2024, 6, 1)


@pytest.fixture
def clock(today):
    from studyplan.adapters.system_clock import FixedClock
    return FixedClock(today)


@pytest.fixture
def june_days():
    """Every day of June 2024."""
    start = date(2024, 6, 1)
    return [start + timedelta(days=i) for i in range(30)]


@pytest.fixture
def study_theme():
    from studyplan.data.models import Review, Subtheme, Theme
    return Theme(
        id="th-1",
        title="React Hooks",
        color="#111111",
        priority="high",
        subthemes=[
            Subtheme(
                id="st-active",
                title="useState",
                status="active",
                introduction_date="2024-06-01",
                duration_minutes=25,
                reviews=[
                    Review(number=1, date="2024-06-02", status="completed"),
                    Review(number=2, date="2024-06-03"),
                    Review(number=3, date="2024-06-08"),
                ],
            ),
            Subtheme(id="st-queued", title="useEffect", status="queue"),
        ],
    )
