"""
StudyPlan Calendar — Calendar facade.

Answers "what happens on this day?" for the current dataset. Two freshness
tiers work together here:

- the events map is built through the content-addressed cache and may lag
  behind the live collections until the next refresh;
- every query filters the map against id sets taken from the LIVE
  collections, so a deleted subtheme, task, goal or project disappears
  immediately without a rebuild.

A query made on a later calendar day than the last build refreshes the map,
so day-relative semantics never go stale.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from studyplan.adapters.system_clock import SystemClock
from studyplan.core.dates import DateLike, calendar_day, date_key, month_grid
from studyplan.core.event_cache import EventsCache
from studyplan.core.event_map import EventsMap
from studyplan.core.events import (
    DayEvents,
    GoalOccurrence,
    GoalPhaseOccurrence,
    IntroEvent,
    MilestoneOccurrence,
    ProjectedReview,
    ProjectOccurrence,
    ReviewEvent,
    TaskOccurrence,
    ThemeStepOccurrence,
)
from studyplan.core.srs import project_reviews
from studyplan.data.models import Goal, Project, StudySnapshot, Task, Theme
from studyplan.ports.clock_port import Clock

logger = logging.getLogger(__name__)

_ACTIVE_REVIEW_COLOR = "#3b82f6"


# ---------------------------------------------------------------------------
# Live id filtering
# ---------------------------------------------------------------------------


@dataclass
class LiveIds:
    """Ids of the entities that currently exist."""

    subthemes: set[str] = field(default_factory=set)
    tasks: set[str] = field(default_factory=set)
    goals: set[str] = field(default_factory=set)
    projects: set[str] = field(default_factory=set)

    @classmethod
    def from_collections(
        cls,
        themes: list[Theme],
        tasks: list[Task],
        goals: list[Goal],
        projects: list[Project],
    ) -> LiveIds:
        return cls(
            subthemes={st.id for t in themes for st in t.subthemes},
            tasks={t.id for t in tasks},
            goals={g.id for g in goals},
            projects={p.id for p in projects},
        )

    def owns(self, event: Any) -> bool:
        """True if the entity behind ``event`` still exists."""
        if isinstance(event, (ReviewEvent, IntroEvent, ProjectedReview, ThemeStepOccurrence)):
            return event.subtheme_id in self.subthemes
        if isinstance(event, TaskOccurrence):
            return event.task_id in self.tasks
        if isinstance(event, GoalOccurrence):
            return event.goal_id in self.goals
        if isinstance(event, GoalPhaseOccurrence):
            return event.parent_goal_id in self.goals
        if isinstance(event, (ProjectOccurrence, MilestoneOccurrence)):
            return event.project_id in self.projects
        return True


def filter_day_events(day_events: DayEvents, live: LiveIds) -> DayEvents:
    """Drop events whose owning entity is gone."""
    return DayEvents(
        reviews=[e for e in day_events.reviews if live.owns(e)],
        intros=[e for e in day_events.intros if live.owns(e)],
        projected=[e for e in day_events.projected if live.owns(e)],
        tasks=[e for e in day_events.tasks if live.owns(e)],
        goals=[e for e in day_events.goals if live.owns(e)],
    )


# ---------------------------------------------------------------------------
# Upcoming reviews
# ---------------------------------------------------------------------------


@dataclass
class UpcomingReview:
    """One row of the upcoming-reviews list."""

    source: str                # "active" | "projected"
    subtheme_id: str
    subtheme_title: str
    theme_title: str
    number: int
    date: str                  # yyyy-MM-dd
    color: str | None = None


def upcoming_reviews(
    themes: list[Theme],
    projected: list[ProjectedReview],
    today: date,
    limit: int | None = None,
) -> list[UpcomingReview]:
    """Merge pending real reviews with projected ones from today on.

    Overdue pending reviews are kept (they still need doing); projected
    reviews before today are dropped. Sorted by date, truncated to ``limit``.
    """
    if limit is None:
        from studyplan.config import settings
        limit = settings.UPCOMING_REVIEWS_LIMIT

    rows: list[tuple[date, UpcomingReview]] = []
    for theme in themes:
        for st in theme.subthemes:
            for review in st.reviews:
                if review.status != "pending":
                    continue
                day = calendar_day(review.date)
                if day is None:
                    continue
                rows.append((day, UpcomingReview(
                    source="active",
                    subtheme_id=st.id,
                    subtheme_title=st.title,
                    theme_title=theme.title,
                    number=review.number,
                    date=day.isoformat(),
                    color=theme.color or _ACTIVE_REVIEW_COLOR,
                )))

    for p in projected:
        day = calendar_day(p.date)
        if day is None or day < today:
            continue
        rows.append((day, UpcomingReview(
            source="projected",
            subtheme_id=p.subtheme_id,
            subtheme_title=p.subtheme_title,
            theme_title=p.theme_title,
            number=p.number,
            date=day.isoformat(),
            color=p.color,
        )))

    rows.sort(key=lambda row: row[0])
    return [row for _, row in rows[:limit]]


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------


class StudyCalendar:
    """Day-query facade over the cached events map."""

    def __init__(
        self,
        themes: list[Theme] | None = None,
        tasks: list[Task] | None = None,
        goals: list[Goal] | None = None,
        projects: list[Project] | None = None,
        *,
        visible_days: list[date] | None = None,
        cache: EventsCache | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self._cache = cache or EventsCache()
        self._themes = list(themes or [])
        self._tasks = list(tasks or [])
        self._goals = list(goals or [])
        self._projects = list(projects or [])
        self._visible_days = (
            list(visible_days) if visible_days is not None
            else month_grid(self._clock.today())
        )
        self._events_map: EventsMap | None = None
        self._built_on: date | None = None

    @classmethod
    def from_snapshot(
        cls, snapshot: StudySnapshot | dict, **kwargs: Any,
    ) -> StudyCalendar:
        """Build a facade from a snapshot model or a raw data-layer dict."""
        if not isinstance(snapshot, StudySnapshot):
            snapshot = StudySnapshot.model_validate(snapshot)
        return cls(
            snapshot.themes, snapshot.tasks, snapshot.goals, snapshot.projects,
            **kwargs,
        )

    @property
    def visible_days(self) -> list[date]:
        return list(self._visible_days)

    @property
    def cache(self) -> EventsCache:
        return self._cache

    def set_visible_days(self, days: list[date]) -> None:
        """Change the on-screen range; the next query rebuilds."""
        self._visible_days = list(days)
        self._events_map = None

    def show_month(self, anchor: date) -> None:
        self.set_visible_days(month_grid(anchor))

    def update(
        self,
        *,
        themes: list[Theme] | None = None,
        tasks: list[Task] | None = None,
        goals: list[Goal] | None = None,
        projects: list[Project] | None = None,
    ) -> None:
        """Swap in new live collections without rebuilding the map.

        Deletions show up in queries right away; additions and edits
        appear after the next ``refresh()``.
        """
        if themes is not None:
            self._themes = list(themes)
        if tasks is not None:
            self._tasks = list(tasks)
        if goals is not None:
            self._goals = list(goals)
        if projects is not None:
            self._projects = list(projects)

    def projected_reviews(self) -> list[ProjectedReview]:
        return project_reviews(self._themes, self._clock.today())

    def refresh(self) -> EventsMap:
        """Rebuild the events map through the cache from the live collections."""
        today = self._clock.today()
        self._events_map = self._cache.get_or_build(
            self._themes,
            self._tasks,
            self._goals,
            self._projects,
            project_reviews(self._themes, today),
            self._visible_days,
            today=today,
        )
        self._built_on = today
        return self._events_map

    @property
    def events_map(self) -> EventsMap:
        """The current map, refreshed if never built or built on another day."""
        today = self._clock.today()
        if self._events_map is None or self._built_on != today:
            if self._built_on is not None and self._built_on != today:
                logger.debug("Calendar day changed since %s, refreshing", self._built_on)
            return self.refresh()
        return self._events_map

    def get_events_for_day(self, day: DateLike) -> DayEvents:
        """Events of one day, minus anything whose entity was deleted."""
        key = date_key(day)
        if key is None:
            logger.warning("get_events_for_day called with unparseable date %r", day)
            return DayEvents()
        day_events = self.events_map.get(key) or DayEvents()
        live = LiveIds.from_collections(
            self._themes, self._tasks, self._goals, self._projects,
        )
        return filter_day_events(day_events, live)

    def upcoming_reviews(self, limit: int | None = None) -> list[UpcomingReview]:
        today = self._clock.today()
        return upcoming_reviews(
            self._themes, project_reviews(self._themes, today), today, limit,
        )
