"""
StudyPlan Calendar — Content-addressed events map cache.

Building the events map walks every entity of the dataset, so the result is
memoized under a digest of the dataset CONTENT: new lists holding equal data
still hit the cache. The as-of date is part of the digest, which forces a
rebuild at least once per calendar day because completion and overdue
semantics are relative to today.

The cache holds exactly one entry (last build wins) and is owned by the
caller; nothing here is module-global.
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import date

from pydantic import BaseModel

from studyplan.core.dates import calendar_day
from studyplan.core.event_map import EventsMap, build_events_map
from studyplan.core.events import ProjectedReview
from studyplan.data.models import Goal, Project, Task, Theme

logger = logging.getLogger(__name__)


def _dump(items: list[BaseModel]) -> list[dict]:
    return [item.model_dump(mode="json") for item in items]


def _visible_interval(visible_days: list[date]) -> str:
    if not visible_days:
        return "empty"
    first = calendar_day(visible_days[0])
    last = calendar_day(visible_days[-1])
    return f"{first}-{last}"


def canonical_payload(
    themes: list[Theme],
    tasks: list[Task],
    goals: list[Goal],
    projects: list[Project],
    projected_reviews: list[ProjectedReview],
    visible_days: list[date],
    today: date,
) -> str:
    """Serialize everything that affects the events map, deterministically."""
    return json.dumps(
        {
            "themes": _dump(themes),
            "tasks": _dump(tasks),
            "goals": _dump(goals),
            "projects": _dump(projects),
            "projected": _dump(projected_reviews),
            "interval": _visible_interval(visible_days),
            "current_date": today.isoformat(),
        },
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def generate_cache_key(
    themes: list[Theme],
    tasks: list[Task],
    goals: list[Goal],
    projects: list[Project],
    projected_reviews: list[ProjectedReview],
    visible_days: list[date],
    today: date,
) -> str:
    """SHA-256 hex digest of the canonical payload."""
    payload = canonical_payload(
        themes, tasks, goals, projects, projected_reviews, visible_days, today,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class EventsCache:
    """Single-slot memo of the last built events map."""

    def __init__(self, verify_on_hit: bool | None = None) -> None:
        if verify_on_hit is None:
            from studyplan.config import settings
            verify_on_hit = settings.CACHE_VERIFY_ON_HIT

        self._verify_on_hit = verify_on_hit
        self._key: str | None = None
        self._payload: str | None = None
        self._data: EventsMap | None = None
        self.builds = 0
        self.hits = 0

    @property
    def key(self) -> str | None:
        """Digest of the cached build, or None when empty."""
        return self._key

    def clear(self) -> None:
        self._key = None
        self._payload = None
        self._data = None

    def get_or_build(
        self,
        themes: list[Theme],
        tasks: list[Task],
        goals: list[Goal],
        projects: list[Project],
        projected_reviews: list[ProjectedReview],
        visible_days: list[date],
        *,
        today: date,
    ) -> EventsMap:
        """Return the cached map when the content is unchanged, else rebuild."""
        payload = canonical_payload(
            themes, tasks, goals, projects, projected_reviews, visible_days, today,
        )
        key = hashlib.sha256(payload.encode("utf-8")).hexdigest()

        if self._data is not None and key == self._key:
            if not self._verify_on_hit or payload == self._payload:
                self.hits += 1
                logger.debug("Serving events map from cache (%s)", key[:12])
                return self._data
            logger.warning("Events cache digest collision on %s, rebuilding", key[:12])

        logger.debug("Rebuilding events map (%s)", key[:12])
        data = build_events_map(
            themes, tasks, goals, projects, projected_reviews, visible_days,
            today=today,
        )
        self._key = key
        self._payload = payload if self._verify_on_hit else None
        self._data = data
        self.builds += 1
        return data
