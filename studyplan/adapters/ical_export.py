"""iCalendar export adapter — renders an events map as a .ics calendar.

Every event becomes an all-day VEVENT on its bucket date. Expanded
occurrences are exported one per day; no RRULEs are emitted.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone

from icalendar import Calendar as iCalendar
from icalendar import Event as iEvent

from studyplan.core.event_map import EventsMap
from studyplan.core.events import (
    CalendarEvent,
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

logger = logging.getLogger(__name__)

_PRODID = "-//StudyPlan Calendar//EN"
_UID_DOMAIN = "studyplan.local"


def _summary(event: CalendarEvent) -> str:
    if isinstance(event, ReviewEvent):
        return f"Revisão #{event.number}: {event.subtheme_title} ({event.theme_title})"
    if isinstance(event, IntroEvent):
        return f"Introdução: {event.subtheme_title} ({event.theme_title})"
    if isinstance(event, ProjectedReview):
        return f"{event.description}: {event.subtheme_title} ({event.theme_title})"
    if isinstance(event, GoalPhaseOccurrence):
        return (
            f"{event.parent_goal_title}: {event.title} "
            f"(dia {event.current_day}/{event.total_days})"
        )
    if isinstance(event, MilestoneOccurrence):
        return f"{event.label}: {event.title} ({event.parent_title})"
    label = getattr(event, "label", None)
    title = getattr(event, "title", "")
    return f"{title} - {label}" if label else title


def _uid(event: CalendarEvent) -> str:
    if isinstance(event, (ReviewEvent, ProjectedReview)):
        owner = f"{event.subtheme_id}-{event.number}"
    elif isinstance(event, (IntroEvent, ThemeStepOccurrence)):
        owner = event.subtheme_id
    elif isinstance(event, TaskOccurrence):
        owner = event.task_id
    elif isinstance(event, GoalOccurrence):
        owner = event.goal_id
    elif isinstance(event, GoalPhaseOccurrence):
        owner = event.item_id
    elif isinstance(event, MilestoneOccurrence):
        owner = event.milestone_id
    elif isinstance(event, ProjectOccurrence):
        owner = event.project_id
    else:
        owner = "event"
    return f"{event.kind}-{owner}-{event.date}@{_UID_DOMAIN}"


def _build_vevent(event: CalendarEvent, stamp: datetime) -> iEvent:
    day = date.fromisoformat(event.date)
    vevent = iEvent()
    vevent.add("uid", _uid(event))
    vevent.add("dtstamp", stamp)
    vevent.add("dtstart", day)
    vevent.add("dtend", day + timedelta(days=1))
    vevent.add("summary", _summary(event))
    vevent.add("categories", [event.kind])
    vevent.add("status", "CONFIRMED")
    if getattr(event, "is_completed_today", False):
        vevent.add("description", "Concluído")
    return vevent


def export_events_map(
    events_map: EventsMap, stamp: datetime | None = None,
) -> bytes:
    """Render every event of the map as an all-day VEVENT.

    Args:
        events_map: Output of ``build_events_map`` (or a façade's map).
        stamp: DTSTAMP for all events; defaults to now (UTC).

    Returns:
        The serialized VCALENDAR.
    """
    stamp = stamp or datetime.now(timezone.utc)
    cal = iCalendar()
    cal.add("prodid", _PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")

    count = 0
    for key in sorted(events_map):
        day_events = events_map[key]
        for bucket in (
            day_events.reviews, day_events.intros, day_events.projected,
            day_events.tasks, day_events.goals,
        ):
            for event in bucket:
                cal.add_component(_build_vevent(event, stamp))
                count += 1

    logger.debug("Exported %d events over %d days", count, len(events_map))
    return cal.to_ical()
