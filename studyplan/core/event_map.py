"""
StudyPlan Calendar — Events map builder.

Fuses every recurrence model of the dataset into a single day index:

- fixed dates (day tasks, reviews, introductions, milestones, deadlines)
- date ranges (period tasks, goal/project start→deadline, checklist phases)
- weekly recurrence (recurring tasks, habits), expanded over visible days only
- SRS chains (projected reviews of queued subthemes)

Days without events are absent from the map. Completion is never asserted
for a day after ``today`` on range/deadline items, even when the entity is
100% done.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, timedelta

from studyplan.core.dates import calendar_day, each_day, weekday_index
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
from studyplan.data.models import Goal, Project, Task, Theme

logger = logging.getLogger(__name__)

EventsMap = dict[str, DayEvents]

_REVIEW_COLOR = "#3b82f6"
_INTRO_COLOR = "#f59e0b"
_PROJECT_COLOR = "#8b5cf6"
_PHASE_COLOR = "#ec4899"
_GOAL_COLOR = "#3b82f6"

_LEADING_INT = re.compile(r"^\s*(\d+)")


def _day(events: EventsMap, key: str) -> DayEvents:
    if key not in events:
        events[key] = DayEvents()
    return events[key]


def _completed_on(history: list[str], key: str) -> bool:
    return any(entry.startswith(key) for entry in history)


def _range_label(day: date, start: date, end: date, end_first: bool) -> str:
    """Início / Em andamento / Prazo; ``end_first`` decides single-day ranges."""
    if end_first and day == end:
        return "Prazo"
    if day == start:
        return "Início"
    if day == end:
        return "Prazo"
    return "Em andamento"


def _minutes(raw: int | str | None) -> int:
    if isinstance(raw, int):
        return raw
    match = _LEADING_INT.match(raw or "")
    return int(match.group(1)) if match else 0


def _within(day: date, start: date | None, end: date | None) -> bool:
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


# ---------------------------------------------------------------------------
# Themes
# ---------------------------------------------------------------------------


def _add_study_theme(events: EventsMap, theme: Theme) -> None:
    for st in theme.subthemes:
        priority = theme.priority or st.priority
        for review in st.reviews:
            day = calendar_day(review.date)
            if day is None:
                logger.warning(
                    "Skipping review #%d of '%s': bad date %r",
                    review.number, st.title, review.date,
                )
                continue
            key = day.isoformat()
            _day(events, key).reviews.append(ReviewEvent(
                date=key,
                subtheme_id=st.id,
                subtheme_title=st.title,
                theme_title=theme.title,
                number=review.number,
                status=review.status,
                color=theme.color or _REVIEW_COLOR,
                priority=priority,
                duration_minutes=st.duration_minutes,
                time_spent=st.time_spent,
            ))

        if st.introduction_date:
            day = calendar_day(st.introduction_date)
            if day is None:
                logger.warning(
                    "Skipping intro of '%s': bad date %r", st.title, st.introduction_date,
                )
                continue
            key = day.isoformat()
            _day(events, key).intros.append(IntroEvent(
                date=key,
                subtheme_id=st.id,
                subtheme_title=st.title,
                theme_title=theme.title,
                color=theme.color or _INTRO_COLOR,
                priority=priority,
                duration_minutes=st.duration_minutes,
                time_spent=st.time_spent,
            ))


def _add_project_theme(events: EventsMap, theme: Theme) -> None:
    for st in theme.subthemes:
        if st.difficulty == "module" or not st.introduction_date:
            continue
        day = calendar_day(st.introduction_date)
        if day is None:
            logger.warning(
                "Skipping project step '%s': bad date %r", st.title, st.introduction_date,
            )
            continue
        done = st.status == "completed"
        key = day.isoformat()
        _day(events, key).tasks.append(ThemeStepOccurrence(
            date=key,
            subtheme_id=st.id,
            title=f"{st.title} ({theme.title})",
            status="completed" if done else "pending",
            priority=theme.priority or st.priority,
            color=theme.color or _PROJECT_COLOR,
            is_completed_today=done,
        ))


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


def _task_occurrence(task: Task, key: str, **extra) -> TaskOccurrence:
    return TaskOccurrence(
        date=key,
        task_id=task.id,
        title=task.title,
        task_type=task.type,
        color=task.color,
        priority=task.priority,
        duration_minutes=task.duration_minutes,
        **extra,
    )


def _add_task(
    events: EventsMap, task: Task, visible_days: list[date], today: date,
) -> None:
    if task.type == "day":
        day = calendar_day(task.date)
        if day is None:
            logger.debug("Task %s has no usable date, skipped", task.id)
            return
        key = day.isoformat()
        _day(events, key).tasks.append(_task_occurrence(
            task, key, is_completed_today=task.status == "completed",
        ))

    elif task.type == "period":
        start = calendar_day(task.start_date)
        end = calendar_day(task.end_date)
        if start is None or end is None:
            logger.debug("Period task %s lacks start/end date, skipped", task.id)
            return
        for day in each_day(start, end):
            key = day.isoformat()
            _day(events, key).tasks.append(_task_occurrence(
                task, key,
                label=_range_label(day, start, end, end_first=False),
                is_completed_today=day <= today and _completed_on(task.completion_history, key),
            ))

    elif task.type == "recurring":
        if not task.recurrence:
            return
        created = calendar_day(task.created_at)
        end = calendar_day(task.end_date)
        for day in visible_days:
            if not _within(day, created, end):
                continue
            if weekday_index(day) not in task.recurrence:
                continue
            key = day.isoformat()
            _day(events, key).tasks.append(_task_occurrence(
                task, key,
                is_completed_today=_completed_on(task.completion_history, key),
            ))


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


def _add_checklist_phases(events: EventsMap, goal: Goal, today: date) -> None:
    """Each item deadline closes a phase; the next phase starts the day after."""
    phase_start = calendar_day(goal.start_date) if goal.start_date else calendar_day(goal.created_at)
    if phase_start is None:
        logger.debug("Checklist goal %s has no start date, phases skipped", goal.id)
        return

    for item in sorted(goal.checklist or [], key=lambda i: i.order):
        if not item.deadline:
            logger.debug("Checklist item %s has no deadline, skipped", item.id)
            continue
        phase_end = calendar_day(item.deadline)
        if phase_end is None:
            logger.warning("Checklist item %s: bad deadline %r", item.id, item.deadline)
            continue

        total_days = (phase_end - phase_start).days + 1
        checked = {entry.split("T")[0] for entry in item.completion_history}
        progress = 0
        if total_days > 0:
            first, last = phase_start.isoformat(), phase_end.isoformat()
            in_phase = sum(1 for key in checked if first <= key <= last)
            # half-up rounding, clamped
            progress = min(100, math.floor(in_phase / total_days * 100 + 0.5))

        for day in each_day(phase_start, phase_end):
            key = day.isoformat()
            _day(events, key).goals.append(GoalPhaseOccurrence(
                date=key,
                item_id=item.id,
                title=item.title,
                parent_goal_id=goal.id,
                parent_goal_title=goal.title,
                deadline=phase_end.isoformat(),
                color=goal.color or _PHASE_COLOR,
                priority=goal.priority,
                duration_minutes=_minutes(item.estimated_time),
                phase_progress=progress,
                current_day=(day - phase_start).days + 1,
                total_days=total_days,
                is_completed_today=day <= today and key in checked,
            ))

        phase_start = phase_end + timedelta(days=1)


def _goal_occurrence(goal: Goal, key: str, **extra) -> GoalOccurrence:
    return GoalOccurrence(
        date=key,
        goal_id=goal.id,
        title=goal.title,
        goal_type=goal.type,
        progress=goal.progress,
        color=goal.color or _GOAL_COLOR,
        priority=goal.priority,
        duration_minutes=goal.duration_minutes,
        **extra,
    )


def _add_goal(
    events: EventsMap, goal: Goal, visible_days: list[date], today: date,
) -> None:
    if goal.type == "checklist" and goal.checklist:
        _add_checklist_phases(events, goal, today)

    if goal.type == "habit":
        created = calendar_day(goal.created_at)
        deadline = calendar_day(goal.deadline)
        for day in visible_days:
            if not _within(day, created, deadline):
                continue
            if goal.recurrence and weekday_index(day) not in goal.recurrence:
                continue
            key = day.isoformat()
            _day(events, key).goals.append(_goal_occurrence(
                goal, key,
                is_completed_today=_completed_on(goal.completion_history, key),
            ))
        return

    if not goal.deadline:
        return
    end = calendar_day(goal.deadline)
    if end is None:
        logger.warning("Goal %s: bad deadline %r", goal.id, goal.deadline)
        return
    done = goal.progress == 100
    start = calendar_day(goal.start_date)

    if start is None:
        key = end.isoformat()
        _day(events, key).goals.append(_goal_occurrence(
            goal, key, label="Prazo", is_completed_today=done and end <= today,
        ))
        return

    for day in each_day(start, end):
        key = day.isoformat()
        _day(events, key).goals.append(_goal_occurrence(
            goal, key,
            label=_range_label(day, start, end, end_first=True),
            is_completed_today=day == end and done and day <= today,
        ))


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


def _add_project(events: EventsMap, project: Project, today: date) -> None:
    color = project.color or _PROJECT_COLOR
    done = project.progress == 100
    start = calendar_day(project.start_date)
    end = calendar_day(project.deadline)

    if start is not None and end is not None:
        for day in each_day(start, end):
            key = day.isoformat()
            if day == end:
                kind, label, priority = "project-deadline", "Prazo Projeto", "high"
            elif day == start:
                kind, label, priority = "project-start", "Início Projeto", "medium"
            else:
                kind, label, priority = "project-step", "Projeto em Andamento", "medium"
            _day(events, key).goals.append(ProjectOccurrence(
                kind=kind,
                date=key,
                project_id=project.id,
                title=project.title,
                label=label,
                color=color,
                priority=priority,
                is_completed_today=day == end and done and day <= today,
            ))
    elif end is not None:
        key = end.isoformat()
        _day(events, key).goals.append(ProjectOccurrence(
            kind="project-deadline",
            date=key,
            project_id=project.id,
            title=project.title,
            label="Prazo Final",
            color=color,
            priority="high",
            is_completed_today=done and end <= today,
        ))

    for milestone in project.milestones:
        due = calendar_day(milestone.due_date)
        if due is None:
            continue
        key = due.isoformat()
        _day(events, key).goals.append(MilestoneOccurrence(
            date=key,
            milestone_id=milestone.id,
            project_id=project.id,
            title=milestone.title,
            parent_title=project.title,
            color=color,
            is_completed_today=milestone.completed,
        ))


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


def build_events_map(
    themes: list[Theme],
    tasks: list[Task],
    goals: list[Goal],
    projects: list[Project],
    projected_reviews: list[ProjectedReview],
    visible_days: list[date],
    *,
    today: date,
) -> EventsMap:
    """Build the ``yyyy-MM-dd`` → DayEvents index for a dataset snapshot.

    Args:
        themes: Study and project-category themes.
        tasks: Day, period and recurring tasks.
        goals: Simple, checklist and habit goals.
        projects: Projects with optional start/deadline and milestones.
        projected_reviews: Output of ``project_reviews`` for the same themes.
        visible_days: The calendar range on screen; weekly recurrences are
            only expanded over these days.
        today: The as-of date for completion semantics.

    Returns:
        Dict keyed by ``yyyy-MM-dd``; days without events are absent.
    """
    events: EventsMap = {}
    days = [d for d in (calendar_day(v) for v in visible_days) if d is not None]

    for theme in themes:
        if theme.category == "project":
            _add_project_theme(events, theme)
        else:
            _add_study_theme(events, theme)

    for projected in projected_reviews:
        key = calendar_day(projected.date)
        if key is not None:
            _day(events, key.isoformat()).projected.append(projected)

    for task in tasks:
        _add_task(events, task, days, today)

    for goal in goals:
        _add_goal(events, goal, days, today)

    for project in projects:
        _add_project(events, project, today)

    logger.debug(
        "Built events map: %d days with events (%d visible days)",
        len(events), len(days),
    )
    return events
