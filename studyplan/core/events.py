"""
StudyPlan Calendar — Calendar event types.

Every entry of the day map is one variant of a closed tagged union,
discriminated by ``kind``. Each variant carries only the fields that make
sense for it, plus the id of the entity that owns it so deleted entities
can be filtered out at query time.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from studyplan.data.models import Priority


class CalendarEvent(BaseModel):
    """Base for all event variants."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    date: str   # yyyy-MM-dd bucket key
    color: str | None = None


# ---------------------------------------------------------------------------
# Study events
# ---------------------------------------------------------------------------

class ReviewEvent(CalendarEvent):
    """A scheduled review of an active (or completed) subtheme."""

    kind: Literal["review"] = "review"
    subtheme_id: str
    subtheme_title: str
    theme_title: str
    number: int
    status: Literal["pending", "completed"] = "pending"
    priority: Priority | None = None
    duration_minutes: int | None = None
    time_spent: int | None = None


class IntroEvent(CalendarEvent):
    """The day a subtheme is first studied."""

    kind: Literal["intro"] = "intro"
    subtheme_id: str
    subtheme_title: str
    theme_title: str
    priority: Priority | None = None
    duration_minutes: int | None = None
    time_spent: int | None = None


class ProjectedReview(CalendarEvent):
    """A synthetic future review of a queued subtheme. Never persisted.

    JSON example:
    {
        "kind": "projected",
        "subthemeId": "st-1",
        "subthemeTitle": "useState",
        "themeTitle": "React Hooks",
        "date": "2024-06-03",
        "number": 1,
        "description": "Revisão #1 (Prevista)",
        "isProjected": true
    }
    """

    kind: Literal["projected"] = "projected"
    subtheme_id: str
    subtheme_title: str
    theme_title: str
    number: int
    description: str
    is_projected: Literal[True] = True


# ---------------------------------------------------------------------------
# Task bucket
# ---------------------------------------------------------------------------

class TaskOccurrence(CalendarEvent):
    kind: Literal["task"] = "task"
    task_id: str
    title: str
    task_type: Literal["day", "period", "recurring"]
    label: str | None = None    # Início / Em andamento / Prazo for periods
    priority: Priority | None = None
    duration_minutes: int | None = None
    is_completed_today: bool = False


class ThemeStepOccurrence(CalendarEvent):
    """A step of a project-category theme, scheduled on its introduction date."""

    kind: Literal["project-step"] = "project-step"
    subtheme_id: str
    title: str
    status: Literal["pending", "completed"] = "pending"
    priority: Priority | None = None
    is_completed_today: bool = False


# ---------------------------------------------------------------------------
# Goal bucket
# ---------------------------------------------------------------------------

class GoalOccurrence(CalendarEvent):
    """A habit day or a day of a goal's start/deadline range."""

    kind: Literal["goal"] = "goal"
    goal_id: str
    title: str
    goal_type: Literal["simple", "checklist", "habit"]
    label: str | None = None
    progress: int = 0
    priority: Priority | None = None
    duration_minutes: int | None = None
    is_completed_today: bool = False


class GoalPhaseOccurrence(CalendarEvent):
    """A day inside one phase of a checklist goal."""

    kind: Literal["goal-phase"] = "goal-phase"
    item_id: str
    title: str
    parent_goal_id: str
    parent_goal_title: str
    deadline: str
    priority: Priority | None = None
    duration_minutes: int = 0
    phase_progress: int = 0     # 0-100
    current_day: int            # 1-based position inside the phase
    total_days: int
    is_completed_today: bool = False


class ProjectOccurrence(CalendarEvent):
    kind: Literal["project-start", "project-step", "project-deadline"]
    project_id: str
    title: str
    label: str
    priority: Priority = "medium"
    is_completed_today: bool = False


class MilestoneOccurrence(CalendarEvent):
    kind: Literal["project-milestone"] = "project-milestone"
    milestone_id: str
    project_id: str
    title: str
    parent_title: str
    label: str = "Marco"
    priority: Priority = "medium"
    is_completed_today: bool = False


TaskBucketEvent = Annotated[
    TaskOccurrence | ThemeStepOccurrence, Field(discriminator="kind")
]
GoalBucketEvent = Annotated[
    GoalOccurrence | GoalPhaseOccurrence | ProjectOccurrence | MilestoneOccurrence,
    Field(discriminator="kind"),
]


class DayEvents(BaseModel):
    """All events of one calendar day, grouped by bucket."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    reviews: list[ReviewEvent] = Field(default_factory=list)
    intros: list[IntroEvent] = Field(default_factory=list)
    projected: list[ProjectedReview] = Field(default_factory=list)
    tasks: list[TaskBucketEvent] = Field(default_factory=list)
    goals: list[GoalBucketEvent] = Field(default_factory=list)

    def total(self) -> int:
        return (
            len(self.reviews) + len(self.intros) + len(self.projected)
            + len(self.tasks) + len(self.goals)
        )

    def is_empty(self) -> bool:
        return self.total() == 0
