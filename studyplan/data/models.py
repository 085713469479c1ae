"""
StudyPlan Calendar — Data Models.

The entities the calendar engine reads: themes with their subthemes and
reviews, tasks, goals and projects. They are owned by the data layer; the
engine only ever receives snapshots of them and never writes back.

Every field accepts both its snake_case name and the camelCase key used by
the data layer (e.g. ``introductionDate``), so raw records validate as-is.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Priority = Literal["low", "medium", "high"]


class Entity(BaseModel):
    """Base model: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Review(Entity):
    """One step of a subtheme's spaced-repetition chain.

    JSON example:
    {"number": 1, "date": "2024-06-03", "status": "pending"}
    """

    number: int
    date: str                          # YYYY-MM-DD
    status: Literal["pending", "completed"] = "pending"
    completed_at: str | None = None    # ISO 8601
    difficulty: Literal["easy", "medium", "hard"] | None = None


class Subtheme(Entity):
    """A study sub-item. Queued items have no reviews until started."""

    id: str
    title: str
    status: Literal["active", "completed", "queue"] = "queue"
    introduction_date: str | None = None   # when it moved from queue to active
    reviews: list[Review] = Field(default_factory=list)
    duration_minutes: int | None = None
    time_spent: int | None = None
    priority: Priority | None = None
    difficulty: str | None = None          # 'module' steps are never scheduled


class Theme(Entity):
    """A study topic (or, with category='project', a group of project steps)."""

    id: str
    title: str
    color: str | None = None
    category: Literal["study", "project"] = "study"
    priority: Priority | None = None
    subthemes: list[Subtheme] = Field(default_factory=list)


class Task(Entity):
    """A to-do with one of three recurrence models.

    - day: a single date
    - period: every day between start_date and end_date
    - recurring: every day whose weekday (0=Sunday..6=Saturday) is in recurrence
    """

    id: str
    title: str = ""
    type: Literal["day", "period", "recurring"] = "day"
    status: Literal["pending", "completed"] = "pending"
    priority: Priority | None = None
    date: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    recurrence: list[int] | None = None
    completion_history: list[str] = Field(default_factory=list)
    created_at: int | float | str | None = None   # epoch ms or date string
    color: str | None = None
    duration_minutes: int | None = None


class ChecklistItem(Entity):
    """One step of a checklist goal; its deadline closes a phase."""

    id: str
    title: str = ""
    deadline: str | None = None
    order: int = 0
    completion_history: list[str] = Field(default_factory=list)
    estimated_time: int | str | None = None   # minutes


class Goal(Entity):
    id: str
    title: str = ""
    type: Literal["simple", "checklist", "habit"] = "simple"
    progress: int = 0                  # 0-100
    start_date: str | None = None
    deadline: str | None = None
    recurrence: list[int] | None = None
    completion_history: list[str] = Field(default_factory=list)
    checklist: list[ChecklistItem] | None = None
    created_at: int | float | str | None = None
    color: str | None = None
    priority: Priority | None = None
    duration_minutes: int | None = None


class Milestone(Entity):
    id: str
    title: str = ""
    due_date: str | None = None
    completed: bool = False
    order: int = 0


class Project(Entity):
    id: str
    title: str = ""
    start_date: str | None = None
    deadline: str | None = None
    progress: int = 0
    color: str | None = None
    milestones: list[Milestone] = Field(default_factory=list)


class StudySnapshot(Entity):
    """A full dataset as handed over by the data layer."""

    themes: list[Theme] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
