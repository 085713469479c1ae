"""
StudyPlan Calendar — Review lifecycle.

Pure transformations the data layer applies to themes before persisting
them: starting the next queued subtheme of the day, and completing a review
(which reschedules the reviews after it from the completion day).

Inputs are never mutated; updated copies are returned.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal

from studyplan.core.dates import calendar_day
from studyplan.core.srs import SRS_OFFSETS, generate_review_chain
from studyplan.data.models import Theme

logger = logging.getLogger(__name__)

Difficulty = Literal["easy", "medium", "hard"]

# Days between consecutive reviews of the standard chain
STEP_GAPS: tuple[int, ...] = tuple(
    later - earlier for earlier, later in zip((0, *SRS_OFFSETS), SRS_OFFSETS)
)


def next_interval(step_index: int, difficulty: Difficulty = "medium") -> int:
    """Days before review ``step_index`` (0-based), scaled by difficulty.

    easy → ceil(gap × 1.8); hard → max(1, floor(gap × 0.7)); medium → gap.
    """
    if 0 <= step_index < len(STEP_GAPS):
        base = STEP_GAPS[step_index]
    else:
        base = STEP_GAPS[-1]

    if difficulty == "easy":
        return math.ceil(base * 1.8)
    if difficulty == "hard":
        return max(1, math.floor(base * 0.7))
    return base


@dataclass
class ActivationResult:
    themes: list[Theme]
    processed_date: str                 # yyyy-MM-dd
    activated_subtheme_id: str | None = None


@dataclass
class CompletionResult:
    themes: list[Theme]
    completed: bool                     # False when nothing was changed


def activate_next_queued(
    themes: list[Theme], today: date, last_processed: str | None,
) -> ActivationResult | None:
    """Start at most one queued subtheme per day.

    The first queued subtheme of the first theme that has one becomes
    active, introduced today, with a fresh review chain. Nothing is
    activated if some subtheme was already introduced today.

    Returns None when there is nothing to persist.
    """
    today_key = today.isoformat()
    has_intro_today = any(
        calendar_day(st.introduction_date) == today
        for theme in themes
        for st in theme.subthemes
        if st.introduction_date
    )
    if has_intro_today and last_processed == today_key:
        return None

    activated: str | None = None
    updated: list[Theme] = []
    for theme in themes:
        if activated is None and not has_intro_today:
            idx = next(
                (i for i, st in enumerate(theme.subthemes) if st.status == "queue"),
                None,
            )
            if idx is not None:
                st = theme.subthemes[idx]
                subthemes = list(theme.subthemes)
                subthemes[idx] = st.model_copy(update={
                    "status": "active",
                    "introduction_date": today_key,
                    "reviews": generate_review_chain(today),
                })
                theme = theme.model_copy(update={"subthemes": subthemes})
                activated = st.id
                logger.info("Activated queued subtheme '%s' (%s)", st.title, theme.title)
        updated.append(theme)

    if activated is not None or last_processed != today_key:
        return ActivationResult(
            themes=updated, processed_date=today_key, activated_subtheme_id=activated,
        )
    return None


def complete_review(
    themes: list[Theme],
    subtheme_id: str,
    review_number: int,
    today: date,
    difficulty: Difficulty = "medium",
) -> CompletionResult:
    """Mark a review done and reschedule the ones after it.

    Reviews dated after today cannot be completed. Later reviews are
    re-anchored on today: the next one uses the chosen difficulty, the
    rest the standard gaps. The subtheme is completed once every review is.
    """
    completed = False
    updated: list[Theme] = []

    for theme in themes:
        subthemes = list(theme.subthemes)
        for pos, st in enumerate(subthemes):
            if st.id != subtheme_id:
                continue
            idx = next(
                (i for i, r in enumerate(st.reviews) if r.number == review_number),
                None,
            )
            if idx is None:
                logger.warning("Subtheme %s has no review #%d", subtheme_id, review_number)
                continue
            due = calendar_day(st.reviews[idx].date)
            if due is None or due > today:
                logger.info(
                    "Review #%d of %s is due %s, not completable on %s",
                    review_number, subtheme_id, st.reviews[idx].date, today,
                )
                continue

            reviews = list(st.reviews)
            reviews[idx] = reviews[idx].model_copy(update={
                "status": "completed",
                "completed_at": today.isoformat(),
                "difficulty": difficulty,
            })
            anchor = today
            for i in range(idx + 1, len(reviews)):
                step_difficulty = difficulty if i == idx + 1 else "medium"
                anchor += timedelta(days=next_interval(i, step_difficulty))
                reviews[i] = reviews[i].model_copy(update={"date": anchor.isoformat()})

            all_done = all(r.status == "completed" for r in reviews)
            subthemes[pos] = st.model_copy(update={
                "reviews": reviews,
                "status": "completed" if all_done else st.status,
            })
            completed = True

        if subthemes != theme.subthemes:
            theme = theme.model_copy(update={"subthemes": subthemes})
        updated.append(theme)

    return CompletionResult(themes=updated, completed=completed)
