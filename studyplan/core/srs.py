"""
StudyPlan Calendar — Spaced repetition chain and review projection.

The review schedule is fixed, not adaptive: every subtheme is reviewed
1, 2, 7, 15 and 30 days after it is introduced (short intervals first for
consolidation, widening ones for long-term retention).

Queued subthemes have no reviews yet. To preview the workload they are
staggered one per day, in the order they appear across ALL themes, starting
tomorrow, and each is expanded into its full five-step chain.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from studyplan.core.dates import DateLike, calendar_day, to_local_date
from studyplan.core.events import ProjectedReview
from studyplan.data.models import Review, Theme

logger = logging.getLogger(__name__)

# Cumulative days after the start date (gaps: 1, 1, 5, 8, 15)
SRS_OFFSETS: tuple[int, ...] = (1, 2, 7, 15, 30)


def generate_review_chain(start_date: DateLike) -> list[Review]:
    """Build the five pending reviews that follow ``start_date``.

    Raises ValueError if ``start_date`` cannot be parsed.
    """
    start = to_local_date(start_date)
    if start is None:
        raise ValueError(f"Cannot build a review chain from {start_date!r}")
    return [
        Review(
            number=idx,
            date=(start + timedelta(days=offset)).isoformat(),
            status="pending",
        )
        for idx, offset in enumerate(SRS_OFFSETS, start=1)
    ]


def queued_start_dates(themes: list[Theme], today: date) -> dict[str, str]:
    """Map each queued subtheme id to its projected start (today + n)."""
    starts: dict[str, str] = {}
    n = 0
    for theme in themes:
        for st in theme.subthemes:
            if st.status == "queue":
                n += 1
                starts[st.id] = (today + timedelta(days=n)).isoformat()
    return starts


def project_reviews(themes: list[Theme], today: date) -> list[ProjectedReview]:
    """Project the review chains of every queued subtheme.

    The n-th queued subtheme (counted across all themes) starts on
    today + n. Output keeps insertion order: theme, subtheme, review.
    """
    projected: list[ProjectedReview] = []
    queued = 0
    for theme in themes:
        for st in theme.subthemes:
            if st.status != "queue":
                continue
            queued += 1
            for review in generate_review_chain(today + timedelta(days=queued)):
                projected.append(ProjectedReview(
                    subtheme_id=st.id,
                    subtheme_title=st.title,
                    theme_title=theme.title,
                    date=review.date,
                    number=review.number,
                    description=f"Revisão #{review.number} (Prevista)",
                    color=theme.color,
                ))

    logger.debug(
        "Projected %d reviews for %d queued subthemes", len(projected), queued,
    )
    return projected


def theme_completion_date(
    theme: Theme, queued_starts: dict[str, str],
) -> date | None:
    """Estimate when the last review of a theme will happen.

    Active/completed subthemes contribute their last review date; queued
    ones contribute their projected start plus the final chain offset.
    """
    finish: date | None = None
    for st in theme.subthemes:
        candidate: date | None = None
        if st.status == "queue":
            start = to_local_date(queued_starts.get(st.id))
            if start is not None:
                candidate = start + timedelta(days=SRS_OFFSETS[-1])
        elif st.reviews:
            candidate = calendar_day(st.reviews[-1].date)
        if candidate is not None and (finish is None or candidate > finish):
            finish = candidate
    return finish
