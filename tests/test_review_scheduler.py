"""Tests for studyplan.core.review_scheduler — activation and completion."""

from datetime import date

import pytest

from studyplan.core.review_scheduler import (
    STEP_GAPS,
    activate_next_queued,
    complete_review,
    next_interval,
)
from studyplan.core.srs import generate_review_chain
from studyplan.data.models import Review, Subtheme, Theme


def _active(id_="s", start=date(2024, 6, 1)):
    return Subtheme(
        id=id_, title="Sub", status="active",
        introduction_date=start.isoformat(),
        reviews=generate_review_chain(start),
    )


class TestNextInterval:
    def test_gaps_follow_chain(self):
        assert STEP_GAPS == (1, 1, 5, 8, 15)

    @pytest.mark.parametrize("step,difficulty,expected", [
        (2, "medium", 5),
        (2, "easy", 9),
        (2, "hard", 3),
        (0, "hard", 1),
        (4, "easy", 27),
        (9, "medium", 15),
    ])
    def test_difficulty_scaling(self, step, difficulty, expected):
        assert next_interval(step, difficulty) == expected


class TestActivateNextQueued:
    def test_activates_first_queued_of_first_theme(self):
        themes = [
            Theme(id="t1", title="Done", subthemes=[_active("old", date(2024, 5, 1))]),
            Theme(id="t2", title="Next", subthemes=[
                Subtheme(id="a", title="A"), Subtheme(id="b", title="B"),
            ]),
            Theme(id="t3", title="Later", subthemes=[Subtheme(id="c", title="C")]),
        ]
        result = activate_next_queued(themes, date(2024, 6, 1), "2024-05-31")

        assert result is not None
        assert result.activated_subtheme_id == "a"
        assert result.processed_date == "2024-06-01"
        activated = result.themes[1].subthemes[0]
        assert activated.status == "active"
        assert activated.introduction_date == "2024-06-01"
        assert [r.date for r in activated.reviews][0] == "2024-06-02"
        assert result.themes[1].subthemes[1].status == "queue"
        assert result.themes[2].subthemes[0].status == "queue"
        # inputs untouched
        assert themes[1].subthemes[0].status == "queue"

    def test_nothing_when_already_introduced_and_processed(self):
        themes = [Theme(id="t", title="T", subthemes=[
            _active("x", date(2024, 6, 1)), Subtheme(id="q", title="Q"),
        ])]
        assert activate_next_queued(themes, date(2024, 6, 1), "2024-06-01") is None

    def test_intro_today_blocks_activation_but_marks_processed(self):
        themes = [Theme(id="t", title="T", subthemes=[
            _active("x", date(2024, 6, 1)), Subtheme(id="q", title="Q"),
        ])]
        result = activate_next_queued(themes, date(2024, 6, 1), "2024-05-31")
        assert result is not None
        assert result.activated_subtheme_id is None
        assert result.themes[0].subthemes[1].status == "queue"

    def test_empty_queue_already_processed(self):
        themes = [Theme(id="t", title="T", subthemes=[_active("x", date(2024, 5, 1))])]
        assert activate_next_queued(themes, date(2024, 6, 1), "2024-06-01") is None


class TestCompleteReview:
    def test_medium_keeps_standard_schedule(self):
        themes = [Theme(id="t", title="T", subthemes=[_active()])]
        result = complete_review(themes, "s", 1, date(2024, 6, 2))

        assert result.completed is True
        reviews = result.themes[0].subthemes[0].reviews
        assert reviews[0].status == "completed"
        assert reviews[0].completed_at == "2024-06-02"
        assert reviews[0].difficulty == "medium"
        assert [r.date for r in reviews[1:]] == [
            "2024-06-03", "2024-06-08", "2024-06-16", "2024-07-01",
        ]

    def test_easy_pushes_next_review(self):
        themes = [Theme(id="t", title="T", subthemes=[_active()])]
        result = complete_review(themes, "s", 1, date(2024, 6, 2), difficulty="easy")
        reviews = result.themes[0].subthemes[0].reviews
        assert reviews[1].date == "2024-06-04"
        assert reviews[2].date == "2024-06-09"

    def test_late_completion_reanchors_on_today(self):
        themes = [Theme(id="t", title="T", subthemes=[_active()])]
        result = complete_review(themes, "s", 1, date(2024, 6, 10))
        assert result.themes[0].subthemes[0].reviews[1].date == "2024-06-11"

    def test_future_review_not_completable(self):
        themes = [Theme(id="t", title="T", subthemes=[_active()])]
        result = complete_review(themes, "s", 2, date(2024, 6, 2))
        assert result.completed is False
        assert result.themes == themes

    def test_unknown_review_number(self):
        themes = [Theme(id="t", title="T", subthemes=[_active()])]
        assert complete_review(themes, "s", 9, date(2024, 6, 2)).completed is False

    def test_last_review_completes_subtheme(self):
        st = Subtheme(id="s", title="S", status="active", reviews=[
            Review(number=1, date="2024-06-02", status="completed"),
            Review(number=2, date="2024-06-03"),
        ])
        themes = [Theme(id="t", title="T", subthemes=[st])]
        result = complete_review(themes, "s", 2, date(2024, 6, 3))
        assert result.themes[0].subthemes[0].status == "completed"
