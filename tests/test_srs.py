"""Tests for studyplan.core.srs — review chain and queue projection."""

from datetime import date, timedelta

import pytest

from studyplan.core.srs import (
    SRS_OFFSETS,
    generate_review_chain,
    project_reviews,
    queued_start_dates,
    theme_completion_date,
)
from studyplan.data.models import Review, Subtheme, Theme


def _queued(id_, title="Item"):
    return Subtheme(id=id_, title=title, status="queue")


class TestGenerateReviewChain:
    @pytest.mark.parametrize("start", [date(2024, 1, 1), date(2024, 2, 28), date(2023, 12, 20)])
    def test_chain_shape(self, start):
        chain = generate_review_chain(start)
        assert [r.number for r in chain] == [1, 2, 3, 4, 5]
        assert all(r.status == "pending" for r in chain)
        assert [r.date for r in chain] == [
            (start + timedelta(days=o)).isoformat() for o in (1, 2, 7, 15, 30)
        ]

    def test_accepts_string(self):
        chain = generate_review_chain("2024-06-02")
        assert chain[0].date == "2024-06-03"

    def test_offsets_constant(self):
        assert SRS_OFFSETS == (1, 2, 7, 15, 30)

    def test_unparseable_start_raises(self):
        with pytest.raises(ValueError):
            generate_review_chain("whenever")


class TestProjectReviews:
    def test_single_queued_subtheme(self):
        themes = [Theme(id="t", title="Theme", color="#abc", subthemes=[_queued("s1", "Sub")])]
        projected = project_reviews(themes, date(2024, 6, 1))

        assert [p.date for p in projected] == [
            "2024-06-03", "2024-06-04", "2024-06-09", "2024-06-17", "2024-07-02",
        ]
        assert projected[0].description == "Revisão #1 (Prevista)"
        assert projected[4].description == "Revisão #5 (Prevista)"
        assert all(p.is_projected for p in projected)
        assert all(p.color == "#abc" for p in projected)
        assert projected[0].subtheme_title == "Sub"
        assert projected[0].theme_title == "Theme"

    def test_counter_shared_across_themes(self):
        themes = [
            Theme(id="a", title="A", subthemes=[_queued("a1"), _queued("a2")]),
            Theme(id="b", title="B", subthemes=[_queued("b1")]),
        ]
        today = date(2024, 6, 1)
        starts = queued_start_dates(themes, today)
        assert starts == {
            "a1": "2024-06-02",
            "a2": "2024-06-03",
            "b1": "2024-06-04",
        }
        projected = project_reviews(themes, today)
        first_reviews = [p for p in projected if p.number == 1]
        assert [p.subtheme_id for p in first_reviews] == ["a1", "a2", "b1"]
        assert [p.date for p in first_reviews] == ["2024-06-03", "2024-06-04", "2024-06-05"]

    def test_non_queued_subthemes_ignored(self):
        themes = [Theme(id="t", title="T", subthemes=[
            Subtheme(id="x", title="X", status="active"),
            _queued("q"),
            Subtheme(id="y", title="Y", status="completed"),
        ])]
        projected = project_reviews(themes, date(2024, 6, 1))
        assert {p.subtheme_id for p in projected} == {"q"}
        assert projected[0].date == "2024-06-03"

    def test_insertion_order_not_date_sorted(self):
        themes = [Theme(id="t", title="T", subthemes=[_queued("q1"), _queued("q2")])]
        projected = project_reviews(themes, date(2024, 6, 1))
        assert [p.subtheme_id for p in projected] == ["q1"] * 5 + ["q2"] * 5

    def test_no_themes(self):
        assert project_reviews([], date(2024, 6, 1)) == []


class TestThemeCompletionDate:
    def test_latest_of_reviews_and_projection(self):
        theme = Theme(id="t", title="T", subthemes=[
            Subtheme(id="a", title="A", status="active", reviews=[
                Review(number=1, date="2024-06-02"),
                Review(number=5, date="2024-07-01"),
            ]),
            _queued("q"),
        ])
        starts = queued_start_dates([theme], date(2024, 6, 1))
        assert theme_completion_date(theme, starts) == date(2024, 7, 2)

    def test_empty_theme(self):
        assert theme_completion_date(Theme(id="t", title="T"), {}) is None
