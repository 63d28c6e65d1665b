"""Tests for blogsmith.widgets."""

import datetime as dt
from dataclasses import replace

from blogsmith.widgets import build_calendar, build_search_index, build_stats


class TestBuildCalendar:
    def test_thirty_day_month_starting_wednesday(self):
        # November 2023 starts on a Wednesday
        calendar = build_calendar(dt.datetime(2023, 11, 15, 9, 30))
        days = calendar["days"]
        assert calendar["year"] == 2023
        assert calendar["month_name"] == "November"
        assert days[:3] == [{"date": None, "is_today": False}] * 3
        assert [day["date"] for day in days[3:]] == list(range(1, 31))
        today = [day for day in days if day["is_today"]]
        assert today == [{"date": 15, "is_today": True}]

    def test_month_starting_sunday_has_no_padding(self):
        # October 2023 starts on a Sunday
        days = build_calendar(dt.datetime(2023, 10, 1))["days"]
        assert days[0] == {"date": 1, "is_today": True}
        assert len(days) == 31

    def test_leap_february(self):
        # February 2024 starts on a Thursday
        days = build_calendar(dt.datetime(2024, 2, 29))["days"]
        assert [day["date"] for day in days[:4]] == [None, None, None, None]
        assert days[-1] == {"date": 29, "is_today": True}


class TestBuildStats:
    def test_counts(self, make_article):
        articles = [make_article("a"), make_article("b")]
        stats = build_stats(articles, {"x": articles}, {"t1": [], "t2": [], "t3": []})
        assert stats == {"total_posts": 2, "total_categories": 1, "total_tags": 3}


class TestBuildSearchIndex:
    def test_entry_shape(self, make_article):
        article = make_article("a", categories=["embedded"], tags=["c"], title="Title A")
        assert build_search_index([article]) == [
            {
                "title": "Title A",
                "slug": "a",
                "excerpt": "Excerpt of a",
                "tags": ["c"],
                "categories": ["embedded"],
            }
        ]

    def test_excerpt_is_truncated_to_one_hundred(self, make_article):
        article = replace(make_article("a"), excerpt="x" * 250)
        assert build_search_index([article])[0]["excerpt"] == "x" * 100
