from __future__ import annotations

import calendar
import datetime as dt
from typing import Mapping, Sequence

from .content import Article

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
SEARCH_EXCERPT_LENGTH = 100


def build_calendar(now: dt.datetime) -> dict:
    """Month grid for the sidebar calendar, Sunday in the first column."""
    first_weekday, days_in_month = calendar.monthrange(now.year, now.month)
    # monthrange counts Monday as 0
    padding = (first_weekday + 1) % 7
    days = [{"date": None, "is_today": False} for _ in range(padding)]
    for day in range(1, days_in_month + 1):
        days.append({"date": day, "is_today": day == now.day})
    return {
        "year": now.year,
        "month": now.month,
        "month_name": MONTH_NAMES[now.month - 1],
        "days": days,
    }


def build_stats(articles: Sequence[Article], categories: Mapping, tags: Mapping) -> dict:
    return {
        "total_posts": len(articles),
        "total_categories": len(categories),
        "total_tags": len(tags),
    }


def build_search_index(articles: Sequence[Article]) -> list[dict]:
    return [
        {
            "title": article.title,
            "slug": article.slug,
            "excerpt": article.excerpt[:SEARCH_EXCERPT_LENGTH],
            "tags": list(article.tags),
            "categories": list(article.categories),
        }
        for article in articles
    ]
