from __future__ import annotations

from typing import Sequence

from .content import Article

CATEGORY_WEIGHT = 2
TAG_WEIGHT = 1
RELATED_LIMIT = 3


def build_indices(articles: Sequence[Article]) -> tuple[dict[str, list[Article]], dict[str, list[Article]]]:
    """Group articles by category and by tag.

    Buckets keep corpus order. Labels are used exactly as written, so
    ``Python`` and ``python`` are separate buckets.
    """
    categories: dict[str, list[Article]] = {}
    tags: dict[str, list[Article]] = {}
    for article in articles:
        for category in article.categories:
            categories.setdefault(category, []).append(article)
        for tag in article.tags:
            tags.setdefault(tag, []).append(article)
    return categories, tags


def score_related(target: Article, candidate: Article) -> int:
    shared_categories = set(target.categories) & set(candidate.categories)
    shared_tags = set(target.tags) & set(candidate.tags)
    return CATEGORY_WEIGHT * len(shared_categories) + TAG_WEIGHT * len(shared_tags)


def related_articles(target: Article, corpus: Sequence[Article], limit: int = RELATED_LIMIT) -> list[Article]:
    """Return the ``limit`` closest articles to ``target``.

    Zero-score articles fill the list when fewer than ``limit`` share a
    label with the target. Ties keep corpus order.
    """
    candidates = [
        article for article in corpus if article is not target and article.slug != target.slug
    ]
    ranked = sorted(candidates, key=lambda article: score_related(target, article), reverse=True)
    return ranked[: max(0, limit)]
