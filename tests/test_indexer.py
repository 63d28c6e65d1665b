"""Tests for blogsmith.indexer."""

from blogsmith.indexer import build_indices, related_articles, score_related


class TestBuildIndices:
    def test_two_article_scenario(self, make_article):
        a = make_article("a", "2024-01-02", ["embedded"], ["c", "arm"])
        b = make_article("b", "2024-01-01", ["embedded"], ["c"])
        categories, tags = build_indices([a, b])
        assert categories == {"embedded": [a, b]}
        assert tags == {"c": [a, b], "arm": [a]}

    def test_bucket_membership_is_exact(self, make_article):
        corpus = [
            make_article("x", categories=["one", "two"], tags=["t1"]),
            make_article("y", categories=["two"], tags=["t2"]),
            make_article("z"),
        ]
        categories, tags = build_indices(corpus)
        for label, bucket in categories.items():
            assert bucket == [article for article in corpus if label in article.categories]
        for label, bucket in tags.items():
            assert bucket == [article for article in corpus if label in article.tags]

    def test_empty_labels_create_no_buckets(self, make_article):
        categories, tags = build_indices([make_article("plain")])
        assert categories == {}
        assert tags == {}

    def test_labels_are_case_sensitive(self, make_article):
        categories, _ = build_indices(
            [make_article("a", categories=["Python"]), make_article("b", categories=["python"])]
        )
        assert set(categories) == {"Python", "python"}

    def test_bucket_order_follows_first_appearance(self, make_article):
        corpus = [make_article("a", tags=["z"]), make_article("b", tags=["a", "z"])]
        _, tags = build_indices(corpus)
        assert list(tags) == ["z", "a"]


class TestRelatedArticles:
    def test_scenario_score(self, make_article):
        a = make_article("a", "2024-01-02", ["embedded"], ["c", "arm"])
        b = make_article("b", "2024-01-01", ["embedded"], ["c"])
        assert score_related(a, b) == 3
        assert related_articles(a, [a, b]) == [b]

    def test_never_includes_target(self, make_article):
        corpus = [make_article(slug, tags=["t"]) for slug in "abcde"]
        for article in corpus:
            assert article not in related_articles(article, corpus)

    def test_limit_and_corpus_size(self, make_article):
        corpus = [make_article(slug) for slug in "abcde"]
        assert len(related_articles(corpus[0], corpus)) == 3
        assert len(related_articles(corpus[0], corpus[:2])) == 1
        assert related_articles(corpus[0], corpus[:1]) == []
        assert len(related_articles(corpus[0], corpus, limit=10)) == 4

    def test_sorted_by_score(self, make_article):
        target = make_article("t", categories=["hw"], tags=["c", "arm"])
        corpus = [
            target,
            make_article("tag-only", tags=["c"]),
            make_article("nothing"),
            make_article("both", categories=["hw"], tags=["c", "arm"]),
            make_article("category-only", categories=["hw"]),
        ]
        related = related_articles(target, corpus)
        assert [article.slug for article in related] == ["both", "category-only", "tag-only"]
        scores = [score_related(target, article) for article in related]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_corpus_order(self, make_article):
        target = make_article("t")
        corpus = [make_article(slug) for slug in "pqrs"] + [target]
        assert [article.slug for article in related_articles(target, corpus)] == ["p", "q", "r"]

    def test_zero_score_entries_fill_the_list(self, make_article):
        target = make_article("t", tags=["c"])
        corpus = [target, make_article("unrelated"), make_article("match", tags=["c"])]
        assert [article.slug for article in related_articles(target, corpus)] == ["match", "unrelated"]
