from __future__ import annotations

import datetime as dt
import sys
from pathlib import Path
from typing import Mapping, Sequence

from .config import SiteConfig
from .content import Article
from .errors import RenderError
from .indexer import related_articles
from .render import write_text
from .slugs import slugify
from .templates import TemplateRenderer
from .widgets import build_calendar, build_search_index, build_stats

TAXONOMY_DIRS = {"category": "categories", "tag": "tags"}
TAXONOMY_TITLES = {"category": "Categories", "tag": "Tags"}


class PageWriter:
    """Renders templates to files under ``output_dir``.

    Template evaluation failures are collected instead of raised so one
    broken page does not hide the others.
    """

    def __init__(self, renderer: TemplateRenderer, output_dir: Path):
        self.renderer = renderer
        self.output_dir = output_dir
        self.written: dict[Path, str] = {}
        self.failures: list[str] = []

    def write(self, template: str, rel_path: str, context: Mapping, label: str) -> None:
        path = self.output_dir / rel_path
        previous = self.written.get(path)
        if previous is not None:
            print(
                f"Warning: {rel_path} is generated by both {previous} and {label}; keeping {label}.",
                file=sys.stderr,
            )
        try:
            html_doc = self.renderer.render(template, context)
        except RenderError as exc:
            self.failures.append(f"{label}: {exc}")
            return
        write_text(path, html_doc)
        self.written[path] = label


def build_context(
    config: SiteConfig,
    articles: Sequence[Article],
    categories: Mapping[str, list[Article]],
    tags: Mapping[str, list[Article]],
    now: dt.datetime,
) -> dict:
    return {
        "site": config.site,
        "config": config.raw,
        "posts": list(articles),
        "categories": categories,
        "tags": tags,
        "stats": build_stats(articles, categories, tags),
        "calendar": build_calendar(now),
        "search_index": build_search_index(articles),
        "now": now,
        "root": ".",
        "page_title": "",
    }


def build_index(writer: PageWriter, context: Mapping) -> None:
    writer.write("index.html", "index.html", {**context, "root": "."}, "home page")


def build_posts(writer: PageWriter, context: Mapping, articles: Sequence[Article]) -> None:
    for article in articles:
        page_context = {
            **context,
            "root": "..",
            "page_title": article.title,
            "post": article,
            "related_posts": related_articles(article, articles),
        }
        writer.write("post.html", f"posts/{article.slug}.html", page_context, f"post '{article.slug}'")


def build_taxonomy_pages(
    writer: PageWriter, context: Mapping, kind: str, index: Mapping[str, list[Article]]
) -> None:
    directory = TAXONOMY_DIRS[kind]
    for label, bucket in index.items():
        page_context = {
            **context,
            "root": "..",
            "page_title": label,
            "type": kind,
            "label": label,
            "posts": bucket,
        }
        writer.write("category.html", f"{directory}/{slugify(label)}.html", page_context, f"{kind} '{label}'")


def build_taxonomy_index(
    writer: PageWriter, context: Mapping, kind: str, index: Mapping[str, list[Article]]
) -> None:
    directory = TAXONOMY_DIRS[kind]
    entries = [
        {"label": label, "slug": slugify(label), "count": len(bucket)} for label, bucket in index.items()
    ]
    page_context = {
        **context,
        "root": "..",
        "page_title": TAXONOMY_TITLES[kind],
        "type": kind,
        "entries": entries,
    }
    writer.write("taxonomy_index.html", f"{directory}/index.html", page_context, f"{kind} index")


def build_about(writer: PageWriter, context: Mapping) -> None:
    writer.write("about.html", "about.html", {**context, "root": ".", "page_title": "About"}, "about page")


def render_all(
    renderer: TemplateRenderer,
    output_dir: Path,
    config: SiteConfig,
    articles: Sequence[Article],
    categories: Mapping[str, list[Article]],
    tags: Mapping[str, list[Article]],
    now: dt.datetime,
) -> list[Path]:
    """Write every page of the site and return the paths written."""
    context = build_context(config, articles, categories, tags, now)
    writer = PageWriter(renderer, output_dir)
    build_index(writer, context)
    build_posts(writer, context, articles)
    build_taxonomy_pages(writer, context, "category", categories)
    build_taxonomy_pages(writer, context, "tag", tags)
    build_about(writer, context)
    build_taxonomy_index(writer, context, "category", categories)
    build_taxonomy_index(writer, context, "tag", tags)
    if writer.failures:
        details = "\n  ".join(writer.failures)
        raise RenderError(f"{len(writer.failures)} page(s) failed to render:\n  {details}")
    return list(writer.written)
