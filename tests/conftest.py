from __future__ import annotations

import datetime as dt
from pathlib import Path

import pytest

from blogsmith.config import SiteConfig
from blogsmith.content import Article

REPO_ROOT = Path(__file__).resolve().parent.parent
THEME_DIR = REPO_ROOT / "templates"
STATIC_DIR = REPO_ROOT / "static"
BUILD_TIME = dt.datetime(2024, 6, 15, 12, 0)


@pytest.fixture
def build_time() -> dt.datetime:
    return BUILD_TIME


@pytest.fixture
def posts_dir(tmp_path: Path) -> Path:
    path = tmp_path / "content" / "posts"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def write_post(posts_dir: Path):
    def _write(slug: str, front_matter: str = "", body: str = "Body text.\n") -> Path:
        text = f"---\n{front_matter.strip()}\n---\n{body}" if front_matter else body
        path = posts_dir / f"{slug}.md"
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_article():
    def _make(
        slug: str,
        date: str = "2024-01-01",
        categories: tuple = (),
        tags: tuple = (),
        title: str = "",
    ) -> Article:
        return Article(
            slug=slug,
            title=title or slug.upper(),
            published_at=dt.datetime.fromisoformat(date),
            categories=tuple(categories),
            tags=tuple(tags),
            excerpt=f"Excerpt of {slug}",
            html=f"<p>{slug}</p>",
            raw_body=slug,
            toc=(),
        )

    return _make


@pytest.fixture
def site_config(tmp_path: Path) -> SiteConfig:
    data = {
        "site": {"title": "Test Blog", "author": "Tester"},
        "paths": {
            "templates": THEME_DIR.as_posix(),
            "static": STATIC_DIR.as_posix(),
            "output": "public",
        },
    }
    return SiteConfig.from_mapping(data, tmp_path)
