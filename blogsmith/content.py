from __future__ import annotations

import datetime as dt
import html as html_lib
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, NamedTuple, Optional

import yaml

from .errors import FilesystemError, ParseError
from .render import add_heading_ids, fix_relative_img_src, markdown_to_html, strip_tags
from .slugs import slugify

CONTENT_EXTENSIONS = {".md", ".markdown"}
DEFAULT_TITLE = "Untitled"
EXCERPT_LENGTH = 200
ELLIPSIS = "..."
POST_ROOT = ".."

TOC_HEADING_RE = re.compile(r"^(#{1,3})\s+(.+)$")
TOC_CLOSING_RE = re.compile(r"\s+#+\s*$")
FENCE_RE = re.compile(r"^[ \t]*(`{3,}|~{3,})")
CODE_BLOCK_RE = re.compile(r"(`{3,}|~{3,}).*?\1", re.DOTALL)
INLINE_CODE_RE = re.compile(r"`[^`]+`")
MARKUP_RE = re.compile(r"[#*_~\[\]()]")
NEWLINES_RE = re.compile(r"\n+")
CJK_RE = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af]")
WORD_RE = re.compile(r"[A-Za-z0-9]+(?:'[A-Za-z0-9]+)?")


class TocEntry(NamedTuple):
    level: int
    text: str
    slug: str


@dataclass(frozen=True)
class Article:
    slug: str
    title: str
    published_at: dt.datetime
    categories: tuple[str, ...]
    tags: tuple[str, ...]
    excerpt: str
    html: str
    raw_body: str
    toc: tuple[TocEntry, ...]
    word_count: int = 0
    source: Optional[Path] = None


def parse_front_matter(text: str, source: object = "<string>") -> tuple[dict, str]:
    clean_text = text.lstrip("\ufeff")
    lines = clean_text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, clean_text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            end = i
            break
    if end is None:
        return {}, clean_text

    try:
        meta = yaml.safe_load("\n".join(lines[1:end]))
    except (yaml.YAMLError, ValueError) as exc:
        # impossible dates such as 2024-02-30 surface as ValueError
        raise ParseError(f"Invalid front matter in {source}: {exc}") from exc
    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise ParseError(f"Front matter in {source} must be a mapping")
    meta = {str(key).lower(): value for key, value in meta.items()}
    body = "\n".join(lines[end + 1 :])
    return meta, body


def parse_labels(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value if item is not None]
    else:
        items = [str(value).strip()]
    # dict.fromkeys keeps the first occurrence of each label
    return tuple(dict.fromkeys(item for item in items if item))


def parse_date(value: object, now: dt.datetime, source: object = "<string>") -> dt.datetime:
    if value is None or value == "":
        return now
    if isinstance(value, dt.datetime):
        parsed = value
    elif isinstance(value, dt.date):
        return dt.datetime.combine(value, dt.time())
    else:
        try:
            parsed = dt.datetime.fromisoformat(str(value).strip())
        except ValueError as exc:
            raise ParseError(f"Invalid date {value!r} in {source}") from exc
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def generate_excerpt(body: str, max_length: int = EXCERPT_LENGTH) -> str:
    text = CODE_BLOCK_RE.sub("", body)
    text = INLINE_CODE_RE.sub("", text)
    text = MARKUP_RE.sub("", text)
    text = NEWLINES_RE.sub(" ", text).strip()
    if len(text) > max_length:
        return text[:max_length] + ELLIPSIS
    return text


def generate_toc(body: str) -> tuple[TocEntry, ...]:
    entries = []
    in_fence = False
    fence_marker = ""
    for line in body.splitlines():
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            continue
        if in_fence:
            continue
        match = TOC_HEADING_RE.match(line)
        if not match:
            continue
        text = html_lib.unescape(TOC_CLOSING_RE.sub("", match.group(2)).strip())
        entries.append(TocEntry(len(match.group(1)), text, slugify(text)))
    return tuple(entries)


def count_words(text: str) -> int:
    text = html_lib.unescape(text)
    cjk_count = len(CJK_RE.findall(text))
    text = CJK_RE.sub(" ", text)
    word_count = len(WORD_RE.findall(text))
    return cjk_count + word_count


def parse_article(
    text: str,
    slug: str,
    now: dt.datetime,
    languages: Iterable[str] = (),
    source: Optional[Path] = None,
) -> Article:
    meta, body = parse_front_matter(text, source or slug)
    html_content = add_heading_ids(markdown_to_html(body, languages))
    html_content = fix_relative_img_src(html_content, POST_ROOT)
    title = meta.get("title")
    excerpt = meta.get("excerpt")
    return Article(
        slug=slug,
        title=str(title) if title else DEFAULT_TITLE,
        published_at=parse_date(meta.get("date"), now, source or slug),
        categories=parse_labels(meta.get("categories")),
        tags=parse_labels(meta.get("tags")),
        excerpt=str(excerpt) if excerpt else generate_excerpt(body),
        html=html_content,
        raw_body=body,
        toc=generate_toc(body),
        word_count=count_words(strip_tags(html_content)),
        source=source,
    )


def list_content_files(source_dir: Path) -> list[Path]:
    try:
        source_dir.mkdir(parents=True, exist_ok=True)
        files = [
            path
            for path in source_dir.iterdir()
            if path.is_file() and path.suffix.lower() in CONTENT_EXTENSIONS
        ]
    except OSError as exc:
        raise FilesystemError(f"Cannot list content directory {source_dir}: {exc}") from exc
    return sorted(files, key=lambda p: p.name)


def load_articles(
    source_dir: Path,
    *,
    languages: Iterable[str] = (),
    now: Optional[dt.datetime] = None,
) -> list[Article]:
    """Load every article in ``source_dir``, newest first.

    The directory is created when missing so a fresh site builds with no
    posts. Articles without a date are stamped with ``now``.
    """
    now = now or dt.datetime.now()
    languages = tuple(languages)
    articles = []
    for path in list_content_files(source_dir):
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"{path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise FilesystemError(f"Cannot read {path}: {exc}") from exc
        articles.append(parse_article(text, path.stem, now, languages, path))
    articles.sort(key=lambda article: article.published_at, reverse=True)
    return articles
