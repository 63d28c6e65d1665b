from __future__ import annotations

import html as html_lib
import re
import shutil
from pathlib import Path
from typing import Iterable

import markdown
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .errors import ConfigError, FilesystemError
from .slugs import slugify

IMG_SRC_RE = re.compile(r'<img([^>]*?)src="([^"]+)"', re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")
HEADING_RE = re.compile(r"<(h[1-6])>([^<]+)</\1>")
LIST_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:[-+*]|\d+[.)])\s+")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(?P<marker>`{3,}|~{3,})[ \t]*(?P<info>[^`]*)$")
HIGHLIGHT_CLASS = "highlight"
PLAIN_LANGUAGE = "text"


def language_allowed(lang: str, allowed: set[str]) -> bool:
    """Check a fence language against ``allowed`` by any of its Pygments aliases."""
    if not allowed or lang in allowed:
        return True
    try:
        lexer = get_lexer_by_name(lang)
    except ClassNotFound:
        return False
    return bool(allowed.intersection(lexer.aliases))


def prepare_markdown(text: str, languages: Iterable[str] = ()) -> str:
    """Normalize a Markdown body before handing it to Python-Markdown.

    Lists that follow a paragraph line without a blank line get one, and
    fenced blocks whose language is outside ``languages`` are downgraded to
    plain text. An empty ``languages`` allows everything.
    """
    allowed = {lang.lower() for lang in languages}
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in text.splitlines():
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group("marker")
            if not in_fence:
                in_fence = True
                fence_marker = marker
                info = fence_match.group("info").strip()
                lang = info.split()[0].lower() if info else ""
                if lang and not language_allowed(lang, allowed):
                    line = f'{fence_match.group("indent")}{marker}{PLAIN_LANGUAGE}'
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if in_fence:
            out.append(line)
            continue
        list_match = LIST_MARKER_RE.match(line)
        if list_match and not list_match.group("indent"):
            if out and out[-1].strip() and not LIST_MARKER_RE.match(out[-1]):
                out.append("")
        out.append(line)
    return "\n".join(out)


def markdown_to_html(text: str, languages: Iterable[str] = ()) -> str:
    md = markdown.Markdown(
        extensions=["fenced_code", "tables", "nl2br", "codehilite"],
        extension_configs={
            "codehilite": {"css_class": HIGHLIGHT_CLASS, "guess_lang": False},
        },
    )
    return md.convert(prepare_markdown(text, languages))


def add_heading_ids(html_text: str) -> str:
    # Headings with nested markup (inline code, emphasis) are left untouched.
    def repl(match: re.Match) -> str:
        tag, text = match.group(1), match.group(2)
        slug = slugify(html_lib.unescape(text))
        return f'<{tag} id="{slug}">{text}</{tag}>'

    return HEADING_RE.sub(repl, html_text)


def fix_relative_img_src(html_text: str, root: str) -> str:
    def repl(match: re.Match) -> str:
        attrs = match.group(1)
        src = match.group(2)
        if src.startswith(("http://", "https://", "data:", "#", "/", "./", "../")):
            return match.group(0)
        return f'<img{attrs}src="{root}/{src}"'

    return IMG_SRC_RE.sub(repl, html_text)


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise FilesystemError(f"Cannot write {path}: {exc}") from exc


def copy_static(static_dir: Path, output_dir: Path) -> None:
    """Merge the contents of ``static_dir`` into ``output_dir``."""
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for item in static_dir.iterdir():
            dest = output_dir / item.name
            if item.is_dir():
                shutil.copytree(item, dest, dirs_exist_ok=True)
            else:
                shutil.copy2(item, dest)
    except OSError as exc:
        raise FilesystemError(f"Cannot copy {static_dir} to {output_dir}: {exc}") from exc


def highlight_css(theme: str) -> str:
    try:
        formatter = HtmlFormatter(style=theme)
    except ClassNotFound as exc:
        raise ConfigError(f"Unknown highlight theme: {theme}") from exc
    return formatter.get_style_defs(f".{HIGHLIGHT_CLASS}")
