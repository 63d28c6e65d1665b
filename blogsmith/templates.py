from __future__ import annotations

import datetime as dt
import re
from pathlib import Path
from typing import Mapping

from jinja2 import (
    BaseLoader,
    Environment,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
    select_autoescape,
)

from .errors import FilesystemError, ParseError, RenderError
from .slugs import slugify

PARTIAL_RE = re.compile(r"""\{%-?\s*partial\s+["']([\w./-]+)["']\s*-?%\}""")
PARTIAL_SUFFIX = ".html"


def read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FilesystemError(f"Cannot read template {path}: {exc}") from exc


class PartialLoader(BaseLoader):
    """Loads templates with every ``{% partial "name" %}`` inlined.

    The expanded source of each template is kept for the lifetime of the
    loader, so partials are read once per template name.
    """

    def __init__(self, template_dir: Path, partials_dir: Path):
        self.template_dir = template_dir
        self.partials_dir = partials_dir
        self._expanded: dict[str, tuple[str, str]] = {}

    def get_source(self, environment: Environment, template: str):
        if template not in self._expanded:
            path = self.template_dir / template
            if not path.is_file():
                raise TemplateNotFound(template)
            source = self.expand(read_source(path), (template,))
            self._expanded[template] = (source, str(path))
        source, filename = self._expanded[template]
        return source, filename, lambda: True

    def expand(self, source: str, stack: tuple[str, ...]) -> str:
        def repl(match: re.Match) -> str:
            name = match.group(1)
            if name in stack:
                chain = " -> ".join(stack + (name,))
                raise ParseError(f"Partial include cycle: {chain}")
            path = self.partials_dir / f"{name}{PARTIAL_SUFFIX}"
            if not path.is_file():
                raise FilesystemError(f"Partial '{name}' not found: {path}")
            return self.expand(read_source(path), stack + (name,))

        return PARTIAL_RE.sub(repl, source)


class TemplateRenderer:
    def __init__(self, template_dir: Path, partials_dir: Path, date_format: str = "%Y-%m-%d"):
        if not template_dir.is_dir():
            raise FilesystemError(f"Templates directory not found: {template_dir}")
        self.date_format = date_format
        self.env = Environment(
            loader=PartialLoader(template_dir, partials_dir),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            auto_reload=False,
        )
        self.env.filters["slugify"] = slugify
        self.env.filters["format_date"] = self.format_date
        self.env.globals["slugify"] = slugify

    def format_date(self, value: dt.datetime, fmt: str = "") -> str:
        if not isinstance(value, (dt.date, dt.datetime)):
            raise TypeError(f"format_date expects a date, got {type(value).__name__}")
        return value.strftime(fmt or self.date_format)

    def get_template(self, name: str) -> Template:
        try:
            return self.env.get_template(name)
        except TemplateNotFound as exc:
            raise FilesystemError(f"Template not found: {exc.name}") from exc
        except TemplateSyntaxError as exc:
            raise ParseError(f"Syntax error in {exc.name or name} line {exc.lineno}: {exc.message}") from exc

    def render(self, name: str, context: Mapping) -> str:
        template = self.get_template(name)
        try:
            return template.render(context)
        except TemplateNotFound as exc:
            raise FilesystemError(f"Template not found: {exc.name}") from exc
        except TemplateSyntaxError as exc:
            raise ParseError(f"Syntax error in {exc.name or name} line {exc.lineno}: {exc.message}") from exc
        except (TemplateError, TypeError, ValueError) as exc:
            raise RenderError(f"Cannot render {name}: {exc}") from exc
