from __future__ import annotations

import argparse
import datetime as dt
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

from .config import DEFAULT_CONFIG_FILE, SiteConfig
from .content import load_articles
from .errors import BuildError, ConfigError, SiteGenError
from .indexer import build_indices
from .pages import render_all
from .render import copy_static, highlight_css, write_text
from .templates import TemplateRenderer
from .utils import clean_output_dir


@contextmanager
def build_step(step: str) -> Iterator[None]:
    try:
        yield
    except SiteGenError as exc:
        raise BuildError(step, exc) from exc


def build_site(config: SiteConfig, now: Optional[dt.datetime] = None) -> list[Path]:
    """Run one full build and return the pages written."""
    now = now or dt.datetime.now()
    paths = config.paths

    with build_step("clean"):
        clean_output_dir(paths.output, paths.project_root)
    print(f"Cleaned output directory: {paths.output}")

    with build_step("load"):
        articles = load_articles(paths.posts, languages=config.highlight_languages, now=now)
    print(f"Loaded {len(articles)} posts from {paths.posts}")

    with build_step("index"):
        categories, tags = build_indices(articles)
    print(f"Found {len(categories)} categories and {len(tags)} tags")

    with build_step("render"):
        renderer = TemplateRenderer(paths.templates, paths.partials, config.date_format)
        written = render_all(renderer, paths.output, config, articles, categories, tags, now)
    print(f"Rendered {len(written)} pages")

    with build_step("assets"):
        if paths.static.is_dir():
            copy_static(paths.static, paths.output)
        if paths.images.is_dir():
            copy_static(paths.images, paths.output / "images")
        write_text(paths.output / "css" / "highlight.css", highlight_css(config.highlight_theme))
    print("Copied static assets")
    return written


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Markdown blog generator.")
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_FILE,
        help="Path to site config file (TOML/YAML/JSON).",
    )
    parser.add_argument("--content", default=None, help="Content directory (overrides paths.content).")
    parser.add_argument("--output", default=None, help="Output directory (overrides paths.output).")
    args = parser.parse_args(argv)

    overrides: dict = {"paths": {}}
    if args.content:
        overrides["paths"]["content"] = str(Path(args.content).resolve())
    if args.output:
        overrides["paths"]["output"] = str(Path(args.output).resolve())

    start = time.perf_counter()
    try:
        config = SiteConfig.load(Path(args.config), overrides)
    except ConfigError as exc:
        print(f"Build failed at step 'config': {exc}", file=sys.stderr)
        sys.exit(1)
    try:
        build_site(config)
    except BuildError as exc:
        print(f"Build failed at step '{exc.step}': {exc.cause}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Site generated in: {config.paths.output}")
