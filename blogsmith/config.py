from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

import yaml

from .errors import ConfigError

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

DEFAULT_CONFIG_FILE = "site.toml"
DEFAULT_CONFIG: dict = {
    "site": {
        "title": "blogsmith",
        "subtitle": "Notes on hardware, firmware and software",
        "description": "A personal technical blog.",
        "author": "Author",
        "role": "",
        "motto": "",
        "url": "",
        "email": "",
        "avatar": "images/avatar.svg",
        "social": {},
    },
    "paths": {
        "content": "content",
        "posts": "posts",
        "images": "images",
        "templates": "templates",
        "partials": "partials",
        "static": "static",
        "output": "public",
    },
    "pagination": {"posts_per_page": 10},
    "highlight": {
        "theme": "one-dark",
        "languages": [
            "c",
            "cpp",
            "asm",
            "armasm",
            "bash",
            "python",
            "javascript",
            "typescript",
            "json",
            "makefile",
        ],
    },
    "date_format": "%Y-%m-%d",
}


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    if suffix == ".toml":
        try:
            data = toml.loads(text)
        except toml.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")
    return data


def merge_config(defaults: Mapping, overrides: Mapping) -> dict:
    merged = copy.deepcopy(dict(defaults))
    for key, value in overrides.items():
        base = merged.get(key)
        if isinstance(base, dict) and isinstance(value, Mapping):
            merged[key] = merge_config(base, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _section(data: Mapping, key: str) -> dict:
    value = data.get(key)
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{key}' must be a mapping")
    return value


@dataclass(frozen=True)
class BuildPaths:
    project_root: Path
    content: Path
    posts: Path
    images: Path
    templates: Path
    partials: Path
    static: Path
    output: Path

    @classmethod
    def from_mapping(cls, paths: Mapping, base_dir: Path) -> "BuildPaths":
        def resolve(value: object, parent: Path) -> Path:
            path = Path(str(value))
            return path if path.is_absolute() else parent / path

        content = resolve(paths["content"], base_dir)
        templates = resolve(paths["templates"], base_dir)
        return cls(
            project_root=base_dir,
            content=content,
            posts=resolve(paths["posts"], content),
            images=resolve(paths["images"], content),
            templates=templates,
            partials=resolve(paths["partials"], templates),
            static=resolve(paths["static"], base_dir),
            output=resolve(paths["output"], base_dir),
        )


@dataclass(frozen=True)
class SiteConfig:
    """Everything a build needs, resolved against the config file's directory."""

    site: dict
    paths: BuildPaths
    posts_per_page: int
    highlight_theme: str
    highlight_languages: tuple[str, ...]
    date_format: str
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping, base_dir: Path) -> "SiteConfig":
        merged = merge_config(DEFAULT_CONFIG, data)
        site = _section(merged, "site")
        paths = _section(merged, "paths")
        pagination = _section(merged, "pagination")
        highlight = _section(merged, "highlight")
        languages = highlight.get("languages") or []
        if isinstance(languages, str) or not isinstance(languages, list):
            raise ConfigError("highlight.languages must be a list")
        try:
            posts_per_page = int(pagination.get("posts_per_page"))
        except (TypeError, ValueError) as exc:
            raise ConfigError("pagination.posts_per_page must be an integer") from exc
        return cls(
            site=site,
            paths=BuildPaths.from_mapping(paths, base_dir),
            posts_per_page=posts_per_page,
            highlight_theme=str(highlight.get("theme")),
            highlight_languages=tuple(str(lang).lower() for lang in languages),
            date_format=str(merged.get("date_format")),
            raw=merged,
        )

    @classmethod
    def load(cls, path: Path, overrides: Optional[Mapping] = None) -> "SiteConfig":
        data = load_config(path)
        if overrides:
            data = merge_config(data, overrides)
        return cls.from_mapping(data, path.resolve().parent)
