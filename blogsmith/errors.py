from __future__ import annotations


class SiteGenError(Exception):
    """Base class for every failure the build reports to the user."""


class FilesystemError(SiteGenError):
    pass


class ParseError(SiteGenError):
    pass


class RenderError(SiteGenError):
    pass


class ConfigError(SiteGenError):
    pass


class BuildError(SiteGenError):
    def __init__(self, step: str, cause: Exception):
        super().__init__(f"{step}: {cause}")
        self.step = step
        self.cause = cause
