"""Static blog generator: Markdown articles in, HTML site out."""

__version__ = "0.1.0"
