from __future__ import annotations

import re

CJK = r"\u4e00-\u9fff"
STRIP_RE = re.compile(rf"[^0-9a-z_\s{CJK}-]")
LATIN_CJK_RE = re.compile(rf"([a-z0-9])([{CJK}])")
CJK_LATIN_RE = re.compile(rf"([{CJK}])([a-z0-9])")
SPACE_RE = re.compile(r"\s+")
HYPHENS_RE = re.compile(r"-+")
FALLBACK_SLUG = "section"


def slugify(text: str) -> str:
    """Turn a heading, category or tag label into a URL-safe id.

    Heading ids and table-of-contents links are derived separately, so this
    has to stay a pure function of its input.
    """
    text = text.lower()
    text = STRIP_RE.sub("", text)
    text = text.replace("_", "-")
    text = LATIN_CJK_RE.sub(r"\1-\2", text)
    text = CJK_LATIN_RE.sub(r"\1-\2", text)
    text = SPACE_RE.sub("-", text)
    text = HYPHENS_RE.sub("-", text)
    return text.strip("-") or FALLBACK_SLUG
