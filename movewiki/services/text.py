"""Text helpers — slugs, tags and markdown rendering."""

from __future__ import annotations

import re
from collections.abc import Iterable

from markdown_it import MarkdownIt

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]+")
_TAG_STRIP = re.compile(r"[^a-z0-9_-]")

# Raw HTML is disabled so user input can only produce markdown's own tags.
_md = MarkdownIt("commonmark", {"html": False, "linkify": False}).enable(
    ["strikethrough", "table"]
)


def slugify(text: str | None) -> str:
    """Lowercase ``text`` and collapse non-alphanumeric runs into single hyphens.

    ``slugify("Hack & Slash!!") == "hack-slash"``.
    """
    return _NON_ALNUM.sub("-", text or "").strip("-").lower()


def parse_tags(value: str | Iterable[str] | None) -> list[str]:
    """Normalise a tag string (or list of tag strings) into unique lowercase tokens.

    Tokens are split on whitespace and stripped of anything outside
    ``[a-z0-9_-]``; empty tokens and repeats are dropped, first-seen
    order is kept.
    """
    if value is None:
        return []
    chunks = [value] if isinstance(value, str) else list(value)

    tags: list[str] = []
    for chunk in chunks:
        for token in str(chunk).split():
            tag = _TAG_STRIP.sub("", token.lower())
            if tag and tag not in tags:
                tags.append(tag)
    return tags


def render_markdown(text: str | None) -> str:
    """Render markdown to HTML."""
    return _md.render(text or "")
