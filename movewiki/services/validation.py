"""Move validation — stat extraction and outcome-clause checks.

A move definition must name the stat it rolls ("roll +hot") and say
what happens on a partial hit (7-9) and a full hit (10+).
"""

from __future__ import annotations

import re

from movewiki.services.text import slugify

# Slugs shadowed by fixed routes under /moves
RESERVED_CONDITIONS = frozenset({"new", "rss", "tagged"})

_STAT = re.compile(r"\brolls?\s*\+\s*(\w+)", re.IGNORECASE)
_PARTIAL_HIT = re.compile(r"\b7\s*(?:-+|–|—|\bto\b)\s*9\b", re.IGNORECASE)
_FULL_HIT = re.compile(r"\b10\s*(?:\+|\bor\s+(?:more|higher|better)\b)", re.IGNORECASE)

BLANK_CONDITION = "Condition can't be blank."
STAT_MISSING = 'Definition must say which stat to roll (e.g. "roll +hot").'
PARTIAL_HIT_MISSING = "Definition must say what happens on a 7-9."
FULL_HIT_MISSING = "Definition must say what happens on a 10+."


def extract_stat(definition: str | None) -> str | None:
    """Return the lowercased stat named by the first ``roll +X`` clause, if any."""
    match = _STAT.search(definition or "")
    return match.group(1).lower() if match else None


def validate_move(condition: str | None, definition: str | None) -> list[str]:
    """Check a candidate move; an empty list means it is valid."""
    condition = condition or ""
    definition = definition or ""
    errors: list[str] = []

    # A condition without any ASCII letter or digit has no usable slug
    slug = slugify(condition)
    if not slug:
        errors.append(BLANK_CONDITION)
    elif slug in RESERVED_CONDITIONS:
        errors.append(f'Condition can\'t be "{slug}".')

    if extract_stat(definition) is None:
        errors.append(STAT_MISSING)
    if not _PARTIAL_HIT.search(definition):
        errors.append(PARTIAL_HIT_MISSING)
    if not _FULL_HIT.search(definition):
        errors.append(FULL_HIT_MISSING)

    return errors
