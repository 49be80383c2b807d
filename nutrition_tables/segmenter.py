"""Pull candidate ingredient phrases out of free recipe text."""
from __future__ import annotations

import re
from typing import List, Optional

from .normalizer import contains_unit_token

MAX_PLAIN_WORDS = 8

_HEADER_RE = re.compile(r"^ingredients\b", re.IGNORECASE)
_TERMINATOR_RE = re.compile(
    r"^(?:directions|instructions|method|steps|preparation)\b", re.IGNORECASE
)
_METADATA_RE = re.compile(
    r"^(?:serves|servings?|prep time|cook time|total time|yield|nutrition)\b",
    re.IGNORECASE,
)
_MARKER_RE = re.compile(r"^(?:(?:[-*•·]|\d+[.)\]](?!\d))\s*)+")
_LEADING_QUANTITY_RE = re.compile(r"^(?:\d|[¼½¾⅓⅔⅛⅜⅝⅞])")


def _split_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def _strip_marker(line: str) -> tuple[str, bool]:
    match = _MARKER_RE.match(line)
    if not match:
        return line, False
    return line[match.end():].strip(), True


def _is_candidate(line: str, had_marker: bool) -> bool:
    if had_marker or _LEADING_QUANTITY_RE.match(line):
        return True
    if contains_unit_token(line):
        return True
    return len(line.split()) <= MAX_PLAIN_WORDS


def extract_ingredients(text: Optional[str]) -> List[str]:
    """Return the ingredient phrases found in *text*, in source order.

    Scanning starts after the first ``Ingredients`` header (or at the first
    line when there is none) and stops at the first directions-style header
    or recipe metadata line.
    """

    if not text:
        return []
    lines = _split_lines(str(text))
    start = 0
    for index, line in enumerate(lines):
        if _HEADER_RE.match(line):
            start = index
            break

    phrases: List[str] = []
    for line in lines[start:]:
        stripped, had_marker = _strip_marker(line)
        if not stripped or _HEADER_RE.match(stripped):
            continue
        if _TERMINATOR_RE.match(stripped) or _METADATA_RE.match(stripped):
            break
        if _is_candidate(stripped, had_marker):
            phrases.append(stripped)
    return phrases
