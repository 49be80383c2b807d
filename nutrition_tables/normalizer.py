"""Reduce raw ingredient phrases to keys that can be matched against aliases."""
from __future__ import annotations

import re
from typing import Optional, Tuple

VULGAR_FRACTIONS = "¼½¾⅓⅔⅛⅜⅝⅞"

UNIT_TOKENS: Tuple[str, ...] = (
    # volume
    "cups?",
    "tbsps?",
    "tablespoons?",
    "tsps?",
    "teaspoons?",
    "ml",
    "milliliters?",
    "millilitres?",
    "l",
    "liters?",
    "litres?",
    "fl oz",
    # mass
    "oz",
    "ounces?",
    "g",
    "grams?",
    "kg",
    "kilograms?",
    "lbs?",
    "pounds?",
    # count
    "cloves?",
    "slices?",
    "pieces?",
    "cans?",
    "pinch(?:es)?",
    "dash(?:es)?",
    "handfuls?",
)

DESCRIPTORS: Tuple[str, ...] = (
    "chopped",
    "minced",
    "diced",
    "sliced",
    "ground",
    "fresh",
    "large",
    "small",
    "medium",
    "ripe",
    "raw",
    "cooked",
    "drained",
    "rinsed",
    "packed",
    "peeled",
    "seeded",
    "grated",
    "crushed",
    "finely",
    "roughly",
    "thinly",
    "optional",
    "to taste",
)

_NUMBER = rf"(?:\d+(?:[./]\d+)?|[{VULGAR_FRACTIONS}])"
_QUANTITY_RE = re.compile(rf"{_NUMBER}(?:\s*-\s*{_NUMBER})?")
_UNIT_RE = re.compile(r"(?<![a-z])(?:" + "|".join(UNIT_TOKENS) + r")(?![a-z])")
_UNIT_TOKEN_RE = re.compile(_UNIT_RE.pattern, re.IGNORECASE)
_DESCRIPTOR_RE = re.compile(r"\b(?:" + "|".join(DESCRIPTORS) + r")\b")
_DISALLOWED_RE = re.compile(r"[^a-z\s\-]")
_LOOSE_HYPHEN_RE = re.compile(r"(?<![a-z])-|-(?![a-z])")
_WHITESPACE_RE = re.compile(r"\s+")


# Unit tokens that are also ordinary words ("you can", a stray "l").
AMBIGUOUS_UNIT_WORDS = frozenset({"can", "l"})


def contains_unit_token(line: str) -> bool:
    """Return ``True`` when *line* mentions a measurement unit as a whole token.

    Tokens in :data:`AMBIGUOUS_UNIT_WORDS` do not count on their own.
    """

    for match in _UNIT_TOKEN_RE.finditer(line or ""):
        if match.group(0).lower() not in AMBIGUOUS_UNIT_WORDS:
            return True
    return False


def singularize(phrase: str) -> str:
    """Strip one plural suffix from the end of *phrase*.

    This is a single heuristic pass, not morphology: ``tomatoes`` becomes
    ``tomato`` but ``apples`` becomes ``appl``. Words ending in ``ss`` are
    kept, and ``...ses`` only loses its final ``s`` so the result never ends
    in a strippable suffix again.
    """

    if phrase.endswith("ss"):
        return phrase
    if phrase.endswith("ses"):
        return phrase[:-1]
    if phrase.endswith("es"):
        return phrase[:-2]
    if phrase.endswith("s"):
        return phrase[:-1]
    return phrase


def _strip_tokens(text: str) -> str:
    text = _UNIT_RE.sub(" ", text)
    text = _DESCRIPTOR_RE.sub(" ", text)
    text = _LOOSE_HYPHEN_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_phrase(raw: Optional[str]) -> str:
    """Return the canonical-matchable key for *raw*.

    The steps run in a fixed order and each one only removes text.
    Singularizing can expose a unit or descriptor (``coffee grounds`` ends in
    ``ground``), so the token steps and singularization repeat until the
    phrase stops changing; normalizing the result again returns it unchanged.
    """

    if not raw:
        return ""
    text = str(raw).lower()
    text = _QUANTITY_RE.sub(" ", text)
    text = _UNIT_RE.sub(" ", text)
    text = _DESCRIPTOR_RE.sub(" ", text)
    text = _DISALLOWED_RE.sub(" ", text)
    while True:
        previous = text
        text = _strip_tokens(text)
        text = singularize(text).strip()
        if text == previous:
            return text
