"""Map normalized phrases to canonical identities.

Resolution is an ordered chain of matchers. Each matcher either returns a
:class:`Match` or ``None``; the first match wins, so tier order rather than
raw confidence decides between competing candidates:

1. exact alias lookup (1.0)
2. progressively shorter word suffixes looked up as aliases (0.9 - 0.05k)
3. any alias contained in the phrase (0.6)
4. containment against the canonical universe (0.5 - 0.95)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from .indexer import AliasTable

EXACT_ALIAS = "alias_exact"
ALIAS_SUFFIX = "alias_suffix"
ALIAS_CONTAINMENT = "alias_contains"
CANONICAL = "canonical"


@dataclass(frozen=True)
class Match:
    canonical: str
    confidence: float
    tier: str


Matcher = Callable[[str, AliasTable, Sequence[str]], Optional[Match]]


def match_exact_alias(
    phrase: str, aliases: AliasTable, universe: Sequence[str]
) -> Optional[Match]:
    canonical = aliases.get(phrase)
    if canonical is None:
        return None
    return Match(canonical, 1.0, EXACT_ALIAS)


def match_alias_suffix(
    phrase: str, aliases: AliasTable, universe: Sequence[str]
) -> Optional[Match]:
    if not len(aliases):
        return None
    words = phrase.split()
    for dropped in range(len(words)):
        canonical = aliases.get(" ".join(words[dropped:]))
        if canonical is not None:
            return Match(canonical, max(0.0, 0.9 - 0.05 * dropped), ALIAS_SUFFIX)
    return None


def match_alias_containment(
    phrase: str, aliases: AliasTable, universe: Sequence[str]
) -> Optional[Match]:
    for alias, canonical in aliases.items():
        if alias and alias in phrase:
            return Match(canonical, 0.6, ALIAS_CONTAINMENT)
    return None


def match_canonical_universe(
    phrase: str, aliases: AliasTable, universe: Sequence[str]
) -> Optional[Match]:
    if phrase in universe:
        return Match(phrase, 0.95, CANONICAL)
    for identity in universe:
        if not identity:
            continue
        if identity in phrase:
            confidence = 0.55 + len(identity) / max(8, len(phrase))
            return Match(identity, _clamp(confidence), CANONICAL)
        if phrase in identity:
            confidence = 0.5 + len(phrase) / max(8, len(identity))
            return Match(identity, _clamp(confidence), CANONICAL)
    return None


def _clamp(confidence: float) -> float:
    return max(0.5, min(0.9, confidence))


DEFAULT_MATCHERS: Tuple[Matcher, ...] = (
    match_exact_alias,
    match_alias_suffix,
    match_alias_containment,
    match_canonical_universe,
)


class AliasResolver:
    """Run the matcher chain against one alias table and universe."""

    def __init__(
        self,
        aliases: AliasTable,
        universe: Sequence[str],
        matchers: Sequence[Matcher] = DEFAULT_MATCHERS,
    ) -> None:
        self._aliases = aliases
        self._universe = tuple(universe)
        self._matchers = tuple(matchers)

    def resolve(self, phrase: str) -> Optional[Match]:
        """Return the first match for *phrase*, or ``None`` when every tier misses."""

        if not phrase:
            return None
        for matcher in self._matchers:
            match = matcher(phrase, self._aliases, self._universe)
            if match is not None:
                return match
        return None
