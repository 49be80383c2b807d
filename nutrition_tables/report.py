"""Assemble nutrition reports from ingredient phrases and reference data."""
from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .aggregator import aggregate, build_profile
from .indexer import (
    BENEFITS,
    DIET,
    MAIN,
    MICROBIOME,
    MICRONUTRIENTS,
    DatasetIndex,
    ReferenceData,
    is_blank,
)
from .models import (
    DietVerdict,
    IngredientMention,
    IngredientRow,
    NutritionReport,
    ReportDiagnostics,
    STATUS_EMPTY_INPUT,
    ResolutionMiss,
)
from .normalizer import normalize_phrase
from .resolver import AliasResolver


logger = logging.getLogger(__name__)

VERDICT_YES = "Yes"
VERDICT_LIKELY = "Likely"
VERDICT_NO = "No"

YES_VALUES = frozenset({"y", "yes", "true", "1"})

BENEFIT_TAG_LIMIT = 8
MICROBIOME_TAG_LIMIT = 8
MICRONUTRIENT_TAG_LIMIT = 10

_TAG_SPLIT_RE = re.compile(r"[;,|]")
_WHITESPACE_RE = re.compile(r"\s+")


def _phrase_key(phrase: str) -> str:
    return _WHITESPACE_RE.sub(" ", phrase).strip().casefold()


def build_mentions(
    phrases: Iterable[str], reference: ReferenceData
) -> Tuple[List[IngredientMention], ReportDiagnostics]:
    """Normalize and resolve each phrase.

    Phrases that normalize to nothing and repeated phrases are left out and
    listed in the diagnostics; unresolved phrases are kept as mentions.
    """

    resolver = AliasResolver(reference.aliases, reference.universe)
    mentions: List[IngredientMention] = []
    misses: List[ResolutionMiss] = []
    skipped: List[str] = []
    duplicates: List[str] = []
    seen: set[str] = set()

    for phrase in phrases:
        if phrase is None:
            continue
        raw = str(phrase).strip()
        key = _phrase_key(raw)
        if not key:
            continue
        if key in seen:
            duplicates.append(raw)
            continue
        seen.add(key)

        normalized = normalize_phrase(raw)
        if not normalized:
            skipped.append(raw)
            continue

        match = resolver.resolve(normalized)
        if match is None:
            logger.info(
                "No canonical match for %r", raw, extra={"ingredient": raw}
            )
            misses.append(ResolutionMiss(raw=raw, normalized=normalized))
            mentions.append(IngredientMention(raw=raw, normalized=normalized))
            continue

        mentions.append(
            IngredientMention(
                raw=raw,
                normalized=normalized,
                canonical=reference.display_name(match.canonical),
                confidence=match.confidence,
                tier=match.tier,
            )
        )

    diagnostics = ReportDiagnostics(
        misses=tuple(misses),
        skipped=tuple(skipped),
        duplicates=tuple(duplicates),
        degraded_datasets=reference.degraded,
    )
    return mentions, diagnostics


def collect_tags(
    index: DatasetIndex, group: str, identity: Optional[str], limit: int
) -> Tuple[str, ...]:
    """Gather tags for *identity* from every record and every *group* column."""

    columns = index.mapping.group(group)
    if not columns:
        return ()
    tags: Dict[str, None] = {}
    for record in index.records(identity):
        for column in columns:
            value = record.get(column)
            if is_blank(value):
                continue
            for part in _TAG_SPLIT_RE.split(str(value)):
                tag = part.strip()
                if tag:
                    tags.setdefault(tag, None)
    return tuple(tags)[:limit]


def diet_verdicts(
    rows: Sequence[IngredientRow], reference: ReferenceData
) -> Tuple[DietVerdict, ...]:
    """Judge every detected diet column against the report's ingredients.

    An explicit incompatibility always yields ``No``; otherwise any unknown
    ingredient downgrades the verdict to ``Likely``.
    """

    index = reference.index(DIET)
    verdicts: List[DietVerdict] = []
    for diet, column in reference.diet_columns:
        offenders: List[str] = []
        unknown = False
        for row in rows:
            merged = index.merged(row.mention.canonical)
            if merged is None:
                unknown = True
                continue
            value = merged.get(column)
            if is_blank(value):
                unknown = True
                continue
            if str(value).strip().lower() not in YES_VALUES:
                offenders.append(row.name)

        if offenders:
            verdict = DietVerdict(diet, VERDICT_NO, tuple(offenders))
        elif unknown:
            verdict = DietVerdict(diet, VERDICT_LIKELY)
        else:
            verdict = DietVerdict(diet, VERDICT_YES)
        verdicts.append(verdict)
    return tuple(verdicts)


def build_rows(
    mentions: Sequence[IngredientMention], reference: ReferenceData
) -> Tuple[IngredientRow, ...]:
    main = reference.index(MAIN)
    benefits = reference.index(BENEFITS)
    microbiome = reference.index(MICROBIOME)
    micronutrients = reference.index(MICRONUTRIENTS)

    rows: List[IngredientRow] = []
    for mention in mentions:
        identity = mention.canonical
        rows.append(
            IngredientRow(
                mention=mention,
                canonical_display=identity,
                profile=build_profile(main.merged(identity), main.mapping),
                benefits=collect_tags(benefits, "benefits", identity, BENEFIT_TAG_LIMIT),
                microbiome=collect_tags(
                    microbiome, "microbiome", identity, MICROBIOME_TAG_LIMIT
                ),
                micronutrients=collect_tags(
                    micronutrients, "micronutrients", identity, MICRONUTRIENT_TAG_LIMIT
                ),
            )
        )
    return tuple(rows)


def build_report(
    phrases: Sequence[str], reference: ReferenceData
) -> NutritionReport:
    """Build the full report for *phrases* against one reference snapshot."""

    if not any(phrase and str(phrase).strip() for phrase in phrases):
        return NutritionReport.empty_input(reference.degraded)

    mentions, diagnostics = build_mentions(phrases, reference)
    if not mentions:
        return NutritionReport(status=STATUS_EMPTY_INPUT, diagnostics=diagnostics)
    rows = build_rows(mentions, reference)
    totals = aggregate([row.profile for row in rows])

    if diagnostics.misses:
        logger.warning(
            "%d of %d ingredients could not be resolved",
            len(diagnostics.misses),
            len(rows),
        )
    return NutritionReport(
        rows=rows,
        totals=totals,
        diet_verdicts=diet_verdicts(rows, reference),
        diagnostics=diagnostics,
    )


def summarize(report: NutritionReport) -> Mapping[str, int]:
    """Counts used for log lines and the CLI footer."""

    resolved = sum(1 for row in report.rows if row.mention.resolved)
    return {
        "ingredients": len(report.rows),
        "resolved": resolved,
        "unresolved": len(report.rows) - resolved,
    }
