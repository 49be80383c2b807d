"""Portion-scale nutrient records and combine them into report totals."""
from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping, Optional, Sequence

from .indexer import ColumnMapping
from .models import AggregateTotals, NutrientProfile

DEFAULT_PORTION_G = 100.0

SCALED_FIELDS = ("calories", "protein_g", "fiber_g", "carbs_g", "fat_g", "gl")
SUMMED_FIELDS = SCALED_FIELDS

_UNIT_SUFFIX_RE = re.compile(r"\s*(?:g|mg|kcal)$")


def coerce_number(value: object) -> Optional[float]:
    """Return *value* as a finite float, or ``None`` when it is not numeric."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        stripped = value.strip().lower()
        if not stripped:
            return None
        # Remove common unit suffixes such as "g", "mg", "kcal"
        cleaned = _UNIT_SUFFIX_RE.sub("", stripped)
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def resolve_portion(record: Mapping[str, Any], mapping: ColumnMapping) -> float:
    """Explicit serving size when present and positive, else 100 g."""

    explicit = coerce_number(mapping.value(record, "serving_size_g"))
    if explicit is not None and explicit > 0:
        return explicit
    return DEFAULT_PORTION_G


def _scaled(value: Optional[float], scale: float) -> Optional[float]:
    if value is None:
        return None
    return value * scale


def build_profile(
    record: Optional[Mapping[str, Any]], mapping: ColumnMapping
) -> NutrientProfile:
    """Scale one per-100 g record to its portion.

    GI and DII are intensities and pass through unscaled.
    """

    if record is None:
        return NutrientProfile()
    portion = resolve_portion(record, mapping)
    scale = portion / 100.0
    values = {name: coerce_number(mapping.value(record, name)) for name in SCALED_FIELDS}
    return NutrientProfile(
        portion_g=portion,
        calories=_scaled(values["calories"], scale),
        protein_g=_scaled(values["protein_g"], scale),
        fiber_g=_scaled(values["fiber_g"], scale),
        carbs_g=_scaled(values["carbs_g"], scale),
        fat_g=_scaled(values["fat_g"], scale),
        gi=coerce_number(mapping.value(record, "gi")),
        gl=_scaled(values["gl"], scale),
        dii=coerce_number(mapping.value(record, "dii")),
    )


def _sum_present(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [value for value in values if value is not None]
    if not present:
        return None
    return math.fsum(present)


def _weighted_average(pairs: Iterable[tuple[Optional[float], Optional[float]]]) -> Optional[float]:
    numerator = 0.0
    denominator = 0.0
    for value, weight in pairs:
        if value is None or weight is None:
            continue
        numerator += value * weight
        denominator += weight
    if denominator == 0:
        return None
    return numerator / denominator


def aggregate(profiles: Sequence[NutrientProfile]) -> AggregateTotals:
    """Combine per-mention profiles.

    Mass-based fields are summed; GI is averaged weighted by carbs and DII
    weighted by portion. A metric is only combined over profiles that have a
    value for it.
    """

    sums = {
        name: _sum_present(getattr(profile, name) for profile in profiles)
        for name in SUMMED_FIELDS
    }
    return AggregateTotals(
        portion_g=_sum_present(profile.portion_g for profile in profiles),
        calories=sums["calories"],
        protein_g=sums["protein_g"],
        fiber_g=sums["fiber_g"],
        carbs_g=sums["carbs_g"],
        fat_g=sums["fat_g"],
        gl=sums["gl"],
        gi=_weighted_average((profile.gi, profile.carbs_g) for profile in profiles),
        dii=_weighted_average((profile.dii, profile.portion_g) for profile in profiles),
    )
