import math

import pytest

from nutrition_tables.aggregator import (
    DEFAULT_PORTION_G,
    aggregate,
    build_profile,
    coerce_number,
    resolve_portion,
)
from nutrition_tables.indexer import ColumnMapping
from nutrition_tables.models import NutrientProfile


MAPPING = ColumnMapping.discover(
    ["food", "calories", "protein", "fiber", "carbs", "fat", "gi", "gl", "dii", "serving_g"]
)

OATS = {
    "food": "Rolled Oats",
    "calories": "389",
    "protein": "16.9",
    "fiber": "10.6",
    "carbs": "66.3",
    "fat": "6.9",
    "gi": "55",
    "gl": "36",
    "dii": "-0.2",
    "serving_g": "40",
}


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("12 g", 12.0),
        ("305 kcal", 305.0),
        ("250mg", 250.0),
        (5, 5.0),
        ("-0.4", -0.4),
        ("", None),
        ("  ", None),
        (None, None),
        (True, None),
        ("abc", None),
        (float("nan"), None),
        ("inf", None),
    ],
)
def test_coerce_number(value, expected) -> None:
    assert coerce_number(value) == expected


@pytest.mark.parametrize(
    ("serving", "expected"),
    [("40", 40.0), ("0", DEFAULT_PORTION_G), ("", DEFAULT_PORTION_G), ("-5", DEFAULT_PORTION_G)],
)
def test_resolve_portion(serving: str, expected: float) -> None:
    assert resolve_portion({"serving_g": serving}, MAPPING) == expected


def test_portion_defaults_when_column_missing() -> None:
    mapping = ColumnMapping.discover(["food", "calories"])
    assert resolve_portion({"food": "x", "calories": "1"}, mapping) == DEFAULT_PORTION_G


def test_build_profile_scales_mass_fields_only() -> None:
    profile = build_profile(OATS, MAPPING)

    assert profile.portion_g == 40.0
    assert profile.calories == pytest.approx(155.6)
    assert profile.carbs_g == pytest.approx(26.52)
    assert profile.gl == pytest.approx(14.4)
    assert profile.gi == 55.0
    assert profile.dii == -0.2


def test_scaling_round_trips_to_per_100_g_value() -> None:
    profile = build_profile(OATS, MAPPING)
    assert profile.protein_g / (profile.portion_g / 100) == pytest.approx(16.9)


def test_missing_record_gives_empty_profile() -> None:
    profile = build_profile(None, MAPPING)
    assert profile.is_empty()
    assert profile.portion_g is None


def test_sums_skip_missing_values() -> None:
    totals = aggregate(
        [
            NutrientProfile(portion_g=100, calories=100),
            NutrientProfile(portion_g=100),
            NutrientProfile(portion_g=100, calories=250),
        ]
    )
    assert totals.calories == 350
    assert totals.protein_g is None


def test_gi_is_weighted_by_carbs() -> None:
    totals = aggregate(
        [
            NutrientProfile(carbs_g=10, gi=50),
            NutrientProfile(gi=80),
            NutrientProfile(carbs_g=20, gi=70),
        ]
    )
    assert totals.gi == pytest.approx(63.333, abs=1e-3)
    assert totals.carbs_g == 30


def test_gi_is_absent_without_carbohydrate_weight() -> None:
    totals = aggregate([NutrientProfile(carbs_g=0, gi=50)])
    assert totals.gi is None


def test_dii_is_weighted_by_portion() -> None:
    totals = aggregate(
        [
            NutrientProfile(portion_g=50, dii=1.0),
            NutrientProfile(portion_g=150, dii=-1.0),
            NutrientProfile(portion_g=100),
        ]
    )
    assert totals.dii == pytest.approx(-0.5)
    assert totals.portion_g == 300


def test_all_missing_totals_stay_absent() -> None:
    totals = aggregate([NutrientProfile(), NutrientProfile()])
    assert all(
        getattr(totals, name) is None
        for name in ("calories", "protein_g", "fiber_g", "carbs_g", "fat_g", "gi", "gl", "dii")
    )
    assert aggregate([]).calories is None


def test_totals_are_finite() -> None:
    totals = aggregate([build_profile(OATS, MAPPING)])
    assert math.isfinite(totals.calories)
    assert math.isfinite(totals.gi)
