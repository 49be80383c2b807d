import pytest

from nutrition_tables.indexer import ReferenceData
from nutrition_tables.models import STATUS_EMPTY_INPUT, STATUS_OK
from nutrition_tables.report import (
    VERDICT_LIKELY,
    VERDICT_NO,
    VERDICT_YES,
    build_report,
    summarize,
)
from nutrition_tables.resolver import CANONICAL, EXACT_ALIAS


PHRASES = [
    "2 tbsp EVOO",
    "3 tomatoes, chopped",
    "1 cup oats",
    "dragonfruit",
    "2 cloves garlic",
]


@pytest.fixture
def report(reference: ReferenceData):
    return build_report(PHRASES, reference)


def test_rows_keep_input_order_and_resolution_details(report) -> None:
    assert report.status == STATUS_OK
    assert [row.name for row in report.rows] == PHRASES
    assert [row.canonical_label for row in report.rows] == [
        "Olive Oil",
        "Tomato",
        "Rolled Oats",
        "unresolved",
        "Garlic",
    ]

    evoo, tomato = report.rows[0].mention, report.rows[1].mention
    assert (evoo.tier, evoo.confidence) == (EXACT_ALIAS, 1.0)
    assert (tomato.normalized, tomato.tier, tomato.confidence) == ("tomato", CANONICAL, 0.95)


def test_profiles_are_portion_scaled(report) -> None:
    olive_oil, tomato, oats, dragonfruit, garlic = (row.profile for row in report.rows)

    assert olive_oil.portion_g == 15
    assert olive_oil.calories == pytest.approx(132.6)
    assert olive_oil.gi is None
    assert tomato.portion_g == 100
    assert oats.carbs_g == pytest.approx(26.52)
    assert dragonfruit.is_empty()
    assert garlic.calories == pytest.approx(7.45)


def test_totals(report) -> None:
    totals = report.totals

    assert totals.calories == pytest.approx(313.65)
    assert totals.carbs_g == pytest.approx(32.07)
    assert totals.gl == pytest.approx(15.5)
    assert totals.gi == pytest.approx(1566.6 / 32.07)
    assert totals.dii == pytest.approx(-47.5 / 160)


def test_diet_verdicts(report) -> None:
    verdicts = {verdict.diet: verdict for verdict in report.diet_verdicts}

    assert list(verdicts) == ["Vegan", "Gluten-Free", "Keto"]
    # Unknown dragonfruit does not hide the explicit incompatibility.
    assert verdicts["Keto"].verdict == VERDICT_NO
    assert verdicts["Keto"].offenders == ("1 cup oats",)
    assert verdicts["Gluten-Free"].verdict == VERDICT_NO
    assert verdicts["Vegan"].verdict == VERDICT_LIKELY


def test_diet_verdict_is_yes_when_everything_is_known(reference: ReferenceData) -> None:
    report = build_report(["olive oil", "garlic"], reference)
    verdicts = {verdict.diet: verdict.verdict for verdict in report.diet_verdicts}
    assert verdicts == {"Vegan": VERDICT_YES, "Gluten-Free": VERDICT_YES, "Keto": VERDICT_YES}


def test_tags_are_merged_across_records_and_columns(report) -> None:
    olive_oil, tomato, oats, dragonfruit, _ = report.rows

    assert olive_oil.benefits == ("heart health", "antioxidant", "anti-inflammatory", "brain")
    assert tomato.benefits == ("lycopene", "eye health")
    assert tomato.micronutrients == ("Vitamin C", "Potassium")
    assert oats.microbiome == ("beta-glucan", "Bifidobacteria")
    assert dragonfruit.benefits == ()


def test_unresolved_phrases_are_reported(report) -> None:
    assert [miss.raw for miss in report.diagnostics.misses] == ["dragonfruit"]
    assert summarize(report) == {"ingredients": 5, "resolved": 4, "unresolved": 1}


def test_alias_without_nutrient_record_is_resolved_but_unknown(reference: ReferenceData) -> None:
    report = build_report(["sea salt", "tomato"], reference)
    salt = report.rows[0]

    assert salt.canonical_label == "Salt"
    assert salt.profile.is_empty()
    verdicts = {verdict.diet: verdict.verdict for verdict in report.diet_verdicts}
    assert verdicts["Keto"] == VERDICT_LIKELY


def test_duplicates_and_quantity_only_lines_are_skipped(reference: ReferenceData) -> None:
    report = build_report(["Tomato", "tomato ", "2 cups", "garlic"], reference)

    assert [row.name for row in report.rows] == ["Tomato", "garlic"]
    assert report.diagnostics.duplicates == ("tomato",)
    assert report.diagnostics.skipped == ("2 cups",)


@pytest.mark.parametrize("phrases", [[], ["", "   "], ["2 cups", "1/2"]])
def test_empty_input(reference: ReferenceData, phrases) -> None:
    report = build_report(phrases, reference)
    assert report.status == STATUS_EMPTY_INPUT
    assert report.rows == ()


def test_to_dict_is_json_shaped(report) -> None:
    payload = report.to_dict()

    assert payload["status"] == "ok"
    assert payload["ingredients"][3]["canonical"] == "unresolved"
    assert payload["ingredients"][0]["nutrients"]["portion_g"] == 15
    assert payload["diets"][2] == {
        "diet": "Keto",
        "compatible": "No",
        "offenders": ["1 cup oats"],
    }
    assert payload["diagnostics"]["unresolved"] == ["dragonfruit"]
