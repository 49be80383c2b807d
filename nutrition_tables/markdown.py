"""Render nutrition reports as markdown tables."""
from __future__ import annotations

import math
from typing import List, Optional, Sequence

from .models import NutritionReport
from .report import VERDICT_LIKELY, VERDICT_NO

NOT_AVAILABLE = "N/A"
NO_TAGS = "—"
OFFENDER_LIMIT = 5
TOTAL_LABEL = "TOTAL / WEIGHTED AVG"

NUTRITION_HEADERS = (
    "Ingredient",
    "Calories",
    "Protein (g)",
    "Fiber (g)",
    "Carbs (g)",
    "Fat (g)",
    "GI",
    "GL",
    "DII (lower is better)",
)


def format_number(value: Optional[float], digits: int = 1) -> str:
    if value is None or not math.isfinite(value):
        return NOT_AVAILABLE
    return f"{value:.{digits}f}"


def _escape(cell: str) -> str:
    return str(cell).replace("|", "\\|").replace("\n", " ")


def markdown_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    lines = [
        "| " + " | ".join(_escape(header) for header in headers) + " |",
        "| " + " | ".join("---" for _ in headers) + " |",
    ]
    for row in rows:
        lines.append("| " + " | ".join(_escape(cell) for cell in row) + " |")
    return "\n".join(lines)


def _section(title: str, headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    return f"### {title}\n\n" + markdown_table(headers, rows)


def nutrition_rows(report: NutritionReport) -> List[List[str]]:
    rows = []
    for row in report.rows:
        profile = row.profile
        rows.append(
            [
                row.name,
                format_number(profile.calories, 0),
                format_number(profile.protein_g, 1),
                format_number(profile.fiber_g, 1),
                format_number(profile.carbs_g, 1),
                format_number(profile.fat_g, 1),
                format_number(profile.gi, 0),
                format_number(profile.gl, 1),
                format_number(profile.dii, 2),
            ]
        )
    totals = report.totals
    rows.append(
        [
            TOTAL_LABEL,
            format_number(totals.calories, 0),
            format_number(totals.protein_g, 1),
            format_number(totals.fiber_g, 1),
            format_number(totals.carbs_g, 1),
            format_number(totals.fat_g, 1),
            format_number(totals.gi, 0),
            format_number(totals.gl, 1),
            format_number(totals.dii, 2),
        ]
    )
    return rows


def diet_rows(report: NutritionReport) -> List[List[str]]:
    if not report.diet_verdicts:
        return [[NO_TAGS, NO_TAGS, "No diet tag columns detected in data"]]
    rows = []
    for verdict in report.diet_verdicts:
        notes = ""
        if verdict.verdict == VERDICT_NO and verdict.offenders:
            notes = "Swap: " + ", ".join(verdict.offenders[:OFFENDER_LIMIT])
        elif verdict.verdict == VERDICT_LIKELY:
            notes = "Some ingredients unknown"
        rows.append([verdict.diet, verdict.verdict, notes])
    return rows


def render_report(report: NutritionReport) -> str:
    """Return the five report tables as one markdown document."""

    if report.is_empty_input:
        return "No ingredients found in the provided input.\n"

    sections = [
        _section("Nutrition", NUTRITION_HEADERS, nutrition_rows(report)),
        _section(
            "Cognitive & Other Health Benefits",
            ("Ingredient", "Benefits"),
            [[row.name, ", ".join(row.benefits) or NO_TAGS] for row in report.rows],
        ),
        _section("Diet Compatibility", ("Diet", "Compatible?", "Notes"), diet_rows(report)),
        _section(
            "Microbiome Benefit",
            ("Ingredient", "Microbiome Benefits"),
            [[row.name, ", ".join(row.microbiome) or NO_TAGS] for row in report.rows],
        ),
        _section(
            "Micronutrient Benefits",
            ("Ingredient", "Top Micronutrients"),
            [[row.name, ", ".join(row.micronutrients) or NO_TAGS] for row in report.rows],
        ),
    ]
    misses = report.diagnostics.misses
    if misses:
        sections.append(
            "_Unresolved: " + ", ".join(miss.raw for miss in misses) + "_"
        )
    return "\n\n".join(sections) + "\n"
