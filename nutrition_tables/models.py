"""Domain models shared by the nutrition report pipeline."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

STATUS_OK = "ok"
STATUS_EMPTY_INPUT = "empty_input"

UNRESOLVED = "unresolved"

NUTRIENT_FIELDS: Tuple[str, ...] = (
    "calories",
    "protein_g",
    "fiber_g",
    "carbs_g",
    "fat_g",
    "gi",
    "gl",
    "dii",
)

DatasetRecord = Mapping[str, Any]


@dataclass(frozen=True)
class DatasetSpec:
    """Describes one reference CSV file and how it is keyed."""

    name: str
    filename: str
    key_field: str = "canonical"
    optional: bool = False


@dataclass(frozen=True)
class RawDataset:
    """Rows of a retrieved dataset before indexing."""

    spec: DatasetSpec
    columns: Tuple[str, ...]
    rows: Tuple[DatasetRecord, ...]
    degraded: bool = False

    @property
    def name(self) -> str:
        return self.spec.name

    @classmethod
    def empty(cls, spec: DatasetSpec, degraded: bool = True) -> "RawDataset":
        return cls(spec=spec, columns=(), rows=(), degraded=degraded)


@dataclass(frozen=True)
class AliasEntry:
    alias: str
    canonical: str


@dataclass(frozen=True)
class IngredientMention:
    """One source phrase and what the resolver made of it."""

    raw: str
    normalized: str
    canonical: Optional[str] = None
    confidence: float = 0.0
    tier: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.canonical is not None


@dataclass(frozen=True)
class NutrientProfile:
    """Portion-scaled nutrient values for a single mention.

    ``gi`` and ``dii`` are intensities and are copied from the record as-is;
    every other value has already been multiplied by ``portion_g / 100``.
    """

    portion_g: Optional[float] = None
    calories: Optional[float] = None
    protein_g: Optional[float] = None
    fiber_g: Optional[float] = None
    carbs_g: Optional[float] = None
    fat_g: Optional[float] = None
    gi: Optional[float] = None
    gl: Optional[float] = None
    dii: Optional[float] = None

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in NUTRIENT_FIELDS)


@dataclass(frozen=True)
class AggregateTotals:
    """Report-wide sums and weighted averages."""

    portion_g: Optional[float] = None
    calories: Optional[float] = None
    protein_g: Optional[float] = None
    fiber_g: Optional[float] = None
    carbs_g: Optional[float] = None
    fat_g: Optional[float] = None
    gi: Optional[float] = None
    gl: Optional[float] = None
    dii: Optional[float] = None


@dataclass(frozen=True)
class DietVerdict:
    diet: str
    verdict: str
    offenders: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ResolutionMiss:
    """A mention that no resolver tier could map to a canonical identity."""

    raw: str
    normalized: str


@dataclass(frozen=True)
class IngredientRow:
    """Everything the renderers need for one ingredient line."""

    mention: IngredientMention
    canonical_display: Optional[str]
    profile: NutrientProfile
    benefits: Tuple[str, ...] = ()
    microbiome: Tuple[str, ...] = ()
    micronutrients: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.mention.raw

    @property
    def canonical_label(self) -> str:
        return self.canonical_display or UNRESOLVED


@dataclass(frozen=True)
class ReportDiagnostics:
    misses: Tuple[ResolutionMiss, ...] = ()
    skipped: Tuple[str, ...] = ()
    duplicates: Tuple[str, ...] = ()
    degraded_datasets: Tuple[str, ...] = ()


@dataclass(frozen=True)
class NutritionReport:
    """Outcome of one report-generation request."""

    rows: Tuple[IngredientRow, ...] = ()
    totals: AggregateTotals = field(default_factory=AggregateTotals)
    diet_verdicts: Tuple[DietVerdict, ...] = ()
    diagnostics: ReportDiagnostics = field(default_factory=ReportDiagnostics)
    status: str = STATUS_OK

    @property
    def is_empty_input(self) -> bool:
        return self.status == STATUS_EMPTY_INPUT

    @classmethod
    def empty_input(cls, degraded_datasets: Tuple[str, ...] = ()) -> "NutritionReport":
        return cls(
            status=STATUS_EMPTY_INPUT,
            diagnostics=ReportDiagnostics(degraded_datasets=degraded_datasets),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the report into a JSON-serializable dict."""

        ingredients: List[Dict[str, Any]] = []
        for row in self.rows:
            ingredients.append(
                {
                    "ingredient": row.name,
                    "normalized": row.mention.normalized,
                    "canonical": row.canonical_label,
                    "confidence": round(row.mention.confidence, 4),
                    "tier": row.mention.tier,
                    "nutrients": asdict(row.profile),
                    "benefits": list(row.benefits),
                    "microbiome": list(row.microbiome),
                    "micronutrients": list(row.micronutrients),
                }
            )
        return {
            "status": self.status,
            "ingredients": ingredients,
            "totals": asdict(self.totals),
            "diets": [
                {
                    "diet": verdict.diet,
                    "compatible": verdict.verdict,
                    "offenders": list(verdict.offenders),
                }
                for verdict in self.diet_verdicts
            ],
            "diagnostics": {
                "unresolved": [miss.raw for miss in self.diagnostics.misses],
                "skipped": list(self.diagnostics.skipped),
                "duplicates": list(self.diagnostics.duplicates),
                "degraded_datasets": list(self.diagnostics.degraded_datasets),
            },
        }
