"""Index loaded reference datasets by canonical identity."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .errors import ConfigurationError
from .models import AliasEntry, DatasetRecord, RawDataset


logger = logging.getLogger(__name__)

SETTINGS = "settings"
MAIN = "main"
BENEFITS = "benefits"
DIET = "diet"
MICROBIOME = "microbiome"
MICRONUTRIENTS = "micronutrients"

# Accepted header names per logical field, in priority order.
FIELD_SYNONYMS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "canonical": ("canonical", "canonical_name", "ingredient", "food", "item", "name"),
        "alias": ("alias", "synonym", "alt", "alt_name", "alias_name"),
        "calories": ("calories", "kcal", "energy_kcal", "kcal_per100", "calories_per100"),
        "protein_g": ("protein", "protein_g", "prot_g", "protein_per100_g", "protein_per100"),
        "fiber_g": ("fiber", "fibre", "fiber_g", "dietary_fiber_g", "fiber_per100_g"),
        "carbs_g": (
            "carbs",
            "carbs_g",
            "carbohydrates",
            "carbohydrate_g",
            "net_carb_g",
            "carb_g",
            "carbs_per100_g",
        ),
        "fat_g": ("fat", "fat_g", "total_fat_g", "fat_per100_g"),
        "gi": ("gi", "glycemic_index"),
        "gl": ("gl", "glycemic_load"),
        "dii": ("dii", "anti-inflammatory_score", "inflammatory_index"),
        "serving_size_g": (
            "serving_size_g",
            "serving_g",
            "portion_g",
            "default_portion_g",
            "portion_size_g",
            "serving_g_estimate",
        ),
    }
)

DIET_TAGS: Tuple[str, ...] = (
    "MIND",
    "DASH",
    "Mediterranean",
    "Vegan",
    "Vegetarian",
    "Pescatarian",
    "Gluten-Free",
    "Keto",
    "Paleo",
    "Low-FODMAP",
)

# Multi-column groups: every present column contributes.
COLUMN_GROUPS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "benefits": ("benefits", "neuro_benefits", "cognitive_benefits", "tags", "cognitive_other"),
        "microbiome": ("microbiome", "microbiome_benefits", "gut_tags", "taxa"),
        "micronutrients": ("micronutrients", "nutrients", "top_micronutrients"),
        "diets": DIET_TAGS,
    }
)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


@dataclass(frozen=True)
class ColumnMapping:
    """Field to column assignments resolved once from a dataset's headers."""

    fields: Mapping[str, str] = field(default_factory=dict)
    groups: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    lookup: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def discover(
        cls,
        headers: Sequence[str],
        synonyms: Mapping[str, Sequence[str]] = FIELD_SYNONYMS,
        groups: Mapping[str, Sequence[str]] = COLUMN_GROUPS,
    ) -> "ColumnMapping":
        lookup: Dict[str, str] = {}
        for header in headers:
            if not isinstance(header, str):
                continue
            lookup.setdefault(header.strip().lower(), header)

        resolved: Dict[str, str] = {}
        for name, candidates in synonyms.items():
            for candidate in candidates:
                column = lookup.get(candidate.lower())
                if column is not None:
                    resolved[name] = column
                    break

        resolved_groups: Dict[str, Tuple[str, ...]] = {}
        for name, candidates in groups.items():
            present: List[str] = []
            for candidate in candidates:
                column = lookup.get(candidate.lower())
                if column is not None and column not in present:
                    present.append(column)
            resolved_groups[name] = tuple(present)

        return cls(
            fields=MappingProxyType(resolved),
            groups=MappingProxyType(resolved_groups),
            lookup=MappingProxyType(lookup),
        )

    def column(self, name: str) -> Optional[str]:
        return self.fields.get(name)

    def find(self, header: str) -> Optional[str]:
        """Return the dataset's spelling of *header*, ignoring case."""

        return self.lookup.get(header.lower())

    def value(self, record: DatasetRecord, name: str) -> Any:
        column = self.fields.get(name)
        if column is None:
            return None
        return record.get(column)

    def group(self, name: str) -> Tuple[str, ...]:
        return self.groups.get(name, ())


def _headers_for(dataset: RawDataset) -> Tuple[str, ...]:
    if dataset.columns:
        return dataset.columns
    seen: Dict[str, None] = {}
    for row in dataset.rows:
        for key in row:
            seen.setdefault(key, None)
    return tuple(seen)


def _freeze(record: DatasetRecord) -> Mapping[str, Any]:
    return MappingProxyType(dict(record))


def merge_records(records: Iterable[DatasetRecord]) -> Mapping[str, Any]:
    """Fold *records* into one view where the first non-empty value wins."""

    merged: Dict[str, Any] = {}
    for record in records:
        for key, value in record.items():
            if not is_blank(merged.get(key)):
                continue
            if is_blank(value):
                merged.setdefault(key, value)
                continue
            merged[key] = value
    return MappingProxyType(merged)


class DatasetIndex:
    """Canonical identity to records lookup for one dataset."""

    def __init__(
        self,
        name: str,
        mapping: ColumnMapping,
        records: Mapping[str, Tuple[Mapping[str, Any], ...]],
        display: Mapping[str, str],
    ) -> None:
        self.name = name
        self.mapping = mapping
        self._records = MappingProxyType(dict(records))
        self._display = MappingProxyType(dict(display))
        self._merged = MappingProxyType(
            {key: merge_records(rows) for key, rows in self._records.items()}
        )

    @classmethod
    def empty(cls, name: str) -> "DatasetIndex":
        return cls(name, ColumnMapping(), {}, {})

    @classmethod
    def build(cls, dataset: RawDataset) -> "DatasetIndex":
        """Index *dataset* by its key column.

        Raises :class:`ConfigurationError` when no key column can be found,
        unless the dataset is optional.
        """

        mapping = ColumnMapping.discover(_headers_for(dataset))
        key_field = dataset.spec.key_field
        key_column = mapping.column(key_field)
        if key_column is None:
            candidates = tuple(FIELD_SYNONYMS.get(key_field, (key_field,)))
            if dataset.spec.optional:
                logger.warning(
                    "Optional dataset %s has no key column; ignoring it",
                    dataset.name,
                    extra={"dataset": dataset.name},
                )
                return cls.empty(dataset.name)
            raise ConfigurationError(dataset.name, candidates)

        grouped: Dict[str, List[Mapping[str, Any]]] = {}
        display: Dict[str, str] = {}
        for row in dataset.rows:
            raw_key = row.get(key_column)
            if is_blank(raw_key):
                continue
            identity = str(raw_key).strip()
            key = identity.lower()
            display.setdefault(key, identity)
            grouped.setdefault(key, []).append(_freeze(row))

        logger.debug(
            "Indexed %d identities from %d rows of %s",
            len(grouped),
            len(dataset.rows),
            dataset.name,
        )
        return cls(
            dataset.name,
            mapping,
            {key: tuple(rows) for key, rows in grouped.items()},
            display,
        )

    def __contains__(self, identity: object) -> bool:
        return isinstance(identity, str) and identity.strip().lower() in self._records

    def __len__(self) -> int:
        return len(self._records)

    def identities(self) -> Tuple[str, ...]:
        """Identities in first-seen order and first-seen case."""

        return tuple(self._display.values())

    def display_name(self, identity: str) -> Optional[str]:
        return self._display.get(identity.strip().lower())

    def records(self, identity: Optional[str]) -> Tuple[Mapping[str, Any], ...]:
        if not identity:
            return ()
        return self._records.get(identity.strip().lower(), ())

    def merged(self, identity: Optional[str]) -> Optional[Mapping[str, Any]]:
        if not identity:
            return None
        return self._merged.get(identity.strip().lower())


class AliasTable:
    """Lowercase alias phrase to canonical identity, in insertion order."""

    def __init__(self, entries: Iterable[AliasEntry] = ()) -> None:
        table: Dict[str, str] = {}
        for entry in entries:
            table.setdefault(entry.alias, entry.canonical)
        self._entries = MappingProxyType(table)

        canonicals: Dict[str, str] = {}
        for canonical in table.values():
            canonicals.setdefault(canonical.lower(), canonical)
        self._canonicals = MappingProxyType(canonicals)

    @classmethod
    def from_dataset(cls, dataset: RawDataset) -> "AliasTable":
        mapping = ColumnMapping.discover(_headers_for(dataset))
        if mapping.column("alias") is None:
            if not dataset.spec.optional:
                raise ConfigurationError(dataset.name, FIELD_SYNONYMS["alias"])
            if dataset.rows:
                logger.warning(
                    "Dataset %s has no alias column; alias table is empty",
                    dataset.name,
                    extra={"dataset": dataset.name},
                )
            return cls()

        entries: List[AliasEntry] = []
        for row in dataset.rows:
            alias = mapping.value(row, "alias")
            if is_blank(alias):
                continue
            canonical = mapping.value(row, "canonical")
            if is_blank(canonical):
                canonical = alias
            entries.append(
                AliasEntry(alias=str(alias).strip().lower(), canonical=str(canonical).strip())
            )
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, alias: str) -> Optional[str]:
        return self._entries.get(alias)

    def items(self) -> Iterable[Tuple[str, str]]:
        return self._entries.items()

    def canonicals(self) -> Tuple[str, ...]:
        return tuple(self._canonicals.values())

    def display_name(self, identity: str) -> Optional[str]:
        return self._canonicals.get(identity.strip().lower())


@dataclass(frozen=True)
class ReferenceData:
    """Immutable snapshot of every dataset a report is resolved against."""

    indexes: Mapping[str, DatasetIndex]
    aliases: AliasTable
    universe: Tuple[str, ...]
    diet_columns: Tuple[Tuple[str, str], ...] = ()
    degraded: Tuple[str, ...] = ()

    @classmethod
    def build(cls, datasets: Iterable[RawDataset]) -> "ReferenceData":
        indexes: Dict[str, DatasetIndex] = {}
        aliases = AliasTable()
        degraded: List[str] = []
        for dataset in datasets:
            if dataset.degraded:
                degraded.append(dataset.name)
            if dataset.name == SETTINGS:
                aliases = AliasTable.from_dataset(dataset)
                continue
            indexes[dataset.name] = DatasetIndex.build(dataset)

        universe: Dict[str, None] = {}
        main = indexes.get(MAIN)
        if main is not None:
            for identity in main.identities():
                universe.setdefault(identity.lower(), None)
        for canonical in aliases.canonicals():
            universe.setdefault(canonical.lower(), None)

        diet_columns: List[Tuple[str, str]] = []
        diet = indexes.get(DIET)
        if diet is not None:
            for tag in DIET_TAGS:
                column = diet.mapping.find(tag)
                if column is not None:
                    diet_columns.append((tag, column))

        return cls(
            indexes=MappingProxyType(indexes),
            aliases=aliases,
            universe=tuple(universe),
            diet_columns=tuple(diet_columns),
            degraded=tuple(degraded),
        )

    def index(self, name: str) -> DatasetIndex:
        found = self.indexes.get(name)
        if found is None:
            return DatasetIndex.empty(name)
        return found

    def display_name(self, identity: str) -> str:
        """Return *identity* in the case it was first seen in the data."""

        main = self.indexes.get(MAIN)
        if main is not None:
            shown = main.display_name(identity)
            if shown:
                return shown
        shown = self.aliases.display_name(identity)
        if shown:
            return shown
        for index in self.indexes.values():
            shown = index.display_name(identity)
            if shown:
                return shown
        return identity
