"""Shared fixtures: a small but complete set of reference CSV files."""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, Mapping, Optional, Sequence

import pytest

from nutrition_tables.config import DatasetSourceConfig
from nutrition_tables.indexer import ReferenceData
from nutrition_tables.loader import DatasetLoader
from nutrition_tables.models import DatasetSpec, RawDataset


CSV_FILES: Dict[str, str] = {
    "settings_global.csv": (
        "alias,canonical\n"
        "EVOO,Olive Oil\n"
        "extra virgin olive oil,olive oil\n"
        "oat,Rolled Oats\n"
        "chicken,Chicken Breast\n"
        "evoo,Sunflower Oil\n"
        "sea salt,Salt\n"
    ),
    "mapping_nutrition.csv": (
        "Ingredient,Calories,Protein_g,Fiber_g,Carbs_g,Fat_g,GI,GL,DII,serving_size_g\n"
        "Olive Oil,884,0,0,0,100,,,-0.5,15\n"
        "Tomato,18,0.9,1.2,3.9,0.2,15,0.6,-0.3,\n"
        "Rolled Oats,389,16.9,10.6,66.3,6.9,55,36,-0.2,40\n"
        "Chicken Breast,165,31,0,0,3.6,,,0.1,120\n"
        "Garlic,149,6.4,2.1,33,0.5,30,10,-0.4,5\n"
    ),
    "mapping_cognitive_other.csv": (
        "food,benefits,tags\n"
        'Olive Oil,heart health; antioxidant,anti-inflammatory\n'
        'Tomato,lycopene|eye health,\n'
        'olive oil,"antioxidant, brain",\n'
    ),
    "mapping_diet_compat.csv": (
        "food,Keto,Vegan,Gluten-Free\n"
        "Olive Oil,Y,Y,Y\n"
        "Tomato,yes,yes,\n"
        "Rolled Oats,N,Yes,N\n"
        "Chicken Breast,Y,N,Y\n"
        "Garlic,1,true,Y\n"
    ),
    "mapping_microbiome.csv": (
        "item,microbiome\n"
        "Rolled Oats,beta-glucan; Bifidobacteria\n"
        "Garlic,inulin\n"
    ),
    "mapping_micronutrients.csv": (
        "name,micronutrients\n"
        "Tomato,\"Vitamin C, Potassium\"\n"
        "Chicken Breast,B6; Niacin; Selenium\n"
    ),
}


def write_csv_files(directory: Path, files: Optional[Mapping[str, str]] = None) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for filename, text in (files or CSV_FILES).items():
        (directory / filename).write_text(text, encoding="utf-8")
    return directory


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return write_csv_files(tmp_path / "data")


@pytest.fixture
def sources(data_dir: Path) -> DatasetSourceConfig:
    return DatasetSourceConfig(base_url=str(data_dir))


@pytest.fixture
def reference(sources: DatasetSourceConfig) -> ReferenceData:
    return DatasetLoader(sources).load_reference()


@pytest.fixture
def dataset_factory() -> Callable[..., RawDataset]:
    def _make(
        name: str,
        rows: Iterable[Mapping[str, object]],
        *,
        key_field: str = "canonical",
        optional: bool = False,
        columns: Optional[Sequence[str]] = None,
    ) -> RawDataset:
        materialized = tuple(dict(row) for row in rows)
        if columns is None:
            seen: Dict[str, None] = {}
            for row in materialized:
                for key in row:
                    seen.setdefault(key, None)
            columns = tuple(seen)
        spec = DatasetSpec(name, f"{name}.csv", key_field=key_field, optional=optional)
        return RawDataset(spec=spec, columns=tuple(columns), rows=materialized)

    return _make


@pytest.fixture
def csv_files() -> Dict[str, str]:
    return dict(CSV_FILES)


@pytest.fixture
def write_data() -> Callable[..., Path]:
    return write_csv_files
