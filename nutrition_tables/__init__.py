"""Ingredient matching and nutrient aggregation for recipe nutrition tables."""
from .errors import ConfigurationError, NutritionTablesError, RetrievalError
from .indexer import ReferenceData
from .models import NutritionReport
from .normalizer import normalize_phrase
from .report import build_report
from .segmenter import extract_ingredients
from .service import ReportService

__all__ = [
    "ConfigurationError",
    "NutritionReport",
    "NutritionTablesError",
    "ReferenceData",
    "ReportService",
    "RetrievalError",
    "build_report",
    "extract_ingredients",
    "normalize_phrase",
]
