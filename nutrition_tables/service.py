"""Request-level orchestration of report generation."""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol

from .config import AppConfig
from .http_client import HttpClient
from .indexer import ReferenceData
from .loader import DatasetLoader
from .models import NutritionReport
from .report import build_report, summarize
from .segmenter import extract_ingredients


logger = logging.getLogger(__name__)


class ReferenceProvider(Protocol):
    """Source of fresh reference data snapshots."""

    def load_reference(self) -> ReferenceData:
        """Return a newly loaded, immutable snapshot."""


class ReportService:
    """Builds nutrition reports from recipe text or explicit selections.

    Each call loads its own :class:`ReferenceData` unless one is passed in, so
    a failed retrieval never falls back to data loaded for another request.
    """

    def __init__(self, provider: ReferenceProvider) -> None:
        self._provider = provider

    @classmethod
    def from_config(
        cls, config: AppConfig, http_client: Optional[HttpClient] = None
    ) -> "ReportService":
        client = http_client or HttpClient.from_config(config.http)
        return cls(DatasetLoader(config.sources, http_client=client))

    def report_for_text(
        self, text: Optional[str], reference: Optional[ReferenceData] = None
    ) -> NutritionReport:
        phrases = extract_ingredients(text)
        if not phrases:
            logger.info("No ingredient lines found in %d characters of text", len(text or ""))
            return NutritionReport.empty_input()
        return self._build(phrases, reference)

    def report_for_selection(
        self, names: Optional[Iterable[str]], reference: Optional[ReferenceData] = None
    ) -> NutritionReport:
        phrases = [str(name) for name in (names or []) if name is not None and str(name).strip()]
        if not phrases:
            return NutritionReport.empty_input()
        return self._build(phrases, reference)

    def _build(
        self, phrases: list[str], reference: Optional[ReferenceData]
    ) -> NutritionReport:
        snapshot = reference if reference is not None else self._provider.load_reference()
        report = build_report(phrases, snapshot)
        counts = summarize(report)
        logger.info(
            "Built report for %d ingredients (%d resolved, %d unresolved)",
            counts["ingredients"],
            counts["resolved"],
            counts["unresolved"],
        )
        return report
