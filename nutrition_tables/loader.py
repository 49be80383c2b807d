"""Retrieve reference CSV datasets from a URL prefix or a local directory."""
from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple
from urllib.parse import urljoin

import requests

from .config import DatasetSourceConfig
from .errors import RetrievalError
from .indexer import ReferenceData
from .models import DatasetSpec, RawDataset


logger = logging.getLogger(__name__)

_RETRIEVAL_ERRORS = (
    OSError,
    UnicodeDecodeError,
    csv.Error,
    requests.RequestException,
    RuntimeError,
)


class TextFetcher(Protocol):
    """Anything that can return the body of a URL as text."""

    def fetch_text(self, url: str) -> str:
        """Return the decoded body of *url*."""


def _is_remote(base: str) -> bool:
    return base.lower().startswith(("http://", "https://"))


def parse_csv(text: str) -> Tuple[Tuple[str, ...], Tuple[Dict[str, str], ...]]:
    """Parse CSV *text* with a header row into trimmed string records.

    Rows whose cells are all blank are dropped.
    """

    if text.startswith("\ufeff"):
        text = text[1:]
    reader = csv.DictReader(io.StringIO(text))
    columns = tuple((name or "").strip() for name in (reader.fieldnames or ()))
    rows: List[Dict[str, str]] = []
    for raw in reader:
        record: Dict[str, str] = {}
        for index, column in enumerate(reader.fieldnames or ()):
            value = raw.get(column)
            if isinstance(value, str):
                value = value.strip()
            record[columns[index]] = value if value is not None else ""
        if not any(record.values()):
            continue
        rows.append(record)
    return columns, tuple(rows)


class DatasetLoader:
    """Fetch every configured dataset and build a :class:`ReferenceData` snapshot."""

    def __init__(
        self,
        sources: DatasetSourceConfig,
        http_client: Optional[TextFetcher] = None,
    ) -> None:
        self._sources = sources
        self._http_client = http_client

    def location(self, spec: DatasetSpec) -> str:
        base = self._sources.base_url
        if _is_remote(base):
            if not base.endswith("/"):
                base = f"{base}/"
            return urljoin(base, spec.filename)
        return str(Path(base) / spec.filename)

    def _read(self, location: str) -> str:
        if _is_remote(location):
            if self._http_client is None:
                raise RuntimeError("no HTTP client configured for remote datasets")
            return self._http_client.fetch_text(location)
        return Path(location).read_text(encoding="utf-8-sig")

    def load(self, spec: DatasetSpec) -> RawDataset:
        """Load one dataset.

        Failures raise :class:`RetrievalError` for required datasets; optional
        datasets come back empty and flagged as degraded.
        """

        location = self.location(spec)
        try:
            columns, rows = parse_csv(self._read(location))
        except _RETRIEVAL_ERRORS as exc:
            if spec.optional:
                logger.warning(
                    "Optional dataset %s unavailable at %s: %s",
                    spec.name,
                    location,
                    exc,
                    extra={"dataset": spec.name},
                )
                return RawDataset.empty(spec)
            logger.error(
                "Required dataset %s unavailable at %s: %s",
                spec.name,
                location,
                exc,
                extra={"dataset": spec.name},
            )
            raise RetrievalError(spec.name, location, str(exc)) from exc

        logger.debug("Loaded %d rows from %s", len(rows), location)
        return RawDataset(spec=spec, columns=columns, rows=rows)

    def load_all(self) -> Tuple[RawDataset, ...]:
        return tuple(self.load(spec) for spec in self._sources.dataset_specs())

    def load_reference(self) -> ReferenceData:
        """Fetch all datasets and index them into a fresh snapshot."""

        datasets = self.load_all()
        reference = ReferenceData.build(datasets)
        logger.info(
            "Reference data ready: %d canonical identities, %d aliases",
            len(reference.universe),
            len(reference.aliases),
        )
        return reference
