"""Exceptions raised while building nutrition reports."""
from __future__ import annotations


class NutritionTablesError(Exception):
    """Base class for fatal report errors."""


class ConfigurationError(NutritionTablesError):
    """A required dataset has no column that can serve as its key."""

    def __init__(self, dataset: str, candidates: tuple[str, ...]) -> None:
        self.dataset = dataset
        self.candidates = candidates
        super().__init__(
            f"Dataset '{dataset}' has no key column; expected one of: "
            + ", ".join(candidates)
        )


class RetrievalError(NutritionTablesError):
    """A required dataset could not be fetched or parsed."""

    def __init__(self, dataset: str, location: str, reason: str) -> None:
        self.dataset = dataset
        self.location = location
        self.reason = reason
        super().__init__(
            f"Could not load required dataset '{dataset}' from {location}: {reason}"
        )
