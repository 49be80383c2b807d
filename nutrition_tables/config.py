"""Configuration objects for loading reference data and serving reports."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

from .models import DatasetSpec


def _strtobool(value: str) -> bool:
    """Return ``True`` when *value* represents a truthy string."""

    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def load_dotenv_if_available(path: str | Path | None = None, *, override: bool = False) -> bool:
    """Load variables from a ``.env`` file when python-dotenv is installed."""

    try:
        from dotenv import load_dotenv
    except ImportError:  # pragma: no cover - optional dependency guard
        return False

    dotenv_path: str | Path | None = path
    if dotenv_path is None:
        dotenv_path = Path.cwd() / ".env"

    return load_dotenv(dotenv_path=dotenv_path, override=override)


@dataclass(frozen=True)
class DatasetSourceConfig:
    """Where the reference CSV files live and what they are called."""

    base_url: str = "data/"
    settings_file: str = "settings_global.csv"
    main_file: str = "mapping_nutrition.csv"
    benefits_file: str = "mapping_cognitive_other.csv"
    diet_file: str = "mapping_diet_compat.csv"
    microbiome_file: str = "mapping_microbiome.csv"
    micronutrients_file: str = "mapping_micronutrients.csv"
    use_settings: bool = True

    @classmethod
    def from_env(cls, prefix: str = "NUTRITION_") -> "DatasetSourceConfig":
        """Create a configuration from environment variables."""

        return cls(
            base_url=os.getenv(f"{prefix}DATA_URL", cls.base_url),
            settings_file=os.getenv(f"{prefix}SETTINGS_FILE", cls.settings_file),
            main_file=os.getenv(f"{prefix}MAIN_FILE", cls.main_file),
            benefits_file=os.getenv(f"{prefix}BENEFITS_FILE", cls.benefits_file),
            diet_file=os.getenv(f"{prefix}DIET_FILE", cls.diet_file),
            microbiome_file=os.getenv(f"{prefix}MICROBIOME_FILE", cls.microbiome_file),
            micronutrients_file=os.getenv(
                f"{prefix}MICRONUTRIENTS_FILE", cls.micronutrients_file
            ),
            use_settings=_strtobool(os.getenv(f"{prefix}USE_SETTINGS", "true")),
        )

    def dataset_specs(self) -> Tuple[DatasetSpec, ...]:
        """Datasets in load order; only the alias settings file is optional."""

        specs = []
        if self.use_settings:
            specs.append(
                DatasetSpec("settings", self.settings_file, key_field="alias", optional=True)
            )
        specs.extend(
            [
                DatasetSpec("main", self.main_file),
                DatasetSpec("benefits", self.benefits_file),
                DatasetSpec("diet", self.diet_file),
                DatasetSpec("microbiome", self.microbiome_file),
                DatasetSpec("micronutrients", self.micronutrients_file),
            ]
        )
        return tuple(specs)


@dataclass(frozen=True)
class HttpConfig:
    """Transport settings used when datasets are fetched over HTTP."""

    timeout: int = 30
    max_retries: int = 3
    backoff_factor: float = 0.3

    @classmethod
    def from_env(cls, prefix: str = "NUTRITION_HTTP_") -> "HttpConfig":
        return cls(
            timeout=int(os.getenv(f"{prefix}TIMEOUT", cls.timeout)),
            max_retries=int(os.getenv(f"{prefix}MAX_RETRIES", cls.max_retries)),
            backoff_factor=float(os.getenv(f"{prefix}BACKOFF", cls.backoff_factor)),
        )


@dataclass(frozen=True)
class AppConfig:
    """Top level configuration shared by the CLI and the web app."""

    sources: DatasetSourceConfig = field(default_factory=DatasetSourceConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create the configuration from environment variables."""

        return cls(
            sources=DatasetSourceConfig.from_env(),
            http=HttpConfig.from_env(),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
        )
