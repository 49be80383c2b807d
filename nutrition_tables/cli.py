"""Command line interface for generating nutrition tables."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional, TextIO

from .config import AppConfig, load_dotenv_if_available
from .errors import NutritionTablesError
from .http_client import HttpClient
from .loader import DatasetLoader
from .markdown import render_report
from .models import NutritionReport
from .service import ReportService

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_EMPTY_INPUT = 2


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build nutrition tables for a recipe or a list of ingredients"
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--text-file",
        type=Path,
        help="Recipe text to segment; reads standard input when no source is given.",
    )
    source.add_argument(
        "--ingredient",
        action="append",
        dest="ingredients",
        metavar="NAME",
        help="Ingredient name to include; repeat for several. Skips segmentation.",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Directory or http(s) URL holding the reference CSV files.",
    )
    parser.add_argument(
        "--no-settings",
        action="store_true",
        help="Do not load the optional alias settings file.",
    )
    parser.add_argument(
        "--format",
        choices=("markdown", "json"),
        default="markdown",
        help="Output format.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    parser.add_argument(
        "--warning-log",
        type=Path,
        default=None,
        help="Optional file that receives warnings such as unresolved ingredients.",
    )
    return parser.parse_args(argv)


class _ContextDefaultsFilter(logging.Filter):
    """Ensure log records contain dataset/ingredient attributes for formatting."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        if not hasattr(record, "dataset"):
            record.dataset = "-"
        if not hasattr(record, "ingredient"):
            record.ingredient = "-"
        return True


def configure_logging(level: str, warning_log: Optional[Path] = None) -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("nutrition_tables").setLevel(numeric_level)

    if warning_log is None:
        return
    root_logger = logging.getLogger()
    if any(getattr(handler, "_nutrition_warning_handler", False) for handler in root_logger.handlers):
        return
    warning_log.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(warning_log)
    file_handler.setLevel(logging.WARNING)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s dataset=%(dataset)s "
            "ingredient=%(ingredient)s - %(message)s"
        )
    )
    file_handler.addFilter(_ContextDefaultsFilter())
    file_handler._nutrition_warning_handler = True  # type: ignore[attr-defined]
    root_logger.addHandler(file_handler)


def resolve_config(args: argparse.Namespace) -> AppConfig:
    config = AppConfig.from_env()
    sources = config.sources
    if args.data_dir:
        sources = replace(sources, base_url=args.data_dir)
    if args.no_settings:
        sources = replace(sources, use_settings=False)
    return replace(config, sources=sources)


def write_report(report: NutritionReport, fmt: str, stream: TextIO) -> None:
    if fmt == "json":
        json.dump(report.to_dict(), stream, indent=2, ensure_ascii=False)
        stream.write("\n")
        return
    stream.write(render_report(report))


def main(
    argv: Optional[Iterable[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    load_dotenv_if_available()
    args = parse_args(argv)
    config = resolve_config(args)
    configure_logging(args.log_level or config.log_level, args.warning_log)
    logger = logging.getLogger(__name__)
    out = stdout or sys.stdout

    with HttpClient.from_config(config.http) as http_client:
        service = ReportService(DatasetLoader(config.sources, http_client=http_client))
        try:
            if args.ingredients:
                report = service.report_for_selection(args.ingredients)
            else:
                if args.text_file is not None:
                    text = args.text_file.read_text(encoding="utf-8")
                else:
                    text = (stdin or sys.stdin).read()
                report = service.report_for_text(text)
        except NutritionTablesError as exc:
            logger.error("%s", exc)
            return EXIT_FATAL

    write_report(report, args.format, out)
    if report.is_empty_input:
        logger.warning("No ingredients found in the provided input")
        return EXIT_EMPTY_INPUT
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
