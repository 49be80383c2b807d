"""Flask views exposing nutrition reports."""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from flask import Blueprint, Response, jsonify, request
from werkzeug.datastructures import MultiDict

from nutrition_tables.errors import ConfigurationError, RetrievalError
from nutrition_tables.markdown import render_report
from nutrition_tables.models import STATUS_EMPTY_INPUT, NutritionReport
from nutrition_tables.service import ReportService


logger = logging.getLogger(__name__)

FORMATS = ("json", "markdown")
EMPTY_INPUT_MESSAGE = "No ingredients found in the provided input."


def register_routes(app: Any, service: ReportService) -> None:
    """Register the HTTP routes on *app* using the provided service."""

    blueprint = Blueprint("nutrition", __name__)
    api_blueprint = Blueprint("nutrition_api", __name__, url_prefix="/api/v1")

    @blueprint.route("/health")
    def health() -> Any:
        return jsonify({"ok": True, "name": "Nutrition Tables API"})

    @api_blueprint.route("/report", methods=["POST"])
    def create_report() -> Any:
        payload = request.get_json(force=True, silent=True)
        if not isinstance(payload, Mapping):
            payload = {}
        fmt = _parse_format(payload.get("format") or request.args.get("format"))
        if fmt is None:
            return jsonify({"error": "format must be one of: " + ", ".join(FORMATS)}), 400

        ingredients = payload.get("ingredients")
        if ingredients is not None:
            if not isinstance(ingredients, list):
                return jsonify({"error": "ingredients must be a list of names"}), 400
            report = service.report_for_selection(_clean_names(ingredients))
        elif isinstance(payload.get("text"), str):
            report = service.report_for_text(payload["text"])
        else:
            report = NutritionReport.empty_input()
        return _respond(report, fmt)

    @api_blueprint.route("/report", methods=["GET"])
    def report_from_query() -> Any:
        fmt = _parse_format(request.args.get("format"))
        if fmt is None:
            return jsonify({"error": "format must be one of: " + ", ".join(FORMATS)}), 400
        report = service.report_for_selection(_parse_ingredients(request.args))
        return _respond(report, fmt)

    @api_blueprint.errorhandler(RetrievalError)
    def retrieval_failed(exc: RetrievalError) -> Any:
        logger.error("Report aborted: %s", exc)
        return jsonify({"error": str(exc), "dataset": exc.dataset}), 502

    @api_blueprint.errorhandler(ConfigurationError)
    def misconfigured(exc: ConfigurationError) -> Any:
        logger.error("Report aborted: %s", exc)
        return jsonify({"error": str(exc), "dataset": exc.dataset}), 500

    app.register_blueprint(blueprint)
    app.register_blueprint(api_blueprint)


def _respond(report: NutritionReport, fmt: str) -> Any:
    if report.is_empty_input:
        return jsonify({"status": STATUS_EMPTY_INPUT, "error": EMPTY_INPUT_MESSAGE}), 422
    if fmt == "markdown":
        return Response(render_report(report), mimetype="text/markdown")
    return jsonify(report.to_dict())


def _parse_format(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return "json"
    normalized = str(raw).strip().lower()
    return normalized if normalized in FORMATS else None


def _clean_names(values: Iterable[Any]) -> List[str]:
    return [str(value).strip() for value in values if value is not None and str(value).strip()]


def _parse_ingredients(args: MultiDict[str, str]) -> List[str]:
    values: List[str] = []
    values.extend(args.getlist("ingredient"))
    csv_values = args.get("ingredients")
    if csv_values:
        values.extend(part.strip() for part in csv_values.split(","))
    return _clean_names(values)
