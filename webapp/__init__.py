"""Flask application factory for the nutrition tables API."""
from __future__ import annotations

from flask import Flask

from nutrition_tables.config import AppConfig
from nutrition_tables.service import ReportService

from .views import register_routes


def create_app(
    config: AppConfig | None = None, service: ReportService | None = None
) -> Flask:
    """Create and configure the Flask application."""

    resolved_config = config or AppConfig.from_env()
    app = Flask(__name__)
    report_service = service or ReportService.from_config(resolved_config)
    register_routes(app, report_service)
    app.config["APP_CONFIG"] = resolved_config
    app.config["REPORT_SERVICE"] = report_service
    return app
