"""WSGI entrypoint for serving nutrition reports in production."""
from __future__ import annotations

from nutrition_tables.config import AppConfig, load_dotenv_if_available

from . import create_app


load_dotenv_if_available()

# Built at import time; point gunicorn or uwsgi at ``webapp.wsgi:app``.
app = create_app(AppConfig.from_env())


def get_app():
    """Return the module-level application for servers that expect a factory."""

    return app
