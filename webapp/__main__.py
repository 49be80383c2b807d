"""Development server for the nutrition tables API."""
from __future__ import annotations

import logging
import os

from nutrition_tables.config import AppConfig, load_dotenv_if_available

from . import create_app


def main() -> None:
    load_dotenv_if_available()
    config = AppConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    logging.getLogger(__name__).info("Serving nutrition reports on %s:%d", host, port)
    create_app(config).run(host=host, port=port)


if __name__ == "__main__":
    main()
