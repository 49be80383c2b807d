"""Retrying HTTP access for reference datasets served from a URL prefix."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import HttpConfig


logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "nutrition-tables/1.0",
    "Accept": "text/csv, text/plain;q=0.9, */*;q=0.5",
}

RETRY_STATUSES = (429, 500, 502, 503, 504)


def build_session(
    config: HttpConfig, headers: Optional[Dict[str, str]] = None
) -> requests.Session:
    """Return a session that retries idempotent requests per *config*."""

    session = requests.Session()
    session.headers.update(DEFAULT_HEADERS)
    if headers:
        session.headers.update(headers)

    retries = Retry(
        total=config.max_retries,
        connect=config.max_retries,
        read=config.max_retries,
        status=config.max_retries,
        backoff_factor=config.backoff_factor,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=frozenset({"GET", "HEAD"}),
        # Hand the last response back so raise_for_status reports the real status.
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retries)
    for prefix in ("http://", "https://"):
        session.mount(prefix, adapter)
    return session


class HttpClient:
    """Fetches dataset files over a retrying :class:`requests.Session`."""

    def __init__(
        self,
        config: Optional[HttpConfig] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self._config = config or HttpConfig()
        self._session = build_session(self._config, headers)

    @classmethod
    def from_config(cls, config: HttpConfig) -> "HttpClient":
        return cls(config)

    def get(self, url: str, **kwargs: Any) -> Response:
        """GET *url*, raising :class:`requests.HTTPError` for error statuses."""

        timeout = kwargs.pop("timeout", self._config.timeout)
        logger.debug("GET %s", url)
        response = self._session.get(url, timeout=timeout, **kwargs)
        response.raise_for_status()
        return response

    def fetch_text(self, url: str) -> str:
        """Return the body of *url* as text, assuming UTF-8 when no charset is sent."""

        response = self.get(url)
        # requests falls back to ISO-8859-1 for text/* without a charset.
        if not response.encoding or response.encoding.lower() == "iso-8859-1":
            response.encoding = "utf-8-sig"
        return response.text

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
