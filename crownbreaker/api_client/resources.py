"""Generic request helper for the KOM optimizer REST API."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import requests

from ..config import (
    KOM_API_BACKOFF_MAX_SECONDS,
    KOM_API_BASE_URL,
    KOM_API_MAX_RETRIES,
    REQUEST_TIMEOUT,
)
from ..errors import KomOptimizerAPIError
from ..session import SessionContext
from .base import auth_headers
from .response_handling import classify_response_status
from .session import get_default_session

LOGGER = logging.getLogger(__name__)


class ResourceAPI:
    """Sends authenticated requests and classifies the responses.

    Retries (429, 5xx, transport errors) are governed by ``max_retries``;
    the default of one attempt sends every request exactly once.
    """

    def __init__(
        self,
        context: SessionContext,
        *,
        session: requests.Session | None = None,
        base_url: str = KOM_API_BASE_URL,
        timeout: int = REQUEST_TIMEOUT,
        max_retries: int = KOM_API_MAX_RETRIES,
    ) -> None:
        self._context = context
        self._session = session or get_default_session()
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_retries = max(1, max_retries)

    @property
    def context(self) -> SessionContext:
        return self._context

    def url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}"

    def _send(
        self,
        method: str,
        path: str,
        context: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> requests.Response:
        url = self.url(path)
        headers = auth_headers(self._context) if authenticated else {}
        backoff = 1.0
        attempt = 0
        while True:
            attempt += 1
            can_retry = attempt < self._max_retries
            LOGGER.debug("%s %s params=%s attempt=%s", method, url, params, attempt)
            try:
                response = self._session.request(
                    method,
                    url,
                    headers=headers,
                    params=params,
                    json=body,
                    timeout=self._timeout,
                )
            except requests.RequestException as exc:
                if can_retry:
                    LOGGER.warning(
                        "%s network error attempt=%s err=%s; retrying in %.1fs",
                        context,
                        attempt,
                        exc.__class__.__name__,
                        backoff,
                    )
                    time.sleep(backoff)
                    backoff = min(backoff * 2, KOM_API_BACKOFF_MAX_SECONDS)
                    continue
                message = f"{context} network error: {exc.__class__.__name__}"
                LOGGER.error(message)
                raise KomOptimizerAPIError(message) from exc

            action, error = classify_response_status(
                response,
                context,
                attempt=attempt,
                backoff=backoff,
                can_retry=can_retry,
            )
            if action == "retry":
                time.sleep(backoff)
                backoff = min(backoff * 2, KOM_API_BACKOFF_MAX_SECONDS)
                continue
            if action == "raise" and error is not None:
                raise error
            return response

    def fetch_json(
        self,
        method: str,
        path: str,
        context: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Any:
        response = self._send(
            method,
            path,
            context,
            params=params,
            body=body,
            authenticated=authenticated,
        )
        try:
            return response.json()
        except ValueError as exc:
            message = f"{context} returned non-JSON payload"
            LOGGER.error(message)
            raise KomOptimizerAPIError(message) from exc

    def fetch_text(
        self,
        path: str,
        context: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> str:
        response = self._send("GET", path, context, params=params)
        return response.text

    def fetch_field(self, path: str, field: str, context: str) -> Any:
        """GET ``path`` and return ``field`` from the JSON object body."""

        data = self.fetch_json("GET", path, context)
        if not isinstance(data, dict) or field not in data:
            message = f"{context} response is missing '{field}'"
            LOGGER.error(message)
            raise KomOptimizerAPIError(message)
        return data[field]
