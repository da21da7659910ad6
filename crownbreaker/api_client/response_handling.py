"""Shared HTTP response helpers for KOM optimizer API interactions."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..errors import (
    AuthenticationError,
    KomOptimizerAPIError,
    ResourceNotFoundError,
)

__all__ = [
    "classify_response_status",
    "extract_error",
]


def classify_response_status(
    response: requests.Response,
    context: str,
    *,
    attempt: int,
    backoff: float,
    can_retry: bool,
) -> Tuple[str, Optional[Exception]]:
    """Return action for a response status: ok, retry, or raise."""

    status = response.status_code
    if status < 400:
        return "ok", None

    detail = extract_error(response)

    def with_detail(message: str) -> str:
        return f"{message} | {detail}" if detail else message

    if status == 429 and can_retry:
        logging.warning(
            "%s rate limited (429) attempt=%s; sleeping %.1fs",
            context,
            attempt,
            backoff,
        )
        return "retry", None

    if status in (401, 403):
        message = with_detail(f"{context} unauthorized (status {status})")
        logging.warning(message)
        return "raise", AuthenticationError(message)

    if status == 404:
        message = with_detail(f"{context} not found")
        logging.info(message)
        return "raise", ResourceNotFoundError(message)

    if 500 <= status < 600 and can_retry:
        message = with_detail(f"{context} server error {status}")
        logging.warning("%s; retrying in %.1fs", message, backoff)
        return "retry", None

    message = with_detail(f"{context} HTTP error! status: {status}")
    logging.error(message)
    return "raise", KomOptimizerAPIError(message)


def extract_error(resp: Optional[requests.Response]) -> Optional[str]:
    """Return compact string with the backend error info if present."""

    if resp is None:
        return None
    data = _safe_json(resp)
    if data is None:
        return _extract_error_text(resp)
    if not isinstance(data, dict):
        return None
    parts = _collect_error_parts(data)
    return " | ".join(parts) if parts else None


def _safe_json(resp: requests.Response) -> Optional[Any]:
    """Safely parse JSON; return None if parsing fails."""

    try:
        return resp.json()
    except ValueError as exc:
        logging.debug(
            "Failed to decode JSON from %s: %s", getattr(resp, "url", "?"), exc
        )
        return None


def _extract_error_text(resp: requests.Response) -> Optional[str]:
    """Best-effort plain-text extraction when JSON parsing fails."""

    text = getattr(resp, "text", "")
    if not isinstance(text, str):
        return None
    trimmed = text.strip()
    if not trimmed:
        return None
    return (trimmed[:297] + "...") if len(trimmed) > 300 else trimmed


def _collect_error_parts(data: Dict[str, Any]) -> List[str]:
    """Build error snippets from ``message``/``error`` and an ``errors`` list."""

    parts: List[str] = []
    message = data.get("message") or data.get("error")
    if message:
        parts.append(str(message))
    errors = data.get("errors")
    if isinstance(errors, list):
        for err in errors:
            if isinstance(err, str):
                parts.append(err)
                continue
            if not isinstance(err, dict):
                continue
            field = err.get("field") or err.get("path")
            code = err.get("code") or err.get("msg") or err.get("message")
            if code and field:
                parts.append(f"{field}:{code}")
            elif code:
                parts.append(str(code))
    return parts
