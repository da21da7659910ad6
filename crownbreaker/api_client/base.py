"""Shared client helpers (auth headers from the session context)."""

from __future__ import annotations

import logging
from typing import Dict

from ..errors import AuthenticationError
from ..session import SessionContext

LOGGER = logging.getLogger(__name__)


def require_token(session: SessionContext) -> str:
    """Return the session token or raise when the user is not logged in."""

    token = session.access_token
    if not token:
        LOGGER.error("No token found in session; run the login flow first")
        raise AuthenticationError("No token found")
    return token


def auth_headers(session: SessionContext) -> Dict[str, str]:
    """Return bearer auth headers for the session (token must exist)."""

    return {"Authorization": f"Bearer {require_token(session)}"}
