"""Backend-brokered Strava login.

The backend owns the Strava client credentials. The client asks it for an
authorisation URL bound to a redirect URI, sends the user there, and the
backend finally redirects back with ``success``/``token``/``user`` (or
``error``) query parameters.
"""

from __future__ import annotations

import json
import logging
import urllib.parse
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..errors import AuthenticationError, KomOptimizerAPIError
from .resources import ResourceAPI

LOGGER = logging.getLogger(__name__)

__all__ = ["AuthAPI", "parse_auth_redirect", "parse_auth_params"]


class AuthAPI:
    def __init__(self, resources: ResourceAPI) -> None:
        self._resources = resources

    def get_auth_url(self, redirect_uri: str) -> str:
        """Return the Strava authorisation URL the user must open."""

        data = self._resources.fetch_json(
            "GET",
            "auth/strava/mobile-auth-url",
            "Auth URL",
            params={"redirectUri": redirect_uri},
            authenticated=False,
        )
        auth_url = data.get("authUrl") if isinstance(data, dict) else None
        if not auth_url:
            raise KomOptimizerAPIError("Auth URL response is missing 'authUrl'")
        return str(auth_url)


def _first(params: Mapping[str, Any], key: str) -> Optional[str]:
    value = params.get(key)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return value if value else None


def parse_auth_params(
    params: Mapping[str, str | Sequence[str]],
) -> Tuple[str, Optional[Dict[str, Any]]]:
    """Extract ``(token, user)`` from redirect query parameters.

    Raises:
        AuthenticationError: On an ``error`` parameter, a missing token, an
            unsuccessful flag or an undecodable user payload.
    """

    error = _first(params, "error")
    if error:
        raise AuthenticationError(f"Authentication error: {error}")
    token = _first(params, "token")
    if _first(params, "success") != "true" or not token:
        raise AuthenticationError("Authentication response did not contain a token")
    user: Optional[Dict[str, Any]] = None
    raw_user = _first(params, "user")
    if raw_user:
        try:
            decoded = json.loads(urllib.parse.unquote(raw_user))
        except ValueError as exc:
            raise AuthenticationError(
                "Failed to parse authentication response"
            ) from exc
        user = decoded if isinstance(decoded, dict) else None
    return token, user


def parse_auth_redirect(url: str) -> Tuple[str, Optional[Dict[str, Any]]]:
    """Parse the redirect URL the backend sends after login."""

    query = urllib.parse.urlsplit(url).query
    params = urllib.parse.parse_qs(query)
    return parse_auth_params(params)
