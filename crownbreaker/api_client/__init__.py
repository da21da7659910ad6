"""KOM optimizer REST client components."""

from __future__ import annotations

from typing import Optional

import requests

from ..config import KOM_API_BASE_URL, KOM_AUTH_BASE_URL
from ..session import SessionContext
from .auth import AuthAPI, parse_auth_params, parse_auth_redirect  # noqa: F401
from .resources import ResourceAPI  # noqa: F401
from .routes import RoutesAPI, build_optimize_request  # noqa: F401
from .segments import SegmentsAPI  # noqa: F401
from .session import create_default_session, get_default_session  # noqa: F401


class KomOptimizerClient:
    """Facade bundling the segment, route and auth endpoints for one session."""

    def __init__(
        self,
        context: SessionContext,
        *,
        session: Optional[requests.Session] = None,
        base_url: str = KOM_API_BASE_URL,
        auth_base_url: str = KOM_AUTH_BASE_URL,
    ) -> None:
        self.context = context
        resources = ResourceAPI(context, session=session, base_url=base_url)
        self.segments = SegmentsAPI(resources)
        self.routes = RoutesAPI(resources)
        self.auth = AuthAPI(
            ResourceAPI(context, session=session, base_url=auth_base_url)
        )
