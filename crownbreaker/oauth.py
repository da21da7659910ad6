"""Browser login through the backend's Strava OAuth hand-off.

A short-lived Flask server on the loopback interface plays the role of the
mobile deep link: the backend redirects there with the issued token, the
handler records the query parameters and the flow stores the token in the
:class:`~crownbreaker.session.SessionContext`.
"""

from __future__ import annotations

import logging
import socket
import threading
import time
import webbrowser
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from flask import Flask
from flask import request as flask_request
from flask.typing import ResponseReturnValue
from werkzeug.serving import BaseWSGIServer, make_server

from .api_client import AuthAPI, parse_auth_params
from .config import OAUTH_HOST, OAUTH_PORT, OAUTH_REDIRECT_PATH, OAUTH_TIMEOUT_SECONDS
from .errors import AuthenticationError
from .session import SessionContext, mask_token

LOGGER = logging.getLogger(__name__)


@dataclass
class OAuthSession:
    """Mutable state of one login attempt, shared with the callback route."""

    params: Optional[Dict[str, Any]] = None
    received: threading.Event = field(default_factory=threading.Event)
    server: Optional[BaseWSGIServer] = None

    def reset(self) -> None:
        self.params = None
        self.received.clear()
        self.server = None


def redirect_uri(host: str = OAUTH_HOST, port: int = OAUTH_PORT) -> str:
    return f"http://{host}:{port}{OAUTH_REDIRECT_PATH}"


def create_callback_app(state: OAuthSession) -> Flask:
    """Flask app whose only route captures the backend redirect."""

    app = Flask(__name__)

    @app.route(OAUTH_REDIRECT_PATH)
    def callback() -> ResponseReturnValue:
        state.params = flask_request.args.to_dict()
        LOGGER.info("Authentication redirect received.")
        state.received.set()
        if "error" in state.params:
            return "Authentication failed. You can close this window now.", 400
        return "Authentication received! You can close this window now."

    return app


def wait_for_port(port: int, host: str = OAUTH_HOST, timeout: int = 10) -> bool:
    """Return True once ``host:port`` accepts TCP connections or timeout elapses."""

    start = time.time()
    while time.time() - start < timeout:
        try:
            with socket.create_connection((host, port), timeout=1):
                return True
        except OSError:
            time.sleep(0.1)
    return False


def _shutdown_server(state: OAuthSession, thread: threading.Thread) -> None:
    if state.server:
        state.server.shutdown()
    thread.join(timeout=5)


def start_login_flow(
    auth_api: AuthAPI,
    context: SessionContext,
    *,
    timeout: int = OAUTH_TIMEOUT_SECONDS,
    host: str = OAUTH_HOST,
    port: int = OAUTH_PORT,
    open_browser: Callable[[str], Any] = webbrowser.open,
) -> Dict[str, Any]:
    """Run the login flow end-to-end and store the token in ``context``.

    Returns:
        The user profile sent by the backend (empty when none was sent).

    Raises:
        AuthenticationError: If the server cannot start, the user does not
            finish in time, or the backend reports an error.
    """

    state = OAuthSession()
    app = create_callback_app(state)

    def _serve() -> None:
        state.server = make_server(host, port, app)
        state.server.serve_forever()

    thread = threading.Thread(target=_serve, daemon=True)
    thread.start()
    try:
        LOGGER.info("Waiting for callback server on port %s...", port)
        if not wait_for_port(port, host):
            raise AuthenticationError(f"Callback server did not start on port {port}")

        auth_url = auth_api.get_auth_url(redirect_uri(host, port))
        LOGGER.info("Opening browser for Strava authorisation...")
        open_browser(auth_url)

        if not state.received.wait(timeout=timeout):
            raise AuthenticationError("Timeout waiting for authentication redirect")

        token, user = parse_auth_params(state.params or {})
    finally:
        LOGGER.info("Shutting down local callback server.")
        _shutdown_server(state, thread)

    context.login(token, user)
    LOGGER.info("Logged in token=%s", mask_token(token))
    return user or {}
