"""Authenticated session state shared by the API client.

The session holds the backend JWT plus the user profile returned at login.
It is passed explicitly to whatever needs authenticated calls rather than
being read from ambient storage, and optionally persists to a JSON file so a
login survives between CLI runs.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Optional

from . import config

LOGGER = logging.getLogger(__name__)

__all__ = ["SessionContext", "mask_token"]


def mask_token(token: Optional[str], visible: int = 4) -> str:
    """Return ``token`` with all but the trailing ``visible`` chars masked."""

    if not token:
        return ""
    visible = max(0, visible)
    if visible == 0:
        return "*" * len(token)
    hidden_length = max(len(token) - visible, 0)
    if hidden_length == 0:
        return token
    return ("*" * hidden_length) + token[-visible:]


class SessionContext:
    """Thread-safe holder for the auth token and user profile.

    Args:
        path: JSON file used for persistence. ``None`` keeps everything in
            memory.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path else None
        self._lock = threading.RLock()
        self._token: Optional[str] = None
        self._user: Optional[Dict[str, Any]] = None
        self._loaded = False

    @classmethod
    def default(cls) -> "SessionContext":
        """Session bound to the configured ``SESSION_FILE``."""

        return cls(config.SESSION_FILE)

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def _ensure_loaded(self) -> None:
        # Caller holds the lock.
        if self._loaded:
            return
        self._loaded = True
        if self._path is None or not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            LOGGER.warning("Ignoring unreadable session file %s: %s", self._path, exc)
            return
        if not isinstance(data, dict):
            LOGGER.warning("Ignoring session file %s with unexpected shape", self._path)
            return
        token = data.get("token")
        self._token = token if isinstance(token, str) and token else None
        user = data.get("user")
        self._user = user if isinstance(user, dict) else None
        LOGGER.debug("Loaded session token=%s", mask_token(self._token))

    def _persist(self) -> None:
        # Caller holds the lock.
        if self._path is None:
            return
        if self._token is None:
            try:
                self._path.unlink()
            except FileNotFoundError:
                pass
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(
            json.dumps({"token": self._token, "user": self._user}), encoding="utf-8"
        )
        os.replace(tmp, self._path)

    @property
    def access_token(self) -> Optional[str]:
        with self._lock:
            self._ensure_loaded()
            return self._token

    @property
    def user(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            self._ensure_loaded()
            return dict(self._user) if self._user is not None else None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def login(self, token: str, user: Optional[Dict[str, Any]] = None) -> None:
        """Store a freshly issued token (and profile) and persist it."""

        if not token:
            raise ValueError("token must be a non-empty string")
        with self._lock:
            self._loaded = True
            self._token = token
            self._user = dict(user) if user else None
            self._persist()
        LOGGER.info("Session stored token=%s", mask_token(token))

    def logout(self) -> None:
        """Forget the token and user and remove the persisted file."""

        with self._lock:
            self._loaded = True
            self._token = None
            self._user = None
            self._persist()
        LOGGER.info("Session cleared")
