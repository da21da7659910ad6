"""Central configuration for the CrownBreaker client.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Deployment-specific values are read from environment
variables (optionally via a local `.env`).
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env from the current directory or any parent folder.
load_dotenv()


# ---------------------------------------------------------------------------
# KOM optimizer backend
# ---------------------------------------------------------------------------
# REST API root. Segment and route endpoints hang off this URL.
KOM_API_BASE_URL = os.getenv(
    "KOM_API_BASE_URL", "https://kom-optimizer-production.up.railway.app/api"
).rstrip("/")

# Root used for the Strava OAuth hand-off endpoints.
KOM_AUTH_BASE_URL = os.getenv("KOM_AUTH_BASE_URL", KOM_API_BASE_URL).rstrip("/")

# Request timeout in seconds.
REQUEST_TIMEOUT = _env_int("REQUEST_TIMEOUT", 15)

# HTTP session pool sizes.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10

# Attempts per API call, including the first one. 1 means no client retry.
KOM_API_MAX_RETRIES = max(1, _env_int("KOM_API_MAX_RETRIES", 1))
# Cap for the exponential backoff between attempts.
KOM_API_BACKOFF_MAX_SECONDS = _env_float("KOM_API_BACKOFF_MAX_SECONDS", 4.0)
# Transport-level retries applied by the urllib3 adapter.
HTTP_ADAPTER_RETRIES = max(0, _env_int("HTTP_ADAPTER_RETRIES", 0))


# ---------------------------------------------------------------------------
# Session / login
# ---------------------------------------------------------------------------
# JSON file holding the auth token and user profile between runs. Set the
# variable to an empty string to keep the session in memory only.
_session_file = os.getenv(
    "CROWNBREAKER_SESSION_FILE", str(Path.home() / ".crownbreaker" / "session.json")
)
SESSION_FILE: Path | None = Path(_session_file).expanduser() if _session_file else None

# Loopback server used to receive the OAuth redirect.
OAUTH_HOST = "localhost"
OAUTH_PORT = _env_int("OAUTH_PORT", 5000)
OAUTH_REDIRECT_PATH = "/auth/strava"
OAUTH_TIMEOUT_SECONDS = _env_int("OAUTH_TIMEOUT_SECONDS", 120)


# ---------------------------------------------------------------------------
# Segment caching
# ---------------------------------------------------------------------------
SEGMENT_DETAILS_CACHE_SIZE = _env_int("SEGMENT_DETAILS_CACHE_SIZE", 128)
SEGMENT_DETAILS_CACHE_TTL_SECONDS = _env_int("SEGMENT_DETAILS_CACHE_TTL_SECONDS", 900)


# ---------------------------------------------------------------------------
# Map region
# ---------------------------------------------------------------------------
# Viewport used when there is nothing to frame (Lyon city centre).
DEFAULT_REGION_CENTER = (45.764, 4.835)
DEFAULT_REGION_SPAN = 0.1
# Multiplier applied to the raw bounding box so points do not sit on the edge.
REGION_MARGIN_FACTOR = 1.2

# Decimal precision of encoded polylines returned by the backend.
POLYLINE_PRECISION = 5


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
# Travel profiles accepted by the optimizer ("moutainbike" is the backend's
# spelling and must be sent as-is).
ROUTE_PROFILES = ("bike", "foot", "moutainbike")
DEFAULT_ROUTE_PROFILE = "bike"
EXPORT_FORMATS = ("gpx", "json", "tcx")
DEFAULT_EXPORT_FORMAT = "gpx"


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------
# Paths can be absolute or relative.
EXPORT_OUTPUT_DIR = Path(os.getenv("EXPORT_OUTPUT_DIR", "exports"))
PREVIEW_OUTPUT_DIR = Path(os.getenv("PREVIEW_OUTPUT_DIR", "previews"))
