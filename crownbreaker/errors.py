"""Central error types used across the application."""

from __future__ import annotations


class KomOptimizerAPIError(RuntimeError):
    """Base error for KOM optimizer backend failures."""


class AuthenticationError(KomOptimizerAPIError):
    """Raised when no token is available or the backend rejects it."""


class ResourceNotFoundError(KomOptimizerAPIError):
    """Raised when a segment or route does not exist."""


class RouteGenerationError(KomOptimizerAPIError):
    """Raised when the optimizer reports it could not build a route."""


class RouteConfigError(ValueError):
    """Raised when a route request is incomplete or out of range."""


class PolylineDecodeError(ValueError):
    """Raised by the polyline scanner on truncated or invalid input."""


__all__ = [
    "KomOptimizerAPIError",
    "AuthenticationError",
    "ResourceNotFoundError",
    "RouteGenerationError",
    "RouteConfigError",
    "PolylineDecodeError",
]
