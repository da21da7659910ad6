"""Google/Mapbox encoded polyline decoding.

Strava (and the optimizer backend relaying its data) compresses geometry with
the polyline algorithm. Decoding is delegated to the ``polyline`` package;
this module adds an alphabet check and turns every failure into a value.

The public entry points never raise. Malformed input is logged and decodes
to an empty list so map rendering can treat it as "nothing to draw".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from polyline import decode as polyline_decode

from ..config import POLYLINE_PRECISION
from ..errors import PolylineDecodeError
from ..models import Coordinate

LOGGER = logging.getLogger(__name__)

# Every encoded chunk is a 6-bit value offset by 63: '?' .. '~'.
_MIN_CHAR = 63
_MAX_CHAR = 63 + 0x3F

__all__ = ["DecodeResult", "decode_polyline", "try_decode_polyline"]


@dataclass(frozen=True, slots=True)
class DecodeResult:
    """Outcome of a decode attempt: coordinates, or an empty list plus an error."""

    coordinates: List[Coordinate] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _check_alphabet(encoded: str) -> None:
    for index, char in enumerate(encoded):
        if not _MIN_CHAR <= ord(char) <= _MAX_CHAR:
            raise PolylineDecodeError(
                f"invalid character {char!r} at position {index}"
            )


def _decode(encoded: str, precision: int) -> List[Coordinate]:
    _check_alphabet(encoded)
    try:
        decoded = polyline_decode(encoded, precision)
    except IndexError as exc:
        raise PolylineDecodeError("unexpected end of polyline") from exc
    except OverflowError as exc:
        raise PolylineDecodeError("polyline value out of range") from exc
    return [Coordinate(float(lat), float(lng)) for lat, lng in decoded]


def try_decode_polyline(
    encoded: Optional[str], precision: int = POLYLINE_PRECISION
) -> DecodeResult:
    """Decode ``encoded`` into coordinates, reporting failure as a value.

    Args:
        encoded: Polyline string; ``None`` or ``""`` yields an empty result.
        precision: Number of decimal digits the encoder scaled by.

    Returns:
        :class:`DecodeResult` with the points in encoded order, or an empty
        list and an error message when the input is malformed.
    """

    if not encoded:
        return DecodeResult()
    try:
        return DecodeResult(_decode(encoded, precision))
    except (PolylineDecodeError, IndexError, TypeError, ValueError, OverflowError) as exc:
        LOGGER.warning("Failed to decode polyline: %s", exc)
        return DecodeResult(error=str(exc) or type(exc).__name__)


def decode_polyline(
    encoded: Optional[str], precision: int = POLYLINE_PRECISION
) -> List[Coordinate]:
    """Decode ``encoded`` into coordinates; malformed input gives ``[]``."""

    return try_decode_polyline(encoded, precision).coordinates
