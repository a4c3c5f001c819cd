"""
Number rendering for derivation traces.

Traces are meant to be read next to traces produced by the browser build of
GeoShield, so numbers follow JavaScript ``Number.prototype.toFixed``:
the exact binary value is rounded half away from zero, ``-0`` prints as
``0``, and non-finite values print as ``NaN`` / ``Infinity``.
"""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal

# Enough digits for any finite double rendered with a few decimals.
_CONTEXT = Context(prec=400)


def to_fixed(value: float, digits: int = 6) -> str:
    """Render ``value`` with exactly ``digits`` decimals, toFixed-style."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        value = 0.0  # drop the sign of -0.0
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_CONTEXT))


def fmt_pair(lat: float, lng: float, digits: int = 6) -> str:
    """``(lat, lng)`` rendered for trace headers."""
    return f"({to_fixed(lat, digits)}, {to_fixed(lng, digits)})"


def js_round(value: float) -> int:
    """Round to the nearest integer with ties toward +inf (``Math.round``)."""
    floor = math.floor(value)
    return floor + 1 if value - floor >= 0.5 else floor
