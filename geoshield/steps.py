"""
Step library — the five reversible transforms of the GeoShield pipeline.

Every step is a pure function of ``(lat, lng, seed, direction)`` returning a
:class:`StepResult`. The forward and reverse branches of a step live side by
side in the same function so the inverse can be checked against the forward
math at a glance. A step that draws random values builds its own
:class:`~geoshield.generator.LehmerGenerator` from the seed, so reversing a
step only needs the same seed, never the forward output.

Pipeline order (fixed, see :data:`PIPELINE`)
--------------------------------------------
0. COLLATZ     — offset from Collatz histories of the integer parts (key-independent)
1. PRIME_JUMP  — opposite-signed jump by a product of two small primes
2. FIBONACCI   — golden-angle spiral offset
3. AFFINE      — per-axis scale + shift
4. LOG_SPIRAL  — logarithmic spiral offset
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Tuple, Union

from .formatting import fmt_pair, to_fixed
from .generator import LehmerGenerator

PRIMES: Tuple[int, ...] = (17, 31, 53, 71, 97)
COLLATZ_ITERATIONS = 5
GOLDEN_ANGLE = 137.5 * (math.pi / 180)

Number = Union[int, float]


class Direction(str, Enum):
    FORWARD = "forward"
    REVERSE = "reverse"

    @property
    def is_reverse(self) -> bool:
        return self is Direction.REVERSE


class StepResult(NamedTuple):
    latitude: float
    longitude: float
    trace: str


class StepKind(Enum):
    """The five pipeline steps, in pipeline order."""

    COLLATZ = ("collatz", "Collatz Mixing", "Collatz Fərziyyəsi ilə Qarışdırma")
    PRIME_JUMP = ("prime_jump", "Prime Jump", "Sadə Ədədlə Atlama (Prime-Jump)")
    FIBONACCI = ("fibonacci", "Fibonacci Spiral Shift", "Fibonaççi Spiral Sürüşdürməsi")
    AFFINE = ("affine", "Affine Coordinate Transform", "Affin Koordinat Transformasiyası")
    LOG_SPIRAL = ("log_spiral", "Logarithmic Spiral Displacement", "Logarifmik Spiral Yerdəyişməsi")

    def __init__(self, slug: str, title_en: str, title_az: str) -> None:
        self.slug = slug
        self.title_en = title_en
        self.title_az = title_az

    def title(self, locale: str = "en") -> str:
        return self.title_az if locale == "az" else self.title_en


# =================================================================================================
# 1) Collatz mixing
# =================================================================================================


def _integer_part(value: float) -> Number:
    """floor(|value|); non-finite values pass through so NaN/Infinity propagate."""
    magnitude = abs(value)
    return math.floor(magnitude) if math.isfinite(magnitude) else magnitude


def _show(n: Number) -> str:
    if isinstance(n, float):
        return to_fixed(n, 0)
    return str(n)


def _collatz_history(start: Number) -> List[Number]:
    """``start`` followed by COLLATZ_ITERATIONS Collatz iterates."""
    history: List[Number] = [start]
    n = start
    for _ in range(COLLATZ_ITERATIONS):
        n = n // 2 if n % 2 == 0 else n * 3 + 1
        history.append(n)
    return history


def _collatz_lines(history: List[Number], label: str) -> List[str]:
    lines = []
    for n, nxt in zip(history, history[1:]):
        if n % 2 == 0:
            lines.append(f"  {label}: {_show(n)} (even) -> {_show(n)} / 2 = {_show(nxt)}\n")
        else:
            lines.append(f"  {label}: {_show(n)} (odd) -> (3 * {_show(n)}) + 1 = {_show(nxt)}\n")
    return lines


def _collatz_offset(history: List[Number]) -> float:
    return (sum(history) % 10000) / 100000


def _source_integer_part(value: float, sign: int) -> Number:
    """
    Integer part of the *pre-step* value that produced ``value``.

    The forward step computed ``value = x + sign * offset(floor|x|)`` with an
    offset below 0.1, so floor|x| is floor|value| or one of its neighbours.
    The first candidate that reproduces itself is taken; floor|value| is tried
    first and is also the fallback.
    """
    m = _integer_part(value)
    if isinstance(m, float):
        return m
    for n in (m, m - 1, m + 1):
        if n < 0:
            continue
        x = value - sign * _collatz_offset(_collatz_history(n))
        if _integer_part(x) == n:
            return n
    return m


def collatz_step(lat: float, lng: float, seed: int, direction: Direction) -> StepResult:
    """Offset both axes by the Collatz history sums of their integer parts.

    ``seed`` is accepted for a uniform signature but plays no part here, so
    this step is the same for every key.
    """
    if direction.is_reverse:
        lat_int = _source_integer_part(lat, +1)
        lng_int = _source_integer_part(lng, -1)
    else:
        lat_int = _integer_part(lat)
        lng_int = _integer_part(lng)
    details = f"Input: {fmt_pair(lat, lng)}\nInteger Parts: X={_show(lat_int)}, Y={_show(lng_int)}\n\n"

    lat_history = _collatz_history(lat_int)
    lng_history = _collatz_history(lng_int)
    # X and Y interleave per iteration in the trace.
    for i, (x_line, y_line) in enumerate(zip(_collatz_lines(lat_history, "X"), _collatz_lines(lng_history, "Y"))):
        details += f"Step {i + 1}:\n" + x_line + y_line + "\n"

    lat_offset = _collatz_offset(lat_history)
    lng_offset = _collatz_offset(lng_history)
    details += (
        "Resulting Offsets:\n"
        f"  Lat Offset: ΣX % 10000 / 100000 = {to_fixed(lat_offset)}\n"
        f"  Lng Offset: ΣY % 10000 / 100000 = {to_fixed(lng_offset)}\n"
    )

    if direction.is_reverse:
        new_lat, new_lng = lat - lat_offset, lng + lng_offset
    else:
        new_lat, new_lng = lat + lat_offset, lng - lng_offset
    details += f"Output: {fmt_pair(new_lat, new_lng)}"
    return StepResult(new_lat, new_lng, details)


# =================================================================================================
# 2) Prime jump
# =================================================================================================


def prime_jump_step(lat: float, lng: float, seed: int, direction: Direction) -> StepResult:
    """Move latitude down and longitude up by ``p1 * p2 / 100000``."""
    random = LehmerGenerator(seed)
    p1 = PRIMES[math.floor(random.next() * len(PRIMES))]
    p2 = PRIMES[math.floor(random.next() * len(PRIMES))]
    offset = (p1 * p2) / 100000

    if direction.is_reverse:
        new_lat, new_lng = lat + offset, lng - offset
        lat_op, lng_op = "+", "-"
    else:
        new_lat, new_lng = lat - offset, lng + offset
        lat_op, lng_op = "-", "+"

    o = to_fixed(offset)
    details = (
        f"Input: {fmt_pair(lat, lng)}\n"
        f"Chosen Primes: p1={p1}, p2={p2}\n"
        f"Offset Calculation: (p1 * p2) / 100000 = {o}\n"
        f"New Lat: lat {lat_op} offset = {to_fixed(lat)} {lat_op} {o} = {to_fixed(new_lat)}\n"
        f"New Lng: lng {lng_op} offset = {to_fixed(lng)} {lng_op} {o} = {to_fixed(new_lng)}"
    )
    return StepResult(new_lat, new_lng, details)


# =================================================================================================
# 3) Fibonacci / golden-angle spiral
# =================================================================================================


def fibonacci_step(lat: float, lng: float, seed: int, direction: Direction) -> StepResult:
    """Shift by a point on a golden-angle spiral (distance < 0.02 degrees)."""
    random = LehmerGenerator(seed)
    distance = random.next() * 0.02
    angle = random.next() * 360

    lat_offset = distance * math.cos(angle * GOLDEN_ANGLE)
    lng_offset = distance * math.sin(angle * GOLDEN_ANGLE)

    if direction.is_reverse:
        new_lat, new_lng = lat - lat_offset, lng - lng_offset
    else:
        new_lat, new_lng = lat + lat_offset, lng + lng_offset

    details = (
        f"Input: {fmt_pair(lat, lng)}\n"
        f"Golden Angle: {to_fixed(GOLDEN_ANGLE, 4)} rad\n"
        f"Distance (d): {to_fixed(distance, 4)}, Angle (a): {to_fixed(angle, 4)}\n"
        f"Lat Offset: d * cos(a * GA) = {to_fixed(lat_offset)}\n"
        f"Lng Offset: d * sin(a * GA) = {to_fixed(lng_offset)}\n"
        f"Output: {fmt_pair(new_lat, new_lng)}"
    )
    return StepResult(new_lat, new_lng, details)


# =================================================================================================
# 4) Affine transform
# =================================================================================================


def affine_step(lat: float, lng: float, seed: int, direction: Direction) -> StepResult:
    """``lat' = a1*lat + b1``, ``lng' = a2*lng + b2`` with a1, a2 in [0.9, 1.1]."""
    random = LehmerGenerator(seed)
    a1 = 1 + (random.next() - 0.5) * 0.2
    b1 = (random.next() - 0.5) * 0.1
    a2 = 1 + (random.next() - 0.5) * 0.2
    b2 = (random.next() - 0.5) * 0.1

    details = f"Input: {fmt_pair(lat, lng)}\n"
    details += "Formulas:\n  new_lat = (lat * a1) + b1\n  new_lng = (lng * a2) + b2\n\n"
    details += (
        "Variables:\n"
        f"  a1={to_fixed(a1, 4)}, b1={to_fixed(b1, 4)}\n"
        f"  a2={to_fixed(a2, 4)}, b2={to_fixed(b2, 4)}\n\n"
    )

    if direction.is_reverse:
        new_lat = (lat - b1) / a1
        new_lng = (lng - b2) / a2
        details += (
            "Reverse Calculation:\n"
            f"  orig_lat = ({to_fixed(lat)} - {to_fixed(b1, 4)}) / {to_fixed(a1, 4)} = {to_fixed(new_lat)}\n"
            f"  orig_lng = ({to_fixed(lng)} - {to_fixed(b2, 4)}) / {to_fixed(a2, 4)} = {to_fixed(new_lng)}"
        )
    else:
        new_lat = a1 * lat + b1
        new_lng = a2 * lng + b2
        details += (
            "Forward Calculation:\n"
            f"  new_lat = ({to_fixed(lat)} * {to_fixed(a1, 4)}) + {to_fixed(b1, 4)} = {to_fixed(new_lat)}\n"
            f"  new_lng = ({to_fixed(lng)} * {to_fixed(a2, 4)}) + {to_fixed(b2, 4)} = {to_fixed(new_lng)}"
        )
    return StepResult(new_lat, new_lng, details)


# =================================================================================================
# 5) Logarithmic spiral
# =================================================================================================


def log_spiral_step(lat: float, lng: float, seed: int, direction: Direction) -> StepResult:
    """Shift by ``r = a * e^(b*θ)`` along angle θ in [-π, π)."""
    random = LehmerGenerator(seed)
    a = 0.01 + random.next() * 0.01
    b = 0.1 + random.next() * 0.1
    theta = (random.next() * 2 - 1) * math.pi

    r = a * math.exp(b * theta)
    lat_offset = r * math.cos(theta)
    lng_offset = r * math.sin(theta)

    if direction.is_reverse:
        new_lat, new_lng = lat - lat_offset, lng - lng_offset
    else:
        new_lat, new_lng = lat + lat_offset, lng + lng_offset

    a4, b4, t4, r6 = to_fixed(a, 4), to_fixed(b, 4), to_fixed(theta, 4), to_fixed(r)
    details = f"Input: {fmt_pair(lat, lng)}\n"
    details += "Formulas:\n  r = a * e^(b * θ)\n  lat_offset = r * cos(θ)\n  lng_offset = r * sin(θ)\n\n"
    details += f"Variables:\n  a={a4}, b={b4}, θ={t4}\n\n"
    details += (
        "Calculation:\n"
        f"  r = {a4} * e^({b4} * {t4}) = {r6}\n"
        f"  lat_offset = {r6} * cos({t4}) = {to_fixed(lat_offset)}\n"
        f"  lng_offset = {r6} * sin({t4}) = {to_fixed(lng_offset)}\n"
    )
    details += f"Output: {fmt_pair(new_lat, new_lng)}"
    return StepResult(new_lat, new_lng, details)


# =================================================================================================
# Dispatch
# =================================================================================================

StepFn = Callable[[float, float, int, Direction], StepResult]

_STEP_FUNCTIONS: Dict[StepKind, StepFn] = {
    StepKind.COLLATZ: collatz_step,
    StepKind.PRIME_JUMP: prime_jump_step,
    StepKind.FIBONACCI: fibonacci_step,
    StepKind.AFFINE: affine_step,
    StepKind.LOG_SPIRAL: log_spiral_step,
}

PIPELINE: Tuple[StepKind, ...] = (
    StepKind.COLLATZ,
    StepKind.PRIME_JUMP,
    StepKind.FIBONACCI,
    StepKind.AFFINE,
    StepKind.LOG_SPIRAL,
)


def apply_step(
    kind: StepKind,
    lat: float,
    lng: float,
    seed: int,
    direction: Direction = Direction.FORWARD,
) -> StepResult:
    """Run one step of ``kind`` in ``direction``."""
    return _STEP_FUNCTIONS[kind](lat, lng, seed, Direction(direction))
