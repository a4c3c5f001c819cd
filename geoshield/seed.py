"""
Seed derivation: key text → non-negative 32-bit step seed.

The hash is the classic ``h = h * 31 + c`` string hash computed over UTF-16
code units with signed 32-bit wraparound after every update, then made
non-negative with ``abs``. Seeds must match the reference sequence
bit-for-bit, so the wraparound is applied explicitly rather than left to
Python's unbounded ints.
"""
from __future__ import annotations

from typing import List

_UINT32 = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _to_int32(value: int) -> int:
    value &= _UINT32
    return value - 0x100000000 if value & _INT32_SIGN else value


def utf16_code_units(text: str) -> List[int]:
    """Return the UTF-16 code units of ``text`` (surrogate pairs split)."""
    data = text.encode("utf-16-le", errors="surrogatepass")
    return [int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2)]


def derive_seed(text: str) -> int:
    """
    Hash ``text`` into a step seed.

    Any string is valid; the empty string hashes to 0. Note that
    ``abs(-2**31)`` yields ``2**31``, which is kept as-is.
    """
    h = 0
    for unit in utf16_code_units(text):
        h = _to_int32(h * 31 + unit)
    return abs(h)


def step_seed(key: str, index: int) -> int:
    """Seed for pipeline step ``index``: the key with the index appended as text."""
    return derive_seed(f"{key}{index}")
