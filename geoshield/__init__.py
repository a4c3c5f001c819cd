# geoshield/__init__.py
# ======================================================================================
# GeoShield — reversible coordinate obfuscation
#
# A (latitude, longitude) pair is pushed through five invertible steps, each seeded
# from the key and the step index:
#   0) collatz     → Collatz-history offset of the integer parts
#   1) prime_jump  → opposite-signed jump by a product of two small primes
#   2) fibonacci   → golden-angle spiral shift
#   3) affine      → per-axis scale + shift
#   4) log_spiral  → logarithmic spiral displacement
#
# Decryption runs the same steps backwards with the same per-step seeds.
# This is deterministic obfuscation, NOT cryptography.
#
# License
#   MIT (c) 2025 GeoShield contributors
# ======================================================================================

from __future__ import annotations

import os

from .generator import LehmerGenerator
from .message import EncryptedMessage, MessageFormatError, encrypt_message, parse_message_token
from .pipeline import (
    DecryptedData,
    DerivationStep,
    EncryptedData,
    decrypt_coordinates,
    derive_step_seeds,
    encrypt_coordinates,
)
from .seed import derive_seed, step_seed
from .steps import PIPELINE, Direction, StepKind, StepResult, apply_step

__all__ = [
    # Entry points
    "encrypt_coordinates",
    "decrypt_coordinates",
    "encrypt_message",
    "parse_message_token",
    # Building blocks
    "derive_seed",
    "step_seed",
    "derive_step_seeds",
    "LehmerGenerator",
    "apply_step",
    "PIPELINE",
    "StepKind",
    "Direction",
    # Value types
    "StepResult",
    "DerivationStep",
    "EncryptedData",
    "DecryptedData",
    "EncryptedMessage",
    "MessageFormatError",
    "get_version",
]


def get_version() -> str:
    """
    Return the GeoShield version.
    Uses environment variable GEOSHIELD_VERSION if present, else falls back to static.
    """
    return os.environ.get("GEOSHIELD_VERSION", "1.0.0")


__version__ = get_version()
