"""
Pipeline composer — chains the step library for encryption and decryption.

Encryption runs the steps 0..4 forward, seeding step ``i`` from
``key + str(i)`` and recording a :class:`DerivationStep` after each one.
Decryption runs the same steps 4..0 in reverse. Each step keeps its own
index (and therefore its own seed) in both directions; only the traversal
order flips. That is what makes the reverse pass undo the forward pass.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .seed import step_seed
from .steps import PIPELINE, Direction, StepKind, apply_step
from .utils.logging_utils import get_logger

log = get_logger("geoshield.pipeline")


@dataclass(frozen=True)
class DerivationStep:
    """One recorded encryption step: coordinates *after* the step plus its trace."""
    name: str
    latitude: float
    longitude: float
    details: str
    kind: StepKind = field(compare=False)
    seed: int = field(compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "details": self.details,
        }


@dataclass(frozen=True)
class EncryptedData:
    encrypted_lat: float
    encrypted_lng: float
    derivation_steps: Tuple[DerivationStep, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Camel-cased mapping, as the browser client consumes it."""
        return {
            "encryptedLat": self.encrypted_lat,
            "encryptedLng": self.encrypted_lng,
            "derivationSteps": [s.to_dict() for s in self.derivation_steps],
        }


@dataclass(frozen=True)
class DecryptedData:
    decrypted_lat: float
    decrypted_lng: float

    def to_dict(self) -> Dict[str, Any]:
        return {"decryptedLat": self.decrypted_lat, "decryptedLng": self.decrypted_lng}


def key_fingerprint(key: str) -> str:
    """Short SHA-256 fingerprint used in logs instead of the key itself."""
    return hashlib.sha256(key.encode("utf-8", errors="surrogatepass")).hexdigest()[:12]


def derive_step_seeds(key: str) -> Tuple[int, ...]:
    """Seeds for every pipeline step, indexed like :data:`~geoshield.steps.PIPELINE`."""
    return tuple(step_seed(key, i) for i in range(len(PIPELINE)))


def encrypt_coordinates(latitude: float, longitude: float, key: str, *, locale: str = "en") -> EncryptedData:
    """
    Encrypt a coordinate pair.

    Parameters
    ----------
    latitude, longitude : float
        Input coordinates; no range checks are applied.
    key : str
        Any string, including the empty string.
    locale : str
        ``"en"`` (default) or ``"az"``; selects the step names in the trace.

    Returns
    -------
    EncryptedData
        Final coordinates and one :class:`DerivationStep` per step, in pipeline order.
    """
    lat, lng = float(latitude), float(longitude)
    steps: List[DerivationStep] = []
    log.debug("encrypt: key=%s start=(%r, %r)", key_fingerprint(key), lat, lng)

    for i, kind in enumerate(PIPELINE):
        seed = step_seed(key, i)
        lat, lng, details = apply_step(kind, lat, lng, seed, Direction.FORWARD)
        steps.append(
            DerivationStep(
                name=kind.title(locale),
                latitude=lat,
                longitude=lng,
                details=details,
                kind=kind,
                seed=seed,
            )
        )
        log.debug("encrypt: step %d %s seed=%d -> (%r, %r)", i, kind.slug, seed, lat, lng)

    return EncryptedData(encrypted_lat=lat, encrypted_lng=lng, derivation_steps=tuple(steps))


def decrypt_coordinates(encrypted_lat: float, encrypted_lng: float, key: str) -> DecryptedData:
    """Invert :func:`encrypt_coordinates` for the same ``key``."""
    lat, lng = float(encrypted_lat), float(encrypted_lng)
    log.debug("decrypt: key=%s start=(%r, %r)", key_fingerprint(key), lat, lng)

    for i in reversed(range(len(PIPELINE))):
        kind = PIPELINE[i]
        seed = step_seed(key, i)
        lat, lng, _ = apply_step(kind, lat, lng, seed, Direction.REVERSE)
        log.debug("decrypt: step %d %s seed=%d -> (%r, %r)", i, kind.slug, seed, lat, lng)

    return DecryptedData(decrypted_lat=lat, decrypted_lng=lng)
