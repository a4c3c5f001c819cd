"""
Message adapter — runs a short text through the forward pipeline as a scalar.

The text is reduced to the sum of its UTF-16 code units, the text length is
used as the key, and each step is fed the value in both the latitude and the
longitude slot. Only the latitude-slot output is carried forward, so the
longitude-slot information is lost and the transform is one-way.

Token layout::

    gs_enc_v1$<hex(ascii_sum % 97)>$<base64(hex(round(value * 1e6))) without '='>

Nothing here is secret or secure; the token is a display artifact.
"""
from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Any, Dict

from .formatting import js_round
from .seed import step_seed, utf16_code_units
from .steps import PIPELINE, Direction, apply_step
from .utils.logging_utils import get_logger

PREFIX = "gs_enc_v1"
CHECKSUM_MODULUS = 97
SCALE = 1e6

TOKEN_PATTERN = re.compile(r"^gs_enc_v1\$([0-9a-f]+)\$([A-Za-z0-9+/]+)$")

log = get_logger("geoshield.message")


class MessageFormatError(ValueError):
    """Raised when a string is not a well-formed ``gs_enc_v1`` token."""


@dataclass(frozen=True)
class EncryptedMessage:
    encrypted_text: str
    ascii_sum: int

    def to_dict(self) -> Dict[str, Any]:
        return {"encryptedText": self.encrypted_text, "asciiSum": self.ascii_sum}


@dataclass(frozen=True)
class MessageToken:
    """Decoded envelope of a token. The original text is not recoverable."""
    prefix: str
    checksum: int
    scaled_value: int

    @property
    def value(self) -> float:
        return self.scaled_value / SCALE


def checksum(ascii_sum: int) -> str:
    return format(ascii_sum % CHECKSUM_MODULUS, "x")


def encrypt_message(text: str) -> EncryptedMessage:
    """Encode ``text`` into a ``gs_enc_v1`` token (one-way)."""
    units = utf16_code_units(text)
    ascii_sum = sum(units)
    key = str(len(units))

    value: float = ascii_sum
    for i, kind in enumerate(PIPELINE):
        result = apply_step(kind, value, value, step_seed(key, i), Direction.FORWARD)
        value = result.latitude

    hex_value = format(js_round(value * SCALE), "x")
    payload = base64.b64encode(hex_value.encode("ascii")).decode("ascii").replace("=", "")
    token = f"{PREFIX}${checksum(ascii_sum)}${payload}"
    log.debug("message: length=%d ascii_sum=%d value=%r", len(units), ascii_sum, value)
    return EncryptedMessage(encrypted_text=token, ascii_sum=ascii_sum)


def parse_message_token(token: str) -> MessageToken:
    """
    Split a token into its checksum and scaled payload value.

    Raises
    ------
    MessageFormatError
        If the prefix, checksum, or payload is malformed.
    """
    m = TOKEN_PATTERN.match(token.strip())
    if not m:
        raise MessageFormatError(f"Not a {PREFIX} token: {token!r}")
    checksum_hex, payload = m.groups()

    padded = payload + "=" * (-len(payload) % 4)
    try:
        hex_value = base64.b64decode(padded, validate=True).decode("ascii")
        scaled = int(hex_value, 16)
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise MessageFormatError(f"Malformed {PREFIX} payload: {payload!r}") from e

    return MessageToken(prefix=PREFIX, checksum=int(checksum_hex, 16), scaled_value=scaled)


def checksum_matches(token: str, text: str) -> bool:
    """True when ``token`` carries the checksum of ``text``."""
    parsed = parse_message_token(token)
    return parsed.checksum == sum(utf16_code_units(text)) % CHECKSUM_MODULUS
