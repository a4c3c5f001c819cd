from __future__ import annotations

import base64

import pytest

from geoshield.formatting import js_round
from geoshield.message import (
    TOKEN_PATTERN,
    MessageFormatError,
    checksum_matches,
    encrypt_message,
    parse_message_token,
)
from geoshield.seed import step_seed
from geoshield.steps import PIPELINE, apply_step


def _expected_value(text: str) -> float:
    units = text.encode("utf-16-le", "surrogatepass")
    ascii_sum = sum(int.from_bytes(units[i:i + 2], "little") for i in range(0, len(units), 2))
    key = str(len(units) // 2)
    value = float(ascii_sum)
    for i, kind in enumerate(PIPELINE):
        value = apply_step(kind, value, value, step_seed(key, i)).latitude
    return value


@pytest.mark.parametrize("text", ["", "hello", "Salam, dünya!", "🔑", "a" * 40])
def test_token_shape(text):
    msg = encrypt_message(text)
    assert TOKEN_PATTERN.match(msg.encrypted_text)
    assert "=" not in msg.encrypted_text


def test_empty_message():
    msg = encrypt_message("")
    assert msg.ascii_sum == 0
    assert msg.encrypted_text.startswith("gs_enc_v1$0$")


def test_ascii_sum_and_checksum():
    msg = encrypt_message("hello")
    assert msg.ascii_sum == 532
    assert msg.encrypted_text.split("$")[1] == format(532 % 97, "x") == "2f"


def test_ascii_sum_counts_utf16_units():
    # U+1F511 is a surrogate pair: 0xD83D + 0xDD11
    assert encrypt_message("🔑").ascii_sum == 0xD83D + 0xDD11


def test_payload_is_scaled_pipeline_output():
    text = "hello"
    parsed = parse_message_token(encrypt_message(text).encrypted_text)
    assert parsed.scaled_value == js_round(_expected_value(text) * 1e6)
    assert parsed.value == pytest.approx(_expected_value(text), abs=1e-6)


def test_deterministic_and_text_sensitive():
    assert encrypt_message("hello").encrypted_text == encrypt_message("hello").encrypted_text
    assert encrypt_message("hello").encrypted_text != encrypt_message("hellp").encrypted_text


def test_to_dict_shape():
    d = encrypt_message("hi").to_dict()
    assert set(d) == {"encryptedText", "asciiSum"}
    assert d["asciiSum"] == ord("h") + ord("i")


def test_parse_round_trips_envelope():
    token = encrypt_message("hello").encrypted_text
    parsed = parse_message_token(token)
    assert parsed.prefix == "gs_enc_v1"
    assert parsed.checksum == 532 % 97
    payload = token.split("$")[2]
    padded = payload + "=" * (-len(payload) % 4)
    assert base64.b64decode(padded).decode("ascii") == format(parsed.scaled_value, "x")


@pytest.mark.parametrize(
    "token",
    [
        "",
        "gs_enc_v2$1$MTIz",
        "gs_enc_v1$$MTIz",
        "gs_enc_v1$zz$MTIz",
        "gs_enc_v1$1$",
        "gs_enc_v1$1$M",  # single base64 char cannot be decoded
        "gs_enc_v1$1$eHl6",  # "xyz" is not hex
    ],
)
def test_parse_rejects_malformed(token):
    with pytest.raises(MessageFormatError):
        parse_message_token(token)


def test_message_format_error_is_value_error():
    with pytest.raises(ValueError):
        parse_message_token("nope")


def test_checksum_matches():
    token = encrypt_message("hello").encrypted_text
    assert checksum_matches(token, "hello")
    assert checksum_matches(token, "olleh")  # anagrams share a sum
    assert not checksum_matches(token, "hellp")


def test_hello_token_matches_browser_build():
    assert encrypt_message("hello").encrypted_text == "gs_enc_v1$2f$MWNjNzE0MTg"
