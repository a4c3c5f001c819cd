"""
Batch processing — encrypt or decrypt every row of a CSV of coordinates.

Rows are plain dicts (as produced by :class:`csv.DictReader`); all columns are
kept and two result columns are appended. Rows are processed one at a time
with the same key.
"""
from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Tuple

from .pipeline import decrypt_coordinates, encrypt_coordinates
from .utils.logging_utils import get_logger

log = get_logger("geoshield.batch")


class BatchFormatError(ValueError):
    """A CSV row is missing a coordinate column or holds a non-numeric value."""

    def __init__(self, row: int, message: str) -> None:
        super().__init__(f"row {row}: {message}")
        self.row = row


def _read_pair(row: Dict[str, Any], index: int, lat_column: str, lng_column: str) -> Tuple[float, float]:
    if None in row:
        raise BatchFormatError(index, "row has more fields than the header")
    values = []
    for column in (lat_column, lng_column):
        if column not in row or row[column] is None:
            raise BatchFormatError(index, f"missing column {column!r}")
        try:
            values.append(float(row[column]))
        except (TypeError, ValueError) as e:
            raise BatchFormatError(index, f"{column}={row[column]!r} is not a number") from e
    return values[0], values[1]


def encrypt_rows(
    rows: Iterable[Dict[str, Any]],
    key: str,
    lat_column: str = "latitude",
    lng_column: str = "longitude",
) -> Iterator[Dict[str, Any]]:
    """Yield each row with ``encrypted_lat`` / ``encrypted_lng`` appended."""
    for i, row in enumerate(rows, 1):
        lat, lng = _read_pair(row, i, lat_column, lng_column)
        enc = encrypt_coordinates(lat, lng, key)
        out = dict(row)
        out["encrypted_lat"] = enc.encrypted_lat
        out["encrypted_lng"] = enc.encrypted_lng
        yield out


def decrypt_rows(
    rows: Iterable[Dict[str, Any]],
    key: str,
    lat_column: str = "encrypted_lat",
    lng_column: str = "encrypted_lng",
) -> Iterator[Dict[str, Any]]:
    """Yield each row with ``decrypted_lat`` / ``decrypted_lng`` appended."""
    for i, row in enumerate(rows, 1):
        lat, lng = _read_pair(row, i, lat_column, lng_column)
        dec = decrypt_coordinates(lat, lng, key)
        out = dict(row)
        out["decrypted_lat"] = dec.decrypted_lat
        out["decrypted_lng"] = dec.decrypted_lng
        yield out


def _run_csv(mode: str, in_path: str | Path, out_path: str | Path, key: str,
             lat_column: str, lng_column: str, delimiter: str) -> Dict[str, Any]:
    in_path, out_path = Path(in_path), Path(out_path)
    if not in_path.exists():
        raise FileNotFoundError(f"Input CSV not found: {in_path}")

    with in_path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f, delimiter=delimiter)
        fieldnames: List[str] = list(reader.fieldnames or [])
        if mode == "encrypt":
            rows = list(encrypt_rows(reader, key, lat_column, lng_column))
            extra = ["encrypted_lat", "encrypted_lng"]
        else:
            rows = list(decrypt_rows(reader, key, lat_column, lng_column))
            extra = ["decrypted_lat", "decrypted_lng"]

    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames + [c for c in extra if c not in fieldnames], delimiter=delimiter)
        writer.writeheader()
        writer.writerows(rows)

    log.info("Batch %s: %d rows %s → %s", mode, len(rows), in_path, out_path)
    return {"mode": mode, "rows": len(rows), "input": str(in_path), "output": str(out_path)}


def encrypt_csv(in_path: str | Path, out_path: str | Path, key: str, lat_column: str = "latitude",
                lng_column: str = "longitude", delimiter: str = ",") -> Dict[str, Any]:
    """Encrypt every row of ``in_path`` into ``out_path``; returns a summary dict."""
    return _run_csv("encrypt", in_path, out_path, key, lat_column, lng_column, delimiter)


def decrypt_csv(in_path: str | Path, out_path: str | Path, key: str, lat_column: str = "encrypted_lat",
                lng_column: str = "encrypted_lng", delimiter: str = ",") -> Dict[str, Any]:
    """Decrypt every row of ``in_path`` into ``out_path``; returns a summary dict."""
    return _run_csv("decrypt", in_path, out_path, key, lat_column, lng_column, delimiter)
