# FILE: geoshield/cli.py
# =============================================================================
# GeoShield — Typer CLI
#
# Thin shell around the library entry points:
#   encrypt / decrypt      coordinate pair through the five-step pipeline
#   message / inspect      one-way gs_enc_v1 message tokens
#   seeds / roundtrip      key diagnostics and invertibility check
#   batch encrypt|decrypt  CSV files of coordinates
#   effective-config       resolved config (defaults ← YAML ← --override)
#   version
#
# Global options (before the subcommand) control config and logging:
#   geoshield -c configs/geoshield.yaml --log-level DEBUG encrypt 40.7128 -74.0060 -k test
#
# Keys come from --key or the GEOSHIELD_KEY environment variable (.env is read).
# Negative coordinates can be passed directly; unknown "-<digits>" tokens are
# treated as arguments.
# =============================================================================

from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import get_version
from .batch import BatchFormatError, decrypt_csv, encrypt_csv
from .generator import LehmerGenerator
from .message import MessageFormatError, encrypt_message, parse_message_token
from .pipeline import decrypt_coordinates, derive_step_seeds, encrypt_coordinates, key_fingerprint
from .steps import PIPELINE
from .utils.config_loader import resolve_config
from .utils.logging_utils import get_logger, init_logging

app = typer.Typer(add_completion=False, help="GeoShield — reversible (non-cryptographic) coordinate obfuscation")
batch_app = typer.Typer(help="Encrypt / decrypt CSV files of coordinates")
app.add_typer(batch_app, name="batch")

console = Console()

_NUMERIC_ARGS = {"ignore_unknown_options": True}

# Load environment variables from .env if present (no error if missing)
load_dotenv(override=False)


# =============================================================================
# Helpers
# =============================================================================


def _utc_run_id() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def _cfg(ctx: typer.Context) -> Dict[str, Any]:
    if ctx.obj is None:
        ctx.obj = {"cfg": resolve_config(), "run_id": _utc_run_id()}
    return ctx.obj["cfg"]


def _require_key(key: Optional[str]) -> str:
    if key is None:
        raise typer.BadParameter("No key given. Pass --key or set GEOSHIELD_KEY.", param_hint="--key")
    return key


def _echo_json(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, ensure_ascii=False))


def _fail(message: str, code: int = 2) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=code)


# =============================================================================
# Root
# =============================================================================


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to YAML config."),
    overrides: Optional[str] = typer.Option(None, "--override", "-o", help="JSON string of overrides."),
    run_id: Optional[str] = typer.Option(None, "--run-id", help="Run identifier used in log file names."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override logging level (e.g. INFO, DEBUG)."),
    log_file: Optional[bool] = typer.Option(None, "--log-file/--no-log-file", help="Enable/disable file logging."),
    log_json: Optional[bool] = typer.Option(None, "--log-json/--no-log-json", help="Enable/disable JSONL logging."),
) -> None:
    """
    GeoShield CLI. Run with a subcommand (see --help).
    """
    try:
        cfg = resolve_config(config, overrides_json=overrides)
    except FileNotFoundError as e:
        _fail(str(e))
    except json.JSONDecodeError as e:
        _fail(f"--override is not valid JSON: {e}")

    lc = cfg["logging"]
    if log_level:
        lc["level"] = log_level
    if log_file is not None:
        lc["to_file"] = log_file
    if log_json is not None:
        lc["to_json"] = log_json

    rid = run_id or _utc_run_id()
    init_logging(cfg, run_id=rid)
    ctx.obj = {"cfg": cfg, "run_id": rid, "config_path": str(config) if config else None}

    if ctx.invoked_subcommand is not None:
        return
    console.print(
        Panel.fit(
            "[bold cyan]GeoShield[/bold cyan]\n"
            "[white]Reversible coordinate obfuscation (not encryption-grade)[/white]\n"
            f"[dim]version {get_version()}[/dim]",
            border_style="cyan",
        )
    )
    console.print("Use [bold]geoshield --help[/bold] or a subcommand, e.g. [bold]geoshield encrypt[/bold].")


@app.command("version")
def cli_version() -> None:
    """Print the GeoShield version."""
    _echo_json({"geoshield_version": get_version()})


@app.command("effective-config")
def cli_effective_config(
    ctx: typer.Context,
    out: Optional[Path] = typer.Option(None, "--out", help="Write resolved config to this path (json|yaml)."),
) -> None:
    """
    Render the fully-resolved config (defaults, YAML file and JSON overrides).
    """
    cfg = _cfg(ctx)
    if out is None:
        _echo_json(cfg)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    if out.suffix.lower() in (".yml", ".yaml"):
        out.write_text(yaml.safe_dump(cfg, sort_keys=False), encoding="utf-8")
    else:
        out.write_text(json.dumps(cfg, indent=2), encoding="utf-8")
    typer.echo(f"Wrote resolved config → {out.as_posix()}")


# =============================================================================
# Coordinates
# =============================================================================


@app.command("encrypt", context_settings=_NUMERIC_ARGS)
def cli_encrypt(
    ctx: typer.Context,
    latitude: float = typer.Argument(..., help="Latitude in degrees."),
    longitude: float = typer.Argument(..., help="Longitude in degrees."),
    key: Optional[str] = typer.Option(None, "--key", "-k", envvar="GEOSHIELD_KEY", help="Obfuscation key."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    trace: Optional[bool] = typer.Option(None, "--trace/--no-trace", help="Show per-step derivation traces."),
    locale: Optional[str] = typer.Option(None, "--locale", help="Step names: en | az."),
) -> None:
    """Encrypt a latitude/longitude pair."""
    cfg = _cfg(ctx)
    key = _require_key(key)
    locale = locale or cfg["display"].get("locale", "en")
    show_trace = cfg["display"].get("show_trace", True) if trace is None else trace
    log = get_logger("geoshield.cli")

    result = encrypt_coordinates(latitude, longitude, key, locale=locale)
    log.info("Encrypted (%r, %r) with key %s", latitude, longitude, key_fingerprint(key))

    if as_json:
        payload = result.to_dict()
        if not show_trace:
            for step in payload["derivationSteps"]:
                step.pop("details")
        _echo_json(payload)
        return

    table = Table(title="Derivation", show_lines=True)
    table.add_column("#", justify="right")
    table.add_column("Step", style="bold")
    table.add_column("Latitude", justify="right")
    table.add_column("Longitude", justify="right")
    for i, step in enumerate(result.derivation_steps):
        table.add_row(str(i), step.name, f"{step.latitude:.6f}", f"{step.longitude:.6f}")
    console.print(table)
    if show_trace:
        for step in result.derivation_steps:
            console.print(Panel(Text(step.details), title=step.name, border_style="blue"))
    console.print(f"[bold green]Encrypted:[/bold green] {result.encrypted_lat!r}, {result.encrypted_lng!r}")


@app.command("decrypt", context_settings=_NUMERIC_ARGS)
def cli_decrypt(
    latitude: float = typer.Argument(..., help="Encrypted latitude."),
    longitude: float = typer.Argument(..., help="Encrypted longitude."),
    key: Optional[str] = typer.Option(None, "--key", "-k", envvar="GEOSHIELD_KEY", help="Obfuscation key."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Decrypt an encrypted latitude/longitude pair."""
    key = _require_key(key)
    result = decrypt_coordinates(latitude, longitude, key)
    get_logger("geoshield.cli").info("Decrypted with key %s", key_fingerprint(key))
    if as_json:
        _echo_json(result.to_dict())
        return
    console.print(f"[bold green]Decrypted:[/bold green] {result.decrypted_lat!r}, {result.decrypted_lng!r}")


@app.command("roundtrip", context_settings=_NUMERIC_ARGS)
def cli_roundtrip(
    latitude: float = typer.Argument(...),
    longitude: float = typer.Argument(...),
    key: Optional[str] = typer.Option(None, "--key", "-k", envvar="GEOSHIELD_KEY", help="Obfuscation key."),
    tolerance: float = typer.Option(1e-6, "--tolerance", help="Max absolute error per axis."),
) -> None:
    """Encrypt then decrypt and report the error. Exits 1 if it exceeds the tolerance."""
    key = _require_key(key)
    enc = encrypt_coordinates(latitude, longitude, key)
    dec = decrypt_coordinates(enc.encrypted_lat, enc.encrypted_lng, key)
    err = max(abs(dec.decrypted_lat - latitude), abs(dec.decrypted_lng - longitude))
    ok = math.isfinite(err) and err <= tolerance
    _echo_json(
        {
            "input": [latitude, longitude],
            "encrypted": [enc.encrypted_lat, enc.encrypted_lng],
            "decrypted": [dec.decrypted_lat, dec.decrypted_lng],
            "max_abs_error": err,
            "tolerance": tolerance,
            "ok": ok,
        }
    )
    if not ok:
        raise typer.Exit(code=1)


@app.command("seeds")
def cli_seeds(
    key: Optional[str] = typer.Option(None, "--key", "-k", envvar="GEOSHIELD_KEY", help="Obfuscation key."),
    draws: int = typer.Option(3, "--draws", min=0, help="Generator draws to show per seed."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Show the per-step seeds for a key and the first generator draws of each."""
    key = _require_key(key)
    rows = [
        {
            "index": i,
            "step": kind.slug,
            "seed_text": f"{key}{i}",
            "seed": seed,
            "draws": LehmerGenerator(seed).draw(draws),
        }
        for i, (kind, seed) in enumerate(zip(PIPELINE, derive_step_seeds(key)))
    ]
    if as_json:
        _echo_json(rows)
        return
    table = Table(title=f"Seeds (key fingerprint {key_fingerprint(key)})")
    table.add_column("#", justify="right")
    table.add_column("Step")
    table.add_column("Seed", justify="right")
    table.add_column("Draws")
    for r in rows:
        table.add_row(str(r["index"]), r["step"], str(r["seed"]), ", ".join(f"{d:.6f}" for d in r["draws"]))
    console.print(table)


# =============================================================================
# Messages
# =============================================================================


@app.command("message")
def cli_message(
    text: str = typer.Argument(..., help="Message text."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Produce a one-way gs_enc_v1 token for a text message."""
    result = encrypt_message(text)
    if as_json:
        _echo_json(result.to_dict())
        return
    typer.echo(result.encrypted_text)


@app.command("inspect")
def cli_inspect(token: str = typer.Argument(..., help="A gs_enc_v1 token.")) -> None:
    """Decode the envelope of a gs_enc_v1 token (the text itself is not recoverable)."""
    try:
        parsed = parse_message_token(token)
    except MessageFormatError as e:
        _fail(str(e))
    _echo_json(
        {
            "prefix": parsed.prefix,
            "checksum": parsed.checksum,
            "scaled_value": parsed.scaled_value,
            "value": parsed.value,
        }
    )


# =============================================================================
# Batch
# =============================================================================


def _batch(ctx: typer.Context, mode: str, in_path: Path, out_path: Optional[Path], key: Optional[str],
           lat_column: Optional[str], lng_column: Optional[str]) -> None:
    cfg = _cfg(ctx)
    key = _require_key(key)
    if out_path is None:
        out_path = Path(cfg["run"].get("output_dir", "outputs")) / f"{in_path.stem}_{mode}ed.csv"
    delimiter = cfg["batch"].get("delimiter", ",")
    runner = encrypt_csv if mode == "encrypt" else decrypt_csv
    kwargs: Dict[str, Any] = {"delimiter": delimiter}
    if mode == "encrypt":
        kwargs["lat_column"] = lat_column or cfg["batch"].get("lat_column", "latitude")
        kwargs["lng_column"] = lng_column or cfg["batch"].get("lng_column", "longitude")
    else:
        kwargs["lat_column"] = lat_column or "encrypted_lat"
        kwargs["lng_column"] = lng_column or "encrypted_lng"
    try:
        summary = runner(in_path, out_path, key, **kwargs)
    except (FileNotFoundError, BatchFormatError) as e:
        _fail(str(e))
    _echo_json(summary)


@batch_app.command("encrypt")
def cli_batch_encrypt(
    ctx: typer.Context,
    in_path: Path = typer.Argument(..., help="Input CSV."),
    out_path: Optional[Path] = typer.Argument(None, help="Output CSV (default: <run.output_dir>/<name>_encrypted.csv)."),
    key: Optional[str] = typer.Option(None, "--key", "-k", envvar="GEOSHIELD_KEY"),
    lat_column: Optional[str] = typer.Option(None, "--lat-column"),
    lng_column: Optional[str] = typer.Option(None, "--lng-column"),
) -> None:
    """Encrypt every row of a CSV."""
    _batch(ctx, "encrypt", in_path, out_path, key, lat_column, lng_column)


@batch_app.command("decrypt")
def cli_batch_decrypt(
    ctx: typer.Context,
    in_path: Path = typer.Argument(..., help="Input CSV with encrypted columns."),
    out_path: Optional[Path] = typer.Argument(None, help="Output CSV (default: <run.output_dir>/<name>_decrypted.csv)."),
    key: Optional[str] = typer.Option(None, "--key", "-k", envvar="GEOSHIELD_KEY"),
    lat_column: Optional[str] = typer.Option(None, "--lat-column"),
    lng_column: Optional[str] = typer.Option(None, "--lng-column"),
) -> None:
    """Decrypt every row of a CSV produced by ``batch encrypt``."""
    _batch(ctx, "decrypt", in_path, out_path, key, lat_column, lng_column)

