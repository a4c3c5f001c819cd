"""
Config loader & resolver

- DEFAULTS: built-in configuration used when no YAML file is given
- load_yaml(path): loads YAML into dict (requires PyYAML)
- resolve_config(path, overrides_json): defaults ← YAML ← JSON overrides
"""
from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULTS: Dict[str, Any] = {
    "run": {"output_dir": "outputs"},
    "display": {"locale": "en", "show_trace": True},
    "batch": {"lat_column": "latitude", "lng_column": "longitude", "delimiter": ","},
    "logging": {"level": "WARNING", "to_file": False, "to_json": False, "dir": "logs"},
}


def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    return yaml.safe_load(p.read_text(encoding="utf-8")) or {}


def deep_merge(a: Dict, b: Dict) -> Dict:
    """Recursively merge dict b into a (returns a new dict)."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def resolve_config(path: Optional[str | Path] = None, overrides_json: Optional[str] = None) -> Dict[str, Any]:
    cfg = copy.deepcopy(DEFAULTS)
    if path:
        cfg = deep_merge(cfg, load_yaml(path))
    if overrides_json:
        # Accept a JSON string (e.g. {"display":{"locale":"az"}})
        cfg = deep_merge(cfg, json.loads(overrides_json))
    return cfg
