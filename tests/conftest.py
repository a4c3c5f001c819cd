"""
Shared pytest fixtures for GeoShield tests.

Writes a minimal geoshield.yaml into a temp folder and provides the loaded
config dict via geoshield.utils.config_loader. Root logger state is restored
after every test because the CLI reconfigures logging on each invocation.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

import pytest

from geoshield.utils.config_loader import resolve_config


_MIN_CONFIG_YAML = """\
run:
  output_dir: "{OUT}"

display:
  locale: "az"
  show_trace: false

batch:
  lat_column: "lat"
  lng_column: "lon"

logging:
  level: "WARNING"
  to_file: false
"""


@pytest.fixture(scope="function")
def cfg_path(tmp_path: Path) -> Path:
    """Writes a minimal geoshield.yaml into tmp_path/configs/ and returns its path."""
    cfg_dir = tmp_path / "configs"
    cfg_dir.mkdir(parents=True, exist_ok=True)
    out_dir = tmp_path / "outputs"
    text = _MIN_CONFIG_YAML.replace("{OUT}", str(out_dir.as_posix()))
    p = cfg_dir / "geoshield.yaml"
    p.write_text(text, encoding="utf-8")
    return p


@pytest.fixture(scope="function")
def cfg(cfg_path: Path) -> Dict:
    """Resolved config (defaults merged with the YAML from cfg_path)."""
    return resolve_config(cfg_path)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)
