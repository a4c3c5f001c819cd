# geoshield/utils/logging_utils.py
# ======================================================================================
# GeoShield
# Logging Utilities — config-driven console / file / JSONL logging
# --------------------------------------------------------------------------------------
# Purpose
#   One place to configure logging for the CLI and for library users who want it:
#     • Level, destinations and directory come from the "logging" config section.
#     • Console output goes to stderr so JSON printed on stdout stays parseable.
#     • Optional plain-text and JSONL files named by run id.
#
# Design
#   - init_logging(cfg, run_id): resets the root logger and installs handlers.
#   - get_logger(name): namespaced logger; library modules only log at DEBUG.
#
# Dependencies: Python stdlib only (logging, json, datetime, pathlib).
#
# License
#   MIT (c) 2025 GeoShield contributors
# ======================================================================================

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

_CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class _JSONLogHandler(logging.Handler):
    """
    Writes one JSON object per record (JSONL) to ``path``.
    """

    def __init__(self, path: Path, level: int = logging.INFO) -> None:
        super().__init__(level)
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("a", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = {
                "time": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
                "level": record.levelname,
                "logger": record.name,
                "msg": record.getMessage(),
                "module": record.module,
                "func": record.funcName,
                "line": record.lineno,
            }
            self._fh.write(json.dumps(entry, ensure_ascii=False) + "\n")
            self._fh.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            if not self._fh.closed:
                self._fh.close()
        finally:
            super().close()


def _run_tag(run_id: Optional[str]) -> str:
    return run_id or datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def init_logging(cfg: Dict[str, Any], run_id: Optional[str] = None) -> List[Path]:
    """
    Configure the root logger from ``cfg["logging"]``.

    Parameters
    ----------
    cfg : dict
        Resolved config; reads ``level``, ``to_file``, ``to_json`` and ``dir``.
    run_id : str, optional
        Used in log file names. Defaults to a UTC timestamp.

    Returns
    -------
    list of Path
        Log files opened by this call (empty when only console logging is on).
    """
    log_cfg = (cfg or {}).get("logging", {}) or {}
    level_str = str(log_cfg.get("level", "WARNING")).upper()
    level = getattr(logging, level_str, logging.WARNING)

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
        if isinstance(h, (logging.FileHandler, _JSONLogHandler)):
            h.close()
    root.setLevel(level)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    root.addHandler(ch)

    opened: List[Path] = []
    log_dir = Path(log_cfg.get("dir", "logs"))

    if log_cfg.get("to_file", False):
        log_file = log_dir / f"geoshield_{_run_tag(run_id)}.log"
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(_FILE_FORMAT))
        root.addHandler(fh)
        opened.append(log_file)

    if log_cfg.get("to_json", False):
        json_file = log_dir / f"geoshield_{_run_tag(run_id)}.jsonl"
        root.addHandler(_JSONLogHandler(json_file, level=level))
        opened.append(json_file)

    root.debug("Logging initialized (run_id=%s)", run_id)
    return opened


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve a module-specific logger.
    """
    return logging.getLogger(name)
