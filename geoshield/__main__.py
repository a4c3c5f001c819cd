# FILE: geoshield/__main__.py
# =============================================================================
# Allows `python -m geoshield` to invoke the Typer CLI defined in geoshield/cli.py
# =============================================================================
from __future__ import annotations

from .cli import app

if __name__ == "__main__":
    app(prog_name="geoshield")
