"""Command line launcher for datafold."""
from __future__ import annotations

from datafold.cli import main

if __name__ == "__main__":  # pragma: no cover - entry point for CLI usage
    raise SystemExit(main())
