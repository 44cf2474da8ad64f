from __future__ import annotations

from .editor import run

raise SystemExit(run())
