"""Allow ``python -m lib_yaml_config get service.port -c conf/*.yaml``."""

from __future__ import annotations

import sys

from .cli import main

if __name__ == "__main__":  # pragma: no cover - exercised via python -m
    raise SystemExit(main(sys.argv[1:]))
