#!/usr/bin/env python3
"""Pre-commit / pre-merge hook: verify branch name and pom.xml versions agree."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def main() -> int:
    from branchcheck.cli import main as branchcheck_main

    return branchcheck_main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
