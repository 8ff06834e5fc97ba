#!/usr/bin/env python3
"""Validate device JSON files under devices/** for schema compliance.

Usage:
  python scripts/validate_devices.py [--root PATH] [--fix]

With --fix, failing files are rewritten in canonical form:
  - controls / controlChangeMessages renamed to controlChangeCommands
  - missing receives / transmits added as []
  - CONTROL_CHANGE and SYSEX removed from receives/transmits
  - NOTE_ON/NOTE_OFF replaced with NOTE_NUMBER, AFTERTOUCH with CHANNEL_PRESSURE
  - top-level keys reordered
"""
from __future__ import annotations
import argparse, logging, sys
from pathlib import Path
from typing import Optional

from core.config import REPO_ROOT, Settings
from core.errors import EnvironmentFailure
from profiles.runner import run_validation


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("--root", type=Path, default=REPO_ROOT, help="repo root (default: parent of scripts/)")
    ap.add_argument("--fix", action="store_true", help="attempt to fix common issues in place")
    return ap.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = parse_args(argv)
    settings = Settings(root=args.root, fix=args.fix)
    try:
        summary = run_validation(settings)
    except EnvironmentFailure as e:
        print(f"ERR: {e}", file=sys.stderr)
        return 1
    return 0 if summary.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
