#!/usr/bin/env python3
"""Build a compact manifest for devices/**/*.json.

Usage:
  python scripts/build_manifest.py [--root PATH] [--out PATH] [--skip-validate]

Defaults:
  --root = repo root (parent of scripts/)
  --out  = <root>/manifest.json

Runs device validation first unless --skip-validate is passed.
"""
from __future__ import annotations
import argparse, logging, sys
from pathlib import Path
from typing import Optional

from core.config import REPO_ROOT, Settings
from core.errors import EnvironmentFailure, ValidationFailed
from manifest.builder import build_manifest


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("--root", type=Path, default=REPO_ROOT, help="repo root (default: parent of scripts/)")
    ap.add_argument("--out", type=Path, default=None, help="output manifest path (default: <root>/manifest.json)")
    ap.add_argument("--skip-validate", action="store_true", help="skip device validation")
    return ap.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = parse_args(argv)
    settings = Settings(root=args.root, manifest_path=args.out, skip_validate=args.skip_validate)
    try:
        build_manifest(settings)
    except (EnvironmentFailure, ValidationFailed) as e:
        print(f"ERR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
