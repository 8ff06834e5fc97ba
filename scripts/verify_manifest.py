#!/usr/bin/env python3
"""Verify hashes/sizes recorded in manifest.json against devices/**.

Usage:
  python scripts/verify_manifest.py [--root PATH] [--manifest PATH]
"""
from __future__ import annotations
import argparse, sys
from pathlib import Path
from typing import Optional

from core.config import REPO_ROOT, Settings
from core.errors import EnvironmentFailure
from manifest.verifier import verify_manifest


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("--root", type=Path, default=REPO_ROOT, help="repo root (default: parent of scripts/)")
    ap.add_argument("--manifest", type=Path, default=None, help="manifest path (default: <root>/manifest.json)")
    return ap.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    settings = Settings(root=args.root, manifest_path=args.manifest)
    try:
        report = verify_manifest(settings)
    except EnvironmentFailure as e:
        print(f"ERR: {e}", file=sys.stderr)
        return 1

    for issue in report.issues:
        print(f"ERR: {issue}", file=sys.stderr)
    if report.ok:
        print(f"OK: {report.checked} device file(s) verified")
        return 0
    print(f"FAILED: {len(report.issues)} error(s)", file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
