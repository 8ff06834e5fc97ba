"""Re-check hashes and sizes recorded in ``manifest.json``.

Read-only: drift is reported, never repaired. Rebuild the manifest with
``scripts/build_manifest.py`` to resolve it.
"""
from __future__ import annotations
from typing import Any

from pydantic import BaseModel, Field

from core.config import Settings
from core.errors import (
    HASH_MISMATCH,
    INVALID_MANIFEST,
    MISSING_FILE,
    SIZE_MISMATCH,
    EnvironmentFailure,
    Issue,
)
from core.hashing import file_digest
from manifest.models import schema_errors
from profiles.validator import loads_strict


class VerifyReport(BaseModel):
    checked: int = 0
    issues: list[Issue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def load_manifest(settings: Settings) -> Any:
    path = settings.manifest_file
    if not path.is_file():
        raise EnvironmentFailure(f"missing manifest: {path}")
    return loads_strict(path.read_text(encoding="utf-8-sig"))


def verify_entries(devices: list[dict[str, Any]], settings: Settings) -> VerifyReport:
    root = settings.root_dir
    report = VerifyReport()
    for d in devices:
        report.checked += 1
        rel = d["path"]
        fp = root / rel
        if not fp.is_file():
            report.issues.append(Issue(kind=MISSING_FILE, message=f"missing file: {rel}"))
            continue

        size, sha = file_digest(fp, settings.hash_chunk_size)
        if size != d["size"]:
            report.issues.append(Issue(
                kind=SIZE_MISMATCH,
                message=f"size mismatch for {rel}: manifest={d['size']} actual={size}",
            ))
        if sha != d["sha256"]:
            report.issues.append(Issue(
                kind=HASH_MISMATCH,
                message=f"sha256 mismatch for {rel}: manifest={d['sha256']} actual={sha}",
            ))
    return report


def verify_manifest(settings: Settings) -> VerifyReport:
    try:
        data = load_manifest(settings)
    except ValueError as e:
        return VerifyReport(issues=[Issue(kind=INVALID_MANIFEST, message=f"invalid manifest JSON: {e}")])

    problems = schema_errors(data)
    if problems:
        return VerifyReport(issues=[Issue(kind=INVALID_MANIFEST, message=p) for p in problems])
    report = verify_entries(data["devices"], settings)
    if data["count"] != len(data["devices"]):
        report.issues.insert(0, Issue(
            kind=INVALID_MANIFEST,
            message=f"count mismatch: manifest={data['count']} entries={len(data['devices'])}",
        ))
    return report
