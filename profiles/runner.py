"""Validate every device profile under ``<root>/devices``."""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, Field

from core.config import Settings
from core.errors import EnvironmentFailure, Issue
from profiles.validator import DeviceValidator

log = logging.getLogger(__name__)

Echo = Callable[[str], None]


class FileReport(BaseModel):
    path: str
    errors: list[Issue] = Field(default_factory=list)
    warnings: list[Issue] = Field(default_factory=list)
    fixed: bool = False
    changes: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class RunSummary(BaseModel):
    fix_mode: bool = False
    files: list[FileReport] = Field(default_factory=list)

    @property
    def errors(self) -> int:
        return sum(len(f.errors) for f in self.files)

    @property
    def warnings(self) -> int:
        return sum(len(f.warnings) for f in self.files)

    @property
    def fixed(self) -> int:
        return sum(1 for f in self.files if f.fixed)

    @property
    def ok(self) -> bool:
        return self.errors == 0


def relpath(path: Path, root: Path) -> str:
    return path.relative_to(root).as_posix()


def discover_devices(settings: Settings) -> list[Path]:
    """All ``*.json`` files below the devices directory, in path order."""
    devices = settings.devices_dir
    if not devices.is_dir():
        raise EnvironmentFailure(f"devices directory not found: {devices}")
    root = settings.root_dir
    return sorted(
        (p for p in devices.rglob("*.json") if p.is_file()),
        key=lambda p: relpath(p, root),
    )


def validate_path(path: Path, root: Path, fix: bool = False) -> FileReport:
    validator = DeviceValidator(path)
    valid = validator.validate()
    fixed = False
    changes: list[str] = []

    if fix and not valid and validator.fix():
        fixed = True
        changes = validator.changes
        log.debug("fixed %s: %s", path, "; ".join(changes))
        validator = DeviceValidator(path)
        validator.validate()

    return FileReport(
        path=relpath(path, root),
        errors=validator.errors,
        warnings=validator.warnings,
        fixed=fixed,
        changes=changes,
    )


def report_lines(report: FileReport) -> list[str]:
    lines = []
    if report.fixed:
        lines.append(f"FIXED: {report.path}")
    if report.errors:
        lines.append(f"ERROR: {report.path}")
        lines.extend(f"  - {e}" for e in report.errors)
    if report.warnings:
        if report.ok:
            lines.append(f"WARN: {report.path}")
        lines.extend(f"  - {w}" for w in report.warnings)
    return lines


def summary_lines(summary: RunSummary) -> list[str]:
    lines = [
        "",
        "=" * 60,
        f"Validated {len(summary.files)} device files",
        f"  Errors:   {summary.errors}",
        f"  Warnings: {summary.warnings}",
    ]
    if summary.fix_mode:
        lines.append(f"  Fixed:    {summary.fixed}")
    lines.append("")
    if summary.ok:
        lines.append("All files passed validation.")
    return lines


def run_validation(settings: Settings, echo: Echo = print) -> RunSummary:
    """Validate (and with ``settings.fix``, repair) every device file.

    Per-file problems are reported through ``echo`` and never stop the run;
    a missing devices directory raises ``EnvironmentFailure``.
    """
    root = settings.root_dir
    summary = RunSummary(fix_mode=settings.fix)
    for path in discover_devices(settings):
        report = validate_path(path, root, fix=settings.fix)
        summary.files.append(report)
        for line in report_lines(report):
            echo(line)

    for line in summary_lines(summary):
        echo(line)
    return summary
