"""Error taxonomy shared by the validator, manifest builder and verifier.

Per-file problems are collected as ``Issue`` records and never raised.
Only conditions that make the whole run pointless (a missing root, devices
directory or manifest) raise ``EnvironmentFailure``.
"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

INVALID_JSON = "InvalidJSON"
SCHEMA_VIOLATION = "SchemaViolation"
ADVISORY_WARNING = "AdvisoryWarning"
INVALID_MANIFEST = "InvalidManifest"
MISSING_FILE = "MissingFile"
SIZE_MISMATCH = "SizeMismatch"
HASH_MISMATCH = "HashMismatch"

IssueKind = Literal[
    "InvalidJSON",
    "SchemaViolation",
    "AdvisoryWarning",
    "InvalidManifest",
    "MissingFile",
    "SizeMismatch",
    "HashMismatch",
]


class Issue(BaseModel):
    kind: IssueKind
    message: str

    def __str__(self) -> str:
        return self.message


class EnvironmentFailure(Exception):
    """A required directory or file is missing; the run cannot proceed."""


class ValidationFailed(Exception):
    """Pre-build validation reported errors."""

    def __init__(self, errors: int) -> None:
        super().__init__(
            f"Device validation failed with {errors} error(s). "
            "Fix errors or use --skip-validate to bypass."
        )
        self.errors = errors
