"""Validate a single device profile against the repository conventions.

Checks (errors fail the file, warnings never do):

* required fields: ``receives`` and ``transmits``
* ``controlChangeCommands`` spelled correctly (not ``controls`` or
  ``controlChangeMessages``)
* CC entry structure and value ranges
* ``x_pc`` program-change extension shape
* ``receives``/``transmits`` tokens match the MIDI RTC JSON vocabulary

``DeviceValidator.fix`` applies :func:`profiles.fixes.fix_document` and
rewrites the file; callers re-validate with a fresh validator afterwards.
"""
from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Optional

from core.errors import ADVISORY_WARNING, INVALID_JSON, SCHEMA_VIOLATION, Issue
from profiles.fixes import fix_document, write_profile
from profiles.vocabulary import (
    BANK_SELECT_VALUES,
    CC_KEY,
    CC_KEY_ALIASES,
    CC_MAX,
    CC_MIN,
    INDEX_BASES,
    MESSAGE_FIELDS,
    MESSAGE_TYPE_REPLACEMENTS,
    REMOVE_MESSAGE_TYPES,
    REQUIRED_FIELDS,
    VALID_MESSAGE_TYPES,
)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def loads_strict(text: str) -> Any:
    """``json.loads`` without the NaN / Infinity / -Infinity extension."""
    return json.loads(text, parse_constant=_reject_constant)


def load_profile(path: Path) -> Any:
    # utf-8-sig tolerates a leading byte-order mark
    return loads_strict(path.read_text(encoding="utf-8-sig"))


class DeviceValidator:
    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path
        self.doc: Any = None
        self.errors: list[Issue] = []
        self.warnings: list[Issue] = []
        self.changes: list[str] = []
        self.fixed = False

    @property
    def ok(self) -> bool:
        return not self.errors

    def _error(self, message: str, kind: str = SCHEMA_VIOLATION) -> None:
        self.errors.append(Issue(kind=kind, message=message))

    def _warn(self, message: str) -> None:
        self.warnings.append(Issue(kind=ADVISORY_WARNING, message=message))

    def validate(self) -> bool:
        """Parse ``self.path`` and run every check."""
        try:
            doc = load_profile(self.path)
        except OSError as e:
            self._error(f"Unreadable file: {e}")
            return False
        except (ValueError, UnicodeDecodeError) as e:
            self._error(f"Invalid JSON: {e}", INVALID_JSON)
            return False
        return self.check(doc)

    def check(self, doc: Any) -> bool:
        """Run every check against an already parsed document."""
        self.doc = doc
        if not isinstance(doc, dict):
            self._error("top-level value must be an object")
            return False

        self._check_required_fields()
        self._check_cc_key_name()
        self._check_cc_entries()
        self._check_x_pc()
        self._check_message_types()
        return self.ok

    def fix(self) -> bool:
        """Rewrite the file in canonical form. Returns True if anything changed."""
        if not isinstance(self.doc, dict):
            return False
        fixed, self.changes = fix_document(self.doc)
        if not self.changes:
            return False
        write_profile(self.path, fixed)
        self.doc = fixed
        self.fixed = True
        return True

    def _check_required_fields(self) -> None:
        for field in REQUIRED_FIELDS:
            if field not in self.doc:
                self._error(f"Missing required field: {field}")

    def _check_cc_key_name(self) -> None:
        for alias in CC_KEY_ALIASES:
            if alias in self.doc:
                self._error(f"Invalid key '{alias}' should be '{CC_KEY}'")

    def _check_cc_entries(self) -> None:
        key = next(
            (k for k in (CC_KEY, *CC_KEY_ALIASES) if self.doc.get(k) is not None),
            None,
        )
        if key is None:
            return
        entries = self.doc[key]
        if not isinstance(entries, list):
            self._error(f"'{key}' must be an array")
            return

        for idx, entry in enumerate(entries):
            if not isinstance(entry, dict):
                self._error(f"CC entry {idx}: not an object")
                continue

            cc_num = entry.get("controlChangeNumber")
            if "controlChangeNumber" not in entry:
                self._error(f"CC entry {idx}: missing controlChangeNumber")
            elif not _is_int(cc_num):
                self._error(f"CC entry {idx}: controlChangeNumber {cc_num!r} is not an integer")
            elif not CC_MIN <= cc_num <= CC_MAX:
                self._error(
                    f"CC entry {idx}: controlChangeNumber {cc_num} out of range ({CC_MIN}-{CC_MAX})"
                )

            label = f"CC entry {idx} (CC#{cc_num if cc_num is not None else '?'})"
            if "name" not in entry:
                self._warn(f"{label}: missing name")
            if "valueRange" in entry:
                self._check_value_range(entry["valueRange"], label)

    def _check_value_range(self, rng: Any, label: str) -> None:
        if not isinstance(rng, dict):
            self._error(f"{label}: valueRange must be an object")
            return

        if "min" in rng and "max" in rng:
            lo, hi = rng["min"], rng["max"]
            if not (_is_number(lo) and _is_number(hi)):
                self._error(f"{label}: min and max must be numbers")
            elif lo > hi:
                self._error(f"{label}: min ({lo}) > max ({hi})")

        if "discreteValues" in rng and not isinstance(rng["discreteValues"], list):
            self._error(f"{label}: discreteValues must be an array")

    def _check_x_pc(self) -> None:
        x_pc = self.doc.get("x_pc")
        if x_pc is None:
            return
        if not isinstance(x_pc, dict):
            self._error("x_pc must be an object")
            return

        if "indexBase" not in x_pc:
            self._warn("x_pc: missing indexBase (should be 0 or 1)")
        elif not _is_int(x_pc["indexBase"]) or x_pc["indexBase"] not in INDEX_BASES:
            self._error(f"x_pc: indexBase must be 0 or 1, got {x_pc['indexBase']!r}")

        if "count" not in x_pc:
            self._warn("x_pc: missing count")
        elif not _is_int(x_pc["count"]) or x_pc["count"] < 0:
            self._error(f"x_pc: count must be a non-negative integer, got {x_pc['count']!r}")

        if "names" in x_pc and not isinstance(x_pc["names"], list):
            self._error("x_pc: names must be an array")

        if "bankSelect" in x_pc:
            bank = x_pc["bankSelect"]
            if isinstance(bank, bool):
                self._warn(
                    f"x_pc: legacy boolean bankSelect ({str(bank).lower()}), "
                    f"use one of {', '.join(BANK_SELECT_VALUES)}"
                )
            elif bank not in BANK_SELECT_VALUES:
                self._error(f"x_pc: invalid bankSelect value '{bank}'")

    def _check_message_types(self) -> None:
        for field in MESSAGE_FIELDS:
            if field not in self.doc:
                continue
            values = self.doc[field]
            if not isinstance(values, list):
                self._error(f"{field} must be an array")
                continue

            for v in values:
                if not isinstance(v, str):
                    self._error(f"{field}: invalid message type {v!r}")
                elif v in REMOVE_MESSAGE_TYPES:
                    self._error(f"{field}: '{v}' should be removed")
                elif v in MESSAGE_TYPE_REPLACEMENTS:
                    self._error(f"{field}: '{v}' should be '{MESSAGE_TYPE_REPLACEMENTS[v]}'")
                elif v not in VALID_MESSAGE_TYPES:
                    self._error(f"{field}: invalid message type '{v}'")


def validate_file(path: Path) -> DeviceValidator:
    v = DeviceValidator(path)
    v.validate()
    return v
