"""Auto-fix transformations for device profiles.

Everything here except ``write_profile`` is a pure function over the parsed
document, so the canonical form can be tested without touching the disk.
"""
from __future__ import annotations
import json
from pathlib import Path
from typing import Any

from profiles.vocabulary import (
    CC_KEY,
    CC_KEY_ALIASES,
    KEY_ORDER,
    MESSAGE_FIELDS,
    MESSAGE_TYPE_REPLACEMENTS,
    REMOVE_MESSAGE_TYPES,
)


def reorder_keys(doc: dict[str, Any]) -> dict[str, Any]:
    """Known keys in canonical order, then the rest in their original order."""
    ordered = {k: doc[k] for k in KEY_ORDER if k in doc}
    for k, v in doc.items():
        if k not in ordered:
            ordered[k] = v
    return ordered


def _dedupe(values: list) -> list:
    # keyed on type too, so true and 1 (or 1.0 and 1) stay distinct
    seen: list = []
    out: list = []
    for v in values:
        key = (type(v), v)
        if key not in seen:
            seen.append(key)
            out.append(v)
    return out


def fix_message_tokens(field: str, values: list) -> tuple[list, list[str]]:
    """Drop removable tokens, map deprecated ones, collapse duplicates."""
    changes: list[str] = []
    fixed: list = []
    for v in values:
        if isinstance(v, str) and v in REMOVE_MESSAGE_TYPES:
            changes.append(f"{field}: removed '{v}'")
        elif isinstance(v, str) and v in MESSAGE_TYPE_REPLACEMENTS:
            new = MESSAGE_TYPE_REPLACEMENTS[v]
            changes.append(f"{field}: '{v}' -> '{new}'")
            fixed.append(new)
        else:
            fixed.append(v)
    deduped = _dedupe(fixed)
    if len(deduped) != len(fixed):
        changes.append(f"{field}: removed duplicate entries")
    return deduped, changes


def fix_document(doc: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
    """Return ``(fixed_doc, changes)``; ``doc`` is left untouched.

    The result is always in canonical key order, so ``fix_document`` applied
    to its own output reports no changes and yields the same document.
    """
    out = dict(doc)
    changes: list[str] = []

    for alias in CC_KEY_ALIASES:
        if alias in out and CC_KEY not in out:
            out = {(CC_KEY if k == alias else k): v for k, v in out.items()}
            changes.append(f"renamed '{alias}' to '{CC_KEY}'")

    for field in MESSAGE_FIELDS:
        if field not in out:
            out[field] = []
            changes.append(f"added empty '{field}'")

    for field in MESSAGE_FIELDS:
        values = out[field]
        if not isinstance(values, list):
            continue
        out[field], field_changes = fix_message_tokens(field, values)
        changes.extend(field_changes)

    return reorder_keys(out), changes


def dump_profile(doc: dict[str, Any]) -> str:
    # 2-space indent, LF only, trailing newline
    return json.dumps(doc, ensure_ascii=False, indent=2) + "\n"


def write_profile(path: Path, doc: dict[str, Any]) -> None:
    # utf-8 (not utf-8-sig) so any byte-order mark is dropped
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(dump_profile(doc))
