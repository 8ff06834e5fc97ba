"""Build ``manifest.json``: one summary record per device profile.

Validation runs first (see :func:`profiles.runner.run_validation`) unless
``settings.skip_validate`` is set; a failed validation aborts the build so
non-conformant profiles never get indexed.
"""
from __future__ import annotations
import datetime
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

from core.config import Settings
from core.errors import ValidationFailed
from core.hashing import file_digest
from manifest.models import Manifest, ManifestEntry, schema_errors
from profiles.runner import Echo, discover_devices, relpath, run_validation
from profiles.validator import load_profile

log = logging.getLogger(__name__)

_EMPTY_ARRAY = re.compile(r"\[\s+\]")
_SINGLE_STRING_ARRAY = re.compile(r'\[\s+"([^"]+)"\s+\]')


def iso8601(dt: datetime.datetime) -> str:
    return dt.replace(microsecond=0).astimezone(datetime.timezone.utc).isoformat().replace("+00:00", "Z")


def _as_list(v: Any) -> list:
    if v is None:
        return []
    if isinstance(v, list):
        return v
    if isinstance(v, dict):
        return list(v.items())
    return [v]


def _strings(v: Any) -> list[str]:
    return [s for s in _as_list(v) if isinstance(s, str)]


def profile_version(doc: dict) -> str:
    v = doc.get("implementationVersion")
    if v is None:
        return ""
    if isinstance(v, str):
        return v
    # 1.0 stays "1.0", true becomes "true"
    return json.dumps(v)


def build_entry(path: Path, root: Path, chunk_size: int) -> Optional[ManifestEntry]:
    """Summarize one profile, or None when its path or contents are unusable."""
    rel = relpath(path, root)
    parts = rel.split("/")
    if len(parts) != 3 or parts[0] != "devices" or parts[2] == ".json":
        log.warning("unexpected path shape (skipping): %s", rel)
        return None

    try:
        doc = load_profile(path)
    except OSError as e:
        log.warning("unreadable file (skipping): %s: %s", rel, e)
        return None
    except ValueError as e:
        log.warning("unreadable JSON (skipping): %s: %s", rel, e)
        return None
    if not isinstance(doc, dict):
        log.warning("top-level value is not an object (skipping): %s", rel)
        return None

    vendor = parts[1]
    product = parts[2].removesuffix(".json")
    version = profile_version(doc)
    try:
        size, sha = file_digest(path, chunk_size)
    except OSError as e:
        log.warning("unreadable file (skipping): %s: %s", rel, e)
        return None
    x_pc = doc.get("x_pc")

    return ManifestEntry(
        slug=f"{vendor}.{product}@{version}",
        vendor=vendor,
        product=product,
        version=version,
        path=rel,
        sha256=sha,
        size=size,
        receives=_strings(doc.get("receives")),
        transmits=_strings(doc.get("transmits")),
        cc_count=len(_as_list(doc.get("controlChangeCommands"))),
        nrpn_count=len(_as_list(doc.get("nrpnCommands"))),
        x_pc=x_pc if isinstance(x_pc, dict) else None,
    )


def collect_manifest(settings: Settings, now: Optional[datetime.datetime] = None) -> Manifest:
    root = settings.root_dir
    entries = []
    for path in discover_devices(settings):
        entry = build_entry(path, root, settings.hash_chunk_size)
        if entry is not None:
            entries.append(entry)
    entries.sort(key=lambda e: e.path)

    now = now or datetime.datetime.now(datetime.timezone.utc)
    return Manifest(
        schema_version=settings.manifest_schema,
        generated_at=iso8601(now),
        devices=entries,
    )


def dumps_manifest(data: dict[str, Any]) -> str:
    text = json.dumps(data, ensure_ascii=False, indent=2)
    # Collapse simple arrays onto single lines
    text = _EMPTY_ARRAY.sub("[]", text)
    text = _SINGLE_STRING_ARRAY.sub(r'["\1"]', text)
    return text.replace("\r\n", "\n") + "\n"


def write_atomic(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8", newline="\n") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def build_manifest(settings: Settings, echo: Echo = print) -> Manifest:
    """Validate, collect and write the manifest to ``settings.manifest_file``."""
    if not settings.skip_validate:
        echo("Running device validation...")
        summary = run_validation(settings.model_copy(update={"fix": False}), echo=echo)
        if not summary.ok:
            raise ValidationFailed(summary.errors)
        echo("")

    manifest = collect_manifest(settings)
    data = manifest.to_json()
    problems = schema_errors(data)
    if problems:
        raise ValueError("generated manifest does not match its schema: " + "; ".join(problems))

    out = settings.manifest_file
    write_atomic(out, dumps_manifest(data))
    log.info("wrote %s", out)
    echo(f"Wrote {out} ({manifest.count} devices)")
    return manifest
