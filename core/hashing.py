from __future__ import annotations
import hashlib
from pathlib import Path

DEFAULT_CHUNK = 1024 * 1024


def sha256_file(path: Path, chunk_size: int = DEFAULT_CHUNK) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            h.update(chunk)
    return h.hexdigest()


def file_digest(path: Path, chunk_size: int = DEFAULT_CHUNK) -> tuple[int, str]:
    """Return ``(size_in_bytes, sha256_hex)`` for ``path``."""
    return path.stat().st_size, sha256_file(path, chunk_size)
