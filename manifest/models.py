from __future__ import annotations
import json
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft202012Validator
from pydantic import BaseModel, ConfigDict, Field

# Shipped inside the package; independent of Settings.root
SCHEMA_PATH = Path(__file__).with_name("device_manifest.schema.json")


class ManifestEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slug: str
    vendor: str
    product: str
    version: str
    path: str
    sha256: str
    size: int
    receives: list[str] = Field(default_factory=list)
    transmits: list[str] = Field(default_factory=list)
    cc_count: int = Field(0, alias="ccCount")
    nrpn_count: int = Field(0, alias="nrpnCount")
    x_pc: Optional[dict[str, Any]] = None

    def to_json(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True)
        if data["x_pc"] is None:
            del data["x_pc"]
        return data


class Manifest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schema_version: int = Field(1, alias="schema")
    generated_at: str = Field(alias="generatedAt")
    devices: list[ManifestEntry] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.devices)

    def to_json(self) -> dict[str, Any]:
        return {
            "schema": self.schema_version,
            "generatedAt": self.generated_at,
            "count": self.count,
            "devices": [d.to_json() for d in self.devices],
        }


def manifest_validator(schema_path: Path = SCHEMA_PATH) -> Draft202012Validator:
    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    return Draft202012Validator(schema)


def schema_errors(data: Any, validator: Optional[Draft202012Validator] = None) -> list[str]:
    """Human-readable JSON Schema violations, ``$``-rooted paths first."""
    validator = validator or manifest_validator()
    errs = sorted(validator.iter_errors(data), key=lambda e: list(map(str, e.path)))
    out = []
    for e in errs:
        path = "$" + "".join([f"[{x!r}]" if isinstance(x, int) else f".{x}" for x in e.path])
        out.append(f"{path}: {e.message}")
    return out
