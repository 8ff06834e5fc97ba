import json
import pathlib
import shutil

import pytest

from core.config import Settings

FIXTURES = pathlib.Path(__file__).parent / "fixtures"


@pytest.fixture
def repo(tmp_path):
    """Empty repo root with a devices/ directory."""
    (tmp_path / "devices").mkdir()
    return tmp_path


@pytest.fixture
def fixture_repo(tmp_path):
    """Repo root populated with the profiles under tests/fixtures/devices."""
    shutil.copytree(FIXTURES / "devices", tmp_path / "devices")
    return tmp_path


@pytest.fixture
def write_device(repo):
    def _write(vendor, product, doc, raw=False):
        path = repo / "devices" / vendor / f"{product}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        if raw:
            path.write_bytes(doc if isinstance(doc, bytes) else doc.encode("utf-8"))
        else:
            path.write_text(json.dumps(doc, indent=2) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def settings_for():
    def _make(root, **kw):
        return Settings(root=root, **kw)
    return _make
