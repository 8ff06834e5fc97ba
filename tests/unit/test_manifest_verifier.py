import json

import pytest

from core.errors import EnvironmentFailure, HASH_MISMATCH, INVALID_MANIFEST, MISSING_FILE, SIZE_MISMATCH
from manifest.builder import build_manifest
from manifest.verifier import verify_manifest
from scripts.verify_manifest import main


@pytest.fixture
def built(fixture_repo, settings_for):
    settings = settings_for(fixture_repo)
    build_manifest(settings, echo=lambda line: None)
    return settings


def kinds(report):
    return [i.kind for i in report.issues]


def test_fresh_manifest_verifies(built):
    report = verify_manifest(built)
    assert report.ok
    assert report.checked == 2


def test_same_length_edit_is_one_hash_mismatch(built, fixture_repo):
    path = fixture_repo / "devices" / "acme" / "echo.json"
    data = path.read_bytes()
    path.write_bytes(data.replace(b"Acme Echo", b"Acme Echx", 1))

    report = verify_manifest(built)
    assert kinds(report) == [HASH_MISMATCH]
    assert report.issues[0].message.startswith("sha256 mismatch for devices/acme/echo.json")


def test_length_change_reports_size_and_hash(built, fixture_repo):
    path = fixture_repo / "devices" / "acme" / "fuzz.json"
    path.write_bytes(path.read_bytes() + b"\n")

    report = verify_manifest(built)
    assert kinds(report) == [SIZE_MISMATCH, HASH_MISMATCH]
    assert "manifest=" in report.issues[0].message


def test_missing_file(built, fixture_repo):
    (fixture_repo / "devices" / "acme" / "echo.json").unlink()
    report = verify_manifest(built)
    assert kinds(report) == [MISSING_FILE]
    assert report.issues[0].message == "missing file: devices/acme/echo.json"
    assert report.checked == 2


def test_verifier_never_mutates(built, fixture_repo):
    manifest = fixture_repo / "manifest.json"
    before = manifest.read_bytes()
    (fixture_repo / "devices" / "acme" / "echo.json").write_text("{}", encoding="utf-8")
    verify_manifest(built)
    assert manifest.read_bytes() == before


def test_missing_manifest_is_fatal(fixture_repo, settings_for):
    with pytest.raises(EnvironmentFailure, match="missing manifest"):
        verify_manifest(settings_for(fixture_repo))


def test_malformed_manifest(fixture_repo, settings_for):
    (fixture_repo / "manifest.json").write_text(json.dumps({"schema": 1, "devices": [{"path": 3}]}), encoding="utf-8")
    report = verify_manifest(settings_for(fixture_repo))
    assert not report.ok
    assert set(kinds(report)) == {INVALID_MANIFEST}

    (fixture_repo / "manifest.json").write_text("{", encoding="utf-8")
    report = verify_manifest(settings_for(fixture_repo))
    assert kinds(report) == [INVALID_MANIFEST]


def test_cli(built, fixture_repo, tmp_path, capsys):
    assert main(["--root", str(fixture_repo)]) == 0
    assert "OK: 2 device file(s) verified" in capsys.readouterr().out

    path = fixture_repo / "devices" / "acme" / "echo.json"
    path.write_bytes(path.read_bytes().replace(b"Acme", b"Acmf", 1))
    assert main(["--root", str(fixture_repo)]) == 1
    err = capsys.readouterr().err
    assert "ERR: sha256 mismatch for devices/acme/echo.json" in err
    assert "FAILED: 1 error(s)" in err

    assert main(["--root", str(fixture_repo), "--manifest", str(tmp_path / "nope.json")]) == 1
    assert "ERR: missing manifest" in capsys.readouterr().err


def test_non_utf8_manifest_is_invalid(fixture_repo, settings_for):
    (fixture_repo / "manifest.json").write_bytes(b"\xff\xfe{")
    report = verify_manifest(settings_for(fixture_repo))
    assert kinds(report) == [INVALID_MANIFEST]
    assert report.issues[0].message.startswith("invalid manifest JSON:")


def test_non_finite_literal_in_manifest_is_invalid(built, fixture_repo):
    manifest = fixture_repo / "manifest.json"
    manifest.write_text(manifest.read_text(encoding="utf-8").replace('"schema": 1', '"schema": NaN', 1), encoding="utf-8")
    report = verify_manifest(built)
    assert kinds(report) == [INVALID_MANIFEST]


def test_count_must_match_entries(built, fixture_repo):
    manifest = fixture_repo / "manifest.json"
    data = json.loads(manifest.read_text(encoding="utf-8"))
    data["count"] = 5
    manifest.write_text(json.dumps(data), encoding="utf-8")

    report = verify_manifest(built)
    assert not report.ok
    assert kinds(report) == [INVALID_MANIFEST]
    assert report.issues[0].message == "count mismatch: manifest=5 entries=2"
    assert report.checked == 2
