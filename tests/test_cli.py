"""Tests for the dicom-test-files command-line interface."""

from __future__ import annotations

import json

import pytest

from dicom_test_files.cli import main
from dicom_test_files.generate import write_manifest
from dicom_test_files.registry import Registry, TestFile

from conftest import sha256


@pytest.fixture()
def manifest(tmp_path):
    path = tmp_path / "registry.json"
    write_manifest(
        Registry(
            [
                TestFile.none("pydicom/liver.dcm", sha256(b"liver")),
                TestFile.zstd("WG04/REF/NM1_UNC", sha256(b"nm1")),
            ]
        ),
        path,
    )
    return path


@pytest.fixture()
def cli(clean_env, manifest, tmp_path):
    """Run the CLI against a temporary registry and cache."""
    cache = tmp_path / "cache"

    def run(*args: str) -> int:
        return main(["--registry", str(manifest), "--cache-dir", str(cache), *args])

    run.cache = cache  # type: ignore[attr-defined]
    return run


class TestHash:
    def test_writes_manifest_to_stdout(self, tmp_path, capsys):
        data = tmp_path / "data"
        data.mkdir()
        (data / "x.dcm").write_bytes(b"x")

        assert main(["hash", str(data)]) == 0

        out = json.loads(capsys.readouterr().out)
        assert out == {"files": [{"name": "x.dcm", "compression": "none", "hash": sha256(b"x")}]}

    def test_writes_manifest_to_file(self, tmp_path):
        data = tmp_path / "data"
        data.mkdir()
        (data / "y.dcm.zst").write_bytes(b"y")
        out = tmp_path / "out.json"

        assert main(["hash", str(data), "-o", str(out)]) == 0
        assert Registry.from_file(out).get("y.dcm").hash == sha256(b"y")

    def test_missing_directory(self, tmp_path, capsys):
        assert main(["hash", str(tmp_path / "missing")]) == 1
        assert "error:" in capsys.readouterr().err


class TestList:
    def test_lists_all(self, cli, capsys):
        assert cli("list") == 0
        out = capsys.readouterr().out
        assert "pydicom/liver.dcm" in out
        assert "WG04/REF/NM1_UNC (zstd)" in out

    def test_cached_only(self, cli, capsys):
        assert cli("list", "--cached") == 0
        assert "No files cached" in capsys.readouterr().out

        dest = cli.cache / "pydicom" / "liver.dcm"
        dest.parent.mkdir(parents=True)
        dest.write_bytes(b"liver")

        assert cli("list", "--cached") == 0
        out = capsys.readouterr().out
        assert "* pydicom/liver.dcm" in out
        assert "NM1_UNC" not in out


class TestFetch:
    def test_prints_cached_path(self, cli, capsys):
        dest = cli.cache / "pydicom" / "liver.dcm"
        dest.parent.mkdir(parents=True)
        dest.write_bytes(b"liver")

        assert cli("fetch", "pydicom/liver.dcm") == 0
        assert capsys.readouterr().out.strip() == str(dest)

    def test_unknown_name(self, cli, capsys):
        assert cli("fetch", "nope.dcm") == 1
        assert "Unknown test file 'nope.dcm'" in capsys.readouterr().err


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage:" in capsys.readouterr().out


def test_escaping_name_in_manifest(clean_env, tmp_path, capsys):
    manifest = tmp_path / "registry.json"
    manifest.write_text(
        json.dumps({"files": [{"name": "../escape.dcm", "hash": sha256(b"x")}]})
    )

    code = main(
        [
            "--registry",
            str(manifest),
            "--cache-dir",
            str(tmp_path / "cache"),
            "fetch",
            "../escape.dcm",
        ]
    )

    assert code == 1
    assert "Invalid registry manifest" in capsys.readouterr().err
    assert not (tmp_path / "escape.dcm").exists()
