"""Build a registry manifest by hashing a directory of test files.

Files ending in ``.zst`` are registered as Zstandard-compressed under their
name without the suffix; the recorded hash is that of the compressed file,
which is what gets downloaded and verified.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from dicom_test_files.integrity import file_digest
from dicom_test_files.registry import (
    Compression,
    Manifest,
    ManifestEntry,
    TestFile,
)

log = logging.getLogger(__name__)


def scan_directory(data_dir: Path) -> list[TestFile]:
    """Hash every file below *data_dir* and return registry entries by name."""
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        msg = f"Not a directory: {data_dir}"
        raise NotADirectoryError(msg)

    entries: list[TestFile] = []
    for file in sorted(data_dir.rglob("*")):
        if not file.is_file():
            continue
        name = file.relative_to(data_dir).as_posix()
        compression = Compression.NONE
        if name.endswith(Compression.ZSTD.suffix):
            name = name[: -len(Compression.ZSTD.suffix)]
            compression = Compression.ZSTD
        entries.append(TestFile(name, compression, file_digest(file)))
        log.debug(f"Hashed {name}")

    entries.sort(key=lambda e: e.name)
    return entries


def manifest_json(entries: Iterable[TestFile]) -> str:
    """Render *entries* as the text of a JSON registry manifest."""
    manifest = Manifest(files=[ManifestEntry.from_test_file(e) for e in entries])
    return manifest.model_dump_json(indent=2) + "\n"


def write_manifest(entries: Iterable[TestFile], out: Path) -> None:
    Path(out).write_text(manifest_json(entries), encoding="utf-8")
