"""SHA-256 verification of downloaded files."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import BinaryIO

from dicom_test_files.errors import InvalidHashError

CHUNK_SIZE = 131_072


def sha256_digest(stream: BinaryIO, chunk_size: int = CHUNK_SIZE) -> str:
    """Hash *stream* chunk by chunk and return the lowercase hex digest."""
    hasher = hashlib.sha256()
    while chunk := stream.read(chunk_size):
        hasher.update(chunk)
    return hasher.hexdigest()


def file_digest(path: Path) -> str:
    with open(path, "rb") as f:
        return sha256_digest(f)


def verify(stream: BinaryIO, expected: str, *, name: str = "") -> None:
    """Raise ``InvalidHashError`` unless *stream* hashes to *expected*.

    Truncated, corrupted and stale downloads all fail the same way.
    """
    actual = sha256_digest(stream)
    if actual != expected.lower():
        raise InvalidHashError(name, expected, actual)


def verify_file(path: Path, expected: str, *, name: str = "") -> None:
    with open(path, "rb") as f:
        verify(f, expected, name=name)
