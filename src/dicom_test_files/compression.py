"""Decompression of test files stored compressed at the remote source.

Zstandard support comes from the optional ``zstandard`` package.  When it is
missing, fetching a compressed file raises ``ZstdRequiredError`` instead of
installing the compressed bytes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from dicom_test_files.errors import ZstdRequiredError

try:
    import zstandard
except ImportError:
    zstandard = None  # type: ignore[assignment]


@runtime_checkable
class Decompressor(Protocol):
    """Interface for turning a downloaded file into the cached file."""

    def decompress(self, source: Path, dest: Path, *, name: str = "") -> None: ...


class ZstdDecompressor:
    """Streams a Zstandard frame from *source* into *dest*."""

    def decompress(self, source: Path, dest: Path, *, name: str = "") -> None:
        dctx = zstandard.ZstdDecompressor()
        with open(source, "rb") as src, open(dest, "wb") as dst:
            dctx.copy_stream(src, dst)


class MissingZstd:
    """Stand-in used when ``zstandard`` is not installed."""

    def decompress(self, source: Path, dest: Path, *, name: str = "") -> None:
        raise ZstdRequiredError(name or source.name)


def zstd_available() -> bool:
    """Return True if the ``zstandard`` package can be used."""
    return zstandard is not None


def default_decompressor() -> Decompressor:
    """Pick the decompressor for this environment."""
    return ZstdDecompressor() if zstd_available() else MissingZstd()
