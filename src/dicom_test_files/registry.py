"""Test file registry: known files, their hashes, and manifest loading."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from dicom_test_files.cache import check_name
from dicom_test_files.errors import NotFoundError, RegistryError

# ---------------------------------------------------------------------------
# Registry entry
# ---------------------------------------------------------------------------


class Compression(enum.Enum):
    """How a test file is stored at the remote source."""

    NONE = "none"
    ZSTD = "zstd"

    @property
    def suffix(self) -> str:
        """File name suffix used at the remote source."""
        return ".zst" if self is Compression.ZSTD else ""


@dataclass(frozen=True)
class TestFile:
    """A single test file in the registry."""

    __test__ = False  # Not a pytest test class.

    name: str  # Slash-separated path, e.g. "pydicom/liver.dcm"
    compression: Compression
    hash: str  # SHA-256 of the remote (post-compression) bytes, lowercase hex

    @classmethod
    def none(cls, name: str, hash: str) -> TestFile:
        return cls(name, Compression.NONE, hash)

    @classmethod
    def zstd(cls, name: str, hash: str) -> TestFile:
        return cls(name, Compression.ZSTD, hash)

    @property
    def real_file_name(self) -> str:
        """Name of the file at the remote source."""
        return self.name + self.compression.suffix


# ---------------------------------------------------------------------------
# Manifest schema
# ---------------------------------------------------------------------------


class ManifestEntry(BaseModel):
    """One file as stored in a JSON registry manifest."""

    name: str = Field(min_length=1)
    compression: Literal["none", "zstd"] = "none"
    hash: str = Field(pattern=r"^[0-9a-f]{64}$")

    @field_validator("name")
    @classmethod
    def check_relative_name(cls, name: str) -> str:
        check_name(name)
        return name

    def to_test_file(self) -> TestFile:
        return TestFile(self.name, Compression(self.compression), self.hash)

    @classmethod
    def from_test_file(cls, entry: TestFile) -> ManifestEntry:
        return cls(name=entry.name, compression=entry.compression.value, hash=entry.hash)


class Manifest(BaseModel):
    """A JSON registry manifest: ``{"files": [...]}``."""

    files: list[ManifestEntry] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class Registry:
    """Immutable lookup of test files by name."""

    def __init__(self, entries: Iterable[TestFile] = ()):
        files: dict[str, TestFile] = {}
        for entry in entries:
            if entry.name in files:
                msg = f"Duplicate registry entry {entry.name!r}"
                raise ValueError(msg)
            files[entry.name] = entry
        self._files = dict(sorted(files.items()))

    def get(self, name: str) -> TestFile:
        """Look up a test file by name. Raises ``NotFoundError`` if absent."""
        try:
            return self._files[name]
        except KeyError:
            raise NotFoundError(name) from None

    def names(self) -> list[str]:
        return list(self._files)

    def __contains__(self, name: object) -> bool:
        return name in self._files

    def __iter__(self) -> Iterator[TestFile]:
        return iter(self._files.values())

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"Registry({len(self)} files)"

    # -- Loading ------------------------------------------------------------

    @classmethod
    def from_json(cls, text: str | bytes) -> Registry:
        """Build a registry from the text of a JSON manifest."""
        try:
            manifest = Manifest.model_validate_json(text)
        except ValidationError as e:
            msg = f"Invalid registry manifest: {e}"
            raise RegistryError(msg) from e
        try:
            return cls(entry.to_test_file() for entry in manifest.files)
        except ValueError as e:
            raise RegistryError(str(e)) from e

    @classmethod
    def from_file(cls, path: Path) -> Registry:
        """Build a registry from a JSON manifest on disk."""
        try:
            text = Path(path).read_bytes()
        except OSError as e:
            msg = f"Cannot read registry manifest {path}: {e}"
            raise RegistryError(msg) from e
        return cls.from_json(text)


def packaged_registry() -> Registry:
    """Return the registry manifest shipped with this package."""
    text = resources.files("dicom_test_files").joinpath("registry.json").read_bytes()
    return Registry.from_json(text)


def load_registry(path: Path | None = None) -> Registry:
    """Load the registry at *path*, or the packaged one when *path* is None."""
    if path is None:
        return packaged_registry()
    return Registry.from_file(path)
