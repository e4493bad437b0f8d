"""
Exceptions raised while resolving, downloading and verifying test files.
"""

from __future__ import annotations


class DicomTestFilesError(Exception):
    """Base exception for all dicom-test-files errors."""


class NotFoundError(DicomTestFilesError, KeyError):
    """Raised when a name is not in the registry.

    If you are sure the file exists upstream, the registry in use may be
    older than the data set.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown test file {self.name!r}"


class DownloadError(DicomTestFilesError):
    """Raised when a file cannot be downloaded. Carries the attempted URL."""

    def __init__(self, url: str, detail: str):
        self.url = url
        self.detail = detail
        super().__init__(f"Failed to download {url}: {detail}")


class InvalidHashError(DicomTestFilesError):
    """Raised when the downloaded bytes do not match the registered hash."""

    def __init__(self, name: str, expected: str, actual: str):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Hash mismatch for {name!r}: expected {expected}, got {actual}"
        )


class ZstdRequiredError(DicomTestFilesError):
    """Raised when a Zstandard-compressed file is requested without zstandard."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"{name!r} is stored with Zstandard compression. "
            "Install it with:  pip install dicom-test-files[zstd]"
        )


class ResolveUrlError(DicomTestFilesError):
    """Raised when an environment variable needed for the source URL is unset."""

    def __init__(self, variable: str):
        self.variable = variable
        super().__init__(f"Environment variable {variable} is not set")


class RegistryError(DicomTestFilesError):
    """Raised when a registry manifest cannot be read or is invalid."""


class CacheRootError(DicomTestFilesError):
    """Raised when no ``target`` directory can be found for the cache."""
