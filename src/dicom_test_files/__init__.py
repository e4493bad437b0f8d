"""On-demand, hash-verified DICOM test files.

Files are downloaded the first time they are requested and cached under
``target/dicom_test_files`` so later test runs can reuse them::

    from dicom_test_files import path

    liver = path("pydicom/liver.dcm")

Names are looked up in a registry manifest of names and SHA-256 hashes.
The packaged ``registry.json`` is empty: generate one with
``dicom-test-files hash <data dir>`` and point ``DICOM_TEST_FILES_REGISTRY``
at it, or pass a ``Registry`` to ``Fetcher`` directly.
"""

__version__ = "0.1.0"

from dicom_test_files.errors import (  # noqa: E402
    CacheRootError,
    DicomTestFilesError,
    DownloadError,
    InvalidHashError,
    NotFoundError,
    RegistryError,
    ResolveUrlError,
    ZstdRequiredError,
)
from dicom_test_files.fetch import Fetcher, all, default_fetcher, path  # noqa: A004,E402
from dicom_test_files.registry import Compression, Registry, TestFile  # noqa: E402

__all__ = [
    "CacheRootError",
    "Compression",
    "DicomTestFilesError",
    "DownloadError",
    "Fetcher",
    "InvalidHashError",
    "NotFoundError",
    "Registry",
    "RegistryError",
    "ResolveUrlError",
    "TestFile",
    "ZstdRequiredError",
    "__version__",
    "all",
    "default_fetcher",
    "path",
]
