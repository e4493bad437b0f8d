"""Fetch test files into the local cache, downloading them if necessary."""

from __future__ import annotations

import functools
import logging
import os
import shutil
import tempfile
import threading
import warnings
from pathlib import Path
from typing import BinaryIO

import httpx

from dicom_test_files.cache import CacheLayout, default_cache_dir
from dicom_test_files.compression import Decompressor, default_decompressor
from dicom_test_files.config import Settings
from dicom_test_files.errors import DownloadError, InvalidHashError
from dicom_test_files.integrity import verify_file
from dicom_test_files.registry import Compression, Registry, TestFile, load_registry
from dicom_test_files.source import base_url as resolve_base_url

log = logging.getLogger(__name__)

_CHUNK_SIZE = 131_072
_TIMEOUT = httpx.Timeout(30, read=300)
_TEMP_FILE_NAME = "tmpfile"
_DECOMPRESSED_FILE_NAME = "tmpfile.out"


class Fetcher:
    """Resolves test files to cached paths, downloading on a cache miss.

    No locks are taken.  Every download goes to its own temporary directory
    next to the destination, is verified, and is then published with a
    single ``os.replace``.  Concurrent callers for the same file may all
    download it; whichever rename lands last wins, and all of them carry
    identical verified bytes.
    """

    def __init__(
        self,
        registry: Registry,
        cache_dir: Path,
        *,
        base_url: str | None = None,
        client: httpx.Client | None = None,
        decompressor: Decompressor | None = None,
        settings: Settings | None = None,
    ):
        self.registry = registry
        self.layout = CacheLayout(cache_dir)
        self._base_url = base_url
        self._client = client
        self._owns_client = client is None
        self._decompressor = decompressor or default_decompressor()
        self._settings = settings
        self._client_lock = threading.Lock()

    @property
    def cache_dir(self) -> Path:
        return self.layout.root

    def base_url(self) -> str:
        """Return the base URL, resolving it from the environment if unset."""
        if self._base_url is None:
            self._base_url = resolve_base_url(self._settings)
        elif not self._base_url.endswith("/"):
            self._base_url += "/"
        return self._base_url

    # -- Public API ---------------------------------------------------------

    def path(self, name: str) -> Path:
        """Return the local path of *name*, downloading it if necessary.

        Raises ``NotFoundError`` for names outside the registry before any
        network access.
        """
        entry = self.registry.get(name)
        dest = self.layout.resolve(name)

        if dest.is_file():
            log.debug(f"Cache hit: {name}")
            return dest

        self._download(entry, dest)
        return dest

    def all(self) -> list[Path]:
        """Return local paths of every registered file, downloading as needed.

        Deprecated: this downloads the entire data set.  Call ``path`` for
        the files you need instead.
        """
        warnings.warn(
            "Fetching every test file is expensive. Use path() for the files you need.",
            DeprecationWarning,
            stacklevel=2,
        )
        return [self.path(entry.name) for entry in self.registry]

    def is_cached(self, name: str) -> bool:
        """Check whether *name* is registered and present in the cache."""
        self.registry.get(name)
        return self.layout.exists(name)

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> Fetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- Internal helpers ---------------------------------------------------

    def _http(self) -> httpx.Client:
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(follow_redirects=True, timeout=_TIMEOUT)
            return self._client

    def _download(self, entry: TestFile, dest: Path) -> None:
        """Download *entry*, verify it, and install it at *dest*."""
        parent = dest.parent
        parent.mkdir(parents=True, exist_ok=True)

        url = self.base_url() + entry.real_file_name
        log.info(f"Downloading {entry.name} from {url}")

        # A private directory beside dest keeps the final rename on one
        # filesystem and keeps concurrent downloads apart.
        tmp_dir = Path(tempfile.mkdtemp(prefix=".tmp", dir=parent))
        try:
            tmp_path = tmp_dir / _TEMP_FILE_NAME
            with open(tmp_path, "wb") as f:
                self._stream_download(url, f)

            try:
                verify_file(tmp_path, entry.hash, name=entry.name)
            except InvalidHashError:
                tmp_path.unlink()
                log.warning(f"Hash mismatch for {entry.name} downloaded from {url}")
                raise

            if entry.compression is Compression.NONE:
                os.replace(tmp_path, dest)
            else:
                out_path = tmp_dir / _DECOMPRESSED_FILE_NAME
                self._decompressor.decompress(tmp_path, out_path, name=entry.name)
                tmp_path.unlink()
                os.replace(out_path, dest)
        finally:
            shutil.rmtree(tmp_dir, ignore_errors=True)

        log.info(f"Installed {entry.name} at {dest}")

    def _stream_download(self, url: str, dest_file: BinaryIO) -> None:
        """Stream-download *url* to an open file object."""
        try:
            with self._http().stream("GET", url) as response:
                response.raise_for_status()
                for chunk in response.iter_bytes(chunk_size=_CHUNK_SIZE):
                    dest_file.write(chunk)
        except httpx.HTTPError as e:
            raise DownloadError(url, str(e)) from e

        dest_file.flush()
        os.fsync(dest_file.fileno())


# ---------------------------------------------------------------------------
# Module-level API
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=1)
def default_fetcher() -> Fetcher:
    """Return the process-wide fetcher configured from the environment."""
    settings = Settings.from_env()
    return Fetcher(
        load_registry(settings.registry),
        default_cache_dir(settings),
        settings=settings,
    )


def reset_default_fetcher() -> None:
    """Drop the process-wide fetcher so the environment is read again."""
    if default_fetcher.cache_info().currsize:
        default_fetcher().close()
    default_fetcher.cache_clear()


def path(name: str) -> Path:
    """Fetch the test file *name* if needed and return its local path.

    The file is cached under ``target/dicom_test_files`` (see
    ``dicom_test_files.cache.default_cache_dir``).
    """
    return default_fetcher().path(name)


def all() -> list[Path]:  # noqa: A001
    """Return local paths of all test files, downloading any that are missing.

    Deprecated: this downloads the entire data set.  Use ``path`` instead.
    """
    warnings.warn(
        "Fetching every test file is expensive. Use path() for the files you need.",
        DeprecationWarning,
        stacklevel=2,
    )
    fetcher = default_fetcher()
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DeprecationWarning)
        return fetcher.all()
