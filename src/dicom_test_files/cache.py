"""Cache root discovery and cache paths for test files."""

from __future__ import annotations

import logging
import sys
from pathlib import Path, PurePosixPath

from dicom_test_files.config import Settings
from dicom_test_files.errors import CacheRootError

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Cache root
# ---------------------------------------------------------------------------

TARGET_DIR_NAME = "target"
CACHE_SUBDIR = "dicom_test_files"
_USER_CACHE_DIR = Path.home() / ".cache" / "dicom-test-files"


def find_target_dir(start: Path) -> Path:
    """Walk *start* and its ancestors until a directory named ``target``.

    Raises ``CacheRootError`` if no such directory exists.
    """
    start = Path(start).resolve()
    for candidate in (start, *start.parents):
        if candidate.name == TARGET_DIR_NAME:
            return candidate
    msg = f"Cannot find a {TARGET_DIR_NAME!r} directory above {start}"
    raise CacheRootError(msg)


def default_cache_dir(settings: Settings | None = None) -> Path:
    """Return the cache directory for this process.

    Resolution order:

    1. ``DICOM_TEST_FILES_CACHE`` (via *settings*).
    2. ``<target>/dicom_test_files``, where ``target`` is found above the
       running program, then above the working directory.
    3. ``~/.cache/dicom-test-files``.
    """
    if settings is not None and settings.cache_dir is not None:
        return settings.cache_dir

    starts = []
    if sys.argv and sys.argv[0]:
        starts.append(Path(sys.argv[0]).parent)
    starts.append(Path.cwd())

    for start in starts:
        try:
            return find_target_dir(start) / CACHE_SUBDIR
        except CacheRootError:
            continue

    log.debug(f"No {TARGET_DIR_NAME!r} directory found, using {_USER_CACHE_DIR}")
    return _USER_CACHE_DIR


# ---------------------------------------------------------------------------
# Cache layout
# ---------------------------------------------------------------------------


def check_name(name: str) -> PurePosixPath:
    """Validate a test file name and return it as a relative path.

    Empty and absolute names, ``..`` segments and backslashes are rejected
    with ``ValueError`` so every name stays under the cache root.
    """
    rel = PurePosixPath(name)
    if not name or rel.is_absolute() or ".." in rel.parts or "\\" in name:
        msg = f"Invalid test file name {name!r}"
        raise ValueError(msg)
    return rel


class CacheLayout:
    """Maps logical names to files under a cache root."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def resolve(self, name: str) -> Path:
        """Return the cache path for *name* (may not exist yet).

        Slashes in *name* become subdirectories.
        """
        return self.root.joinpath(*check_name(name).parts)

    def exists(self, name: str) -> bool:
        return self.resolve(name).is_file()
