"""Shared fixtures and pytest configuration."""

from __future__ import annotations

import hashlib
import threading
from pathlib import Path

import httpx
import pytest

from dicom_test_files.fetch import Fetcher, reset_default_fetcher
from dicom_test_files.registry import Registry, TestFile

BASE_URL = "https://files.example.test/data/"


# ---------------------------------------------------------------------------
# --slow flag
# ---------------------------------------------------------------------------


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--slow",
        action="store_true",
        default=False,
        help="Run slow tests (downloads from the real data repository).",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if config.getoption("--slow"):
        return
    skip_slow = pytest.mark.skip(reason="Use --slow to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


# ---------------------------------------------------------------------------
# Fake remote
# ---------------------------------------------------------------------------


def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class FakeRemote:
    """An in-memory file server behind an ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []
        self._lock = threading.Lock()

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        url = str(request.url)
        if not url.startswith(BASE_URL):
            return httpx.Response(404)
        data = self.files.get(url[len(BASE_URL) :])
        if data is None:
            return httpx.Response(404, text="Not Found")
        return httpx.Response(200, content=data)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    # -- Test helpers --

    def serve(self, remote_name: str, data: bytes) -> None:
        self.files[remote_name] = data

    @property
    def request_count(self) -> int:
        return len(self.requests)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

LIVER = b"DICM" + bytes(range(256)) * 64
CT_SMALL = b"DICM" + b"\x00\x01" * 4096


@pytest.fixture()
def remote() -> FakeRemote:
    fake = FakeRemote()
    fake.serve("pydicom/liver.dcm", LIVER)
    fake.serve("pydicom/CT_small.dcm", CT_SMALL)
    return fake


@pytest.fixture()
def registry() -> Registry:
    return Registry(
        [
            TestFile.none("pydicom/liver.dcm", sha256(LIVER)),
            TestFile.none("pydicom/CT_small.dcm", sha256(CT_SMALL)),
        ]
    )


@pytest.fixture()
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "target" / "dicom_test_files"


@pytest.fixture()
def fetcher(registry: Registry, cache_dir: Path, remote: FakeRemote):
    """A fetcher wired to the fake remote."""
    with Fetcher(registry, cache_dir, base_url=BASE_URL, client=remote.client()) as f:
        yield f


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Clear dicom-test-files and CI variables and the default fetcher."""
    for var in (
        "DICOM_TEST_FILES_URL",
        "DICOM_TEST_FILES_CACHE",
        "DICOM_TEST_FILES_REGISTRY",
        "CI",
        "GITHUB_REPOSITORY",
        "GITHUB_EVENT_NAME",
        "GITHUB_HEAD_REF",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_default_fetcher()
    yield monkeypatch
    reset_default_fetcher()
