"""Resolve the base URL that test files are downloaded from.

By default all files come from the ``data`` folder of the
`dicom-test-files <https://github.com/robyoung/dicom-test-files>`_
repository. Set ``DICOM_TEST_FILES_URL`` to the base of another copy's raw
contents (usually ending with ``data/``) to override it.

On GitHub Actions, pull requests to a ``dicom-test-files`` repository fetch
from the pull request's head branch, so new files can be tested before they
are merged.
"""

from __future__ import annotations

from dicom_test_files.config import Settings
from dicom_test_files.errors import ResolveUrlError

DEFAULT_BASE_URL = (
    "https://raw.githubusercontent.com/robyoung/dicom-test-files/master/data/"
)
RAW_GITHUBUSERCONTENT_URL = "https://raw.githubusercontent.com"
_PROJECT_SUFFIX = "/dicom-test-files"


def base_url(settings: Settings | None = None) -> str:
    """Return the base URL for *settings*, always ending with ``/``.

    Raises ``ResolveUrlError`` if a pull request build is detected but a
    required GitHub variable is missing.
    """
    if settings is None:
        settings = Settings.from_env()

    if settings.url:
        return settings.url if settings.url.endswith("/") else settings.url + "/"

    if settings.ci and settings.github_repository.endswith(_PROJECT_SUFFIX):
        if settings.github_event_name is None:
            raise ResolveUrlError("GITHUB_EVENT_NAME")
        if settings.github_event_name == "pull_request":
            if settings.github_head_ref is None:
                raise ResolveUrlError("GITHUB_HEAD_REF")
            return (
                f"{RAW_GITHUBUSERCONTENT_URL}/{settings.github_repository}/"
                f"{settings.github_head_ref}/data/"
            )

    return DEFAULT_BASE_URL
