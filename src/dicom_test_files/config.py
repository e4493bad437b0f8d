"""Environment-derived settings."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------

ENV_URL = "DICOM_TEST_FILES_URL"
ENV_CACHE = "DICOM_TEST_FILES_CACHE"
ENV_REGISTRY = "DICOM_TEST_FILES_REGISTRY"

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Settings:
    """Snapshot of the environment relevant to fetching test files."""

    url: str | None = None  # Base URL override
    cache_dir: Path | None = None  # Cache root override
    registry: Path | None = None  # Registry manifest override
    ci: bool = False
    github_repository: str = ""
    github_event_name: str | None = None
    github_head_ref: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from *environ* (defaults to ``os.environ``).

        Empty values are treated as unset, except for the GitHub variables
        whose presence is checked when resolving a pull request URL.
        """
        env = os.environ if environ is None else environ
        cache = env.get(ENV_CACHE) or None
        registry = env.get(ENV_REGISTRY) or None
        return cls(
            url=env.get(ENV_URL) or None,
            cache_dir=Path(cache).expanduser() if cache else None,
            registry=Path(registry).expanduser() if registry else None,
            ci=env.get("CI", "") == "true",
            github_repository=env.get("GITHUB_REPOSITORY", ""),
            github_event_name=env.get("GITHUB_EVENT_NAME"),
            github_head_ref=env.get("GITHUB_HEAD_REF"),
        )
