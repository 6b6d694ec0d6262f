"""
Repository Configuration — Parse FEP_* environment variables.

The defaults mirror the public FEP repository on Codeberg and the
clone retry schedule (3 attempts, 1s then 2s backoff). Every value
can be overridden from the environment or a .env file:

    FEP_REPO_URL=https://codeberg.org/fediverse/fep.git
    FEP_REPO_BRANCH=main
    FEP_CLONE_MAX_RETRIES=3
    FEP_CLONE_BASE_DELAY_MS=1000
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

FEP_REPO_URL = "https://codeberg.org/fediverse/fep.git"

MAX_RETRIES = 3
BASE_DELAY_MS = 1000

GIT_TIMEOUT_SECONDS = 60
CLONE_TIMEOUT_SECONDS = 300

TEMP_PREFIX = "fep-server-"


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    """Read an integer env var, falling back to the default when invalid."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default
    if value < minimum:
        logger.warning(f"{name}={value} is below {minimum}, using {default}")
        return default
    return value


@dataclass
class RepositorySettings:
    """Settings for the mirrored repository and its clone policy."""

    url: str = FEP_REPO_URL
    branch: Optional[str] = None  # None = remote default branch
    max_retries: int = MAX_RETRIES
    base_delay_ms: int = BASE_DELAY_MS
    git_timeout: int = GIT_TIMEOUT_SECONDS
    clone_timeout: int = CLONE_TIMEOUT_SECONDS
    temp_prefix: str = TEMP_PREFIX

    @classmethod
    def from_env(cls) -> "RepositorySettings":
        """Parse repository configuration from environment variables."""
        settings = cls(
            url=os.environ.get("FEP_REPO_URL", "").strip() or FEP_REPO_URL,
            branch=os.environ.get("FEP_REPO_BRANCH", "").strip() or None,
            max_retries=_env_int("FEP_CLONE_MAX_RETRIES", MAX_RETRIES, minimum=1),
            base_delay_ms=_env_int("FEP_CLONE_BASE_DELAY_MS", BASE_DELAY_MS),
            git_timeout=_env_int("FEP_GIT_TIMEOUT", GIT_TIMEOUT_SECONDS, minimum=1),
            clone_timeout=_env_int("FEP_CLONE_TIMEOUT", CLONE_TIMEOUT_SECONDS, minimum=1),
            temp_prefix=os.environ.get("FEP_TEMP_PREFIX", "").strip() or TEMP_PREFIX,
        )
        logger.debug(f"Loaded repository settings: {settings.display_name}")
        return settings

    def backoff_ms(self, attempt: int) -> int:
        """Delay to wait after failed attempt N (1-based) before the next one."""
        return self.base_delay_ms * (2 ** (attempt - 1))

    @property
    def display_name(self) -> str:
        """Human-readable name for the remote."""
        if self.branch:
            return f"{self.url}@{self.branch}"
        return self.url
