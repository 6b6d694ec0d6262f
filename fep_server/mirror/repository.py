"""
Repository Mirror — Owns one local working copy of the FEP repository.

Lifecycle:
    UNINITIALIZED --initialize--> READY
    READY --refresh--> READY        (fetch + fast-forward, handle reopened)
    READY --initialize--> READY     (old copy deleted, fresh clone)
    READY --teardown--> UNINITIALIZED

A failed initialize always ends UNINITIALIZED: the previous copy is
deleted before the new clone starts.

## Usage

    from fep_server.mirror import RepositoryMirror

    mirror = RepositoryMirror.from_env()
    mirror.initialize()
    text = mirror.read_file("index.json")
    mirror.refresh()
    mirror.teardown()

All public operations are serialized by one re-entrant lock, so a
refresh can never swap the working copy under an in-flight read.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional

from .config import RepositorySettings
from .errors import (
    CloneFailedError,
    DirectoryNotFoundError,
    FetchFailedError,
    FileNotFoundInRepositoryError,
    GitCommandError,
    MirrorError,
    NotInitializedError,
    PathOutsideRepositoryError,
)
from .git_client import GitClient, GitRepository
from .state import CloneAttempt, MirrorPhase, SyncStatus

logger = logging.getLogger(__name__)

REMOTE_NAME = "origin"


def remove_tree(path: Path) -> None:
    """
    Delete a directory tree, best effort.

    A missing directory is not an error. Any other failure is logged
    and swallowed so the caller's primary operation decides the outcome.
    """
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"[mirror] Failed to clean up {path}: {e}")


class RepositoryMirror:
    """
    The Mirror Handle: one working copy path plus one open repo handle.

    The path and the handle are always set and cleared together.
    """

    def __init__(
        self,
        settings: Optional[RepositorySettings] = None,
        git_client: Optional[GitClient] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or RepositorySettings()
        self._git = git_client or GitClient(
            timeout=self.settings.git_timeout,
            clone_timeout=self.settings.clone_timeout,
        )
        self._sleep = sleep
        self._lock = threading.RLock()

        self._path: Optional[Path] = None
        self._repo: Optional[GitRepository] = None
        self._phase = MirrorPhase.UNINITIALIZED
        self.sync_status = SyncStatus()

    @classmethod
    def from_env(cls) -> "RepositoryMirror":
        """Create a mirror from FEP_* environment variables."""
        return cls(RepositorySettings.from_env())

    def __enter__(self) -> "RepositoryMirror":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.teardown()

    # ─── State ──────────────────────────────────────────────

    @property
    def path(self) -> Optional[Path]:
        """Current working copy, or None when uninitialized."""
        return self._path

    @property
    def phase(self) -> MirrorPhase:
        return self._phase

    @property
    def is_ready(self) -> bool:
        return self._path is not None and self._repo is not None

    def head_commit(self) -> Optional[str]:
        """Short HEAD hash of the working copy, or None."""
        with self._lock:
            if self._repo is None:
                return None
            return self._repo.head_commit()

    def status(self) -> dict:
        """Snapshot of the mirror for status reporting."""
        with self._lock:
            return {
                "phase": self._phase.value,
                "path": str(self._path) if self._path else None,
                "remote": self.settings.display_name,
                "head": self._repo.head_commit() if self._repo else None,
                "sync": self.sync_status.to_dict(),
            }

    def _set_handle(self, path: Path, repo: GitRepository) -> None:
        self._path = path
        self._repo = repo
        self._phase = MirrorPhase.READY

    def _clear_handle(self) -> None:
        self._path = None
        self._repo = None
        self._phase = MirrorPhase.UNINITIALIZED

    def _require_ready(self) -> Path:
        if not self.is_ready:
            raise NotInitializedError()
        return self._path

    # ─── Lifecycle ──────────────────────────────────────────

    def initialize(self) -> Path:
        """
        Clone the repository into a fresh temp directory.

        Deletes the previous working copy first. Returns the new path.
        Raises CloneFailedError when every attempt failed.
        """
        with self._lock:
            if self._path is not None:
                logger.info(f"[mirror] Discarding previous working copy {self._path}")
                remove_tree(self._path)
                self._clear_handle()

            self._phase = MirrorPhase.INITIALIZING
            try:
                repo_path = Path(tempfile.mkdtemp(prefix=self.settings.temp_prefix))
            except OSError as e:
                self._clear_handle()
                self.sync_status.mark_failed(str(e))
                logger.error(f"[mirror] Could not create working copy directory: {e}")
                raise

            try:
                repo = self._clone_with_retry(repo_path)
            except CloneFailedError as e:
                self._clear_handle()
                self.sync_status.mark_failed(str(e.cause))
                raise
            except BaseException:
                remove_tree(repo_path)
                self._clear_handle()
                raise

            self._set_handle(repo_path, repo)
            self.sync_status.mark_ok(detail=repo.head_commit())
            logger.info(
                f"[mirror] Repository ready at {repo_path}",
                extra={"repo_path": str(repo_path)},
            )
            return repo_path

    def _clone_with_retry(self, dest: Path) -> GitRepository:
        """Clone into dest, retrying with exponential backoff."""
        max_attempts = self.settings.max_retries
        attempt: Optional[CloneAttempt] = None

        for number in range(1, max_attempts + 1):
            attempt = CloneAttempt(number=number, max_attempts=max_attempts)
            logger.info(
                f"[mirror] Cloning {self.settings.display_name} "
                f"(attempt {number}/{max_attempts})",
                extra={"attempt": number},
            )
            try:
                repo = self._git.clone(self.settings.url, dest, branch=self.settings.branch)
                logger.info("[mirror] Repository cloned successfully")
                return repo
            except (GitCommandError, OSError) as e:
                attempt.error = e
                logger.warning(f"[mirror] Clone attempt {number} failed: {e}")

            if not attempt.is_last:
                attempt.delay_ms = self.settings.backoff_ms(number)
                logger.info(f"[mirror] Retrying in {attempt.delay_ms}ms")
                self._sleep(attempt.delay_ms / 1000)
                self._reset_directory(dest)

        remove_tree(dest)
        last_error = attempt.error if attempt else None
        logger.error(
            f"[mirror] Giving up after {max_attempts} attempts: {last_error}"
        )
        raise CloneFailedError(max_attempts, last_error)

    @staticmethod
    def _reset_directory(path: Path) -> None:
        """Remove whatever a failed clone left behind, keeping an empty dir."""
        remove_tree(path)
        path.mkdir(parents=True, exist_ok=True)

    def refresh(self) -> None:
        """
        Fetch origin, fast-forward the checked-out branch, reopen the handle.

        The working copy path never changes. On failure the previous
        handle and files are left as they were.
        """
        with self._lock:
            path = self._require_ready()
            logger.info("[mirror] Fetching latest FEP documents")
            try:
                self._repo.fetch(REMOTE_NAME)
                self._repo.fast_forward(REMOTE_NAME)
                repo = self._git.open(path)
            except GitCommandError as e:
                self.sync_status.mark_failed(str(e))
                logger.error(f"[mirror] Refresh failed: {e}")
                raise FetchFailedError(e) from e

            self._repo = repo
            head = repo.head_commit()
            self.sync_status.mark_ok(detail=head)
            logger.info(f"[mirror] Repository refreshed (HEAD {head})")

    def teardown(self) -> None:
        """Delete the working copy. Safe to call when uninitialized."""
        with self._lock:
            if self._path is None:
                return
            logger.info(f"[mirror] Removing working copy {self._path}")
            remove_tree(self._path)
            self._clear_handle()

    # ─── File access ────────────────────────────────────────

    def _resolve(self, root: Path, relative_path: str) -> Path:
        """Join relative_path onto root, rejecting anything that escapes it."""
        if os.path.isabs(relative_path):
            raise PathOutsideRepositoryError(relative_path)
        real_root = root.resolve()
        target = (real_root / relative_path).resolve()
        if target != real_root and real_root not in target.parents:
            raise PathOutsideRepositoryError(relative_path)
        return target

    def read_file(self, relative_path: str) -> str:
        """Full text of a file in the working copy."""
        with self._lock:
            target = self._resolve(self._require_ready(), relative_path)
            try:
                with open(target, encoding="utf-8", newline="") as f:
                    return f.read()
            except FileNotFoundError:
                raise FileNotFoundInRepositoryError(relative_path) from None

    def file_exists(self, relative_path: str) -> bool:
        """True if the path exists. Never raises."""
        with self._lock:
            if not self.is_ready:
                return False
            try:
                return self._resolve(self._path, relative_path).exists()
            except (MirrorError, OSError, ValueError):
                return False

    def list_directory(self, relative_path: str = "") -> List[str]:
        """Entry names directly under a directory, in enumeration order."""
        with self._lock:
            target = self._resolve(self._require_ready(), relative_path)
            try:
                with os.scandir(target) as entries:
                    return [entry.name for entry in entries]
            except FileNotFoundError:
                raise DirectoryNotFoundError(relative_path) from None
