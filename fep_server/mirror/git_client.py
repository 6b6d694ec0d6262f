"""
Git Client — Clone, open, fetch and fast-forward via the git CLI.

Each operation runs one git subprocess. Non-zero exits, timeouts and a
missing git binary all surface as GitCommandError.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional

from .errors import GitCommandError

logger = logging.getLogger(__name__)


def _run_git(
    args: List[str],
    cwd: Optional[Path] = None,
    timeout: int = 60,
) -> subprocess.CompletedProcess:
    """Run git and return the completed process, raising on failure."""
    cmd = ["git"] + args
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=_git_env(),
        )
    except subprocess.TimeoutExpired:
        raise GitCommandError(cmd, None, f"timed out after {timeout}s")
    except FileNotFoundError:
        if cwd is not None and not Path(cwd).is_dir():
            raise GitCommandError(cmd, None, f"working directory not found: {cwd}")
        raise GitCommandError(cmd, None, "git executable not found")

    if result.returncode != 0:
        raise GitCommandError(cmd, result.returncode, result.stderr or result.stdout)
    return result


def _git_env() -> dict:
    """Subprocess env that never blocks on a credential prompt."""
    return {**os.environ, "GIT_TERMINAL_PROMPT": "0", "LC_ALL": "C"}


class GitRepository:
    """An open handle to a local clone."""

    def __init__(self, path: Path, client: "GitClient"):
        self.path = Path(path)
        self._client = client

    def __repr__(self) -> str:
        return f"GitRepository({str(self.path)!r})"

    def fetch(self, remote: str = "origin") -> None:
        """Fetch all refs from a remote, pruning deleted ones."""
        logger.debug(f"[git] fetch {remote} in {self.path}")
        _run_git(
            ["fetch", "--prune", remote],
            cwd=self.path,
            timeout=self._client.timeout,
        )

    def current_branch(self) -> Optional[str]:
        """Checked-out branch name, or None for a detached HEAD."""
        try:
            result = _run_git(
                ["rev-parse", "--abbrev-ref", "HEAD"],
                cwd=self.path,
                timeout=self._client.timeout,
            )
        except GitCommandError:
            return None
        branch = result.stdout.strip()
        if not branch or branch == "HEAD":
            return None
        return branch

    def fast_forward(self, remote: str = "origin") -> bool:
        """
        Fast-forward the checked-out branch to its remote-tracking ref.

        Returns False when HEAD is detached (nothing to advance).
        Raises GitCommandError when the histories diverged.
        """
        branch = self.current_branch()
        if branch is None:
            logger.warning(f"[git] Detached HEAD in {self.path}, skipping fast-forward")
            return False

        _run_git(
            ["merge", "--ff-only", f"{remote}/{branch}"],
            cwd=self.path,
            timeout=self._client.timeout,
        )
        return True

    def head_commit(self) -> Optional[str]:
        """Short hash of HEAD, or None if it cannot be resolved."""
        try:
            result = _run_git(
                ["rev-parse", "--short=12", "HEAD"],
                cwd=self.path,
                timeout=self._client.timeout,
            )
        except GitCommandError:
            return None
        return result.stdout.strip() or None


class GitClient:
    """Factory for GitRepository handles."""

    def __init__(self, timeout: int = 60, clone_timeout: int = 300):
        self.timeout = timeout
        self.clone_timeout = clone_timeout

    def clone(self, url: str, dest: Path, branch: Optional[str] = None) -> GitRepository:
        """Clone url into dest (which may exist but must be empty)."""
        args = ["clone"]
        if branch:
            args += ["--branch", branch]
        args += [url, str(dest)]

        _run_git(args, timeout=self.clone_timeout)
        return GitRepository(dest, self)

    def open(self, path: Path) -> GitRepository:
        """Open an existing clone, verifying it is a git work tree."""
        _run_git(["rev-parse", "--git-dir"], cwd=path, timeout=self.timeout)
        return GitRepository(path, self)
