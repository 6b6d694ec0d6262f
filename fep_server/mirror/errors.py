"""
Mirror errors.

Every failure of the mirror is one of these exceptions, so callers can
catch MirrorError and turn it into a user-facing message.
"""

from __future__ import annotations

from typing import Optional, Sequence


class MirrorError(Exception):
    """Base exception for mirror-related errors."""


class NotInitializedError(MirrorError):
    """A read, list or refresh was attempted before a successful initialize."""

    def __init__(self) -> None:
        super().__init__("Repository not initialized. Call initialize() first.")


class FileNotFoundInRepositoryError(MirrorError):
    """The requested file does not exist in the working copy."""

    def __init__(self, relative_path: str) -> None:
        self.relative_path = relative_path
        super().__init__(f"File not found: {relative_path}")


class DirectoryNotFoundError(MirrorError):
    """The requested directory does not exist in the working copy."""

    def __init__(self, relative_path: str) -> None:
        self.relative_path = relative_path
        super().__init__(f"Directory not found: {relative_path}")


class PathOutsideRepositoryError(MirrorError):
    """A relative path resolved outside the working copy."""

    def __init__(self, relative_path: str) -> None:
        self.relative_path = relative_path
        super().__init__(f"Path escapes the repository: {relative_path}")


class GitCommandError(MirrorError):
    """A git subprocess exited non-zero, timed out, or could not start."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: Optional[int],
        stderr: str = "",
    ) -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        command = " ".join(self.args_list[:2]) if self.args_list else "git"
        detail = self.stderr or f"exit code {returncode}"
        super().__init__(f"{command} failed: {detail}")


class CloneFailedError(MirrorError):
    """All clone attempts were exhausted."""

    def __init__(self, attempts: int, cause: Optional[BaseException]) -> None:
        self.attempts = attempts
        self.cause = cause
        super().__init__(
            f"Failed to clone FEP repository after {attempts} attempts: {cause}"
        )


class FetchFailedError(MirrorError):
    """Refreshing from origin failed; the working copy is unchanged."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Failed to refresh repository: {cause}")
