"""
Repository Mirror — One local working copy of the FEP repository.

This module owns the clone/refresh/teardown lifecycle and serves
path-relative reads against the working copy.
"""

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
from .repository import RepositoryMirror
from .state import MirrorPhase, SyncStatus

__all__ = [
    "RepositoryMirror",
    "RepositorySettings",
    "MirrorPhase",
    "SyncStatus",
    "MirrorError",
    "NotInitializedError",
    "FileNotFoundInRepositoryError",
    "DirectoryNotFoundError",
    "CloneFailedError",
    "FetchFailedError",
    "PathOutsideRepositoryError",
    "GitCommandError",
]
