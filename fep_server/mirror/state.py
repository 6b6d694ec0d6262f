"""
Mirror State — Lifecycle phase and last-sync status of the working copy.

Status is held in memory only; the working copy itself is a temp
directory that does not outlive the process.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class MirrorPhase(str, Enum):
    """Lifecycle phase of a RepositoryMirror."""

    UNINITIALIZED = "UNINITIALIZED"
    INITIALIZING = "INITIALIZING"
    READY = "READY"


@dataclass
class CloneAttempt:
    """One clone attempt, kept only for the duration of the retry loop."""

    number: int
    max_attempts: int
    delay_ms: int = 0  # backoff slept after this attempt failed
    error: Optional[BaseException] = None

    @property
    def is_last(self) -> bool:
        return self.number >= self.max_attempts


@dataclass
class SyncStatus:
    """Status of the last clone or refresh."""

    last_sync_iso: Optional[str] = None
    status: str = "unknown"  # ok, failed, unknown
    last_error: Optional[str] = None
    detail: Optional[str] = None  # HEAD commit

    def mark_ok(self, detail: Optional[str] = None):
        self.last_sync_iso = datetime.now(timezone.utc).isoformat()
        self.status = "ok"
        self.last_error = None
        self.detail = detail

    def mark_failed(self, error: str):
        self.last_sync_iso = datetime.now(timezone.utc).isoformat()
        self.status = "failed"
        self.last_error = error

    def to_dict(self) -> dict:
        return asdict(self)
