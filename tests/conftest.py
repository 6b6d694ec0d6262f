"""
Shared fixtures for FEP server tests.

Provides:
- a local "origin" git repository laid out like the FEP repository,
  for mirror tests that clone over the filesystem (no network)
- an in-memory FakeMirror for catalog, tool, API and CLI tests
"""

from __future__ import annotations

import json
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from fep_server.mirror import (
    FetchFailedError,
    FileNotFoundInRepositoryError,
    GitCommandError,
    NotInitializedError,
    RepositoryMirror,
    RepositorySettings,
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


INDEX = [
    {
        "slug": "a4ed",
        "title": "The Fediverse Enhancement Proposal Process",
        "authors": "silverpill <silverpill@firemail.cc>",
        "status": "FINAL",
        "dateReceived": "2020-10-16",
        "dateFinalized": "2021-01-01",
        "implementations": 3,
    },
    {
        "slug": "1b12",
        "title": "Group federation",
        "authors": "Alice <alice@example.com>",
        "status": "DRAFT",
        "dateReceived": "2023-01-01",
    },
    {
        "slug": "0837",
        "title": "Federated Marketplace",
        "authors": "Bob <bob@example.com>",
        "status": "WITHDRAWN",
        "dateReceived": "2022-05-01",
        "dateWithdrawn": "2023-05-01",
    },
]

FEP_A4ED = """---
slug: "a4ed"
authors: silverpill <silverpill@firemail.cc>
status: FINAL
dateReceived: 2020-10-16
dateFinalized: 2021-01-01
trackingIssue: https://codeberg.org/fediverse/fep/issues/1
---
# FEP-a4ed: The Fediverse Enhancement Proposal Process

## Summary

The Fediverse Enhancement Proposal process describes how proposals are submitted and finalized.
"""

FEP_1B12 = """---
slug: "1b12"
authors: Alice <alice@example.com>
status: draft
dateReceived: 2023-01-01
discussionsTo: https://socialhub.activitypub.rocks/t/1b12
---
# FEP-1b12: Group federation

## Summary

This proposal describes how a Group actor relays activities to its members.
"""

# 0837 is listed in the index but has no document on disk
FILES: Dict[str, str] = {
    "index.json": json.dumps(INDEX, indent=2),
    "fep/a4ed/fep-a4ed.md": FEP_A4ED,
    "fep/1b12/fep-1b12.md": FEP_1B12,
    "README.md": "# Fediverse Enhancement Proposals\r\n\r\nCRLF line endings.\r\n",
}


# ---------------------------------------------------------------------------
# Git helpers
# ---------------------------------------------------------------------------

def git(repo: Path, *args: str) -> subprocess.CompletedProcess:
    """Run a git command in repo, failing the test on error."""
    return subprocess.run(
        [
            "git",
            "-c", "user.name=Test",
            "-c", "user.email=test@example.com",
            "-c", "commit.gpgsign=false",
            "-c", "core.autocrlf=false",
            *args,
        ],
        cwd=str(repo),
        capture_output=True,
        text=True,
        check=True,
    )


def write_files(root: Path, files: Dict[str, str]) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode("utf-8"))


def commit_files(repo: Path, files: Dict[str, str], message: str = "update") -> None:
    write_files(repo, files)
    git(repo, "add", "-A")
    git(repo, "commit", "-m", message)


@pytest.fixture
def origin_repo(tmp_path: Path) -> Path:
    """A non-bare git repo on branch main holding the FEP fixture files."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    repo = tmp_path / "origin"
    repo.mkdir()
    git(repo, "init")
    git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    commit_files(repo, FILES, "initial")
    return repo


@pytest.fixture
def temp_root(tmp_path: Path, monkeypatch) -> Path:
    """Redirect tempfile.mkdtemp into tmp_path so leftover clones are visible."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def sleeps() -> List[float]:
    """Records backoff sleeps instead of sleeping."""
    return []


@pytest.fixture
def mirror(origin_repo: Path, temp_root: Path, sleeps: List[float]):
    """A RepositoryMirror pointed at the local origin, torn down after the test."""
    settings = RepositorySettings(url=str(origin_repo))
    m = RepositoryMirror(settings, sleep=sleeps.append)
    yield m
    m.teardown()


# ---------------------------------------------------------------------------
# In-memory mirror
# ---------------------------------------------------------------------------

class FakeMirror:
    """Duck-typed stand-in for RepositoryMirror backed by a dict."""

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self.files = dict(FILES if files is None else files)
        self.ready = True
        self.refresh_error: Optional[Exception] = None
        self.refresh_calls = 0
        self.initialize_calls = 0
        self.teardown_calls = 0

    def initialize(self) -> Path:
        self.initialize_calls += 1
        self.ready = True
        return Path("/tmp/fep-server-fake")

    def teardown(self) -> None:
        self.teardown_calls += 1
        self.ready = False

    def refresh(self) -> None:
        if not self.ready:
            raise NotInitializedError()
        self.refresh_calls += 1
        if self.refresh_error is not None:
            raise self.refresh_error

    def read_file(self, relative_path: str) -> str:
        if not self.ready:
            raise NotInitializedError()
        if relative_path not in self.files:
            raise FileNotFoundInRepositoryError(relative_path)
        return self.files[relative_path]

    def file_exists(self, relative_path: str) -> bool:
        return self.ready and relative_path in self.files

    def head_commit(self) -> Optional[str]:
        return "abc123def456" if self.ready else None

    def status(self) -> dict:
        return {
            "phase": "READY" if self.ready else "UNINITIALIZED",
            "path": "/tmp/fep-server-fake" if self.ready else None,
            "remote": "https://codeberg.org/fediverse/fep.git",
            "head": self.head_commit(),
            "sync": {"status": "ok", "last_sync_iso": None, "last_error": None, "detail": None},
        }


@pytest.fixture
def fake_mirror() -> FakeMirror:
    return FakeMirror()


@pytest.fixture
def unreachable_error() -> FetchFailedError:
    return FetchFailedError(
        GitCommandError(["git", "fetch", "--prune", "origin"], 128, "Could not resolve host")
    )
