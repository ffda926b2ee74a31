"""Helpers for building throwaway git repositories in tests."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

_GIT_CONFIG = [
    "-c", "user.name=Test Runner",
    "-c", "user.email=runner@example.com",
    "-c", "commit.gpgsign=false",
    "-c", "core.hooksPath=/dev/null",
]


def git(repo: Path, *args: str, env: dict[str, str] | None = None) -> str:
    proc = subprocess.run(
        ["git", *_GIT_CONFIG, *args],
        cwd=str(repo),
        capture_output=True,
        text=True,
        check=True,
        env={**os.environ, **(env or {})},
    )
    return proc.stdout


def init_repo(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    return path


def commit(
    repo: Path,
    subject: str,
    *,
    author: str = "alice",
    email: str = "alice@example.com",
    when: str = "2025-02-10T12:00:00+00:00",
    body: str = "",
    path: str = "changes.txt",
) -> str:
    with (repo / path).open("a", encoding="utf-8") as f:
        f.write(f"{subject}\n")
    git(repo, "add", path)
    env = {
        "GIT_AUTHOR_NAME": author,
        "GIT_AUTHOR_EMAIL": email,
        "GIT_AUTHOR_DATE": when,
        "GIT_COMMITTER_NAME": author,
        "GIT_COMMITTER_EMAIL": email,
        "GIT_COMMITTER_DATE": when,
    }
    args = ["commit", "-q", "-m", subject]
    if body:
        args += ["-m", body]
    git(repo, *args, env=env)
    return git(repo, "rev-parse", "HEAD").strip()


def corrupt_repo(repo: Path) -> None:
    """Drop every object while keeping the layout git needs to recognise the repo."""
    objects = repo / ".git" / "objects"
    shutil.rmtree(objects)
    objects.mkdir()
