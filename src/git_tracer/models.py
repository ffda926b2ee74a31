"""Data models for git-tracer."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Union

# Git prints this for --abbrev-ref on a detached HEAD; it is also a valid ref to query.
DETACHED_REF = "HEAD"


@dataclass(frozen=True)
class RepositoryRef:
    path: Path
    name: str

    @classmethod
    def from_path(cls, path: Path) -> RepositoryRef:
        resolved = path.resolve()
        return cls(path=resolved, name=resolved.name)


@dataclass(frozen=True)
class ScanTask:
    repo: RepositoryRef
    sequence_index: int
    author: str
    date_start: date
    date_end: date


@dataclass(frozen=True)
class BranchInfo:
    ref_name: str
    is_dirty: bool = False

    @property
    def label(self) -> str:
        if self.is_dirty:
            return f"{self.ref_name} (has changes)"
        return self.ref_name


@dataclass(frozen=True)
class CommitRecord:
    hash: str
    authored_at: datetime
    subject: str
    body: str = ""


class ErrorKind(enum.Enum):
    QUERY_FAILED = "query_failed"
    TIMEOUT = "timeout"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class HasCommits:
    branch: BranchInfo
    commits: tuple[CommitRecord, ...]


@dataclass(frozen=True)
class Empty:
    branch: BranchInfo


@dataclass(frozen=True)
class Failed:
    reason: ErrorKind
    message: str = ""


RepoResult = Union[HasCommits, Empty, Failed]


@dataclass(frozen=True)
class ScanSummary:
    total_commits: int
    repos_with_commits: int
    repos_scanned: int
    repos_failed: int = 0


@dataclass(frozen=True)
class ScanOptions:
    """Everything a single scan run needs, resolved up front by the CLI."""

    username: str
    date_start: date
    date_end: date
    source_path: Path
    output_dir: Path
    include_patterns: tuple[str, ...] = ("*",)
    exclude_patterns: tuple[str, ...] = ()
    max_parallel_jobs: int = 5
    git_log_options: tuple[str, ...] = ()
    show_progress: bool = True
    verbose: bool = False
    task_timeout: float | None = None
    quarter_warning: str | None = None


@dataclass
class ScanOutcome:
    summary: ScanSummary
    output_path: Path
    failed_repos: list[str] = field(default_factory=list)
