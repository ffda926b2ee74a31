"""Commit history extraction via ``git log``."""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date, datetime

from ..errors import QueryError
from ..logger import get_logger
from ..models import BranchInfo, CommitRecord, RepositoryRef
from .branch import GitRunner
from .runner import run_git_async

logger = get_logger(__name__)

RECORD_SEP = "\x1e"
FIELD_SEP = "\x1f"
LOG_FORMAT = "%x1e%H%x1f%aI%x1f%s%x1f%b"

_HASH_RE = re.compile(r"^[0-9a-f]{40}$")


def build_log_args(
    ref: str,
    author: str,
    date_start: date,
    date_end: date,
    extra_options: Sequence[str] = (),
) -> list[str]:
    # --fixed-strings makes --author a literal, case-sensitive substring match
    # against "Name <email>"; both ends of the date window are whole days.
    return [
        "log",
        f"--author={author}",
        "--fixed-strings",
        "--no-merges",
        f"--since={date_start.isoformat()}T00:00:00",
        f"--until={date_end.isoformat()}T23:59:59",
        f"--pretty=format:{LOG_FORMAT}",
        *extra_options,
        ref,
        "--",
    ]


def parse_log_output(raw: str) -> list[CommitRecord]:
    """Parse ``LOG_FORMAT`` output into records, preserving git's order.

    Entries without a full 40-hex hash or with an unreadable author date are
    skipped rather than failing the whole repository.
    """
    commits: list[CommitRecord] = []
    for chunk in raw.split(RECORD_SEP):
        if not chunk.strip():
            continue
        fields = chunk.split(FIELD_SEP, 3)
        if len(fields) < 3:
            logger.debug("Skipping malformed log entry: %r", chunk[:80])
            continue
        commit_hash = fields[0].strip()
        if not _HASH_RE.match(commit_hash):
            logger.debug("Skipping log entry without a valid hash: %r", chunk[:80])
            continue
        try:
            authored_at = datetime.fromisoformat(fields[1].strip())
        except ValueError:
            logger.debug("Skipping %s: unreadable author date %r", commit_hash, fields[1])
            continue
        body = fields[3].rstrip() if len(fields) == 4 else ""
        commits.append(
            CommitRecord(
                hash=commit_hash,
                authored_at=authored_at,
                subject=fields[2].strip(),
                body=body,
            )
        )
    return commits


class HistoryExtractor:
    def __init__(self, extra_options: Sequence[str] = (), runner: GitRunner = run_git_async) -> None:
        self.extra_options = tuple(extra_options)
        self._run = runner

    async def extract(
        self,
        repo: RepositoryRef,
        branch: BranchInfo,
        author: str,
        date_start: date,
        date_end: date,
    ) -> list[CommitRecord]:
        args = build_log_args(branch.ref_name, author, date_start, date_end, self.extra_options)
        code, out, err = await self._run(args, repo.path)
        if code != 0:
            raise QueryError(repo.path, code, err)
        commits = parse_log_output(out)
        logger.debug("%s: %d commit(s) on %s", repo.name, len(commits), branch.ref_name)
        return commits
