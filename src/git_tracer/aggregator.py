"""Merge per-repository results into one ordered report."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime

from .logger import get_logger
from .models import Empty, Failed, HasCommits, RepoResult, ScanSummary
from .renderer import (
    PLACEHOLDER_REPOS,
    PLACEHOLDER_REPOS_WITH_COMMITS,
    PLACEHOLDER_TOTAL,
    fill_placeholders,
    insert_author,
    render_footer,
    render_header,
    render_section,
)

logger = get_logger(__name__)


def aggregate(
    results: Mapping[int, RepoResult],
    repo_names: Mapping[int, str],
    *,
    author: str,
    date_start: date,
    date_end: date,
    generated_at: datetime | None = None,
    completed_at: datetime | None = None,
) -> tuple[str, ScanSummary]:
    """Build the report document and its summary.

    Sections follow ``sequence_index`` order regardless of the order in which
    results arrived. Failed and empty repositories get no section. The counts
    are taken from the sections actually emitted and written into the header
    only after the body is complete.

    ``repos_scanned`` counts every attempted repository, failed ones included.
    """
    expected = range(len(results))
    if sorted(results) != list(expected):
        raise ValueError("results must be keyed by contiguous sequence indices starting at 0")

    parts = [render_header(date_start, date_end, generated_at)]
    total_commits = 0
    repos_with_commits = 0
    repos_failed = 0

    for index in expected:
        result = results[index]
        name = repo_names[index]
        if isinstance(result, Failed):
            repos_failed += 1
            logger.info("Skipped %s (%s): %s", name, result.reason.value, result.message)
            continue
        if isinstance(result, Empty):
            logger.debug("No matching commits in %s", name)
            continue
        if isinstance(result, HasCommits):
            parts.append(render_section(name, result))
            total_commits += len(result.commits)
            repos_with_commits += 1
            continue
        raise TypeError(f"Unknown result type for {name}: {type(result).__name__}")

    summary = ScanSummary(
        total_commits=total_commits,
        repos_with_commits=repos_with_commits,
        repos_scanned=len(results),
        repos_failed=repos_failed,
    )
    document = fill_placeholders(
        "".join(parts),
        {
            PLACEHOLDER_TOTAL: summary.total_commits,
            PLACEHOLDER_REPOS: summary.repos_scanned,
            PLACEHOLDER_REPOS_WITH_COMMITS: summary.repos_with_commits,
        },
    )
    document = insert_author(document, author)
    document += render_footer(completed_at)
    return document, summary
