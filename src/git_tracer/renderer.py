"""Markdown report rendering and rich terminal output."""

from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .logger import console as default_console, success, warning
from .models import CommitRecord, HasCommits, ScanOptions, ScanSummary

PLACEHOLDER_TOTAL = "PLACEHOLDER_TOTAL"
PLACEHOLDER_REPOS = "PLACEHOLDER_REPOS"
PLACEHOLDER_REPOS_WITH_COMMITS = "PLACEHOLDER_REPOS_WITH_COMMITS"
PLACEHOLDER_AUTHOR = "PLACEHOLDER_AUTHOR"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

COMMIT_LINE_RE = re.compile(r"^- \*\*[0-9a-f]{40}\*\* \| ", re.MULTILINE)


def _format_number(n: int) -> str:
    return f"{n:,}"


def _timestamp(moment: datetime | None = None) -> str:
    return (moment or datetime.now()).strftime(TIMESTAMP_FORMAT)


def render_header(date_start: date, date_end: date, generated_at: datetime | None = None) -> str:
    """Metadata block with the author and count placeholders still unfilled."""
    return (
        "# Git Commits Report\n"
        "\n"
        f"**Author**: {PLACEHOLDER_AUTHOR}\n"
        f"**Period**: {date_start.isoformat()} to {date_end.isoformat()}\n"
        f"**Generated**: {_timestamp(generated_at)}\n"
        f"**Total Commits**: {PLACEHOLDER_TOTAL}\n"
        f"**Repositories Scanned**: {PLACEHOLDER_REPOS}\n"
        f"**Repositories with Commits**: {PLACEHOLDER_REPOS_WITH_COMMITS}\n"
        "\n"
        "---\n"
        "\n"
    )


def render_commit_line(commit: CommitRecord) -> str:
    # Author-local wall time, like `git log --date=iso` shows it.
    stamp = commit.authored_at.strftime(TIMESTAMP_FORMAT)
    return f"- **{commit.hash}** | {stamp} | {commit.subject}"


def render_section(name: str, result: HasCommits) -> str:
    lines = [
        f"## {name}",
        f"**Branch scanned**: {result.branch.label}",
        f"**Commits in this repository**: {len(result.commits)}",
        "",
    ]
    lines.extend(render_commit_line(c) for c in result.commits)
    lines.append("")
    return "\n".join(lines) + "\n"


def render_footer(completed_at: datetime | None = None) -> str:
    return f"\n---\n\n**Scan completed at**: {_timestamp(completed_at)}\n"


def fill_placeholders(document: str, values: dict[str, int]) -> str:
    """Replace each header placeholder exactly once; anything else is a bug.

    Only the metadata block (everything before the first separator) is
    searched, so a commit subject can never be mistaken for a placeholder.
    """
    head, sep, body = document.partition("\n---\n")
    # Longest first so PLACEHOLDER_REPOS never eats PLACEHOLDER_REPOS_WITH_COMMITS.
    for token in sorted(values, key=len, reverse=True):
        pattern = re.compile(rf"{re.escape(token)}(?![A-Z_])")
        head, count = pattern.subn(str(values[token]), head)
        if count != 1:
            raise RuntimeError(f"Expected exactly one {token} in report header, found {count}")
    return head + sep + body


def insert_author(document: str, author: str) -> str:
    """Put the author into the header.

    Runs after fill_placeholders so a username that looks like a count
    placeholder is never scanned.
    """
    if PLACEHOLDER_AUTHOR not in document.partition("\n---\n")[0]:
        raise RuntimeError(f"Expected {PLACEHOLDER_AUTHOR} in report header")
    return document.replace(PLACEHOLDER_AUTHOR, author, 1)


def count_commit_lines(document: str) -> int:
    return len(COMMIT_LINE_RE.findall(document))


def output_filename(username: str, date_start: date, date_end: date) -> str:
    safe_user = re.sub(r"[^\w.@+-]", "_", username)
    return f"{date_start.isoformat()}x{date_end.isoformat()}.{safe_user}.md"


def render_execution_summary(
    options: ScanOptions,
    repo_count: int,
    output_file: Path,
    console: Console | None = None,
) -> None:
    console = console or default_console
    console.print(Panel(Text("Git Tracer - Execution Summary", justify="center"), style="bold cyan"))

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("label", style="dim")
    table.add_column("value", style="bold")
    table.add_row("Author", escape(options.username))
    table.add_row("Date Range", f"{options.date_start.isoformat()} to {options.date_end.isoformat()}")
    table.add_row("Source Path", str(options.source_path))
    table.add_row("Include", escape(", ".join(options.include_patterns)))
    if options.exclude_patterns:
        table.add_row("Exclude", escape(", ".join(options.exclude_patterns)))
    table.add_row("Repositories", f"{_format_number(repo_count)} found")
    table.add_row("Max Parallel", str(options.max_parallel_jobs))
    table.add_row("Output File", str(output_file))
    console.print(table)
    console.print()

    if options.quarter_warning:
        warning(options.quarter_warning, out=console)
        console.print()


def render_scan_summary(
    summary: ScanSummary,
    output_file: Path,
    failed_repos: list[str] | None = None,
    verbose: bool = False,
    console: Console | None = None,
) -> None:
    console = console or default_console
    console.print()
    success("Scan complete!", out=console)
    console.print()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("label", style="dim")
    table.add_column("value", style="bold")
    table.add_row("Total Commits", _format_number(summary.total_commits))
    table.add_row(
        "Repositories with Commits",
        f"{_format_number(summary.repos_with_commits)} / {_format_number(summary.repos_scanned)}",
    )
    if summary.repos_failed:
        table.add_row("Failed Repositories", _format_number(summary.repos_failed))
    table.add_row("Output File", str(output_file))
    console.print(table)

    if failed_repos:
        console.print()
        message = f"Could not scan {len(failed_repos)} repo(s): {', '.join(failed_repos)}"
        if not verbose:
            message += " (use --verbose for details)"
        warning(message, out=console)
    console.print()
