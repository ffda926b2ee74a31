"""CLI entry point for git-tracer."""

from __future__ import annotations

import asyncio
import sys
from datetime import date, datetime
from pathlib import Path

import click

from . import __version__
from .config import DEFAULT_CONFIG_FILE, TracerConfig, load_config
from .errors import NoRepositoriesFoundError, TracerError
from .git import ensure_git_available
from .identity import resolve_username
from .locator import discover
from .logger import error, get_logger, progress, setup_logging
from .models import RepositoryRef, ScanOptions
from .orchestrator import output_path_for, run
from .quarters import parse_q_number, resolve_quarter
from .renderer import render_execution_summary, render_scan_summary

logger = get_logger(__name__)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

EPILOG = """\b
Examples:
    git-tracer                                  # Current quarter, current user
    git-tracer -q 2                             # Q2 of current year
    git-tracer -q -1                            # Previous quarter
    git-tracer -u johndoe                       # Current quarter for specific user
    git-tracer -s 2025-01-01 -e 2025-12-31      # Custom date range
    git-tracer -q -1 -u johndoe -p ~/workspace  # Previous quarter, custom user and path
"""


def _resolve_dates(
    date_start: datetime | None,
    date_end: datetime | None,
    q_number: int | None,
    today: date | None = None,
) -> tuple[date, date, str | None]:
    if date_start is not None and date_end is not None:
        start, end = date_start.date(), date_end.date()
        if start > end:
            raise click.BadParameter(
                f"dateStart {start} is after dateEnd {end}", param_hint="'--dateStart'"
            )
        return start, end, None
    quarter = resolve_quarter(q_number, today=today)
    return quarter.start, quarter.end, quarter.warning


def _progress_printer(completed: int, total: int, repo_name: str) -> None:
    percent = completed * 100 // total if total else 100
    progress(f"[{completed}/{total}] ({percent}%) Scanned: {repo_name}")


def _build_options(
    config: TracerConfig,
    *,
    username: str | None,
    date_start: datetime | None,
    date_end: datetime | None,
    q_number: str | None,
    source_path: Path | None,
    verbose: bool,
) -> tuple[ScanOptions, list[RepositoryRef]]:
    q = parse_q_number(q_number)
    ensure_git_available()
    author = resolve_username(username, config.default_username)
    start, end, warning = _resolve_dates(date_start, date_end, q)

    root = Path(source_path or config.default_source_path).expanduser()
    progress(f"Searching for git repositories in: {root}")
    repos = discover(root, config.include_patterns, config.exclude_patterns)
    if not repos:
        raise NoRepositoriesFoundError(root)
    progress(f"Found {len(repos)} repositories")

    options = ScanOptions(
        username=author,
        date_start=start,
        date_end=end,
        source_path=root.resolve(),
        output_dir=config.output_dir,
        include_patterns=config.include_patterns,
        exclude_patterns=config.exclude_patterns,
        max_parallel_jobs=config.max_parallel_jobs,
        git_log_options=config.git_log_options,
        show_progress=config.show_progress,
        verbose=verbose,
        task_timeout=config.task_timeout,
        quarter_warning=warning,
    )
    return options, repos


@click.command(context_settings=CONTEXT_SETTINGS, epilog=EPILOG)
@click.option("-u", "--username", default=None, help="Git author to match (default: current git user).")
@click.option(
    "-s", "--dateStart", "date_start",
    type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
    help="Start date in YYYY-MM-DD format (inclusive).",
)
@click.option(
    "-e", "--dateEnd", "date_end",
    type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
    help="End date in YYYY-MM-DD format (inclusive).",
)
@click.option(
    "-q", "--qNumber", "q_number", default=None, metavar="<-4 to 4>",
    help="Quarter: 0=current, 1-4=Q1-Q4, -1 to -4=previous quarters.",
)
@click.option(
    "-p", "--sourcePath", "source_path",
    type=click.Path(path_type=Path), default=None,
    help="Root path to search for repos (default: DEFAULT_SOURCE_PATH or current directory).",
)
@click.option(
    "-c", "--config", "config_file",
    type=click.Path(dir_okay=False, path_type=Path), default=DEFAULT_CONFIG_FILE, show_default=True,
    help="KEY=VALUE configuration file.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose mode.")
@click.option("-y", "--yes", is_flag=True, help="Start scanning without asking for confirmation.")
@click.version_option(version=__version__, prog_name="git-tracer")
def main(
    username: str | None,
    date_start: datetime | None,
    date_end: datetime | None,
    q_number: str | None,
    source_path: Path | None,
    config_file: Path,
    verbose: bool,
    yes: bool,
) -> None:
    """Git Tracer - track your git commits across multiple repositories."""
    try:
        config = load_config(config_file)
        verbose = verbose or config.verbose
        setup_logging(level="DEBUG" if verbose else "WARNING")

        options, repos = _build_options(
            config,
            username=username,
            date_start=date_start,
            date_end=date_end,
            q_number=q_number,
            source_path=source_path,
            verbose=verbose,
        )
    except TracerError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)

    output_file = output_path_for(options)
    progress("")
    render_execution_summary(options, len(repos), output_file)
    if not yes:
        click.confirm("Continue with the scan?", default=True, abort=True)

    progress("Starting scan...")
    on_progress = _progress_printer if options.show_progress else None
    outcome = asyncio.run(run(options, repos, on_progress=on_progress))

    render_scan_summary(outcome.summary, outcome.output_path, outcome.failed_repos, verbose=options.verbose)


if __name__ == "__main__":
    main()
