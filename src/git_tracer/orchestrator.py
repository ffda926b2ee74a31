"""Top-level orchestration: coordinate scanning, aggregation, and writing."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from .aggregator import aggregate
from .coordinator import ProgressCallback, ScanCoordinator
from .git import BranchResolver, HistoryExtractor
from .logger import get_logger
from .models import Failed, RepositoryRef, ScanOptions, ScanOutcome, ScanTask
from .renderer import output_filename
from .writer import write_report

logger = get_logger(__name__)


def build_tasks(options: ScanOptions, repos: Sequence[RepositoryRef]) -> list[ScanTask]:
    return [
        ScanTask(
            repo=repo,
            sequence_index=i,
            author=options.username,
            date_start=options.date_start,
            date_end=options.date_end,
        )
        for i, repo in enumerate(repos)
    ]


def output_path_for(options: ScanOptions) -> Path:
    return options.output_dir / output_filename(options.username, options.date_start, options.date_end)


async def run(
    options: ScanOptions,
    repos: Sequence[RepositoryRef],
    on_progress: ProgressCallback | None = None,
    coordinator: ScanCoordinator | None = None,
) -> ScanOutcome:
    """Scan ``repos`` and write the report; returns the summary and report path."""
    if coordinator is None:
        coordinator = ScanCoordinator(
            resolver=BranchResolver(),
            extractor=HistoryExtractor(extra_options=options.git_log_options),
            task_timeout=options.task_timeout,
        )

    tasks = build_tasks(options, repos)
    generated_at = datetime.now()
    results = await coordinator.run(tasks, options.max_parallel_jobs, on_progress=on_progress)

    logger.debug("Merging %d results", len(results))
    names = {t.sequence_index: t.repo.name for t in tasks}
    document, summary = aggregate(
        results,
        names,
        author=options.username,
        date_start=options.date_start,
        date_end=options.date_end,
        generated_at=generated_at,
    )

    output_path = write_report(document, output_path_for(options))
    failed = [names[i] for i in sorted(results) if isinstance(results[i], Failed)]
    return ScanOutcome(summary=summary, output_path=output_path, failed_repos=failed)
