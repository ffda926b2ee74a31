"""Bounded-concurrency scan of many repositories.

One asyncio task per repository. The dispatch loop takes a semaphore slot
before creating each task, so tasks start in ``sequence_index`` order and no
more than ``max_concurrency`` are ever running. Completion is observed through
the task futures themselves; results are buffered per index and only returned
once every task has reached a terminal state.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Protocol

from .errors import QueryError
from .git import BranchResolver, HistoryExtractor
from .logger import get_logger
from .models import (
    BranchInfo,
    CommitRecord,
    Empty,
    ErrorKind,
    Failed,
    HasCommits,
    RepoResult,
    RepositoryRef,
    ScanTask,
)

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class Resolver(Protocol):
    async def resolve(self, repo: RepositoryRef) -> BranchInfo: ...


class Extractor(Protocol):
    async def extract(self, repo, branch, author, date_start, date_end) -> list[CommitRecord]: ...


class ScanCoordinator:
    def __init__(
        self,
        resolver: Resolver | None = None,
        extractor: Extractor | None = None,
        task_timeout: float | None = None,
    ) -> None:
        self.resolver = resolver or BranchResolver()
        self.extractor = extractor or HistoryExtractor()
        self.task_timeout = task_timeout

    async def run(
        self,
        tasks: Sequence[ScanTask],
        max_concurrency: int,
        on_progress: ProgressCallback | None = None,
    ) -> dict[int, RepoResult]:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")

        ordered = sorted(tasks, key=lambda t: t.sequence_index)
        total = len(ordered)
        slots = asyncio.Semaphore(max_concurrency)
        progress_lock = asyncio.Lock()
        completed = 0

        async def report(task: ScanTask) -> None:
            nonlocal completed
            async with progress_lock:
                completed += 1
                if on_progress is None:
                    return
                try:
                    on_progress(completed, total, task.repo.name)
                except Exception:
                    logger.debug("Progress callback failed", exc_info=True)

        async def worker(task: ScanTask) -> tuple[int, RepoResult]:
            try:
                result = await self._execute(task)
            finally:
                slots.release()
            await report(task)
            return task.sequence_index, result

        running: list[asyncio.Task[tuple[int, RepoResult]]] = []
        try:
            for task in ordered:
                await slots.acquire()
                running.append(asyncio.create_task(worker(task), name=f"scan:{task.repo.name}"))
            finished = await asyncio.gather(*running)
        except BaseException:
            for t in running:
                t.cancel()
            await asyncio.gather(*running, return_exceptions=True)
            raise

        results = dict(finished)
        if len(results) != total:
            raise RuntimeError(f"Scan produced {len(results)} results for {total} tasks")
        return results

    async def _execute(self, task: ScanTask) -> RepoResult:
        try:
            if self.task_timeout is not None:
                return await asyncio.wait_for(self._scan(task), timeout=self.task_timeout)
            return await self._scan(task)
        except QueryError as exc:
            logger.debug("%s: %s", task.repo.name, exc)
            return Failed(reason=ErrorKind.QUERY_FAILED, message=str(exc))
        except asyncio.TimeoutError:
            logger.debug("%s: timed out after %ss", task.repo.name, self.task_timeout)
            return Failed(
                reason=ErrorKind.TIMEOUT,
                message=f"timed out after {self.task_timeout}s",
            )
        except Exception as exc:
            logger.debug("%s: unexpected failure", task.repo.name, exc_info=True)
            return Failed(reason=ErrorKind.UNEXPECTED, message=f"{type(exc).__name__}: {exc}")

    async def _scan(self, task: ScanTask) -> RepoResult:
        branch = await self.resolver.resolve(task.repo)
        commits = await self.extractor.extract(
            task.repo, branch, task.author, task.date_start, task.date_end
        )
        if not commits:
            return Empty(branch=branch)
        return HasCommits(branch=branch, commits=tuple(commits))
