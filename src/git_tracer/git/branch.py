"""Pick the ref to scan for a repository."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from pathlib import Path

from ..logger import get_logger
from ..models import DETACHED_REF, BranchInfo, RepositoryRef
from .runner import run_git_async

logger = get_logger(__name__)

GitRunner = Callable[[list[str], Path], Awaitable[tuple[int, str, str]]]


class BranchResolver:
    """Resolve which ref to query and whether the working tree is dirty.

    Dirty repositories are scanned on their checked-out branch so in-progress
    work shows up. Clean ones use the remote's default branch
    (``refs/remotes/<remote>/HEAD``) when it still resolves to a commit and
    otherwise fall back to the checked-out branch.
    Lookup failures never raise; the worst case is ``HEAD``.
    """

    def __init__(self, remote: str = "origin", runner: GitRunner = run_git_async) -> None:
        self.remote = remote
        self._run = runner

    async def resolve(self, repo: RepositoryRef) -> BranchInfo:
        if await self.is_dirty(repo):
            return BranchInfo(ref_name=await self.current_branch(repo), is_dirty=True)

        ref = await self.remote_default_branch(repo)
        if not ref:
            ref = await self.current_branch(repo)
        return BranchInfo(ref_name=ref, is_dirty=False)

    async def is_dirty(self, repo: RepositoryRef) -> bool:
        code, out, err = await self._run(["status", "--porcelain"], repo.path)
        if code != 0:
            logger.debug("git status failed in %s: %s", repo.name, err.strip())
            return False
        return bool(out.strip())

    async def current_branch(self, repo: RepositoryRef) -> str:
        code, out, _ = await self._run(["rev-parse", "--abbrev-ref", "HEAD"], repo.path)
        branch = out.strip()
        if code != 0 or not branch:
            return DETACHED_REF
        return branch

    async def remote_default_branch(self, repo: RepositoryRef) -> str:
        code, out, _ = await self._run(
            ["symbolic-ref", "--quiet", f"refs/remotes/{self.remote}/HEAD"], repo.path
        )
        ref = out.strip()
        if code != 0 or not ref:
            return ""
        # symbolic-ref happily prints a target that was pruned on the remote.
        code, _, _ = await self._run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], repo.path)
        if code != 0:
            logger.debug("%s/HEAD points at missing %s in %s", self.remote, ref, repo.name)
            return ""
        return ref.removeprefix("refs/remotes/")
