from __future__ import annotations

import asyncio
import shutil
import subprocess
from pathlib import Path

from ..errors import ToolMissingError
from ..logger import get_logger

logger = get_logger(__name__)

GIT_TIMEOUT_S = 300


def ensure_git_available() -> str:
    git = shutil.which("git")
    if git is None:
        raise ToolMissingError("git")
    return git


def run_git(args: list[str], cwd: Path, timeout_s: int = GIT_TIMEOUT_S) -> tuple[int, str, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        timeout=timeout_s,
    )
    return proc.returncode, proc.stdout, proc.stderr


async def run_git_async(args: list[str], cwd: Path) -> tuple[int, str, str]:
    """Run git without blocking the event loop.

    If the awaiting task is cancelled (e.g. by a per-task timeout) the child
    process is killed and reaped before the cancellation propagates.
    """
    logger.debug("git %s (in %s)", " ".join(args), cwd)
    proc = await asyncio.create_subprocess_exec(
        "git",
        *args,
        cwd=str(cwd),
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        out, err = await proc.communicate()
    except asyncio.CancelledError:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()
        raise
    assert proc.returncode is not None
    return (
        proc.returncode,
        out.decode("utf-8", errors="replace"),
        err.decode("utf-8", errors="replace"),
    )
