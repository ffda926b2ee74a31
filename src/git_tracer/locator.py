"""Repository discovery under a source directory."""

from __future__ import annotations

import fnmatch
import os
from collections.abc import Iterable
from pathlib import Path

from .errors import InvalidRootError
from .logger import get_logger
from .models import RepositoryRef

logger = get_logger(__name__)

DEFAULT_INCLUDE = ("*",)


def name_selected(name: str, include_patterns: Iterable[str], exclude_patterns: Iterable[str]) -> bool:
    if not any(fnmatch.fnmatchcase(name, pat) for pat in include_patterns):
        return False
    return not any(fnmatch.fnmatchcase(name, pat) for pat in exclude_patterns)


def discover_git_roots(root: Path) -> list[Path]:
    """Walk ``root`` and return every directory holding a ``.git`` marker.

    ``.git`` may be a directory or a file (worktrees, submodules). Directory
    names are sorted at each level so the result is stable across runs.
    """
    roots: list[Path] = []

    def onerror(err: OSError) -> None:
        logger.debug("Skipping unreadable directory: %s", err)

    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
        if ".git" in dirnames or ".git" in filenames:
            roots.append(Path(dirpath))
        dirnames[:] = sorted(d for d in dirnames if d != ".git")
    return roots


def discover(
    root: Path,
    include_patterns: Iterable[str] = DEFAULT_INCLUDE,
    exclude_patterns: Iterable[str] = (),
) -> list[RepositoryRef]:
    root = Path(root).expanduser()
    if not root.is_dir():
        raise InvalidRootError(root)

    include = tuple(include_patterns) or DEFAULT_INCLUDE
    exclude = tuple(exclude_patterns)

    repos: list[RepositoryRef] = []
    for path in discover_git_roots(root.resolve()):
        ref = RepositoryRef.from_path(path)
        if name_selected(ref.name, include, exclude):
            repos.append(ref)
        else:
            logger.debug("Filtered out repository: %s", ref.path)
    return repos
