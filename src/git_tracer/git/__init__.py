"""Thin async wrappers around the git command line."""

from .branch import BranchResolver
from .history import HistoryExtractor, parse_log_output
from .runner import ensure_git_available, run_git, run_git_async

__all__ = [
    "BranchResolver",
    "HistoryExtractor",
    "ensure_git_available",
    "parse_log_output",
    "run_git",
    "run_git_async",
]
